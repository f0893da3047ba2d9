"""Editable state for one trigger.

A session is always rebuilt from its sources (inputs, descriptor,
subscription, draft) with `from_sources`; it is never patched when they change.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .bindings import (
    build_bindings_payload,
    build_default_binding_state,
    derive_binding_state_from_subscription,
    quick_insert_binding,
    sync_binding_state,
    update_binding_mode,
    update_binding_value,
)
from .classification import (
    ConfigMode,
    TriggerKind,
    config_mode,
    is_recognized_key,
    key_to_kind,
    quick_options_for_kind,
)
from .dynamic_config import ConfigField, ConfigValidationResult, ConfigValuesEditor
from .models import (
    BindingMode,
    BindingState,
    QuickOption,
    SavePayload,
    TriggerDescriptor,
    TriggerDraft,
    TriggerSubscription,
    WorkflowInputDefinition,
)
from .save import SaveOutcome, plan_save
from .schema_utils import derive_quick_options_from_schema, derive_quick_options_from_user_schema
from .user_schema import create_default_user_schema

logger = logging.getLogger(__name__)


def initial_binding_state(
    inputs: Mapping[str, WorkflowInputDefinition],
    subscription: TriggerSubscription | None,
    draft: TriggerDraft | None,
) -> BindingState:
    if subscription is not None:
        return derive_binding_state_from_subscription(inputs, subscription.bindings)
    if draft is not None and draft.initial_bindings is not None:
        return sync_binding_state(draft.initial_bindings, inputs)
    return build_default_binding_state(inputs)


def initial_user_schema(
    subscription: TriggerSubscription | None, draft: TriggerDraft | None
) -> dict[str, Any]:
    """The draft's user schema, else the subscription's, else an empty object schema."""

    if draft is not None and draft.initial_provider_config:
        schema = draft.initial_provider_config.get("user_schema")
        if isinstance(schema, dict):
            return dict(schema)
    if subscription is not None and subscription.provider_config:
        schema = subscription.provider_config.get("user_schema")
        if isinstance(schema, dict):
            return dict(schema)
    return create_default_user_schema()


class TriggerEditSession:
    def __init__(
        self,
        *,
        trigger_key: str,
        inputs: Mapping[str, WorkflowInputDefinition],
        descriptor: TriggerDescriptor | None,
        subscription: TriggerSubscription | None,
        draft: TriggerDraft | None,
        binding_state: BindingState,
        config: ConfigValuesEditor,
        user_schema: dict[str, Any],
        unknown_as_webhook: bool = False,
        stop_at_first_missing: bool = True,
    ) -> None:
        self.trigger_key = trigger_key
        self.inputs = dict(inputs)
        self.descriptor = descriptor
        self.subscription = subscription
        self.draft = draft
        self.binding_state = binding_state
        self.config = config
        self.user_schema = user_schema
        self.unknown_as_webhook = unknown_as_webhook
        self.stop_at_first_missing = stop_at_first_missing

    @classmethod
    def from_sources(
        cls,
        trigger_key: str,
        inputs: Mapping[str, WorkflowInputDefinition],
        *,
        descriptor: TriggerDescriptor | None = None,
        subscription: TriggerSubscription | None = None,
        draft: TriggerDraft | None = None,
        unknown_as_webhook: bool = False,
        stop_at_first_missing: bool = True,
    ) -> TriggerEditSession:
        if not is_recognized_key(trigger_key):
            logger.warning(
                "Unrecognized trigger key",
                extra={"trigger_key": trigger_key, "unknown_as_webhook": unknown_as_webhook},
            )
        schema = descriptor.config_schema if descriptor is not None else None
        return cls(
            trigger_key=trigger_key,
            inputs=inputs,
            descriptor=descriptor,
            subscription=subscription,
            draft=draft,
            binding_state=initial_binding_state(inputs, subscription, draft),
            config=ConfigValuesEditor(schema, subscription, draft),
            user_schema=initial_user_schema(subscription, draft),
            unknown_as_webhook=unknown_as_webhook,
            stop_at_first_missing=stop_at_first_missing,
        )

    @property
    def kind(self) -> TriggerKind:
        return key_to_kind(self.trigger_key, unknown_as_webhook=self.unknown_as_webhook)

    @property
    def config_mode(self) -> ConfigMode:
        return config_mode(self.trigger_key, self.descriptor, unknown_as_webhook=self.unknown_as_webhook)

    @property
    def config_fields(self) -> list[ConfigField]:
        if self.config_mode != "dynamic":
            return []
        return self.config.fields

    @property
    def quick_options(self) -> list[QuickOption]:
        """Suggested event paths: the user schema's fields, else the event schema's, else the legacy list."""

        if self.config_mode == "user_schema":
            return derive_quick_options_from_user_schema(self.user_schema)
        if self.descriptor is not None:
            options = derive_quick_options_from_schema(self.descriptor.event_schema)
            if options:
                return options
        return quick_options_for_kind(self.kind)

    # Bindings

    def set_binding_mode(self, input_name: str, mode: BindingMode) -> None:
        self.binding_state = update_binding_mode(self.binding_state, input_name, mode)

    def set_binding_value(self, input_name: str, value: str) -> None:
        self.binding_state = update_binding_value(self.binding_state, input_name, value)

    def quick_insert(self, input_name: str, path: str) -> None:
        self.binding_state = quick_insert_binding(self.binding_state, input_name, path)

    def bindings_payload(self) -> dict[str, object]:
        return build_bindings_payload(self.binding_state)

    # Provider config

    def set_config_value(self, key: str, value: object) -> None:
        self.config.set_value(key, value)

    def set_config_values(self, values: Mapping[str, Any]) -> None:
        self.config.set_values(values)

    def reset_config(self) -> None:
        self.config.reset()

    def validate_config(self) -> ConfigValidationResult:
        return self.config.validate(stop_at_first=self.stop_at_first_missing)

    def set_user_schema(self, schema: Mapping[str, Any]) -> None:
        self.user_schema = dict(schema)

    # Save

    def plan_save(self) -> SaveOutcome:
        return plan_save(
            trigger_key=self.trigger_key,
            binding_state=self.binding_state,
            subscription=self.subscription,
            draft=self.draft,
            descriptor=self.descriptor,
            config_values=self.config.values,
            user_schema=self.user_schema,
            stop_at_first_missing=self.stop_at_first_missing,
            unknown_as_webhook=self.unknown_as_webhook,
        )

    def build_save_payload(self) -> SavePayload | None:
        return self.plan_save().payload
