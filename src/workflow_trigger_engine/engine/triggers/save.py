"""Reconciliation of editing state into a save payload, and save execution.

A draft target keeps its bindings in editable (mode/value) form so reopening it
does not have to re-derive them; a subscription target carries wire bindings.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from ..errors import SaveInProgressError
from ..legacy import legacy_form_errors, legacy_form_state
from .bindings import build_bindings_payload
from .classification import config_mode
from .dynamic_config import ConfigValidationResult, serialize_config, validate_required
from .models import (
    BindingState,
    DraftSaveBody,
    DraftSavePayload,
    SavePayload,
    SubscriptionSaveBody,
    SubscriptionSavePayload,
    TriggerDescriptor,
    TriggerDraft,
    TriggerSubscription,
)

if TYPE_CHECKING:
    from .drafts import DraftRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SaveOutcome:
    """Result of planning a save.

    `payload` is None when validation failed or there is no draft or
    subscription to save to; `validation` tells the two apart.
    """

    payload: SavePayload | None
    validation: ConfigValidationResult

    @property
    def ok(self) -> bool:
        return self.payload is not None


def plan_save(
    *,
    trigger_key: str,
    binding_state: BindingState,
    subscription: TriggerSubscription | None,
    draft: TriggerDraft | None,
    descriptor: TriggerDescriptor | None,
    config_values: Mapping[str, Any] | None = None,
    user_schema: Mapping[str, Any] | None = None,
    stop_at_first_missing: bool = True,
    unknown_as_webhook: bool = False,
) -> SaveOutcome:
    provider_config: dict[str, Any] | None = None
    validation = ConfigValidationResult(ok=True)

    mode = config_mode(trigger_key, descriptor, unknown_as_webhook=unknown_as_webhook)
    if mode == "dynamic":
        schema = descriptor.config_schema if descriptor is not None else None
        provider_config = serialize_config(config_values or {}, schema)
        validation = validate_required(provider_config, schema, stop_at_first=stop_at_first_missing)
        if not validation.ok:
            logger.info(
                "Trigger configuration incomplete",
                extra={"trigger_key": trigger_key, "missing": validation.missing},
            )
            return SaveOutcome(payload=None, validation=validation)
        form_errors = legacy_form_errors(legacy_form_state(trigger_key, provider_config))
        if form_errors:
            logger.info(
                "Trigger form invalid",
                extra={"trigger_key": trigger_key, "errors": form_errors},
            )
            validation = ConfigValidationResult(ok=False, message=next(iter(form_errors.values())))
            return SaveOutcome(payload=None, validation=validation)
    else:
        provider_config = {"user_schema": dict(user_schema or {})}

    if subscription is not None:
        return SaveOutcome(
            payload=SubscriptionSavePayload(
                subscription_id=subscription.subscription_id,
                body=SubscriptionSaveBody(
                    bindings=build_bindings_payload(binding_state),
                    provider_config=provider_config,
                ),
            ),
            validation=validation,
        )

    if draft is not None:
        return SaveOutcome(
            payload=DraftSavePayload(
                draft_id=draft.id,
                body=DraftSaveBody(
                    trigger_key=trigger_key,
                    bindings=dict(binding_state),
                    provider_config=provider_config,
                ),
            ),
            validation=validation,
        )

    logger.debug("No save target", extra={"trigger_key": trigger_key})
    return SaveOutcome(payload=None, validation=validation)


def build_save_payload(**kwargs: Any) -> SavePayload | None:
    """Payload-only shorthand for `plan_save`; None means do not call the save handler."""

    return plan_save(**kwargs).payload


class TriggerPersistence(Protocol):
    def save_draft(self, draft_id: str, body: dict[str, object]) -> object:
        ...

    def update_subscription(self, subscription_id: int, body: dict[str, object]) -> object:
        ...

    def toggle_subscription(self, subscription_id: int, enabled: bool) -> object:
        ...

    def delete_subscription(self, subscription_id: int) -> object:
        ...


def entity_key(payload: SavePayload) -> str:
    if isinstance(payload, DraftSavePayload):
        return f"draft:{payload.draft_id}"
    return f"subscription:{payload.subscription_id}"


class TriggerSaveCoordinator:
    """Executes save payloads against persistence, one in-flight save per trigger.

    Persistence errors are logged and re-raised unchanged; nothing is retried.
    """

    def __init__(self, persistence: TriggerPersistence, drafts: DraftRegistry | None = None) -> None:
        self._persistence = persistence
        self._drafts = drafts
        self._lock = threading.Lock()
        self._in_flight: set[str] = set()

    def is_saving(self, key: str) -> bool:
        with self._lock:
            return key in self._in_flight

    def _acquire(self, key: str) -> None:
        with self._lock:
            if key in self._in_flight:
                raise SaveInProgressError(key)
            self._in_flight.add(key)

    def _release(self, key: str) -> None:
        with self._lock:
            self._in_flight.discard(key)

    def save(self, payload: SavePayload) -> object:
        key = entity_key(payload)
        self._acquire(key)
        try:
            if isinstance(payload, DraftSavePayload):
                result = self._save_draft(payload)
            else:
                result = self._update_subscription(payload)
        finally:
            self._release(key)
        return result

    def _save_draft(self, payload: DraftSavePayload) -> object:
        try:
            result = self._persistence.save_draft(payload.draft_id, payload.body.to_json())
        except Exception:
            logger.exception("Failed to save trigger draft", extra={"draft_id": payload.draft_id})
            raise

        logger.info(
            "Trigger saved",
            extra={"draft_id": payload.draft_id, "trigger_key": payload.body.trigger_key},
        )
        if self._drafts is not None:
            self._drafts.discard_by_id(payload.draft_id)
        return result

    def _update_subscription(self, payload: SubscriptionSavePayload) -> object:
        try:
            result = self._persistence.update_subscription(
                payload.subscription_id, payload.body.to_json()
            )
        except Exception:
            logger.exception(
                "Failed to save trigger", extra={"subscription_id": payload.subscription_id}
            )
            raise

        logger.info("Trigger updated", extra={"subscription_id": payload.subscription_id})
        return result

    def toggle(self, subscription: TriggerSubscription | None, enabled: bool) -> bool:
        """Enable or disable a subscription. Drafts have nothing to toggle."""

        if subscription is None:
            return False
        try:
            self._persistence.toggle_subscription(subscription.subscription_id, enabled)
        except Exception:
            logger.exception(
                "Failed to toggle trigger",
                extra={"subscription_id": subscription.subscription_id, "enabled": enabled},
            )
            raise
        logger.info(
            "Trigger enabled" if enabled else "Trigger disabled",
            extra={"subscription_id": subscription.subscription_id},
        )
        return True

    def delete(self, subscription: TriggerSubscription | None, draft: TriggerDraft | None) -> bool:
        """Discard a draft locally, or delete a persisted subscription."""

        if subscription is None:
            if draft is None:
                return False
            if self._drafts is not None:
                self._drafts.discard_by_id(draft.id)
            logger.info("Trigger draft removed", extra={"draft_id": draft.id})
            return True

        try:
            self._persistence.delete_subscription(subscription.subscription_id)
        except Exception:
            logger.exception(
                "Failed to delete trigger", extra={"subscription_id": subscription.subscription_id}
            )
            raise
        logger.info("Trigger removed", extra={"subscription_id": subscription.subscription_id})
        return True
