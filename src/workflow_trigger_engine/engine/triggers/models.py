"""Data model for trigger bindings, descriptors, drafts and subscriptions.

Records that cross the persistence boundary (descriptors, drafts, subscriptions,
workflow inputs) are pydantic models. Editable values owned by an editing
session (binding configs, payloads, quick options) are frozen dataclasses.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, Field, field_validator

BindingMode = Literal["event", "literal"]
InputType = Literal["string", "number", "integer", "boolean", "object", "array"]

INPUT_TYPES: tuple[str, ...] = ("string", "number", "integer", "boolean", "object", "array")


@dataclass(frozen=True, slots=True)
class BindingConfig:
    """How one workflow input is sourced.

    `event` mode holds a relative event path (`data.subject`), never the wrapped
    `${event.*}` expression. `literal` mode holds the raw authored string.
    """

    mode: BindingMode
    value: str

    def to_json(self) -> dict[str, object]:
        return {"mode": self.mode, "value": self.value}

    @staticmethod
    def from_json(obj: object) -> BindingConfig:
        if isinstance(obj, BindingConfig):
            return obj
        if not isinstance(obj, dict):
            return BindingConfig(mode="event", value="")
        mode_raw = obj.get("mode")
        mode: BindingMode = "literal" if mode_raw == "literal" else "event"
        value_raw = obj.get("value")
        if value_raw is None:
            value = ""
        elif isinstance(value_raw, str):
            value = value_raw
        else:
            value = json.dumps(value_raw, ensure_ascii=False)
        return BindingConfig(mode=mode, value=value)


BindingState = dict[str, BindingConfig]


def binding_state_to_json(state: BindingState) -> dict[str, dict[str, object]]:
    return {name: config.to_json() for name, config in state.items()}


def binding_state_from_json(obj: object) -> BindingState:
    if not isinstance(obj, dict):
        return {}
    return {str(name): BindingConfig.from_json(raw) for name, raw in obj.items()}


class WorkflowInputDefinition(BaseModel):
    """An input variable declared by the workflow."""

    name: str
    type: InputType = Field(default="string")
    required: bool = Field(default=False)
    description: str | None = Field(default=None)


def parse_workflow_inputs(raw: object) -> dict[str, WorkflowInputDefinition]:
    """Parse the editor's `{name: {type, required, description}}` input map.

    A list of definitions (each carrying its own `name`) is accepted as well.
    """

    inputs: dict[str, WorkflowInputDefinition] = {}
    if isinstance(raw, dict):
        for name, definition in raw.items():
            body = dict(definition) if isinstance(definition, dict) else {}
            body["name"] = str(name)
            inputs[str(name)] = WorkflowInputDefinition.model_validate(body)
    elif isinstance(raw, list):
        for definition in raw:
            record = WorkflowInputDefinition.model_validate(definition)
            inputs[record.name] = record
    return inputs


class TriggerDescriptor(BaseModel):
    """Catalog entry describing one trigger type. Read-only."""

    key: str
    title: str
    provider: str = Field(default="generic")
    mode: str = Field(default="webhook")
    description: str | None = Field(default=None)
    event_schema: dict[str, Any] = Field(default_factory=dict)
    filter_schema: dict[str, Any] | None = Field(default=None)
    config_schema: dict[str, Any] | None = Field(default=None)
    sample_event: dict[str, Any] | None = Field(default=None)
    metadata: dict[str, Any] = Field(default_factory=dict)


class TriggerDraft(BaseModel):
    """An unsaved, locally identified trigger configuration."""

    id: str
    trigger_key: str = Field(validation_alias=AliasChoices("trigger_key", "triggerKey"))
    workflow_id: str | None = Field(
        default=None, validation_alias=AliasChoices("workflow_id", "workflowId")
    )
    # Values are BindingConfig instances once validated.
    initial_bindings: dict[str, Any] | None = Field(
        default=None, validation_alias=AliasChoices("initial_bindings", "initialBindings")
    )
    initial_provider_config: dict[str, Any] | None = Field(
        default=None,
        validation_alias=AliasChoices("initial_provider_config", "initialProviderConfig"),
    )

    @field_validator("initial_bindings", mode="before")
    @classmethod
    def _coerce_bindings(cls, value: object) -> object:
        if value is None:
            return None
        return binding_state_from_json(value)

    def to_json(self) -> dict[str, object]:
        out: dict[str, object] = {"id": self.id, "trigger_key": self.trigger_key}
        if self.workflow_id is not None:
            out["workflow_id"] = self.workflow_id
        if self.initial_bindings is not None:
            out["initial_bindings"] = binding_state_to_json(self.initial_bindings)
        if self.initial_provider_config is not None:
            out["initial_provider_config"] = self.initial_provider_config
        return out


class TriggerSubscription(BaseModel):
    """A persisted trigger subscription as returned by the backend."""

    subscription_id: int
    trigger_key: str
    workflow_id: str | None = Field(default=None)
    bindings: dict[str, Any] = Field(default_factory=dict)
    provider_config: dict[str, Any] | None = Field(default=None)
    filters: dict[str, Any] = Field(default_factory=dict)
    enabled: bool = Field(default=True)
    webhook_url: str | None = Field(default=None)
    secret_token: str | None = Field(default=None)
    provider_connection_id: int | None = Field(default=None)
    created_at: str | None = Field(default=None)
    updated_at: str | None = Field(default=None)

    @field_validator("bindings", mode="before")
    @classmethod
    def _none_bindings_to_empty(cls, value: object) -> object:
        return {} if value is None else value


@dataclass(frozen=True, slots=True)
class QuickOption:
    """A suggested event path offered next to a binding field."""

    label: str
    path: str

    def to_json(self) -> dict[str, str]:
        return {"label": self.label, "path": self.path}


@dataclass(frozen=True, slots=True)
class DraftSaveBody:
    trigger_key: str
    bindings: BindingState
    provider_config: dict[str, object] | None = None

    def to_json(self) -> dict[str, object]:
        out: dict[str, object] = {
            "triggerKey": self.trigger_key,
            "bindings": binding_state_to_json(self.bindings),
        }
        if self.provider_config is not None:
            out["providerConfig"] = self.provider_config
        return out


@dataclass(frozen=True, slots=True)
class DraftSavePayload:
    """Save target for a draft: bindings stay in editable (mode/value) form."""

    draft_id: str
    body: DraftSaveBody
    mode: Literal["draft"] = "draft"

    def to_json(self) -> dict[str, object]:
        return {"mode": self.mode, "draftId": self.draft_id, "body": self.body.to_json()}


@dataclass(frozen=True, slots=True)
class SubscriptionSaveBody:
    bindings: dict[str, object]
    provider_config: dict[str, object] | None = None

    def to_json(self) -> dict[str, object]:
        out: dict[str, object] = {"bindings": self.bindings}
        if self.provider_config is not None:
            out["provider_config"] = self.provider_config
        return out


@dataclass(frozen=True, slots=True)
class SubscriptionSavePayload:
    """Save target for a persisted subscription: bindings are in wire form."""

    subscription_id: int
    body: SubscriptionSaveBody
    mode: Literal["subscription"] = "subscription"

    def to_json(self) -> dict[str, object]:
        return {
            "mode": self.mode,
            "subscriptionId": self.subscription_id,
            "body": self.body.to_json(),
        }


SavePayload = DraftSavePayload | SubscriptionSavePayload
