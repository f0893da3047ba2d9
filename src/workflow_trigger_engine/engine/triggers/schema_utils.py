"""Helpers for deriving workflow inputs and quick options from JSON Schemas."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .dynamic_config import format_field_label
from .models import INPUT_TYPES, InputType, QuickOption, WorkflowInputDefinition


def map_json_schema_type(schema_type: object) -> InputType:
    """Map a JSON Schema `type` onto a workflow input type.

    Union types such as `["string", "null"]` use the first non-null member.
    """

    if isinstance(schema_type, list):
        for candidate in schema_type:
            if candidate != "null":
                return map_json_schema_type(candidate)
        return "string"
    if isinstance(schema_type, str) and schema_type in INPUT_TYPES:
        return schema_type  # type: ignore[return-value]
    return "string"


def _data_schema(event_schema: Mapping[str, Any] | None) -> Mapping[str, Any] | None:
    if not isinstance(event_schema, Mapping):
        return None
    properties = event_schema.get("properties")
    if not isinstance(properties, Mapping):
        return None
    data = properties.get("data")
    return data if isinstance(data, Mapping) else None


def has_flexible_data_schema(event_schema: Mapping[str, Any] | None) -> bool:
    """True when the event's `data` accepts arbitrary properties (webhook, form)."""

    data = _data_schema(event_schema)
    return data is not None and data.get("additionalProperties") is True


def _inputs_from_object_schema(schema: Mapping[str, Any]) -> dict[str, WorkflowInputDefinition]:
    properties = schema.get("properties")
    if not isinstance(properties, Mapping):
        return {}
    required = schema.get("required")
    required_names = set(required) if isinstance(required, list) else set()

    inputs: dict[str, WorkflowInputDefinition] = {}
    for key, definition in properties.items():
        if not isinstance(definition, Mapping):
            continue
        description = definition.get("description")
        inputs[key] = WorkflowInputDefinition(
            name=key,
            type=map_json_schema_type(definition.get("type")),
            required=key in required_names,
            description=description if isinstance(description, str) and description else None,
        )
    return inputs


def extract_inputs_from_event_schema(
    event_schema: Mapping[str, Any] | None,
) -> dict[str, WorkflowInputDefinition]:
    """Inputs from `properties.data.properties`; empty for flexible data schemas."""

    data = _data_schema(event_schema)
    if data is None:
        return {}
    return _inputs_from_object_schema(data)


def extract_inputs_from_user_schema(
    user_schema: Mapping[str, Any] | None,
) -> dict[str, WorkflowInputDefinition]:
    if not isinstance(user_schema, Mapping):
        return {}
    return _inputs_from_object_schema(user_schema)


def merge_workflow_inputs(
    existing: Mapping[str, WorkflowInputDefinition],
    incoming: Mapping[str, WorkflowInputDefinition],
) -> dict[str, WorkflowInputDefinition]:
    """Existing inputs win; incoming ones are only added."""

    merged = dict(existing)
    for name, definition in incoming.items():
        merged.setdefault(name, definition)
    return merged


def _quick_options(properties: object) -> list[QuickOption]:
    if not isinstance(properties, Mapping):
        return []
    return [QuickOption(label=format_field_label(key), path=f"data.{key}") for key in properties]


def derive_quick_options_from_schema(event_schema: Mapping[str, Any] | None) -> list[QuickOption]:
    data = _data_schema(event_schema)
    if data is None:
        return []
    return _quick_options(data.get("properties"))


def derive_quick_options_from_user_schema(
    user_schema: Mapping[str, Any] | None,
) -> list[QuickOption]:
    if not isinstance(user_schema, Mapping):
        return []
    return _quick_options(user_schema.get("properties"))
