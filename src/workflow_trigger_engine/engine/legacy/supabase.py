"""Row-change (Supabase) trigger form."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

SUPABASE_TRIGGER_KEY = "supabase.db.row_changed"

SupabaseEventType = Literal["INSERT", "UPDATE", "DELETE"]
SUPABASE_EVENT_TYPES: tuple[str, ...] = ("INSERT", "UPDATE", "DELETE")


def _all_events() -> list[str]:
    return list(SUPABASE_EVENT_TYPES)


@dataclass(frozen=True, slots=True)
class SupabaseConfigState:
    integration_resource_id: str = ""
    integration_resource_label: str = ""
    schema: str = "public"
    table: str = ""
    events: list[str] = field(default_factory=_all_events)


@dataclass(frozen=True, slots=True)
class SupabaseValidation:
    valid: bool
    errors: dict[str, str] = field(default_factory=dict)


def make_default_supabase_config() -> SupabaseConfigState:
    return SupabaseConfigState()


def _normalize_events(raw: object) -> list[str]:
    if not isinstance(raw, list):
        return []
    events = [str(event).upper() for event in raw]
    return [event for event in events if event in SUPABASE_EVENT_TYPES]


def supabase_config_from_provider_config(
    provider_config: Mapping[str, Any] | None,
) -> SupabaseConfigState:
    if not provider_config:
        return make_default_supabase_config()

    raw_events = provider_config.get("events")
    events = _normalize_events(raw_events if isinstance(raw_events, list) else _all_events())
    resource_id = provider_config.get("integration_resource_id")
    label = provider_config.get("integration_resource_label")
    schema = provider_config.get("schema")
    table = provider_config.get("table")

    return SupabaseConfigState(
        integration_resource_id=str(resource_id) if resource_id else "",
        integration_resource_label=label if isinstance(label, str) else "",
        schema=str(schema) if schema else "public",
        table=str(table) if table else "",
        events=events or _all_events(),
    )


def _resource_id(text: str) -> int | float | None:
    stripped = text.strip()
    if not stripped:
        return None
    try:
        return int(stripped)
    except ValueError:
        pass
    try:
        number = float(stripped)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def serialize_supabase_config(state: SupabaseConfigState) -> dict[str, Any]:
    """Resource id becomes a number; events are upper-cased and filtered."""

    config: dict[str, Any] = {}

    resource_id = _resource_id(state.integration_resource_id)
    if resource_id is not None:
        config["integration_resource_id"] = resource_id
    if state.integration_resource_label:
        config["integration_resource_label"] = state.integration_resource_label

    config["schema"] = state.schema.strip() or "public"

    table = state.table.strip()
    if table:
        config["table"] = table

    events = _normalize_events(state.events)
    if events:
        config["events"] = events

    return config


def validate_supabase_config(state: SupabaseConfigState) -> SupabaseValidation:
    errors: dict[str, str] = {}
    if not state.integration_resource_id.strip():
        errors["resource"] = "Select a Supabase project"
    if not state.table.strip():
        errors["table"] = "Table name is required"
    if not _normalize_events(state.events):
        errors["events"] = "Select at least one event type"
    return SupabaseValidation(valid=not errors, errors=errors)
