"""Adapters for the mailbox-poll, cron and row-change trigger forms.

Each adapter converts between its form state and schema-shaped ConfigValues.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict
from typing import Any

from workflow_trigger_engine.engine.legacy.cron import (
    CronConfigState,
    cron_config_from_provider_config,
    make_default_cron_config,
    serialize_cron_config,
    validate_cron_expression,
)
from workflow_trigger_engine.engine.legacy.gmail import (
    GmailConfigState,
    gmail_config_from_provider_config,
    make_default_gmail_config,
    serialize_gmail_config,
)
from workflow_trigger_engine.engine.legacy.supabase import (
    SupabaseConfigState,
    make_default_supabase_config,
    serialize_supabase_config,
    supabase_config_from_provider_config,
    validate_supabase_config,
)
from workflow_trigger_engine.engine.triggers.classification import TriggerKind, key_to_kind

LegacyFormState = GmailConfigState | CronConfigState | SupabaseConfigState


def legacy_defaults_for_key(trigger_key: str) -> dict[str, Any] | None:
    """Initial provider config for a new draft of a legacy trigger, else None."""

    kind = key_to_kind(trigger_key)
    if kind is TriggerKind.GMAIL:
        return serialize_gmail_config(make_default_gmail_config())
    if kind is TriggerKind.CRON:
        return serialize_cron_config(make_default_cron_config())
    if kind is TriggerKind.SUPABASE:
        return serialize_supabase_config(make_default_supabase_config())
    return None


def legacy_form_state(
    trigger_key: str, provider_config: Mapping[str, Any] | None
) -> LegacyFormState | None:
    """Load provider config into the trigger's form; None for non-legacy triggers."""

    kind = key_to_kind(trigger_key)
    if kind is TriggerKind.GMAIL:
        return gmail_config_from_provider_config(provider_config)
    if kind is TriggerKind.CRON:
        return cron_config_from_provider_config(provider_config)
    if kind is TriggerKind.SUPABASE:
        return supabase_config_from_provider_config(provider_config)
    return None


def serialize_legacy_form(state: LegacyFormState) -> dict[str, Any]:
    if isinstance(state, GmailConfigState):
        return serialize_gmail_config(state)
    if isinstance(state, CronConfigState):
        return serialize_cron_config(state)
    return serialize_supabase_config(state)


def legacy_form_errors(state: LegacyFormState | None) -> dict[str, str]:
    """Form-level errors keyed by field; the mailbox form has none."""

    if isinstance(state, CronConfigState):
        result = validate_cron_expression(state.cron_expression)
        return {} if result.valid else {"cron_expression": result.error or ""}
    if isinstance(state, SupabaseConfigState):
        return dict(validate_supabase_config(state).errors)
    return {}


def legacy_form_to_json(state: LegacyFormState) -> dict[str, Any]:
    return asdict(state)


__all__ = [
    "LegacyFormState",
    "legacy_defaults_for_key",
    "legacy_form_errors",
    "legacy_form_state",
    "legacy_form_to_json",
    "serialize_legacy_form",
]
