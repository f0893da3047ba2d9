"""Trigger classification.

Every kind-dependent decision (user-schema support, config mode, legacy quick
options, legacy defaults) goes through `key_to_kind`.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Literal

from .models import QuickOption, TriggerDescriptor
from .schema_utils import has_flexible_data_schema

logger = logging.getLogger(__name__)

WEBHOOK_TRIGGER_KEY = "webhook.generic"
FORM_TRIGGER_KEY = "form.hosted"

ConfigMode = Literal["user_schema", "dynamic"]


class TriggerKind(str, Enum):
    WEBHOOK = "webhook"
    FORM = "form"
    GMAIL = "gmail"
    CRON = "cron"
    SUPABASE = "supabase"
    UNKNOWN = "unknown"


def key_to_kind(trigger_key: str, *, unknown_as_webhook: bool = False) -> TriggerKind:
    """Classify a trigger key.

    Exact keys are checked first, then provider substrings. Unrecognized keys
    resolve to UNKNOWN unless `unknown_as_webhook` is set.
    """

    if trigger_key == WEBHOOK_TRIGGER_KEY:
        return TriggerKind.WEBHOOK
    if trigger_key == FORM_TRIGGER_KEY:
        return TriggerKind.FORM
    if "gmail" in trigger_key:
        return TriggerKind.GMAIL
    if "cron" in trigger_key:
        return TriggerKind.CRON
    if "supabase" in trigger_key:
        return TriggerKind.SUPABASE

    logger.debug(
        "Unrecognized trigger key",
        extra={"trigger_key": trigger_key, "unknown_as_webhook": unknown_as_webhook},
    )
    return TriggerKind.WEBHOOK if unknown_as_webhook else TriggerKind.UNKNOWN


def is_recognized_key(trigger_key: str) -> bool:
    return key_to_kind(trigger_key) is not TriggerKind.UNKNOWN


def supports_user_schema(
    trigger_key: str,
    descriptor: TriggerDescriptor | None = None,
    *,
    unknown_as_webhook: bool = False,
) -> bool:
    kind = key_to_kind(trigger_key, unknown_as_webhook=unknown_as_webhook)
    if kind in (TriggerKind.WEBHOOK, TriggerKind.FORM):
        return True
    if descriptor is not None and descriptor.event_schema:
        return has_flexible_data_schema(descriptor.event_schema)
    return False


def config_mode(
    trigger_key: str,
    descriptor: TriggerDescriptor | None = None,
    *,
    unknown_as_webhook: bool = False,
) -> ConfigMode:
    """`user_schema` for flexible triggers without a config schema, else `dynamic`."""

    has_config_schema = descriptor is not None and bool(descriptor.config_schema)
    if not has_config_schema and supports_user_schema(
        trigger_key, descriptor, unknown_as_webhook=unknown_as_webhook
    ):
        return "user_schema"
    return "dynamic"


GMAIL_QUICK_OPTIONS: tuple[QuickOption, ...] = (
    QuickOption(label="Subject", path="data.subject"),
    QuickOption(label="From", path="data.from"),
    QuickOption(label="Body", path="data.body"),
    QuickOption(label="Message ID", path="data.messageId"),
)

CRON_QUICK_OPTIONS: tuple[QuickOption, ...] = (
    QuickOption(label="Timestamp", path="data.timestamp"),
    QuickOption(label="Run ID", path="data.run_id"),
)

SUPABASE_QUICK_OPTIONS: tuple[QuickOption, ...] = (
    QuickOption(label="Record", path="data.record"),
    QuickOption(label="Old Record", path="data.old_record"),
    QuickOption(label="Event Type", path="data.type"),
    QuickOption(label="Table", path="data.table"),
)

_QUICK_OPTIONS_BY_KIND: dict[TriggerKind, tuple[QuickOption, ...]] = {
    TriggerKind.GMAIL: GMAIL_QUICK_OPTIONS,
    TriggerKind.CRON: CRON_QUICK_OPTIONS,
    TriggerKind.SUPABASE: SUPABASE_QUICK_OPTIONS,
}


def quick_options_for_kind(kind: TriggerKind) -> list[QuickOption]:
    return list(_QUICK_OPTIONS_BY_KIND.get(kind, ()))
