"""Unit tests for trigger classification."""

from __future__ import annotations

import logging

import pytest

from workflow_trigger_engine.engine.catalog import TriggerCatalog
from workflow_trigger_engine.engine.triggers.classification import (
    CRON_QUICK_OPTIONS,
    TriggerKind,
    config_mode,
    is_recognized_key,
    key_to_kind,
    quick_options_for_kind,
    supports_user_schema,
)
from workflow_trigger_engine.engine.triggers.models import TriggerDescriptor


@pytest.mark.parametrize(
    ("key", "kind"),
    [
        ("webhook.generic", TriggerKind.WEBHOOK),
        ("form.hosted", TriggerKind.FORM),
        ("poll.gmail.email_received", TriggerKind.GMAIL),
        ("schedule.cron", TriggerKind.CRON),
        ("supabase.db.row_changed", TriggerKind.SUPABASE),
        ("webhook.custom", TriggerKind.UNKNOWN),
        ("github.push", TriggerKind.UNKNOWN),
    ],
)
def test_key_to_kind(key: str, kind: TriggerKind) -> None:
    assert key_to_kind(key) is kind


def test_unknown_key_is_logged_at_debug(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG):
        kind = key_to_kind("github.push")

    assert kind is TriggerKind.UNKNOWN
    assert [(r.levelno, r.message) for r in caplog.records] == [
        (logging.DEBUG, "Unrecognized trigger key")
    ]


def test_unknown_key_can_alias_to_webhook(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        kind = key_to_kind("github.push", unknown_as_webhook=True)

    assert kind is TriggerKind.WEBHOOK
    assert caplog.records == []


def test_is_recognized_key() -> None:
    assert is_recognized_key("schedule.cron")
    assert is_recognized_key("webhook.generic")
    assert not is_recognized_key("github.push")


def test_supports_user_schema() -> None:
    flexible = TriggerDescriptor(
        key="custom.inbound",
        title="Inbound",
        event_schema={"properties": {"data": {"type": "object", "additionalProperties": True}}},
    )
    fixed = TriggerDescriptor(
        key="custom.fixed",
        title="Fixed",
        event_schema={"properties": {"data": {"properties": {"id": {"type": "string"}}}}},
    )

    assert supports_user_schema("webhook.generic")
    assert supports_user_schema("form.hosted")
    assert supports_user_schema(flexible.key, flexible)
    assert not supports_user_schema(fixed.key, fixed)
    assert not supports_user_schema("schedule.cron")
    assert supports_user_schema("github.push", unknown_as_webhook=True)


def test_config_mode(catalog: TriggerCatalog) -> None:
    assert config_mode("webhook.generic", catalog.get("webhook.generic")) == "user_schema"
    assert config_mode("form.hosted", catalog.get("form.hosted")) == "user_schema"
    assert config_mode("schedule.cron", catalog.get("schedule.cron")) == "dynamic"
    assert (
        config_mode("poll.gmail.email_received", catalog.get("poll.gmail.email_received"))
        == "dynamic"
    )


def test_flexible_trigger_with_config_schema_uses_dynamic_mode() -> None:
    descriptor = TriggerDescriptor(
        key="webhook.generic",
        title="Webhook",
        config_schema={"properties": {"secret": {"type": "string"}}},
    )

    assert config_mode(descriptor.key, descriptor) == "dynamic"


def test_quick_options_for_kind() -> None:
    assert quick_options_for_kind(TriggerKind.CRON) == list(CRON_QUICK_OPTIONS)
    assert [o.path for o in quick_options_for_kind(TriggerKind.GMAIL)] == [
        "data.subject",
        "data.from",
        "data.body",
        "data.messageId",
    ]
    assert quick_options_for_kind(TriggerKind.WEBHOOK) == []
    assert quick_options_for_kind(TriggerKind.UNKNOWN) == []
