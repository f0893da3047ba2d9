"""Unit tests for the per-trigger editing session."""

from __future__ import annotations

import logging

import pytest

from workflow_trigger_engine.engine.catalog import TriggerCatalog
from workflow_trigger_engine.engine.triggers.classification import TriggerKind
from workflow_trigger_engine.engine.triggers.models import (
    BindingConfig,
    DraftSavePayload,
    QuickOption,
    SubscriptionSavePayload,
    TriggerDescriptor,
    TriggerDraft,
    TriggerSubscription,
    WorkflowInputDefinition,
)
from workflow_trigger_engine.engine.triggers.session import TriggerEditSession


def test_session_derives_state_from_subscription(
    gmail_descriptor: TriggerDescriptor,
    subscription: TriggerSubscription,
    workflow_inputs: dict[str, WorkflowInputDefinition],
) -> None:
    session = TriggerEditSession.from_sources(
        gmail_descriptor.key, workflow_inputs, descriptor=gmail_descriptor, subscription=subscription
    )

    assert session.kind is TriggerKind.GMAIL
    assert session.config_mode == "dynamic"
    assert session.binding_state == {
        "customerEmail": BindingConfig(mode="event", value="data.from.email"),
        "subject": BindingConfig(mode="literal", value="Weekly report"),
    }
    assert session.config.get("max_results") == 10
    assert [f.name for f in session.config_fields] == [
        "label_ids",
        "query",
        "max_results",
        "overlap_ms",
    ]


def test_session_syncs_draft_bindings_with_inputs(
    workflow_inputs: dict[str, WorkflowInputDefinition],
) -> None:
    draft = TriggerDraft.model_validate(
        {
            "id": "draft-1",
            "triggerKey": "webhook.generic",
            "initialBindings": {
                "customerEmail": {"mode": "literal", "value": "a@example.com"},
                "stale": {"mode": "event", "value": "data.stale"},
            },
        }
    )

    session = TriggerEditSession.from_sources("webhook.generic", workflow_inputs, draft=draft)

    assert session.binding_state == {
        "customerEmail": BindingConfig(mode="literal", value="a@example.com"),
        "subject": BindingConfig(mode="event", value="data.subject"),
    }


def test_session_edits_flow_into_the_payload(
    gmail_descriptor: TriggerDescriptor,
    subscription: TriggerSubscription,
    workflow_inputs: dict[str, WorkflowInputDefinition],
) -> None:
    session = TriggerEditSession.from_sources(
        gmail_descriptor.key, workflow_inputs, descriptor=gmail_descriptor, subscription=subscription
    )

    session.set_binding_mode("subject", "event")
    session.quick_insert("customerEmail", "data.from.name")
    session.set_config_value("max_results", "100")

    payload = session.build_save_payload()

    assert isinstance(payload, SubscriptionSavePayload)
    assert payload.body.bindings == {
        "customerEmail": "${event.data.from.name}",
        "subject": "${event.data.subject}",
    }
    # dynamic coercion does not clamp; only the legacy adapter does
    assert payload.body.provider_config is not None
    assert payload.body.provider_config["max_results"] == 100


def test_user_schema_prefers_draft_over_subscription() -> None:
    draft_schema = {"type": "object", "properties": {"from_draft": {"type": "string"}}}
    subscription = TriggerSubscription(
        subscription_id=1,
        trigger_key="webhook.generic",
        provider_config={"user_schema": {"type": "object", "properties": {"from_sub": {}}}},
    )
    draft = TriggerDraft(
        id="draft-1",
        trigger_key="webhook.generic",
        initial_provider_config={"user_schema": draft_schema},
    )

    session = TriggerEditSession.from_sources(
        "webhook.generic", {}, subscription=subscription, draft=draft
    )

    assert session.user_schema == draft_schema
    assert session.quick_options == [QuickOption(label="From Draft", path="data.from_draft")]


def test_user_schema_defaults_to_empty_object_schema() -> None:
    session = TriggerEditSession.from_sources("form.hosted", {})

    assert session.config_mode == "user_schema"
    assert session.user_schema == {
        "type": "object",
        "properties": {},
        "required": [],
        "additionalProperties": False,
    }
    assert session.quick_options == []
    assert session.config_fields == []


def test_quick_options_come_from_event_schema(catalog: TriggerCatalog) -> None:
    descriptor = catalog.get("schedule.cron")

    session = TriggerEditSession.from_sources(descriptor.key, {}, descriptor=descriptor)

    assert session.quick_options == [
        QuickOption(label="Timestamp", path="data.timestamp"),
        QuickOption(label="Run Id", path="data.run_id"),
        QuickOption(label="Cron Expression", path="data.cron_expression"),
    ]


def test_quick_options_fall_back_to_legacy_list_without_descriptor() -> None:
    session = TriggerEditSession.from_sources("nightly.cron.job", {})

    assert [o.path for o in session.quick_options] == ["data.timestamp", "data.run_id"]


def test_webhook_session_saves_user_schema_to_draft() -> None:
    draft = TriggerDraft(id="draft-9", trigger_key="webhook.generic")
    inputs = {"order_id": WorkflowInputDefinition(name="order_id")}
    session = TriggerEditSession.from_sources("webhook.generic", inputs, draft=draft)

    schema = {"type": "object", "properties": {"order_id": {"type": "string"}}}
    session.set_user_schema(schema)
    payload = session.build_save_payload()

    assert isinstance(payload, DraftSavePayload)
    assert payload.body.provider_config == {"user_schema": schema}
    assert payload.body.bindings == {
        "order_id": BindingConfig(mode="event", value="data.order_id")
    }


def test_unrecognized_key_warns_once_per_session(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        session = TriggerEditSession.from_sources("github.push", {})
        assert session.kind is TriggerKind.UNKNOWN
        assert session.quick_options == []
        assert session.config_fields == []
        session.plan_save()

    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert [r.message for r in warnings] == ["Unrecognized trigger key"]


def test_recognized_key_does_not_warn(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        TriggerEditSession.from_sources("schedule.cron", {})

    assert caplog.records == []
