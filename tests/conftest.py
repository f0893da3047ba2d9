"""Test configuration and fixtures."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from workflow_trigger_engine.engine.catalog import TriggerCatalog, builtin_descriptors
from workflow_trigger_engine.engine.triggers.models import (
    TriggerDescriptor,
    TriggerDraft,
    TriggerSubscription,
    WorkflowInputDefinition,
)

_SETTINGS_ENV_VARS = (
    "LOG_LEVEL",
    "TRIGGER_ENGINE_CATALOG_PATH",
    "TRIGGER_ENGINE_UNKNOWN_AS_WEBHOOK",
    "TRIGGER_ENGINE_STOP_AT_FIRST_MISSING",
)


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    """configure_logging() replaces root handlers; put them back after each test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> pytest.MonkeyPatch:
    """No settings env vars and no stray `.env` in the working directory."""
    for name in _SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


@pytest.fixture
def catalog() -> TriggerCatalog:
    return TriggerCatalog(builtin_descriptors())


@pytest.fixture
def gmail_descriptor(catalog: TriggerCatalog) -> TriggerDescriptor:
    return catalog.get("poll.gmail.email_received")


@pytest.fixture
def webhook_descriptor(catalog: TriggerCatalog) -> TriggerDescriptor:
    return catalog.get("webhook.generic")


@pytest.fixture
def workflow_inputs() -> dict[str, WorkflowInputDefinition]:
    return {
        "customerEmail": WorkflowInputDefinition(
            name="customerEmail", type="string", required=True
        ),
        "subject": WorkflowInputDefinition(name="subject", type="string"),
    }


@pytest.fixture
def subscription() -> TriggerSubscription:
    return TriggerSubscription(
        subscription_id=7,
        trigger_key="poll.gmail.email_received",
        workflow_id="wf-1",
        bindings={
            "customerEmail": "${event.data.from.email}",
            "subject": "Weekly report",
        },
        provider_config={"max_results": 10, "label_ids": ["INBOX"]},
    )


@pytest.fixture
def draft() -> TriggerDraft:
    return TriggerDraft(
        id="draft-abc",
        trigger_key="poll.gmail.email_received",
        workflow_id="wf-1",
        initial_provider_config={"max_results": 5, "query": "is:unread"},
    )
