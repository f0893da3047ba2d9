"""In-memory registry of trigger descriptors.

Built-in descriptors are always present; more can be loaded from a JSON file
holding either a list of descriptors or `{"triggers": [...]}`.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any

from workflow_trigger_engine.engine.errors import UnknownTriggerError
from workflow_trigger_engine.engine.triggers.models import TriggerDescriptor
from workflow_trigger_engine.engine.triggers.user_schema import schema_errors

logger = logging.getLogger(__name__)


class TriggerCatalog:
    """Stores trigger descriptors by key."""

    def __init__(self, initial: list[TriggerDescriptor] | None = None) -> None:
        self._lock = threading.Lock()
        self._triggers: dict[str, TriggerDescriptor] = {}
        for descriptor in initial or []:
            self.register(descriptor)

    def register(self, descriptor: TriggerDescriptor) -> None:
        """Add or replace a descriptor.

        A sample event, when given, must conform to the descriptor's event schema.
        """

        if descriptor.sample_event is not None:
            errors = schema_errors(descriptor.sample_event, descriptor.event_schema)
            if errors:
                raise ValueError(
                    f"Sample event for trigger '{descriptor.key}' did not match its event schema: {errors[0]}"
                )
        with self._lock:
            replaced = descriptor.key in self._triggers
            self._triggers[descriptor.key] = descriptor
        logger.debug(
            "Registered trigger descriptor",
            extra={"trigger_key": descriptor.key, "replaced": replaced},
        )

    def get(self, key: str) -> TriggerDescriptor:
        with self._lock:
            try:
                return self._triggers[key]
            except KeyError as exc:
                raise UnknownTriggerError(key) from exc

    def maybe_get(self, key: str) -> TriggerDescriptor | None:
        with self._lock:
            return self._triggers.get(key)

    def all(self) -> list[TriggerDescriptor]:
        with self._lock:
            return list(self._triggers.values())

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._triggers

    def __len__(self) -> int:
        with self._lock:
            return len(self._triggers)


def _flexible_event_schema() -> dict[str, Any]:
    """Envelope whose `data` accepts whatever the sender posts."""

    return {
        "type": "object",
        "properties": {
            "id": {"type": "string"},
            "trigger_key": {"type": "string"},
            "provider": {"type": "string"},
            "occurred_at": {"type": "string", "format": "date-time"},
            "data": {"type": "object", "additionalProperties": True},
        },
        "required": ["id", "trigger_key", "provider", "occurred_at", "data"],
    }


def _envelope(data: dict[str, Any], required: list[str] | None = None) -> dict[str, Any]:
    schema = _flexible_event_schema()
    data_schema: dict[str, Any] = {"type": "object", "properties": data}
    if required:
        data_schema["required"] = required
    schema["properties"]["data"] = data_schema
    return schema


def _gmail_event_schema() -> dict[str, Any]:
    party = {
        "type": "object",
        "properties": {
            "name": {"type": ["string", "null"]},
            "email": {"type": ["string", "null"]},
        },
    }
    return _envelope(
        {
            "message_id": {"type": "string", "description": "Gmail message id"},
            "thread_id": {"type": "string"},
            "subject": {"type": ["string", "null"]},
            "from": party,
            "to": {"type": "array", "items": party},
            "snippet": {"type": ["string", "null"]},
            "body": {"type": ["string", "null"]},
            "labels": {"type": "array", "items": {"type": "string"}},
            "internal_date_ms": {"type": "integer"},
        },
        required=["message_id", "thread_id", "internal_date_ms"],
    )


def _gmail_config_schema() -> dict[str, Any]:
    return {
        "type": "object",
        "additionalProperties": False,
        "properties": {
            "label_ids": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Filter to specific Gmail label IDs (defaults to INBOX).",
            },
            "query": {
                "type": "string",
                "description": "Optional Gmail search query, e.g. 'is:unread'.",
            },
            "max_results": {
                "type": "integer",
                "minimum": 1,
                "maximum": 25,
                "default": 25,
                "description": "Maximum messages to examine per poll cycle.",
            },
            "overlap_ms": {
                "type": "integer",
                "minimum": 0,
                "maximum": 900000,
                "default": 300000,
                "description": "Overlap window in milliseconds used to re-read recent messages.",
            },
        },
    }


def _gmail_sample_event() -> dict[str, Any]:
    return {
        "id": "evt_gmail_1",
        "trigger_key": "poll.gmail.email_received",
        "provider": "gmail",
        "occurred_at": "2025-12-13T10:00:00Z",
        "data": {
            "message_id": "18c123example",
            "thread_id": "18c123example",
            "subject": "Demo tomorrow?",
            "from": {"name": "Product Team", "email": "product@example.com"},
            "to": [{"name": "You", "email": "you@example.com"}],
            "snippet": "Reminder about tomorrow's demo",
            "labels": ["INBOX", "UNREAD"],
            "internal_date_ms": 1735630123456,
        },
    }


def _cron_event_schema() -> dict[str, Any]:
    return _envelope(
        {
            "timestamp": {"type": "string", "format": "date-time"},
            "run_id": {"type": "string"},
            "cron_expression": {"type": "string"},
        },
        required=["timestamp"],
    )


def _cron_config_schema() -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "cron_expression": {
                "type": "string",
                "default": "0 9 * * *",
                "description": "Five-field cron expression (minute hour day month weekday).",
            },
            "timezone": {"type": "string", "default": "UTC"},
            "description": {"type": "string"},
        },
        "required": ["cron_expression"],
    }


def _supabase_event_schema() -> dict[str, Any]:
    return _envelope(
        {
            "type": {"type": "string", "enum": ["INSERT", "UPDATE", "DELETE"]},
            "table": {"type": "string"},
            "schema": {"type": "string"},
            "record": {"type": ["object", "null"]},
            "old_record": {"type": ["object", "null"]},
        },
        required=["type", "table"],
    )


def _supabase_config_schema() -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "integration_resource_id": {
                "type": "integer",
                "description": "Connected Supabase project.",
                "x-resource-picker": {"resource_type": "supabase_project"},
            },
            "schema": {"type": "string", "default": "public"},
            "table": {"type": "string"},
            "events": {
                "type": "array",
                "items": {"type": "string", "enum": ["INSERT", "UPDATE", "DELETE"]},
                "default": ["INSERT", "UPDATE", "DELETE"],
            },
        },
        "required": ["integration_resource_id", "table", "events"],
    }


def builtin_descriptors() -> list[TriggerDescriptor]:
    return [
        TriggerDescriptor(
            key="webhook.generic",
            title="Generic Webhook",
            provider="generic",
            mode="webhook",
            description="Accepts arbitrary JSON payloads via signed webhook requests.",
            event_schema=_flexible_event_schema(),
        ),
        TriggerDescriptor(
            key="form.hosted",
            title="Hosted Form",
            provider="form",
            mode="webhook",
            description="Collects submissions from a hosted form.",
            event_schema=_flexible_event_schema(),
        ),
        TriggerDescriptor(
            key="poll.gmail.email_received",
            title="Gmail - New Email",
            provider="gmail",
            mode="polling",
            description="Poll a Gmail inbox for newly received messages.",
            event_schema=_gmail_event_schema(),
            config_schema=_gmail_config_schema(),
            sample_event=_gmail_sample_event(),
            metadata={"polling": True, "integration": "gmail"},
        ),
        TriggerDescriptor(
            key="schedule.cron",
            title="Schedule (Cron)",
            provider="cron",
            mode="schedule",
            description="Runs the workflow on a cron schedule.",
            event_schema=_cron_event_schema(),
            config_schema=_cron_config_schema(),
        ),
        TriggerDescriptor(
            key="supabase.db.row_changed",
            title="Supabase - Row Changed",
            provider="supabase",
            mode="webhook",
            description="Fires when a row in a Supabase table is inserted, updated or deleted.",
            event_schema=_supabase_event_schema(),
            config_schema=_supabase_config_schema(),
            metadata={"integration": "supabase"},
        ),
    ]


def load_catalog(path: str | Path | None = None) -> TriggerCatalog:
    """Built-in descriptors, extended (and possibly overridden) from `path`."""

    catalog = TriggerCatalog(builtin_descriptors())
    if path is None:
        return catalog

    p = Path(path)
    raw = json.loads(p.read_text(encoding="utf-8"))
    entries = raw.get("triggers", []) if isinstance(raw, dict) else raw
    if not isinstance(entries, list):
        raise ValueError(f"Catalog file {p} must contain a list of triggers")

    for entry in entries:
        catalog.register(TriggerDescriptor.model_validate(entry))

    logger.info("Loaded trigger catalog", extra={"path": str(p), "count": len(entries)})
    return catalog


_default_catalog = TriggerCatalog(builtin_descriptors())


def list_trigger_descriptors(catalog: TriggerCatalog | None = None) -> list[TriggerDescriptor]:
    return (catalog if catalog is not None else _default_catalog).all()


__all__ = ["TriggerCatalog", "builtin_descriptors", "list_trigger_descriptors", "load_catalog"]
