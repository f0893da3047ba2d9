#!/usr/bin/env python3
"""Programmatic trigger editing example.

This demonstrates using the engine components directly:

* load settings from `.env`
* add a cron trigger draft for a workflow
* bind workflow inputs and edit the schedule
* save the draft through a persistence backend (printed here)
"""

from __future__ import annotations

import argparse
import json
from typing import Sequence

from workflow_trigger_engine.engine.catalog import load_catalog
from workflow_trigger_engine.engine.config import EngineSettings
from workflow_trigger_engine.engine.logging import configure_logging
from workflow_trigger_engine.engine.triggers.drafts import DraftRegistry
from workflow_trigger_engine.engine.triggers.inputs import create_workflow_input
from workflow_trigger_engine.engine.triggers.save import TriggerSaveCoordinator
from workflow_trigger_engine.engine.triggers.session import TriggerEditSession


class PrintingPersistence:
    """Stands in for the backend API by printing each request."""

    def save_draft(self, draft_id: str, body: dict[str, object]) -> object:
        print(f"POST drafts/{draft_id}")
        print(json.dumps(body, indent=2))
        return body

    def update_subscription(self, subscription_id: int, body: dict[str, object]) -> object:
        print(f"PATCH subscriptions/{subscription_id}")
        print(json.dumps(body, indent=2))
        return body

    def toggle_subscription(self, subscription_id: int, enabled: bool) -> object:
        print(f"PATCH subscriptions/{subscription_id} enabled={enabled}")
        return enabled

    def delete_subscription(self, subscription_id: int) -> object:
        print(f"DELETE subscriptions/{subscription_id}")
        return None


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create and save a cron trigger draft.")
    parser.add_argument("--workflow", default="wf-demo", help="Workflow id")
    parser.add_argument("--cron", default="0 9 * * 1-5", help="Five-field cron expression")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = EngineSettings()
    configure_logging(settings.log_level)
    catalog = load_catalog(settings.catalog_path)

    inputs = create_workflow_input("run_id", None)
    inputs = create_workflow_input("team", inputs, required=True)

    drafts = DraftRegistry()
    draft = drafts.add(args.workflow, "schedule.cron", inputs=inputs)

    session = TriggerEditSession.from_sources(
        draft.trigger_key,
        inputs,
        descriptor=catalog.get(draft.trigger_key),
        draft=draft,
        unknown_as_webhook=settings.unknown_as_webhook,
        stop_at_first_missing=settings.stop_at_first_missing,
    )
    session.set_binding_mode("team", "literal")
    session.set_binding_value("team", "platform")
    session.set_config_value("cron_expression", args.cron)

    outcome = session.plan_save()
    if not outcome.ok or outcome.payload is None:
        print(outcome.validation.message)
        return 1

    TriggerSaveCoordinator(PrintingPersistence(), drafts).save(outcome.payload)
    print(f"Remaining drafts for {args.workflow}: {len(drafts.list(args.workflow))}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
