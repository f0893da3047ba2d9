"""CLI entrypoint for the trigger engine.

Exit codes: 0 ok, 1 unexpected failure, 2 configuration error, 3 validation
failure, 4 unknown trigger or nothing to save.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from workflow_trigger_engine import __version__
from workflow_trigger_engine.engine.catalog import TriggerCatalog, load_catalog
from workflow_trigger_engine.engine.config import EngineSettings
from workflow_trigger_engine.engine.errors import (
    ConfigValidationError,
    UnknownTriggerError,
)
from workflow_trigger_engine.engine.legacy import (
    legacy_form_errors,
    legacy_form_state,
    legacy_form_to_json,
    serialize_legacy_form,
)
from workflow_trigger_engine.engine.legacy.cron import validate_cron_expression
from workflow_trigger_engine.engine.logging import configure_logging
from workflow_trigger_engine.engine.triggers.bindings import sync_binding_state
from workflow_trigger_engine.engine.triggers.classification import (
    TriggerKind,
    config_mode,
    is_recognized_key,
    key_to_kind,
    supports_user_schema,
)
from workflow_trigger_engine.engine.triggers.models import (
    TriggerDraft,
    TriggerSubscription,
    binding_state_from_json,
    parse_workflow_inputs,
)
from workflow_trigger_engine.engine.triggers.session import TriggerEditSession

logger = logging.getLogger(__name__)


def _read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def _print_json(value: object) -> None:
    print(json.dumps(value, indent=2, ensure_ascii=False))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trigger-engine",
        description="Trigger binding and provider-configuration engine",
    )
    parser.add_argument(
        "--version", action="version", version=f"workflow-trigger-engine {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("catalog", help="List registered trigger descriptors")

    classify = subparsers.add_parser("classify", help="Classify a trigger key")
    classify.add_argument("--key", required=True, help="Trigger key, e.g. 'schedule.cron'")

    quick_options = subparsers.add_parser(
        "quick-options", help="Suggested event paths for a trigger's bindings"
    )
    quick_options.add_argument("--key", required=True, help="Trigger key")
    quick_options.add_argument(
        "--user-schema", type=Path, default=None, help="JSON file with a user-defined schema"
    )

    build_payload = subparsers.add_parser(
        "build-payload", help="Build the save payload for a draft or subscription"
    )
    build_payload.add_argument("--key", required=True, help="Trigger key")
    build_payload.add_argument(
        "--inputs", type=Path, required=True, help="JSON file with the workflow input map"
    )
    build_payload.add_argument(
        "--subscription", type=Path, default=None, help="JSON file with the persisted subscription"
    )
    build_payload.add_argument("--draft", type=Path, default=None, help="JSON file with the draft")
    build_payload.add_argument(
        "--bindings",
        type=Path,
        default=None,
        help="JSON file with edited bindings ({name: {mode, value}})",
    )
    build_payload.add_argument(
        "--config", type=Path, default=None, help="JSON file with edited provider config values"
    )
    build_payload.add_argument(
        "--user-schema", type=Path, default=None, help="JSON file with a user-defined schema"
    )

    validate_cron = subparsers.add_parser("validate-cron", help="Check a cron expression")
    validate_cron.add_argument("expression", help="Five-field cron expression, quoted")

    legacy_form = subparsers.add_parser(
        "legacy-form", help="Load provider config into a Gmail, cron or Supabase trigger form"
    )
    legacy_form.add_argument("--key", required=True, help="Trigger key")
    legacy_form.add_argument(
        "--config", type=Path, default=None, help="JSON file with the provider config"
    )

    return parser


def _session_for(
    args: argparse.Namespace, catalog: TriggerCatalog, settings: EngineSettings
) -> TriggerEditSession:
    descriptor = catalog.get(args.key)
    inputs = parse_workflow_inputs(_read_json(args.inputs))
    subscription = (
        TriggerSubscription.model_validate(_read_json(args.subscription))
        if args.subscription is not None
        else None
    )
    draft = TriggerDraft.model_validate(_read_json(args.draft)) if args.draft is not None else None

    session = TriggerEditSession.from_sources(
        args.key,
        inputs,
        descriptor=descriptor,
        subscription=subscription,
        draft=draft,
        unknown_as_webhook=settings.unknown_as_webhook,
        stop_at_first_missing=settings.stop_at_first_missing,
    )
    if args.bindings is not None:
        edited = binding_state_from_json(_read_json(args.bindings))
        session.binding_state = sync_binding_state({**session.binding_state, **edited}, inputs)
    if args.config is not None:
        session.set_config_values(_read_json(args.config))
    if args.user_schema is not None:
        session.set_user_schema(_read_json(args.user_schema))
    return session


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = EngineSettings()
    except ValidationError as e:
        # Logging isn't configured yet.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    # stdout carries command output.
    configure_logging(settings.log_level, stream=sys.stderr)

    try:
        catalog = load_catalog(settings.catalog_path)
    except ValueError as e:
        print(f"Catalog error: {e}", file=sys.stderr)
        return 2

    unknown_as_webhook = settings.unknown_as_webhook

    try:
        if args.command == "catalog":
            for descriptor in catalog.all():
                kind = key_to_kind(descriptor.key, unknown_as_webhook=unknown_as_webhook)
                mode = config_mode(descriptor.key, descriptor, unknown_as_webhook=unknown_as_webhook)
                print(f"{descriptor.key}\t{kind.value}\t{mode}")
            return 0

        if args.command == "classify":
            descriptor = catalog.maybe_get(args.key)
            kind = key_to_kind(args.key, unknown_as_webhook=unknown_as_webhook)
            if not is_recognized_key(args.key):
                logger.warning("Unrecognized trigger key", extra={"trigger_key": args.key})
            _print_json(
                {
                    "trigger_key": args.key,
                    "kind": kind.value,
                    "registered": descriptor is not None,
                    "supports_user_schema": supports_user_schema(
                        args.key, descriptor, unknown_as_webhook=unknown_as_webhook
                    ),
                    "config_mode": config_mode(
                        args.key, descriptor, unknown_as_webhook=unknown_as_webhook
                    ),
                }
            )
            return 4 if kind is TriggerKind.UNKNOWN else 0

        if args.command == "quick-options":
            session = TriggerEditSession.from_sources(
                args.key,
                {},
                descriptor=catalog.maybe_get(args.key),
                unknown_as_webhook=unknown_as_webhook,
            )
            if args.user_schema is not None:
                session.set_user_schema(_read_json(args.user_schema))
            _print_json([option.to_json() for option in session.quick_options])
            return 0

        if args.command == "build-payload":
            session = _session_for(args, catalog, settings)
            outcome = session.plan_save()
            if not outcome.validation.ok:
                raise ConfigValidationError(outcome.validation.message, outcome.validation.missing)
            if outcome.payload is None:
                print("Nothing to save: provide a draft or a subscription", file=sys.stderr)
                return 4
            _print_json(outcome.payload.to_json())
            return 0

        if args.command == "validate-cron":
            result = validate_cron_expression(args.expression)
            if not result.valid:
                print(result.error, file=sys.stderr)
                return 3
            print("Cron expression is valid")
            return 0

        if args.command == "legacy-form":
            raw_config = _read_json(args.config) if args.config is not None else None
            provider_config = raw_config if isinstance(raw_config, dict) else None
            state = legacy_form_state(args.key, provider_config)
            if state is None:
                print(f"Trigger '{args.key}' has no legacy form", file=sys.stderr)
                return 4
            errors = legacy_form_errors(state)
            _print_json(
                {
                    "form": legacy_form_to_json(state),
                    "provider_config": serialize_legacy_form(state),
                    "errors": errors,
                }
            )
            return 3 if errors else 0

        logger.error("Unknown command", extra={"command": args.command})
        return 2

    except UnknownTriggerError as e:
        logger.warning(str(e), extra={"trigger_key": e.key})
        print(str(e), file=sys.stderr)
        return 4

    except ConfigValidationError as e:
        print(str(e), file=sys.stderr)
        return 3

    except Exception:
        logger.exception("Command failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
