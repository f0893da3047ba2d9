"""Cron schedule trigger form."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

CRON_TRIGGER_KEY = "schedule.cron"

_CRON_TERM = r"(\*(/[0-9]+)?|[0-9]+(-[0-9]+)?(/[0-9]+)?)"
CRON_FIELD_RE = re.compile(rf"^{_CRON_TERM}(,{_CRON_TERM})*$")


@dataclass(frozen=True, slots=True)
class CronConfigState:
    cron_expression: str = "0 9 * * *"
    timezone: str = "UTC"
    description: str = ""


@dataclass(frozen=True, slots=True)
class CronValidation:
    valid: bool
    error: str | None = None


def make_default_cron_config() -> CronConfigState:
    return CronConfigState()


def cron_config_from_provider_config(provider_config: Mapping[str, Any] | None) -> CronConfigState:
    if not provider_config:
        return make_default_cron_config()

    def _text(key: str, default: str) -> str:
        value = provider_config.get(key)
        return default if value is None else str(value)

    return CronConfigState(
        cron_expression=_text("cron_expression", "0 9 * * *"),
        timezone=_text("timezone", "UTC"),
        description=_text("description", ""),
    )


def serialize_cron_config(state: CronConfigState) -> dict[str, Any]:
    config: dict[str, Any] = {
        "cron_expression": state.cron_expression.strip(),
        "timezone": state.timezone,
    }
    description = state.description.strip()
    if description:
        config["description"] = description
    return config


def validate_cron_expression(expression: str) -> CronValidation:
    """Syntax check of a five-field cron expression.

    Only `*`, numbers, ranges, steps and comma lists are accepted; names such as
    `MON` are not.
    """

    trimmed = expression.strip()
    if not trimmed:
        return CronValidation(valid=False, error="Cron expression is required")

    parts = trimmed.split()
    if len(parts) != 5:
        return CronValidation(
            valid=False,
            error="Cron expression must have 5 fields (minute hour day month weekday)",
        )

    for index, part in enumerate(parts, start=1):
        if not CRON_FIELD_RE.match(part):
            return CronValidation(valid=False, error=f"Invalid syntax in field {index}: {part}")

    return CronValidation(valid=True)
