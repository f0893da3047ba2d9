"""Mailbox-poll (Gmail) trigger form."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

GMAIL_TRIGGER_KEY = "poll.gmail.email_received"

MAX_RESULTS_MIN = 1
MAX_RESULTS_MAX = 25
OVERLAP_MS_MIN = 0
OVERLAP_MS_MAX = 900_000

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True, slots=True)
class GmailConfigState:
    label_ids: str = "INBOX"
    query: str = ""
    max_results: str = "25"
    overlap_ms: str = "300000"


def make_default_gmail_config() -> GmailConfigState:
    return GmailConfigState()


def _text(value: object, default: str) -> str:
    if value is None:
        return default
    return str(value)


def gmail_config_from_provider_config(provider_config: Mapping[str, Any] | None) -> GmailConfigState:
    if not provider_config:
        return make_default_gmail_config()

    labels = provider_config.get("label_ids")
    if isinstance(labels, list):
        label_text = ", ".join(str(label) for label in labels)
    else:
        label_text = _text(labels, "INBOX")

    return GmailConfigState(
        label_ids=label_text or "INBOX",
        query=_text(provider_config.get("query"), ""),
        max_results=_text(provider_config.get("max_results"), "25"),
        overlap_ms=_text(provider_config.get("overlap_ms"), "300000"),
    )


def _clamped_int(text: str, low: int, high: int) -> int | None:
    match = _LEADING_INT_RE.match(text)
    if match is None:
        return None
    try:
        number = int(match.group(1))
    except ValueError:
        return None
    return min(max(number, low), high)


def serialize_gmail_config(state: GmailConfigState) -> dict[str, Any]:
    """Split comma-separated labels and clamp the numeric fields to their ranges."""

    config: dict[str, Any] = {}

    labels = [label.strip() for label in state.label_ids.split(",") if label.strip()]
    if labels:
        config["label_ids"] = labels

    query = state.query.strip()
    if query:
        config["query"] = query

    max_results = _clamped_int(state.max_results, MAX_RESULTS_MIN, MAX_RESULTS_MAX)
    if max_results is not None:
        config["max_results"] = max_results

    overlap_ms = _clamped_int(state.overlap_ms, OVERLAP_MS_MIN, OVERLAP_MS_MAX)
    if overlap_ms is not None:
        config["overlap_ms"] = overlap_ms

    return config
