"""Binding model: workflow input name -> event path or literal value.

Editable bindings keep event paths relative (`data.subject`). The wire form
persisted on a subscription wraps them as `${event.data.subject}`; literal
bindings are coerced to JSON values only when serialized.
"""

from __future__ import annotations

import json
import logging
import math
import re
from collections.abc import Mapping

from .models import BindingConfig, BindingMode, BindingState, WorkflowInputDefinition

logger = logging.getLogger(__name__)

EVENT_PREFIX = "event."

_EVENT_EXPRESSION_RE = re.compile(r"^\$\{event\.(.*)\}$", re.DOTALL)
_LEADING_DOTS_RE = re.compile(r"^\.*")


def default_event_path(input_name: str) -> str:
    return f"data.{input_name}"


def default_binding(input_name: str) -> BindingConfig:
    return BindingConfig(mode="event", value=default_event_path(input_name))


def build_default_binding_state(inputs: Mapping[str, WorkflowInputDefinition]) -> BindingState:
    """Bind every input to `data.<name>` of the incoming event."""

    return {name: default_binding(name) for name in inputs}


def is_event_expression(value: object) -> bool:
    return isinstance(value, str) and _EVENT_EXPRESSION_RE.match(value.strip()) is not None


def strip_event_expression(value: str) -> str:
    """Turn `${event.<path>}` into the editable `<path>`.

    The `event.` segment is dropped unless the remaining path starts with
    `event.` itself, in which case it is kept so sanitizing reproduces the
    original expression.
    """

    match = _EVENT_EXPRESSION_RE.match(value.strip())
    if match is None:
        return value.strip()
    path = match.group(1)
    if path.startswith(EVENT_PREFIX):
        return f"{EVENT_PREFIX}{path}"
    return path


def derive_binding_state_from_subscription(
    inputs: Mapping[str, WorkflowInputDefinition],
    subscription_bindings: Mapping[str, object] | None,
) -> BindingState:
    """Derive editable binding state from a subscription's persisted bindings.

    Bindings for names that are not current inputs are ignored; inputs without a
    persisted binding keep the default.
    """

    state = build_default_binding_state(inputs)
    bindings = subscription_bindings or {}

    for name in inputs:
        existing = bindings.get(name)
        if is_event_expression(existing):
            assert isinstance(existing, str)
            state[name] = BindingConfig(mode="event", value=strip_event_expression(existing))
            continue
        if existing is not None:
            value = existing if isinstance(existing, str) else json.dumps(existing, ensure_ascii=False)
            state[name] = BindingConfig(mode="literal", value=value)

    return state


def sanitize_event_expression(path: str) -> str:
    """Wrap a relative event path as `${event.<path>}`.

    Already wrapped expressions are returned unchanged. Empty input gives an
    empty string, which callers must omit.
    """

    trimmed = path.strip()
    if not trimmed:
        return ""
    if trimmed.startswith("${") and trimmed.endswith("}"):
        return trimmed
    if trimmed.startswith(EVENT_PREFIX):
        normalized = trimmed
    else:
        normalized = f"{EVENT_PREFIX}{_LEADING_DOTS_RE.sub('', trimmed, count=1)}"
    return "${" + normalized + "}"


def _format_number(number: int | float) -> str:
    if isinstance(number, float) and number.is_integer() and abs(number) < 1e21:
        return str(int(number))
    return repr(number) if isinstance(number, float) else str(number)


def _parse_exact_number(value: str) -> int | float | None:
    """Parse `value` only if its canonical rendering is exactly `value`."""

    try:
        as_int = int(value)
    except ValueError:
        as_int = None
    if as_int is not None and str(as_int) == value:
        return as_int

    try:
        as_float = float(value)
    except ValueError:
        return None
    if not math.isfinite(as_float):
        return None
    if _format_number(as_float) == value:
        return as_float
    return None


def _reject_constant(name: str) -> object:
    raise ValueError(f"Unsupported JSON constant: {name}")


def coerce_literal_value(raw_value: str) -> object:
    """Coerce an authored literal into a JSON value. Never raises.

    Returns one of: "", True, False, None, a number, a parsed JSON value, or the
    trimmed string when nothing else applies.
    """

    value = raw_value.strip()
    if not value:
        return ""
    if value == "true":
        return True
    if value == "false":
        return False
    if value == "null":
        return None

    number = _parse_exact_number(value)
    if number is not None:
        return number

    try:
        return json.loads(value, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return value


def build_bindings_payload(binding_state: Mapping[str, BindingConfig]) -> dict[str, object]:
    """Serialize binding state to the wire form persisted on a subscription.

    Entries with an empty value are omitted: an unbound input is absent from
    the payload rather than null.
    """

    payload: dict[str, object] = {}
    for name, config in binding_state.items():
        if config is None or not config.value:
            continue
        if config.mode == "event":
            expression = sanitize_event_expression(config.value)
            if expression:
                payload[name] = expression
            continue
        payload[name] = coerce_literal_value(config.value)
    return payload


def build_default_bindings(inputs: Mapping[str, WorkflowInputDefinition]) -> dict[str, object]:
    return build_bindings_payload(build_default_binding_state(inputs))


def update_binding_mode(state: BindingState, input_name: str, mode: BindingMode) -> BindingState:
    """Switch an input's binding mode.

    Switching to `event` keeps an existing event path (or falls back to
    `data.<name>`); switching to `literal` keeps an existing literal (or "").
    """

    current = state.get(input_name)
    if mode == "event":
        if current is not None and current.mode == "event":
            value = current.value
        else:
            value = default_event_path(input_name)
    else:
        value = current.value if current is not None and current.mode == "literal" else ""
    return {**state, input_name: BindingConfig(mode=mode, value=value)}


def update_binding_value(state: BindingState, input_name: str, value: str) -> BindingState:
    current = state.get(input_name)
    mode: BindingMode = current.mode if current is not None else "event"
    return {**state, input_name: BindingConfig(mode=mode, value=value)}


def quick_insert_binding(state: BindingState, input_name: str, path: str) -> BindingState:
    return {**state, input_name: BindingConfig(mode="event", value=path)}


def sync_binding_state(
    state: BindingState, inputs: Mapping[str, WorkflowInputDefinition]
) -> BindingState:
    """Keep binding keys in step with the current input set."""

    synced = {name: config for name, config in state.items() if name in inputs}
    for name in inputs:
        if name not in synced:
            synced[name] = default_binding(name)
    removed = sorted(set(state) - set(inputs))
    if removed:
        logger.debug("Dropped bindings for removed inputs", extra={"inputs": removed})
    return synced
