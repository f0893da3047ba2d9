"""Schema-driven provider configuration.

ConfigValues hold raw authored values (typically strings from form fields).
They are coerced to the types declared by the descriptor's config schema only
when serialized, and required fields are checked after serialization.
"""

from __future__ import annotations

import json
import logging
import math
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from ..errors import ConfigValidationError
from .models import TriggerDraft, TriggerSubscription

logger = logging.getLogger(__name__)

ConfigSchema = Mapping[str, Any]
ConfigValues = dict[str, Any]

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")
_LEADING_FLOAT_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_WORD_START_RE = re.compile(r"\b\w")


def format_field_label(name: str) -> str:
    """`max_results` -> `Max Results`."""

    return " ".join(word[:1].upper() + word[1:] for word in name.split("_"))


def _required_label(name: str) -> str:
    return _WORD_START_RE.sub(lambda m: m.group(0).upper(), name.replace("_", " "))


def _properties(schema: ConfigSchema | None) -> dict[str, Any] | None:
    if not isinstance(schema, Mapping):
        return None
    properties = schema.get("properties")
    if not isinstance(properties, Mapping):
        return None
    return dict(properties)


def _required_names(schema: ConfigSchema | None) -> list[str]:
    if not isinstance(schema, Mapping):
        return []
    required = schema.get("required")
    if not isinstance(required, list):
        return []
    return [name for name in required if isinstance(name, str)]


def is_required_field(schema: ConfigSchema | None, name: str) -> bool:
    return name in _required_names(schema)


def stringify_config_value(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


@dataclass(frozen=True, slots=True)
class ConfigField:
    """One renderable field of a config schema."""

    name: str
    definition: dict[str, Any] = field(default_factory=dict)
    required: bool = False

    @property
    def label(self) -> str:
        return format_field_label(self.name)

    @property
    def placeholder(self) -> str | None:
        definition = self.definition
        if "default" in definition:
            return f"Default: {stringify_config_value(definition['default'])}"
        if definition.get("pattern"):
            return f"Pattern: {definition['pattern']}"
        if "minimum" in definition and "maximum" in definition:
            return f"{definition['minimum']} - {definition['maximum']}"
        return None


def extract_fields_from_schema(schema: ConfigSchema | None) -> list[ConfigField]:
    properties = _properties(schema)
    if properties is None:
        return []
    required = set(_required_names(schema))
    return [
        ConfigField(
            name=name,
            definition=dict(definition) if isinstance(definition, Mapping) else {},
            required=name in required,
        )
        for name, definition in properties.items()
    ]


def extract_defaults_from_schema(schema: ConfigSchema | None) -> ConfigValues:
    properties = _properties(schema)
    if properties is None:
        return {}
    return {
        name: definition["default"]
        for name, definition in properties.items()
        if isinstance(definition, Mapping) and "default" in definition
    }


def build_initial_config_values(
    schema: ConfigSchema | None,
    subscription: TriggerSubscription | None = None,
    draft: TriggerDraft | None = None,
) -> ConfigValues:
    """Schema defaults overlaid by the subscription's config, else the draft's.

    Only one source is consulted: a subscription with a provider config
    outranks any draft.
    """

    values = extract_defaults_from_schema(schema)
    if subscription is not None and subscription.provider_config:
        values.update(subscription.provider_config)
    elif draft is not None and draft.initial_provider_config:
        values.update(draft.initial_provider_config)
    return values


def _fallback(default: object) -> object:
    return 0 if default is None else default


def _parse_int(text: str) -> int | None:
    # int() refuses digit strings past the interpreter's conversion limit.
    try:
        return int(text)
    except ValueError:
        return None


def _coerce_integer(value: object, default: object) -> object:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else _fallback(default)
    if isinstance(value, str):
        match = _LEADING_INT_RE.match(value)
        number = _parse_int(match.group(1)) if match else None
        return _fallback(default) if number is None else number
    return _fallback(default)


def _coerce_number(value: object, default: object) -> object:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else _fallback(default)
    if isinstance(value, str):
        match = _LEADING_FLOAT_RE.match(value)
        if match is None:
            return _fallback(default)
        text = match.group(1)
        if text.lstrip("+-").isdigit():
            whole = _parse_int(text)
            return _fallback(default) if whole is None else whole
        number = float(text)
        return number if math.isfinite(number) else _fallback(default)
    return _fallback(default)


def _coerce_boolean(value: object) -> bool:
    if isinstance(value, str):
        return value == "true"
    return bool(value)


def _parse_json(value: str) -> object:
    try:
        return json.loads(value)
    except ValueError:
        return None


def _coerce_array(value: object) -> list[Any]:
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        parsed = _parse_json(value)
        return parsed if isinstance(parsed, list) else []
    return []


def _coerce_object(value: object) -> dict[str, Any]:
    if isinstance(value, dict):
        return value
    if isinstance(value, str):
        parsed = _parse_json(value)
        return parsed if isinstance(parsed, dict) else {}
    return {}


def coerce_value_for_schema(value: object, schema: ConfigSchema | None, key: str) -> object:
    """Coerce one authored value to the type its schema property declares.

    Malformed input never raises; it falls back to the field default (numbers)
    or an empty container (arrays, objects).
    """

    properties = _properties(schema)
    if properties is None:
        return value
    definition = properties.get(key)
    if not isinstance(definition, Mapping):
        return value

    declared = definition.get("type")
    primary = declared[0] if isinstance(declared, list) and declared else declared
    default = definition.get("default")

    if primary == "integer":
        return _coerce_integer(value, default)
    if primary == "number":
        return _coerce_number(value, default)
    if primary == "boolean":
        return _coerce_boolean(value)
    if primary == "array":
        return _coerce_array(value)
    if primary == "object":
        return _coerce_object(value)
    return stringify_config_value(value)


def serialize_config(config_values: Mapping[str, Any], schema: ConfigSchema | None) -> ConfigValues:
    """Coerce ConfigValues for persistence.

    `None` values are dropped, as are blank optional fields. A blank required
    field is kept as `""` without coercion so `validate_required` reports it.
    """

    serialized: ConfigValues = {}
    for key, value in config_values.items():
        if value is None:
            continue
        if value == "":
            if is_required_field(schema, key):
                serialized[key] = ""
            continue
        serialized[key] = coerce_value_for_schema(value, schema, key)
    return serialized


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    ok: bool
    missing: list[str] = field(default_factory=list)
    message: str = ""

    def raise_for_missing(self) -> None:
        if not self.ok:
            raise ConfigValidationError(self.message, self.missing)


def validate_required(
    serialized: Mapping[str, Any],
    schema: ConfigSchema | None,
    *,
    stop_at_first: bool = True,
) -> ConfigValidationResult:
    """Check that every required field has a value.

    A field is missing when it is absent, None or "". The message names the
    first missing field.
    """

    missing: list[str] = []
    for name in _required_names(schema):
        value = serialized.get(name)
        if value is None or value == "":
            missing.append(name)
            if stop_at_first:
                break

    if not missing:
        return ConfigValidationResult(ok=True)

    message = f"{_required_label(missing[0])} is required"
    logger.debug("Config validation failed", extra={"missing": missing})
    return ConfigValidationResult(ok=False, missing=missing, message=message)


class ConfigValuesEditor:
    """Holds the ConfigValues of one editing session.

    The initial values are re-derived from the sources on `reset`; edits never
    touch the sources themselves.
    """

    def __init__(
        self,
        schema: ConfigSchema | None,
        subscription: TriggerSubscription | None = None,
        draft: TriggerDraft | None = None,
    ) -> None:
        self.schema = schema
        self._subscription = subscription
        self._draft = draft
        self._values = build_initial_config_values(schema, subscription, draft)

    @property
    def values(self) -> ConfigValues:
        return dict(self._values)

    @property
    def fields(self) -> list[ConfigField]:
        return extract_fields_from_schema(self.schema)

    def get(self, key: str, default: object = None) -> object:
        return self._values.get(key, default)

    def set_value(self, key: str, value: object) -> None:
        self._values = {**self._values, key: value}

    def set_values(self, values: Mapping[str, Any]) -> None:
        self._values = {**self._values, **values}

    def reset(self) -> None:
        self._values = build_initial_config_values(self.schema, self._subscription, self._draft)

    def serialize(self) -> ConfigValues:
        return serialize_config(self._values, self.schema)

    def validate(self, *, stop_at_first: bool = True) -> ConfigValidationResult:
        return validate_required(self.serialize(), self.schema, stop_at_first=stop_at_first)

    def require_valid(self) -> ConfigValues:
        """Serialize and raise ConfigValidationError when required fields are missing."""

        serialized = self.serialize()
        validate_required(serialized, self.schema).raise_for_missing()
        return serialized
