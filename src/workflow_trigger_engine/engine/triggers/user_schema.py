"""Free-form user schemas for webhook and form triggers.

A user schema is a flat JSON Schema object. The simple editor works on a list
of `SchemaField` rows; the advanced editor works on raw JSON text.
"""

from __future__ import annotations

import json
import re
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError

from .models import InputType
from .schema_utils import map_json_schema_type

FIELD_NAME_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


def generate_field_id() -> str:
    return f"field_{uuid.uuid4().hex}"


@dataclass(frozen=True, slots=True)
class SchemaField:
    """One row of the simple schema editor."""

    name: str = ""
    type: InputType = "string"
    description: str = ""
    required: bool = False
    id: str = field(default_factory=generate_field_id)


@dataclass(frozen=True, slots=True)
class SchemaCheck:
    valid: bool
    error: str | None = None
    schema: dict[str, Any] | None = None


def create_empty_schema() -> dict[str, Any]:
    return {"type": "object", "properties": {}, "additionalProperties": False}


def create_default_user_schema() -> dict[str, Any]:
    return {"type": "object", "properties": {}, "required": [], "additionalProperties": False}


def fields_to_json_schema(fields: Iterable[SchemaField]) -> dict[str, Any]:
    """Build a JSON Schema from editor rows. Rows with blank names are skipped."""

    properties: dict[str, Any] = {}
    required: list[str] = []
    for row in fields:
        name = row.name.strip()
        if not name:
            continue
        prop: dict[str, Any] = {"type": row.type}
        description = row.description.strip()
        if description:
            prop["description"] = description
        properties[name] = prop
        if row.required:
            required.append(name)

    schema: dict[str, Any] = {
        "type": "object",
        "properties": properties,
        "additionalProperties": False,
    }
    if required:
        schema["required"] = required
    return schema


def json_schema_to_fields(schema: Mapping[str, Any]) -> list[SchemaField]:
    """Best-effort conversion back to editor rows; nested schemas are flattened to their type."""

    properties = schema.get("properties")
    if not isinstance(properties, Mapping):
        return []
    required = schema.get("required")
    required_names = set(required) if isinstance(required, list) else set()

    fields: list[SchemaField] = []
    for name, definition in properties.items():
        if not isinstance(definition, Mapping):
            continue
        description = definition.get("description")
        fields.append(
            SchemaField(
                name=name,
                type=map_json_schema_type(definition.get("type")),
                description=description if isinstance(description, str) else "",
                required=name in required_names,
            )
        )
    return fields


def validate_field_name(name: str) -> SchemaCheck:
    trimmed = name.strip()
    if not trimmed:
        return SchemaCheck(valid=False, error="Field name is required")
    if not FIELD_NAME_RE.match(trimmed):
        return SchemaCheck(
            valid=False,
            error=(
                "Field name must start with a letter or underscore and contain only "
                "letters, numbers, and underscores"
            ),
        )
    return SchemaCheck(valid=True)


def validate_json_schema(text: str) -> SchemaCheck:
    """Parse and check schema text from the advanced editor."""

    if not text.strip():
        return SchemaCheck(valid=False, error="Schema cannot be empty")

    try:
        parsed = json.loads(text)
    except ValueError as e:
        return SchemaCheck(valid=False, error=f"Invalid JSON: {e}")

    if not isinstance(parsed, dict):
        return SchemaCheck(valid=False, error="Schema must be a JSON object")
    if parsed.get("type") != "object":
        return SchemaCheck(valid=False, error='Schema type must be "object"')
    if "properties" in parsed and not isinstance(parsed["properties"], dict):
        return SchemaCheck(valid=False, error="Schema properties must be an object")

    try:
        Draft7Validator.check_schema(parsed)
    except SchemaError as e:
        return SchemaCheck(valid=False, error=f"Invalid JSON Schema: {e.message}")

    return SchemaCheck(valid=True, schema=parsed)


def schema_errors(instance: object, schema: Mapping[str, Any] | None) -> list[str]:
    """Messages for every way `instance` fails `schema`; empty when it conforms."""

    if not schema:
        return []
    validator = Draft7Validator(dict(schema))
    return [error.message for error in validator.iter_errors(instance)]
