"""Workflow input editing next to a trigger's bindings.

These functions return the next input map; the caller hands it to the
workflow's input-update collaborator and then re-syncs binding state.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

from ..errors import InputValidationError
from .models import InputType, WorkflowInputDefinition

INPUT_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def create_workflow_input(
    name: str,
    inputs: Mapping[str, WorkflowInputDefinition] | None,
    *,
    type: InputType = "string",
    required: bool = False,
    description: str = "",
) -> dict[str, WorkflowInputDefinition]:
    trimmed = name.strip()
    if not trimmed:
        raise InputValidationError("Input name is required")
    if not INPUT_NAME_RE.match(trimmed):
        raise InputValidationError("Use letters, numbers, or underscores (no spaces) for input names")
    existing = dict(inputs or {})
    if trimmed in existing:
        raise InputValidationError("An input with this name already exists")

    existing[trimmed] = WorkflowInputDefinition(
        name=trimmed,
        type=type,
        required=required,
        description=description.strip() or None,
    )
    return existing


def remove_workflow_input(
    name: str, inputs: Mapping[str, WorkflowInputDefinition] | None
) -> dict[str, WorkflowInputDefinition]:
    return {key: value for key, value in (inputs or {}).items() if key != name}
