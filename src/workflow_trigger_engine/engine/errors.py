"""Error types raised by the trigger engine.

Parse fallbacks (malformed literals, malformed array/object config values) are
not errors and never raise. Persistence errors are never wrapped.
"""

from __future__ import annotations


class TriggerEngineError(Exception):
    """Base class for trigger engine errors."""


class ConfigValidationError(TriggerEngineError):
    """Raised when required provider-config fields are missing."""

    def __init__(self, message: str, missing: list[str] | None = None) -> None:
        self.message = message
        self.missing = list(missing or [])
        super().__init__(message)


class InputValidationError(TriggerEngineError, ValueError):
    """Raised when a workflow input edit is rejected."""


class UnknownTriggerError(TriggerEngineError, KeyError):
    """Raised when a trigger key is not registered in the catalog."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(key)

    def __str__(self) -> str:
        return f"Trigger '{self.key}' is not registered"


class DraftNotFoundError(TriggerEngineError, KeyError):
    """Raised when a draft id is not known to the draft registry."""

    def __init__(self, draft_id: str) -> None:
        self.draft_id = draft_id
        super().__init__(draft_id)

    def __str__(self) -> str:
        return f"Draft trigger {self.draft_id} not found"


class SaveInProgressError(TriggerEngineError):
    """Raised when a save is submitted while another is in flight for the same trigger."""

    def __init__(self, entity_key: str) -> None:
        self.entity_key = entity_key
        super().__init__(f"A save is already in progress for {entity_key}")
