"""In-memory registry of unsaved trigger drafts, grouped by workflow."""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Mapping
from typing import Any

from ..errors import DraftNotFoundError
from ..legacy import legacy_defaults_for_key
from .bindings import build_default_binding_state
from .models import BindingState, TriggerDraft, WorkflowInputDefinition

logger = logging.getLogger(__name__)


def new_draft_id() -> str:
    return f"draft-{uuid.uuid4().hex}"


class DraftRegistry:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._drafts: dict[str, list[TriggerDraft]] = {}

    def add(
        self,
        workflow_id: str,
        trigger_key: str,
        *,
        inputs: Mapping[str, WorkflowInputDefinition] | None = None,
        initial_bindings: BindingState | None = None,
        initial_provider_config: dict[str, Any] | None = None,
    ) -> TriggerDraft:
        """Create a draft.

        Without explicit initial values, bindings default to `data.<name>` for
        every workflow input and legacy triggers get their form defaults.
        """

        if initial_bindings is None and inputs is not None:
            initial_bindings = build_default_binding_state(inputs)
        if initial_provider_config is None:
            initial_provider_config = legacy_defaults_for_key(trigger_key)

        draft = TriggerDraft(
            id=new_draft_id(),
            trigger_key=trigger_key,
            workflow_id=workflow_id,
            initial_bindings=initial_bindings,
            initial_provider_config=initial_provider_config,
        )
        with self._lock:
            self._drafts.setdefault(workflow_id, []).append(draft)

        logger.info(
            "Added trigger draft",
            extra={"workflow_id": workflow_id, "draft_id": draft.id, "trigger_key": trigger_key},
        )
        return draft

    def list(self, workflow_id: str) -> list[TriggerDraft]:
        with self._lock:
            return list(self._drafts.get(workflow_id, []))

    def get(self, workflow_id: str, draft_id: str) -> TriggerDraft:
        with self._lock:
            for draft in self._drafts.get(workflow_id, []):
                if draft.id == draft_id:
                    return draft
        raise DraftNotFoundError(draft_id)

    def find(self, draft_id: str) -> TriggerDraft | None:
        with self._lock:
            for drafts in self._drafts.values():
                for draft in drafts:
                    if draft.id == draft_id:
                        return draft
        return None

    def discard(self, workflow_id: str, draft_id: str) -> bool:
        with self._lock:
            drafts = self._drafts.get(workflow_id, [])
            remaining = [d for d in drafts if d.id != draft_id]
            self._drafts[workflow_id] = remaining
            removed = len(remaining) != len(drafts)
        if removed:
            logger.info("Discarded trigger draft", extra={"workflow_id": workflow_id, "draft_id": draft_id})
        return removed

    def discard_by_id(self, draft_id: str) -> bool:
        draft = self.find(draft_id)
        if draft is None or draft.workflow_id is None:
            return False
        return self.discard(draft.workflow_id, draft_id)

    def clear(self, workflow_id: str) -> None:
        with self._lock:
            self._drafts.pop(workflow_id, None)
