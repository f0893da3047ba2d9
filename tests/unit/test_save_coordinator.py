"""Unit tests for save execution against persistence (mocked)."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from workflow_trigger_engine.engine.errors import SaveInProgressError
from workflow_trigger_engine.engine.triggers.drafts import DraftRegistry
from workflow_trigger_engine.engine.triggers.models import (
    BindingConfig,
    DraftSaveBody,
    DraftSavePayload,
    SubscriptionSaveBody,
    SubscriptionSavePayload,
    TriggerSubscription,
)
from workflow_trigger_engine.engine.triggers.save import TriggerPersistence, TriggerSaveCoordinator


def _draft_payload(draft_id: str) -> DraftSavePayload:
    return DraftSavePayload(
        draft_id=draft_id,
        body=DraftSaveBody(
            trigger_key="webhook.generic",
            bindings={"a": BindingConfig(mode="event", value="data.a")},
            provider_config={"user_schema": {"type": "object"}},
        ),
    )


def _subscription_payload() -> SubscriptionSavePayload:
    return SubscriptionSavePayload(
        subscription_id=5,
        body=SubscriptionSaveBody(bindings={"a": "${event.data.a}"}, provider_config=None),
    )


def test_draft_save_sends_body_and_discards_draft() -> None:
    drafts = DraftRegistry()
    draft = drafts.add("wf-1", "webhook.generic")
    persistence = Mock(spec=TriggerPersistence)
    coordinator = TriggerSaveCoordinator(persistence, drafts)

    coordinator.save(_draft_payload(draft.id))

    persistence.save_draft.assert_called_once_with(
        draft.id,
        {
            "triggerKey": "webhook.generic",
            "bindings": {"a": {"mode": "event", "value": "data.a"}},
            "providerConfig": {"user_schema": {"type": "object"}},
        },
    )
    assert drafts.list("wf-1") == []


def test_subscription_save_sends_wire_body() -> None:
    persistence = Mock(spec=TriggerPersistence)
    coordinator = TriggerSaveCoordinator(persistence)

    coordinator.save(_subscription_payload())

    persistence.update_subscription.assert_called_once_with(5, {"bindings": {"a": "${event.data.a}"}})
    persistence.save_draft.assert_not_called()


def test_overlapping_save_is_rejected() -> None:
    persistence = Mock(spec=TriggerPersistence)
    coordinator = TriggerSaveCoordinator(persistence)
    payload = _subscription_payload()

    def _reenter(subscription_id: int, body: dict[str, object]) -> None:
        assert coordinator.is_saving("subscription:5")
        coordinator.save(payload)

    persistence.update_subscription.side_effect = _reenter

    with pytest.raises(SaveInProgressError):
        coordinator.save(payload)

    assert persistence.update_subscription.call_count == 1
    assert not coordinator.is_saving("subscription:5")


def test_saves_for_different_triggers_do_not_block_each_other() -> None:
    persistence = Mock(spec=TriggerPersistence)
    coordinator = TriggerSaveCoordinator(persistence)

    def _save_other(subscription_id: int, body: dict[str, object]) -> None:
        coordinator.save(_draft_payload("draft-other"))

    persistence.update_subscription.side_effect = _save_other

    coordinator.save(_subscription_payload())

    persistence.save_draft.assert_called_once()


def test_persistence_errors_propagate_unchanged() -> None:
    persistence = Mock(spec=TriggerPersistence)
    persistence.save_draft.side_effect = RuntimeError("backend unavailable")
    drafts = DraftRegistry()
    draft = drafts.add("wf-1", "webhook.generic")
    coordinator = TriggerSaveCoordinator(persistence, drafts)

    with pytest.raises(RuntimeError, match="backend unavailable"):
        coordinator.save(_draft_payload(draft.id))

    assert persistence.save_draft.call_count == 1
    assert drafts.list("wf-1") == [draft]
    assert not coordinator.is_saving(f"draft:{draft.id}")


def test_toggle_is_a_no_op_for_drafts() -> None:
    persistence = Mock(spec=TriggerPersistence)
    coordinator = TriggerSaveCoordinator(persistence)

    assert coordinator.toggle(None, True) is False
    persistence.toggle_subscription.assert_not_called()


def test_toggle_subscription() -> None:
    persistence = Mock(spec=TriggerPersistence)
    coordinator = TriggerSaveCoordinator(persistence)
    subscription = TriggerSubscription(subscription_id=9, trigger_key="schedule.cron")

    assert coordinator.toggle(subscription, False) is True
    persistence.toggle_subscription.assert_called_once_with(9, False)


def test_delete_draft_discards_locally() -> None:
    persistence = Mock(spec=TriggerPersistence)
    drafts = DraftRegistry()
    draft = drafts.add("wf-1", "schedule.cron")
    coordinator = TriggerSaveCoordinator(persistence, drafts)

    assert coordinator.delete(None, draft) is True

    assert drafts.list("wf-1") == []
    persistence.delete_subscription.assert_not_called()


def test_delete_subscription_calls_persistence() -> None:
    persistence = Mock(spec=TriggerPersistence)
    coordinator = TriggerSaveCoordinator(persistence)
    subscription = TriggerSubscription(subscription_id=4, trigger_key="schedule.cron")

    assert coordinator.delete(subscription, None) is True
    persistence.delete_subscription.assert_called_once_with(4)


def test_delete_errors_propagate() -> None:
    persistence = Mock(spec=TriggerPersistence)
    persistence.delete_subscription.side_effect = ValueError("nope")
    coordinator = TriggerSaveCoordinator(persistence)
    subscription = TriggerSubscription(subscription_id=4, trigger_key="schedule.cron")

    with pytest.raises(ValueError, match="nope"):
        coordinator.delete(subscription, None)


def test_delete_without_target_does_nothing() -> None:
    persistence = Mock(spec=TriggerPersistence)
    coordinator = TriggerSaveCoordinator(persistence)

    assert coordinator.delete(None, None) is False
