"""Unit tests for reconcile/state.py — tracked items and subscriptions."""

import asyncio
from unittest.mock import MagicMock

import pytest

from onedrive_mirror.reconcile.state import NamespaceSubscription, ReconciliationState


class TestTrackedItems:
    def test_track_and_get(self) -> None:
        state = ReconciliationState()
        state.track("a", "Docs/a.txt", "h1")

        item = state.get("a")

        assert item is not None
        assert item.name == "Docs/a.txt"
        assert item.hash == "h1"
        assert "a" in state
        assert len(state) == 1

    def test_forget_removes_item(self) -> None:
        state = ReconciliationState()
        state.track("a", "a.txt", None)

        forgotten = state.forget("a")

        assert forgotten is not None
        assert state.get("a") is None
        assert state.forget("a") is None

    def test_find_by_hash_ignores_none(self) -> None:
        state = ReconciliationState()
        state.track("a", "a.txt", None)

        assert state.find_by_hash(None) is None

    def test_find_by_hash_excludes_self(self) -> None:
        state = ReconciliationState()
        state.track("a", "a.txt", "h")

        assert state.find_by_hash("h", exclude="a") is None

    def test_retracking_keeps_first_tracked_order(self) -> None:
        state = ReconciliationState()
        state.track("a", "a.txt", "h")
        state.track("b", "b.txt", "h")
        state.track("a", "renamed.txt", "h")

        match = state.find_by_hash("h")

        assert match is not None
        assert match.name == "renamed.txt"


class TestSubscriptions:
    def test_reserve_is_idempotent(self) -> None:
        state = ReconciliationState()

        first = state.reserve("ns")
        second = state.reserve("ns")

        assert first is not None
        assert second is None
        assert state.is_subscribed("ns")
        assert state.subscription("ns") is first

    def test_release_cancels_and_removes(self) -> None:
        state = ReconciliationState()
        subscription = state.reserve("ns")
        assert subscription is not None
        subscription.task = MagicMock()
        subscription.task.done.return_value = False

        assert state.release("ns") is True

        assert subscription.cancelled
        subscription.task.cancel.assert_called_once()
        assert not state.is_subscribed("ns")
        assert state.release("ns") is False

    def test_release_allows_new_reservation(self) -> None:
        state = ReconciliationState()
        state.reserve("ns")
        state.release("ns")

        assert state.reserve("ns") is not None

    def test_cancel_all(self) -> None:
        state = ReconciliationState()
        subs = [state.reserve("a"), state.reserve("b")]

        state.cancel_all()

        assert all(s is not None and s.cancelled for s in subs)
        assert state.active_subscriptions() == []

    @pytest.mark.asyncio
    async def test_cancel_stops_running_task(self) -> None:
        subscription = NamespaceSubscription(namespace_id="ns")
        subscription.task = asyncio.create_task(asyncio.sleep(60))

        subscription.cancel()

        with pytest.raises(asyncio.CancelledError):
            await subscription.task
        assert subscription.cancel_event.is_set()
