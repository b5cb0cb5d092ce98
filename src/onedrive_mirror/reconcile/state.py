"""In-memory reconciliation state shared by the resolver and classifier."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from onedrive_mirror.reconcile.models import TrackedItem

logger = logging.getLogger(__name__)


@dataclass
class NamespaceSubscription:
    """Cancellation handle for one shared folder's nested delta feed."""

    namespace_id: str
    cancel_event: asyncio.Event = field(default_factory=asyncio.Event)
    task: asyncio.Task[None] | None = None

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def cancel(self) -> None:
        """Signal the feed to stop and cancel the worker pumping it."""
        self.cancel_event.set()
        if self.task is not None and not self.task.done():
            self.task.cancel()


class ReconciliationState:
    """Known items and live shared-folder subscriptions for one pipeline.

    Items are kept in first-tracked order. Re-tracking an id updates it in
    place, so ``find_by_hash`` always prefers the item tracked earliest.
    """

    def __init__(self) -> None:
        self._items: dict[str, TrackedItem] = {}
        self._subscriptions: dict[str, NamespaceSubscription] = {}

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def __len__(self) -> int:
        return len(self._items)

    def get(self, item_id: str) -> TrackedItem | None:
        return self._items.get(item_id)

    def track(self, item_id: str, name: str, content_hash: str | None) -> None:
        existing = self._items.get(item_id)
        if existing is None:
            self._items[item_id] = TrackedItem(name=name, hash=content_hash)
        else:
            existing.name = name
            existing.hash = content_hash

    def forget(self, item_id: str) -> TrackedItem | None:
        return self._items.pop(item_id, None)

    def find_by_hash(
        self, content_hash: str | None, exclude: str | None = None
    ) -> TrackedItem | None:
        """Return the earliest-tracked item with this fingerprint, if any."""
        if content_hash is None:
            return None
        for item_id, item in self._items.items():
            if item_id != exclude and item.hash == content_hash:
                return item
        return None

    # ------------------------------------------------------------------
    # Shared-folder subscriptions
    # ------------------------------------------------------------------

    def is_subscribed(self, namespace_id: str) -> bool:
        return namespace_id in self._subscriptions

    def subscription(self, namespace_id: str) -> NamespaceSubscription | None:
        return self._subscriptions.get(namespace_id)

    def reserve(self, namespace_id: str) -> NamespaceSubscription | None:
        """Reserve a subscription slot; None if one is already held."""
        if namespace_id in self._subscriptions:
            return None
        subscription = NamespaceSubscription(namespace_id=namespace_id)
        self._subscriptions[namespace_id] = subscription
        return subscription

    def release(self, namespace_id: str) -> bool:
        """Cancel and drop a namespace subscription. True if one was held."""
        subscription = self._subscriptions.pop(namespace_id, None)
        if subscription is None:
            return False
        subscription.cancel()
        logger.info("[release] cancelled shared folder feed; namespace_id:%s", namespace_id)
        return True

    def cancel_all(self) -> None:
        for namespace_id in list(self._subscriptions):
            self.release(namespace_id)

    def active_subscriptions(self) -> list[NamespaceSubscription]:
        return list(self._subscriptions.values())
