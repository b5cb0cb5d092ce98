"""Shared-folder discovery and nested delta subscriptions."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from onedrive_mirror.graph.models import (
    FIELD_DELETED,
    FIELD_DRIVE_ID,
    FIELD_ID,
    FIELD_NAME,
    FIELD_PARENT_REFERENCE,
    FIELD_REMOTE_ITEM,
)
from onedrive_mirror.reconcile.feeds import FeedMessage, pump, start_worker
from onedrive_mirror.reconcile.models import ChangeFeed, ItemFetcher, Namespace, RawEntry
from onedrive_mirror.reconcile.state import NamespaceSubscription, ReconciliationState

logger = logging.getLogger(__name__)


class NamespaceResolver:
    """Opens one nested delta feed per shared folder seen on the main feed."""

    def __init__(
        self,
        state: ReconciliationState,
        feed: ChangeFeed,
        fetcher: ItemFetcher,
        credential: Any = None,
    ) -> None:
        self._state = state
        self._feed = feed
        self._fetcher = fetcher
        self._credential = credential

    def should_open(self, entry: RawEntry) -> bool:
        """True for a live shared-folder link that has no subscription yet."""
        return (
            FIELD_DELETED not in entry
            and FIELD_REMOTE_ITEM in entry
            and not self._state.is_subscribed(entry.get(FIELD_ID, ""))
        )

    def open(
        self, entry: RawEntry, queue: asyncio.Queue[FeedMessage]
    ) -> NamespaceSubscription | None:
        """Reserve the shared folder and start pumping its nested feed.

        The reservation is taken before anything is awaited so that a second
        link entry for the same folder arriving while the metadata fetch is
        in flight cannot open a duplicate feed.

        Returns:
            The new subscription, or None if the folder was already reserved.
        """
        namespace_id = entry[FIELD_ID]
        subscription = self._state.reserve(namespace_id)
        if subscription is None:
            return None
        subscription.task = start_worker(
            queue, namespace_id, self._run(entry, subscription, queue)
        )
        logger.info(
            "[open] subscribing to shared folder; namespace_id:%s;name:%s",
            namespace_id,
            entry.get(FIELD_NAME, ""),
        )
        return subscription

    async def _run(
        self,
        entry: RawEntry,
        subscription: NamespaceSubscription,
        queue: asyncio.Queue[FeedMessage],
    ) -> None:
        remote = entry[FIELD_REMOTE_ITEM]
        drive_id = (remote.get(FIELD_PARENT_REFERENCE) or {}).get(FIELD_DRIVE_ID)
        item_id = remote[FIELD_ID]

        root = await self._fetcher.fetch(self._credential, drive_id, item_id)
        namespace = Namespace(id=entry[FIELD_ID], name=entry.get(FIELD_NAME, ""), root=root)
        logger.info(
            "[_run] resolved shared folder; namespace_id:%s;drive_id:%s;item_id:%s",
            namespace.id,
            drive_id,
            item_id,
        )

        entries = self._feed.open(
            self._credential,
            drive_id=drive_id,
            item_id=item_id,
            cancel=subscription.cancel_event,
        )
        await pump(queue, entries, namespace=namespace, subscription=subscription)
