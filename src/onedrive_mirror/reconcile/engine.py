"""Delta reconciliation engine: feeds in, classified sync actions out."""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from collections.abc import AsyncGenerator
from typing import Any

from onedrive_mirror.reconcile.classifier import ActionClassifier
from onedrive_mirror.reconcile.feeds import (
    FeedClosed,
    FeedEntry,
    FeedFailed,
    FeedMessage,
    pump,
    start_worker,
)
from onedrive_mirror.reconcile.models import (
    ActionKind,
    ChangeFeed,
    DownloadResolver,
    ItemFetcher,
    SyncAction,
)
from onedrive_mirror.reconcile.namespace import NamespaceResolver
from onedrive_mirror.reconcile.state import ReconciliationState

logger = logging.getLogger(__name__)


class DeltaEngine:
    """Merges the main delta feed and every shared-folder feed into actions.

    Each feed runs in its own task and writes into one queue; the engine is
    the only consumer and the only writer of the reconciliation state. Order
    is preserved within a feed but not across feeds.
    """

    def __init__(
        self,
        feed: ChangeFeed,
        fetcher: ItemFetcher,
        credential: Any = None,
        download_resolver: DownloadResolver | None = None,
        state: ReconciliationState | None = None,
    ) -> None:
        """Initialise the engine.

        Args:
            feed: Delta feed source, opened once for the drive root and once
                per shared folder.
            fetcher: Resolves a shared folder's full metadata.
            credential: Opaque credential handed to every collaborator.
            download_resolver: Invoked lazily by emitted download handles.
            state: Reconciliation state; a fresh one is created if omitted.
        """
        self._feed = feed
        self._credential = credential
        self.state = state if state is not None else ReconciliationState()
        self._resolver = NamespaceResolver(self.state, feed, fetcher, credential)
        self._classifier = ActionClassifier(self.state, credential, download_resolver)
        self.stats: Counter[ActionKind] = Counter()

    async def stream(self) -> AsyncGenerator[SyncAction, None]:
        """Yield one action per delivered entry until every feed has ended.

        Raises:
            Exception: Whatever a feed or metadata fetch raised. Closing the
                stream or a failure cancels all shared-folder feeds.
        """
        queue: asyncio.Queue[FeedMessage] = asyncio.Queue()
        main = start_worker(queue, None, pump(queue, self._feed.open(self._credential)))
        live = 1
        logger.info("[stream] reconciliation started")
        try:
            while live:
                message = await queue.get()
                if isinstance(message, FeedClosed):
                    live -= 1
                    logger.info("[stream] feed closed; key:%s;live:%d", message.key, live)
                    continue
                if isinstance(message, FeedFailed):
                    raise message.error
                if _from_cancelled_feed(message):
                    continue
                if message.namespace is None and self._resolver.should_open(message.entry):
                    if self._resolver.open(message.entry, queue) is not None:
                        live += 1
                action = self._classifier.classify(message.entry, message.namespace)
                self.stats[action.action] += 1
                yield action
        finally:
            workers = [main, *(s.task for s in self.state.active_subscriptions() if s.task)]
            main.cancel()
            self.state.cancel_all()
            await asyncio.gather(*workers, return_exceptions=True)
            logger.info(
                "[stream] reconciliation stopped; tracked:%d;actions:%s",
                len(self.state),
                dict(self.stats),
            )


def _from_cancelled_feed(message: FeedEntry) -> bool:
    """True for an entry queued by a shared-folder feed since cancelled."""
    if message.subscription is None or not message.subscription.cancelled:
        return False
    logger.debug(
        "[stream] dropping entry from cancelled feed; namespace_id:%s",
        message.subscription.namespace_id,
    )
    return True
