"""Feed workers that pump delta entries into the engine's shared queue."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncGenerator, Coroutine
from contextlib import aclosing
from dataclasses import dataclass
from typing import Any

from onedrive_mirror.reconcile.models import Namespace, RawEntry
from onedrive_mirror.reconcile.state import NamespaceSubscription

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedEntry:
    """An entry delivered by a feed, tagged with its shared folder if any."""

    entry: RawEntry
    namespace: Namespace | None = None
    subscription: NamespaceSubscription | None = None


@dataclass(frozen=True)
class FeedClosed:
    """A feed worker finished or was cancelled. Key is None for the main feed."""

    key: str | None


@dataclass(frozen=True)
class FeedFailed:
    key: str | None
    error: BaseException


FeedMessage = FeedEntry | FeedClosed | FeedFailed


async def pump(
    queue: asyncio.Queue[FeedMessage],
    entries: AsyncGenerator[RawEntry, None],
    namespace: Namespace | None = None,
    subscription: NamespaceSubscription | None = None,
) -> None:
    """Forward every entry of a feed into the queue, in feed order."""
    async with aclosing(entries):
        async for entry in entries:
            if subscription is not None and subscription.cancelled:
                break
            await queue.put(FeedEntry(entry, namespace, subscription))


def start_worker(
    queue: asyncio.Queue[FeedMessage],
    key: str | None,
    body: Coroutine[Any, Any, None],
) -> asyncio.Task[None]:
    """Run a feed coroutine as a task that always reports how it ended.

    The outcome is posted from a done callback so that a task cancelled
    before it ever ran still closes its slot in the engine.
    """
    task = asyncio.create_task(body, name=f"delta-feed:{key or 'root'}")

    def _report(done: asyncio.Task[None]) -> None:
        if done.cancelled():
            queue.put_nowait(FeedClosed(key))
            return
        error = done.exception()
        if error is not None:
            logger.error("[start_worker] feed failed; key:%s;error:%s", key, error)
            queue.put_nowait(FeedFailed(key, error))
        else:
            queue.put_nowait(FeedClosed(key))

    task.add_done_callback(_report)
    return task
