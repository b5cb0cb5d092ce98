"""Builds a reconciliation engine from configuration and runs passes of it."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from onedrive_mirror.graph.client import graph_client_from_config
from onedrive_mirror.graph.delta import delta_feed_from_config
from onedrive_mirror.graph.items import GraphItemFetcher, resolve_download
from onedrive_mirror.reconcile.engine import DeltaEngine

if TYPE_CHECKING:
    from onedrive_mirror.config import AppConfig
    from onedrive_mirror.reconcile.models import SyncAction

logger = logging.getLogger(__name__)


def delta_engine_from_config(config: AppConfig, follow: bool = True) -> DeltaEngine:
    """Construct a DeltaEngine wired to Microsoft Graph.

    Args:
        config: Application configuration instance.
        follow: Keep polling the delta feeds. When False every feed ends once
            it has caught up and the engine's stream ends with them.

    Returns:
        Configured DeltaEngine instance.
    """
    client = graph_client_from_config(config)
    return DeltaEngine(
        feed=delta_feed_from_config(config, follow=follow),
        fetcher=GraphItemFetcher(),
        credential=client,
        download_resolver=resolve_download,
    )


async def reconcile_once(engine: DeltaEngine) -> list[SyncAction]:
    """Drain a non-following engine and return every action it emitted.

    Returns:
        Actions in the order they were produced.
    """
    logger.info("[reconcile_once] starting reconciliation pass")
    actions = [action async for action in engine.stream()]
    logger.info(
        "[reconcile_once] pass complete; action_count:%d;tracked:%d",
        len(actions),
        len(engine.state),
    )
    return actions
