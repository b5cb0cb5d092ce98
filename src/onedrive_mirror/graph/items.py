"""Single-item lookups: shared folder metadata and download URLs."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from onedrive_mirror.graph.client import GraphClient
from onedrive_mirror.graph.models import FIELD_DOWNLOAD_URL

logger = logging.getLogger(__name__)


def item_path(drive_id: str | None, item_id: str) -> str:
    if drive_id:
        return f"/drives/{drive_id}/items/{item_id}"
    return f"/drive/items/{item_id}"


class GraphItemFetcher:
    """Fetches the full driveItem record for an item in any drive."""

    async def fetch(self, credential: GraphClient, drive_id: str, item_id: str) -> dict[str, Any]:
        logger.info("[fetch] fetching item metadata; drive_id:%s;item_id:%s", drive_id, item_id)
        return await asyncio.to_thread(credential.get, item_path(drive_id, item_id))


async def resolve_download(credential: GraphClient, item_id: str, drive_id: str | None) -> str:
    """Return a fresh pre-authenticated download URL for a file.

    Download URLs in delta responses expire after a short time, so the URL
    is looked up again when the consumer is ready to fetch the bytes.

    Raises:
        GraphApiError: If the item cannot be read.
        LookupError: If the item is not downloadable (e.g. a folder).
    """
    item = await asyncio.to_thread(credential.get, item_path(drive_id, item_id))
    url = item.get(FIELD_DOWNLOAD_URL)
    if not url:
        raise LookupError(f"Item {item_id} has no download URL")
    return str(url)
