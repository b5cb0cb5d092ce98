"""Delta API change feed with optional cursor persistence in Azure Blob Storage."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncGenerator
from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qs, urlparse

from azure.core.exceptions import ResourceNotFoundError
from azure.storage.blob import BlobServiceClient

from onedrive_mirror.graph.client import GraphClient
from onedrive_mirror.graph.models import (
    FIELD_TOKEN,
    ODATA_DELTA_LINK,
    ODATA_NEXT_LINK,
    ODATA_VALUE,
)

if TYPE_CHECKING:
    from onedrive_mirror.config import AppConfig

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 30.0


class DeltaTokenStore:
    """Persists the main drive's delta cursor as a blob."""

    def __init__(self, storage_connection_string: str, container: str, blob: str) -> None:
        """Initialise the token store.

        Args:
            storage_connection_string: Azure Storage connection string.
            container: Blob container name for delta token storage.
            blob: Blob path for the delta token file.
        """
        self._blob_service = BlobServiceClient.from_connection_string(storage_connection_string)
        self._container = container
        self._blob = blob

    def load(self) -> str | None:
        """Read the persisted delta token, or None before the first save."""
        try:
            container_client = self._blob_service.get_container_client(self._container)
            blob_client = container_client.get_blob_client(self._blob)
            data = blob_client.download_blob().readall()
            return data.decode("utf-8")
        except ResourceNotFoundError:
            logger.info("[load] no delta token found in blob storage — first run")
            return None

    def save(self, token: str) -> None:
        """Write the delta token, creating the container if needed."""
        container_client = self._blob_service.get_container_client(self._container)
        with contextlib.suppress(Exception):
            container_client.create_container()

        blob_client = container_client.get_blob_client(self._blob)
        blob_client.upload_blob(token.encode("utf-8"), overwrite=True)
        logger.info("[save] saved delta token to blob storage")


class DeltaFeed:
    """Change feed over the Graph delta API.

    Opened once for the user's drive root and once per shared folder.
    Pages are fetched on a worker thread so the event loop never blocks.
    """

    def __init__(
        self,
        drive_user: str,
        token_store: DeltaTokenStore | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
        follow: bool = True,
    ) -> None:
        """Initialise the feed.

        Args:
            drive_user: UPN or object ID of the user whose drive is the main
                root. Required with app permissions where /me is unavailable.
            token_store: Cursor persistence for the main root; shared-folder
                feeds always start from a full enumeration.
            poll_interval: Seconds to wait at the end of the change set
                before asking for more.
            follow: Keep polling after the current change set. When False
                the feed ends at the first ``@odata.deltaLink``.
        """
        self._drive_user = drive_user
        self._token_store = token_store
        self._poll_interval = poll_interval
        self._follow = follow

    def root_path(self, drive_id: str | None = None, item_id: str | None = None) -> str:
        """Delta endpoint for the main drive root or a shared folder."""
        if drive_id and item_id:
            return f"/drives/{drive_id}/items/{item_id}/delta"
        return f"/users/{self._drive_user}/drive/root/delta"

    async def open(
        self,
        credential: GraphClient,
        drive_id: str | None = None,
        item_id: str | None = None,
        cancel: asyncio.Event | None = None,
    ) -> AsyncGenerator[dict[str, Any], None]:
        """Yield raw driveItem entries until cancelled or, if not following, caught up.

        Args:
            credential: Authenticated GraphClient.
            drive_id: Drive of a shared folder; None for the main root.
            item_id: Item id of a shared folder; None for the main root.
            cancel: Once set, no further entries are yielded.

        Raises:
            GraphAuthError: If token acquisition fails.
            GraphApiError: If a page request fails.
            ValueError: If a page has neither a nextLink nor a deltaLink.
        """
        cancel = cancel or asyncio.Event()
        is_main = not (drive_id and item_id)
        base = self.root_path(drive_id, item_id)
        token = None
        if is_main and self._token_store is not None:
            token = await asyncio.to_thread(self._token_store.load)
        next_path: str | None = base
        if token is not None:
            next_path = token if token.startswith("https://") else f"{base}?token={token}"

        while next_path is not None and not cancel.is_set():
            response = await asyncio.to_thread(credential.get, next_path)
            for raw in response.get(ODATA_VALUE, []):
                if cancel.is_set():
                    return
                yield raw

            if ODATA_NEXT_LINK in response:
                next_path = response[ODATA_NEXT_LINK]
                continue
            if ODATA_DELTA_LINK not in response:
                raise ValueError("Delta response did not contain an @odata.deltaLink")

            delta_link = response[ODATA_DELTA_LINK]
            if is_main and self._token_store is not None:
                await asyncio.to_thread(self._token_store.save, extract_token(delta_link))
            logger.info("[open] caught up with delta feed; root:%s", base)
            if not self._follow:
                return
            next_path = delta_link
            await _wait(cancel, self._poll_interval)

        logger.info("[open] delta feed stopped; root:%s", base)


async def _wait(cancel: asyncio.Event, seconds: float) -> None:
    """Sleep for ``seconds`` or until cancelled, whichever comes first."""
    with contextlib.suppress(TimeoutError):
        await asyncio.wait_for(cancel.wait(), timeout=seconds)


def extract_token(delta_link: str) -> str:
    """Extract the token query parameter from an @odata.deltaLink URL."""
    params = parse_qs(urlparse(delta_link).query)
    tokens = params.get(FIELD_TOKEN, [])
    if tokens:
        return tokens[0]
    # Some Graph implementations embed the full URL as the cursor.
    return delta_link


def delta_feed_from_config(config: AppConfig, follow: bool = True) -> DeltaFeed:
    """Construct a DeltaFeed from application configuration.

    Cursor persistence is enabled only when a storage connection string is
    configured.
    """
    token_store = None
    if config.storage_connection_string:
        token_store = DeltaTokenStore(
            storage_connection_string=config.storage_connection_string,
            container=config.delta_container,
            blob=config.delta_blob,
        )
    return DeltaFeed(
        drive_user=config.drive_user,
        token_store=token_store,
        poll_interval=config.poll_interval_seconds,
        follow=follow,
    )
