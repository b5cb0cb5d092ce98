"""Data models for delta entries, namespaces and emitted sync actions."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator, Awaitable
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Protocol

from onedrive_mirror.graph.models import (
    FIELD_FILE,
    FIELD_FOLDER,
    FIELD_PACKAGE,
    FIELD_REMOTE_ITEM,
)

if TYPE_CHECKING:
    from onedrive_mirror.reconcile.errors import ResolveError

# One driveItem record as returned by the delta API.
RawEntry = dict[str, Any]


class ItemKind(StrEnum):
    FILE = "file"
    FOLDER = "folder"
    UNKNOWN = "unknown"


class ActionKind(StrEnum):
    ADD = "add"
    CHANGE = "change"
    MOVE = "move"
    COPY = "copy"
    REMOVE = "remove"
    ERROR = "error"


def decode_kind(entry: RawEntry) -> ItemKind:
    """Decode the item variant from the facets present on an entry.

    Shared-folder links (``remoteItem``) and packages such as OneNote
    notebooks are mirrored as folders.
    """
    if FIELD_FILE in entry:
        return ItemKind.FILE
    if FIELD_FOLDER in entry or FIELD_REMOTE_ITEM in entry or FIELD_PACKAGE in entry:
        return ItemKind.FOLDER
    return ItemKind.UNKNOWN


@dataclass(frozen=True)
class Namespace:
    """Path context of a shared folder whose items arrive on a nested feed.

    Attributes:
        id: Item id of the link entry in the main drive.
        name: Display name of the link entry; prefixes every nested item.
        root: Full metadata of the linked folder in its owning drive.
    """

    id: str
    name: str
    root: RawEntry


@dataclass
class TrackedItem:
    """Last resolved name and content fingerprint recorded for an item id."""

    name: str
    hash: str | None


@dataclass(frozen=True)
class DownloadHandle:
    """Deferred download lookup for a file item.

    Nothing touches the network until the handle is awaited.
    """

    resolver: DownloadResolver
    credential: Any
    item_id: str
    drive_id: str | None

    def __call__(self) -> Awaitable[Any]:
        return self.resolver(self.credential, self.item_id, self.drive_id)


@dataclass(frozen=True)
class SyncAction:
    """One classified change to apply to the local mirror."""

    action: ActionKind
    id: str
    type: ItemKind
    name: str
    modified: datetime | None = None
    hash: str | None = None
    download: DownloadHandle | None = field(default=None, compare=False)
    old_name: str | None = None
    copied_from: str | None = None
    error: ResolveError | None = field(default=None, compare=False)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-friendly dict using the feed's field names."""
        data: dict[str, Any] = {
            "action": str(self.action),
            "id": self.id,
            "type": str(self.type),
            "name": self.name,
            "modified": self.modified.isoformat() if self.modified else None,
            "hash": self.hash,
            "download": self.download is not None,
        }
        if self.old_name is not None:
            data["oldName"] = self.old_name
        if self.copied_from is not None:
            data["from"] = self.copied_from
        if self.error is not None:
            data["error"] = self.error.reason
        return data


class ChangeFeed(Protocol):
    """Source of raw delta entries for a drive root or a shared folder."""

    def open(
        self,
        credential: Any,
        drive_id: str | None = None,
        item_id: str | None = None,
        cancel: asyncio.Event | None = None,
    ) -> AsyncGenerator[RawEntry, None]: ...


class ItemFetcher(Protocol):
    """Resolves the full metadata record of a single drive item."""

    async def fetch(self, credential: Any, drive_id: str, item_id: str) -> RawEntry: ...


class DownloadResolver(Protocol):
    def __call__(self, credential: Any, item_id: str, drive_id: str | None) -> Awaitable[Any]: ...
