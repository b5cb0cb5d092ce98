"""Classify delta entries into sync actions against the running state."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from onedrive_mirror.graph.models import (
    FIELD_DELETED,
    FIELD_DOWNLOAD_URL,
    FIELD_DRIVE_ID,
    FIELD_FILE,
    FIELD_HASHES,
    FIELD_ID,
    FIELD_LAST_MODIFIED,
    FIELD_NAME,
    FIELD_PARENT_REFERENCE,
    FIELD_QUICK_XOR_HASH,
    FIELD_SHA1_HASH,
)
from onedrive_mirror.reconcile.errors import ResolveError
from onedrive_mirror.reconcile.models import (
    ActionKind,
    DownloadHandle,
    DownloadResolver,
    ItemKind,
    Namespace,
    RawEntry,
    SyncAction,
    decode_kind,
)
from onedrive_mirror.reconcile.paths import ParentPath, join, namespace_prefix, parent_path_of
from onedrive_mirror.reconcile.state import ReconciliationState

logger = logging.getLogger(__name__)

# Hash facets in order of preference. Personal drives report sha1Hash (hex,
# case-insensitive); business drives only report quickXorHash (base64).
_HASH_FIELDS = ((FIELD_SHA1_HASH, True), (FIELD_QUICK_XOR_HASH, False))


def resolve_name(
    entry: RawEntry, namespace: Namespace | None, state: ReconciliationState
) -> str:
    """Resolve an entry's full mirror-relative name.

    Entries with a parent path are placed under it, below the namespace name
    when they come from a shared folder feed. Entries without one (deletions)
    fall back to the tracked name. Returns "" when neither is available.
    """
    raw_parent = parent_path_of(entry)
    if raw_parent is not None:
        parent = ParentPath.parse(raw_parent)
        if namespace is not None:
            prefix = namespace_prefix(namespace.root)
            if prefix is not None:
                parent = parent.strip_prefix(prefix)
            return join(namespace.name, str(parent), entry.get(FIELD_NAME, ""))
        return join(str(parent), entry.get(FIELD_NAME, ""))

    tracked = state.get(entry.get(FIELD_ID, ""))
    if tracked is not None:
        return tracked.name
    return ""


def fingerprint(entry: RawEntry) -> str | None:
    """Content hash of a file entry, or None. Hex hashes are lowercased."""
    hashes = (entry.get(FIELD_FILE) or {}).get(FIELD_HASHES) or {}
    for field_name, is_hex in _HASH_FIELDS:
        value = hashes.get(field_name)
        if value:
            return str(value).lower() if is_hex else str(value)
    return None


def _parse_modified(entry: RawEntry) -> datetime | None:
    value = entry.get(FIELD_LAST_MODIFIED)
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        logger.warning("[_parse_modified] unparseable timestamp; id:%s", entry.get(FIELD_ID, ""))
        return None


class ActionClassifier:
    """Turns one entry into exactly one SyncAction and updates the state."""

    def __init__(
        self,
        state: ReconciliationState,
        credential: Any = None,
        download_resolver: DownloadResolver | None = None,
    ) -> None:
        self._state = state
        self._credential = credential
        self._download_resolver = download_resolver

    def classify(self, entry: RawEntry, namespace: Namespace | None = None) -> SyncAction:
        """Classify an entry and record its outcome.

        Args:
            entry: Raw delta entry.
            namespace: Shared folder the entry was delivered for, if any.

        Returns:
            The resulting action. Resolution failures are returned as
            ``error`` actions and leave tracked items untouched; a deleted
            entry still releases its shared-folder subscription.
        """
        item_id = entry.get(FIELD_ID, "")
        if FIELD_DELETED in entry:
            # A deleted shared-folder link stops its nested feed even when the
            # entry itself cannot be resolved.
            self._state.release(item_id)
        kind = decode_kind(entry)
        name = resolve_name(entry, namespace, self._state)

        if not name:
            return self._error(entry, name, "Missing name")
        if kind is ItemKind.UNKNOWN:
            return self._error(entry, name, "Unknown type")

        content_hash = fingerprint(entry) if kind is ItemKind.FILE else None

        if FIELD_DELETED in entry:
            self._state.forget(item_id)
            return self._emit(ActionKind.REMOVE, entry, kind, name, content_hash)

        existing = self._state.get(item_id)
        if existing is not None:
            if existing.name != name:
                action = self._emit(
                    ActionKind.MOVE, entry, kind, name, content_hash, old_name=existing.name
                )
            else:
                action = self._emit(ActionKind.CHANGE, entry, kind, name, content_hash)
        else:
            source = self._state.find_by_hash(content_hash, exclude=item_id)
            if source is not None:
                action = self._emit(
                    ActionKind.COPY, entry, kind, name, content_hash, copied_from=source.name
                )
            else:
                action = self._emit(ActionKind.ADD, entry, kind, name, content_hash)

        self._state.track(item_id, name, content_hash)
        return action

    def _download(self, entry: RawEntry) -> DownloadHandle | None:
        if self._download_resolver is None or not entry.get(FIELD_DOWNLOAD_URL):
            return None
        drive_id = (entry.get(FIELD_PARENT_REFERENCE) or {}).get(FIELD_DRIVE_ID)
        return DownloadHandle(
            resolver=self._download_resolver,
            credential=self._credential,
            item_id=entry[FIELD_ID],
            drive_id=drive_id,
        )

    def _emit(
        self,
        kind: ActionKind,
        entry: RawEntry,
        item_kind: ItemKind,
        name: str,
        content_hash: str | None,
        old_name: str | None = None,
        copied_from: str | None = None,
    ) -> SyncAction:
        action = SyncAction(
            action=kind,
            id=entry.get(FIELD_ID, ""),
            type=item_kind,
            name=name,
            modified=_parse_modified(entry),
            hash=content_hash,
            download=self._download(entry),
            old_name=old_name,
            copied_from=copied_from,
        )
        logger.debug("[classify] %s; id:%s;name:%s", kind, action.id, name)
        return action

    def _error(self, entry: RawEntry, name: str, reason: str) -> SyncAction:
        error = ResolveError(entry, name, reason)
        logger.warning(
            "[classify] unable to resolve entry; id:%s;filename:%s;reason:%s",
            entry.get(FIELD_ID, ""),
            error.filename,
            reason,
        )
        return SyncAction(
            action=ActionKind.ERROR,
            id=entry.get(FIELD_ID, ""),
            type=ItemKind.UNKNOWN,
            name=error.filename,
            error=error,
        )
