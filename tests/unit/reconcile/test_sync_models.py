"""Unit tests for reconcile/models.py — entry decoding and action records."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from onedrive_mirror.reconcile.errors import ResolveError
from onedrive_mirror.reconcile.models import (
    ActionKind,
    DownloadHandle,
    ItemKind,
    SyncAction,
    decode_kind,
)


class TestDecodeKind:
    @pytest.mark.parametrize(
        ("entry", "expected"),
        [
            ({"file": {}}, ItemKind.FILE),
            ({"folder": {}}, ItemKind.FOLDER),
            ({"remoteItem": {}}, ItemKind.FOLDER),
            ({"package": {"type": "oneNote"}}, ItemKind.FOLDER),
            ({"file": {}, "remoteItem": {}}, ItemKind.FILE),
            ({"name": "x"}, ItemKind.UNKNOWN),
        ],
    )
    def test_decode(self, entry: dict, expected: ItemKind) -> None:  # type: ignore[type-arg]
        assert decode_kind(entry) is expected


class TestSyncActionToDict:
    def test_move_uses_wire_names(self) -> None:
        action = SyncAction(
            action=ActionKind.MOVE,
            id="x",
            type=ItemKind.FILE,
            name="a/c.txt",
            modified=datetime(2024, 1, 2, tzinfo=UTC),
            hash="h",
            old_name="a/b.txt",
        )

        data = action.to_dict()

        assert data["action"] == "move"
        assert data["type"] == "file"
        assert data["oldName"] == "a/b.txt"
        assert "from" not in data
        assert data["modified"] == "2024-01-02T00:00:00+00:00"
        assert data["download"] is False

    def test_copy_uses_from(self) -> None:
        action = SyncAction(
            action=ActionKind.COPY, id="y", type=ItemKind.FILE, name="b", copied_from="a"
        )

        assert action.to_dict()["from"] == "a"

    def test_error_reports_reason(self) -> None:
        error = ResolveError({"id": "x"}, "", "Unknown type")
        action = SyncAction(
            action=ActionKind.ERROR,
            id="x",
            type=ItemKind.UNKNOWN,
            name=error.filename,
            error=error,
        )

        data = action.to_dict()

        assert data["error"] == "Unknown type"
        assert data["name"] == "<x>"


class TestResolveError:
    def test_filename_prefers_resolved_name(self) -> None:
        assert ResolveError({"id": "x", "name": "raw"}, "a/b", "r").filename == "a/b"

    def test_filename_falls_back_to_entry_name(self) -> None:
        assert ResolveError({"id": "x", "name": "raw"}, "", "r").filename == "raw"

    def test_message_includes_reason(self) -> None:
        assert "Missing name" in str(ResolveError({"id": "x"}, "", "Missing name"))


class TestDownloadHandle:
    @pytest.mark.asyncio
    async def test_invokes_resolver_with_arguments(self) -> None:
        resolver = AsyncMock(return_value="url")
        handle = DownloadHandle(resolver=resolver, credential="cred", item_id="i", drive_id="d")

        assert await handle() == "url"
        resolver.assert_awaited_once_with("cred", "i", "d")
