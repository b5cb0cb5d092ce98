"""Errors raised or carried by the reconciliation engine."""

from __future__ import annotations

from typing import Any

from onedrive_mirror.graph.models import FIELD_ID, FIELD_NAME


class ResolveError(Exception):
    """An entry whose name or type could not be resolved.

    The classifier never raises this; it is attached to the ``error`` action
    emitted in place of the entry so that the feed keeps moving.
    """

    def __init__(self, entry: dict[str, Any], name: str, reason: str) -> None:
        self.entry = entry
        self.name = name
        self.reason = reason
        super().__init__(f"Unable to resolve {self.filename}: {reason}")

    @property
    def filename(self) -> str:
        """Best available name for diagnostics: resolved, raw, then id."""
        return self.name or self.entry.get(FIELD_NAME) or f"<{self.entry.get(FIELD_ID, '')}>"
