"""Parent-path fragments reported by the Graph delta API.

Graph reports an item's location as ``parentReference.path``, for example::

    /drive/root:
    /drive/root:/example%20folder
    /drives/abcd/items/efg!123:
    /drives/abcd/items/efg!123:/example%20folder

Only the part after the first colon is meaningful to a mirror; the rest
names the drive or item the path is relative to.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import unquote

from onedrive_mirror.graph.models import FIELD_NAME, FIELD_PARENT_REFERENCE, FIELD_PATH

SEPARATOR = "/"


@dataclass(frozen=True)
class ParentPath:
    """Decoded, root-relative path segments of an item's parent folder."""

    segments: tuple[str, ...] = ()

    @classmethod
    def parse(cls, raw: str) -> ParentPath:
        """Parse a Graph ``parentReference.path`` into decoded segments.

        Everything up to and including the first colon is dropped. A path
        without a colon carries no root-relative fragment and parses as empty.
        """
        _, colon, fragment = raw.partition(":")
        if not colon:
            return cls()
        return cls._from_fragment(unquote(fragment))

    @classmethod
    def _from_fragment(cls, fragment: str) -> ParentPath:
        return cls(tuple(s for s in fragment.split(SEPARATOR) if s))

    def child(self, name: str) -> ParentPath:
        return ParentPath((*self.segments, *ParentPath._from_fragment(name).segments))

    def strip_prefix(self, prefix: ParentPath) -> ParentPath:
        """Remove ``prefix`` once if it leads this path, else return self."""
        size = len(prefix.segments)
        if size and self.segments[:size] == prefix.segments:
            return ParentPath(self.segments[size:])
        return self

    def __str__(self) -> str:
        return SEPARATOR.join(self.segments)


def join(*parts: str) -> str:
    """Join non-empty path parts with a single separator."""
    return SEPARATOR.join(p.strip(SEPARATOR) for p in parts if p.strip(SEPARATOR))


def parent_path_of(entry: dict[str, Any]) -> str | None:
    """Return the raw ``parentReference.path`` of an entry, if any."""
    parent_ref = entry.get(FIELD_PARENT_REFERENCE) or {}
    return parent_ref.get(FIELD_PATH) or None


def namespace_prefix(root: dict[str, Any]) -> ParentPath | None:
    """Full root-relative path of a shared folder's root item.

    Items inside a shared folder that itself lives inside another folder
    report the shared folder's position again in their own parent path; this
    is the prefix to remove. Returns None when the root has no parent path.
    """
    raw = parent_path_of(root)
    if raw is None:
        return None
    return ParentPath.parse(raw).child(root.get(FIELD_NAME, ""))
