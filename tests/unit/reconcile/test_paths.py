"""Unit tests for reconcile/paths.py — parent path parsing and prefix removal."""

from onedrive_mirror.reconcile.paths import ParentPath, join, namespace_prefix, parent_path_of


class TestParse:
    def test_drive_root_has_no_segments(self) -> None:
        assert ParentPath.parse("/drive/root:") == ParentPath()
        assert str(ParentPath.parse("/drive/root:")) == ""

    def test_drive_root_child(self) -> None:
        assert ParentPath.parse("/drive/root:/Docs").segments == ("Docs",)

    def test_percent_encoded_segments_are_decoded(self) -> None:
        path = ParentPath.parse("/drive/root:/example%20folder/caf%C3%A9")
        assert path.segments == ("example folder", "café")

    def test_item_relative_path(self) -> None:
        path = ParentPath.parse("/drives/abcd/items/efg!123:/example%20folder")
        assert str(path) == "example folder"

    def test_item_relative_root(self) -> None:
        assert ParentPath.parse("/drives/abcd/items/efg!123:") == ParentPath()

    def test_only_first_colon_splits(self) -> None:
        assert str(ParentPath.parse("/drive/root:/a:b/c")) == "a:b/c"

    def test_path_without_colon_is_empty(self) -> None:
        assert ParentPath.parse("/drive/root") == ParentPath()


class TestStripPrefix:
    def test_removes_leading_prefix_once(self) -> None:
        path = ParentPath(("Shared", "Shared", "Docs"))
        assert path.strip_prefix(ParentPath(("Shared",))).segments == ("Shared", "Docs")

    def test_removes_multi_segment_prefix(self) -> None:
        path = ParentPath(("Shared", "Shared", "Docs"))
        assert path.strip_prefix(ParentPath(("Shared", "Shared"))).segments == ("Docs",)

    def test_non_matching_prefix_is_ignored(self) -> None:
        path = ParentPath(("Other", "Docs"))
        assert path.strip_prefix(ParentPath(("Shared",))) == path

    def test_partial_segment_is_not_a_prefix(self) -> None:
        path = ParentPath(("Shared Stuff", "Docs"))
        assert path.strip_prefix(ParentPath(("Shared",))) == path

    def test_empty_prefix_is_noop(self) -> None:
        path = ParentPath(("Docs",))
        assert path.strip_prefix(ParentPath()) == path


class TestJoin:
    def test_skips_empty_parts(self) -> None:
        assert join("", "file.txt") == "file.txt"
        assert join("Team", "", "file.txt") == "Team/file.txt"

    def test_strips_surrounding_separators(self) -> None:
        assert join("/Team/", "Docs", "file.txt") == "Team/Docs/file.txt"


class TestNamespacePrefix:
    def test_root_nested_in_folder(self) -> None:
        root = {"name": "Shared", "parentReference": {"path": "/drive/root:/Shared"}}
        assert namespace_prefix(root) == ParentPath(("Shared", "Shared"))

    def test_root_at_drive_root(self) -> None:
        root = {"name": "Team", "parentReference": {"path": "/drive/root:"}}
        assert namespace_prefix(root) == ParentPath(("Team",))

    def test_root_without_parent_path(self) -> None:
        root = {"name": "Team", "parentReference": {"driveId": "d1"}}
        assert namespace_prefix(root) is None

    def test_parent_path_of_missing_reference(self) -> None:
        assert parent_path_of({"id": "x"}) is None
