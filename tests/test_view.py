"""Tests for the view model and listing pipeline."""

import json

from lz.config import SnapshotOptions, SortKey, ViewOptions
from lz.models import Entry, EntryKind, ExtensionStat, Summary
from lz.snapshot import SnapshotBuilder
from lz.view import ViewModel, build_snapshot, build_view_model, flatten, format_timestamp


def test_format_timestamp_is_rfc3339_utc():
    """Test timestamps are rendered in UTC with a Z suffix."""
    assert format_timestamp(0) == "1970-01-01T00:00:00Z"


class TestPipeline:
    """Tests for build_view_model."""

    def test_flat_scenario(self, sample_dir):
        """Test **/*.rs on a flat listing yields only b.rs."""
        view = build_view_model(SnapshotBuilder(), str(sample_dir), SnapshotOptions(filter_glob="**/*.rs"), ViewOptions())

        assert [e.relative_path for e in view.entries] == ["b.rs"]
        assert view.summary is None
        assert view.error is None

    def test_recursive_scenario_with_summary(self, sample_dir):
        """Test the recursive .rs listing with du and extensions."""
        view = build_view_model(
            SnapshotBuilder(),
            str(sample_dir),
            SnapshotOptions(recursive=True, filter_glob="**/*.rs", compute_du=True),
            ViewOptions(summary=True),
        )
        paths = [entry.relative_path for entry, _ in flatten(view.entries)]

        assert paths == ["sub", "sub/c.rs", "b.rs"]
        assert view.summary.by_extension == {"rs": ExtensionStat(count=2, bytes=25)}
        assert view.summary.total_bytes == 25

    def test_sorted_with_dirs_first(self, sample_dir):
        """Test the pipeline sorts and groups directories first."""
        view = build_view_model(SnapshotBuilder(), str(sample_dir), SnapshotOptions(), ViewOptions())
        assert [e.name for e in view.entries] == ["sub", "a.txt", "b.rs"]

    def test_size_sort_reversed(self, sample_dir):
        """Test size sort and reverse reach the view."""
        view = build_view_model(
            SnapshotBuilder(),
            str(sample_dir),
            SnapshotOptions(),
            ViewOptions(sort_key=SortKey.SIZE, reverse=True, dirs_first=False),
        )
        assert [e.name for e in view.entries] == ["sub", "a.txt", "b.rs"]

    def test_error_passes_through(self, tmp_path):
        """Test an unreadable root gives an error view without summary."""
        view = build_view_model(SnapshotBuilder(), str(tmp_path / "gone"), SnapshotOptions(), ViewOptions(summary=True))

        assert view.error is not None
        assert view.entries == ()
        assert view.summary is None

    def test_build_snapshot_attaches_summary_only_when_requested(self, sample_dir):
        """Test summary is None unless requested."""
        builder = SnapshotBuilder()
        plain = build_snapshot(builder, str(sample_dir), SnapshotOptions(), ViewOptions())
        summarized = build_snapshot(builder, str(sample_dir), SnapshotOptions(), ViewOptions(summary=True))

        assert plain.summary is None
        assert summarized.summary.total_bytes == 30


class TestJson:
    """Tests for the JSON view."""

    def test_shape(self, sample_dir):
        """Test the top-level keys and entry fields."""
        view = build_view_model(SnapshotBuilder(), str(sample_dir), SnapshotOptions(), ViewOptions())
        data = json.loads(view.to_json())

        assert set(data) == {"root", "entries", "summary", "error"}
        assert data["summary"] is None
        assert data["error"] is None
        first = data["entries"][0]
        assert set(first) == {"name", "kind", "size", "modified", "path"}
        assert first["kind"] == "dir"
        assert first["modified"].endswith("Z")

    def test_tree_nests_entries(self, sample_dir):
        """Test directory nodes carry nested entries in tree mode."""
        view = build_view_model(SnapshotBuilder(), str(sample_dir), SnapshotOptions(recursive=True), ViewOptions())
        data = view.to_dict()
        sub = data["entries"][0]

        assert sub["name"] == "sub"
        assert [child["path"] for child in sub["entries"]] == ["sub/c.rs"]
        assert "entries" not in data["entries"][1]

    def test_summary_and_error_fields(self):
        """Test summary and error serialization."""
        view = ViewModel(
            root="/r",
            entries=(),
            summary=Summary(total_bytes=3, by_extension={"": ExtensionStat(count=1, bytes=3)}),
            error=None,
        )
        assert view.to_dict()["summary"] == {"total_bytes": 3, "by_extension": {"": {"count": 1, "bytes": 3}}}

        failed = ViewModel(root="/r", entries=(), summary=None, error="Failed to read /r")
        assert json.loads(failed.to_json(pretty=False))["error"] == "Failed to read /r"

    def test_compact_json_is_one_line(self, sample_dir):
        """Test compact output has no newlines."""
        view = build_view_model(SnapshotBuilder(), str(sample_dir), SnapshotOptions(), ViewOptions())
        assert "\n" not in view.to_json(pretty=False)


def test_flatten_trail_flags():
    """Test flatten reports last-sibling flags per level."""

    def node(path, kind=EntryKind.FILE, children=None):
        return Entry(path.rsplit("/", 1)[-1], kind, 0, 0.0, path, children=children)

    tree = (
        node("a", EntryKind.DIR, children=(node("a/x"), node("a/y"))),
        node("b"),
    )
    assert [(e.relative_path, trail) for e, trail in flatten(tree)] == [
        ("a", (False,)),
        ("a/x", (False, False)),
        ("a/y", (False, True)),
        ("b", (True,)),
    ]
