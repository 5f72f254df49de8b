"""Tests for text and JSON rendering."""

import io
import json
import os

from rich.console import Console

from lz.config import DisplayOptions, SnapshotOptions, ViewOptions
from lz.models import Entry, EntryKind
from lz.render import entry_label, format_mode, format_size, rainbow_color, render, render_text, tree_prefix
from lz.snapshot import SnapshotBuilder
from lz.view import ViewModel, build_view_model


def plain_console() -> Console:
    return Console(file=io.StringIO(), width=200, color_system=None, force_terminal=False)


def output(console: Console) -> str:
    return console.file.getvalue()


def test_format_size_raw():
    """Test sizes are plain integers without --human."""
    assert format_size(1536) == "1536"


def test_format_size_human():
    """Test human-readable binary units."""
    assert format_size(0, True) == "0 B"
    assert format_size(1023, True) == "1023 B"
    assert format_size(1024, True) == "1.0 KiB"
    assert format_size(1536, True) == "1.5 KiB"
    assert format_size(5 * 1024**2, True) == "5.0 MiB"
    assert format_size(3 * 1024**4, True) == "3.0 TiB"


def test_tree_prefix():
    """Test box-drawing prefixes."""
    assert tree_prefix((False,)) == "├── "
    assert tree_prefix((True,)) == "└── "
    assert tree_prefix((False, True)) == "│   └── "
    assert tree_prefix((True, False)) == "    ├── "


def test_rainbow_color_is_stable():
    """Test the same path always gets the same color."""
    assert rainbow_color("sub/c.rs") == rainbow_color("sub\\c.rs")
    assert rainbow_color("a").startswith("rgb(")


def test_entry_label_icons_and_suffix():
    """Test icons and the directory suffix."""
    directory = Entry("sub", EntryKind.DIR, 0, 0.0, "sub")
    label = entry_label(directory, DisplayOptions(icons=True)).plain
    assert label.startswith("📁 sub")
    assert entry_label(Entry("f", EntryKind.FILE, 0, 0.0, "f"), DisplayOptions()).plain == "f"


def test_format_mode():
    """Test kind character plus the write bit."""
    assert format_mode(Entry("d", EntryKind.DIR, 0, 0.0, "d")) == "drw"
    assert format_mode(Entry("f", EntryKind.FILE, 0, 0.0, "f", readonly=True)) == "-r-"
    assert format_mode(Entry("l", EntryKind.SYMLINK, 0, 0.0, "l")) == "lrw"


class TestRenderText:
    """Tests for the text renderer."""

    def test_flat_listing(self, sample_dir):
        """Test one line per entry."""
        view = build_view_model(SnapshotBuilder(), str(sample_dir), SnapshotOptions(), ViewOptions())
        console = plain_console()
        render_text(view, DisplayOptions(), console)

        lines = output(console).splitlines()
        assert lines[0].startswith("sub")
        assert lines[1:] == ["a.txt", "b.rs"]

    def test_tree_listing(self, sample_dir):
        """Test tree output starts with the root and uses prefixes."""
        view = build_view_model(SnapshotBuilder(), str(sample_dir), SnapshotOptions(recursive=True), ViewOptions())
        console = plain_console()
        render_text(view, DisplayOptions(), console)

        lines = output(console).splitlines()
        assert lines[0] == str(sample_dir)
        assert lines[1].startswith("├── sub")
        assert lines[2] == "│   └── c.rs"
        assert lines[-1] == "└── b.rs"

    def test_long_listing(self, sample_dir):
        """Test long rows carry kind, size and time."""
        view = build_view_model(SnapshotBuilder(), str(sample_dir), SnapshotOptions(), ViewOptions())
        console = plain_console()
        render_text(view, DisplayOptions(long=True), console)

        rows = output(console).splitlines()
        assert rows[0].startswith("d")
        assert "20" in rows[2] and rows[2].rstrip().endswith("b.rs")
        assert "Z" in rows[1]

    def test_long_listing_marks_read_only(self, sample_dir):
        """Test the mode column drops the write bit for read-only files."""
        os.chmod(sample_dir / "a.txt", 0o444)
        view = build_view_model(SnapshotBuilder(), str(sample_dir), SnapshotOptions(), ViewOptions())
        console = plain_console()
        render_text(view, DisplayOptions(long=True), console)

        rows = output(console).splitlines()
        assert rows[0].startswith("drw")
        assert rows[1].startswith("-r-")
        assert rows[2].startswith("-rw")

    def test_summary_lines(self, sample_dir):
        """Test --du and --extensions lines."""
        view = build_view_model(
            SnapshotBuilder(), str(sample_dir), SnapshotOptions(compute_du=True), ViewOptions(summary=True)
        )
        console = plain_console()
        render_text(view, DisplayOptions(du=True, extensions=True), console)
        text = output(console)

        assert "Total: 35 B" in text
        assert "Files: 2  Dirs: 1" in text
        assert ".rs  1 files  20 B" in text
        assert ".txt  1 files  10 B" in text

    def test_error_goes_to_error_console(self, tmp_path):
        """Test errors are written to the error console only."""
        view = build_view_model(SnapshotBuilder(), str(tmp_path / "gone"), SnapshotOptions(), ViewOptions())
        console, err_console = plain_console(), plain_console()
        render_text(view, DisplayOptions(), console, err_console)

        assert output(console) == ""
        assert "gone" in output(err_console)


def test_render_json_dispatch():
    """Test --json writes a parseable document."""
    view = ViewModel(root="/r", entries=(), summary=None, error=None)
    console = plain_console()
    render(view, DisplayOptions(json=True), console)

    assert json.loads(output(console)) == {"root": "/r", "entries": [], "summary": None, "error": None}
