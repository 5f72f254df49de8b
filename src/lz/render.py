"""Text and JSON rendering of view models."""

import os
import zlib

from rich.console import Console
from rich.table import Table
from rich.text import Text

from lz.config import DisplayOptions
from lz.models import Entry, EntryKind, Summary
from lz.summary import NO_EXTENSION
from lz.view import ViewModel, flatten, format_timestamp

ICONS = {
    EntryKind.DIR: "📁 ",
    EntryKind.SYMLINK: "🔗 ",
}
FILE_ICON = "📄 "
EXECUTABLE_EXTENSIONS = frozenset({"exe", "bat", "cmd"})
KIND_CHARS = {
    EntryKind.DIR: "d",
    EntryKind.SYMLINK: "l",
    EntryKind.FILE: "-",
    EntryKind.OTHER: "?",
}


def format_mode(entry: Entry) -> str:
    """Kind character, then read and write bits: drw, -r-, lrw."""
    return f"{KIND_CHARS[entry.kind]}r{'-' if entry.readonly else 'w'}"


def format_size(size: int, human: bool = False) -> str:
    """Format bytes, optionally as a human-readable binary-unit string."""
    if not human:
        return str(size)
    value = float(size)
    for unit in ["B", "KiB", "MiB", "GiB"]:
        if value < 1024:
            return f"{size} B" if unit == "B" else f"{value:.1f} {unit}"
        value = value / 1024
    return f"{value:.1f} TiB"


def rainbow_color(relative_path: str) -> str:
    """Stable per-path color, kept away from very dark and very bright values."""
    digest = zlib.crc32(relative_path.replace("\\", "/").encode("utf-8"))
    r = 64 + (digest & 0xFF) % 160
    g = 64 + ((digest >> 8) & 0xFF) % 160
    b = 64 + ((digest >> 16) & 0xFF) % 160
    return f"rgb({r},{g},{b})"


def entry_style(entry: Entry, display: DisplayOptions) -> str:
    if display.rainbow:
        return rainbow_color(entry.relative_path)
    if entry.kind is EntryKind.DIR:
        return "bright_blue"
    if entry.kind is EntryKind.SYMLINK:
        return "bright_cyan"
    if entry.name.rpartition(".")[2].lower() in EXECUTABLE_EXTENSIONS:
        return "bright_green"
    return "bright_white"


def entry_label(entry: Entry, display: DisplayOptions) -> Text:
    """Icon, name and a trailing separator for directories."""
    icon = ICONS.get(entry.kind, FILE_ICON) if display.icons else ""
    suffix = os.sep if entry.kind is EntryKind.DIR else ""
    return Text(f"{icon}{entry.name}{suffix}", style=entry_style(entry, display))


def tree_prefix(trail: tuple[bool, ...]) -> str:
    """Box-drawing prefix for a node; see lz.view.flatten for ``trail``."""
    parts = ["    " if last else "│   " for last in trail[:-1]]
    parts.append("└── " if trail[-1] else "├── ")
    return "".join(parts)


def _lines(view: ViewModel) -> list[tuple[Entry, str]]:
    if not view.tree:
        return [(entry, "") for entry in view.entries]
    return [(entry, tree_prefix(trail)) for entry, trail in flatten(view.entries)]


def render_text(
    view: ViewModel,
    display: DisplayOptions,
    console: Console,
    err_console: Console | None = None,
) -> None:
    """Print a view model as a listing, followed by the requested summary lines."""
    if view.error is not None:
        (err_console or console).print(Text(view.error, style="bright_red"), soft_wrap=True)
        return

    lines = _lines(view)
    if view.tree:
        console.print(Text(view.root, style="bright_blue"), soft_wrap=True)

    if display.long:
        table = Table.grid(padding=(0, 2))
        table.add_column(no_wrap=True)
        table.add_column(justify="right", no_wrap=True)
        table.add_column(no_wrap=True)
        table.add_column(no_wrap=True, overflow="ignore")
        for entry, prefix in lines:
            name = Text(prefix, style="bright_black") + entry_label(entry, display)
            table.add_row(
                Text(format_mode(entry), style="bright_yellow"),
                Text(format_size(entry.size_bytes, display.human), style="bright_magenta"),
                Text(format_timestamp(entry.modified_time), style="bright_black"),
                name,
            )
        if lines:
            console.print(table)
    else:
        for entry, prefix in lines:
            console.print(Text(prefix, style="bright_black") + entry_label(entry, display), soft_wrap=True)

    if view.summary is not None:
        render_summary(view.summary, display, console)


def render_summary(summary: Summary, display: DisplayOptions, console: Console) -> None:
    if display.du:
        console.print(
            Text.assemble(("Total: ", "bright_yellow"), (format_size(summary.total_bytes, True), "bright_yellow")),
            soft_wrap=True,
        )
        console.print(
            Text.assemble(
                ("Files: ", "bright_black"),
                (str(summary.file_count), "bright_white"),
                ("  Dirs: ", "bright_black"),
                (str(summary.dir_count), "bright_white"),
            ),
            soft_wrap=True,
        )
    if display.extensions:
        for ext, stat in summary.by_extension.items():
            label = "(none)" if ext == NO_EXTENSION else f".{ext}"
            console.print(
                Text.assemble(
                    (label, "bright_blue"),
                    "  ",
                    (f"{stat.count} files", "bright_white"),
                    "  ",
                    (format_size(stat.bytes, True), "bright_magenta"),
                ),
                soft_wrap=True,
            )


def render_json(view: ViewModel, console: Console, pretty: bool = True) -> None:
    """Write the JSON view; one compact line per view model when not pretty."""
    console.out(view.to_json(pretty=pretty), highlight=False)


def render(
    view: ViewModel,
    display: DisplayOptions,
    console: Console,
    err_console: Console | None = None,
    pretty: bool = True,
) -> None:
    """Dispatch to the JSON or text renderer."""
    if display.json:
        render_json(view, console, pretty=pretty)
    else:
        render_text(view, display, console, err_console)
