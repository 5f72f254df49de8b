"""lz interactive - Textual directory browser."""

import os

import psutil
from rich.console import Group
from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.css.query import NoMatches
from textual.widgets import DataTable, Footer, Static

from lz.config import DisplayOptions, SnapshotOptions, ViewOptions
from lz.fs import FileSystemProvider, LocalFileSystem, count_children
from lz.models import Entry, EntryKind, Snapshot
from lz.navigation import Event, Mode, NavigationSession, NavigationState
from lz.render import entry_label, format_size
from lz.summary import NO_EXTENSION, extension_of
from lz.view import format_timestamp

KIND_NAMES = {
    EntryKind.FILE: "File",
    EntryKind.DIR: "Directory",
    EntryKind.SYMLINK: "Symlink",
    EntryKind.OTHER: "Other",
}


def disk_usage_text(path: str) -> Text:
    """Usage bar for the file system holding ``path``."""
    try:
        usage = psutil.disk_usage(path)
    except OSError:
        return Text("Disk: unavailable", style="dim")
    bar_len = min(int(usage.percent / 5), 20)  # Cap at 20 chars
    return Text.assemble(
        "Disk [",
        ("█" * bar_len, "cyan"),
        ("░" * (20 - bar_len), "dim"),
        f"] {format_size(usage.used, True)}/{format_size(usage.total, True)} ({usage.percent:.0f}%)",
    )


def entry_details(current_path: str, entry: Entry, provider: FileSystemProvider) -> Text:
    """Path, type, time, size or child counts, and the writable flag of one entry."""
    path = os.path.join(current_path, entry.name)
    lines = [
        f"Path: {path}",
        f"Type: {KIND_NAMES[entry.kind]}",
        f"Modified: {format_timestamp(entry.modified_time)}",
    ]
    if entry.kind is EntryKind.DIR:
        if entry.size_bytes:
            lines.append(f"Size: {format_size(entry.size_bytes, True)}")
        try:
            dirs, files = count_children(provider, path)
        except OSError:
            lines.append("Children: unreadable")
        else:
            lines.append(f"Children: {dirs} dirs, {files} files")
    else:
        lines.append(f"Size: {format_size(entry.size_bytes, True)}")
    lines.append(f"Writable: {'no' if entry.readonly else 'yes'}")
    return Text("\n".join(lines))


def file_summary_text(state: NavigationState) -> Text:
    """Summary shown after Enter on a non-directory."""
    entry = state.viewed_entry
    summary = state.viewed_summary
    ext = extension_of(entry.name)
    total = summary.total_bytes if summary is not None else entry.size_bytes
    return Text.assemble(
        ("Summary\n", "bold"),
        f"Name: {entry.name}\n",
        f"Type: {KIND_NAMES[entry.kind]}\n",
        f"Extension: {'(none)' if ext == NO_EXTENSION else '.' + ext}\n",
        f"Size: {format_size(total, True)} ({total} bytes)\n",
        f"Modified: {format_timestamp(entry.modified_time)}\n",
        f"Writable: {'no' if entry.readonly else 'yes'}\n",
        ("\nEnter/Backspace: back", "dim"),
    )


class PathHeader(Static):
    """Header widget showing the current directory and its file system usage."""

    DEFAULT_CSS = """
    PathHeader {
        height: auto;
        min-height: 3;
        padding: 0 1;
        background: $surface;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize PathHeader."""
        super().__init__(*args, **kwargs)
        self._current_path: str = ""
        self._hidden_shown: bool = False
        self._entry_count: int = 0
        self._nesting: int = 0

    def update_state(self, state: NavigationState) -> None:
        """Update the header from a navigation state."""
        self._current_path = state.current_path
        self._hidden_shown = state.show_hidden
        self._entry_count = len(state.entries)
        self._nesting = len(state.parent_stack)
        self.update(self._get_info())

    def _get_info(self) -> Group:
        if not self._current_path:
            return Group(Text("Loading..."))
        flags = Text.assemble(
            (f"{self._entry_count} entries", "bold"),
            "  hidden: ",
            ("shown" if self._hidden_shown else "hidden", "green" if self._hidden_shown else "dim"),
            f"  depth: {self._nesting}",
        )
        return Group(Text(self._current_path, style="bold bright_blue"), flags, disk_usage_text(self._current_path))


class EntryTable(Container):
    """Container for the entries data table."""

    DEFAULT_CSS = """
    EntryTable {
        width: 2fr;
        height: 1fr;
        border: solid $primary;
    }
    """

    def __init__(self, display: DisplayOptions | None = None, *args, **kwargs) -> None:
        """Initialize EntryTable."""
        super().__init__(*args, **kwargs)
        self._display_options = display or DisplayOptions()
        self._shown_snapshot: Snapshot | None = None
        self._pending_show: tuple[Snapshot | None, int] | None = None

    @property
    def row_count(self) -> int:
        """Number of rows currently shown."""
        return 0 if self._shown_snapshot is None else len(self._shown_snapshot.entries)

    def compose(self) -> ComposeResult:
        """Compose the entries table."""
        yield DataTable(id="entries")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#entries", DataTable)
        table.cursor_type = "row"
        table.can_focus = False

        table.add_column("Name", key="name")
        table.add_column("Size", key="size", width=10)
        table.add_column("Modified", key="modified", width=20)
        if self._pending_show is not None:
            self.show(*self._pending_show)

    def show(self, snapshot: Snapshot | None, selected_index: int) -> None:
        """
        Show a snapshot and move the cursor to the selection.

        Rows are only rebuilt when the snapshot itself changed.
        """
        try:
            table = self.query_one("#entries", DataTable)
        except NoMatches:
            table = None
        if table is None or not table.columns:
            # Painted once the columns exist
            self._pending_show = (snapshot, selected_index)
            return
        self._pending_show = None
        if snapshot is not self._shown_snapshot:
            table.clear()
            for entry in snapshot.entries if snapshot is not None else ():
                table.add_row(
                    entry_label(entry, self._display_options),
                    format_size(entry.size_bytes, self._display_options.human),
                    format_timestamp(entry.modified_time),
                    key=entry.relative_path,
                )
            self._shown_snapshot = snapshot
        if self.row_count:
            table.move_cursor(row=selected_index)


class DetailPanel(Static):
    """Details of the selected entry, the viewed file summary, or the current error."""

    DEFAULT_CSS = """
    DetailPanel {
        width: 1fr;
        min-width: 42;
        height: 1fr;
        border: solid $secondary;
        padding: 0 1;
    }
    """

    def __init__(self, provider: FileSystemProvider | None = None, *args, **kwargs) -> None:
        """Initialize DetailPanel."""
        super().__init__(*args, **kwargs)
        self._fs_provider = provider if provider is not None else LocalFileSystem()

    def update_state(self, state: NavigationState) -> None:
        """Render the panel for a navigation state."""
        if state.mode is Mode.ERROR:
            self.update(
                Group(
                    Text("Error", style="bold red"),
                    Text(state.message or "", style="red"),
                    Text(""),
                    Text("r: retry   c: dismiss   q: quit", style="dim"),
                )
            )
        elif state.mode is Mode.VIEWING_FILE_SUMMARY and state.viewed_entry is not None:
            self.update(file_summary_text(state))
        elif state.selected_entry is not None:
            self.update(entry_details(state.current_path, state.selected_entry, self._fs_provider))
        else:
            self.update(Text("(empty)", style="dim"))


class BrowserApp(App):
    """Interactive lz browser."""

    TITLE = "lz"
    SUB_TITLE = "interactive"

    CSS = """
    Screen {
        layout: vertical;
    }

    #path-header {
        dock: top;
    }

    #body {
        height: 1fr;
    }
    """

    BINDINGS = [
        Binding("up,k", "move_up", "Up", show=False, priority=True),
        Binding("down,j", "move_down", "Down", show=False, priority=True),
        Binding("enter", "open", "Open", priority=True),
        Binding("backspace", "go_up", "Up dir", priority=True),
        Binding("h", "toggle_hidden", "Hidden", priority=True),
        Binding("r", "refresh", "Refresh", priority=True),
        Binding("c", "dismiss", "Dismiss", show=False, priority=True),
        Binding("q,escape", "quit", "Quit", priority=True),
    ]

    def __init__(
        self,
        start_path: str,
        snapshot_options: SnapshotOptions | None = None,
        view_options: ViewOptions | None = None,
        display_options: DisplayOptions | None = None,
        watch_interval: float | None = None,
    ) -> None:
        """
        Initialize the BrowserApp.

        Args:
            start_path: Directory shown first.
            snapshot_options: Filters applied to every listing.
            view_options: Sort order of every listing.
            display_options: Icons and size formatting.
            watch_interval: Refresh the listing this often (seconds), if set.
        """
        super().__init__()
        self._display_options = display_options or DisplayOptions()
        self._refresh_interval = watch_interval
        self.session = NavigationSession(start_path, snapshot_options, view_options)

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield PathHeader(id="path-header")
        yield Horizontal(
            EntryTable(self._display_options),
            DetailPanel(self.session.provider, id="detail"),
            id="body",
        )
        yield Footer()

    def on_mount(self) -> None:
        """Paint the first listing and start the refresh timer if requested."""
        self._render_state()
        if self._refresh_interval:
            self.set_interval(self._refresh_interval, self._on_refresh_timer)

    def _on_refresh_timer(self) -> None:
        """Timer refresh; dropped by the session if a rebuild is in flight."""
        if self.session.state.mode is Mode.BROWSING:
            self._handle_event(Event.REFRESH)

    def _handle_event(self, event: Event) -> None:
        if not self.session.dispatch(event):
            return
        if self.session.state.mode is Mode.QUIT:
            self.exit()
            return
        self._render_state()

    def _render_state(self) -> None:
        """Repaint every widget from the session state."""
        state = self.session.state
        try:
            self.query_one("#path-header", PathHeader).update_state(state)
            self.query_one(EntryTable).show(state.last_snapshot, state.selected_index)
            self.query_one("#detail", DetailPanel).update_state(state)
        except NoMatches:
            return  # Not mounted yet
        self.sub_title = state.current_path

    def action_move_up(self) -> None:
        self._handle_event(Event.MOVE_UP)

    def action_move_down(self) -> None:
        self._handle_event(Event.MOVE_DOWN)

    def action_open(self) -> None:
        self._handle_event(Event.ENTER)

    def action_go_up(self) -> None:
        self._handle_event(Event.BACKSPACE)

    def action_toggle_hidden(self) -> None:
        self._handle_event(Event.TOGGLE_HIDDEN)

    def action_refresh(self) -> None:
        self._handle_event(Event.REFRESH)

    def action_dismiss(self) -> None:
        self._handle_event(Event.DISMISS)

    def action_quit(self) -> None:
        """Handle quit action."""
        self._handle_event(Event.QUIT)
