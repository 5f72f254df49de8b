"""Navigation state machine behind the interactive browser.

``transition`` is a pure ``(state, event) -> state`` function; the only side
effect it performs is calling the injected ``rebuild`` callable. State is
committed only once a rebuild has succeeded, so a UI never shows a
half-built listing.
"""

import logging
import os
import threading
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import Enum

from lz.config import SnapshotOptions, ViewOptions
from lz.fs import FileSystemProvider
from lz.models import Entry, Snapshot, Summary
from lz.snapshot import SnapshotBuilder
from lz.summary import summarize
from lz.view import build_snapshot

logger = logging.getLogger(__name__)

Rebuild = Callable[[str, bool], Snapshot]


class Mode(Enum):
    """States of an interactive session."""

    BROWSING = "browsing"
    VIEWING_FILE_SUMMARY = "viewing_file_summary"
    ERROR = "error"
    QUIT = "quit"


class Event(Enum):
    """Discrete input events."""

    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"
    ENTER = "enter"
    BACKSPACE = "backspace"
    TOGGLE_HIDDEN = "toggle_hidden"
    REFRESH = "refresh"
    QUIT = "quit"
    DISMISS = "dismiss"


@dataclass(slots=True, frozen=True)
class PendingRebuild:
    """A directory change (or reload) that has not been committed yet."""

    path: str
    parent_stack: tuple[str, ...]
    show_hidden: bool
    selected_index: int = 0
    select_name: str | None = None  # Reselect this entry if it is still there


@dataclass(slots=True, frozen=True)
class NavigationState:
    """Immutable state of one interactive session."""

    current_path: str
    mode: Mode = Mode.BROWSING
    parent_stack: tuple[str, ...] = ()
    selected_index: int = 0
    show_hidden: bool = False
    last_snapshot: Snapshot | None = None
    viewed_entry: Entry | None = None
    viewed_summary: Summary | None = None
    message: str | None = None
    pending: PendingRebuild | None = None

    @property
    def entries(self) -> tuple[Entry, ...]:
        if self.last_snapshot is None:
            return ()
        return self.last_snapshot.entries

    @property
    def selected_entry(self) -> Entry | None:
        entries = self.entries
        if not entries:
            return None
        return entries[self.selected_index]


def _clamp(index: int, count: int) -> int:
    if count == 0:
        return 0
    return max(0, min(index, count - 1))


def _attempt(state: NavigationState, pending: PendingRebuild, rebuild: Rebuild) -> NavigationState:
    snapshot = rebuild(pending.path, pending.show_hidden)
    if snapshot.error is not None:
        logger.info("Rebuild of %s failed: %s", pending.path, snapshot.error)
        return replace(state, mode=Mode.ERROR, message=snapshot.error, pending=pending)

    index = pending.selected_index
    if pending.select_name is not None:
        names = [entry.name for entry in snapshot.entries]
        index = names.index(pending.select_name) if pending.select_name in names else 0
    return replace(
        state,
        mode=Mode.BROWSING,
        current_path=pending.path,
        parent_stack=pending.parent_stack,
        show_hidden=pending.show_hidden,
        selected_index=_clamp(index, len(snapshot.entries)),
        last_snapshot=snapshot,
        viewed_entry=None,
        viewed_summary=None,
        message=None,
        pending=None,
    )


def initial_state(path: str, show_hidden: bool, rebuild: Rebuild) -> NavigationState:
    """Build the first listing; a failure starts the session in ERROR."""
    state = NavigationState(current_path=path, show_hidden=show_hidden)
    return _attempt(state, PendingRebuild(path=path, parent_stack=(), show_hidden=show_hidden), rebuild)


def transition(state: NavigationState, event: Event, rebuild: Rebuild) -> NavigationState:
    """Apply one event."""
    if state.mode is Mode.QUIT:
        return state
    if event is Event.QUIT:
        return replace(state, mode=Mode.QUIT)

    if state.mode is Mode.ERROR:
        if event is Event.DISMISS:
            return replace(state, mode=Mode.BROWSING, message=None, pending=None)
        pending = state.pending or PendingRebuild(
            path=state.current_path,
            parent_stack=state.parent_stack,
            show_hidden=state.show_hidden,
            selected_index=state.selected_index,
        )
        if event is Event.TOGGLE_HIDDEN:
            pending = replace(pending, show_hidden=not pending.show_hidden)
        # Any other event retries the operation that failed
        return _attempt(state, pending, rebuild)

    if state.mode is Mode.VIEWING_FILE_SUMMARY:
        state = replace(state, mode=Mode.BROWSING, viewed_entry=None, viewed_summary=None)
        if event in (Event.ENTER, Event.BACKSPACE, Event.DISMISS):
            return state

    count = len(state.entries)
    if event is Event.MOVE_UP:
        return replace(state, selected_index=_clamp(state.selected_index - 1, count))
    if event is Event.MOVE_DOWN:
        return replace(state, selected_index=_clamp(state.selected_index + 1, count))
    if event is Event.DISMISS:
        return state

    if event is Event.ENTER:
        entry = state.selected_entry
        if entry is None:
            return state
        if not entry.is_dir:
            return replace(
                state,
                mode=Mode.VIEWING_FILE_SUMMARY,
                viewed_entry=entry,
                viewed_summary=summarize([entry]),
            )
        pending = PendingRebuild(
            path=os.path.join(state.current_path, entry.name),
            parent_stack=state.parent_stack + (state.current_path,),
            show_hidden=state.show_hidden,
        )
    elif event is Event.BACKSPACE:
        if not state.parent_stack:
            return state
        pending = PendingRebuild(
            path=state.parent_stack[-1],
            parent_stack=state.parent_stack[:-1],
            show_hidden=state.show_hidden,
            select_name=os.path.basename(os.path.normpath(state.current_path)),
        )
    elif event is Event.TOGGLE_HIDDEN:
        pending = PendingRebuild(
            path=state.current_path,
            parent_stack=state.parent_stack,
            show_hidden=not state.show_hidden,
            selected_index=state.selected_index,
        )
    else:
        pending = PendingRebuild(
            path=state.current_path,
            parent_stack=state.parent_stack,
            show_hidden=state.show_hidden,
            selected_index=state.selected_index,
        )
    return _attempt(state, pending, rebuild)


class NavigationSession:
    """
    Owns the state of one interactive session.

    Only one event is processed at a time; an event arriving while another
    one is rebuilding is dropped rather than queued.
    """

    def __init__(
        self,
        start_path: str,
        snapshot_options: SnapshotOptions | None = None,
        view_options: ViewOptions | None = None,
        builder: SnapshotBuilder | None = None,
    ) -> None:
        """
        Initialize the NavigationSession.

        Args:
            start_path: Directory shown first.
            snapshot_options: Filters carried over to every rebuild; tree mode is ignored.
            view_options: Sorting for every rebuild.
            builder: Snapshot builder; defaults to one over the local file system.
        """
        options = snapshot_options or SnapshotOptions()
        options.validate()
        self._options = replace(options, recursive=False)
        self._view_options = view_options or ViewOptions()
        self._builder = builder if builder is not None else SnapshotBuilder()
        self._lock = threading.Lock()
        self._state = initial_state(start_path, self._options.include_hidden, self.rebuild)

    @property
    def state(self) -> NavigationState:
        """Current state."""
        return self._state

    @property
    def provider(self) -> FileSystemProvider:
        """File-system access shared by every rebuild."""
        return self._builder.provider

    @property
    def busy(self) -> bool:
        """True while an event is being processed."""
        return self._lock.locked()

    def rebuild(self, path: str, show_hidden: bool) -> Snapshot:
        """Run the full pipeline for ``path`` with the session's filters."""
        options = replace(self._options, include_hidden=show_hidden)
        return build_snapshot(self._builder, path, options, self._view_options)

    def dispatch(self, event: Event) -> bool:
        """
        Apply an event.

        Returns:
            False if the event was dropped because a rebuild is in flight.
        """
        if not self._lock.acquire(blocking=False):
            logger.debug("Dropping %s: rebuild in progress", event.value)
            return False
        try:
            self._state = transition(self._state, event, self.rebuild)
        finally:
            self._lock.release()
        return True
