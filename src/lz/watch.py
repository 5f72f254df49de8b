"""Watch loop: rebuilds the listing on a fixed interval and hands it to a sink."""

import logging
import threading
from collections.abc import Callable

from lz.config import DEFAULT_WATCH_INTERVAL, MIN_WATCH_INTERVAL, SnapshotOptions, ViewOptions
from lz.snapshot import SnapshotBuilder
from lz.view import ViewModel, build_view_model

logger = logging.getLogger(__name__)

Sink = Callable[[ViewModel], None]


class WatchLoop:
    """
    Re-runs the listing pipeline every ``interval`` seconds.

    Each tick builds a complete ViewModel before the sink sees it. A root that
    cannot be read shows up as ``ViewModel.error`` and the next tick tries
    again. The loop only ends when stopped or interrupted.

    ``run()`` blocks the calling thread; ``start()`` runs the same loop in a
    daemon thread.
    """

    def __init__(
        self,
        root: str,
        sink: Sink,
        snapshot_options: SnapshotOptions | None = None,
        view_options: ViewOptions | None = None,
        interval: float = DEFAULT_WATCH_INTERVAL,
        builder: SnapshotBuilder | None = None,
    ) -> None:
        """
        Initialize the WatchLoop.

        Args:
            root: Directory to list on every tick.
            sink: Receives one ViewModel per tick.
            snapshot_options: What to read; validated here, before the first tick.
            view_options: Sorting and summary settings.
            interval: Seconds between ticks. Default 2.0s.
            builder: Snapshot builder; defaults to one over the local file system.
        """
        self._root = root
        self._sink = sink
        self._snapshot_options = snapshot_options or SnapshotOptions()
        self._view_options = view_options or ViewOptions()
        self._snapshot_options.validate()
        self._builder = builder if builder is not None else SnapshotBuilder()
        self._interval = max(MIN_WATCH_INTERVAL, interval)
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._ticks = 0

    @property
    def interval(self) -> float:
        """Get the current interval."""
        return self._interval

    @interval.setter
    def interval(self, value: float) -> None:
        """Set the interval."""
        self._interval = max(MIN_WATCH_INTERVAL, value)

    @property
    def ticks(self) -> int:
        """Number of view models handed to the sink so far."""
        return self._ticks

    @property
    def is_running(self) -> bool:
        """Check if the background thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def tick(self) -> ViewModel:
        """Build one view model and pass it to the sink."""
        view = build_view_model(self._builder, self._root, self._snapshot_options, self._view_options)
        if view.error is not None:
            logger.info("Watch tick for %s failed: %s", self._root, view.error)
        self._sink(view)
        self._ticks += 1
        return view

    def run(self) -> None:
        """Loop in the calling thread until stop() is called."""
        self._stop_event.clear()
        self._loop()

    def start(self) -> None:
        """Start the loop in a background thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._loop,
            daemon=True,
            name="WatchLoop",
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the loop.

        Args:
            timeout: How long to wait for the background thread (seconds).
        """
        self._stop_event.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)
            self._thread = None

    def _loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.tick()
            except Exception:
                logger.exception("Watch sink failed; continuing")

            # Wait for the interval or until stop is requested
            self._stop_event.wait(timeout=self._interval)
