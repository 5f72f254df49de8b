"""Tests for the WatchLoop class."""

import shutil
import threading
from queue import Queue

import pytest

from lz.config import SnapshotOptions, ViewOptions
from lz.errors import ConfigurationConflict
from lz.view import ViewModel
from lz.watch import WatchLoop

from conftest import write


class TestWatchLoop:
    """Tests for WatchLoop class."""

    def test_loop_creation(self, sample_dir):
        """Test WatchLoop can be instantiated with the default interval."""
        queue: Queue[ViewModel] = Queue()
        loop = WatchLoop(str(sample_dir), queue.put)

        assert loop.interval == 2.0
        assert not loop.is_running
        assert loop.ticks == 0

    def test_interval_minimum(self, sample_dir):
        """Test the interval has a minimum value."""
        queue: Queue[ViewModel] = Queue()
        loop = WatchLoop(str(sample_dir), queue.put, interval=0.001)
        assert loop.interval >= 0.1

        loop.interval = 0.01
        assert loop.interval >= 0.1

    def test_invalid_options_rejected_before_first_tick(self, sample_dir):
        """Test configuration errors surface at construction."""
        with pytest.raises(ConfigurationConflict):
            WatchLoop(str(sample_dir), print, SnapshotOptions(only_dirs=True, only_files=True))

    def test_tick_feeds_sink(self, sample_dir):
        """Test a single tick hands one complete view model to the sink."""
        queue: Queue[ViewModel] = Queue()
        loop = WatchLoop(str(sample_dir), queue.put, view_options=ViewOptions(summary=True))

        view = loop.tick()

        assert queue.get_nowait() is view
        assert {e.name for e in view.entries} == {"a.txt", "b.rs", "sub"}
        assert view.summary is not None
        assert loop.ticks == 1

    def test_loop_start_stop(self, sample_dir):
        """Test WatchLoop can be started and stopped."""
        queue: Queue[ViewModel] = Queue()
        loop = WatchLoop(str(sample_dir), queue.put, interval=0.1)

        loop.start()
        assert loop.is_running

        loop.stop()
        assert not loop.is_running

    def test_loop_start_idempotent(self, sample_dir):
        """Test starting an already running loop is safe."""
        queue: Queue[ViewModel] = Queue()
        loop = WatchLoop(str(sample_dir), queue.put, interval=0.1)

        loop.start()
        thread1 = loop._thread

        loop.start()  # Should not create a new thread
        thread2 = loop._thread

        assert thread1 is thread2
        loop.stop()

    def test_daemon_thread(self, sample_dir):
        """Test the loop thread is a named daemon thread."""
        queue: Queue[ViewModel] = Queue()
        loop = WatchLoop(str(sample_dir), queue.put, interval=0.1)

        loop.start()

        try:
            assert loop._thread is not None
            assert loop._thread.daemon is True
            assert loop._thread.name == "WatchLoop"
        finally:
            loop.stop()

    def test_loop_keeps_ticking(self, sample_dir):
        """Test several view models arrive in a row."""
        queue: Queue[ViewModel] = Queue()
        loop = WatchLoop(str(sample_dir), queue.put, interval=0.1)

        loop.start()

        try:
            first = queue.get(timeout=2.0)
            second = queue.get(timeout=2.0)
            assert first is not second
            assert first.entries == second.entries
        finally:
            loop.stop()

    def test_picks_up_changes(self, sample_dir):
        """Test a file created between ticks shows up in the next view model."""
        queue: Queue[ViewModel] = Queue()
        loop = WatchLoop(str(sample_dir), queue.put)

        loop.tick()
        write(sample_dir / "new.txt", 1)
        loop.tick()

        before, after = queue.get_nowait(), queue.get_nowait()
        assert "new.txt" not in {e.name for e in before.entries}
        assert "new.txt" in {e.name for e in after.entries}

    def test_deleted_root_reports_error_then_recovers(self, sample_dir):
        """Test a root deleted mid-run yields an error tick, then success once it reappears."""
        queue: Queue[ViewModel] = Queue()
        loop = WatchLoop(str(sample_dir), queue.put)

        assert loop.tick().error is None
        shutil.rmtree(sample_dir)
        failed = loop.tick()
        write(sample_dir / "back.txt", 2)
        recovered = loop.tick()

        assert failed.error is not None
        assert failed.entries == ()
        assert recovered.error is None
        assert [e.name for e in recovered.entries] == ["back.txt"]

    def test_sink_failure_does_not_stop_loop(self, sample_dir):
        """Test the loop survives a sink that raises."""
        calls = []
        seen_twice = threading.Event()

        def sink(view: ViewModel) -> None:
            calls.append(view)
            if len(calls) >= 2:
                seen_twice.set()
            raise RuntimeError("sink broke")

        loop = WatchLoop(str(sample_dir), sink, interval=0.1)
        loop.start()

        try:
            assert seen_twice.wait(timeout=3.0)
            assert loop.is_running
        finally:
            loop.stop()

    def test_run_blocks_until_stopped(self, sample_dir):
        """Test run() loops in the calling thread and returns after stop()."""
        queue: Queue[ViewModel] = Queue()
        loop = WatchLoop(str(sample_dir), queue.put, interval=0.1)

        def stop_after_three(view: ViewModel) -> None:
            queue.put(view)
            if queue.qsize() >= 3:
                loop.stop()

        loop._sink = stop_after_three
        runner = threading.Thread(target=loop.run)
        runner.start()
        runner.join(timeout=5.0)

        assert not runner.is_alive()
        assert loop.ticks >= 3
