"""
Tests for RenameEventWatcher.

Validates lifecycle idempotence, FIFO delivery from the dispatch thread,
callback error isolation, draining on stop and capture of real renames.
"""

import os
import threading
import time
import tempfile
import shutil
from pathlib import Path
from unittest.mock import Mock

import pytest
from watchdog.events import DirMovedEvent, FileMovedEvent

from core.models.config import WatcherConfig
from core.sync.events import RenameEvent
from core.sync.exceptions import ConfigurationError
from core.sync.watcher import RenameEventWatcher, RenameEventHandler


def wait_for(predicate, timeout: float = 5.0, interval: float = 0.05) -> bool:
    """Poll predicate until it holds or timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


class TestRenameEventWatcher:
    """Test suite for the rename watcher."""

    def setup_method(self):
        """Set up test environment."""
        self.temp_dir = Path(tempfile.mkdtemp()).resolve()
        self.config = WatcherConfig(poll_interval_ms=10)
        self.callback = Mock()
        self.watcher = RenameEventWatcher(self.temp_dir, self.callback, config=self.config)

    def teardown_method(self):
        """Clean up test environment."""
        self.watcher.stop()
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_initialization(self):
        """Test watcher initialization."""
        assert self.watcher.watch_path == self.temp_dir
        assert not self.watcher.is_running
        assert self.watcher.observer is None
        assert self.watcher.monitoring_duration is None

    def test_missing_directory_rejected(self):
        """Test watch path validation."""
        with pytest.raises(ConfigurationError, match="not an existing directory"):
            RenameEventWatcher(self.temp_dir / "missing")

    def test_start_stop_lifecycle(self):
        """Starting twice and stopping twice are no-ops the second time."""
        assert self.watcher.start() is True
        assert self.watcher.is_running
        assert self.watcher.start() is False

        assert self.watcher.stop() is True
        assert not self.watcher.is_running
        assert self.watcher.stop() is False

    def test_stop_without_start(self):
        assert self.watcher.stop() is False

    def test_restart_after_stop(self):
        """A stopped watcher can be started again."""
        self.watcher.start()
        self.watcher.stop()

        assert self.watcher.start() is True
        assert self.watcher.is_running

    def test_handle_rename_delivers_in_order(self):
        """Events reach callbacks in the order they were reported."""
        self.watcher.start()
        for i in range(20):
            self.watcher.handle_rename(self.temp_dir / f"f{i}", self.temp_dir / f"g{i}")
        self.watcher.stop()

        delivered = [call.args[0] for call in self.callback.call_args_list]
        assert [event.source_relative_path for event in delivered] == [f"f{i}" for i in range(20)]
        assert all(event.event_id is None for event in delivered)

    def test_stop_drains_queue(self):
        """Events queued before stop are all delivered."""
        self.watcher.start()
        for i in range(100):
            self.watcher.handle_rename(self.temp_dir / f"a{i}", self.temp_dir / f"b{i}")
        self.watcher.stop()

        assert self.callback.call_count == 100
        assert self.watcher.event_queue.is_empty()

    def test_callbacks_run_on_dispatch_thread(self):
        """Consumers never run on the reporting thread."""
        threads = []
        self.watcher.subscribe(lambda event: threads.append(threading.current_thread().name))

        self.watcher.start()
        self.watcher.handle_rename(self.temp_dir / "a", self.temp_dir / "b")
        self.watcher.stop()

        assert threads == [f"rename-dispatch:{self.temp_dir.name}"]

    def test_subscribers_called_in_registration_order(self):
        """Test several callbacks per event."""
        calls = []
        self.watcher.subscribe(lambda event: calls.append("second"))
        self.callback.side_effect = lambda event: calls.append("first")

        self.watcher.start()
        self.watcher.handle_rename(self.temp_dir / "a", self.temp_dir / "b")
        self.watcher.stop()

        assert calls == ["first", "second"]

    def test_callback_error_does_not_stop_delivery(self):
        """A failing callback is logged and the next event still flows."""
        self.callback.side_effect = [RuntimeError("disk full"), None]

        self.watcher.start()
        self.watcher.handle_rename(self.temp_dir / "a", self.temp_dir / "b")
        self.watcher.handle_rename(self.temp_dir / "c", self.temp_dir / "d")
        self.watcher.stop()

        assert self.callback.call_count == 2
        status = self.watcher.get_status()
        assert status["error_count"] == 1
        assert status["last_error"] == "disk full"
        assert status["delivered_count"] == 2

    def test_get_status(self):
        """Test status reporting."""
        self.watcher.start()
        status = self.watcher.get_status()

        assert status["is_running"] is True
        assert status["watch_path"] == str(self.temp_dir)
        assert status["recursive"] is True
        assert status["poll_interval_ms"] == 10
        assert status["callbacks"] == 1
        assert status["queue"]["current_size"] == 0

    def test_context_manager(self):
        with RenameEventWatcher(self.temp_dir, config=self.config) as watcher:
            assert watcher.is_running
        assert not watcher.is_running

    def test_real_file_rename_is_captured(self):
        """A rename on disk produces one event with relative paths."""
        (self.temp_dir / "docs").mkdir()
        (self.temp_dir / "docs" / "old.txt").write_text("content")
        received = []
        self.watcher.subscribe(received.append)

        self.watcher.start()
        time.sleep(0.2)
        os.rename(self.temp_dir / "docs" / "old.txt", self.temp_dir / "docs" / "new.txt")

        assert wait_for(lambda: len(received) >= 1)
        self.watcher.stop()

        assert received[0].source_relative_path == "docs/old.txt"
        assert received[0].destination_relative_path == "docs/new.txt"


class TestRenameEventHandler:
    """Test suite for the watchdog handler."""

    def setup_method(self):
        self.watcher = Mock()
        self.handler = RenameEventHandler(self.watcher)

    def test_file_move_forwarded(self):
        """Test file move forwarding."""
        self.handler.on_moved(FileMovedEvent("/root/a.txt", "/root/b.txt"))

        self.watcher.handle_rename.assert_called_once_with("/root/a.txt", "/root/b.txt")

    def test_directory_move_forwarded(self):
        self.handler.on_moved(DirMovedEvent("/root/a", "/root/b"))

        self.watcher.handle_rename.assert_called_once_with("/root/a", "/root/b")

    def test_synthetic_child_moves_ignored(self):
        """Children of a renamed directory are covered by the directory event."""
        event = DirMovedEvent("/root/a/x", "/root/b/x")
        event.is_synthetic = True

        self.handler.on_moved(event)

        self.watcher.handle_rename.assert_not_called()

    def test_other_events_ignored(self):
        """Only moves are handled."""
        from watchdog.events import FileCreatedEvent, FileDeletedEvent, FileModifiedEvent

        self.handler.dispatch(FileCreatedEvent("/root/a.txt"))
        self.handler.dispatch(FileModifiedEvent("/root/a.txt"))
        self.handler.dispatch(FileDeletedEvent("/root/a.txt"))

        self.watcher.handle_rename.assert_not_called()


def test_handle_rename_builds_relative_event(tmp_path):
    """handle_rename converts absolute paths against the watch root."""
    watcher = RenameEventWatcher(tmp_path)

    watcher.handle_rename(tmp_path.resolve() / "a" / "b.txt", tmp_path.resolve() / "c.txt")

    assert watcher.event_queue.dequeue() == RenameEvent(
        source_relative_path="a/b.txt",
        destination_relative_path="c.txt"
    )
