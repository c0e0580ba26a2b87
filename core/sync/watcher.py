"""
Archive Rename Watcher.

Watches an archive directory tree for renames and delivers them, in
detection order, to registered callbacks from a single dispatch thread.
"""

import logging
import threading
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler, FileSystemMovedEvent

from core.models.config import WatcherConfig
from .events import RenameEvent
from .exceptions import ConfigurationError
from .queue import RenameEventQueue

logger = logging.getLogger(__name__)

RenameCallback = Callable[[RenameEvent], Any]


class RenameEventWatcher:
    """
    Recursive rename watcher with an ordered dispatch pipeline.

    The watchdog emitter thread only converts notifications into
    RenameEvent objects and enqueues them. A dedicated dispatch thread pops
    events one at a time and hands each one to every callback, so
    consumers never run on the notification thread and all downstream
    writes are serialized.
    """

    def __init__(
        self,
        watch_path: Union[str, Path],
        event_callback: Optional[RenameCallback] = None,
        config: Optional[WatcherConfig] = None
    ):
        """
        Initialize the rename watcher.

        Args:
            watch_path: Root directory to monitor
            event_callback: Optional first callback for delivered events
            config: Watcher tuning, defaults to WatcherConfig()

        Raises:
            ConfigurationError: If watch_path is not an existing directory
        """
        watch_path = Path(watch_path)
        if not watch_path.is_dir():
            raise ConfigurationError(
                f'The watch path "{watch_path}" is not an existing directory.'
            )

        self.watch_path = watch_path.resolve()
        self.config = config or WatcherConfig()
        self.event_queue = RenameEventQueue()

        self._callbacks: List[RenameCallback] = []
        if event_callback is not None:
            self._callbacks.append(event_callback)

        # Watchdog components
        self.observer: Optional[Observer] = None
        self.event_handler: Optional['RenameEventHandler'] = None

        # Dispatch state
        self._dispatch_thread: Optional[threading.Thread] = None
        self._stop_dispatch = threading.Event()
        self._lifecycle_lock = threading.Lock()
        self._is_running = False
        self._monitor_start_time: Optional[datetime] = None

        # Delivery tracking
        self._delivered_count = 0
        self._error_count = 0
        self._last_error: Optional[str] = None
        self._last_error_time: Optional[datetime] = None

    def subscribe(self, callback: RenameCallback) -> None:
        """Register a callback invoked for each delivered event, in registration order"""
        self._callbacks.append(callback)

    def start(self) -> bool:
        """
        Start the dispatch thread and the recursive observer.

        Returns:
            True if watching started, False if it was already running
        """
        with self._lifecycle_lock:
            if self._is_running:
                logger.debug(f"{type(self).__name__} has started already")
                return False

            self._stop_dispatch.clear()
            self._dispatch_thread = threading.Thread(
                target=self._dispatch_loop,
                name=f"rename-dispatch:{self.watch_path.name}",
                daemon=True
            )
            self._dispatch_thread.start()

            self.event_handler = RenameEventHandler(self)
            observer = Observer()
            try:
                observer.schedule(
                    self.event_handler,
                    str(self.watch_path),
                    recursive=self.config.recursive
                )
                observer.start()
            except Exception:
                self._stop_dispatch.set()
                self._dispatch_thread.join()
                self._dispatch_thread = None
                self.event_handler = None
                raise

            self.observer = observer
            self._is_running = True
            self._monitor_start_time = datetime.now()

        logger.debug(f"Started watching renames under {self.watch_path}")
        return True

    def stop(self) -> bool:
        """
        Stop notifications, drain queued events, and join the dispatch thread.

        Returns:
            True if watching stopped, False if it was not running
        """
        with self._lifecycle_lock:
            if not self._is_running:
                logger.debug(f"{type(self).__name__} cannot be stopped as it is not started")
                return False

            if self.observer:
                self.observer.stop()
                self.observer.join(timeout=self.config.observer_join_timeout_s)
                if self.observer.is_alive():
                    logger.warning(
                        f"Observer for {self.watch_path} did not stop within "
                        f"{self.config.observer_join_timeout_s}s"
                    )
                self.observer = None

            self._stop_dispatch.set()
            if self._dispatch_thread:
                self._dispatch_thread.join()
            self._dispatch_thread = None
            self.event_handler = None
            self._is_running = False

        logger.debug(f"Stopped watching renames (duration: {self.monitoring_duration})")
        self._monitor_start_time = None
        return True

    def handle_rename(self, old_path: Union[str, Path], new_path: Union[str, Path]) -> None:
        """
        Queue a rename reported by the notification thread.

        Only converts and enqueues; delivery happens on the dispatch thread.

        Args:
            old_path: Absolute path before the rename
            new_path: Absolute path after the rename
        """
        event = RenameEvent.from_absolute_paths(self.watch_path, old_path, new_path)
        self.event_queue.enqueue(event)

    def _dispatch_loop(self) -> None:
        """Deliver queued events in FIFO order until stopped and drained"""
        while not (self._stop_dispatch.is_set() and self.event_queue.is_empty()):
            event = self.event_queue.dequeue()
            if event is None:
                self._stop_dispatch.wait(self.config.poll_interval_s)
                continue
            self._deliver(event)

    def _deliver(self, event: RenameEvent) -> None:
        for callback in self._callbacks:
            try:
                callback(event)
            except Exception as e:
                logger.error(f"Error in rename callback for {event}: {e}", exc_info=True)
                self._error_count += 1
                self._last_error = str(e)
                self._last_error_time = datetime.now()
        self._delivered_count += 1
        logger.debug(f"Delivered rename event: {event}")

    @property
    def is_running(self) -> bool:
        """Check if the watcher is running"""
        return self._is_running

    @property
    def monitoring_duration(self) -> Optional[timedelta]:
        """Get duration of current watching session"""
        if not self._monitor_start_time:
            return None
        return datetime.now() - self._monitor_start_time

    def get_status(self) -> Dict[str, Any]:
        """
        Get status information.

        Returns:
            Dictionary with status information
        """
        return {
            "is_running": self._is_running,
            "watch_path": str(self.watch_path),
            "recursive": self.config.recursive,
            "poll_interval_ms": self.config.poll_interval_ms,
            "callbacks": len(self._callbacks),
            "monitoring_duration": str(self.monitoring_duration) if self.monitoring_duration else None,
            "queue": self.event_queue.get_metrics(),
            "delivered_count": self._delivered_count,
            "error_count": self._error_count,
            "last_error": self._last_error,
            "last_error_time": self._last_error_time.isoformat() if self._last_error_time else None
        }

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()


class RenameEventHandler(FileSystemEventHandler):
    """
    Watchdog event handler that forwards renames to RenameEventWatcher.

    Runs on the watchdog emitter thread; only moves are of interest.
    """

    def __init__(self, watcher: RenameEventWatcher):
        super().__init__()
        self.watcher = watcher

    def on_moved(self, event: FileSystemMovedEvent) -> None:
        """Handle file and directory move/rename events."""
        # Children of a moved directory are reported as synthetic moves;
        # the directory rename already covers them.
        if getattr(event, "is_synthetic", False):
            return
        self.watcher.handle_rename(event.src_path, event.dest_path)
