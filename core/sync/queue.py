"""
Rename Event Queue.

Unbounded FIFO handing rename events from the watchdog emitter thread to
the watcher's dispatch thread.
"""

import logging
import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Deque, Dict, Optional

from .events import RenameEvent

logger = logging.getLogger(__name__)


@dataclass
class QueueMetrics:
    """Metrics for monitoring queue throughput"""
    total_events_enqueued: int = 0
    total_events_dequeued: int = 0
    current_queue_size: int = 0
    max_queue_size_reached: int = 0


class RenameEventQueue:
    """
    Thread-safe first-in first-out queue of rename events.

    Enqueueing never blocks on consumers and never drops an event: the
    queue has no size limit. Dequeueing is non-blocking and returns None
    when nothing is pending.
    """

    def __init__(self):
        self._queue: Deque[RenameEvent] = deque()
        self._queue_lock = threading.Lock()

        self.metrics = QueueMetrics()
        self._start_time = datetime.now()

    def enqueue(self, event: RenameEvent) -> bool:
        """
        Append an event at the tail of the queue.

        Args:
            event: The rename event to enqueue

        Returns:
            True once the event is queued
        """
        with self._queue_lock:
            self._queue.append(event)

            self.metrics.total_events_enqueued += 1
            self.metrics.current_queue_size = len(self._queue)
            self.metrics.max_queue_size_reached = max(
                self.metrics.max_queue_size_reached,
                len(self._queue)
            )
        return True

    def dequeue(self) -> Optional[RenameEvent]:
        """
        Remove and return the oldest event.

        Returns:
            The oldest queued event, or None if the queue is empty
        """
        with self._queue_lock:
            if not self._queue:
                return None
            event = self._queue.popleft()
            self.metrics.total_events_dequeued += 1
            self.metrics.current_queue_size = len(self._queue)
            return event

    def size(self) -> int:
        """Get current queue size"""
        with self._queue_lock:
            return len(self._queue)

    def is_empty(self) -> bool:
        """Check if queue is empty"""
        return self.size() == 0

    def clear(self) -> int:
        """Clear all events from queue and return count cleared"""
        with self._queue_lock:
            count = len(self._queue)
            self._queue.clear()
            self.metrics.current_queue_size = 0
        if count:
            logger.info(f"Cleared {count} events from queue")
        return count

    def get_metrics(self) -> Dict[str, Any]:
        """Get queue metrics"""
        uptime = (datetime.now() - self._start_time).total_seconds()

        return {
            "current_size": self.metrics.current_queue_size,
            "max_size_reached": self.metrics.max_queue_size_reached,
            "events_enqueued": self.metrics.total_events_enqueued,
            "events_dequeued": self.metrics.total_events_dequeued,
            "uptime_seconds": uptime
        }

    def __len__(self) -> int:
        return self.size()
