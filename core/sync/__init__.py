"""
Rename-aware archive synchronization.

This module keeps a receiver directory tree in line with a transmitter tree.
Renames are recorded as they happen and replayed on the receiver before
contents are compared, so a rename is never turned into a delete and a copy.

Key Components:
- RenameEvent: One recorded rename, relative to the archive root
- RenameEventQueue: FIFO between the notification and dispatch threads
- RenameEventWatcher: Recursive rename monitoring via watchdog
- Archive: A directory bound to its event log and watcher
- ArchiveSynchronizer: Replay, delete and copy phases
"""

from .exceptions import (
    ArchiveSyncError,
    ConfigurationError,
    NotFoundError,
    EventNotFoundError,
    DirectoryNotFoundError,
    DivergenceError,
    ConsistencyError,
)
from .events import RenameEvent, EMPTY_EVENT_ID
from .queue import RenameEventQueue
from .watcher import RenameEventWatcher
from .archive import Archive
from .engine import ArchiveSynchronizer, SyncReport, synchronize

__all__ = [
    "ArchiveSyncError",
    "ConfigurationError",
    "NotFoundError",
    "EventNotFoundError",
    "DirectoryNotFoundError",
    "DivergenceError",
    "ConsistencyError",
    "RenameEvent",
    "EMPTY_EVENT_ID",
    "RenameEventQueue",
    "RenameEventWatcher",
    "Archive",
    "ArchiveSynchronizer",
    "SyncReport",
    "synchronize",
]
