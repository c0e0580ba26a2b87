"""
archive-sync core package

Rename-aware one-way synchronization of directory trees.
"""

__version__ = "1.0.0"

from .models import ArchiveSyncConfig, SyncConfig, WatcherConfig
from .sync import Archive, ArchiveSynchronizer, RenameEvent, SyncReport, synchronize

__all__ = [
    "ArchiveSyncConfig",
    "SyncConfig",
    "WatcherConfig",
    "Archive",
    "ArchiveSynchronizer",
    "RenameEvent",
    "SyncReport",
    "synchronize",
]
