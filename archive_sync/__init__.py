"""
archive-sync - rename-aware one-way directory synchronization.

Records every rename in a per-archive event log while watching, and replays
unseen renames on the receiver before diffing contents, so renamed files
and directories are moved instead of deleted and copied again.
"""

__version__ = "1.0.0"

# Package imports for convenient access
from core.sync import Archive, ArchiveSynchronizer, RenameEvent, SyncReport, synchronize
from core.storage import RenameEventLog
from core.models.config import ArchiveSyncConfig

__all__ = [
    "Archive",
    "ArchiveSynchronizer",
    "RenameEvent",
    "RenameEventLog",
    "SyncReport",
    "synchronize",
    "ArchiveSyncConfig",
    "__version__",
]
