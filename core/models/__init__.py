"""
Core data models for archive-sync

Pydantic models for configuration.
"""

from .config import WatcherConfig, SyncConfig, LoggingConfig, ArchiveSyncConfig, GlobalSettings

__all__ = [
    "WatcherConfig",
    "SyncConfig",
    "LoggingConfig",
    "ArchiveSyncConfig",
    "GlobalSettings",
]
