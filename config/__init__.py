"""
Configuration management for archive-sync

Handles loading and validation of watcher, synchronization and logging settings.
"""

from .loader import ConfigurationLoader
from .defaults import DEFAULT_SETTINGS

__all__ = ["ConfigurationLoader", "DEFAULT_SETTINGS"]
