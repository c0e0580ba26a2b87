"""
Default configuration values for archive-sync.

Centralized defaults that can be overridden by environment variables or config files.
"""

from typing import Any, Dict

# Global default settings
DEFAULT_SETTINGS: Dict[str, Dict[str, Any]] = {
    # Rename watcher
    "watcher": {
        "poll_interval_ms": 100,
        "observer_join_timeout_s": 5.0,
        "recursive": True
    },

    # Synchronization
    "sync": {
        "hash_buffer_size": 262144
    },

    # Logging
    "logging": {
        "level": "INFO",
        "log_file": None,
        "max_bytes": 67108864,
        "backup_count": 4
    }
}

# Environment variable mappings
ENV_VAR_MAPPING = {
    'ARCHIVE_SYNC_POLL_INTERVAL_MS': 'watcher.poll_interval_ms',
    'ARCHIVE_SYNC_OBSERVER_JOIN_TIMEOUT': 'watcher.observer_join_timeout_s',
    'ARCHIVE_SYNC_HASH_BUFFER_SIZE': 'sync.hash_buffer_size',
    'ARCHIVE_SYNC_LOG_LEVEL': 'logging.level',
    'ARCHIVE_SYNC_LOG_FILE': 'logging.log_file',
    'ARCHIVE_SYNC_LOG_MAX_BYTES': 'logging.max_bytes',
    'ARCHIVE_SYNC_LOG_BACKUP_COUNT': 'logging.backup_count'
}

# Config keys whose environment values stay strings
STRING_CONFIG_KEYS = {'logging.level', 'logging.log_file'}
