"""
Configuration models for archive-sync.

Handles watcher tuning, synchronization settings, and logging setup.
"""

from pathlib import Path
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class WatcherConfig(BaseModel):
    """Rename watcher configuration"""
    model_config = ConfigDict(
        validate_assignment=True
    )

    # Dispatch loop sleep while the queue is empty
    poll_interval_ms: int = Field(default=100, ge=1, le=10000)

    # Maximum wait for the watchdog observer thread on stop
    observer_join_timeout_s: float = Field(default=5.0, gt=0.0, le=60.0)

    recursive: bool = True

    @property
    def poll_interval_s(self) -> float:
        """Get poll interval in seconds"""
        return self.poll_interval_ms / 1000.0


class SyncConfig(BaseModel):
    """Synchronization algorithm configuration"""
    model_config = ConfigDict(
        validate_assignment=True
    )

    # Read size for streamed content digests
    hash_buffer_size: int = Field(default=262144, ge=4096, le=64 * 1024 * 1024)


class LoggingConfig(BaseModel):
    """Logging configuration"""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True
    )

    level: str = "INFO"
    log_file: Optional[Path] = None

    # Rolling file policy
    max_bytes: int = Field(default=67108864, ge=1024)
    backup_count: int = Field(default=4, ge=0, le=100)

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level name"""
        valid_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if v.upper() not in valid_levels:
            raise ValueError(f'Log level must be one of: {sorted(valid_levels)}')
        return v.upper()


class ArchiveSyncConfig(BaseModel):
    """Complete archive-sync configuration"""
    model_config = ConfigDict(
        validate_assignment=True
    )

    watcher: WatcherConfig = Field(default_factory=WatcherConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        data = self.model_dump()
        if data['logging']['log_file'] is not None:
            data['logging']['log_file'] = str(data['logging']['log_file'])
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ArchiveSyncConfig':
        """Create from dictionary"""
        return cls(**data)


class GlobalSettings(BaseSettings):
    """Global application settings with environment variable support"""
    model_config = SettingsConfigDict(
        env_prefix="ARCHIVE_SYNC_",
        case_sensitive=False,
        extra="ignore"
    )

    global_config_dir: Path = Field(
        default_factory=lambda: Path.home() / ".archive-sync"
    )
    config_file: Optional[Path] = None

    @property
    def default_config_file(self) -> Path:
        """Get the configuration file used when none is given explicitly"""
        if self.config_file is not None:
            return self.config_file
        return self.global_config_dir / "config.json"
