"""
Archive.

Binds a directory tree to its rename event log and rename watcher. Every
rename the watcher detects is appended to the log before any other
subscriber sees it.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional, Union

from core.models.config import WatcherConfig
from core.storage.event_log import RenameEventLog
from .events import RenameEvent
from .exceptions import ConfigurationError, DirectoryNotFoundError, EventNotFoundError
from .watcher import RenameCallback, RenameEventWatcher

logger = logging.getLogger(__name__)

ROOT_RELATIVE_PATH = "."


def join_relative(relative_path: str, name: str) -> str:
    """Append a child name to a slash-separated archive-relative path"""
    if relative_path in ("", ROOT_RELATIVE_PATH):
        return name
    return f"{relative_path}/{name}"


class Archive:
    """
    A directory tree under synchronization management.

    Two Archive objects are equal when they manage the same root path.
    """

    def __init__(
        self,
        root_path: Union[str, Path],
        watcher_config: Optional[WatcherConfig] = None
    ):
        """
        Open an archive.

        Args:
            root_path: Existing directory to manage
            watcher_config: Optional watcher tuning

        Raises:
            ConfigurationError: If root_path is not an existing directory
        """
        root_path = Path(root_path)
        if not root_path.is_dir():
            raise ConfigurationError(f'Directory "{root_path}" does not exist.')

        self.root_path = root_path.resolve()
        self.event_log = RenameEventLog(self.root_path)
        self.watcher = RenameEventWatcher(self.root_path, config=watcher_config)
        self.watcher.subscribe(self.event_log.append)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Archive):
            return NotImplemented
        return self.root_path == other.root_path

    def __hash__(self) -> int:
        return hash(self.root_path)

    def __repr__(self) -> str:
        return f"Archive({str(self.root_path)!r})"

    def start(self) -> bool:
        """Start watching renames; False if already watching"""
        logger.info(f'Start watching file renaming events on "{self.root_path}".')
        return self.watcher.start()

    def stop(self) -> bool:
        """Stop watching renames after recording queued events; False if not watching"""
        logger.info(f'Stop watching file renaming events on "{self.root_path}".')
        return self.watcher.stop()

    def subscribe(self, callback: RenameCallback) -> None:
        """Register a callback that runs after each rename has been recorded"""
        self.watcher.subscribe(callback)

    def resolve(self, relative_path: str) -> Path:
        """Absolute path of an archive-relative path"""
        return self.root_path / relative_path

    def list_files(self, relative_path: str = ROOT_RELATIVE_PATH) -> List[str]:
        """
        List the names of the files and directories directly under relative_path.

        Returns:
            Names sorted in ordinal (code point) order

        Raises:
            DirectoryNotFoundError: If relative_path is not an existing directory
        """
        combined_path = self.resolve(relative_path)
        if not combined_path.is_dir():
            raise DirectoryNotFoundError(
                f'combined path "{combined_path}" is not an existing directory.'
            )
        return sorted(os.listdir(combined_path))

    def last_event(self) -> RenameEvent:
        """Last recorded rename, or the Empty event if none was recorded"""
        try:
            return self.event_log.get_last()
        except EventNotFoundError:
            return RenameEvent.empty()

    def event_at(self, event_id: int) -> RenameEvent:
        """Rename recorded under event_id, or the Empty event if there is none"""
        try:
            return self.event_log.get(event_id)
        except EventNotFoundError:
            return RenameEvent.empty()

    def close(self) -> None:
        """Stop watching and release the event log"""
        if self.watcher.is_running:
            self.stop()
        self.event_log.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
