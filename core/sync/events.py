"""
Rename Event Model.

Defines the rename event recorded in an archive's event log and replayed
on a receiver during synchronization.
"""

import os
from pathlib import Path, PurePosixPath
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator


# Id of the Empty event, which stands for "no event recorded"
EMPTY_EVENT_ID = 0


class RenameEvent(BaseModel):
    """
    A single detected rename inside an archive.

    Paths are relative to the archive root and always use forward slashes,
    so events recorded on one platform replay on another. The id is None
    until the event log stores the event and assigns the next id.
    """
    model_config = ConfigDict(frozen=True)

    source_relative_path: str
    destination_relative_path: str
    event_id: Optional[int] = None

    @field_validator('source_relative_path', 'destination_relative_path')
    @classmethod
    def validate_relative_path(cls, v: str) -> str:
        """Ensure path is relative to the archive root"""
        if v and PurePosixPath(v).is_absolute():
            raise ValueError(f'Path must be relative to the archive root: {v}')
        return v

    @field_validator('event_id')
    @classmethod
    def validate_event_id(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError('Event id must not be negative')
        return v

    @classmethod
    def empty(cls) -> 'RenameEvent':
        """The event that denotes an empty history"""
        return cls(
            source_relative_path="",
            destination_relative_path="",
            event_id=EMPTY_EVENT_ID
        )

    @classmethod
    def from_absolute_paths(
        cls,
        root_path: Union[str, Path],
        old_path: Union[str, Path],
        new_path: Union[str, Path]
    ) -> 'RenameEvent':
        """Create an unsaved event from two absolute paths under root_path"""
        return cls(
            source_relative_path=to_relative_path(root_path, old_path),
            destination_relative_path=to_relative_path(root_path, new_path)
        )

    @property
    def is_empty(self) -> bool:
        return self.event_id == EMPTY_EVENT_ID

    @property
    def is_saved(self) -> bool:
        """Check if the event log has assigned an id to this event"""
        return self.event_id is not None and self.event_id != EMPTY_EVENT_ID

    def with_id(self, event_id: Optional[int]) -> 'RenameEvent':
        """Copy of this event carrying another id"""
        return self.model_copy(update={"event_id": event_id})

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization"""
        return {
            "event_id": self.event_id,
            "source": self.source_relative_path,
            "destination": self.destination_relative_path
        }

    def __str__(self) -> str:
        return f"#{self.event_id}: {self.source_relative_path} -> {self.destination_relative_path}"


def to_relative_path(root_path: Union[str, Path], path: Union[str, Path]) -> str:
    """
    Express an absolute path relative to root_path with forward slashes.

    Args:
        root_path: Archive root directory
        path: Absolute path inside the archive

    Returns:
        Slash-separated relative path ("." for the root itself)
    """
    relative = os.path.relpath(os.fspath(path), os.fspath(root_path))
    return Path(relative).as_posix()
