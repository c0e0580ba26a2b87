"""
Persistent storage and filesystem primitives for archive-sync.
"""

from .event_log import RenameEventLog, derive_store_path
from .utils import compute_file_digest, files_have_same_content, copy_entry, delete_entry, move_entry

__all__ = [
    "RenameEventLog",
    "derive_store_path",
    "compute_file_digest",
    "files_have_same_content",
    "copy_entry",
    "delete_entry",
    "move_entry",
]
