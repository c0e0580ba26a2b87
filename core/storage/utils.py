"""
Filesystem utilities for synchronization.

Provides the content digest used for change detection and the move, copy
and delete primitives applied to archive trees. A primitive whose source
has vanished logs a warning and does nothing.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import Union

import xxhash

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 262144

PathLike = Union[str, Path]


def compute_file_digest(file_path: PathLike, buffer_size: int = DEFAULT_BUFFER_SIZE) -> str:
    """
    Compute a content digest of a file with streamed reads.

    The digest (XXH3, 128 bit) only serves change detection, so a fast
    non-cryptographic hash is enough.

    Args:
        file_path: File to hash
        buffer_size: Bytes read per chunk

    Returns:
        Hexadecimal digest string
    """
    hasher = xxhash.xxh3_128()
    with open(file_path, 'rb') as f:
        while chunk := f.read(buffer_size):
            hasher.update(chunk)
    return hasher.hexdigest()


def files_have_same_content(
    path_a: PathLike,
    path_b: PathLike,
    buffer_size: int = DEFAULT_BUFFER_SIZE
) -> bool:
    """Check if two files hold identical bytes by comparing their digests"""
    return compute_file_digest(path_a, buffer_size) == compute_file_digest(path_b, buffer_size)


def move_entry(source_path: PathLike, destination_path: PathLike) -> bool:
    """
    Rename a file or directory, creating the destination's parent if needed.

    Returns:
        True if something was moved, False if the source did not exist
    """
    source_path = Path(source_path)
    destination_path = Path(destination_path)
    logger.debug(f'Renaming "{source_path}" to "{destination_path}"')

    if not (source_path.is_dir() or source_path.is_file()):
        logger.warning(f'Neither file nor directory exists at "{source_path}" for renaming.')
        return False

    destination_path.parent.mkdir(parents=True, exist_ok=True)
    os.rename(source_path, destination_path)
    return True


def copy_entry(source_path: PathLike, destination_path: PathLike) -> bool:
    """
    Copy a file, or a whole directory tree, overwriting existing files.

    A directory copy creates the destination, recreates every
    subdirectory, and copies every file underneath.

    Returns:
        True if something was copied, False if the source did not exist
    """
    source_path = Path(source_path)
    destination_path = Path(destination_path)
    logger.debug(f'Copying "{source_path}" to "{destination_path}"')

    if source_path.is_dir():
        shutil.copytree(source_path, destination_path, dirs_exist_ok=True)
    elif source_path.is_file():
        shutil.copy2(source_path, destination_path)
    else:
        logger.warning(f'Neither file nor directory exists at "{source_path}" for copying.')
        return False
    return True


def delete_entry(path: PathLike) -> bool:
    """
    Delete a file, or a directory recursively.

    Returns:
        True if something was deleted, False if nothing existed at path
    """
    path = Path(path)
    logger.debug(f'Deleting "{path}"')

    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.is_file() or path.is_symlink():
        path.unlink()
    else:
        logger.warning(f'Neither file nor directory exists at "{path}" for deleting.')
        return False
    return True
