"""
Durable rename event log.

Each archive owns one SQLite file stored next to the archive directory
(`<parent>/<archive name>.db`). Rows are append-only and keyed by an
auto-incremented id starting at 1, so the id order is the rename order.
"""

import logging
import sqlite3
import threading
from pathlib import Path
from typing import Iterator, Optional, Union

from core.sync.events import RenameEvent
from core.sync.exceptions import ConfigurationError, EventNotFoundError

logger = logging.getLogger(__name__)

STORE_SUFFIX = ".db"
TABLE_NAME = "file_renaming_events"

_CREATE_TABLE_SQL = f"""
    CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
        event_id INTEGER PRIMARY KEY AUTOINCREMENT,
        source_relative_path TEXT NOT NULL,
        destination_relative_path TEXT NOT NULL
    )
"""


def derive_store_path(archive_path: Union[str, Path]) -> Path:
    """
    Get the event log file of an archive directory.

    Raises:
        ConfigurationError: If the archive has no parent directory to hold the log
    """
    archive_path = Path(archive_path).resolve()
    if archive_path.parent == archive_path:
        raise ConfigurationError(
            f'archive path "{archive_path}" has no parent directory for its event log'
        )
    return archive_path.parent / f"{archive_path.name}{STORE_SUFFIX}"


class RenameEventLog:
    """
    Append-only, ordered store of an archive's rename events.

    One connection is shared by the watcher's dispatch thread (appends) and
    caller threads (lookups); a lock serializes all access to it.
    """

    def __init__(self, archive_path: Union[str, Path]):
        """
        Open the archive's event log, creating it if missing.

        Args:
            archive_path: Archive directory the log belongs to
        """
        self.store_path = derive_store_path(archive_path)
        self._lock = threading.Lock()

        is_new = not self.store_path.exists()
        self._connection: Optional[sqlite3.Connection] = sqlite3.connect(
            str(self.store_path),
            check_same_thread=False
        )
        with self._connection:
            self._connection.execute(_CREATE_TABLE_SQL)

        if is_new:
            logger.info(f"Created rename event log at {self.store_path}")
        else:
            logger.debug(f"Opened rename event log at {self.store_path}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RenameEventLog):
            return NotImplemented
        return self.store_path == other.store_path

    def __hash__(self) -> int:
        return hash(self.store_path)

    def __repr__(self) -> str:
        return f"RenameEventLog({str(self.store_path)!r})"

    @property
    def connection(self) -> sqlite3.Connection:
        if self._connection is None:
            raise sqlite3.ProgrammingError(f"Event log {self.store_path} is closed")
        return self._connection

    def append(self, event: RenameEvent) -> None:
        """
        Record a rename event; the log assigns the next id.

        Any id already carried by the event is ignored.
        """
        with self._lock, self.connection:
            self.connection.execute(
                f"""INSERT INTO {TABLE_NAME} (
                    source_relative_path,
                    destination_relative_path
                ) VALUES (?, ?)""",
                (event.source_relative_path, event.destination_relative_path)
            )
        logger.debug(f"Recorded rename {event.source_relative_path} -> {event.destination_relative_path}")

    def get(self, event_id: int) -> RenameEvent:
        """
        Get the event stored under event_id.

        Raises:
            EventNotFoundError: If no event has that id
        """
        with self._lock:
            row = self.connection.execute(
                f"SELECT event_id, source_relative_path, destination_relative_path "
                f"FROM {TABLE_NAME} WHERE event_id = ?",
                (event_id,)
            ).fetchone()
        if row is None:
            raise EventNotFoundError(f'"{event_id}" is not a valid event id')
        return self._row_to_event(row)

    def get_last(self) -> RenameEvent:
        """
        Get the most recently recorded event.

        Raises:
            EventNotFoundError: If no event has been recorded
        """
        with self._lock:
            row = self.connection.execute(
                f"SELECT event_id, source_relative_path, destination_relative_path "
                f"FROM {TABLE_NAME} ORDER BY event_id DESC LIMIT 1"
            ).fetchone()
        if row is None:
            raise EventNotFoundError("No file renaming event has been recorded")
        return self._row_to_event(row)

    def iter_events(self, start_id: int = 1) -> Iterator[RenameEvent]:
        """Yield events with id >= start_id in id order"""
        with self._lock:
            rows = self.connection.execute(
                f"SELECT event_id, source_relative_path, destination_relative_path "
                f"FROM {TABLE_NAME} WHERE event_id >= ? ORDER BY event_id",
                (start_id,)
            ).fetchall()
        for row in rows:
            yield self._row_to_event(row)

    def count(self) -> int:
        """Number of recorded events"""
        with self._lock:
            (count,) = self.connection.execute(
                f"SELECT COUNT(*) FROM {TABLE_NAME}"
            ).fetchone()
        return count

    def is_same_or_predecessor(self, other: 'RenameEventLog') -> bool:
        """
        Quick id-only check that this log is not ahead of other.

        An empty log precedes every log; a non-empty log never precedes an
        empty one. Event contents are not compared.
        """
        try:
            own_last_id = self.get_last().event_id
        except EventNotFoundError:
            return True

        try:
            other_last_id = other.get_last().event_id
        except EventNotFoundError:
            return False
        return own_last_id <= other_last_id

    def close(self) -> None:
        """Close the underlying connection; the log can be reopened later"""
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None

    @property
    def is_closed(self) -> bool:
        return self._connection is None

    @staticmethod
    def _row_to_event(row) -> RenameEvent:
        return RenameEvent(
            event_id=row[0],
            source_relative_path=row[1],
            destination_relative_path=row[2]
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
