"""
Archive Synchronization Engine.

One-way synchronization of a receiver archive to a transmitter archive in
three phases:

1. Replay the transmitter's rename events the receiver has not seen yet,
   so renamed entries are moved instead of deleted and copied again.
2. Delete receiver entries that no longer exist in the transmitter.
3. Copy transmitter entries that are new or whose content changed.

Phases 2 and 3 walk both trees with an explicit directory stack and
merge-join the sorted listings of each directory.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from core.models.config import SyncConfig
from core.storage.utils import copy_entry, delete_entry, files_have_same_content, move_entry
from .archive import ROOT_RELATIVE_PATH, Archive, join_relative
from .events import RenameEvent
from .exceptions import ConfigurationError, ConsistencyError, DivergenceError

logger = logging.getLogger(__name__)

ProgressHook = Callable[[str], None]


@dataclass
class SyncReport:
    """Actions performed by one synchronize call."""

    transmitter_path: Path
    receiver_path: Path

    # Transmitter event ids appended to the receiver's log
    replayed_event_ids: List[int] = field(default_factory=list)

    # Receiver-relative paths touched by each phase
    renamed: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    copied: List[str] = field(default_factory=list)

    # Planned actions skipped because their source had vanished
    skipped: List[str] = field(default_factory=list)

    started_at: datetime = field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None

    @property
    def total_actions(self) -> int:
        return len(self.renamed) + len(self.deleted) + len(self.copied)

    @property
    def is_noop(self) -> bool:
        """Check if the receiver was already synchronized"""
        return self.total_actions == 0 and not self.replayed_event_ids

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging"""
        return {
            "transmitter": str(self.transmitter_path),
            "receiver": str(self.receiver_path),
            "replayed_event_ids": list(self.replayed_event_ids),
            "renamed": len(self.renamed),
            "deleted": len(self.deleted),
            "copied": len(self.copied),
            "skipped": len(self.skipped),
            "duration_seconds": self.duration_seconds
        }


class ArchiveSynchronizer:
    """
    Stateless one-way synchronizer between two archives.

    Only the receiver's tree and event log are modified. The caller must
    keep both trees free of other changes until synchronize returns; a
    failure leaves the receiver partially synchronized and the call can
    simply be repeated once the cause is resolved.
    """

    def __init__(self, config: Optional[SyncConfig] = None):
        self.config = config or SyncConfig()

    def synchronize(
        self,
        transmitter: Archive,
        receiver: Archive,
        progress_hook: Optional[ProgressHook] = None
    ) -> SyncReport:
        """
        Bring receiver in line with transmitter.

        Args:
            transmitter: Source of truth
            receiver: Archive to modify
            progress_hook: Optional sink for one-line action descriptions

        Returns:
            SyncReport of the actions taken

        Raises:
            ConfigurationError: If both archives are the same
            DivergenceError: If receiver's log is not a predecessor of transmitter's
            ConsistencyError: If a receiver-only entry survives the deletion phase
        """
        if transmitter == receiver:
            raise ConfigurationError("transmitter and receiver must be different.")

        logger.info(
            f'Start synchronizing directories "{transmitter.root_path}" and "{receiver.root_path}". '
            "Do not make any changes to the directories before the synchronization is finished."
        )
        report = SyncReport(
            transmitter_path=transmitter.root_path,
            receiver_path=receiver.root_path
        )

        self.replay_rename_events(transmitter, receiver, report, progress_hook)
        self.delete_stale_entries(transmitter, receiver, report, progress_hook)
        self.copy_additions_and_changes(transmitter, receiver, report, progress_hook)

        report.finished_at = datetime.now()
        logger.info(f"Synchronization is finished: {report.to_dict()}")
        return report

    def check_compatibility(
        self,
        transmitter: Archive,
        receiver: Archive
    ) -> Tuple[RenameEvent, RenameEvent]:
        """
        Verify that receiver's rename history is a prefix of transmitter's.

        Returns:
            The last events of transmitter and receiver (Empty when none)

        Raises:
            DivergenceError: If receiver is ahead of or has diverged from transmitter
        """
        transmitter_last_event = transmitter.last_event()
        receiver_last_event = receiver.last_event()

        is_valid = receiver_last_event.event_id <= transmitter_last_event.event_id
        retraced_event = transmitter.event_at(receiver_last_event.event_id)
        is_valid = is_valid and retraced_event == receiver_last_event

        if not is_valid:
            raise DivergenceError(
                "The receiver is not a predecessor of the transmitter: "
                f"receiver's last event is {receiver_last_event}, "
                f"transmitter has {retraced_event} at that id "
                f"(transmitter's last id is {transmitter_last_event.event_id})."
            )
        return transmitter_last_event, receiver_last_event

    def is_compatible(self, transmitter: Archive, receiver: Archive) -> bool:
        """Check if receiver can be synchronized from transmitter"""
        try:
            self.check_compatibility(transmitter, receiver)
        except DivergenceError:
            return False
        return True

    def replay_rename_events(
        self,
        transmitter: Archive,
        receiver: Archive,
        report: SyncReport,
        progress_hook: Optional[ProgressHook] = None
    ) -> None:
        """Apply the transmitter's unseen renames inside the receiver's tree."""
        logger.debug("Renaming files in the receiver side.")

        transmitter_last_event, receiver_last_event = self.check_compatibility(
            transmitter, receiver
        )

        for event_id in range(receiver_last_event.event_id + 1, transmitter_last_event.event_id + 1):
            event = transmitter.event_log.get(event_id)
            receiver.event_log.append(event)
            report.replayed_event_ids.append(event_id)

            # Both ends of the move live in the receiver's tree.
            source_path = receiver.resolve(event.source_relative_path)
            destination_path = receiver.resolve(event.destination_relative_path)
            self._notify(progress_hook, f'Renaming "{source_path}"')
            if move_entry(source_path, destination_path):
                report.renamed.append(event.destination_relative_path)
            else:
                report.skipped.append(event.source_relative_path)

    def delete_stale_entries(
        self,
        transmitter: Archive,
        receiver: Archive,
        report: SyncReport,
        progress_hook: Optional[ProgressHook] = None
    ) -> None:
        """Delete receiver entries that the transmitter does not have."""
        logger.debug("Deleting files in the receiver that are not in the transmitter.")

        directory_stack = [ROOT_RELATIVE_PATH]
        while directory_stack:
            relative_path = directory_stack.pop()
            logger.debug(f'Processing directory "{relative_path}"')
            transmitter_files = transmitter.list_files(relative_path)
            receiver_files = receiver.list_files(relative_path)
            transmitter_ptr = 0
            receiver_ptr = 0

            while transmitter_ptr < len(transmitter_files) and receiver_ptr < len(receiver_files):
                transmitter_name = transmitter_files[transmitter_ptr]
                receiver_name = receiver_files[receiver_ptr]

                if transmitter_name < receiver_name:
                    transmitter_ptr += 1
                elif transmitter_name == receiver_name:
                    entry_path = join_relative(relative_path, transmitter_name)
                    transmitter_is_dir = transmitter.resolve(entry_path).is_dir()
                    receiver_is_dir = receiver.resolve(entry_path).is_dir()
                    if transmitter_is_dir != receiver_is_dir:
                        # A file replaced by a directory or the reverse
                        self._delete(receiver, entry_path, report, progress_hook)
                    elif transmitter_is_dir:
                        directory_stack.append(entry_path)
                    transmitter_ptr += 1
                    receiver_ptr += 1
                else:
                    entry_path = join_relative(relative_path, receiver_name)
                    self._delete(receiver, entry_path, report, progress_hook)
                    receiver_ptr += 1

            while receiver_ptr < len(receiver_files):
                entry_path = join_relative(relative_path, receiver_files[receiver_ptr])
                self._delete(receiver, entry_path, report, progress_hook)
                receiver_ptr += 1

    def copy_additions_and_changes(
        self,
        transmitter: Archive,
        receiver: Archive,
        report: SyncReport,
        progress_hook: Optional[ProgressHook] = None
    ) -> None:
        """Copy new and changed transmitter entries to the receiver."""
        logger.debug("Copying files from the transmitter to the receiver.")

        directory_stack = [ROOT_RELATIVE_PATH]
        while directory_stack:
            relative_path = directory_stack.pop()
            transmitter_files = transmitter.list_files(relative_path)
            receiver_files = receiver.list_files(relative_path)
            transmitter_ptr = 0
            receiver_ptr = 0

            while transmitter_ptr < len(transmitter_files) and receiver_ptr < len(receiver_files):
                transmitter_name = transmitter_files[transmitter_ptr]
                receiver_name = receiver_files[receiver_ptr]
                entry_path = join_relative(relative_path, transmitter_name)

                if transmitter_name < receiver_name:
                    self._copy(transmitter, receiver, entry_path, report, progress_hook)
                    transmitter_ptr += 1
                elif transmitter_name == receiver_name:
                    transmitter_entry = transmitter.resolve(entry_path)
                    if transmitter_entry.is_dir():
                        directory_stack.append(entry_path)
                    elif not files_have_same_content(
                        transmitter_entry,
                        receiver.resolve(entry_path),
                        self.config.hash_buffer_size
                    ):
                        self._copy(transmitter, receiver, entry_path, report, progress_hook)
                    transmitter_ptr += 1
                    receiver_ptr += 1
                else:
                    raise ConsistencyError(
                        f'"{join_relative(relative_path, receiver_name)}" exists only in the '
                        "receiver although stale entries were already deleted."
                    )

            while transmitter_ptr < len(transmitter_files):
                entry_path = join_relative(relative_path, transmitter_files[transmitter_ptr])
                self._copy(transmitter, receiver, entry_path, report, progress_hook)
                transmitter_ptr += 1

            if receiver_ptr < len(receiver_files):
                raise ConsistencyError(
                    f'"{join_relative(relative_path, receiver_files[receiver_ptr])}" exists only in the '
                    "receiver although stale entries were already deleted."
                )

    def _delete(
        self,
        receiver: Archive,
        entry_path: str,
        report: SyncReport,
        progress_hook: Optional[ProgressHook]
    ) -> None:
        path_to_delete = receiver.resolve(entry_path)
        self._notify(progress_hook, f'Deleting "{path_to_delete}"')
        if delete_entry(path_to_delete):
            report.deleted.append(entry_path)
        else:
            report.skipped.append(entry_path)

    def _copy(
        self,
        transmitter: Archive,
        receiver: Archive,
        entry_path: str,
        report: SyncReport,
        progress_hook: Optional[ProgressHook]
    ) -> None:
        transmitter_entry = transmitter.resolve(entry_path)
        self._notify(progress_hook, f'Copying "{transmitter_entry}"')
        if copy_entry(transmitter_entry, receiver.resolve(entry_path)):
            report.copied.append(entry_path)
        else:
            report.skipped.append(entry_path)

    @staticmethod
    def _notify(progress_hook: Optional[ProgressHook], message: str) -> None:
        if progress_hook is not None:
            progress_hook(message)


def synchronize(
    transmitter: Archive,
    receiver: Archive,
    progress_hook: Optional[ProgressHook] = None,
    config: Optional[SyncConfig] = None
) -> SyncReport:
    """Synchronize receiver from transmitter with a default ArchiveSynchronizer"""
    return ArchiveSynchronizer(config).synchronize(transmitter, receiver, progress_hook)
