"""
Error types for archive synchronization.

Every failure raised by the archive, event log, watcher and synchronizer
derives from ArchiveSyncError so callers can catch the whole family at once.
"""


class ArchiveSyncError(Exception):
    """Base class for archive synchronization errors"""
    pass


class ConfigurationError(ArchiveSyncError, ValueError):
    """Raised when an archive or synchronization is set up with invalid paths"""
    pass


class NotFoundError(ArchiveSyncError, LookupError):
    """Raised when a looked-up event or directory does not exist"""
    pass


class EventNotFoundError(NotFoundError):
    """Raised when an event id is absent or the event log is empty"""
    pass


class DirectoryNotFoundError(NotFoundError):
    """Raised when a listed path is not an existing directory"""
    pass


class DivergenceError(ArchiveSyncError):
    """Raised when the receiver's event log is not a predecessor of the transmitter's"""
    pass


class ConsistencyError(ArchiveSyncError, RuntimeError):
    """Raised when the receiver tree contradicts an already completed phase"""
    pass
