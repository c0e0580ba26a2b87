"""
Test suite for rename-aware archive synchronization.

This package contains tests for all synchronization components:
- RenameEvent model, Empty sentinel and path normalization
- RenameEventQueue FIFO behavior and metrics
- RenameEventLog persistence, id assignment and lookups
- RenameEventWatcher lifecycle, dispatch ordering and live rename capture
- Archive listing, event wrappers and log wiring
- ArchiveSynchronizer replay, deletion and copy phases
"""
