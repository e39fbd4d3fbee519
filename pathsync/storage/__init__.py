"""Storage for synchronization history."""

from .history import SyncHistory

__all__ = ["SyncHistory"]
