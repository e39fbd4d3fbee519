"""Synchronization between endpoint markers and the rendered path."""

from .controller import SyncController
from .strategies import DirectLineStrategy, PathStrategy, RemotePathStrategy, build_strategy

__all__ = [
    "SyncController",
    "DirectLineStrategy",
    "PathStrategy",
    "RemotePathStrategy",
    "build_strategy",
]
