"""Pydantic models for endpoint synchronization."""

from .geometry import (
    EndpointRole,
    Coordinate,
    Path,
    PathRequest,
    PathResponse,
)
from .history import SyncOutcome, SyncRecord

__all__ = [
    "EndpointRole",
    "Coordinate",
    "Path",
    "PathRequest",
    "PathResponse",
    "SyncOutcome",
    "SyncRecord",
]
