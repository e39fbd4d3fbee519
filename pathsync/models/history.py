"""Audit records of synchronization attempts."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .geometry import EndpointRole, Path, PathRequest


class SyncOutcome(str, Enum):
    """What happened to a path request once it completed."""
    APPLIED = "applied"
    DISCARDED = "discarded"
    FAILED = "failed"


class SyncRecord(BaseModel):
    """One drag-triggered request and its outcome."""
    sequence: int
    role: Optional[EndpointRole] = Field(default=None, description="Marker that triggered the request")
    strategy: str
    request: PathRequest
    outcome: SyncOutcome
    path: Optional[Path] = Field(default=None, description="Path applied, if any")
    error: Optional[str] = Field(default=None, description="Failure message for failed requests")

    issued_at: datetime
    completed_at: datetime

    @property
    def duration_seconds(self) -> float:
        return (self.completed_at - self.issued_at).total_seconds()
