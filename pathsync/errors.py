"""Error kinds surfaced by endpoint updates and path synchronization."""


class PathSyncError(Exception):
    """Base class for all synchronization errors."""
    pass


class InvalidCoordinate(PathSyncError, ValueError):
    """Raised when a latitude/longitude pair is out of range."""

    def __init__(self, latitude, longitude, reason: str = ""):
        self.latitude = latitude
        self.longitude = longitude
        message = f"Invalid coordinate ({latitude}, {longitude})"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class PathServiceUnavailable(PathSyncError):
    """Transport-level failure: no response, connection refused, timeout."""
    pass


class MalformedResponse(PathSyncError):
    """A response was received but its `path` field is missing or ill-typed."""
    pass
