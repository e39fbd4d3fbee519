"""HTTP routes of the echo path service."""

from .routes import router

__all__ = ["router"]
