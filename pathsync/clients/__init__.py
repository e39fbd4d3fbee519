"""API clients for external services."""

from .path_service import PathServiceClient, decode_response, encode_query

__all__ = [
    "PathServiceClient",
    "decode_response",
    "encode_query",
]
