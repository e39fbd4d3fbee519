"""
Path service client.

Sends both endpoints to the remote path service and decodes the path it
returns. The service is addressed as

    GET {base_url}/?srcLat,srcLng,tgtLat,tgtLng

and answers with an object whose `path` field is a flat list
[lat0, lng0, lat1, lng1, ...]. Older deployments wrap that object in a
script callback, e.g. `redrawLineServerCallback({ path: [...] })`; both forms
are accepted.
"""

import json
import logging
import math
import re
from typing import Optional

import httpx
import numpy as np

from ..errors import InvalidCoordinate, MalformedResponse, PathServiceUnavailable, PathSyncError
from ..models.geometry import Coordinate, Path, PathRequest, PathResponse

logger = logging.getLogger(__name__)

# callbackName( ... ) with an optional trailing semicolon
_CALLBACK_RE = re.compile(r"^\s*[A-Za-z_$][\w$.]*\s*\((?P<body>.*)\)\s*;?\s*$", re.DOTALL)
# { path: ... } -> { "path": ... }
_BARE_KEY_RE = re.compile(r"([{,]\s*)([A-Za-z_$][\w$]*)\s*:")


def format_number(value: float) -> str:
    """Shortest decimal that round-trips, without exponent notation (48.011, 7.82, 48)."""
    return np.format_float_positional(float(value), trim="-")


def encode_query(request: PathRequest) -> str:
    """Encode both endpoints as `srcLat,srcLng,tgtLat,tgtLng`."""
    return ",".join(
        format_number(v)
        for v in (
            request.source.latitude,
            request.source.longitude,
            request.target.latitude,
            request.target.longitude,
        )
    )


def _as_finite(value) -> float:
    """Convert one `path` entry to a float, raising MalformedResponse for anything else."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedResponse(f"'path' must contain only numbers, got {type(value).__name__}")
    try:
        number = float(value)
    except OverflowError as e:
        raise MalformedResponse("'path' contains a number too large for a float") from e
    if not math.isfinite(number):
        raise MalformedResponse(f"'path' must contain only finite numbers, got {number}")
    return number


def decode_response(body: str) -> PathResponse:
    """
    Decode a path service response body.

    Args:
        body: JSON object text, optionally wrapped in a script callback

    Returns:
        PathResponse with the coordinates in the order received

    Raises:
        MalformedResponse: if the body has no usable `path` field
    """
    text = body.strip()
    match = _CALLBACK_RE.match(text)
    if match:
        text = match.group("body").strip()

    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        # Callback bodies from the original server use unquoted object keys
        try:
            data = json.loads(_BARE_KEY_RE.sub(r'\1"\2":', text))
        except json.JSONDecodeError as e:
            raise MalformedResponse(f"Response is not a path object: {body[:200]!r}") from e

    if not isinstance(data, dict) or "path" not in data:
        raise MalformedResponse("Response has no 'path' field")

    values = data["path"]
    if not isinstance(values, list):
        raise MalformedResponse(f"'path' must be a list, got {type(values).__name__}")
    values = [_as_finite(v) for v in values]

    try:
        path = Path.from_flat(values)
    except InvalidCoordinate as e:
        raise MalformedResponse(f"'path' contains an out-of-range coordinate: {e}") from e
    except ValueError as e:
        raise MalformedResponse(str(e)) from e

    return PathResponse(path=path)


class PathServiceClient:
    """
    Asynchronous client for the path service.

    One request per call; failures are raised, never retried.
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8888",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def __aenter__(self) -> "PathServiceClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()

    def build_url(self, request: PathRequest) -> str:
        return f"{self.base_url}/?{encode_query(request)}"

    async def test_connection(self) -> bool:
        """Test API connectivity."""
        try:
            # Both endpoints on the same point in Freiburg
            point = Coordinate(latitude=48.012653, longitude=7.835194)
            await self.request_path(PathRequest(source=point, target=point))
            return True
        except PathSyncError as e:
            logger.warning(f"Path service connectivity check failed: {e}")
            return False

    async def request_path(self, request: PathRequest) -> PathResponse:
        """
        Ask the path service for the path between the request's endpoints.

        Args:
            request: Endpoint snapshot

        Returns:
            Decoded path response

        Raises:
            PathServiceUnavailable: connection failure, timeout or HTTP error status
            MalformedResponse: body received but not a valid path
        """
        url = self.build_url(request)
        logger.debug(f"Requesting path #{request.sequence}: {url}")

        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise PathServiceUnavailable(
                f"Path service returned HTTP {e.response.status_code} for {url}"
            ) from e
        except httpx.TimeoutException as e:
            raise PathServiceUnavailable(
                f"Path service timed out after {self.timeout}s for {url}"
            ) from e
        except httpx.HTTPError as e:
            raise PathServiceUnavailable(f"Path service unreachable at {url}: {e}") from e

        return decode_response(response.text)
