"""
Echo path service routes.

Answers `GET /?srcLat,srcLng,tgtLat,tgtLng` with the endpoints it was given,
as a two-point path. Stands in for a real routing backend during development.
"""

import json
import logging
import re
from urllib.parse import unquote

from fastapi import APIRouter, HTTPException, Request, Response

from ..errors import InvalidCoordinate
from ..models.geometry import Path

logger = logging.getLogger(__name__)

router = APIRouter()

_NUMBER = r"[+-]?(?:[0-9]*[.])?[0-9]+(?:[eE][+-]?[0-9]+)?"
_QUERY_RE = re.compile(
    rf"^(?P<lat1>{_NUMBER}),(?P<lng1>{_NUMBER}),(?P<lat2>{_NUMBER}),(?P<lng2>{_NUMBER})$"
)
_CALLBACK_NAME_RE = re.compile(r"^[A-Za-z_$][\w$.]*$")


def parse_endpoints(query: str) -> Path:
    """
    Parse the four comma-separated endpoint numbers of a path query.

    Raises:
        HTTPException: 400 if the query is not four numbers or a coordinate is out of range
    """
    coordinates = unquote(query).split("&", 1)[0].strip()
    match = _QUERY_RE.match(coordinates)
    if not match:
        raise HTTPException(
            status_code=400,
            detail="Expected query 'srcLat,srcLng,tgtLat,tgtLng', "
            f"got {coordinates!r}",
        )
    try:
        return Path.from_flat(
            [float(match[name]) for name in ("lat1", "lng1", "lat2", "lng2")]
        )
    except InvalidCoordinate as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


@router.get("/")
async def echo_path(request: Request):
    """Return the requested endpoints as the path to draw."""
    query = request.url.query
    logger.info(f"Request: {unquote(query)}")

    path = parse_endpoints(query)
    payload = {"path": path.to_flat()}

    callback = request.query_params.get("callback")
    if callback:
        if not _CALLBACK_NAME_RE.match(callback):
            raise HTTPException(status_code=400, detail=f"Invalid callback name: {callback!r}")
        return Response(
            content=f"{callback}({json.dumps(payload)})",
            media_type="application/javascript",
        )

    return payload
