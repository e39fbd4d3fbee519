"""Coordinate and path models exchanged between the map, the controller and the path service."""

from enum import Enum
from typing import Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import InvalidCoordinate


class EndpointRole(str, Enum):
    """Which of the two draggable markers moved."""
    SOURCE = "source"
    TARGET = "target"


class Coordinate(BaseModel):
    """Latitude/longitude coordinate pair."""
    model_config = ConfigDict(frozen=True, strict=True)

    latitude: float = Field(description="Latitude in decimal degrees", ge=-90, le=90, allow_inf_nan=False)
    longitude: float = Field(description="Longitude in decimal degrees", ge=-180, le=180, allow_inf_nan=False)

    @classmethod
    def of(cls, latitude: float, longitude: float) -> "Coordinate":
        """Build a coordinate, raising InvalidCoordinate instead of a pydantic ValidationError."""
        try:
            return cls(latitude=latitude, longitude=longitude)
        except ValidationError as e:
            reasons = "; ".join(
                f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise InvalidCoordinate(latitude, longitude, reasons) from e

    def as_tuple(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)


class Path(BaseModel):
    """Ordered coordinates of the rendered line. Replaced wholesale, never edited."""
    model_config = ConfigDict(frozen=True)

    points: tuple[Coordinate, ...] = Field(min_length=2, description="Points in drawing order")

    @classmethod
    def straight(cls, source: Coordinate, target: Coordinate) -> "Path":
        """Two-point line connecting source and target directly."""
        return cls(points=(source, target))

    @classmethod
    def from_flat(cls, values: Sequence[float]) -> "Path":
        """
        Build a path from a flat [lat0, lng0, lat1, lng1, ...] sequence.

        Raises:
            InvalidCoordinate: if any pair is out of range
            ValueError: if the sequence has an odd length or fewer than two pairs
        """
        if len(values) % 2 != 0:
            raise ValueError(f"Flat path needs an even number of values, got {len(values)}")
        if len(values) < 4:
            raise ValueError(f"Flat path needs at least two coordinates, got {len(values) // 2}")
        return cls(
            points=tuple(
                Coordinate.of(values[i], values[i + 1]) for i in range(0, len(values), 2)
            )
        )

    def to_flat(self) -> list[float]:
        flat = []
        for point in self.points:
            flat.extend(point.as_tuple())
        return flat

    @property
    def start(self) -> Coordinate:
        return self.points[0]

    @property
    def end(self) -> Coordinate:
        return self.points[-1]

    def __len__(self) -> int:
        return len(self.points)


class PathRequest(BaseModel):
    """Snapshot of both endpoints taken when a request is issued."""
    model_config = ConfigDict(frozen=True)

    source: Coordinate
    target: Coordinate
    sequence: int = Field(default=0, ge=0, description="Controller-assigned issue order")


class PathResponse(BaseModel):
    """Path returned by the path service, in the order it should be drawn."""
    model_config = ConfigDict(frozen=True)

    path: Path
