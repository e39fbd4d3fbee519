"""
Endpoint state: the current source and target positions.

Positions change only through move_endpoint(); every stored coordinate has
passed the range check, so a rejected move leaves the record untouched.
"""

from typing import Union

from .errors import InvalidCoordinate
from .models.geometry import Coordinate, EndpointRole, PathRequest

Position = Union[Coordinate, tuple[float, float]]


class EndpointState:
    """Mutable record of the two endpoint positions plus per-role dirty flags."""

    def __init__(self, source: Coordinate, target: Coordinate):
        self._positions: dict[EndpointRole, Coordinate] = {
            EndpointRole.SOURCE: source,
            EndpointRole.TARGET: target,
        }
        self._dirty: set[EndpointRole] = set()

    def move_endpoint(self, role: EndpointRole, new_position: Position) -> None:
        """
        Record a new position for one endpoint and mark it dirty.

        Args:
            role: Which marker moved
            new_position: Coordinate or (latitude, longitude) pair

        Raises:
            InvalidCoordinate: if the position is out of range (state unchanged)
        """
        role = EndpointRole(role)
        if isinstance(new_position, Coordinate):
            latitude, longitude = new_position.latitude, new_position.longitude
        else:
            if not isinstance(new_position, (tuple, list)) or len(new_position) != 2:
                raise InvalidCoordinate(new_position, None, "expected a (latitude, longitude) pair")
            latitude, longitude = new_position
        coordinate = Coordinate.of(latitude, longitude)

        self._positions[role] = coordinate
        self._dirty.add(role)

    def current_positions(self) -> tuple[Coordinate, Coordinate]:
        """Return the (source, target) snapshot."""
        return self._positions[EndpointRole.SOURCE], self._positions[EndpointRole.TARGET]

    def position(self, role: EndpointRole) -> Coordinate:
        return self._positions[EndpointRole(role)]

    def dirty_roles(self) -> frozenset[EndpointRole]:
        """Roles moved since the last clear_dirty()."""
        return frozenset(self._dirty)

    def clear_dirty(self) -> None:
        self._dirty.clear()

    def snapshot(self, sequence: int = 0) -> PathRequest:
        """Freeze the current positions into a request tagged with `sequence`."""
        source, target = self.current_positions()
        return PathRequest(source=source, target=target, sequence=sequence)
