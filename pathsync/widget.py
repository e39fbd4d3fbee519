"""
Map widget seam.

The synchronization core needs only four things from a map: render a view,
place draggable markers, draw/replace a polyline and report when a marker
drag ends. `MapWidget` names those; `HeadlessMapWidget` implements them in
memory for tests and headless runs.
"""

import logging
from typing import Callable, Optional, Protocol, Sequence

from .models.geometry import Coordinate, EndpointRole

logger = logging.getLogger(__name__)

DragEndHandler = Callable[[EndpointRole, Coordinate], object]


class MapWidget(Protocol):
    """Capabilities consumed from an interactive map."""

    def render(self, center: Coordinate, zoom: int) -> None: ...

    def place_marker(self, role: EndpointRole, position: Coordinate, draggable: bool = True) -> None: ...

    def set_polyline(self, coordinates: Sequence[Coordinate]) -> None: ...

    def on_drag_end(self, role: EndpointRole, handler: DragEndHandler) -> None: ...


class HeadlessMapWidget:
    """In-memory map: records what would be drawn and lets callers simulate drags."""

    def __init__(self):
        self.center: Optional[Coordinate] = None
        self.zoom: Optional[int] = None
        self.markers: dict[EndpointRole, Coordinate] = {}
        self.draggable: dict[EndpointRole, bool] = {}
        self.polyline: list[Coordinate] = []
        self.polyline_updates = 0
        self._handlers: dict[EndpointRole, list[DragEndHandler]] = {}

    def render(self, center: Coordinate, zoom: int) -> None:
        self.center = center
        self.zoom = zoom

    def place_marker(self, role: EndpointRole, position: Coordinate, draggable: bool = True) -> None:
        self.markers[role] = position
        self.draggable[role] = draggable

    def set_polyline(self, coordinates: Sequence[Coordinate]) -> None:
        self.polyline = list(coordinates)
        self.polyline_updates += 1

    def on_drag_end(self, role: EndpointRole, handler: DragEndHandler) -> None:
        self._handlers.setdefault(role, []).append(handler)

    def drag(self, role: EndpointRole, latitude: float, longitude: float) -> list:
        """
        Simulate a user dropping a marker at (latitude, longitude).

        Handlers run to completion, in subscription order, before this returns.
        The marker itself moves the way a real widget's would, before the
        handlers see the event, so an invalid drop still moves it.

        Returns:
            Whatever each handler returned
        """
        if not self.draggable.get(role, False):
            raise ValueError(f"No draggable {role.value} marker on the map")
        # Raw position; handlers decide whether it is acceptable
        position = Coordinate.model_construct(latitude=latitude, longitude=longitude)
        self.markers[role] = position
        logger.debug(f"Drag ended: {role.value} -> ({latitude}, {longitude})")
        return [handler(role, position) for handler in self._handlers.get(role, [])]
