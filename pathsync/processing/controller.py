"""
Synchronization controller.

Wires marker drags to path requests and applies the results to the rendered
line. Everything runs on one asyncio event loop: drag handlers and response
completions never interleave mid-update, so no locking is needed.

Ordering rule: every request gets the next sequence number, and a response is
applied only if its sequence number is higher than the last one applied. A
slow response to an older drag therefore cannot overwrite a newer line.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from ..clients.path_service import PathServiceClient
from ..config import Config
from ..errors import InvalidCoordinate, MalformedResponse, PathServiceUnavailable, PathSyncError
from ..models.geometry import Coordinate, EndpointRole, Path, PathRequest
from ..models.history import SyncOutcome, SyncRecord
from ..state import EndpointState, Position
from ..storage.history import SyncHistory
from ..widget import MapWidget
from .strategies import PathStrategy, build_strategy

logger = logging.getLogger(__name__)

ErrorListener = Callable[[PathSyncError, Optional[PathRequest]], None]


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SyncController:
    """
    Keeps the rendered path in step with the endpoint markers.

    One controller owns one pair of endpoints and one line; several
    controllers can run side by side on the same loop.
    """

    def __init__(
        self,
        state: EndpointState,
        strategy: PathStrategy,
        history: Optional[SyncHistory] = None,
        map_center: Optional[Coordinate] = None,
        map_zoom: int = 15,
    ):
        self.state = state
        self.strategy = strategy
        self.history = history if history is not None else SyncHistory()
        self.widget: Optional[MapWidget] = None
        self.map_center = map_center
        self.map_zoom = map_zoom

        source, target = state.current_positions()
        self._rendered = Path.straight(source, target)
        self._issued_sequence = 0
        self._applied_sequence = 0
        self._tasks: set[asyncio.Task] = set()
        self._error_listeners: list[ErrorListener] = []

    @classmethod
    def from_config(
        cls,
        config: Config,
        client: Optional[PathServiceClient] = None,
    ) -> "SyncController":
        """Build a controller with the configured default endpoints and strategy."""
        state = EndpointState(config.default_source, config.default_target)
        return cls(
            state=state,
            strategy=build_strategy(config, client),
            history=SyncHistory(max_entries=config.history_size),
            map_center=config.map_center,
            map_zoom=config.map_zoom,
        )

    @property
    def rendered_path(self) -> Path:
        return self._rendered

    @property
    def last_applied_sequence(self) -> int:
        return self._applied_sequence

    @property
    def last_issued_sequence(self) -> int:
        return self._issued_sequence

    @property
    def in_flight(self) -> int:
        """Number of requests that have not completed yet."""
        return len(self._tasks)

    def add_error_listener(self, listener: ErrorListener) -> None:
        """Register a callback for failed synchronizations and rejected drags."""
        self._error_listeners.append(listener)

    def attach(self, widget: MapWidget, center: Optional[Coordinate] = None, zoom: Optional[int] = None) -> None:
        """
        Show the current state on a map and subscribe to its marker drags.

        Args:
            widget: Map to draw on
            center: Initial view center (defaults to map_center, then the source endpoint)
            zoom: Initial zoom level (defaults to map_zoom)
        """
        source, target = self.state.current_positions()
        widget.render(center or self.map_center or source, zoom if zoom is not None else self.map_zoom)
        widget.place_marker(EndpointRole.SOURCE, source, draggable=True)
        widget.place_marker(EndpointRole.TARGET, target, draggable=True)
        widget.set_polyline(self._rendered.points)
        widget.on_drag_end(EndpointRole.SOURCE, self._handle_drag_end)
        widget.on_drag_end(EndpointRole.TARGET, self._handle_drag_end)
        self.widget = widget

    def on_endpoint_drag_end(self, role: EndpointRole, new_position: Position) -> asyncio.Task:
        """
        Record a finished drag and start fetching the matching path.

        Must be called from inside a running event loop. Returns immediately;
        the returned task completes once the response has been applied,
        discarded as stale, or reported as a failure.

        Raises:
            InvalidCoordinate: position out of range; nothing is moved or requested
        """
        self.state.move_endpoint(role, new_position)

        self._issued_sequence += 1
        request = self.state.snapshot(self._issued_sequence)
        moved = sorted(r.value for r in self.state.dirty_roles())
        self.state.clear_dirty()
        logger.debug(f"Issuing path #{request.sequence} after moving {', '.join(moved)}")

        task = asyncio.get_running_loop().create_task(
            self._synchronize(EndpointRole(role), request, _now())
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def synchronize(self, role: EndpointRole, new_position: Position) -> SyncRecord:
        """Apply a drag and wait for its outcome."""
        return await self.on_endpoint_drag_end(role, new_position)

    async def drain(self) -> None:
        """Wait until every outstanding request has completed."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        await self.drain()
        await self.strategy.close()

    def _handle_drag_end(self, role: EndpointRole, position: Coordinate) -> Optional[asyncio.Task]:
        """Widget subscription: reject invalid drops by putting the marker back."""
        try:
            return self.on_endpoint_drag_end(role, position)
        except InvalidCoordinate as e:
            logger.warning(f"Rejected {role.value} drag: {e}")
            if self.widget is not None:
                self.widget.place_marker(role, self.state.position(role), draggable=True)
            self._notify(e, None)
            return None

    async def _synchronize(
        self,
        role: EndpointRole,
        request: PathRequest,
        issued_at: datetime,
    ) -> SyncRecord:
        try:
            response = await self.strategy.compute(request)
        except (PathServiceUnavailable, MalformedResponse) as e:
            logger.warning(f"Path request #{request.sequence} failed, keeping current line: {e}")
            record = self._record(role, request, issued_at, SyncOutcome.FAILED, error=str(e))
            self._notify(e, request)
            return record
        except Exception as e:
            logger.exception(f"Path request #{request.sequence} failed unexpectedly, keeping current line")
            error = PathSyncError(f"Unexpected {type(e).__name__}: {e}")
            record = self._record(role, request, issued_at, SyncOutcome.FAILED, error=str(error))
            self._notify(error, request)
            return record

        if request.sequence <= self._applied_sequence:
            logger.debug(
                f"Discarding stale path #{request.sequence} "
                f"(#{self._applied_sequence} already applied)"
            )
            return self._record(role, request, issued_at, SyncOutcome.DISCARDED)

        self._apply(response.path, request.sequence)
        return self._record(role, request, issued_at, SyncOutcome.APPLIED, path=response.path)

    def _apply(self, path: Path, sequence: int) -> None:
        self._rendered = path
        self._applied_sequence = sequence
        if self.widget is not None:
            self.widget.set_polyline(path.points)
        logger.info(
            f"Applied path #{sequence}: {len(path)} points, "
            f"{path.start.as_tuple()} -> {path.end.as_tuple()}"
        )

    def _record(
        self,
        role: EndpointRole,
        request: PathRequest,
        issued_at: datetime,
        outcome: SyncOutcome,
        path: Optional[Path] = None,
        error: Optional[str] = None,
    ) -> SyncRecord:
        record = SyncRecord(
            sequence=request.sequence,
            role=role,
            strategy=self.strategy.name,
            request=request,
            outcome=outcome,
            path=path,
            error=error,
            issued_at=issued_at,
            completed_at=_now(),
        )
        self.history.add_record(record)
        return record

    def _notify(self, error: PathSyncError, request: Optional[PathRequest]) -> None:
        for listener in self._error_listeners:
            listener(error, request)
