"""Mini README: Ordered waypoint list for the route being authored.

Structure:
    * WaypointSequencer - owns the mutable route, exposes structural
      mutations (add, remove, move_up, move_down, clear, load) and an
      immutable snapshot for the estimator, store and coordinator.

Every mutation edits the list by stable waypoint identity and then runs the
shared ``_resequence`` step, so ``order`` is always ``1..N`` in list order.
Mutations are serialised by a pending-mutation guard; a mutation started
while another is in progress is rejected instead of interleaving.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import replace
from typing import Iterable, Iterator, List, Optional, Tuple

from ..errors import ContractViolation, ValidationError
from ..logging_utils import get_logger
from .models import ActionKind, GridPosition, Waypoint, coerce_duration

LOGGER = get_logger(__name__)


class WaypointSequencer:
    """Author an ordered route of grid waypoints."""

    def __init__(self, *, field_size: int = 5) -> None:
        if field_size < 1:
            raise ContractViolation(f"Field size must be positive, got {field_size}")
        self.field_size = field_size
        self._waypoints: List[Waypoint] = []
        self._mutating = False
        LOGGER.debug("Initialised WaypointSequencer for a %sx%s field", field_size, field_size)

    def __len__(self) -> int:
        return len(self._waypoints)

    @contextmanager
    def _mutation(self, operation: str) -> Iterator[None]:
        """Hold the pending-mutation guard and resequence on the way out."""

        if self._mutating:
            raise ContractViolation(f"Cannot {operation} while another route edit is in progress")
        self._mutating = True
        try:
            yield
            self._resequence()
        finally:
            self._mutating = False

    def _resequence(self) -> None:
        self._waypoints = [
            waypoint if waypoint.order == index else replace(waypoint, order=index)
            for index, waypoint in enumerate(self._waypoints, start=1)
        ]

    def _index_for(self, order: int) -> int:
        if isinstance(order, bool) or not isinstance(order, int):
            raise ContractViolation(f"Waypoint order must be an integer, got {order!r}")
        if not 1 <= order <= len(self._waypoints):
            raise ContractViolation(
                f"Waypoint order {order} outside 1..{len(self._waypoints)}"
            )
        return order - 1

    def _validated(
        self,
        position: GridPosition,
        action: object,
        duration: object,
        notes: Optional[str],
    ) -> Waypoint:
        if not position.within(self.field_size):
            raise ValidationError(
                f"Position ({position.x}, {position.y}) is outside the "
                f"{self.field_size}x{self.field_size} field"
            )
        kind = ActionKind.from_str(action)
        return Waypoint(
            position=position,
            action=kind,
            order=len(self._waypoints) + 1,
            duration=coerce_duration(kind, duration),
            notes=notes or None,
        )

    def add(
        self,
        position: GridPosition,
        action: ActionKind | str,
        *,
        duration: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> Waypoint:
        """Append a waypoint; duplicate positions are allowed."""

        waypoint = self._validated(position, action, duration, notes)
        with self._mutation("add"):
            self._waypoints.append(waypoint)
        LOGGER.debug(
            "Added waypoint #%s %s at (%s, %s)",
            waypoint.order,
            waypoint.action.value,
            position.x,
            position.y,
        )
        return waypoint

    def remove(self, order: int) -> Tuple[Waypoint, ...]:
        """Delete the waypoint at ``order`` and close the gap."""

        index = self._index_for(order)
        target_id = self._waypoints[index].waypoint_id
        with self._mutation("remove"):
            self._waypoints = [w for w in self._waypoints if w.waypoint_id != target_id]
        LOGGER.debug("Removed waypoint #%s; %s remain", order, len(self._waypoints))
        return self.snapshot()

    def move_up(self, order: int) -> Tuple[Waypoint, ...]:
        """Swap the waypoint with its predecessor; no-op at the top."""

        return self._swap(order, -1)

    def move_down(self, order: int) -> Tuple[Waypoint, ...]:
        """Swap the waypoint with its successor; no-op at the bottom."""

        return self._swap(order, 1)

    def _swap(self, order: int, offset: int) -> Tuple[Waypoint, ...]:
        index = self._index_for(order)
        neighbour = index + offset
        if not 0 <= neighbour < len(self._waypoints):
            return self.snapshot()
        moving_id = self._waypoints[index].waypoint_id
        neighbour_id = self._waypoints[neighbour].waypoint_id
        with self._mutation("reorder"):
            by_id = {w.waypoint_id: w for w in self._waypoints}
            self._waypoints = [
                by_id[neighbour_id] if w.waypoint_id == moving_id
                else by_id[moving_id] if w.waypoint_id == neighbour_id
                else w
                for w in self._waypoints
            ]
        return self.snapshot()

    def clear(self) -> None:
        with self._mutation("clear"):
            self._waypoints = []
        LOGGER.debug("Cleared authored route")

    def load(self, waypoints: Iterable[Waypoint]) -> Tuple[Waypoint, ...]:
        """Replace the route with saved waypoints, keeping their relative order."""

        incoming = sorted(enumerate(waypoints), key=lambda item: (item[1].order, item[0]))
        validated: List[Waypoint] = []
        for _, waypoint in incoming:
            checked = self._validated(
                waypoint.position, waypoint.action, waypoint.duration, waypoint.notes
            )
            validated.append(checked)
        with self._mutation("load"):
            self._waypoints = validated
        LOGGER.info("Loaded %s waypoints into the authored route", len(validated))
        return self.snapshot()

    def find(self, waypoint_id: str) -> int:
        """Return the current order of a waypoint by its stable identity."""

        for waypoint in self._waypoints:
            if waypoint.waypoint_id == waypoint_id:
                return waypoint.order
        raise ContractViolation(f"Waypoint {waypoint_id} is not part of the route")

    def snapshot(self) -> Tuple[Waypoint, ...]:
        return tuple(self._waypoints)
