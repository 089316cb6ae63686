"""Mini README: Deterministic time estimate for an authored route.

Structure:
    * SECONDS_PER_CELL / ACTION_SECONDS - timing constants of the robot.
    * action_cost - seconds spent performing a waypoint's action.
    * estimate - total seconds from a start cell through every waypoint.

The estimate is advisory: the interface shows it next to the route and it
is recomputed from the latest pose whenever the route changes. It performs
no I/O and returns the same value for the same inputs.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional

from .models import ActionKind, GridPosition, Waypoint

SECONDS_PER_CELL = 2

ACTION_SECONDS: Dict[ActionKind, int] = {
    ActionKind.MOVE: 0,
    ActionKind.WATER: 5,
    ActionKind.FERTILIZE: 5,
    ActionKind.SCAN: 3,
}


def action_cost(action: ActionKind, duration: Optional[int] = None) -> int:
    """Return the seconds spent at a waypoint; waits last their duration."""

    if action is ActionKind.WAIT:
        return duration or 0
    return ACTION_SECONDS[action]


def estimate(start: GridPosition, waypoints: Iterable[Waypoint]) -> int:
    """Return the estimated seconds to drive from ``start`` through ``waypoints``."""

    total = 0
    cursor = start
    for waypoint in waypoints:
        total += cursor.manhattan_distance(waypoint.position) * SECONDS_PER_CELL
        total += action_cost(waypoint.action, waypoint.duration)
        cursor = waypoint.position
    return total
