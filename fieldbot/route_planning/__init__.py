"""Mini README: Route planning subsystem for the field robot.

Exports the grid data model, the waypoint sequencer used while an operator
authors a route, and the deterministic cost estimator. Storage and
execution live in sibling packages and only consume sequencer snapshots.
"""

from .estimator import estimate
from .models import (
    ActionKind,
    BotPose,
    ExecutionRequest,
    GridPosition,
    PathOrigin,
    PathTemplate,
    Waypoint,
)
from .sequencer import WaypointSequencer

__all__ = [
    "ActionKind",
    "BotPose",
    "ExecutionRequest",
    "GridPosition",
    "PathOrigin",
    "PathTemplate",
    "Waypoint",
    "WaypointSequencer",
    "estimate",
]
