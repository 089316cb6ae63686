"""Mini README: Robot telemetry consumed by the route planner.

Only the robot's position is needed: it is the start cell of every time
estimate. Transport of the push channel itself is handled elsewhere; events
are handed to ``PoseFeed.ingest_event``.
"""

from .pose_feed import PoseFeed, pose_from_payload

__all__ = ["PoseFeed", "pose_from_payload"]
