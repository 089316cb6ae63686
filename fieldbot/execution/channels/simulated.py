"""Mini README: Simulated actuation channel.

Structure:
    * SimulatedActuationChannel - acknowledges every route immediately and
      reports completion after the route's estimated duration.

The simulator lets the control centre be exercised without a backend. It
keeps its own robot position, starting at the field origin like the pose
feed, and parks the robot on the last waypoint of each finished route so the
next estimate includes the first leg's travel. Its clock can be compressed
with ``time_scale`` so a full route finishes fast.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import httpx

from ...logging_utils import get_logger
from ...route_planning.estimator import estimate
from ...route_planning.models import ExecutionRequest, GridPosition
from ..base import ActuationChannel, ExecutionReport
from ..registry import REGISTRY

LOGGER = get_logger(__name__)


class SimulatedActuationChannel(ActuationChannel):
    """Mock channel illustrating how the registry is extended."""

    channel_name = "simulated"

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        time_scale: float = 0.01,
        start: Optional[GridPosition] = None,
    ) -> None:
        super().__init__(client=client)
        self.time_scale = time_scale
        self.position = start or GridPosition(0, 0)
        self.planned_seconds = 0
        self._run: Optional[asyncio.Task] = None

    async def submit(self, request: ExecutionRequest) -> None:
        self.planned_seconds = estimate(self.position, request.waypoints)
        seconds = self.planned_seconds * self.time_scale
        LOGGER.info("Simulating route '%s' for %.2fs", request.label, seconds)
        self._run = asyncio.ensure_future(self._drive(request, seconds))

    async def _drive(self, request: ExecutionRequest, seconds: float) -> None:
        await asyncio.sleep(seconds)
        self.position = request.waypoints[-1].position
        self.publish_outcome(ExecutionReport(success=True, path_name=request.label))

    async def emergency_stop(self) -> None:
        if self._run and not self._run.done():
            self._run.cancel()
            LOGGER.warning("Simulated route halted by emergency stop")


REGISTRY.register(SimulatedActuationChannel)
