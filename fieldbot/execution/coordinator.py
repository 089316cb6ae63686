"""Mini README: Single-flight execution of authored routes.

Structure:
    * ExecutionState - Idle, Submitting, Executing, Completed, Failed.
    * ExecutionOutcome - what a submission ended with.
    * ExecutionCoordinator - submits a route through an ``ActuationChannel``
      and drives the state machine.

Transitions::

    Idle -> Submitting -> Executing -> Completed -> Idle
                      \\            \\-> Failed ---> Idle
                       \\-> Failed -> Idle

Only one route may be in flight; ``submit`` outside ``Idle`` is rejected,
never queued. The acknowledgment wait and the terminal event wait are both
bounded by timeouts that end in ``Failed``. A completed route clears the
authored sequence; a failed one is kept in ``last_failed_request`` so the
operator can retry it. ``emergency_stop`` forces ``Idle`` from any state and
bumps a generation counter so an in-flight submission cannot overwrite the
reset when it eventually returns.
"""

from __future__ import annotations

import asyncio
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Optional, Sequence

from ..errors import (
    ConflictError,
    ExecutionTimeoutError,
    TransportError,
    ValidationError,
)
from ..logging_utils import get_logger
from ..route_planning.models import ExecutionRequest, Waypoint
from ..route_planning.sequencer import WaypointSequencer
from ..utils.timestamps import epoch_millis
from .base import ActuationChannel, ExecutionReport

LOGGER = get_logger(__name__)


class ExecutionState(str, Enum):
    """Lifecycle of a route submission."""

    IDLE = "idle"
    SUBMITTING = "submitting"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ExecutionOutcome:
    """Terminal result of one submission."""

    state: ExecutionState
    request: ExecutionRequest
    error: Optional[str] = None
    stopped: bool = False


class ExecutionCoordinator:
    """Submit routes to the actuation service one at a time."""

    def __init__(
        self,
        channel: ActuationChannel,
        sequencer: WaypointSequencer,
        *,
        submit_timeout: float = 15.0,
        execution_timeout: float = 600.0,
        settle_seconds: float = 0.0,
    ) -> None:
        self.channel = channel
        self.sequencer = sequencer
        self.submit_timeout = submit_timeout
        self.execution_timeout = execution_timeout
        self.settle_seconds = settle_seconds
        self._state = ExecutionState.IDLE
        self._generation = 0
        self._terminal: Optional[asyncio.Future] = None
        self.current_request: Optional[ExecutionRequest] = None
        self.last_failed_request: Optional[ExecutionRequest] = None
        self.last_outcome: Optional[ExecutionOutcome] = None
        self.history: Deque[ExecutionState] = deque([ExecutionState.IDLE], maxlen=100)
        channel.subscribe(self.report_outcome)
        LOGGER.debug(
            "Initialised ExecutionCoordinator on channel '%s' (submit timeout %ss)",
            channel.channel_name,
            submit_timeout,
        )

    @property
    def state(self) -> ExecutionState:
        return self._state

    def _transition(self, state: ExecutionState) -> None:
        LOGGER.info("Execution state %s -> %s", self._state.value, state.value)
        self._state = state
        self.history.append(state)

    def _accept(self, waypoints: Sequence[Waypoint], label: Optional[str]) -> ExecutionRequest:
        """Run the synchronous admission checks and enter ``Submitting``."""

        snapshot = tuple(waypoints)
        if not snapshot:
            raise ValidationError("Cannot execute a route without waypoints")
        if self._state is not ExecutionState.IDLE:
            raise ConflictError(
                f"A route is already in flight (state: {self._state.value})"
            )
        request = ExecutionRequest(
            waypoints=snapshot,
            label=(label or "").strip() or f"Execution_{epoch_millis()}",
        )
        self._generation += 1
        self.current_request = request
        self._transition(ExecutionState.SUBMITTING)
        return request

    async def submit(
        self, waypoints: Sequence[Waypoint], label: Optional[str] = None
    ) -> ExecutionOutcome:
        """Execute a route and wait for its terminal outcome."""

        request = self._accept(waypoints, label)
        return await self._run(request, self._generation)

    def begin(self, waypoints: Sequence[Waypoint], label: Optional[str] = None) -> asyncio.Task:
        """Admit a route now and drive it to completion in a background task."""

        request = self._accept(waypoints, label)
        return asyncio.ensure_future(self._run(request, self._generation))

    def report_outcome(self, report: ExecutionReport) -> None:
        """Resolve the pending terminal wait with the service's report.

        A report naming a different route is a late event from an earlier
        submission and is dropped. Untagged reports belong to the route in
        flight.
        """

        if self._terminal is None or self._terminal.done():
            LOGGER.debug("Ignoring execution report with nothing in flight: %s", report)
            return
        current = self.current_request
        if report.path_name is not None and (current is None or report.path_name != current.label):
            LOGGER.warning(
                "Ignoring execution report for '%s' while '%s' is in flight",
                report.path_name,
                current.label if current else None,
            )
            return
        self._terminal.set_result(report)

    async def _run(self, request: ExecutionRequest, generation: int) -> ExecutionOutcome:
        if generation != self._generation:
            return self._stopped(request)
        terminal = asyncio.get_running_loop().create_future()
        self._terminal = terminal
        try:
            await asyncio.wait_for(self.channel.submit(request), timeout=self.submit_timeout)
        except asyncio.TimeoutError:
            error = ExecutionTimeoutError(
                f"No acknowledgment within {self.submit_timeout}s"
            )
            return await self._fail(request, generation, error)
        except TransportError as error:
            return await self._fail(request, generation, error)
        except Exception as error:
            LOGGER.exception("Actuation channel raised unexpectedly")
            await self._fail(request, generation, error)
            raise
        if generation != self._generation:
            return self._stopped(request)

        self._transition(ExecutionState.EXECUTING)
        try:
            report = await asyncio.wait_for(terminal, timeout=self.execution_timeout)
        except asyncio.TimeoutError:
            error = ExecutionTimeoutError(
                f"No completion reported within {self.execution_timeout}s"
            )
            return await self._fail(request, generation, error)
        if generation != self._generation:
            return self._stopped(request)
        if not report.success:
            return await self._fail(
                request, generation, TransportError(report.detail or "Route rejected")
            )
        return await self._complete(request, generation)

    async def _complete(self, request: ExecutionRequest, generation: int) -> ExecutionOutcome:
        self._transition(ExecutionState.COMPLETED)
        self.sequencer.clear()
        outcome = ExecutionOutcome(state=ExecutionState.COMPLETED, request=request)
        self.last_outcome = outcome
        await self._settle(generation)
        return outcome

    async def _fail(
        self, request: ExecutionRequest, generation: int, error: Exception
    ) -> ExecutionOutcome:
        if generation != self._generation:
            return self._stopped(request)
        LOGGER.error("Route '%s' failed: %s", request.label, error)
        self._transition(ExecutionState.FAILED)
        self.last_failed_request = request
        outcome = ExecutionOutcome(state=ExecutionState.FAILED, request=request, error=str(error))
        self.last_outcome = outcome
        await self._settle(generation)
        return outcome

    async def _settle(self, generation: int) -> None:
        if self.settle_seconds:
            await asyncio.sleep(self.settle_seconds)
        if generation == self._generation:
            self.current_request = None
            self._terminal = None
            self._transition(ExecutionState.IDLE)

    def _stopped(self, request: ExecutionRequest) -> ExecutionOutcome:
        LOGGER.warning("Route '%s' was superseded by an emergency stop", request.label)
        return ExecutionOutcome(
            state=ExecutionState.IDLE, request=request, error="Emergency stop", stopped=True
        )

    def force_idle(self) -> None:
        """Drop whatever is in flight and return to ``Idle`` unconditionally."""

        self._generation += 1
        if self.current_request is not None:
            self.last_failed_request = self.current_request
        if self._terminal is not None and not self._terminal.done():
            self._terminal.set_result(ExecutionReport(success=False, detail="Emergency stop"))
        self._terminal = None
        self.current_request = None
        if self._state is not ExecutionState.IDLE:
            self._transition(ExecutionState.IDLE)

    async def emergency_stop(self) -> None:
        """Send the stop command and, once it is accepted, force ``Idle``."""

        await self.channel.emergency_stop()
        LOGGER.warning("Emergency stop acknowledged; resetting execution state")
        self.force_idle()
