"""Mini README: Tests for the single-flight execution coordinator.

Structure:
    * happy path - acknowledgment, terminal event, route cleared.
    * failures - transport errors, rejected routes and both timeouts keep
      the submitted waypoints for retry.
    * single-flight - a second submission is refused without side effects.
    * emergency stop - forces Idle from Submitting or Executing; late events
      from the stopped route cannot complete its successor.
"""

from __future__ import annotations

import asyncio

import pytest

from conftest import FakeChannel
from fieldbot.errors import ConflictError, ValidationError
from fieldbot.execution import ExecutionCoordinator, ExecutionReport, ExecutionState
from fieldbot.execution.channels import SimulatedActuationChannel
from fieldbot.route_planning import GridPosition, WaypointSequencer


async def _reach(coordinator: ExecutionCoordinator, state: ExecutionState) -> None:
    for _ in range(100):
        if coordinator.state is state:
            return
        await asyncio.sleep(0)
    raise AssertionError(f"Coordinator never reached {state}; stuck at {coordinator.state}")


def _coordinator(channel, sequencer, **kwargs) -> ExecutionCoordinator:
    kwargs.setdefault("submit_timeout", 1.0)
    kwargs.setdefault("execution_timeout", 1.0)
    return ExecutionCoordinator(channel, sequencer, **kwargs)


@pytest.mark.anyio
async def test_successful_route_completes_and_clears(sequencer: WaypointSequencer) -> None:
    channel = FakeChannel()
    coordinator = _coordinator(channel, sequencer)

    task = asyncio.ensure_future(coordinator.submit(sequencer.snapshot(), "north beds"))
    await _reach(coordinator, ExecutionState.EXECUTING)
    channel.publish_outcome(ExecutionReport(success=True))
    outcome = await task

    assert outcome.state is ExecutionState.COMPLETED
    assert channel.submitted[0].as_payload()["path_name"] == "north beds"
    assert len(sequencer) == 0
    assert coordinator.state is ExecutionState.IDLE
    assert list(coordinator.history) == [
        ExecutionState.IDLE,
        ExecutionState.SUBMITTING,
        ExecutionState.EXECUTING,
        ExecutionState.COMPLETED,
        ExecutionState.IDLE,
    ]


@pytest.mark.anyio
async def test_empty_route_is_rejected(sequencer: WaypointSequencer) -> None:
    coordinator = _coordinator(FakeChannel(), sequencer)

    with pytest.raises(ValidationError):
        await coordinator.submit([], "nothing")
    with pytest.raises(ValidationError):
        coordinator.begin([], "nothing")
    assert coordinator.state is ExecutionState.IDLE


@pytest.mark.anyio
async def test_transport_failure_retains_waypoints(sequencer: WaypointSequencer) -> None:
    submitted = sequencer.snapshot()
    coordinator = _coordinator(FakeChannel(fail=True), sequencer)

    outcome = await coordinator.submit(submitted, "east")

    assert outcome.state is ExecutionState.FAILED
    assert "offline" in outcome.error
    assert coordinator.last_failed_request.waypoints == submitted
    assert sequencer.snapshot() == submitted
    assert coordinator.state is ExecutionState.IDLE
    assert ExecutionState.EXECUTING not in coordinator.history


@pytest.mark.anyio
async def test_rejected_route_fails(sequencer: WaypointSequencer) -> None:
    channel = FakeChannel()
    coordinator = _coordinator(channel, sequencer)

    task = asyncio.ensure_future(coordinator.submit(sequencer.snapshot()))
    await _reach(coordinator, ExecutionState.EXECUTING)
    channel.publish_outcome(ExecutionReport(success=False, detail="obstacle at (2, 2)"))
    outcome = await task

    assert outcome.state is ExecutionState.FAILED
    assert outcome.error == "obstacle at (2, 2)"
    assert outcome.request.label.startswith("Execution_")
    assert len(sequencer) == 3


@pytest.mark.anyio
async def test_concurrent_submit_is_refused(sequencer: WaypointSequencer) -> None:
    channel = FakeChannel()
    coordinator = _coordinator(channel, sequencer)

    task = asyncio.ensure_future(coordinator.submit(sequencer.snapshot(), "first"))
    await _reach(coordinator, ExecutionState.EXECUTING)
    with pytest.raises(ConflictError):
        await coordinator.submit(sequencer.snapshot(), "second")

    assert coordinator.state is ExecutionState.EXECUTING
    assert coordinator.current_request.label == "first"
    assert len(channel.submitted) == 1
    channel.publish_outcome(ExecutionReport(success=True))
    assert (await task).state is ExecutionState.COMPLETED


@pytest.mark.anyio
async def test_acknowledgment_timeout_fails(sequencer: WaypointSequencer) -> None:
    coordinator = _coordinator(FakeChannel(hang=True), sequencer, submit_timeout=0.05)

    outcome = await coordinator.submit(sequencer.snapshot(), "hung")

    assert outcome.state is ExecutionState.FAILED
    assert "acknowledgment" in outcome.error
    assert coordinator.last_failed_request.label == "hung"
    assert coordinator.state is ExecutionState.IDLE


@pytest.mark.anyio
async def test_missing_completion_times_out(sequencer: WaypointSequencer) -> None:
    coordinator = _coordinator(FakeChannel(), sequencer, execution_timeout=0.05)

    outcome = await coordinator.submit(sequencer.snapshot(), "silent")

    assert outcome.state is ExecutionState.FAILED
    assert "completion" in outcome.error
    assert len(sequencer) == 3


@pytest.mark.anyio
async def test_emergency_stop_while_executing(sequencer: WaypointSequencer) -> None:
    channel = FakeChannel()
    coordinator = _coordinator(channel, sequencer)

    task = asyncio.ensure_future(coordinator.submit(sequencer.snapshot(), "stop me"))
    await _reach(coordinator, ExecutionState.EXECUTING)
    await coordinator.emergency_stop()

    assert coordinator.state is ExecutionState.IDLE
    assert channel.stops == 1
    outcome = await task
    assert outcome.stopped
    assert coordinator.state is ExecutionState.IDLE
    assert coordinator.last_failed_request.label == "stop me"
    assert len(sequencer) == 3


@pytest.mark.anyio
async def test_emergency_stop_while_submitting(sequencer: WaypointSequencer) -> None:
    channel = FakeChannel(hang=True)
    coordinator = _coordinator(channel, sequencer, submit_timeout=0.05)

    task = asyncio.ensure_future(coordinator.submit(sequencer.snapshot(), "stuck"))
    await _reach(coordinator, ExecutionState.SUBMITTING)
    await coordinator.emergency_stop()
    assert coordinator.state is ExecutionState.IDLE
    replacement = coordinator.begin(sequencer.snapshot(), "after stop")
    assert coordinator.current_request.label == "after stop"

    outcome = await task
    assert outcome.stopped
    assert (await replacement).state is ExecutionState.FAILED
    assert coordinator.state is ExecutionState.IDLE


@pytest.mark.anyio
async def test_simulated_channel_reports_completion(sequencer: WaypointSequencer) -> None:
    coordinator = _coordinator(SimulatedActuationChannel(time_scale=0.0), sequencer)

    outcome = await coordinator.submit(sequencer.snapshot(), "simulated")

    assert outcome.state is ExecutionState.COMPLETED
    assert len(sequencer) == 0


@pytest.mark.anyio
async def test_late_event_for_stopped_route_is_ignored(sequencer: WaypointSequencer) -> None:
    channel = FakeChannel()
    coordinator = _coordinator(channel, sequencer, execution_timeout=0.2)

    first = coordinator.begin(sequencer.snapshot(), "A")
    await _reach(coordinator, ExecutionState.EXECUTING)
    await coordinator.emergency_stop()
    assert (await first).stopped

    second = coordinator.begin(sequencer.snapshot(), "B")
    await _reach(coordinator, ExecutionState.EXECUTING)
    channel.publish_outcome(ExecutionReport(success=True, path_name="A"))
    await asyncio.sleep(0)
    assert coordinator.state is ExecutionState.EXECUTING

    channel.publish_outcome(ExecutionReport(success=True, path_name="B"))
    outcome = await second
    assert outcome.state is ExecutionState.COMPLETED
    assert outcome.request.label == "B"


@pytest.mark.anyio
async def test_late_event_alone_leaves_successor_to_time_out(sequencer: WaypointSequencer) -> None:
    channel = FakeChannel()
    coordinator = _coordinator(channel, sequencer, execution_timeout=0.05)

    task = coordinator.begin(sequencer.snapshot(), "B")
    await _reach(coordinator, ExecutionState.EXECUTING)
    channel.publish_outcome(ExecutionReport(success=True, path_name="A"))
    outcome = await task

    assert outcome.state is ExecutionState.FAILED
    assert len(sequencer) == 3


@pytest.mark.anyio
async def test_simulated_run_starts_from_robot_position(sequencer: WaypointSequencer) -> None:
    channel = SimulatedActuationChannel(time_scale=0.0)
    coordinator = _coordinator(channel, sequencer)

    await coordinator.submit(sequencer.snapshot(), "first")

    # (1,0) move: 2s, (1,1) water: 2+5, (2,2) wait 4: 4+4
    assert channel.planned_seconds == 17
    assert channel.position == GridPosition(2, 2)
