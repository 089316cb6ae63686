"""Mini README: Tests for the waypoint sequencer.

Covers the duration and bounds rules on ``add``, contiguous ordering after
every structural mutation, boundary no-ops for reordering, stable identity
and the pending-mutation guard.
"""

from __future__ import annotations

import dataclasses
import random

import pytest

from fieldbot.errors import ContractViolation, ValidationError
from fieldbot.route_planning import ActionKind, GridPosition, Waypoint, WaypointSequencer


def _orders(route: WaypointSequencer) -> list:
    return [waypoint.order for waypoint in route.snapshot()]


def _cells(route: WaypointSequencer) -> list:
    return [(w.position.x, w.position.y) for w in route.snapshot()]


def test_add_appends_with_next_order() -> None:
    route = WaypointSequencer()
    first = route.add(GridPosition(0, 1), ActionKind.MOVE)
    second = route.add(GridPosition(3, 4), "Scan")

    assert (first.order, second.order) == (1, 2)
    assert second.action is ActionKind.SCAN
    assert second.duration is None


def test_wait_requires_positive_duration() -> None:
    route = WaypointSequencer()

    with pytest.raises(ValidationError):
        route.add(GridPosition(1, 1), "wait")
    with pytest.raises(ValidationError):
        route.add(GridPosition(1, 1), "wait", duration=0)
    with pytest.raises(ValidationError):
        route.add(GridPosition(1, 1), "water", duration=5)
    assert len(route) == 0

    waypoint = route.add(GridPosition(1, 1), "wait", duration=10)
    assert waypoint.duration == 10


def test_positions_outside_field_are_rejected() -> None:
    route = WaypointSequencer(field_size=5)

    with pytest.raises(ValidationError):
        route.add(GridPosition(5, 0), "move")
    with pytest.raises(ValidationError):
        route.add(GridPosition(0, -1), "move")


def test_unknown_action_is_rejected() -> None:
    with pytest.raises(ValidationError):
        WaypointSequencer().add(GridPosition(0, 0), "spray")


def test_duplicate_positions_are_allowed() -> None:
    route = WaypointSequencer()
    route.add(GridPosition(2, 2), "water")
    route.add(GridPosition(2, 2), "fertilize")

    assert _cells(route) == [(2, 2), (2, 2)]
    assert _orders(route) == [1, 2]


def test_remove_resequences_survivors(sequencer: WaypointSequencer) -> None:
    snapshot = sequencer.remove(1)

    assert [w.order for w in snapshot] == [1, 2]
    assert _cells(sequencer) == [(1, 1), (2, 2)]


def test_invalid_order_is_a_contract_violation(sequencer: WaypointSequencer) -> None:
    for order in (0, 4, -1):
        with pytest.raises(ContractViolation):
            sequencer.remove(order)
    with pytest.raises(ContractViolation):
        sequencer.move_up(9)


def test_move_up_and_down_swap_neighbours(sequencer: WaypointSequencer) -> None:
    sequencer.move_up(3)
    assert _cells(sequencer) == [(1, 0), (2, 2), (1, 1)]
    assert _orders(sequencer) == [1, 2, 3]

    sequencer.move_down(1)
    assert _cells(sequencer) == [(2, 2), (1, 0), (1, 1)]


def test_reorder_at_boundary_is_a_noop(sequencer: WaypointSequencer) -> None:
    before = sequencer.snapshot()

    assert sequencer.move_up(1) == before
    assert sequencer.move_down(3) == before


def test_stable_identity_survives_reordering(sequencer: WaypointSequencer) -> None:
    watered = sequencer.snapshot()[1]

    sequencer.move_down(2)
    assert sequencer.find(watered.waypoint_id) == 3
    sequencer.remove(1)
    assert sequencer.find(watered.waypoint_id) == 2


def test_orders_stay_contiguous_under_random_edits() -> None:
    rng = random.Random(7)
    route = WaypointSequencer(field_size=5)

    for _ in range(300):
        operation = rng.choice(["add", "add", "remove", "up", "down"])
        if operation == "add" or not len(route):
            route.add(GridPosition(rng.randrange(5), rng.randrange(5)), rng.choice(["move", "scan"]))
        elif operation == "remove":
            route.remove(rng.randint(1, len(route)))
        elif operation == "up":
            route.move_up(rng.randint(1, len(route)))
        else:
            route.move_down(rng.randint(1, len(route)))
        assert _orders(route) == list(range(1, len(route) + 1))


def test_snapshot_is_immutable(sequencer: WaypointSequencer) -> None:
    snapshot = sequencer.snapshot()

    assert isinstance(snapshot, tuple)
    with pytest.raises(dataclasses.FrozenInstanceError):
        snapshot[0].order = 9  # type: ignore[misc]
    sequencer.clear()
    assert len(snapshot) == 3
    assert sequencer.snapshot() == ()


def test_load_orders_saved_waypoints() -> None:
    route = WaypointSequencer()
    saved = [
        Waypoint(position=GridPosition(4, 4), action=ActionKind.SCAN, order=2),
        Waypoint(position=GridPosition(0, 3), action=ActionKind.WAIT, order=1, duration=6),
    ]

    snapshot = route.load(saved)

    assert [(w.position.x, w.order) for w in snapshot] == [(0, 1), (4, 2)]
    assert snapshot[0].duration == 6


def test_load_rejects_invalid_saved_waypoints() -> None:
    route = WaypointSequencer(field_size=3)
    route.add(GridPosition(0, 0), "move")

    with pytest.raises(ValidationError):
        route.load([Waypoint(position=GridPosition(4, 4), action=ActionKind.MOVE, order=1)])
    assert _cells(route) == [(0, 0)]


def test_mutations_do_not_interleave(sequencer: WaypointSequencer) -> None:
    with sequencer._mutation("outer edit"):
        with pytest.raises(ContractViolation):
            sequencer.clear()
    assert _orders(sequencer) == [1, 2, 3]
