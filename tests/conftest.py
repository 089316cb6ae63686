"""Mini README: Shared fixtures and fakes for the Fieldbot test-suite.

Structure:
    * anyio_backend - run async tests on asyncio only.
    * FakeRemoteRepository - scripted stand-in for the backend repository.
    * RecordingKeyValueStore - in-memory slots that count reads.
    * FakeChannel - actuation channel that can fail or hang on demand.
"""

from __future__ import annotations

import asyncio
from typing import List, Optional, Sequence

import pytest

from fieldbot.errors import TransportError
from fieldbot.execution import ActuationChannel
from fieldbot.route_planning import ExecutionRequest, GridPosition, PathTemplate, Waypoint, WaypointSequencer
from fieldbot.storage import InMemoryKeyValueStore, PathRepository


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


class FakeRemoteRepository(PathRepository):
    repository_name = "fake-remote"

    def __init__(self, paths: Optional[List[PathTemplate]] = None, *, fail: bool = False) -> None:
        self.paths = list(paths or [])
        self.fail = fail
        self.calls: List[str] = []

    def _check(self, operation: str) -> None:
        self.calls.append(operation)
        if self.fail:
            raise TransportError("backend unreachable")

    async def create(self, name: str, waypoints: Sequence[Waypoint]) -> PathTemplate:
        self._check("create")
        template = PathTemplate(id=f"srv{len(self.paths) + 1}", name=name, waypoints=tuple(waypoints))
        self.paths.append(template)
        return template

    async def list(self) -> List[PathTemplate]:
        self._check("list")
        return list(self.paths)

    async def delete(self, path_id: str) -> None:
        self._check("delete")
        self.paths = [path for path in self.paths if path.id != path_id]


class RecordingKeyValueStore(InMemoryKeyValueStore):
    def __init__(self) -> None:
        super().__init__()
        self.reads = 0

    def get(self, key: str) -> Optional[str]:
        self.reads += 1
        return super().get(key)


class FakeChannel(ActuationChannel):
    channel_name = "fake"

    def __init__(self, *, fail: bool = False, hang: bool = False) -> None:
        super().__init__()
        self.fail = fail
        self.hang = hang
        self.submitted: List[ExecutionRequest] = []
        self.stops = 0

    async def submit(self, request: ExecutionRequest) -> None:
        self.submitted.append(request)
        if self.hang:
            await asyncio.Event().wait()
        if self.fail:
            raise TransportError("actuation service offline")

    async def emergency_stop(self) -> None:
        self.stops += 1


@pytest.fixture
def sequencer() -> WaypointSequencer:
    route = WaypointSequencer(field_size=5)
    route.add(GridPosition(1, 0), "move")
    route.add(GridPosition(1, 1), "water")
    route.add(GridPosition(2, 2), "wait", duration=4)
    return route
