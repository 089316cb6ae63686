"""Mini README: FastAPI-powered control centre for route programming.

Structure:
    * log_task_failure - done callback surfacing crashed execution tasks.
    * create_application - application factory wiring the sequencer,
      path store, execution coordinator and pose feed into JSON routes.
    * Request models - Pydantic bodies for waypoint, save and event calls.

Collaborators are built from settings unless injected, which is how tests
swap in in-memory repositories and the simulated actuation channel.
Domain errors map onto HTTP statuses in one place.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional, Set

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..api_client import create_http_client
from ..configuration import FieldbotSettings, get_settings
from ..errors import ConflictError, ContractViolation, TransportError, ValidationError
from ..execution import REGISTRY, ActuationChannel, ExecutionCoordinator, ExecutionReport
from ..logging_utils import get_logger
from ..route_planning import GridPosition, WaypointSequencer, estimate
from ..route_planning.models import waypoints_as_dicts
from ..storage import JsonFileKeyValueStore, LocalPathRepository, PathStore, RemotePathRepository
from ..telemetry import PoseFeed

LOGGER = get_logger(__name__)

_ERROR_STATUS = (
    (ValidationError, 422),
    (ContractViolation, 400),
    (ConflictError, 409),
    (TransportError, 502),
)


class WaypointBody(BaseModel):
    x: int
    y: int
    action: str = "move"
    duration: Optional[int] = None
    notes: Optional[str] = None


class SavePathBody(BaseModel):
    name: str = ""


class ExecuteBody(BaseModel):
    label: str = ""


class ExecutionEventBody(BaseModel):
    success: bool
    detail: str = ""
    path_name: Optional[str] = None


class BotStatusBody(BaseModel):
    x: int
    y: int
    lastUpdate: Optional[str] = Field(None, description="ISO timestamp of the reading.")


def log_task_failure(task: asyncio.Task) -> None:
    """Retrieve and log the exception of a finished background execution."""

    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        LOGGER.error("Execution task crashed: %s", error, exc_info=error)


def create_application(
    settings: Optional[FieldbotSettings] = None,
    *,
    path_store: Optional[PathStore] = None,
    channel: Optional[ActuationChannel] = None,
    pose_feed: Optional[PoseFeed] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Create the FastAPI application with routes and dependencies."""

    settings = settings or get_settings()
    http_client = create_http_client(settings, transport=transport)
    sequencer = WaypointSequencer(field_size=settings.field_size)
    feed = pose_feed or PoseFeed()
    store = path_store or PathStore(
        remote=RemotePathRepository(http_client),
        local=LocalPathRepository(
            JsonFileKeyValueStore(settings.data_directory / "local_store.json"),
            key=settings.local_store_key,
        ),
    )
    actuation = channel or REGISTRY.create(settings.actuation_channel, client=http_client)
    coordinator = ExecutionCoordinator(
        actuation,
        sequencer,
        submit_timeout=settings.submit_timeout_seconds,
        execution_timeout=settings.execution_timeout_seconds,
        settle_seconds=settings.settle_seconds,
    )
    running: Set[asyncio.Task] = set()

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        yield
        await http_client.aclose()

    app = FastAPI(title="Fieldbot Control Centre", version="0.1.0", lifespan=lifespan)
    app.state.sequencer = sequencer
    app.state.coordinator = coordinator
    app.state.path_store = store
    app.state.pose_feed = feed

    for error_type, status_code in _ERROR_STATUS:

        async def handle(_: Request, error: Exception, status_code: int = status_code) -> JSONResponse:
            LOGGER.debug("Mapping %s to HTTP %s", type(error).__name__, status_code)
            return JSONResponse({"detail": str(error)}, status_code=status_code)

        app.add_exception_handler(error_type, handle)

    def route_summary() -> Dict[str, Any]:
        snapshot = sequencer.snapshot()
        return {
            "waypoints": waypoints_as_dicts(snapshot),
            "estimated_seconds": estimate(feed.position, snapshot),
            "bot_position": feed.position.as_dict(),
            "execution_state": coordinator.state.value,
        }

    @app.get("/route")
    async def get_route() -> Dict[str, Any]:
        return route_summary()

    @app.get("/route/estimate")
    async def get_estimate() -> Dict[str, int]:
        return {"estimated_seconds": estimate(feed.position, sequencer.snapshot())}

    @app.post("/route/waypoints", status_code=201)
    async def add_waypoint(body: WaypointBody) -> Dict[str, Any]:
        waypoint = sequencer.add(
            GridPosition(body.x, body.y),
            body.action,
            duration=body.duration,
            notes=body.notes,
        )
        LOGGER.info("Operator added waypoint #%s", waypoint.order)
        return {"waypoint": waypoint.as_dict(), **route_summary()}

    @app.delete("/route/waypoints/{order}")
    async def remove_waypoint(order: int) -> Dict[str, Any]:
        sequencer.remove(order)
        return route_summary()

    @app.post("/route/waypoints/{order}/move-up")
    async def move_waypoint_up(order: int) -> Dict[str, Any]:
        sequencer.move_up(order)
        return route_summary()

    @app.post("/route/waypoints/{order}/move-down")
    async def move_waypoint_down(order: int) -> Dict[str, Any]:
        sequencer.move_down(order)
        return route_summary()

    @app.delete("/route")
    async def clear_route() -> Dict[str, Any]:
        sequencer.clear()
        return route_summary()

    @app.get("/paths")
    async def list_paths() -> Dict[str, Any]:
        paths = await store.list()
        return {
            "paths": [{**path.as_dict(), "origin": path.origin.value} for path in paths]
        }

    @app.post("/paths", status_code=201)
    async def save_path(body: SavePathBody) -> Dict[str, Any]:
        template = await store.save(body.name, sequencer.snapshot())
        return {"path": {**template.as_dict(), "origin": template.origin.value}}

    @app.delete("/paths/{path_id}")
    async def delete_path(path_id: str) -> Dict[str, Any]:
        await store.delete(path_id)
        return {"deleted": path_id}

    @app.post("/paths/{path_id}/load")
    async def load_path(path_id: str) -> Dict[str, Any]:
        template = await store.get(path_id)
        if template is None:
            raise HTTPException(status_code=404, detail=f"Path {path_id} not found")
        sequencer.load(template.waypoints)
        return {"name": template.name, **route_summary()}

    def finished(task: asyncio.Task) -> None:
        running.discard(task)
        log_task_failure(task)

    def launch(waypoints, label: str) -> None:
        task = coordinator.begin(waypoints, label)
        running.add(task)
        task.add_done_callback(finished)

    @app.post("/execute", status_code=202)
    async def execute_route(body: ExecuteBody) -> Dict[str, Any]:
        launch(sequencer.snapshot(), body.label)
        return {"execution_state": coordinator.state.value}

    @app.post("/execution/retry", status_code=202)
    async def retry_execution() -> Dict[str, Any]:
        failed = coordinator.last_failed_request
        if failed is None:
            raise HTTPException(status_code=404, detail="No failed route to retry")
        launch(failed.waypoints, failed.label)
        return {"execution_state": coordinator.state.value}

    @app.get("/execution")
    async def execution_status() -> Dict[str, Any]:
        failed = coordinator.last_failed_request
        outcome = coordinator.last_outcome
        return {
            "state": coordinator.state.value,
            "history": [state.value for state in coordinator.history],
            "channel": actuation.metadata(),
            "last_outcome": None
            if outcome is None
            else {"state": outcome.state.value, "label": outcome.request.label, "error": outcome.error},
            "last_failed_request": None if failed is None else failed.as_payload(),
        }

    @app.post("/emergency-stop")
    async def emergency_stop() -> Dict[str, Any]:
        await coordinator.emergency_stop()
        return {"execution_state": coordinator.state.value}

    @app.post("/events/execution")
    async def execution_event(body: ExecutionEventBody) -> Dict[str, Any]:
        report = ExecutionReport(success=body.success, detail=body.detail, path_name=body.path_name)
        actuation.publish_outcome(report)
        return {"execution_state": coordinator.state.value}

    @app.post("/events/bot-status")
    async def bot_status_event(body: BotStatusBody) -> Dict[str, Any]:
        applied = feed.ingest_event(body.model_dump())
        return {"applied": applied, "bot_position": feed.position.as_dict()}

    @app.post("/pose/refresh")
    async def refresh_pose() -> Dict[str, Any]:
        applied = await feed.poll(http_client)
        return {"applied": applied, "bot_position": feed.position.as_dict()}

    return app
