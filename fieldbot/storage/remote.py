"""Mini README: Saved paths held by the farm backend.

Talks to the ``/waypoints`` resource:

    GET    /waypoints        -> {success, paths}
    POST   /waypoints        -> {success, path | paths}
    DELETE /waypoints/{id}   -> {success}

Any failure, including a malformed body, surfaces as ``TransportError`` so
the path store can decide whether to fall back.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence

import httpx

from ..api_client import request_envelope
from ..errors import TransportError, ValidationError
from ..logging_utils import get_logger
from ..route_planning.models import PathTemplate, Waypoint, waypoints_as_dicts
from .base import PathRepository

LOGGER = get_logger(__name__)


def _parse_templates(documents: Any) -> List[PathTemplate]:
    if not isinstance(documents, list):
        raise TransportError("Backend returned paths in an unexpected shape")
    try:
        return [PathTemplate.from_dict(document) for document in documents]
    except (ValidationError, AttributeError, TypeError, ValueError) as error:
        raise TransportError(f"Backend returned a malformed path: {error}") from error


class RemotePathRepository(PathRepository):
    """Repository backed by the farm backend REST API."""

    repository_name = "remote"

    def __init__(self, client: httpx.AsyncClient) -> None:
        self.client = client

    async def create(self, name: str, waypoints: Sequence[Waypoint]) -> PathTemplate:
        payload = await request_envelope(
            self.client,
            "POST",
            "/waypoints",
            json_body={"name": name, "waypoints": waypoints_as_dicts(waypoints)},
        )
        created: Optional[PathTemplate] = None
        if isinstance(payload.get("path"), dict):
            created = _parse_templates([payload["path"]])[0]
        elif payload.get("paths") is not None:
            matching = [path for path in _parse_templates(payload["paths"]) if path.name == name]
            if matching:
                created = matching[-1]
        if created is None:
            # The backend acknowledged without echoing the record.
            LOGGER.warning("Backend saved path '%s' without returning its identifier", name)
            created = PathTemplate(id=None, name=name, waypoints=tuple(waypoints))
        LOGGER.info("Saved path '%s' remotely as %s", name, created.id)
        return created

    async def list(self) -> List[PathTemplate]:
        payload = await request_envelope(self.client, "GET", "/waypoints")
        return _parse_templates(payload.get("paths") or [])

    async def delete(self, path_id: str) -> None:
        await request_envelope(self.client, "DELETE", f"/waypoints/{path_id}")
        LOGGER.info("Deleted remote path %s", path_id)
