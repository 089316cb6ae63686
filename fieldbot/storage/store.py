"""Mini README: Remote-first path persistence with a local safety net.

Structure:
    * PathStore - composes a remote and a local ``PathRepository`` behind
      one save/list/delete contract.

Rules:
    * save - try the backend; on a transport failure keep the operator's
      work in the local repository instead. The fallback never raises.
    * list - try the backend; read the local repository only when the
      backend fails. An empty backend answer is still an answer.
    * get - route by the identifier's origin, like delete.
    * delete - route by the identifier's origin. Remote records are never
      deleted locally; an unreachable backend is reported as a conflict.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Sequence

from ..errors import ConflictError, ContractViolation, TransportError, ValidationError
from ..logging_utils import get_logger
from ..route_planning.models import PathOrigin, PathTemplate, Waypoint, origin_of
from .base import PathRepository

LOGGER = get_logger(__name__)


def default_path_name(moment: Optional[datetime] = None) -> str:
    """Name used when the operator saves without typing one."""

    moment = moment or datetime.now()
    return f"Path {moment:%Y-%m-%d %H:%M:%S}"


class PathStore:
    """Persistence facade choosing between the backend and local storage."""

    def __init__(self, remote: PathRepository, local: PathRepository) -> None:
        self.remote = remote
        self.local = local
        LOGGER.debug(
            "Initialised PathStore remote=%s local=%s",
            remote.repository_name,
            local.repository_name,
        )

    async def save(self, name: str, waypoints: Sequence[Waypoint]) -> PathTemplate:
        """Persist a route, falling back to local storage if the backend fails."""

        snapshot = tuple(waypoints)
        if not snapshot:
            raise ValidationError("Cannot save a path without waypoints")
        name = (name or "").strip() or default_path_name()
        try:
            return await self.remote.create(name, snapshot)
        except TransportError as error:
            LOGGER.warning("Remote save of '%s' failed (%s); saving locally", name, error)
        return await self.local.create(name, snapshot)

    async def list(self) -> List[PathTemplate]:
        """Return saved paths from the backend, or local ones if it is unreachable."""

        try:
            return await self.remote.list()
        except TransportError as error:
            LOGGER.warning("Remote path listing failed (%s); using local paths", error)
        return await self.local.list()

    async def delete(self, path_id: str) -> None:
        """Delete a path from the repository that owns it."""

        if not path_id:
            raise ContractViolation("A path identifier is required for deletion")
        if origin_of(path_id) is PathOrigin.LOCAL:
            await self.local.delete(path_id)
            return
        try:
            await self.remote.delete(path_id)
        except TransportError as error:
            LOGGER.error("Remote delete of %s failed: %s", path_id, error)
            raise ConflictError(
                f"Path {path_id} is stored remotely and the backend is unavailable"
            ) from error

    async def get(self, path_id: str) -> Optional[PathTemplate]:
        """Fetch one path from the repository that owns it.

        Local records stay reachable after the backend recovers; a remote
        record cannot be fetched while the backend is down.
        """

        if not path_id:
            raise ContractViolation("A path identifier is required")
        if origin_of(path_id) is PathOrigin.LOCAL:
            return await self.local.get(path_id)
        try:
            return await self.remote.get(path_id)
        except TransportError as error:
            LOGGER.error("Remote fetch of %s failed: %s", path_id, error)
            raise ConflictError(
                f"Path {path_id} is stored remotely and the backend is unavailable"
            ) from error
