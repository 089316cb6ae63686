"""Mini README: Abstract interfaces for saved path persistence.

Structure:
    * PathRepository - create/list/get/delete contract implemented by the remote
      backend repository and the local fallback repository.
    * KeyValueStore - single-slot document storage used by the local
      repository (file backed in production, in-memory in tests).

``PathStore`` composes two repositories; because both sides are injected,
either can be replaced by a fake independently.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from ..route_planning.models import PathTemplate, Waypoint


class PathRepository(ABC):
    """Base interface for a store of named paths."""

    repository_name: str = "generic"

    @abstractmethod
    async def create(self, name: str, waypoints: Sequence[Waypoint]) -> PathTemplate:
        """Persist a new path and return it with its assigned identifier."""

    @abstractmethod
    async def list(self) -> List[PathTemplate]:
        """Return every path held by the repository."""

    async def get(self, path_id: str) -> Optional[PathTemplate]:
        """Return the path with ``path_id`` or None when it is not held here."""

        for path in await self.list():
            if path.id == path_id:
                return path
        return None

    @abstractmethod
    async def delete(self, path_id: str) -> None:
        """Remove the path with ``path_id``."""


class KeyValueStore(ABC):
    """Persistent slots holding whole JSON documents."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the raw document stored under ``key`` or None."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Replace the document stored under ``key``."""
