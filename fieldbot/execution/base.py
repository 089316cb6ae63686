"""Mini README: Abstract actuation channel used to execute routes.

Structure:
    * ExecutionReport - terminal event reported by the actuation service,
      tagged with the ``path_name`` of the route it concerns when known.
    * ActuationChannel - abstract interface implemented by transports.

A channel has two duties: deliver an ``ExecutionRequest`` and return once
the service acknowledges it, and relay the service's terminal event to
subscribers through ``publish_outcome``. The coordinator subscribes when it
is constructed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

import httpx

from ..logging_utils import get_logger
from ..route_planning.models import ExecutionRequest

LOGGER = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ExecutionReport:
    """Terminal outcome of a route as reported by the actuation service."""

    success: bool
    detail: str = ""
    path_name: Optional[str] = None


OutcomeListener = Callable[[ExecutionReport], None]


class ActuationChannel(ABC):
    """Base interface for actuation service integrations."""

    channel_name: str = "generic"

    def __init__(self, client: Optional[httpx.AsyncClient] = None) -> None:
        self.client = client
        self._listeners: List[OutcomeListener] = []
        LOGGER.debug("Initialising %s actuation channel", self.channel_name)

    @abstractmethod
    async def submit(self, request: ExecutionRequest) -> None:
        """Deliver the route; return on acknowledgment, raise ``TransportError`` otherwise."""

    @abstractmethod
    async def emergency_stop(self) -> None:
        """Ask the service to halt immediately and drop pending commands."""

    def subscribe(self, listener: OutcomeListener) -> None:
        self._listeners.append(listener)

    def publish_outcome(self, report: ExecutionReport) -> None:
        """Forward a terminal event to every subscriber."""

        LOGGER.info(
            "Actuation service reported %s %s",
            "success" if report.success else "failure",
            report.detail,
        )
        for listener in self._listeners:
            listener(report)

    def metadata(self) -> Dict[str, str]:
        """Return diagnostic metadata for interface displays."""

        return {
            "channel": self.channel_name,
            "endpoint": str(self.client.base_url) if self.client else "not configured",
        }
