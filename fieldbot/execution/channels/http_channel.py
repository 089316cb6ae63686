"""Mini README: Actuation channel speaking to the farm backend.

Structure:
    * HttpActuationChannel - posts routes to ``/waypoints/execute`` and the
      emergency stop to ``/emergency-stop``.

The backend pushes terminal events over its socket channel; the interface
relays them into ``publish_outcome``.
"""

from __future__ import annotations

from ...api_client import request_envelope
from ...errors import ContractViolation
from ...logging_utils import get_logger
from ...route_planning.models import ExecutionRequest
from ..base import ActuationChannel
from ..registry import REGISTRY

LOGGER = get_logger(__name__)


class HttpActuationChannel(ActuationChannel):
    """Channel delivering routes to the backend REST API."""

    channel_name = "http"

    def _require_client(self):
        if self.client is None:
            raise ContractViolation("The http actuation channel needs an HTTP client")
        return self.client

    async def submit(self, request: ExecutionRequest) -> None:
        LOGGER.info(
            "Submitting route '%s' with %s waypoints", request.label, len(request.waypoints)
        )
        await request_envelope(
            self._require_client(), "POST", "/waypoints/execute", json_body=request.as_payload()
        )

    async def emergency_stop(self) -> None:
        LOGGER.warning("Sending emergency stop to the backend")
        await request_envelope(self._require_client(), "POST", "/emergency-stop", json_body={})


REGISTRY.register(HttpActuationChannel)
