"""Mini README: Latest known robot position.

Structure:
    * PoseFeed - one cell holding the current ``BotPose``. It is written by
      polling ``/bot/status`` and by pushed ``bot_status_update`` events,
      and read without locking by the estimator and the interface.

Polls and pushes can race. An update is applied only when its feed
timestamp is not older than the pose already held, so a late poll result
cannot roll the robot back to an earlier position.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Optional

import httpx

from ..api_client import request_envelope
from ..errors import TransportError, ValidationError
from ..logging_utils import get_logger
from ..route_planning.models import BotPose, GridPosition
from ..utils.timestamps import parse_timestamp, utc_now

LOGGER = get_logger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def pose_from_payload(payload: Mapping[str, Any]) -> BotPose:
    """Build a pose from a status document; a missing timestamp means 'now'."""

    try:
        position = GridPosition(x=int(payload["x"]), y=int(payload["y"]))
        timestamp = parse_timestamp(payload.get("lastUpdate", payload.get("timestamp")))
    except (KeyError, TypeError, ValueError) as error:
        raise ValidationError(f"Invalid bot status payload: {error}") from error
    return BotPose(position=position, timestamp=timestamp or utc_now())


class PoseFeed:
    """Single continuously updated pose cell."""

    def __init__(self, initial: Optional[BotPose] = None) -> None:
        self._pose = initial or BotPose(position=GridPosition(0, 0), timestamp=_EPOCH)

    @property
    def current(self) -> BotPose:
        return self._pose

    @property
    def position(self) -> GridPosition:
        return self._pose.position

    def apply(self, pose: BotPose) -> bool:
        """Store ``pose`` unless it is older than the current one."""

        if pose.timestamp < self._pose.timestamp:
            LOGGER.debug(
                "Discarding stale pose %s at %s (holding %s)",
                pose.position,
                pose.timestamp.isoformat(),
                self._pose.timestamp.isoformat(),
            )
            return False
        self._pose = pose
        return True

    def ingest_event(self, payload: Mapping[str, Any]) -> bool:
        """Apply a pushed ``bot_status_update`` event."""

        return self.apply(pose_from_payload(payload))

    async def poll(self, client: httpx.AsyncClient) -> bool:
        """Fetch ``/bot/status`` and apply the reported pose."""

        envelope = await request_envelope(client, "GET", "/bot/status")
        bot = envelope.get("bot")
        if not isinstance(bot, Mapping):
            raise TransportError("Bot status response is missing the 'bot' document")
        try:
            pose = pose_from_payload(bot)
        except ValidationError as error:
            raise TransportError(str(error)) from error
        return self.apply(pose)
