"""Mini README: Registry of actuation channels.

Structure:
    * ActuationChannelRegistry - maps channel identifiers to
      ``ActuationChannel`` classes and instantiates them.

The ``actuation_channel`` setting names the channel the interface uses, so
switching between the real backend and the simulator is configuration only.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional, Type

import httpx

from .base import ActuationChannel
from ..logging_utils import get_logger

LOGGER = get_logger(__name__)


class ActuationChannelRegistry:
    """Simple registry for mapping channel identifiers to classes."""

    def __init__(self) -> None:
        self._channels: Dict[str, Type[ActuationChannel]] = {}

    def register(self, channel: Type[ActuationChannel]) -> None:
        """Register a new channel class with the registry."""

        identifier = channel.channel_name.lower()
        LOGGER.debug("Registering actuation channel '%s'", identifier)
        self._channels[identifier] = channel

    def available_channels(self) -> Iterable[str]:
        return sorted(self._channels.keys())

    def create(
        self, identifier: str, *, client: Optional[httpx.AsyncClient] = None
    ) -> ActuationChannel:
        """Instantiate a channel matching the identifier."""

        channel_cls = self._channels.get(identifier.lower())
        if not channel_cls:
            raise KeyError(f"Unknown actuation channel '{identifier}'")
        LOGGER.info("Creating actuation channel '%s'", identifier)
        return channel_cls(client=client)


REGISTRY = ActuationChannelRegistry()
