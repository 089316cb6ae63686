"""Mini README: Concrete actuation channel implementations.

New channels should export a subclass of ``ActuationChannel`` and call
``REGISTRY.register`` during module import to keep the system discoverable.
"""

from .http_channel import HttpActuationChannel
from .simulated import SimulatedActuationChannel

__all__ = ["HttpActuationChannel", "SimulatedActuationChannel"]
