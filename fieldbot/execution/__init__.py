"""Mini README: Route execution subsystem package initialiser.

The package is divided into ``base`` for the channel abstraction,
``registry`` for channel lookup, ``channels`` for concrete transports and
``coordinator`` for the single-flight execution state machine.
"""

from .base import ActuationChannel, ExecutionReport
from .coordinator import ExecutionCoordinator, ExecutionOutcome, ExecutionState
from .registry import ActuationChannelRegistry, REGISTRY
from . import channels  # noqa: F401  # ensure built-in channels register on import

__all__ = [
    "ActuationChannel",
    "ActuationChannelRegistry",
    "ExecutionCoordinator",
    "ExecutionOutcome",
    "ExecutionReport",
    "ExecutionState",
    "REGISTRY",
]
