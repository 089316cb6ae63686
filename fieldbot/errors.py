"""Mini README: Error hierarchy shared by the Fieldbot subsystems.

Structure:
    * FieldbotError - common base so interfaces can catch everything at once.
    * ValidationError - operator input that cannot be accepted.
    * ContractViolation - programmer misuse such as an out-of-range order.
    * ConflictError - operation refused because of current system state.
    * TransportError - network or server failure talking to the backend.
        * RemoteRejectedError - backend answered with ``success: false``.
        * ExecutionTimeoutError - a bounded wait on the backend expired.

Transport errors are recoverable inside the path store (local fallback) and
become a ``Failed`` execution inside the coordinator. The remaining kinds are
raised straight to the caller.
"""

from __future__ import annotations

from typing import Optional


class FieldbotError(Exception):
    """Base class for all errors raised by the route planning core."""


class ValidationError(FieldbotError):
    """Raised when operator supplied input violates a route rule."""


class ContractViolation(FieldbotError):
    """Raised when a caller uses an API incorrectly."""


class ConflictError(FieldbotError):
    """Raised when the current state forbids the requested operation."""


class TransportError(FieldbotError):
    """Raised when the farm backend cannot be reached or fails."""

    def __init__(
        self,
        message: str,
        *,
        method: Optional[str] = None,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.method = method
        self.url = url
        self.status_code = status_code

    def __str__(self) -> str:
        message = super().__str__()
        if self.method and self.url:
            message = f"{message} ({self.method} {self.url}"
            if self.status_code is not None:
                message += f" -> {self.status_code}"
            message += ")"
        return message


class RemoteRejectedError(TransportError):
    """Raised when the backend responds but reports ``success: false``."""


class ExecutionTimeoutError(TransportError):
    """Raised when the actuation service does not answer in time."""
