"""Mini README: Data model for grid routes.

Structure:
    * ActionKind - enum of the actions a waypoint can carry.
    * GridPosition - integer cell coordinate on the square field.
    * Waypoint - one stop of the authored route with a stable identity.
    * PathOrigin / PathTemplate - named saved route tagged with its store.
    * BotPose - robot position reported by the telemetry feed.
    * ExecutionRequest - payload for one submission to the actuation service.

All models are frozen dataclasses. Wire conversion mirrors the farm backend
field names (``_id``, ``created_at``, ``path_name``) so the storage and
execution layers can pass dictionaries straight through ``httpx``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple
from uuid import uuid4

from ..errors import ValidationError
from ..utils.timestamps import format_timestamp, parse_timestamp

LOCAL_ID_PREFIX = "local-"


class ActionKind(str, Enum):
    """Enumerate the actions the robot performs at a waypoint."""

    MOVE = "move"
    WATER = "water"
    FERTILIZE = "fertilize"
    WAIT = "wait"
    SCAN = "scan"

    @classmethod
    def from_str(cls, value: object) -> "ActionKind":
        """Coerce arbitrary casing into a valid action."""

        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as error:
            raise ValidationError(f"Unsupported waypoint action: {value}") from error


@dataclass(frozen=True, slots=True)
class GridPosition:
    """Cell coordinate on the field grid."""

    x: int
    y: int

    def manhattan_distance(self, other: "GridPosition") -> int:
        return abs(self.x - other.x) + abs(self.y - other.y)

    def within(self, field_size: int) -> bool:
        """Return True when the cell lies on a ``field_size`` square grid."""

        return 0 <= self.x < field_size and 0 <= self.y < field_size

    def as_dict(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y}


def coerce_duration(action: ActionKind, duration: object) -> Optional[int]:
    """Validate the duration rule: present exactly for waits, positive seconds."""

    if action is not ActionKind.WAIT:
        if duration is not None:
            raise ValidationError(f"Action '{action.value}' does not accept a duration")
        return None
    if duration is None:
        raise ValidationError("Wait waypoints require a duration in seconds")
    if isinstance(duration, bool) or not isinstance(duration, int):
        raise ValidationError(f"Wait duration must be an integer, got {duration!r}")
    if duration <= 0:
        raise ValidationError(f"Wait duration must be positive, got {duration}")
    return duration


def _coerce_coordinate(value: object, axis: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"Waypoint {axis} must be an integer, got {value!r}")
    return value


@dataclass(frozen=True, slots=True)
class Waypoint:
    """Single grid stop carrying an action and its place in the route."""

    position: GridPosition
    action: ActionKind
    order: int
    duration: Optional[int] = None
    notes: Optional[str] = None
    waypoint_id: str = field(default_factory=lambda: uuid4().hex)

    def as_dict(self) -> Dict[str, Any]:
        """Export in the backend's flat ``{x, y, action, order}`` shape."""

        payload: Dict[str, Any] = {
            "x": self.position.x,
            "y": self.position.y,
            "action": self.action.value,
            "order": self.order,
        }
        if self.duration is not None:
            payload["duration"] = self.duration
        if self.notes:
            payload["notes"] = self.notes
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Waypoint":
        """Build a waypoint from backend or stored JSON.

        Stored records are taken at face value apart from type coercion; the
        sequencer re-validates them when a template is loaded for editing.
        """

        if not isinstance(payload, Mapping):
            raise ValidationError(f"Waypoint payload must be an object, got {payload!r}")
        try:
            position = GridPosition(
                x=_coerce_coordinate(payload["x"], "x"),
                y=_coerce_coordinate(payload["y"], "y"),
            )
            action = ActionKind.from_str(payload["action"])
        except KeyError as error:
            raise ValidationError(f"Waypoint payload missing field {error}") from error
        duration = payload.get("duration")
        try:
            order = int(payload.get("order") or 0)
            duration = int(duration) if duration is not None else None
        except (TypeError, ValueError) as error:
            raise ValidationError(f"Waypoint payload has a non-numeric field: {error}") from error
        return cls(
            position=position,
            action=action,
            order=order,
            duration=duration,
            notes=payload.get("notes") or None,
        )


def waypoints_as_dicts(waypoints: Iterable[Waypoint]) -> List[Dict[str, Any]]:
    return [waypoint.as_dict() for waypoint in waypoints]


class PathOrigin(str, Enum):
    """Store that owns a saved path."""

    REMOTE = "remote"
    LOCAL = "local"


def origin_of(path_id: Optional[str]) -> PathOrigin:
    """Derive the owning store from a path identifier."""

    if path_id and path_id.startswith(LOCAL_ID_PREFIX):
        return PathOrigin.LOCAL
    return PathOrigin.REMOTE


@dataclass(frozen=True, slots=True)
class PathTemplate:
    """Named, persisted route."""

    id: Optional[str]
    name: str
    waypoints: Tuple[Waypoint, ...]
    created_at: Optional[datetime] = None

    @property
    def origin(self) -> PathOrigin:
        return origin_of(self.id)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "_id": self.id,
            "name": self.name,
            "waypoints": waypoints_as_dicts(self.waypoints),
            "created_at": format_timestamp(self.created_at),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "PathTemplate":
        """Parse a template accepting both backend and camel-case field names."""

        if not isinstance(payload, Mapping):
            raise ValidationError(f"Path payload must be an object, got {payload!r}")
        waypoints = payload.get("waypoints") or []
        if not isinstance(waypoints, list):
            raise ValidationError(f"Path waypoints must be a list, got {waypoints!r}")
        path_id = payload.get("_id", payload.get("id"))
        try:
            created_at = parse_timestamp(payload.get("created_at", payload.get("createdAt")))
        except ValueError as error:
            raise ValidationError(str(error)) from error
        return cls(
            id=str(path_id) if path_id is not None else None,
            name=str(payload.get("name") or ""),
            waypoints=tuple(Waypoint.from_dict(item) for item in waypoints),
            created_at=created_at,
        )


@dataclass(frozen=True, slots=True)
class BotPose:
    """Robot position with the feed timestamp it was observed at."""

    position: GridPosition
    timestamp: datetime


@dataclass(frozen=True, slots=True)
class ExecutionRequest:
    """Route submitted to the actuation service."""

    waypoints: Tuple[Waypoint, ...]
    label: str

    def as_payload(self) -> Dict[str, Any]:
        return {"waypoints": waypoints_as_dicts(self.waypoints), "path_name": self.label}
