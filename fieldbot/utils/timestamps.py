"""Mini README: Timestamp helpers shared by storage, telemetry and execution.

The farm backend and the push channel exchange ISO 8601 strings, sometimes
with a trailing ``Z``. Keeping the parsing here avoids repeating the
normalisation in every model and lets tests freeze the clock in one place.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""

    return datetime.now(timezone.utc)


def epoch_millis(moment: Optional[datetime] = None) -> int:
    """Return milliseconds since the epoch for ``moment`` (defaults to now)."""

    moment = moment or utc_now()
    return int(moment.timestamp() * 1000)


def parse_timestamp(value: object) -> Optional[datetime]:
    """Parse ISO strings, epoch numbers or datetimes into aware UTC datetimes."""

    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        # Backend epochs are expressed in milliseconds.
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as error:
            raise ValueError(f"Unsupported timestamp: {value}") from error
    else:
        raise ValueError(f"Unsupported timestamp: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_timestamp(moment: Optional[datetime]) -> Optional[str]:
    """Render a datetime the way the backend stores it."""

    if moment is None:
        return None
    return moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
