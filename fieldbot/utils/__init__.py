"""Mini README: Utility helper functions for Fieldbot.

Currently exports the timestamp helpers shared by the storage, telemetry
and execution layers.
"""

from .timestamps import epoch_millis, format_timestamp, parse_timestamp, utc_now

__all__ = ["epoch_millis", "format_timestamp", "parse_timestamp", "utc_now"]
