"""Mini README: Saved path storage for Fieldbot.

The package is divided into ``base`` for the repository interfaces,
``remote`` and ``local`` for the two concrete repositories, and ``store``
for the fallback-selecting facade used by interfaces.
"""

from .base import KeyValueStore, PathRepository
from .local import InMemoryKeyValueStore, JsonFileKeyValueStore, LocalPathRepository
from .remote import RemotePathRepository
from .store import PathStore

__all__ = [
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "LocalPathRepository",
    "PathRepository",
    "PathStore",
    "RemotePathRepository",
]
