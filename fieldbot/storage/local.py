"""Mini README: Local fallback persistence for saved paths.

Structure:
    * InMemoryKeyValueStore - dictionary backed slots for tests and demos.
    * JsonFileKeyValueStore - slots kept in one JSON file on disk.
    * LocalPathRepository - keeps every local path as one JSON array under a
      stable key; each write replaces the whole document.

Local identifiers carry the ``local-`` prefix followed by the client clock
in milliseconds, which is how the path store routes deletes back here.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..errors import ContractViolation, ValidationError
from ..logging_utils import get_logger
from ..route_planning.models import LOCAL_ID_PREFIX, PathTemplate, Waypoint
from ..utils.timestamps import epoch_millis, utc_now
from .base import KeyValueStore, PathRepository

LOGGER = get_logger(__name__)


class InMemoryKeyValueStore(KeyValueStore):
    """Process local slots."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._slots: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._slots.get(key)

    def set(self, key: str, value: str) -> None:
        self._slots[key] = value


class JsonFileKeyValueStore(KeyValueStore):
    """Slots persisted as a JSON object in a single file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        LOGGER.debug("Local key-value store at %s", self.path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            content = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError:
            LOGGER.warning("Local store %s is corrupt; starting from an empty document", self.path)
            return {}
        return content if isinstance(content, dict) else {}

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        slots = self._read_all()
        slots[key] = value
        temporary = self.path.with_suffix(self.path.suffix + ".tmp")
        temporary.write_text(json.dumps(slots, indent=2), encoding="utf-8")
        temporary.replace(self.path)


class LocalPathRepository(PathRepository):
    """Saved paths kept on the operator's machine.

    Records that no longer parse are skipped when listing but written back
    untouched, so one damaged entry neither blocks new saves nor loses data.
    """

    repository_name = "local"

    def __init__(self, store: KeyValueStore, *, key: str = "savedPaths") -> None:
        self.store = store
        self.key = key

    def _documents(self) -> List[Any]:
        raw = self.store.get(self.key)
        if not raw:
            return []
        try:
            documents = json.loads(raw)
        except json.JSONDecodeError:
            LOGGER.warning("Local slot '%s' is not valid JSON; treating it as empty", self.key)
            return []
        if not isinstance(documents, list):
            LOGGER.warning("Local slot '%s' does not hold a list; treating it as empty", self.key)
            return []
        return documents

    def _parse(self, documents: Sequence[Any]) -> List[PathTemplate]:
        paths: List[PathTemplate] = []
        for index, document in enumerate(documents):
            try:
                paths.append(PathTemplate.from_dict(document))
            except ValidationError as error:
                LOGGER.warning("Skipping unreadable local path #%s in '%s': %s", index, self.key, error)
        return paths

    def _save(self, documents: Sequence[Any]) -> None:
        self.store.set(self.key, json.dumps(list(documents)))

    @staticmethod
    def _document_id(document: Any) -> Optional[str]:
        if not isinstance(document, dict):
            return None
        path_id = document.get("_id", document.get("id"))
        return str(path_id) if path_id is not None else None

    def _next_id(self, taken: set) -> str:
        stamp = epoch_millis()
        while f"{LOCAL_ID_PREFIX}{stamp}" in taken:
            stamp += 1
        return f"{LOCAL_ID_PREFIX}{stamp}"

    async def create(self, name: str, waypoints: Sequence[Waypoint]) -> PathTemplate:
        documents = self._documents()
        template = PathTemplate(
            id=self._next_id({self._document_id(document) for document in documents}),
            name=name,
            waypoints=tuple(waypoints),
            created_at=utc_now(),
        )
        documents.append(template.as_dict())
        self._save(documents)
        LOGGER.info("Saved path '%s' locally as %s", name, template.id)
        return template

    async def list(self) -> List[PathTemplate]:
        return self._parse(self._documents())

    async def delete(self, path_id: str) -> None:
        documents = self._documents()
        remaining = [document for document in documents if self._document_id(document) != path_id]
        if len(remaining) == len(documents):
            raise ContractViolation(f"Local path {path_id} does not exist")
        self._save(remaining)
        LOGGER.info("Deleted local path %s", path_id)
