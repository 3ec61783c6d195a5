"""In-memory repository, used by tests and throwaway sessions."""

import json
import logging
import threading
from typing import Any

from inquiry_forms.errors import StorageError

logger = logging.getLogger(__name__)


class InMemoryRepository:
    """Repository keeping serialized snapshots in a dict.

    Values are held as JSON text so callers never share mutable state
    with the store.
    """

    def __init__(self) -> None:
        self._records: dict[str, str] = {}
        self._lock = threading.Lock()

    def initialize(self) -> None:
        """Nothing to set up."""

    def close(self) -> None:
        """Drop all records."""
        with self._lock:
            self._records.clear()

    def create(self, key: str, value: dict[str, Any]) -> None:
        with self._lock:
            if key in self._records:
                raise StorageError(f"Record already exists: {key}")
            self._records[key] = json.dumps(value)
        logger.debug("Created record %s", key)

    def read(self, key: str) -> dict[str, Any] | None:
        with self._lock:
            raw = self._records.get(key)
        return json.loads(raw) if raw is not None else None

    def update(self, key: str, value: dict[str, Any]) -> None:
        with self._lock:
            if key not in self._records:
                raise StorageError(f"Record not found: {key}")
            self._records[key] = json.dumps(value)
        logger.debug("Updated record %s", key)

    def delete(self, key: str) -> None:
        with self._lock:
            if key not in self._records:
                raise StorageError(f"Record not found: {key}")
            del self._records[key]
        logger.debug("Deleted record %s", key)

    def list_keys(self, prefix: str = "") -> list[str]:
        with self._lock:
            return sorted(k for k in self._records if k.startswith(prefix))
