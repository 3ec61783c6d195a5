"""Storage protocol for form persistence.

Defines the interface that all repository backends must implement.
"""

from typing import Any, Protocol


class Repository(Protocol):
    """Key-value store of whole JSON snapshots.

    Keys are opaque strings. Values are JSON-compatible dicts, stored and
    returned as complete snapshots; there are no partial updates. All
    backends (SQLite, in-memory) must implement this interface to be
    compatible with FormStore.
    """

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def initialize(self) -> None:
        """Initialize storage (create tables, directories, etc.)."""
        ...

    def close(self) -> None:
        """Close storage connections and clean up resources."""
        ...

    # =========================================================================
    # Record Operations
    # =========================================================================

    def create(self, key: str, value: dict[str, Any]) -> None:
        """Store a new record.

        Raises:
            StorageError: If the key already exists.
        """
        ...

    def read(self, key: str) -> dict[str, Any] | None:
        """Get a record by key, or None if absent."""
        ...

    def update(self, key: str, value: dict[str, Any]) -> None:
        """Replace an existing record.

        Raises:
            StorageError: If the key does not exist.
        """
        ...

    def delete(self, key: str) -> None:
        """Remove a record.

        Raises:
            StorageError: If the key does not exist.
        """
        ...

    def list_keys(self, prefix: str = "") -> list[str]:
        """List stored keys starting with ``prefix``, sorted."""
        ...
