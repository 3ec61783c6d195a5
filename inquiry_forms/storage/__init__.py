"""Storage backends for form persistence.

Available backends:
- SQLiteRepository: File-based SQLite database (recommended for local use)
- InMemoryRepository: In-memory storage for testing

FormStore layers typed Form and Signature access over either backend.
"""

from inquiry_forms.storage.lib import (
    FORM_PREFIX,
    SIGNATURE_PREFIX,
    FormStore,
    open_repository,
)
from inquiry_forms.storage.memory import InMemoryRepository
from inquiry_forms.storage.protocol import Repository
from inquiry_forms.storage.sqlite import SQLiteRepository

__all__ = [
    # Backends
    "Repository",
    "InMemoryRepository",
    "SQLiteRepository",
    # Typed access
    "FormStore",
    "open_repository",
    "FORM_PREFIX",
    "SIGNATURE_PREFIX",
]
