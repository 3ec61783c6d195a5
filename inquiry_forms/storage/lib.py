"""Typed form and signature persistence on top of a Repository.

FormStore maps schema models to repository snapshots under namespaced
keys (``form:{id}``, ``signature:{id}``). It validates snapshots on the
way out, so a corrupted record surfaces as a pydantic ValidationError
rather than a half-built Form.
"""

from __future__ import annotations

import logging
from pathlib import Path

from inquiry_forms.config import get_forms_db_path
from inquiry_forms.errors import StorageError
from inquiry_forms.schema import Form, Signature
from inquiry_forms.storage.protocol import Repository
from inquiry_forms.storage.sqlite import SQLiteRepository

logger = logging.getLogger(__name__)

FORM_PREFIX = "form:"
SIGNATURE_PREFIX = "signature:"


def open_repository(db_path: Path | str | None = None) -> SQLiteRepository:
    """Open (and initialize) the SQLite repository.

    Resolution: db_path > FORMS_DB_PATH > {cwd}/.inquiry-forms/forms.db
    """
    repository = SQLiteRepository(get_forms_db_path(db_path))
    repository.initialize()
    return repository


class FormStore:
    """Forms and signatures persisted through a Repository.

    Example:
        >>> store = FormStore(InMemoryRepository())
        >>> store.create_form(create_form("Contact"))
        >>> [f.name for f in store.list_forms()]
        ['Contact']
    """

    def __init__(self, repository: Repository):
        self.repository = repository

    def close(self) -> None:
        """Close the underlying repository."""
        self.repository.close()

    # =========================================================================
    # Forms
    # =========================================================================

    def list_forms(self) -> list[Form]:
        """All stored forms, most recently updated first."""
        forms = []
        for key in self.repository.list_keys(FORM_PREFIX):
            snapshot = self.repository.read(key)
            if snapshot is not None:
                forms.append(Form.model_validate(snapshot))
        return sorted(forms, key=lambda f: f.updated_at, reverse=True)

    def get_form(self, form_id: str) -> Form | None:
        """Get a form by id."""
        snapshot = self.repository.read(FORM_PREFIX + form_id)
        return Form.model_validate(snapshot) if snapshot is not None else None

    def require_form(self, form_id: str) -> Form:
        """Get a form by id.

        Raises:
            StorageError: If no such form is stored.
        """
        form = self.get_form(form_id)
        if form is None:
            raise StorageError(f"Form not found: {form_id}")
        return form

    def create_form(self, form: Form) -> Form:
        """Store a new form; fails if the id is taken."""
        self.repository.create(FORM_PREFIX + form.id, form.to_json_dict())
        logger.info("Created form %s (%s)", form.id, form.name)
        return form

    def save_form(self, form: Form) -> Form:
        """Create or replace a form snapshot."""
        key = FORM_PREFIX + form.id
        if self.repository.read(key) is None:
            self.repository.create(key, form.to_json_dict())
        else:
            self.repository.update(key, form.to_json_dict())
        logger.info("Saved form %s (%s)", form.id, form.name)
        return form

    def delete_form(self, form_id: str) -> None:
        """Delete a form; fails if it does not exist."""
        self.repository.delete(FORM_PREFIX + form_id)
        logger.info("Deleted form %s", form_id)

    # =========================================================================
    # Signatures
    # =========================================================================

    def list_signatures(self) -> list[Signature]:
        """All stored signatures, ordered by creation time."""
        signatures = []
        for key in self.repository.list_keys(SIGNATURE_PREFIX):
            snapshot = self.repository.read(key)
            if snapshot is not None:
                signatures.append(Signature.model_validate(snapshot))
        return sorted(signatures, key=lambda s: (s.created_at, s.id))

    def get_signature(self, signature_id: str) -> Signature | None:
        """Get a signature by id."""
        snapshot = self.repository.read(SIGNATURE_PREFIX + signature_id)
        return Signature.model_validate(snapshot) if snapshot is not None else None

    def save_signature(self, signature: Signature) -> Signature:
        """Create or replace a signature snapshot."""
        key = SIGNATURE_PREFIX + signature.id
        if self.repository.read(key) is None:
            self.repository.create(key, signature.to_json_dict())
        else:
            self.repository.update(key, signature.to_json_dict())
        logger.debug("Saved signature %s", signature.id)
        return signature

    def delete_signature(self, signature_id: str) -> None:
        """Delete a signature; fails if it does not exist."""
        self.repository.delete(SIGNATURE_PREFIX + signature_id)
        logger.debug("Deleted signature %s", signature_id)
