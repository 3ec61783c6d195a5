"""Editing operations on a form definition.

FormEditor holds a working copy of a Form and applies the operations an
editor UI needs (field and option CRUD, reordering, duplication). Every
mutation marks the editor dirty and keeps ``order`` dense, so a form that
passes ``ensure_saveable`` after editing never needs renumbering.
"""

from __future__ import annotations

import logging
from typing import Any, Literal

from inquiry_forms.rules import js_trim
from inquiry_forms.schema import (
    DEFAULT_OPTIONS,
    NEW_OPTION_LABEL,
    FieldType,
    Form,
    FormField,
    generate_id,
    new_field,
    now_iso,
)
from inquiry_forms.storage import FormStore
from inquiry_forms.validation import ensure_saveable

logger = logging.getLogger(__name__)

COPY_SUFFIX = " (copy)"

# Managed by the editor itself
_FORM_READONLY = frozenset({"id", "fields", "created_at", "updated_at"})
_FIELD_READONLY = frozenset({"id", "order"})

Direction = Literal["up", "down"]


def duplicate_form(form: Form, *, timestamp: str | None = None) -> Form:
    """Copy a form under a new id with a ``(copy)`` name suffix.

    Field ids are kept; DOM ids stay unique because they are namespaced
    by form id.
    """
    stamp = timestamp or now_iso()
    return form.model_copy(
        deep=True,
        update={
            "id": generate_id(),
            "name": form.name + COPY_SUFFIX,
            "created_at": stamp,
            "updated_at": stamp,
        },
    )


def _normalize_for_type(form_field: FormField) -> FormField:
    """Bring options and ``multiple`` in line with the field type."""
    updates: dict[str, Any] = {}
    if form_field.is_choice:
        if not form_field.options:
            updates["options"] = list(DEFAULT_OPTIONS)
    elif form_field.options is not None:
        updates["options"] = None
    if form_field.type != FieldType.SELECT and form_field.multiple is not None:
        updates["multiple"] = None
    return form_field.model_copy(update=updates) if updates else form_field


class FormEditor:
    """Working copy of a form with editing operations.

    Example:
        >>> editor = FormEditor(create_form("Contact"), store)
        >>> name = editor.add_field(FieldType.TEXT, label="Name")
        >>> editor.update_field(name.id, required=True)
        >>> editor.form.settings.recipient_emails = ["me@example.com"]
        >>> editor.save()
    """

    def __init__(self, form: Form, store: FormStore | None = None):
        self._initial = form.model_copy(deep=True)
        self.form = form.model_copy(deep=True)
        self.store = store
        self._dirty = False

    # =========================================================================
    # State
    # =========================================================================

    @property
    def is_dirty(self) -> bool:
        """Whether the working copy has unsaved changes."""
        return self._dirty

    @property
    def is_valid(self) -> bool:
        """Minimal completeness: a non-blank name and at least one field."""
        return bool(js_trim(self.form.name)) and len(self.form.fields) > 0

    def _touch(self) -> None:
        self._dirty = True

    def _index_of(self, field_id: str) -> int:
        for index, form_field in enumerate(self.form.fields):
            if form_field.id == field_id:
                return index
        raise KeyError(f"Field not found: {field_id}")

    def _renumber(self, fields: list[FormField]) -> None:
        self.form.fields = [
            f if f.order == i else f.model_copy(update={"order": i})
            for i, f in enumerate(fields)
        ]

    # =========================================================================
    # Form operations
    # =========================================================================

    def update_form(self, **updates: Any) -> Form:
        """Update top-level form properties (name, description, styling, settings).

        Values are validated by the schema model.

        Raises:
            ValueError: If a read-only property is passed.
            pydantic.ValidationError: If a value does not fit the schema.
        """
        readonly = _FORM_READONLY.intersection(updates)
        if readonly:
            raise ValueError(f"Cannot update {', '.join(sorted(readonly))} directly")
        data = self.form.model_dump()
        data.update(updates)
        self.form = Form.model_validate(data)
        self._touch()
        return self.form

    # =========================================================================
    # Field operations
    # =========================================================================

    def add_field(self, field_type: FieldType | str, *, label: str = "") -> FormField:
        """Append a blank field; choice types get two starter options."""
        form_field = new_field(field_type, order=len(self.form.fields), label=label)
        self._renumber(self.form.ordered_fields() + [form_field])
        self._touch()
        return form_field

    def update_field(self, field_id: str, **updates: Any) -> FormField:
        """Update one field's properties.

        Changing ``type`` normalizes options: choice types keep (or are
        seeded with) options, other types drop them.

        Raises:
            KeyError: If the field does not exist.
            ValueError: If ``id`` or ``order`` is passed.
        """
        readonly = _FIELD_READONLY.intersection(updates)
        if readonly:
            raise ValueError(f"Cannot update {', '.join(sorted(readonly))} directly")
        index = self._index_of(field_id)
        data = self.form.fields[index].model_dump()
        data.update(updates)
        updated = _normalize_for_type(FormField.model_validate(data))
        self.form.fields[index] = updated
        self._touch()
        return updated

    def delete_field(self, field_id: str) -> None:
        """Remove a field and close the gap in ``order``."""
        index = self._index_of(field_id)
        del self.form.fields[index]
        self._renumber(self.form.ordered_fields())
        self._touch()

    def move_field(self, field_id: str, direction: Direction) -> bool:
        """Swap a field with its neighbour in display order.

        Returns:
            bool: False (and no change) when already at that end.
        """
        fields = self.form.ordered_fields()
        index = next((i for i, f in enumerate(fields) if f.id == field_id), None)
        if index is None:
            raise KeyError(f"Field not found: {field_id}")
        target = index - 1 if direction == "up" else index + 1
        if target < 0 or target >= len(fields):
            return False
        fields[index], fields[target] = fields[target], fields[index]
        self._renumber(fields)
        self._touch()
        return True

    def duplicate_field(self, field_id: str) -> FormField:
        """Append a copy of a field with a new id and a ``(copy)`` label."""
        source = self.form.fields[self._index_of(field_id)]
        copy = source.model_copy(
            deep=True,
            update={
                "id": generate_id(),
                "label": source.label + COPY_SUFFIX,
                "order": len(self.form.fields),
            },
        )
        self._renumber(self.form.ordered_fields() + [copy])
        self._touch()
        return copy

    # =========================================================================
    # Option operations
    # =========================================================================

    def _options(self, field_id: str) -> tuple[int, list[str]]:
        index = self._index_of(field_id)
        form_field = self.form.fields[index]
        if not form_field.is_choice:
            raise ValueError(
                f"Field '{field_id}' of type {form_field.type.value} has no options"
            )
        return index, list(form_field.options or [])

    def _set_options(self, index: int, options: list[str]) -> list[str]:
        self.form.fields[index] = self.form.fields[index].model_copy(
            update={"options": options}
        )
        self._touch()
        return options

    def add_option(self, field_id: str, label: str = NEW_OPTION_LABEL) -> list[str]:
        index, options = self._options(field_id)
        options.append(label)
        return self._set_options(index, options)

    def update_option(self, field_id: str, option_index: int, value: str) -> list[str]:
        index, options = self._options(field_id)
        options[option_index] = value
        return self._set_options(index, options)

    def delete_option(self, field_id: str, option_index: int) -> list[str]:
        index, options = self._options(field_id)
        del options[option_index]
        return self._set_options(index, options)

    def move_option(self, field_id: str, old_index: int, new_index: int) -> list[str]:
        """Move an option to a new position, shifting the ones between."""
        index, options = self._options(field_id)
        options.insert(new_index, options.pop(old_index))
        return self._set_options(index, options)

    # =========================================================================
    # Persistence
    # =========================================================================

    def save(self) -> Form:
        """Check, timestamp and persist the working copy.

        Raises:
            SchemaError: On structural problems.
            ConfigurationError: On allowed-domain or recipient problems.
        """
        ensure_saveable(self.form)
        self.form.updated_at = now_iso()
        if self.store is not None:
            self.store.save_form(self.form)
        logger.info("Saved form %s with %d fields", self.form.id, len(self.form.fields))
        self._initial = self.form.model_copy(deep=True)
        self._dirty = False
        return self.form

    def reset(self) -> Form:
        """Discard unsaved changes."""
        self.form = self._initial.model_copy(deep=True)
        self._dirty = False
        return self.form
