"""Authoritative schema module for inquiry form definitions.

This module is the single source of truth for the form data model:
- Field and validation type enums
- Pydantic models for forms, fields, settings and signatures
- The submission contract body posted by exported widgets
- Factories for new forms and process-wide unique ids

Models accept and emit camelCase JSON (``createdAt``, ``completionUrl``)
while exposing snake_case attributes. Serialize with
``model_dump(mode="json", by_alias=True)``.
"""

from __future__ import annotations

import secrets
import string
import time
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from inquiry_forms.schema.defaults import (
    DEFAULT_CSS,
    DEFAULT_OPTIONS,
    DEFAULT_THEME,
    DEV_ALLOWED_DOMAIN,
)


class FieldType(str, Enum):
    """Kinds of input a form field can collect."""

    TEXT = "text"
    TEXTAREA = "textarea"
    SELECT = "select"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    FILE = "file"


class ValidationType(str, Enum):
    """Value formats with a canonical default pattern.

    ``TEXT`` is the explicit "no format" choice and has no pattern.
    """

    EMAIL = "email"
    PHONE = "phone"
    NUMBER = "number"
    TEXT = "text"


# Field types whose values come from a fixed option list
CHOICE_FIELD_TYPES: frozenset[FieldType] = frozenset(
    {FieldType.SELECT, FieldType.RADIO, FieldType.CHECKBOX}
)

# Field types holding free text, the only ones length/pattern rules apply to
TEXT_FIELD_TYPES: frozenset[FieldType] = frozenset(
    {FieldType.TEXT, FieldType.TEXTAREA}
)

MAX_RECIPIENTS = 10
MAX_UPLOAD_FILES = 5
MAX_UPLOAD_FILE_SIZE_MB = 20

# Value submitted for one field: a string, or a list for checkbox groups
# and multi-selects.
FieldValue = str | list[str]


class SchemaModel(BaseModel):
    """Base model with camelCase aliases and snake_case attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_json_dict(self) -> dict[str, Any]:
        """Dump to a JSON-compatible dict using camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class FieldValidation(SchemaModel):
    """Optional per-field validation settings."""

    type: ValidationType | None = Field(
        default=None,
        description="Value format with a canonical default pattern",
    )
    min_length: int | None = Field(default=None, ge=0)
    max_length: int | None = Field(default=None, ge=0)
    pattern: str | None = Field(
        default=None,
        description="Custom regex source, JavaScript dialect",
    )
    required: bool | None = Field(
        default=None,
        description="Legacy duplicate of FormField.required; the field flag wins",
    )


class FormField(SchemaModel):
    """A single field in a form.

    Example:
        >>> field = FormField(
        ...     id="email",
        ...     type=FieldType.TEXT,
        ...     label="Email",
        ...     required=True,
        ...     validation=FieldValidation(type=ValidationType.EMAIL),
        ... )
    """

    id: str = Field(..., min_length=1, description="Globally unique field id")
    type: FieldType
    label: str = ""
    placeholder: str | None = None
    required: bool = False
    validation: FieldValidation | None = None
    options: list[str] | None = Field(
        default=None,
        description="Ordered choices; present iff type is select/radio/checkbox",
    )
    order: int = Field(default=0, ge=0)
    allow_other: bool | None = None
    multiple: bool | None = Field(
        default=None,
        description="Multi-select; only meaningful for select fields",
    )

    @property
    def is_choice(self) -> bool:
        """Whether the field picks from a fixed option list."""
        return self.type in CHOICE_FIELD_TYPES

    @property
    def is_text(self) -> bool:
        """Whether the field holds free text."""
        return self.type in TEXT_FIELD_TYPES

    @property
    def is_multi_valued(self) -> bool:
        """Whether the submitted value is a list rather than a string."""
        return self.type == FieldType.CHECKBOX or (
            self.type == FieldType.SELECT and bool(self.multiple)
        )


class FormStyling(SchemaModel):
    """Stylesheet shipped with the widget."""

    css: str = DEFAULT_CSS
    theme: str = DEFAULT_THEME


class FileUploadSettings(SchemaModel):
    """Form-level attachment block settings."""

    enabled: bool = False
    max_files: int = Field(default=1, ge=1, le=MAX_UPLOAD_FILES)
    max_file_size: int = Field(
        default=10,
        ge=1,
        le=MAX_UPLOAD_FILE_SIZE_MB,
        description="Per-file limit in megabytes",
    )
    allowed_types: list[str] | None = None


class FormSettings(SchemaModel):
    """Submission settings."""

    completion_url: str = Field(
        default="",
        description="Redirect target after success; empty shows an alert",
    )
    signature_id: str = ""
    auto_reply: bool = True
    file_upload: FileUploadSettings = Field(default_factory=FileUploadSettings)
    allowed_domains: list[str] = Field(default_factory=list)
    recipient_emails: list[str] = Field(default_factory=list)
    success_message: str | None = None
    allow_multiple_submissions: bool | None = None
    show_field_numbers: bool | None = None


class Form(SchemaModel):
    """A complete inquiry form definition. Owns its fields."""

    id: str = Field(..., min_length=1)
    name: str
    description: str | None = None
    fields: list[FormField] = Field(default_factory=list)
    styling: FormStyling = Field(default_factory=FormStyling)
    settings: FormSettings = Field(default_factory=FormSettings)
    created_at: str
    updated_at: str

    def ordered_fields(self) -> list[FormField]:
        """Fields sorted by their ``order`` (stable for ties)."""
        return sorted(self.fields, key=lambda f: f.order)

    def get_field(self, field_id: str) -> FormField | None:
        """Find a field by id."""
        for field in self.fields:
            if field.id == field_id:
                return field
        return None


class Signature(SchemaModel):
    """Email signature appended to auto-replies."""

    id: str
    name: str
    content: str
    is_default: bool = False
    created_at: str = ""


class SenderInfo(SchemaModel):
    """Who submitted an inquiry, as extracted by the widget."""

    name: str = ""
    email: str = ""
    phone: str = ""


class InquiryPayload(SchemaModel):
    """JSON body the exported widget POSTs on submit."""

    form_id: str
    responses: dict[str, FieldValue] = Field(default_factory=dict)
    sender_info: SenderInfo = Field(default_factory=SenderInfo)
    allowed_domains: list[str] = Field(default_factory=list)


# =============================================================================
# Factories
# =============================================================================

_BASE36 = string.digits + string.ascii_lowercase


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_id() -> str:
    """Generate a process-wide unique id: base36 timestamp + random suffix."""
    stamp = _to_base36(time.time_ns() // 1_000_000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(10))
    return stamp + suffix


def now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return (
        datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    )


def create_form(
    name: str = "New form",
    *,
    form_id: str | None = None,
    seed_localhost: bool = True,
    timestamp: str | None = None,
) -> Form:
    """Create a form populated with schema defaults.

    Args:
        name: Display name.
        form_id: Explicit id (generated when omitted).
        seed_localhost: Pre-seed ``localhost:3000`` as an allowed domain.
        timestamp: Creation time (defaults to now).

    Returns:
        A new Form with no fields, boilerplate CSS and default settings.
    """
    stamp = timestamp or now_iso()
    return Form(
        id=form_id or generate_id(),
        name=name,
        description="",
        fields=[],
        styling=FormStyling(),
        settings=FormSettings(
            allowed_domains=[DEV_ALLOWED_DOMAIN] if seed_localhost else [],
        ),
        created_at=stamp,
        updated_at=stamp,
    )


def new_field(
    field_type: FieldType | str,
    *,
    order: int = 0,
    label: str = "",
    field_id: str | None = None,
) -> FormField:
    """Create a blank field; choice types are seeded with two options."""
    field_type = FieldType(field_type)
    return FormField(
        id=field_id or generate_id(),
        type=field_type,
        label=label,
        placeholder="",
        required=False,
        order=order,
        options=list(DEFAULT_OPTIONS) if field_type in CHOICE_FIELD_TYPES else None,
        validation=FieldValidation(required=False),
    )


__all__ = [
    "CHOICE_FIELD_TYPES",
    "MAX_RECIPIENTS",
    "MAX_UPLOAD_FILES",
    "MAX_UPLOAD_FILE_SIZE_MB",
    "TEXT_FIELD_TYPES",
    "FieldType",
    "FieldValidation",
    "FieldValue",
    "FileUploadSettings",
    "Form",
    "FormField",
    "FormSettings",
    "FormStyling",
    "InquiryPayload",
    "SchemaModel",
    "SenderInfo",
    "Signature",
    "ValidationType",
    "create_form",
    "generate_id",
    "new_field",
    "now_iso",
]
