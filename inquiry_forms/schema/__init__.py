"""Schema module - authoritative source for form definition models.

This module provides:
- Field/validation type enums
- Pydantic models for forms, fields, settings and signatures
- The inquiry submission payload model
- Factories for new forms, fields and ids

Example usage:
    >>> from inquiry_forms.schema import FieldType, create_form, new_field
    >>> form = create_form("Contact us")
    >>> form.fields.append(new_field(FieldType.TEXT, label="Name"))
"""

from inquiry_forms.schema.defaults import DEFAULT_CSS, DEFAULT_OPTIONS, DEV_ALLOWED_DOMAIN, NEW_OPTION_LABEL
from inquiry_forms.schema.lib import (
    CHOICE_FIELD_TYPES,
    MAX_RECIPIENTS,
    MAX_UPLOAD_FILE_SIZE_MB,
    MAX_UPLOAD_FILES,
    TEXT_FIELD_TYPES,
    FieldType,
    FieldValidation,
    FieldValue,
    FileUploadSettings,
    Form,
    FormField,
    FormSettings,
    FormStyling,
    InquiryPayload,
    SchemaModel,
    SenderInfo,
    Signature,
    ValidationType,
    create_form,
    generate_id,
    new_field,
    now_iso,
)

__all__ = [
    # Enums
    "FieldType",
    "ValidationType",
    "CHOICE_FIELD_TYPES",
    "TEXT_FIELD_TYPES",
    # Limits
    "MAX_RECIPIENTS",
    "MAX_UPLOAD_FILES",
    "MAX_UPLOAD_FILE_SIZE_MB",
    # Models
    "SchemaModel",
    "FieldValidation",
    "FieldValue",
    "FormField",
    "FormStyling",
    "FileUploadSettings",
    "FormSettings",
    "Form",
    "Signature",
    "SenderInfo",
    "InquiryPayload",
    # Defaults
    "DEFAULT_CSS",
    "DEFAULT_OPTIONS",
    "DEV_ALLOWED_DOMAIN",
    "NEW_OPTION_LABEL",
    # Factories
    "create_form",
    "new_field",
    "generate_id",
    "now_iso",
]
