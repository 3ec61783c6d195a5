"""Field value validation and form structure checks."""

from inquiry_forms.validation.checks import (
    IssueCategory,
    SchemaIssue,
    check_form,
    check_settings,
    ensure_saveable,
    is_valid_email,
)
from inquiry_forms.validation.lib import (
    ValidationResult,
    ensure_valid_values,
    is_form_valid,
    validate_field,
    validate_form,
)

__all__ = [
    # Value validation
    "ValidationResult",
    "validate_field",
    "validate_form",
    "is_form_valid",
    "ensure_valid_values",
    # Structure checks
    "IssueCategory",
    "SchemaIssue",
    "check_form",
    "check_settings",
    "ensure_saveable",
    "is_valid_email",
]
