"""Field value validation: the editor-side interpreter of the rule IR.

The exported widget runs the same RuleSets through generated JavaScript
(see ``inquiry_forms.runtime``); this module is the Python execution
surface used by the editor preview, the CLI and the MCP tools.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from inquiry_forms.errors import FieldValidationError
from inquiry_forms.rules import compile_rules, run_rules
from inquiry_forms.schema import FieldType, FieldValue, FormField


@dataclass
class ValidationResult:
    """Outcome of validating one value.

    Attributes:
        is_valid: Whether every rule passed.
        message: The first failing rule's message, when invalid.
    """

    is_valid: bool
    message: str | None = None


def validate_field(field: FormField, value: FieldValue | None) -> ValidationResult:
    """Validate one value against a field's rules.

    Never raises; a malformed custom pattern is dropped during rule
    compilation.

    Args:
        field: The field definition.
        value: Raw submitted value (a list for multi-valued fields). Numbers
            and booleans from JSON input are read as the browser reads them.

    Returns:
        ValidationResult: Validity and the first failing message.

    Example:
        >>> validate_field(required_field, "").message
        'This field is required.'
    """
    message = run_rules(compile_rules(field), value)
    if message is None:
        return ValidationResult(is_valid=True)
    return ValidationResult(is_valid=False, message=message)


def validate_form(
    fields: Iterable[FormField],
    values: Mapping[str, FieldValue | None],
) -> dict[str, str]:
    """Validate a set of values against every rendered field.

    ``file`` fields are never rendered, so they are not validated.

    Returns:
        dict[str, str]: Field id to first failing message; empty if valid.
    """
    errors: dict[str, str] = {}
    for field in fields:
        if field.type == FieldType.FILE:
            continue
        result = validate_field(field, values.get(field.id))
        if not result.is_valid and result.message:
            errors[field.id] = result.message
    return errors


def is_form_valid(
    fields: Iterable[FormField],
    values: Mapping[str, FieldValue | None],
) -> bool:
    """Check whether a set of values passes every field."""
    return not validate_form(fields, values)


def ensure_valid_values(
    fields: Iterable[FormField],
    values: Mapping[str, FieldValue | None],
) -> None:
    """Validate values and raise on the first batch of failures.

    Raises:
        FieldValidationError: Carrying the per-field message map.
    """
    errors = validate_form(fields, values)
    if errors:
        raise FieldValidationError(errors)
