"""Structural checks on form definitions.

These run at save time in the editor. Schema issues and configuration
issues block saving; pattern issues are reported as warnings only because
a malformed custom pattern is dropped (fail-open) rather than breaking the
form.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from inquiry_forms.errors import ConfigurationError, RegexError, SchemaError
from inquiry_forms.rules import DEFAULT_PATTERNS, compile_pattern, js_trim
from inquiry_forms.schema import (
    MAX_RECIPIENTS,
    FieldType,
    Form,
    FormSettings,
    ValidationType,
)


class IssueCategory(str, Enum):
    """What an issue blocks."""

    SCHEMA = "schema"
    CONFIGURATION = "configuration"
    PATTERN = "pattern"


@dataclass
class SchemaIssue:
    """A problem found in a form definition.

    Attributes:
        path: Location of the problem (``fields[2].options``).
        message: Human-readable description.
        error_type: Machine-readable problem code.
        category: Whether it is a schema, configuration or pattern issue.
    """

    path: str
    message: str
    error_type: str
    category: IssueCategory = IssueCategory.SCHEMA

    @property
    def severity(self) -> str:
        return "warning" if self.category == IssueCategory.PATTERN else "error"

    @property
    def blocking(self) -> bool:
        return self.category != IssueCategory.PATTERN

    def to_dict(self) -> dict[str, str]:
        return {
            "path": self.path,
            "message": self.message,
            "error_type": self.error_type,
            "category": self.category.value,
            "severity": self.severity,
        }


def is_valid_email(address: str) -> bool:
    """Syntactic email check using the canonical email pattern."""
    pattern = compile_pattern(DEFAULT_PATTERNS[ValidationType.EMAIL])
    return pattern.search(address) is not None


def check_settings(settings: FormSettings) -> list[SchemaIssue]:
    """Check the submission settings that gate inquiry intake.

    Returns:
        list[SchemaIssue]: Configuration issues (empty if intake works).
    """
    issues: list[SchemaIssue] = []

    domains = settings.allowed_domains
    if not domains:
        issues.append(
            SchemaIssue(
                path="settings.allowedDomains",
                message="At least one allowed domain is required",
                error_type="no_allowed_domains",
                category=IssueCategory.CONFIGURATION,
            )
        )
    for i, domain in enumerate(domains):
        if not js_trim(domain):
            issues.append(
                SchemaIssue(
                    path=f"settings.allowedDomains[{i}]",
                    message="Allowed domains must not be blank",
                    error_type="blank_allowed_domain",
                    category=IssueCategory.CONFIGURATION,
                )
            )

    recipients = settings.recipient_emails
    if not recipients:
        issues.append(
            SchemaIssue(
                path="settings.recipientEmails",
                message="At least one recipient email is required",
                error_type="no_recipients",
                category=IssueCategory.CONFIGURATION,
            )
        )
    elif len(recipients) > MAX_RECIPIENTS:
        issues.append(
            SchemaIssue(
                path="settings.recipientEmails",
                message=f"At most {MAX_RECIPIENTS} recipient emails are allowed",
                error_type="too_many_recipients",
                category=IssueCategory.CONFIGURATION,
            )
        )
    for i, address in enumerate(recipients):
        address = js_trim(address)
        if not address:
            issues.append(
                SchemaIssue(
                    path=f"settings.recipientEmails[{i}]",
                    message="Recipient emails must not be blank",
                    error_type="blank_recipient",
                    category=IssueCategory.CONFIGURATION,
                )
            )
        elif not is_valid_email(address):
            issues.append(
                SchemaIssue(
                    path=f"settings.recipientEmails[{i}]",
                    message=f"'{address}' is not a valid email address",
                    error_type="invalid_recipient",
                    category=IssueCategory.CONFIGURATION,
                )
            )

    return issues


def check_form(form: Form) -> list[SchemaIssue]:
    """Run every structural check on a form.

    Performs the following checks:
        - Unique field ids
        - Dense ``order`` (0..n-1)
        - Options present and non-blank on choice fields, absent elsewhere
        - ``multiple`` only on select fields
        - No per-field ``file`` fields
        - ``min_length`` not above ``max_length``
        - Custom patterns compile (warning only)
        - Allowed domains and recipients (see ``check_settings``)

    Args:
        form: The form to check.

    Returns:
        list[SchemaIssue]: Every issue found (empty if saveable).
    """
    issues: list[SchemaIssue] = []

    id_counts: dict[str, int] = {}
    for field in form.fields:
        id_counts[field.id] = id_counts.get(field.id, 0) + 1
    for field_id, count in id_counts.items():
        if count > 1:
            issues.append(
                SchemaIssue(
                    path="fields",
                    message=f"Duplicate field id '{field_id}' appears {count} times",
                    error_type="duplicate_id",
                )
            )

    orders = sorted(field.order for field in form.fields)
    if orders != list(range(len(form.fields))):
        issues.append(
            SchemaIssue(
                path="fields",
                message=f"Field order must be dense 0..{len(form.fields) - 1}, got {orders}",
                error_type="non_dense_order",
            )
        )

    for i, field in enumerate(form.fields):
        path = f"fields[{i}]"
        if field.is_choice:
            if not field.options:
                issues.append(
                    SchemaIssue(
                        path=f"{path}.options",
                        message=f"Choice field '{field.id}' has no options",
                        error_type="missing_options",
                    )
                )
            elif any(not js_trim(option) for option in field.options):
                issues.append(
                    SchemaIssue(
                        path=f"{path}.options",
                        message=f"Choice field '{field.id}' has a blank option",
                        error_type="blank_option",
                    )
                )
        elif field.options:
            issues.append(
                SchemaIssue(
                    path=f"{path}.options",
                    message=f"Field '{field.id}' of type {field.type.value} cannot have options",
                    error_type="unexpected_options",
                )
            )

        if field.multiple and field.type != FieldType.SELECT:
            issues.append(
                SchemaIssue(
                    path=f"{path}.multiple",
                    message="Only select fields can allow multiple values",
                    error_type="invalid_multiple",
                )
            )

        if field.type == FieldType.FILE:
            issues.append(
                SchemaIssue(
                    path=f"{path}.type",
                    message=(
                        "Per-field file inputs are not supported; enable "
                        "settings.fileUpload for attachments"
                    ),
                    error_type="unsupported_file_field",
                )
            )

        validation = field.validation
        if validation is None:
            continue
        if (
            validation.min_length is not None
            and validation.max_length is not None
            and validation.max_length > 0
            and validation.min_length > validation.max_length
        ):
            issues.append(
                SchemaIssue(
                    path=f"{path}.validation",
                    message="minLength is greater than maxLength",
                    error_type="length_range",
                )
            )
        if validation.pattern:
            try:
                compile_pattern(validation.pattern)
            except RegexError as exc:
                issues.append(
                    SchemaIssue(
                        path=f"{path}.validation.pattern",
                        message=f"{exc}; the rule will be skipped",
                        error_type="invalid_pattern",
                        category=IssueCategory.PATTERN,
                    )
                )

    issues.extend(check_settings(form.settings))
    return issues


def ensure_saveable(form: Form) -> None:
    """Raise if a form may not be saved.

    Schema issues are reported before configuration issues; pattern
    warnings never block.

    Raises:
        SchemaError: On structural problems.
        ConfigurationError: On allowed-domain or recipient problems.
    """
    issues = check_form(form)
    schema = [i for i in issues if i.category == IssueCategory.SCHEMA]
    if schema:
        raise SchemaError("; ".join(i.message for i in schema), issues=schema)
    config = [i for i in issues if i.category == IssueCategory.CONFIGURATION]
    if config:
        raise ConfigurationError("; ".join(i.message for i in config), issues=config)
