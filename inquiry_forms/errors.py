"""Exception taxonomy for inquiry-forms.

Every error raised by the library derives from InquiryFormError so callers
can catch the whole family at a surface boundary (CLI, MCP tools).
"""

from __future__ import annotations

from typing import Any


class InquiryFormError(Exception):
    """Base class for all inquiry-forms errors."""


class SchemaError(InquiryFormError):
    """Structural problem in a form definition; blocks save.

    Attributes:
        issues: The individual problems found, when more than one.
    """

    def __init__(self, message: str, issues: list[Any] | None = None):
        super().__init__(message)
        self.issues = issues or []


class ConfigurationError(InquiryFormError):
    """Submission settings that would silently disable inquiry intake.

    Raised for an empty or blank allowed-domain list and for missing or
    malformed recipient addresses.
    """

    def __init__(self, message: str, issues: list[Any] | None = None):
        super().__init__(message)
        self.issues = issues or []


class FieldValidationError(InquiryFormError):
    """User input failed one or more field rules.

    Attributes:
        errors: Mapping of field id to its first failing message.
    """

    def __init__(self, errors: dict[str, str]):
        fields = ", ".join(sorted(errors))
        super().__init__(f"Invalid values for: {fields}")
        self.errors = errors


class RegexError(InquiryFormError):
    """A custom validation pattern does not compile.

    Never propagates out of rule compilation; the rule is dropped and the
    error is logged.
    """

    def __init__(self, pattern: str, reason: str):
        super().__init__(f"Invalid pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class TransportError(InquiryFormError):
    """Network failure or non-2xx response from a remote resource."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class StorageError(InquiryFormError):
    """Repository operation on a missing or conflicting key."""


__all__ = [
    "ConfigurationError",
    "FieldValidationError",
    "InquiryFormError",
    "RegexError",
    "SchemaError",
    "StorageError",
    "TransportError",
]
