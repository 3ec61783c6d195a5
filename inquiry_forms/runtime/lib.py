"""Widget runtime generation.

Turns compiled RuleSets and a form's submission settings into the client
script every artifact variant embeds. The script is one IIFE holding:

- the rule evaluator, whose per-kind tests come from
  ``inquiry_forms.rules.RULE_BACKENDS`` (``emit_rules_js``);
- the submission state machine (Idle, Validating, Submitting, then
  Success or Failed) with inline errors, the configuration guard and a
  fetch timeout.

All data reaches the script through a single JSON ``CONFIG`` object, so
operator text is never spliced into code.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from inquiry_forms.namespace import Namespace
from inquiry_forms.render import SUBMIT_LABEL
from inquiry_forms.rules import RULE_BACKENDS, RuleSet, compile_rules
from inquiry_forms.runtime.templates import (
    IIFE_JS,
    RULE_ENGINE_JS,
    RULES_MODULE_JS,
    WIDGET_JS,
)
from inquiry_forms.schema import FieldType, Form, FormField, ValidationType
from inquiry_forms.validation import check_settings

DEFAULT_ENDPOINT = "/api/inquiries"
DEFAULT_TIMEOUT_MS = 15000

BUSY_LABEL = "Sending..."
CONFIGURATION_MESSAGE = (
    "This form is not configured to accept inquiries. "
    "Please contact the site administrator."
)
SUCCESS_MESSAGE = "Thank you. Your inquiry has been sent."
FAILURE_MESSAGE = "Sending failed. Please try again."

_NAME_LABEL = re.compile(r"\bname\b", re.IGNORECASE)

# Characters that could close a <script> element or break a JS string.
_SCRIPT_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    chr(0x2028): "\\u2028",
    chr(0x2029): "\\u2029",
}


def script_json(value: Any) -> str:
    """Serialize a value as JSON safe to embed inside a ``<script>``.

    Output is deterministic (insertion-ordered keys, fixed separators).
    """
    text = json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    for char, escape in _SCRIPT_ESCAPES.items():
        text = text.replace(char, escape)
    return text


def minify_js(source: str) -> str:
    """Line-based minification of the runtime template.

    Strips indentation, blank lines and whole-line ``//`` comments. Line
    breaks are kept, so statement boundaries never change.
    """
    lines = (line.strip() for line in source.splitlines())
    return "\n".join(line for line in lines if line and not line.startswith("//"))


# =============================================================================
# Sender fields
# =============================================================================


@dataclass(frozen=True)
class SenderFields:
    """Field ids whose values fill ``senderInfo`` in the payload.

    Attributes:
        name: Field holding the sender's name.
        email: Field holding the sender's email address.
        phone: Field holding the sender's phone number.
    """

    name: str | None = None
    email: str | None = None
    phone: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        return {"name": self.name, "email": self.email, "phone": self.phone}


def _first_of_type(fields: list[FormField], kind: ValidationType) -> str | None:
    for form_field in fields:
        if form_field.validation is not None and form_field.validation.type == kind:
            return form_field.id
    return None


def _by_id(fields: list[FormField], field_id: str) -> str | None:
    return field_id if any(f.id == field_id for f in fields) else None


def resolve_sender_fields(form: Form) -> SenderFields:
    """Pick the fields that identify the sender.

    Email and phone come from the first text field validated as that type,
    falling back to a field with id ``email``/``phone``. Name comes from a
    field with id ``name``, else the first text field labeled "name".
    """
    fields = [f for f in form.ordered_fields() if f.is_text]
    email = _first_of_type(fields, ValidationType.EMAIL) or _by_id(fields, "email")
    phone = _first_of_type(fields, ValidationType.PHONE) or _by_id(fields, "phone")
    name = _by_id(fields, "name")
    if name is None:
        for form_field in fields:
            if form_field.id in (email, phone):
                continue
            if _NAME_LABEL.search(form_field.label):
                name = form_field.id
                break
    return SenderFields(name=name, email=email, phone=phone)


# =============================================================================
# Rule emission
# =============================================================================


def compile_form_rules(form: Form) -> list[RuleSet]:
    """RuleSets for every rendered field, in display order."""
    return [
        compile_rules(form_field)
        for form_field in form.ordered_fields()
        if form_field.type != FieldType.FILE
    ]


def _rule_tests_js() -> str:
    entries = [
        f"  {json.dumps(kind.value)}: {backend.js_test}"
        for kind, backend in RULE_BACKENDS.items()
    ]
    return "{\n" + ",\n".join(entries) + "\n}"


def emit_rules_js(rulesets: Iterable[RuleSet]) -> str:
    """Emit the JavaScript evaluator and data for a set of RuleSets.

    The output defines ``RULE_TESTS``, ``RULESETS`` and
    ``checkValue(ruleset, value)``, which returns the first failing message
    or ``null``.
    """
    data = script_json([ruleset.to_dict() for ruleset in rulesets])
    return RULE_ENGINE_JS.replace("__RULE_TESTS__", _rule_tests_js()).replace(
        "__RULESETS__", data
    )


def emit_rules_module(rulesets: Iterable[RuleSet]) -> str:
    """Emit a CommonJS module exposing ``check(fieldId, value)``.

    Used to run the widget's rule evaluator under Node.
    """
    return RULES_MODULE_JS.replace("__BODY__", emit_rules_js(rulesets))


# =============================================================================
# Widget runtime
# =============================================================================


@dataclass
class WidgetConfig:
    """Everything the runtime script reads from ``CONFIG``.

    Attributes:
        form_id: Schema id sent as ``formId``.
        mount_id: Element the script mounts into (or finds the form in).
        form_element_id: Id of the ``<form>`` element.
        field_dom_ids: Field id to DOM id of its control.
        sender_fields: Fields feeding ``senderInfo``.
        allowed_domains: Origins permitted to submit.
        recipients_configured: Whether recipient emails are set and valid.
        completion_url: Redirect target after success; empty shows an alert.
        success_message: Alert shown after success when there is no redirect.
        endpoint: Submission URL.
        timeout_ms: Abort the POST after this many milliseconds.
        markup: Markup the script injects, or None when it is static.
        css: Stylesheet the script injects, or None.
        attachments: Attachment limits, or None when uploads are disabled.
    """

    form_id: str
    mount_id: str
    form_element_id: str
    field_dom_ids: dict[str, str]
    sender_fields: SenderFields
    allowed_domains: list[str]
    recipients_configured: bool
    completion_url: str = ""
    success_message: str = SUCCESS_MESSAGE
    endpoint: str = DEFAULT_ENDPOINT
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    markup: str | None = None
    css: str | None = None
    attachments: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "formId": self.form_id,
            "mountId": self.mount_id,
            "formElementId": self.form_element_id,
            "fieldDomIds": self.field_dom_ids,
            "senderFields": self.sender_fields.to_dict(),
            "allowedDomains": self.allowed_domains,
            "recipientsConfigured": self.recipients_configured,
            "completionUrl": self.completion_url,
            "endpoint": self.endpoint,
            "timeoutMs": self.timeout_ms,
            "markup": self.markup,
            "css": self.css,
            "attachments": self.attachments,
            "labels": {"submit": SUBMIT_LABEL, "busy": BUSY_LABEL},
            "messages": {
                "configuration": CONFIGURATION_MESSAGE,
                "success": self.success_message,
                "failure": FAILURE_MESSAGE,
            },
        }


def recipients_configured(form: Form) -> bool:
    """Whether the form's recipient list passes the save-time checks."""
    return not any(
        issue.path.startswith("settings.recipientEmails")
        for issue in check_settings(form.settings)
    )


def build_widget_config(
    form: Form,
    namespace: Namespace,
    *,
    mount_id: str,
    markup: str | None = None,
    css: str | None = None,
    endpoint: str = DEFAULT_ENDPOINT,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
) -> WidgetConfig:
    """Derive the runtime configuration for a form.

    Recipient addresses are never embedded; only whether they are
    configured.
    """
    upload = form.settings.file_upload
    attachments = None
    if upload.enabled:
        files = "file" if upload.max_files == 1 else "files"
        attachments = {
            "inputId": namespace.attachments_id,
            "maxFiles": upload.max_files,
            "maxBytes": upload.max_file_size * 1024 * 1024,
            "tooManyMessage": f"Please attach at most {upload.max_files} {files}.",
            "tooLargeMessage": f"Each file must be {upload.max_file_size} MB or smaller.",
        }
    return WidgetConfig(
        form_id=form.id,
        mount_id=mount_id,
        form_element_id=namespace.form_element_id,
        field_dom_ids={
            form_field.id: namespace.field_id(form_field.id)
            for form_field in form.ordered_fields()
            if form_field.type != FieldType.FILE
        },
        sender_fields=resolve_sender_fields(form),
        allowed_domains=list(form.settings.allowed_domains),
        recipients_configured=recipients_configured(form),
        completion_url=form.settings.completion_url,
        success_message=(form.settings.success_message or "").strip() or SUCCESS_MESSAGE,
        endpoint=endpoint,
        timeout_ms=timeout_ms,
        markup=markup,
        css=css,
        attachments=attachments,
    )


def build_runtime(form: Form, config: WidgetConfig, *, minify: bool = False) -> str:
    """Generate the complete runtime script (without ``<script>`` tags).

    Args:
        form: The form whose fields are validated.
        config: Runtime configuration from ``build_widget_config``.
        minify: Apply ``minify_js`` (used by the inline variant).

    Returns:
        str: A self-invoking function; deterministic for unchanged input.
    """
    body = "\n".join(
        [
            emit_rules_js(compile_form_rules(form)),
            WIDGET_JS.replace("__CONFIG__", script_json(config.to_dict())),
        ]
    )
    indented = "\n".join(f"  {line}" if line else "" for line in body.splitlines())
    script = IIFE_JS.replace("__BODY__", indented)
    return minify_js(script) if minify else script
