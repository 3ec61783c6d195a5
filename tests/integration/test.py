"""Integration tests for the exported widget.

Tests cover:
- Determinism of every artifact variant
- Parity between the Python rule interpreter and the emitted JavaScript
  rules (requires Node.js)
- End-to-end widget behavior in jsdom: inline errors, per-field
  re-validation on input and blur, attachment limits, the configuration
  guard, the submission payload, timeouts and failure handling (requires
  jsdom)
"""

import json
import subprocess
from dataclasses import replace
from pathlib import Path

import pytest

from inquiry_forms.assembler import AssemblerConfig, OutputMode, build_artifact, build_hosted_script
from inquiry_forms.namespace import allocate
from inquiry_forms.runtime import (
    CONFIGURATION_MESSAGE,
    FAILURE_MESSAGE,
    SUCCESS_MESSAGE,
    compile_form_rules,
    emit_rules_module,
)
from inquiry_forms.schema import (
    FieldType,
    FieldValidation,
    FileUploadSettings,
    FormField,
    InquiryPayload,
    ValidationType,
    create_form,
)
from inquiry_forms.validation import validate_field

HARNESS = Path(__file__).parent / "harness.js"

CONFIG = AssemblerConfig(
    endpoint="/api/inquiries",
    script_base_url="https://cdn.example.com/forms",
    timeout_ms=15000,
)


def _run_widget(node: str, tmp_path: Path, page: str, scenario: dict) -> dict:
    page_path = tmp_path / "page.html"
    scenario_path = tmp_path / "scenario.json"
    page_path.write_text(page, encoding="utf-8")
    scenario_path.write_text(json.dumps(scenario), encoding="utf-8")
    result = subprocess.run(
        [node, str(HARNESS), str(page_path), str(scenario_path)],
        capture_output=True,
        text=True,
        timeout=60,
        cwd=Path(__file__).parent.parent.parent,
    )
    assert result.returncode == 0, result.stderr
    return json.loads(result.stdout)


def _inline_page(form) -> str:
    return build_artifact(form, OutputMode.INLINE, CONFIG).code


def _filled(form) -> dict:
    ns = allocate(form.id)
    return {
        "values": {
            ns.field_id("name"): "Ada Lovelace",
            ns.field_id("email"): "ada@example.com",
            ns.field_id("phone"): "+44 (0)20 1234",
            ns.field_id("topic"): "Support",
            ns.field_id("message"): "Hello there",
        },
        "checked": [ns.option_id("channel", 1), ns.option_id("interests", 0), ns.option_id("interests", 2)],
    }


# =============================================================================
# Determinism
# =============================================================================


class TestDeterminism:
    """Regenerating from an unchanged form is byte-identical."""

    @pytest.mark.integration
    @pytest.mark.parametrize("mode", list(OutputMode))
    def test_artifact_is_byte_identical(self, contact_form, mode):
        first = build_artifact(contact_form, mode, CONFIG).code
        second = build_artifact(contact_form.model_copy(deep=True), mode, CONFIG).code
        assert first == second

    @pytest.mark.integration
    def test_hosted_script_is_byte_identical(self, contact_form):
        assert build_hosted_script(contact_form, CONFIG) == build_hosted_script(contact_form, CONFIG)


# =============================================================================
# Rule parity (Python interpreter vs emitted JavaScript)
# =============================================================================

PARITY_FIELDS = [
    FormField(id="req", type=FieldType.TEXT, required=True),
    FormField(
        id="email",
        type=FieldType.TEXT,
        validation=FieldValidation(type=ValidationType.EMAIL),
    ),
    FormField(
        id="phone",
        type=FieldType.TEXT,
        validation=FieldValidation(type=ValidationType.PHONE),
    ),
    FormField(
        id="number",
        type=FieldType.TEXT,
        required=True,
        validation=FieldValidation(type=ValidationType.NUMBER, min_length=2, max_length=4),
    ),
    FormField(
        id="custom",
        type=FieldType.TEXTAREA,
        validation=FieldValidation(pattern=r"^\w+\s\w+$"),
    ),
    FormField(
        id="both",
        type=FieldType.TEXT,
        validation=FieldValidation(type=ValidationType.EMAIL, pattern=r"@example\.com$"),
    ),
    FormField(
        id="dotted",
        type=FieldType.TEXT,
        validation=FieldValidation(pattern="^a.c$"),
    ),
    FormField(
        id="broken",
        type=FieldType.TEXT,
        validation=FieldValidation(pattern="([a-z"),
    ),
    FormField(
        id="brace",
        type=FieldType.TEXT,
        validation=FieldValidation(pattern="^a{,3}$"),
    ),
    FormField(
        id="cond",
        type=FieldType.TEXT,
        validation=FieldValidation(pattern="^(a)?(?(1)b|c)$"),
    ),
    FormField(
        id="possessive",
        type=FieldType.TEXT,
        validation=FieldValidation(pattern="^a*+$"),
    ),
    FormField(id="picks", type=FieldType.CHECKBOX, required=True, options=["A", "B"]),
    FormField(id="multi", type=FieldType.SELECT, multiple=True, required=True, options=["A", "B"]),
]

PARITY_VALUES = [
    "",
    "   ",
    " ",
    "a@b.co",
    "not-an-email",
    "ada@example.com",
    "ada@example.org",
    "+81 (3) 1234-5678",
    "12",
    "1234",
    "12345",
    "1",
    "abc",
    "a\nc",
    "a c",
    "hello world",
    "hello  world",
    "hello world\n",
    "\U0001f600\U0001f600",
    chr(0xD800),
    "a{,3}",
    "aa",
    "aaa",
    "ab",
    "b",
    "c",
    42,
    2.5,
    True,
    "١٢",
    ["A"],
    [],
    ["", " "],
    ["A", "B"],
]


@pytest.mark.integration
@pytest.mark.node
def test_emitted_rules_match_python_interpreter(node_binary, tmp_path):
    """For every field/value pair both back ends return the same message."""
    module = tmp_path / "rules.js"
    module.write_text(
        emit_rules_module(compile_form_rules(_parity_form())),
        encoding="utf-8",
    )
    cases = [[f.id, value] for f in PARITY_FIELDS for value in PARITY_VALUES]
    runner = tmp_path / "run.js"
    runner.write_text(
        "const rules = require(process.argv[2]);\n"
        "const cases = JSON.parse(require('fs').readFileSync(process.argv[3], 'utf8'));\n"
        "process.stdout.write(JSON.stringify(cases.map(([id, value]) => rules.check(id, value))));\n",
        encoding="utf-8",
    )
    cases_path = tmp_path / "cases.json"
    cases_path.write_text(json.dumps(cases), encoding="utf-8")

    result = subprocess.run(
        [node_binary, str(runner), str(module), str(cases_path)],
        capture_output=True,
        text=True,
        timeout=60,
    )
    assert result.returncode == 0, result.stderr
    js_messages = json.loads(result.stdout)

    fields = {f.id: f for f in PARITY_FIELDS}
    mismatches = []
    for (field_id, value), js_message in zip(cases, js_messages):
        py_message = validate_field(fields[field_id], value).message
        if py_message != js_message:
            mismatches.append((field_id, value, py_message, js_message))
    assert mismatches == []


def _parity_form():
    form = create_form("Parity", form_id="parity")
    form.fields = [f.model_copy(update={"order": i}) for i, f in enumerate(PARITY_FIELDS)]
    return form


# =============================================================================
# End-to-end widget behavior
# =============================================================================


@pytest.mark.integration
@pytest.mark.node
class TestWidgetEndToEnd:
    """Exported widgets executed in jsdom with fetch and alert mocked."""

    def test_compact_artifact_references_hosted_script(self):
        form = create_form("Minimal", form_id="minimal")
        form.settings.allowed_domains = ["example.com"]
        form.fields = [FormField(id="name", type=FieldType.TEXT, label="Name", required=True)]

        code = build_artifact(form, OutputMode.COMPACT, CONFIG).code

        assert '<div id="inquiry-form-minimal"></div>' in code
        assert '<script src="https://cdn.example.com/forms/inquiry-form-minimal.js"></script>' in code

    def test_blank_required_field_blocks_submit(self, jsdom_node, tmp_path):
        """A blank required field shows its message and nothing is sent."""
        form = create_form("Minimal", form_id="minimal")
        form.settings.allowed_domains = ["example.com"]
        form.fields = [FormField(id="name", type=FieldType.TEXT, label="Name", required=True)]

        report = _run_widget(jsdom_node, tmp_path, _inline_page(form), {})

        assert report["calls"]["fetch"] == []
        field_id = allocate("minimal").field_id("name")
        assert {"id": f"{field_id}-error", "text": "This field is required."} in report["errors"]

    @pytest.mark.parametrize("domains", [[], [""]])
    def test_configuration_guard_blocks_network(self, jsdom_node, tmp_path, contact_form, domains):
        """Missing allowed domains show the configuration alert instead of posting."""
        contact_form.settings.allowed_domains = domains

        report = _run_widget(jsdom_node, tmp_path, _inline_page(contact_form), _filled(contact_form))

        assert report["calls"]["fetch"] == []
        assert report["calls"]["alerts"] == [CONFIGURATION_MESSAGE]

    def test_invalid_field_is_focused(self, jsdom_node, tmp_path, contact_form):
        scenario = _filled(contact_form)
        ns = allocate(contact_form.id)
        scenario["values"][ns.field_id("email")] = "not-an-email"

        report = _run_widget(jsdom_node, tmp_path, _inline_page(contact_form), scenario)

        assert report["calls"]["fetch"] == []
        assert report["invalid"] == [ns.field_id("email")]
        assert report["activeElement"] == ns.field_id("email")
        assert report["button"]["disabled"] is False

    def test_valid_submission_posts_once(self, jsdom_node, tmp_path, contact_form):
        """Exactly one POST with responses, sender info and allowed domains."""
        report = _run_widget(jsdom_node, tmp_path, _inline_page(contact_form), _filled(contact_form))

        assert report["errors"] == []
        assert len(report["calls"]["fetch"]) == 1
        call = report["calls"]["fetch"][0]
        assert call["url"] == "/api/inquiries"
        assert call["method"] == "POST"
        assert call["headers"] == {"Content-Type": "application/json"}
        assert call["body"] == {
            "formId": "contact",
            "responses": {
                "name": "Ada Lovelace",
                "email": "ada@example.com",
                "phone": "+44 (0)20 1234",
                "topic": "Support",
                "channel": "Phone",
                "interests": ["A", "C"],
                "message": "Hello there",
            },
            "senderInfo": {
                "name": "Ada Lovelace",
                "email": "ada@example.com",
                "phone": "+44 (0)20 1234",
            },
            "allowedDomains": ["example.com"],
        }
        payload = InquiryPayload.model_validate(call["body"])
        assert payload.form_id == "contact"
        assert payload.sender_info.email == "ada@example.com"
        assert report["calls"]["alerts"] == [SUCCESS_MESSAGE]
        assert report["button"]["disabled"] is True

    @pytest.mark.parametrize("scenario_extra", [{"fetchStatus": 500}, {"fetchThrows": True}])
    def test_failed_submission_restores_button(self, jsdom_node, tmp_path, contact_form, scenario_extra):
        scenario = {**_filled(contact_form), **scenario_extra}

        report = _run_widget(jsdom_node, tmp_path, _inline_page(contact_form), scenario)

        assert len(report["calls"]["fetch"]) == 1
        assert report["calls"]["alerts"] == [FAILURE_MESSAGE]
        assert report["button"] == {"disabled": False, "text": "Submit"}

    def test_hung_request_is_aborted_after_timeout(self, jsdom_node, tmp_path, contact_form):
        """A request that never settles is aborted and treated as a failure."""
        config = replace(CONFIG, timeout_ms=20)
        page = build_artifact(contact_form, OutputMode.INLINE, config).code
        scenario = {**_filled(contact_form), "fetchHangs": True, "settleMs": 300}

        report = _run_widget(jsdom_node, tmp_path, page, scenario)

        assert len(report["calls"]["fetch"]) == 1
        assert report["calls"]["aborted"] == 1
        assert report["calls"]["alerts"] == [FAILURE_MESSAGE]
        assert report["button"] == {"disabled": False, "text": "Submit"}

    def test_custom_success_message_is_alerted(self, jsdom_node, tmp_path, contact_form):
        contact_form.settings.success_message = "Thanks, we will be in touch."

        report = _run_widget(jsdom_node, tmp_path, _inline_page(contact_form), _filled(contact_form))

        assert report["calls"]["alerts"] == ["Thanks, we will be in touch."]

    def test_input_and_blur_revalidate_one_field(self, jsdom_node, tmp_path, contact_form):
        """Field events validate only the touched field and never submit."""
        ns = allocate(contact_form.id)
        email, name = ns.field_id("email"), ns.field_id("name")
        scenario = {
            "submit": False,
            "steps": [
                {"event": "input", "id": email, "value": "nope"},
                {"event": "input", "id": email, "value": "ada@example.com"},
                {"event": "blur", "id": name, "value": ""},
            ],
        }

        report = _run_widget(jsdom_node, tmp_path, _inline_page(contact_form), scenario)

        assert report["stepErrors"] == [
            [{"id": f"{email}-error", "text": "Please enter a valid email address."}],
            [],
            [{"id": f"{name}-error", "text": "This field is required."}],
        ]
        assert report["calls"]["fetch"] == []

    @pytest.mark.parametrize(
        ("files", "message"),
        [
            ([{"name": "a.pdf", "size": 10}, {"name": "b.pdf", "size": 10}], "Please attach at most 1 file."),
            ([{"name": "a.pdf", "size": 2 * 1024 * 1024}], "Each file must be 1 MB or smaller."),
        ],
    )
    def test_attachment_limits_block_submit(self, jsdom_node, tmp_path, contact_form, files, message):
        contact_form.settings.file_upload = FileUploadSettings(enabled=True, max_files=1, max_file_size=1)
        ns = allocate(contact_form.id)
        scenario = {**_filled(contact_form), "files": {ns.attachments_id: files}}

        report = _run_widget(jsdom_node, tmp_path, _inline_page(contact_form), scenario)

        assert report["calls"]["fetch"] == []
        assert report["errors"] == [{"id": f"{ns.attachments_id}-error", "text": message}]
        assert report["activeElement"] == ns.attachments_id

    def test_attachment_names_are_posted(self, jsdom_node, tmp_path, contact_form):
        contact_form.settings.file_upload = FileUploadSettings(enabled=True, max_files=2, max_file_size=1)
        ns = allocate(contact_form.id)
        files = [{"name": "a.pdf", "size": 10}, {"name": "b.png", "size": 20}]
        scenario = {**_filled(contact_form), "files": {ns.attachments_id: files}}

        report = _run_widget(jsdom_node, tmp_path, _inline_page(contact_form), scenario)

        assert len(report["calls"]["fetch"]) == 1
        payload = InquiryPayload.model_validate(report["calls"]["fetch"][0]["body"])
        assert payload.responses["attachments"] == ["a.pdf", "b.png"]

    def test_hosted_script_mounts_into_compact_embed(self, jsdom_node, tmp_path, contact_form):
        """The compact embed plus its hosted script behaves like the inline widget."""
        ns = allocate(contact_form.id)
        page = f'<div id="{ns.embed_id}"></div>\n<script>{build_hosted_script(contact_form, CONFIG)}</script>'

        report = _run_widget(jsdom_node, tmp_path, page, _filled(contact_form))

        assert len(report["calls"]["fetch"]) == 1
        assert report["styles"] == 1

    def test_detailed_artifact_runs(self, jsdom_node, tmp_path, contact_form):
        page = build_artifact(contact_form, OutputMode.DETAILED, CONFIG).code

        report = _run_widget(jsdom_node, tmp_path, page, _filled(contact_form))

        assert len(report["calls"]["fetch"]) == 1
        assert report["calls"]["consoleErrors"] == []
