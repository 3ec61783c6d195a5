"""Unit tests for runtime generation."""

import json

import pytest

from inquiry_forms.namespace import allocate
from inquiry_forms.rules import RuleKind
from inquiry_forms.runtime import (
    FAILURE_MESSAGE,
    SUCCESS_MESSAGE,
    build_runtime,
    build_widget_config,
    compile_form_rules,
    emit_rules_js,
    emit_rules_module,
    minify_js,
    resolve_sender_fields,
    script_json,
)
from inquiry_forms.schema import (
    FieldType,
    FieldValidation,
    FileUploadSettings,
    FormField,
    ValidationType,
    create_form,
)


@pytest.fixture
def form():
    form = create_form("Contact", form_id="abc")
    form.settings.allowed_domains = ["example.com"]
    form.settings.recipient_emails = ["owner@example.com"]
    form.fields = [
        FormField(id="full", type=FieldType.TEXT, label="Full name", required=True, order=0),
        FormField(
            id="mail",
            type=FieldType.TEXT,
            label="Email",
            order=1,
            validation=FieldValidation(type=ValidationType.EMAIL),
        ),
        FormField(id="doc", type=FieldType.FILE, order=2),
    ]
    return form


def _config(form, **kwargs):
    ns = allocate(form.id)
    return build_widget_config(form, ns, mount_id=ns.container_id, **kwargs)


class TestScriptJson:
    """Tests for script_json."""

    @pytest.mark.unit
    def test_escapes_markup_breakers(self):
        text = script_json({"a": "</script><b>&" + chr(0x2028)})
        assert "<" not in text and ">" not in text and "&" not in text
        assert chr(0x2028) not in text
        assert json.loads(text) == {"a": "</script><b>&" + chr(0x2028)}

    @pytest.mark.unit
    def test_deterministic_and_compact(self):
        assert script_json({"b": 1, "a": [1, 2]}) == '{"b":1,"a":[1,2]}'


class TestMinify:
    """Tests for minify_js."""

    @pytest.mark.unit
    def test_strips_indent_blank_and_comment_lines(self):
        source = "function f() {\n  // note\n\n    return 1;\n}\n"
        assert minify_js(source) == "function f() {\nreturn 1;\n}"


class TestSenderFields:
    """Tests for resolve_sender_fields."""

    @pytest.mark.unit
    def test_by_validation_type_and_label(self, form):
        sender = resolve_sender_fields(form)
        assert sender.email == "mail"
        assert sender.name == "full"
        assert sender.phone is None

    @pytest.mark.unit
    def test_conventional_ids(self):
        form = create_form(form_id="x")
        form.fields = [
            FormField(id="name", type=FieldType.TEXT, order=0),
            FormField(id="email", type=FieldType.TEXT, order=1),
            FormField(id="phone", type=FieldType.TEXT, order=2),
        ]
        assert resolve_sender_fields(form).to_dict() == {
            "name": "name",
            "email": "email",
            "phone": "phone",
        }


class TestEmitRules:
    """Tests for rule emission."""

    @pytest.mark.unit
    def test_file_fields_excluded(self, form):
        assert [r.field_id for r in compile_form_rules(form)] == ["full", "mail"]

    @pytest.mark.unit
    def test_every_kind_emitted(self, form):
        source = emit_rules_js(compile_form_rules(form))
        for kind in RuleKind:
            assert f'"{kind.value}": function (rule, value)' in source
        assert "__RULESETS__" not in source
        assert "__RULE_TESTS__" not in source
        assert '"fieldId":"mail"' in source

    @pytest.mark.unit
    def test_module_exports_check(self, form):
        module = emit_rules_module(compile_form_rules(form))
        assert "module.exports" in module
        assert "__BODY__" not in module


class TestWidgetConfig:
    """Tests for build_widget_config."""

    @pytest.mark.unit
    def test_contents(self, form):
        config = _config(form, endpoint="/submit", timeout_ms=5000).to_dict()
        assert config["formId"] == "abc"
        assert config["mountId"] == "ir-form-abc-container"
        assert config["fieldDomIds"] == {
            "full": "ir-form-abc-field-full",
            "mail": "ir-form-abc-field-mail",
        }
        assert config["endpoint"] == "/submit"
        assert config["timeoutMs"] == 5000
        assert config["recipientsConfigured"] is True
        assert config["attachments"] is None

    @pytest.mark.unit
    def test_recipients_never_embedded(self, form):
        script = build_runtime(form, _config(form))
        assert "owner@example.com" not in script

    @pytest.mark.unit
    def test_recipients_flag_false_when_invalid(self, form):
        form.settings.recipient_emails = ["bad"]
        assert _config(form).recipients_configured is False

    @pytest.mark.unit
    @pytest.mark.parametrize("custom", [None, "", "   "])
    def test_default_success_message(self, form, custom):
        form.settings.success_message = custom
        assert _config(form).to_dict()["messages"]["success"] == SUCCESS_MESSAGE

    @pytest.mark.unit
    def test_custom_success_message(self, form):
        form.settings.success_message = "Thanks, we will reply within a day."
        messages = _config(form).to_dict()["messages"]
        assert messages["success"] == "Thanks, we will reply within a day."
        assert messages["failure"] == FAILURE_MESSAGE

    @pytest.mark.unit
    def test_attachment_limits(self, form):
        form.settings.file_upload = FileUploadSettings(
            enabled=True, max_files=2, max_file_size=3
        )
        attachments = _config(form).attachments
        assert attachments["inputId"] == "ir-form-abc-attachments"
        assert attachments["maxFiles"] == 2
        assert attachments["maxBytes"] == 3 * 1024 * 1024


class TestBuildRuntime:
    """Tests for build_runtime."""

    @pytest.mark.unit
    def test_iife_and_state_machine(self, form):
        script = build_runtime(form, _config(form))
        assert script.startswith("(function () {")
        assert script.rstrip().endswith("})();")
        assert "AbortController" in script
        assert "STATE.SUBMITTING" in script
        assert "__CONFIG__" not in script

    @pytest.mark.unit
    def test_minified_has_no_comments(self, form):
        script = build_runtime(form, _config(form), minify=True)
        assert all(not line.startswith("//") for line in script.splitlines())
        assert all(line == line.strip() for line in script.splitlines())

    @pytest.mark.unit
    def test_deterministic(self, form):
        assert build_runtime(form, _config(form)) == build_runtime(form, _config(form))

    @pytest.mark.unit
    def test_operator_text_cannot_close_script(self, form):
        form.fields[0].label = "</script><script>alert(1)</script>"
        config = _config(form, markup=form.fields[0].label)
        script = build_runtime(form, config)
        assert "</script>" not in script
