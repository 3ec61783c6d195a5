"""Unit tests for the script assembler."""

import logging

import pytest

from inquiry_forms.assembler import (
    AssemblerConfig,
    OutputMode,
    build_artifact,
    build_hosted_script,
)
from inquiry_forms.schema import FieldType, FormField, create_form


@pytest.fixture
def config():
    return AssemblerConfig(
        endpoint="/api/inquiries",
        script_base_url="https://forms.example.com/forms/",
        timeout_ms=15000,
    )


@pytest.fixture
def form():
    form = create_form("Contact -- us", form_id="abc")
    form.settings.allowed_domains = ["example.com"]
    form.settings.recipient_emails = ["owner@example.com"]
    form.fields = [
        FormField(id="name", type=FieldType.TEXT, label="Name", required=True, order=0),
        FormField(
            id="topic", type=FieldType.SELECT, label="Topic", options=["A", "B"], order=1
        ),
    ]
    return form


class TestCompact:
    """Tests for the compact variant."""

    @pytest.mark.unit
    def test_two_line_embed(self, form, config):
        artifact = build_artifact(form, OutputMode.COMPACT, config)
        assert artifact.code.splitlines() == [
            '<div id="inquiry-form-abc"></div>',
            '<script src="https://forms.example.com/forms/inquiry-form-abc.js"></script>',
        ]
        assert not artifact.has_warnings

    @pytest.mark.unit
    def test_mode_accepts_string(self, form, config):
        assert build_artifact(form, "compact", config).mode == OutputMode.COMPACT

    @pytest.mark.unit
    def test_hosted_script_mounts_into_embed(self, form, config):
        script = build_hosted_script(form, config)
        assert '"mountId":"inquiry-form-abc"' in script
        assert '"css":".ir-form-container' in script
        assert "ir-form-abc-field-name" in script


class TestInline:
    """Tests for the inline variant."""

    @pytest.mark.unit
    def test_structure(self, form, config):
        code = build_artifact(form, OutputMode.INLINE, config).code
        assert '<div id="ir-form-abc-container" class="ir-form-container"></div>' in code
        assert code.count("<script>") == 1
        assert "<style>" in code
        # markup travels as an escaped string, never as live tags
        assert "<form" not in code
        assert "\\u003cform" in code
        assert '"endpoint":"/api/inquiries"' in code

    @pytest.mark.unit
    def test_header_comment_escaped(self, form, config):
        code = build_artifact(form, OutputMode.INLINE, config).code
        assert code.splitlines()[0] == "<!-- Inquiry form: Contact &#45;&#45; us -->"


class TestDetailed:
    """Tests for the detailed variant."""

    @pytest.mark.unit
    def test_static_markup_and_readable_runtime(self, form, config):
        code = build_artifact(form, OutputMode.DETAILED, config).code
        assert '  <form id="ir-form-abc-form" class="ir-form" novalidate>' in code
        assert '"markup":null' in code
        assert "// " in code


class TestAllVariants:
    """Properties shared by every variant."""

    @pytest.mark.unit
    @pytest.mark.parametrize("mode", list(OutputMode))
    def test_deterministic(self, form, config, mode):
        first = build_artifact(form, mode, config).code
        second = build_artifact(form, mode, config).code
        assert first == second

    @pytest.mark.unit
    @pytest.mark.parametrize("mode", [OutputMode.INLINE, OutputMode.DETAILED])
    def test_same_contract(self, form, config, mode):
        code = build_artifact(form, mode, config).code
        assert '"allowedDomains":["example.com"]' in code
        assert "'Content-Type': 'application/json'" in code
        assert "isConfigured()" in code

    @pytest.mark.unit
    @pytest.mark.parametrize("mode", list(OutputMode))
    def test_misconfigured_form_still_exports(self, form, config, mode, caplog):
        form.settings.allowed_domains = []
        with caplog.at_level(logging.WARNING, logger="inquiry_forms.assembler.lib"):
            artifact = build_artifact(form, mode, config)
        assert artifact.code
        assert [w.code for w in artifact.warnings] == ["no_allowed_domains"]
        assert "refuse to submit" in caplog.text

    @pytest.mark.unit
    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("INQUIRY_ENDPOINT", "/custom")
        monkeypatch.setenv("SUBMIT_TIMEOUT_MS", "2500")
        config = AssemblerConfig.from_environment()
        assert config.endpoint == "/custom"
        assert config.timeout_ms == 2500
