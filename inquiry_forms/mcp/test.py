"""Unit tests for MCP server module.

Tests cover:
- Server configuration
- Tool registration
- Tool functionality (plain functions, no MCP protocol)
"""

import pytest

from inquiry_forms.assembler import AssemblerConfig
from inquiry_forms.errors import StorageError
from inquiry_forms.mcp import tools
from inquiry_forms.mcp.lib import SERVER_NAME, ServerConfig, TransportType, get_server_version
from inquiry_forms.mcp.server import create_server, mcp
from inquiry_forms.schema import FieldType, FieldValidation, FormField, ValidationType, create_form
from inquiry_forms.storage import FormStore, InMemoryRepository

ASSEMBLER = AssemblerConfig(
    endpoint="/api/inquiries",
    script_base_url="https://cdn.example.com/forms",
    timeout_ms=15000,
)


@pytest.fixture
def store():
    store = FormStore(InMemoryRepository())
    form = create_form("Contact", form_id="contact", timestamp="2024-01-01T00:00:00.000Z")
    form.settings.recipient_emails = ["owner@example.com"]
    form.fields = [
        FormField(
            id="email",
            type=FieldType.TEXT,
            label="Email",
            required=True,
            validation=FieldValidation(type=ValidationType.EMAIL),
            order=0,
        ),
        FormField(id="topic", type=FieldType.SELECT, label="Topic", options=["A", "B"], order=1),
    ]
    store.create_form(form)
    return store


# =============================================================================
# Configuration Tests
# =============================================================================


class TestServerConfig:
    """Tests for ServerConfig dataclass."""

    @pytest.mark.unit
    def test_default_config(self):
        config = ServerConfig()
        assert config.name == "inquiry-forms"
        assert config.transport == TransportType.STDIO
        assert config.path == "/mcp"

    @pytest.mark.unit
    def test_from_env(self, monkeypatch):
        """from_env reads MCP_HOST and MCP_PORT."""
        monkeypatch.setenv("MCP_HOST", "0.0.0.0")
        monkeypatch.setenv("MCP_PORT", "9000")
        config = ServerConfig.from_env(transport=TransportType.HTTP)
        assert (config.host, config.port) == ("0.0.0.0", 9000)
        assert config.transport == TransportType.HTTP

    @pytest.mark.unit
    def test_server_version(self):
        assert len(get_server_version().split(".")) >= 2


# =============================================================================
# Tool Registration Tests
# =============================================================================


class TestToolRegistration:
    """Tests for MCP tool registration."""

    @pytest.mark.unit
    def test_create_server_returns_mcp(self):
        assert create_server() is mcp
        assert mcp.name == SERVER_NAME

    @pytest.mark.unit
    def test_tools_registered(self):
        tool_names = set(mcp._tool_manager._tools.keys())
        assert tool_names == {
            "list_forms",
            "get_form",
            "check_form",
            "preview_form",
            "validate_values",
            "export_widget",
        }


# =============================================================================
# Tool Functionality Tests
# =============================================================================


class TestTools:
    """Tests for the tool implementations."""

    @pytest.mark.unit
    def test_list_forms(self, store):
        result = tools.list_forms(store)
        assert result["count"] == 1
        assert result["forms"][0] == {
            "id": "contact",
            "name": "Contact",
            "field_count": 2,
            "updated_at": "2024-01-01T00:00:00.000Z",
        }

    @pytest.mark.unit
    def test_get_form_uses_camel_case(self, store):
        form = tools.get_form(store, "contact")
        assert form["createdAt"] == "2024-01-01T00:00:00.000Z"
        assert form["settings"]["recipientEmails"] == ["owner@example.com"]

    @pytest.mark.unit
    def test_get_missing_form(self, store):
        with pytest.raises(StorageError):
            tools.get_form(store, "missing")

    @pytest.mark.unit
    def test_check_form_clean(self, store):
        assert tools.check_form(store, "contact") == {
            "saveable": True,
            "errors": [],
            "warnings": [],
        }

    @pytest.mark.unit
    def test_check_inline_form(self, store):
        """An inline definition is checked without touching the store."""
        form = tools.get_form(store, "contact")
        form["settings"]["allowedDomains"] = [""]
        form["fields"][1]["validation"] = {"pattern": "([a-z"}
        result = tools.check_form(store, form=form)
        assert result["saveable"] is False
        assert [e["error_type"] for e in result["errors"]] == ["blank_allowed_domain"]
        assert [w["error_type"] for w in result["warnings"]] == ["invalid_pattern"]

    @pytest.mark.unit
    def test_check_form_requires_a_form(self, store):
        with pytest.raises(ValueError):
            tools.check_form(store)

    @pytest.mark.unit
    def test_preview_form_is_disabled(self, store):
        result = tools.preview_form(store, "contact")
        assert 'id="preview-ir-form-contact-field-email"' in result["markup"]
        assert " disabled" in result["markup"]
        assert result["warnings"] == []

    @pytest.mark.unit
    def test_validate_values(self, store):
        result = tools.validate_values(store, {"email": "not-an-email"}, "contact")
        assert result == {
            "valid": False,
            "errors": {"email": "Please enter a valid email address."},
        }
        assert tools.validate_values(store, {"email": "a@b.co"}, "contact")["valid"]

    @pytest.mark.unit
    def test_validate_values_accepts_json_numbers(self, store):
        result = tools.validate_values(store, {"email": 42}, "contact")
        assert result["errors"] == {"email": "Please enter a valid email address."}

    @pytest.mark.unit
    def test_export_compact_includes_hosted_script(self, store):
        result = tools.export_widget(store, "contact", config=ASSEMBLER)
        assert result["mode"] == "compact"
        assert "https://cdn.example.com/forms/inquiry-form-contact.js" in result["code"]
        assert result["hosted_script"].startswith("(function () {")
        assert result["warnings"] == []

    @pytest.mark.unit
    def test_export_inline_reports_configuration_warnings(self, store):
        form = tools.get_form(store, "contact")
        form["settings"]["recipientEmails"] = []
        result = tools.export_widget(store, form=form, mode="inline", config=ASSEMBLER)
        assert "hosted_script" not in result
        assert [w["code"] for w in result["warnings"]] == ["no_recipients"]
