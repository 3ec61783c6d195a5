"""Tests for configuration management."""

from pathlib import Path

import pytest

from .lib import (
    EnvConfig,
    EnvVar,
    get_environment,
    get_forms_db_path,
    get_mcp_address,
)

# =============================================================================
# Tests for get_environment (main interface)
# =============================================================================


class TestGetEnvironment:
    """Tests for the unified get_environment interface."""

    @pytest.mark.unit
    def test_returns_default_when_not_set(self, monkeypatch):
        """Returns default value when env var is not set."""
        monkeypatch.delenv("SUBMIT_TIMEOUT_MS", raising=False)
        assert get_environment(EnvVar.SUBMIT_TIMEOUT_MS) == 15000

    @pytest.mark.unit
    def test_override_takes_priority(self, monkeypatch):
        """Override parameter takes highest priority."""
        monkeypatch.setenv("SUBMIT_TIMEOUT_MS", "9999")
        assert get_environment(EnvVar.SUBMIT_TIMEOUT_MS, override=5000) == 5000

    @pytest.mark.unit
    def test_env_var_overrides_default(self, monkeypatch):
        """Environment variable overrides default value."""
        monkeypatch.setenv("INQUIRY_ENDPOINT", "https://api.example.com/inquiries")
        assert (
            get_environment(EnvVar.INQUIRY_ENDPOINT)
            == "https://api.example.com/inquiries"
        )

    @pytest.mark.unit
    def test_int_type_conversion(self, monkeypatch):
        """Integer type conversion from string."""
        monkeypatch.setenv("MCP_PORT", "8080")
        result = get_environment(EnvVar.MCP_PORT)
        assert result == 8080
        assert isinstance(result, int)

    @pytest.mark.unit
    def test_invalid_int_falls_back_to_default(self, monkeypatch):
        """Unparseable numbers resolve to the default."""
        monkeypatch.setenv("SUBMIT_TIMEOUT_MS", "soon")
        assert get_environment(EnvVar.SUBMIT_TIMEOUT_MS) == 15000

    @pytest.mark.unit
    def test_float_type_conversion(self, monkeypatch):
        """Float type conversion from string."""
        monkeypatch.setenv("SIGNATURES_TIMEOUT", "2.5")
        assert get_environment(EnvVar.SIGNATURES_TIMEOUT) == 2.5

    @pytest.mark.unit
    def test_bool_type_conversion(self, monkeypatch):
        """Boolean type conversion for true and false values."""
        for value in ("false", "0", "no", "FALSE"):
            monkeypatch.setenv("SEED_LOCALHOST_DOMAIN", value)
            assert get_environment(EnvVar.SEED_LOCALHOST_DOMAIN) is False
        for value in ("true", "1", "Yes"):
            monkeypatch.setenv("SEED_LOCALHOST_DOMAIN", value)
            assert get_environment(EnvVar.SEED_LOCALHOST_DOMAIN) is True

    @pytest.mark.unit
    def test_unrecognized_bool_uses_default(self, monkeypatch):
        monkeypatch.setenv("SEED_LOCALHOST_DOMAIN", "maybe")
        assert get_environment(EnvVar.SEED_LOCALHOST_DOMAIN) is True

    @pytest.mark.unit
    def test_path_type_conversion(self, monkeypatch, tmp_path):
        """Path variables come back as Path objects."""
        monkeypatch.setenv("FORMS_DB_PATH", str(tmp_path / "x.db"))
        assert get_environment(EnvVar.FORMS_DB_PATH) == tmp_path / "x.db"


class TestEnvVarMetadata:
    """Tests for the EnvVar registry itself."""

    @pytest.mark.unit
    def test_members_carry_env_config(self):
        config = EnvVar.INQUIRY_ENDPOINT.value
        assert isinstance(config, EnvConfig)
        assert config.name == "INQUIRY_ENDPOINT"
        assert config.default == "/api/inquiries"
        assert config.category == "widget"

    @pytest.mark.unit
    def test_member_names_match_variable_names(self):
        for var in EnvVar:
            assert var.value.name == var.name
            assert var.value.description, var.name


class TestConvenienceFunctions:
    """Tests for derived settings."""

    @pytest.mark.unit
    def test_forms_db_path_override(self, tmp_path):
        assert get_forms_db_path(tmp_path / "a.db") == tmp_path / "a.db"

    @pytest.mark.unit
    def test_forms_db_path_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("FORMS_DB_PATH", str(tmp_path / "b.db"))
        assert get_forms_db_path() == tmp_path / "b.db"

    @pytest.mark.unit
    def test_forms_db_path_default(self, monkeypatch, tmp_path):
        monkeypatch.delenv("FORMS_DB_PATH", raising=False)
        monkeypatch.chdir(tmp_path)
        assert get_forms_db_path() == Path(tmp_path) / ".inquiry-forms" / "forms.db"

    @pytest.mark.unit
    def test_mcp_address(self, monkeypatch):
        monkeypatch.setenv("MCP_HOST", "0.0.0.0")
        monkeypatch.setenv("MCP_PORT", "9000")
        assert get_mcp_address() == ("0.0.0.0", 9000)
