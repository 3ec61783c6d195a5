"""Tests for the forms, export, check and validate CLI commands."""

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).parent.parent.parent


@pytest.fixture
def cli(tmp_path):
    """Run ``python . <args>`` against a throwaway forms database."""
    env = {**os.environ, "FORMS_DB_PATH": str(tmp_path / "forms.db")}
    env.pop("SIGNATURES_API_URL", None)

    def run(*args: str) -> subprocess.CompletedProcess:
        return subprocess.run(
            [sys.executable, ".", *args],
            capture_output=True,
            text=True,
            cwd=REPO_ROOT,
            env=env,
            timeout=60,
        )

    return run


@pytest.fixture
def stored_form(cli) -> str:
    """A saveable form with a required email field; returns its id."""
    created = cli("forms", "create", "Contact us", "-r", "owner@example.com", "-d", "example.com")
    assert created.returncode == 0, created.stderr
    form_id = created.stdout.strip()
    added = cli("forms", "add-field", form_id, "text", "--label", "Email", "--required", "--validation", "email")
    assert added.returncode == 0, added.stderr
    return form_id


@pytest.mark.integration
class TestFormsCommand:
    """python . forms ..."""

    def test_help_lists_commands(self, cli):
        result = cli("--help")
        assert result.returncode == 0
        assert "forms" in result.stdout
        assert "export" in result.stdout

    def test_unknown_command_fails(self, cli):
        assert cli("frobnicate").returncode == 1

    def test_create_then_list(self, cli, stored_form):
        result = cli("forms", "list")
        assert result.returncode == 0
        assert stored_form in result.stdout
        assert "Contact us" in result.stdout

    def test_create_without_recipients_stores_draft(self, cli):
        """Drafts are stored; missing settings are reported as warnings."""
        result = cli("forms", "create", "Draft")
        assert result.returncode == 0
        assert result.stdout.strip()
        assert "recipient" in result.stderr.lower()

    def test_show_prints_camel_case_json(self, cli, stored_form):
        result = cli("forms", "show", stored_form)
        assert result.returncode == 0
        data = json.loads(result.stdout)
        assert data["id"] == stored_form
        assert data["settings"]["recipientEmails"] == ["owner@example.com"]
        assert data["fields"][0]["label"] == "Email"
        assert data["fields"][0]["validation"]["type"] == "email"

    def test_show_unknown_form_fails(self, cli):
        assert cli("forms", "show", "missing").returncode == 1

    def test_duplicate_creates_copy(self, cli, stored_form):
        result = cli("forms", "duplicate", stored_form)
        assert result.returncode == 0
        copy_id = result.stdout.strip()
        assert copy_id != stored_form
        assert "(copy)" in cli("forms", "list").stdout

    def test_delete_removes_form(self, cli, stored_form):
        assert cli("forms", "delete", stored_form).returncode == 0
        assert stored_form not in cli("forms", "list").stdout

    def test_settings_rejects_invalid_recipient(self, cli, stored_form):
        """Saving through the editor is strict."""
        result = cli("forms", "settings", stored_form, "-r", "not-an-email")
        assert result.returncode == 1

    def test_add_field_rejects_unknown_type(self, cli, stored_form):
        result = cli("forms", "add-field", stored_form, "file")
        assert result.returncode == 2


@pytest.mark.integration
class TestExportCommand:
    """python . export / hosted-script / preview."""

    def test_compact_export(self, cli, stored_form):
        result = cli("export", stored_form)
        assert result.returncode == 0
        assert f'<div id="inquiry-form-{stored_form}"></div>' in result.stdout
        assert f"inquiry-form-{stored_form}.js" in result.stdout

    def test_inline_export_to_file(self, cli, stored_form, tmp_path):
        output = tmp_path / "widget.html"
        result = cli("export", stored_form, "--mode", "inline", "-o", str(output))
        assert result.returncode == 0
        code = output.read_text(encoding="utf-8")
        assert "<script>" in code
        assert "<style>" in code

    def test_export_is_deterministic(self, cli, stored_form):
        first = cli("export", stored_form, "--mode", "detailed").stdout
        second = cli("export", stored_form, "--mode", "detailed").stdout
        assert first == second

    def test_hosted_script_into_directory(self, cli, stored_form, tmp_path):
        result = cli("hosted-script", stored_form, "-o", str(tmp_path))
        assert result.returncode == 0
        assert (tmp_path / f"inquiry-form-{stored_form}.js").exists()

    def test_preview_is_disabled(self, cli, stored_form):
        result = cli("preview", stored_form)
        assert result.returncode == 0
        assert "disabled" in result.stdout
        assert "preview-ir-form" in result.stdout


@pytest.mark.integration
class TestCheckAndValidateCommands:
    """python . check / validate."""

    def test_check_saveable_form(self, cli, stored_form):
        assert cli("check", stored_form).returncode == 0

    def test_check_reports_blocking_issues(self, cli):
        form_id = cli("forms", "create", "Draft").stdout.strip()
        result = cli("check", form_id)
        assert result.returncode == 1
        assert "[error]" in result.stdout

    def test_validate_reports_first_failing_rule(self, cli, stored_form):
        field_id = json.loads(cli("forms", "show", stored_form).stdout)["fields"][0]["id"]

        missing = cli("validate", stored_form)
        assert missing.returncode == 1
        assert f"{field_id}: This field is required." in missing.stdout

        bad = cli("validate", stored_form, f"{field_id}=nope")
        assert bad.returncode == 1
        assert "Please enter a valid email address." in bad.stdout

        good = cli("validate", stored_form, f"{field_id}=ada@example.com")
        assert good.returncode == 0
        assert "All fields valid" in good.stdout

    def test_validate_rejects_malformed_pair(self, cli, stored_form):
        assert cli("validate", stored_form, "no-equals-sign").returncode == 1


@pytest.mark.integration
def test_signatures_list_seeds_builtins(cli):
    result = cli("signatures", "list")
    assert result.returncode == 0
    assert "(default)" in result.stdout
