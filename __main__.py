"""CLI entry point for inquiry-forms.

This module acts as the central entry point for the project's CLI tools.
It delegates commands to the appropriate submodules or runs specific tasks.
"""

import argparse
import json
import subprocess
import sys
from collections.abc import Callable
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from inquiry_forms.config import EnvVar, get_environment
from inquiry_forms.core import get_logger, setup_logging
from inquiry_forms.errors import InquiryFormError

# Load environment variables from .env file
load_dotenv()

logger = get_logger("cli")


def _store(args: argparse.Namespace):
    from inquiry_forms.storage import FormStore, open_repository

    return FormStore(open_repository(args.db))


def _add_db_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Forms database (default: FORMS_DB_PATH or .inquiry-forms/forms.db)",
    )


def _write_output(text: str, output: Path | None) -> None:
    if output:
        output.write_text(text, encoding="utf-8")
        logger.info(f"Written to {output}")
    else:
        sys.stdout.write(text if text.endswith("\n") else text + "\n")


def _run(func: Callable[[argparse.Namespace], int], args: argparse.Namespace) -> int:
    """Run a command, turning library errors into exit code 1."""
    try:
        return func(args)
    except (InquiryFormError, ValidationError, ValueError, KeyError) as e:
        logger.error(str(e))
        return 1


# =============================================================================
# Forms Command
# =============================================================================


def cmd_forms_list(args: argparse.Namespace) -> int:
    """Handle the forms list command."""
    forms = _store(args).list_forms()
    if not forms:
        logger.info("No forms stored")
        return 0
    for form in forms:
        print(f"{form.id}  {form.name}  ({len(form.fields)} fields, updated {form.updated_at})")
    return 0


def cmd_forms_create(args: argparse.Namespace) -> int:
    """Handle the forms create command.

    New forms are stored as drafts; recipients and domains can be set
    later with ``forms settings``.
    """
    from inquiry_forms.schema import create_form
    from inquiry_forms.validation import check_settings

    form = create_form(
        args.name,
        seed_localhost=get_environment(EnvVar.SEED_LOCALHOST_DOMAIN),
    )
    if args.recipient:
        form.settings.recipient_emails = list(args.recipient)
    if args.domain:
        form.settings.allowed_domains = list(args.domain)
    _store(args).create_form(form)
    for issue in check_settings(form.settings):
        logger.warning(f"{issue.path}: {issue.message}")
    print(form.id)
    return 0


def cmd_forms_import(args: argparse.Namespace) -> int:
    """Handle the forms import command."""
    from inquiry_forms.schema import Form
    from inquiry_forms.validation import ensure_saveable

    form = Form.model_validate_json(args.file.read_text(encoding="utf-8"))
    ensure_saveable(form)
    _store(args).save_form(form)
    print(form.id)
    return 0


def cmd_forms_show(args: argparse.Namespace) -> int:
    """Handle the forms show command."""
    form = _store(args).require_form(args.form_id)
    print(json.dumps(form.to_json_dict(), indent=2, ensure_ascii=False))
    return 0


def cmd_forms_delete(args: argparse.Namespace) -> int:
    """Handle the forms delete command."""
    _store(args).delete_form(args.form_id)
    return 0


def cmd_forms_duplicate(args: argparse.Namespace) -> int:
    """Handle the forms duplicate command."""
    from inquiry_forms.editor import duplicate_form

    store = _store(args)
    copy = duplicate_form(store.require_form(args.form_id))
    store.create_form(copy)
    print(copy.id)
    return 0


def cmd_forms_add_field(args: argparse.Namespace) -> int:
    """Handle the forms add-field command."""
    from inquiry_forms.editor import FormEditor

    store = _store(args)
    editor = FormEditor(store.require_form(args.form_id), store)
    field = editor.add_field(args.type, label=args.label)
    updates: dict = {"required": args.required}
    if args.placeholder is not None:
        updates["placeholder"] = args.placeholder
    if args.options:
        updates["options"] = list(args.options)
    if args.validation:
        updates["validation"] = {"type": args.validation, "pattern": args.pattern}
    editor.update_field(field.id, **updates)
    editor.save()
    print(field.id)
    return 0


def cmd_forms_settings(args: argparse.Namespace) -> int:
    """Handle the forms settings command."""
    from inquiry_forms.editor import FormEditor

    store = _store(args)
    editor = FormEditor(store.require_form(args.form_id), store)
    settings = editor.form.settings.model_dump()
    if args.recipient is not None:
        settings["recipient_emails"] = list(args.recipient)
    if args.domain is not None:
        settings["allowed_domains"] = list(args.domain)
    if args.completion_url is not None:
        settings["completion_url"] = args.completion_url
    if args.number_fields is not None:
        settings["show_field_numbers"] = args.number_fields
    editor.update_form(settings=settings)
    editor.save()
    return 0


def handle_forms_command(argv: list[str]) -> int:
    """Handle form management commands."""
    parser = argparse.ArgumentParser(
        prog="python . forms",
        description="Create, inspect and edit stored forms",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    list_parser = subparsers.add_parser("list", help="List stored forms")
    _add_db_argument(list_parser)
    list_parser.set_defaults(func=cmd_forms_list)

    create_parser = subparsers.add_parser("create", help="Create an empty form")
    create_parser.add_argument("name", help="Form display name")
    create_parser.add_argument("--recipient", "-r", action="append", help="Recipient email (repeatable)")
    create_parser.add_argument("--domain", "-d", action="append", help="Allowed domain (repeatable)")
    _add_db_argument(create_parser)
    create_parser.set_defaults(func=cmd_forms_create)

    import_parser = subparsers.add_parser("import", help="Store a form definition from JSON")
    import_parser.add_argument("file", type=Path, help="Form JSON (camelCase)")
    _add_db_argument(import_parser)
    import_parser.set_defaults(func=cmd_forms_import)

    show_parser = subparsers.add_parser("show", help="Print a form as JSON")
    show_parser.add_argument("form_id")
    _add_db_argument(show_parser)
    show_parser.set_defaults(func=cmd_forms_show)

    delete_parser = subparsers.add_parser("delete", help="Delete a form")
    delete_parser.add_argument("form_id")
    _add_db_argument(delete_parser)
    delete_parser.set_defaults(func=cmd_forms_delete)

    duplicate_parser = subparsers.add_parser("duplicate", help="Copy a form under a new id")
    duplicate_parser.add_argument("form_id")
    _add_db_argument(duplicate_parser)
    duplicate_parser.set_defaults(func=cmd_forms_duplicate)

    field_parser = subparsers.add_parser("add-field", help="Append a field and save")
    field_parser.add_argument("form_id")
    field_parser.add_argument(
        "type",
        choices=["text", "textarea", "select", "radio", "checkbox"],
        help="Field type",
    )
    field_parser.add_argument("--label", "-l", default="", help="Field label")
    field_parser.add_argument("--placeholder", default=None, help="Placeholder text")
    field_parser.add_argument("--required", action="store_true", help="Mark as required")
    field_parser.add_argument("--option", dest="options", action="append", help="Choice option (repeatable)")
    field_parser.add_argument(
        "--validation",
        choices=["email", "phone", "number", "text"],
        default=None,
        help="Value format",
    )
    field_parser.add_argument("--pattern", default=None, help="Custom regex (JavaScript dialect)")
    _add_db_argument(field_parser)
    field_parser.set_defaults(func=cmd_forms_add_field)

    settings_parser = subparsers.add_parser("settings", help="Update submission settings and save")
    settings_parser.add_argument("form_id")
    settings_parser.add_argument("--recipient", "-r", action="append", help="Recipient email (repeatable, replaces)")
    settings_parser.add_argument("--domain", "-d", action="append", help="Allowed domain (repeatable, replaces)")
    settings_parser.add_argument("--completion-url", default=None, help="Redirect after success")
    settings_parser.add_argument(
        "--number-fields",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Prefix labels with field numbers",
    )
    _add_db_argument(settings_parser)
    settings_parser.set_defaults(func=cmd_forms_settings)

    if not argv:
        parser.print_help()
        return 1

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 1

    return _run(args.func, args)


# =============================================================================
# Export Commands
# =============================================================================


def cmd_export(args: argparse.Namespace) -> int:
    """Handle the export command."""
    from inquiry_forms.assembler import build_artifact

    form = _store(args).require_form(args.form_id)
    artifact = build_artifact(form, args.mode)
    for warning in artifact.warnings:
        logger.warning(f"{warning.path}: {warning.message}")
    _write_output(artifact.code, args.output)
    return 0


def cmd_hosted_script(args: argparse.Namespace) -> int:
    """Handle the hosted-script command."""
    from inquiry_forms.assembler import build_hosted_script
    from inquiry_forms.namespace import allocate

    form = _store(args).require_form(args.form_id)
    output = args.output
    if output is not None and output.is_dir():
        output = output / allocate(form.id).script_name
    _write_output(build_hosted_script(form), output)
    return 0


def cmd_preview(args: argparse.Namespace) -> int:
    """Handle the preview command."""
    from inquiry_forms.render import Layout, RenderMode, render_form

    form = _store(args).require_form(args.form_id)
    layout = Layout.COMPACT if args.compact else Layout.PRETTY
    result = render_form(form, RenderMode.PREVIEW, layout)
    for warning in result.warnings:
        logger.warning(f"{warning.field_id}: {warning.message}")
    _write_output(result.markup, args.output)
    return 0


def _parse_values(pairs: list[str]) -> dict[str, str | list[str]]:
    """Parse ``key=value`` pairs; a repeated key collects a list."""
    values: dict[str, str | list[str]] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep:
            raise ValueError(f"Expected key=value, got {pair!r}")
        if key in values:
            existing = values[key]
            values[key] = [*existing, value] if isinstance(existing, list) else [existing, value]
        else:
            values[key] = value
    return values


def cmd_validate(args: argparse.Namespace) -> int:
    """Handle the validate command."""
    from inquiry_forms.validation import validate_form

    form = _store(args).require_form(args.form_id)
    values = _parse_values(args.values)
    # Multi-valued fields always take a list
    for form_field in form.fields:
        value = values.get(form_field.id)
        if form_field.is_multi_valued and isinstance(value, str):
            values[form_field.id] = [value]
    errors = validate_form(form.fields, values)
    if not errors:
        print("All fields valid")
        return 0
    for field_id, message in errors.items():
        print(f"{field_id}: {message}")
    return 1


def cmd_check(args: argparse.Namespace) -> int:
    """Handle the check command."""
    from inquiry_forms.validation import check_form

    form = _store(args).require_form(args.form_id)
    issues = check_form(form)
    for issue in issues:
        print(f"[{issue.severity}] {issue.path}: {issue.message}")
    if not issues:
        print("No issues found")
    return 1 if any(issue.blocking for issue in issues) else 0


def _form_command_parser(prog: str, description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=f"python . {prog}", description=description)
    parser.add_argument("form_id", help="Stored form id")
    _add_db_argument(parser)
    return parser


def handle_export_command(argv: list[str]) -> int:
    parser = _form_command_parser("export", "Export a form as an embeddable widget")
    parser.add_argument(
        "--mode",
        "-m",
        choices=["compact", "inline", "detailed"],
        default="compact",
        help="Artifact variant (default: compact)",
    )
    parser.add_argument("--output", "-o", type=Path, default=None, help="Output file")
    return _run(cmd_export, parser.parse_args(argv))


def handle_hosted_script_command(argv: list[str]) -> int:
    parser = _form_command_parser("hosted-script", "Build the script a compact embed loads")
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Output file, or a directory to write inquiry-form-{id}.js into",
    )
    return _run(cmd_hosted_script, parser.parse_args(argv))


def handle_preview_command(argv: list[str]) -> int:
    parser = _form_command_parser("preview", "Render disabled preview markup")
    parser.add_argument("--compact", action="store_true", help="One line per field")
    parser.add_argument("--output", "-o", type=Path, default=None, help="Output file")
    return _run(cmd_preview, parser.parse_args(argv))


def handle_validate_command(argv: list[str]) -> int:
    parser = _form_command_parser("validate", "Validate field values against a form")
    parser.add_argument("values", nargs="*", help="field_id=value pairs (repeat a key for lists)")
    return _run(cmd_validate, parser.parse_args(argv))


def handle_check_command(argv: list[str]) -> int:
    parser = _form_command_parser("check", "Run save-time checks on a form")
    return _run(cmd_check, parser.parse_args(argv))


# =============================================================================
# Signatures Command
# =============================================================================


def cmd_signatures_list(args: argparse.Namespace) -> int:
    """Handle the signatures list command."""
    from inquiry_forms.signatures import SignatureService

    with SignatureService.from_environment(_store(args)) as service:
        signatures = service.list_signatures()
    for signature in signatures:
        marker = " (default)" if signature.is_default else ""
        print(f"{signature.id}  {signature.name}{marker}")
    return 0


def handle_signatures_command(argv: list[str]) -> int:
    parser = argparse.ArgumentParser(prog="python . signatures", description="Auto-reply signatures")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")
    list_parser = subparsers.add_parser("list", help="List signatures")
    _add_db_argument(list_parser)
    list_parser.set_defaults(func=cmd_signatures_list)

    args = parser.parse_args(argv or ["list"])
    return _run(args.func, args)


# =============================================================================
# MCP Command
# =============================================================================


def handle_mcp_command(argv: list[str]) -> int:
    """Handle MCP server commands.

    Usage:
        python . mcp run              # Start in STDIO mode
        python . mcp serve            # Start in HTTP mode
        python . mcp serve --port 8080
    """
    if not argv:
        print("MCP Server Commands")
        print("\nUsage: python . mcp {command} [options]")
        print("\nCommands:")
        print("  run                 Start server in STDIO mode")
        print("  serve               Start server in HTTP mode")
        print("\nOptions for 'serve':")
        print("  --host HOST         Bind address (default: MCP_HOST)")
        print("  --port PORT         Port number (default: MCP_PORT)")
        print("  --transport TYPE    Transport: http or sse (default: http)")
        return 1

    from inquiry_forms.mcp import ServerConfig, TransportType

    subcommand = argv[0]
    if subcommand == "run":
        from inquiry_forms.mcp.server import run_server

        run_server(ServerConfig.from_env(TransportType.STDIO))
        return 0

    if subcommand == "serve":
        from inquiry_forms.mcp.server import run_server

        defaults = ServerConfig.from_env(TransportType.HTTP)
        parser = argparse.ArgumentParser(prog="python . mcp serve")
        parser.add_argument("--host", default=defaults.host)
        parser.add_argument("--port", type=int, default=defaults.port)
        parser.add_argument("--transport", choices=["http", "sse"], default="http")
        args = parser.parse_args(argv[1:])
        run_server(
            ServerConfig(
                transport=TransportType(args.transport),
                host=args.host,
                port=args.port,
            )
        )
        return 0

    logger.error(f"Unknown mcp command: {subcommand}")
    return handle_mcp_command([])


# =============================================================================
# Test Command
# =============================================================================


def cmd_test(extra_args: list[str]) -> int:
    """Run pytest with provided arguments and test tier options.

    Usage:
        python . test                # Run all tests
        python . test --unit         # Run only unit tests
        python . test --integration  # Run integration tests
        python . test --node         # Run tests that execute the widget under Node.js
    """
    tier_markers = {
        "--unit": ["-m", "unit"],
        "--integration": ["-m", "integration"],
        "--node": ["-m", "node"],
        "--all": [],
    }

    pytest_args: list[str] = []
    remaining_args: list[str] = []
    for arg in extra_args:
        if arg in tier_markers:
            pytest_args.extend(tier_markers[arg])
        else:
            remaining_args.append(arg)

    cmd = [sys.executable, "-m", "pytest", *pytest_args, *remaining_args]
    logger.info(f"Running: {' '.join(cmd)}")

    try:
        return subprocess.call(cmd)
    except KeyboardInterrupt:
        return 130


def show_help() -> None:
    """Display CLI help message."""
    print("Usage: python . {command} [args]")
    print("\n=== Forms ===")
    print("  forms          list | create | import | show | delete | duplicate | add-field | settings")
    print("  check          Run save-time checks on a form")
    print("  validate       Validate field values against a form")
    print("\n=== Export ===")
    print("  export         Build a widget artifact (--mode compact|inline|detailed)")
    print("  hosted-script  Build the script a compact embed loads")
    print("  preview        Render disabled preview markup")
    print("\n=== Services ===")
    print("  signatures     List auto-reply signatures")
    print("  mcp            Run MCP server (STDIO or HTTP mode)")
    print("\n=== Development ===")
    print("  test           Run tests (--unit, --integration, --node)")
    print("\nGetting Started:")
    print("  python . forms create 'Contact us' -r owner@example.com -d example.com")
    print("  python . forms add-field <id> text --label Email --required --validation email")
    print("  python . export <id> --mode inline -o widget.html")


def main() -> int:
    """Main entry point for the CLI."""
    if len(sys.argv) < 2:
        show_help()
        return 1

    command = sys.argv[1]
    rest_args = sys.argv[2:]

    if command in ("-h", "--help"):
        show_help()
        return 0

    commands = {
        "forms": lambda: handle_forms_command(rest_args),
        "export": lambda: handle_export_command(rest_args),
        "hosted-script": lambda: handle_hosted_script_command(rest_args),
        "preview": lambda: handle_preview_command(rest_args),
        "validate": lambda: handle_validate_command(rest_args),
        "check": lambda: handle_check_command(rest_args),
        "signatures": lambda: handle_signatures_command(rest_args),
        "mcp": lambda: handle_mcp_command(rest_args),
        "test": lambda: cmd_test(rest_args),
    }

    if command in commands:
        setup_logging(get_environment(EnvVar.LOG_LEVEL))
        return commands[command]()

    logger.error(f"Unknown command: {command}")
    show_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
