"""FastMCP server instance for inquiry-forms.

Exposes stored inquiry forms to LLM clients: inspect them, check them,
preview their markup, validate sample values and export widgets.

Usage:
    # STDIO mode (for desktop clients)
    python -m inquiry_forms.mcp.server

    # HTTP mode
    python -m inquiry_forms.mcp.server --transport http --port 18090

    # Via CLI
    python . mcp run
"""

import argparse
import logging
import sys
from functools import lru_cache
from typing import Any

from fastmcp import FastMCP

from inquiry_forms.core.log import setup_logging
from inquiry_forms.mcp import tools
from inquiry_forms.mcp.lib import SERVER_NAME, ServerConfig, TransportType, get_server_version
from inquiry_forms.storage import FormStore, open_repository

logger = logging.getLogger(__name__)

SERVER_INSTRUCTIONS = """\
## Inquiry Forms MCP Server

Works with inquiry forms stored by the inquiry-forms editor and exports
them as embeddable widgets.

### Workflow
1. `list_forms()` → find the form id
2. `check_form(form_id)` → fix errors before exporting
3. `preview_form(form_id)` → review the markup
4. `validate_values(form_id, values)` → try sample submissions
5. `export_widget(form_id, mode)` → get the embed code

Tools that take `form_id` also accept an inline `form` definition
(camelCase JSON) instead.

### Export modes
| Mode | Output |
|------|--------|
| compact | Two-line embed plus the hosted script it loads |
| inline | Self-contained block (markup, script, styles) |
| detailed | Readable markup and script, for debugging |
"""


mcp = FastMCP(
    name=SERVER_NAME,
    instructions=SERVER_INSTRUCTIONS,
)


@lru_cache(maxsize=1)
def get_store() -> FormStore:
    """FormStore over the configured SQLite database, opened once."""
    return FormStore(open_repository())


# =============================================================================
# Tools
# =============================================================================


@mcp.tool
def list_forms() -> dict[str, Any]:
    """List stored forms, most recently updated first.

    Returns:
        Dictionary with:
        - forms: id, name, field_count and updated_at per form
        - count: Number of forms
    """
    return tools.list_forms(get_store())


@mcp.tool
def get_form(form_id: str) -> dict[str, Any]:
    """Get a stored form definition as camelCase JSON.

    Args:
        form_id: Id from list_forms.
    """
    return tools.get_form(get_store(), form_id)


@mcp.tool
def check_form(
    form_id: str | None = None,
    form: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Check a form for problems that block saving or exporting cleanly.

    Args:
        form_id: Id of a stored form.
        form: Inline form definition (used instead of form_id).

    Returns:
        Dictionary with:
        - saveable: True when nothing blocks saving
        - errors: Structural and configuration problems
        - warnings: Custom patterns that will be skipped
    """
    return tools.check_form(get_store(), form_id, form)


@mcp.tool
def preview_form(
    form_id: str | None = None,
    form: dict[str, Any] | None = None,
    layout: str = "pretty",
) -> dict[str, Any]:
    """Render a non-interactive preview of a form's markup.

    Args:
        form_id: Id of a stored form.
        form: Inline form definition (used instead of form_id).
        layout: "pretty" (indented) or "compact". Default: "pretty"
    """
    return tools.preview_form(get_store(), form_id, form, layout)


@mcp.tool
def validate_values(
    values: dict[str, Any],
    form_id: str | None = None,
    form: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Validate sample field values the way the exported widget would.

    Args:
        values: Field id to value (string, or list for checkboxes and
            multi-selects).
        form_id: Id of a stored form.
        form: Inline form definition (used instead of form_id).

    Returns:
        Dictionary with:
        - valid: True when every field passes
        - errors: Field id to the first failing message
    """
    return tools.validate_values(get_store(), values, form_id, form)


@mcp.tool
def export_widget(
    form_id: str | None = None,
    form: dict[str, Any] | None = None,
    mode: str = "compact",
) -> dict[str, Any]:
    """Export a form as an embeddable widget.

    Export succeeds even when allowed domains or recipients are missing;
    the widget then refuses to submit and the problems are returned as
    warnings.

    Args:
        form_id: Id of a stored form.
        form: Inline form definition (used instead of form_id).
        mode: "compact", "inline" or "detailed". Default: "compact"
    """
    return tools.export_widget(get_store(), form_id, form, mode)


# =============================================================================
# Server Lifecycle
# =============================================================================


def create_server() -> FastMCP:
    """Return the configured FastMCP server instance."""
    return mcp


def run_server(config: ServerConfig | None = None) -> None:
    """Run the MCP server with the given transport configuration."""
    config = config or ServerConfig.from_env()

    logger.info(f"Starting {SERVER_NAME} server v{get_server_version()}")
    logger.info(f"Transport: {config.transport.value}")

    if config.transport == TransportType.STDIO:
        mcp.run()
    elif config.transport == TransportType.HTTP:
        logger.info(f"Running in HTTP mode at http://{config.host}:{config.port}{config.path}")
        mcp.run(transport="http", host=config.host, port=config.port, path=config.path)
    elif config.transport == TransportType.SSE:
        logger.info(f"Running in SSE mode at http://{config.host}:{config.port}")
        mcp.run(transport="sse", host=config.host, port=config.port)
    else:
        raise ValueError(f"Unknown transport: {config.transport}")


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for the MCP server.

    Returns:
        Exit code (0 for success).
    """
    defaults = ServerConfig.from_env()
    parser = argparse.ArgumentParser(
        prog="inquiry-forms-mcp",
        description="MCP server for inquiry form export",
    )
    parser.add_argument(
        "--transport",
        "-t",
        choices=[t.value for t in TransportType],
        default="stdio",
        help="Transport type (default: stdio)",
    )
    parser.add_argument("--host", default=defaults.host, help="Bind address for HTTP/SSE")
    parser.add_argument("--port", "-p", type=int, default=defaults.port, help="Port for HTTP/SSE")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        run_server(
            ServerConfig(
                transport=TransportType(args.transport),
                host=args.host,
                port=args.port,
            )
        )
        return 0
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
        return 0


if __name__ == "__main__":
    sys.exit(main())
