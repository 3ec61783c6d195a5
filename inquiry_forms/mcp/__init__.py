"""MCP (Model Context Protocol) server for inquiry-forms.

Example:
    # Start server in STDIO mode
    >>> from inquiry_forms.mcp.server import run_server
    >>> run_server()

Available Tools:
    - list_forms: Stored forms, newest first
    - get_form: One form definition
    - check_form: Save-time structural and configuration checks
    - preview_form: Disabled-control preview markup
    - validate_values: Run field rules against sample values
    - export_widget: Compact, inline or detailed widget artifact
"""

from inquiry_forms.mcp.lib import (
    SERVER_NAME,
    ServerConfig,
    TransportType,
    get_server_version,
)

__all__ = [
    # Configuration
    "SERVER_NAME",
    "ServerConfig",
    "TransportType",
    # Utilities
    "get_server_version",
]
