"""Centralized configuration management for inquiry-forms.

Provides unified access to all configuration via the `get_environment()` function.

Example:
    >>> from inquiry_forms.config import EnvVar, get_environment
    >>>
    >>> endpoint = get_environment(EnvVar.INQUIRY_ENDPOINT)  # "/api/inquiries"
    >>> timeout = get_environment(EnvVar.SUBMIT_TIMEOUT_MS)  # int: 15000
    >>>
    >>> # Override at runtime
    >>> timeout = get_environment(EnvVar.SUBMIT_TIMEOUT_MS, override=5000)

Environment Variable Categories:
    widget: Values baked into exported widgets (endpoint, script host, timeout)
    storage: Form persistence
    service: Signature API and MCP server
    logging: Log verbosity
"""

from .lib import (
    EnvConfig,
    EnvVar,
    get_environment,
    get_forms_db_path,
    get_mcp_address,
)

__all__ = [
    # Core types
    "EnvConfig",
    "EnvVar",
    # Main interface
    "get_environment",
    # Derived settings
    "get_forms_db_path",
    "get_mcp_address",
]
