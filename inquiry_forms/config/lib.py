"""Centralized environment configuration management for inquiry-forms.

Provides a unified interface for all environment variables with:
- Single `get_environment()` function for all configuration
- Type-safe enum with metadata (default, type, description)
- Consistent resolution: override > environment > default

Example:
    >>> from inquiry_forms.config import EnvVar, get_environment
    >>>
    >>> base = get_environment(EnvVar.WIDGET_SCRIPT_BASE_URL)
    >>> timeout = get_environment(EnvVar.SUBMIT_TIMEOUT_MS, override=5000)
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, overload

# =============================================================================
# Environment Variable Configuration
# =============================================================================


@dataclass(frozen=True)
class EnvConfig:
    """Metadata for an environment variable.

    Attributes:
        name: Environment variable name (e.g., "INQUIRY_ENDPOINT").
        default: Default value if not set in environment.
        var_type: Python type for value conversion (str, int, float, bool, Path).
        description: Human-readable description.
        category: Grouping category for documentation.
    """

    name: str
    default: Any
    var_type: type
    description: str = ""
    category: str = "general"


class EnvVar(Enum):
    """All environment variables used by inquiry-forms.

    Each member contains an EnvConfig with name, default, type, and description.
    Use with `get_environment()` for type-safe access.
    """

    # -------------------------------------------------------------------------
    # Widget (baked into exported artifacts)
    # -------------------------------------------------------------------------
    INQUIRY_ENDPOINT = EnvConfig(
        name="INQUIRY_ENDPOINT",
        default="/api/inquiries",
        var_type=str,
        description="Endpoint the exported widget POSTs inquiries to",
        category="widget",
    )
    WIDGET_SCRIPT_BASE_URL = EnvConfig(
        name="WIDGET_SCRIPT_BASE_URL",
        default="https://your-domain.com/forms",
        var_type=str,
        description="Base URL hosting per-form scripts for the compact embed",
        category="widget",
    )
    SUBMIT_TIMEOUT_MS = EnvConfig(
        name="SUBMIT_TIMEOUT_MS",
        default=15000,
        var_type=int,
        description="Milliseconds before an in-flight submission is aborted",
        category="widget",
    )

    SEED_LOCALHOST_DOMAIN = EnvConfig(
        name="SEED_LOCALHOST_DOMAIN",
        default=True,
        var_type=bool,
        description="Pre-seed localhost:3000 as an allowed domain on new forms",
        category="widget",
    )

    # -------------------------------------------------------------------------
    # Storage
    # -------------------------------------------------------------------------
    FORMS_DB_PATH = EnvConfig(
        name="FORMS_DB_PATH",
        default=None,  # Computed from cwd if not set
        var_type=Path,
        description="SQLite database holding form and signature snapshots",
        category="storage",
    )

    # -------------------------------------------------------------------------
    # Services
    # -------------------------------------------------------------------------
    SIGNATURES_API_URL = EnvConfig(
        name="SIGNATURES_API_URL",
        default=None,
        var_type=str,
        description="Base URL of the signatures API (unset = local storage only)",
        category="service",
    )
    SIGNATURES_TIMEOUT = EnvConfig(
        name="SIGNATURES_TIMEOUT",
        default=10.0,
        var_type=float,
        description="Signature API request timeout in seconds",
        category="service",
    )
    MCP_HOST = EnvConfig(
        name="MCP_HOST",
        default="127.0.0.1",
        var_type=str,
        description="MCP server bind address",
        category="service",
    )
    MCP_PORT = EnvConfig(
        name="MCP_PORT",
        default=18090,
        var_type=int,
        description="MCP server port",
        category="service",
    )

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    LOG_LEVEL = EnvConfig(
        name="LOG_LEVEL",
        default="INFO",
        var_type=str,
        description="Log level name (DEBUG, INFO, WARNING, ...)",
        category="logging",
    )


# =============================================================================
# Value Parsing
# =============================================================================

_TRUE_WORDS = frozenset({"true", "1", "yes"})
_FALSE_WORDS = frozenset({"false", "0", "no"})


def _to_bool(raw: str) -> bool:
    word = raw.strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    raise ValueError(f"not a boolean: {raw!r}")


# Parsers raise ValueError on bad input; the variable then keeps its default.
_PARSERS: dict[type, Callable[[str], Any]] = {
    str: str,
    int: int,
    float: float,
    bool: _to_bool,
    Path: Path,
}


def _parse(config: EnvConfig, raw: str) -> Any:
    parser = _PARSERS.get(config.var_type, str)
    try:
        return parser(raw)
    except ValueError:
        return config.default


# =============================================================================
# Main Interface
# =============================================================================


@overload
def get_environment(env_var: EnvVar, override: int) -> int: ...
@overload
def get_environment(env_var: EnvVar, override: str) -> str: ...
@overload
def get_environment(env_var: EnvVar, override: Path) -> Path: ...
@overload
def get_environment(env_var: EnvVar, override: None = None) -> Any: ...


def get_environment(env_var: EnvVar, override: Any = None) -> Any:
    """Resolve a variable: override, then the process environment, then its default.

    Args:
        env_var: Variable to resolve.
        override: Value that wins over everything else when not None.

    Returns:
        The value, parsed to the variable's ``var_type``.
    """
    if override is not None:
        return override
    config: EnvConfig = env_var.value
    raw = os.environ.get(config.name)
    return config.default if raw is None else _parse(config, raw)


# =============================================================================
# Derived Settings
# =============================================================================


def get_forms_db_path(override: Path | str | None = None) -> Path:
    """Database file for form and signature snapshots.

    Resolution: override > FORMS_DB_PATH > {cwd}/.inquiry-forms/forms.db
    """
    if override is not None:
        return Path(override)
    return get_environment(EnvVar.FORMS_DB_PATH) or Path.cwd() / ".inquiry-forms" / "forms.db"


def get_mcp_address() -> tuple[str, int]:
    """(host, port) the MCP server binds to in HTTP/SSE mode."""
    return get_environment(EnvVar.MCP_HOST), get_environment(EnvVar.MCP_PORT)


__all__ = [
    "EnvConfig",
    "EnvVar",
    "get_environment",
    "get_forms_db_path",
    "get_mcp_address",
]
