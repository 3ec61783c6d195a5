"""Core MCP server logic for inquiry-forms.

Provides configuration for creating MCP server instances.
"""

from dataclasses import dataclass
from enum import Enum

from inquiry_forms.config import get_mcp_address

SERVER_NAME = "inquiry-forms"


class TransportType(str, Enum):
    """Supported MCP transport types."""

    STDIO = "stdio"
    HTTP = "http"
    SSE = "sse"


@dataclass
class ServerConfig:
    """Configuration for MCP server.

    Attributes:
        name: Server display name.
        transport: Transport type for communication.
        host: Bind address for HTTP/SSE transports.
        port: Port for HTTP/SSE transports.
        path: URL path for HTTP transport.
    """

    name: str = SERVER_NAME
    transport: TransportType = TransportType.STDIO
    host: str = "127.0.0.1"
    port: int = 18090
    path: str = "/mcp"

    @classmethod
    def from_env(cls, transport: TransportType | None = None) -> "ServerConfig":
        """Create config from MCP_HOST and MCP_PORT."""
        host, port = get_mcp_address()
        return cls(transport=transport or TransportType.STDIO, host=host, port=port)


def get_server_version() -> str:
    """Get server version string."""
    from inquiry_forms import __version__

    return __version__


__all__ = [
    "SERVER_NAME",
    "ServerConfig",
    "TransportType",
    "get_server_version",
]
