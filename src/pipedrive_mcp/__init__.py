"""pipedrive_mcp package exports."""

from .core import (
    GatewaySession,
    PipedriveClient,
    PipedriveClientError,
    PipedriveHTTPError,
    PipedriveParseError,
    create_session_from_env,
)
from .server import build_mcp_server

__all__ = [
    "PipedriveClient",
    "PipedriveClientError",
    "PipedriveHTTPError",
    "PipedriveParseError",
    "GatewaySession",
    "create_session_from_env",
    "build_mcp_server",
]
