"""Core domain surface for pipedrive-mcp (transport-agnostic)."""

from .client import (
    PipedriveClient,
    PipedriveClientError,
    PipedriveHTTPError,
    PipedriveParseError,
)
from .config import GatewayConfig, create_session_from_env, load_env_config
from .context import GatewaySession
from .errors import (
    ConfigurationError,
    GatewayError,
    InvalidInputError,
    InvalidUriError,
    NotInitializedError,
    UnknownResourceError,
    UpstreamError,
)
from .registry import (
    describe_tools,
    discover_tool_modules,
    iter_tool_functions,
    register_discovered_tools,
)
from .resource_handlers import register_resources

__all__ = [
    # Client
    "PipedriveClient",
    # Exceptions
    "PipedriveClientError",
    "PipedriveHTTPError",
    "PipedriveParseError",
    "GatewayError",
    "ConfigurationError",
    "NotInitializedError",
    "InvalidInputError",
    "InvalidUriError",
    "UnknownResourceError",
    "UpstreamError",
    # Session / config
    "GatewaySession",
    "GatewayConfig",
    "create_session_from_env",
    "load_env_config",
    # Registry helpers
    "discover_tool_modules",
    "iter_tool_functions",
    "register_discovered_tools",
    "describe_tools",
    "register_resources",
]
