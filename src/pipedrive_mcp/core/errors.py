"""Error taxonomy shared by the core and both front ends."""


class GatewayError(Exception):
    """Base error for pipedrive-mcp failures."""


class ConfigurationError(GatewayError):
    """Missing credentials or an unusable configuration."""


class NotInitializedError(ConfigurationError):
    """Raised when the upstream session is used before initialize()."""


class InvalidInputError(GatewayError, ValueError):
    """Caller supplied a malformed value (bad URI, body, or resource name)."""


class InvalidUriError(InvalidInputError):
    pass


class UnknownResourceError(InvalidInputError):
    pass


class UpstreamError(GatewayError):
    """Any failure talking to the upstream CRM."""


__all__ = [
    "GatewayError",
    "ConfigurationError",
    "NotInitializedError",
    "InvalidInputError",
    "InvalidUriError",
    "UnknownResourceError",
    "UpstreamError",
]
