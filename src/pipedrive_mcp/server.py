from __future__ import annotations

import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from pipedrive_mcp.core.context import GatewaySession
from pipedrive_mcp.core.registry import register_discovered_tools
from pipedrive_mcp.core.resource_handlers import register_resources

SERVER_NAME = "pipedrive-mcp"

log = logging.getLogger(__name__)


def build_mcp_server(session: GatewaySession, **settings: Any) -> FastMCP:
    """Create a FastMCP app exposing the Pipedrive tools and crm:// resources."""
    app = FastMCP(SERVER_NAME, **settings)
    tools = register_discovered_tools(app, session)
    resources = register_resources(app, session)
    log.info(
        "Built %s with %d tools and %d resources",
        SERVER_NAME,
        len(tools),
        len(resources),
    )
    return app


__all__ = ["build_mcp_server", "SERVER_NAME"]
