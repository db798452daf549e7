from __future__ import annotations

import contextlib
import logging

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings
from starlette.applications import Starlette
from starlette.middleware import Middleware

from pipedrive_mcp.core.context import GatewaySession
from pipedrive_mcp.server import build_mcp_server
from pipedrive_mcp.transports.http.config import HttpConfig
from pipedrive_mcp.transports.http.ops import build_ops_app, is_ops_path
from pipedrive_mcp.transports.http.request_id_middleware import RequestIdMiddleware
from pipedrive_mcp.transports.http.rest import EXCEPTION_HANDLERS, build_rest_routes

log = logging.getLogger(__name__)


def build_fastmcp(session: GatewaySession, cfg: HttpConfig | None = None) -> FastMCP:
    """Create the FastMCP app served over streamable HTTP."""
    cfg = cfg or HttpConfig.from_env()

    allowed_hosts = [cfg.host, f"{cfg.host}:*", "testserver"]
    for local in ("localhost", "127.0.0.1"):
        allowed_hosts.extend([local, f"{local}:*"])

    transport_security = TransportSecuritySettings(
        enable_dns_rebinding_protection=True,
        allowed_hosts=allowed_hosts,
        allowed_origins=[],
    )

    fastmcp = build_mcp_server(
        session,
        json_response=cfg.json_response,
        stateless_http=cfg.stateless_http,
        streamable_http_path=cfg.path,
        host=cfg.host,
        port=cfg.port,
        transport_security=transport_security,
    )
    log.info(
        "Built FastMCP (json_response=%s, stateless_http=%s, path=%s)",
        cfg.json_response,
        cfg.stateless_http,
        cfg.path,
    )
    return fastmcp


def build_rest_app(session: GatewaySession, fastmcp: FastMCP | None = None) -> Starlette:
    """REST routes; the lifespan also drives the MCP session manager when mounted."""

    @contextlib.asynccontextmanager
    async def lifespan(_app):
        try:
            if fastmcp is not None:
                async with fastmcp.session_manager.run():
                    yield
            else:
                yield
        finally:
            await session.aclose()

    return Starlette(
        routes=build_rest_routes(session),
        middleware=[Middleware(RequestIdMiddleware)],
        exception_handlers=EXCEPTION_HANDLERS,
        lifespan=lifespan,
    )


class HttpDispatcher:
    """
    ASGI entry routing ops endpoints, the MCP path and everything else (REST)
    to their own apps. Lifespan events go to the REST app.
    """

    def __init__(self, ops_app, rest_app, mcp_app=None, mcp_path: str = "/mcp"):
        self.ops_app = ops_app
        self.rest_app = rest_app
        self.mcp_app = mcp_app
        self.mcp_path = mcp_path.rstrip("/") or "/"
        self.router = rest_app.router
        self.state = rest_app.state

    def _is_mcp_path(self, path: str) -> bool:
        return path == self.mcp_path or path.startswith(self.mcp_path + "/")

    async def __call__(self, scope, receive, send):
        path = scope.get("path", "")
        if is_ops_path(path):
            await self.ops_app(scope, receive, send)
            return
        if self.mcp_app is not None and self._is_mcp_path(path):
            await self.mcp_app(scope, receive, send)
            return
        await self.rest_app(scope, receive, send)


def build_http_app(session: GatewaySession, cfg: HttpConfig | None = None):
    """Return the combined ASGI app: ops, REST and (optionally) MCP over HTTP."""
    cfg = cfg or HttpConfig.from_env()

    fastmcp = None
    mcp_app = None
    if cfg.enable_mcp:
        fastmcp = build_fastmcp(session, cfg)
        mcp_app = fastmcp.streamable_http_app()
        mcp_app.add_middleware(RequestIdMiddleware)

    rest_app = build_rest_app(session, fastmcp)
    ops_app = build_ops_app(session)
    return HttpDispatcher(ops_app, rest_app, mcp_app, cfg.path)


__all__ = ["build_fastmcp", "build_rest_app", "build_http_app", "HttpDispatcher"]
