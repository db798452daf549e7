from __future__ import annotations

from typing import Dict

from starlette.applications import Starlette
from starlette.responses import JSONResponse

from pipedrive_mcp.core.context import GatewaySession

OPS_PATHS = {"/healthz", "/readyz"}
NO_STORE = {"Cache-Control": "no-store"}


def is_ops_path(path: str | None) -> bool:
    return bool(path) and path in OPS_PATHS


def readiness_state(session: GatewaySession) -> Dict[str, bool]:
    return {
        "config_loaded": True,
        "client_initialized": session.initialized,
    }


def build_readiness_status(state: Dict[str, bool]) -> Dict[str, object]:
    failed = [k for k, v in state.items() if not v]
    return {
        "status": "ok" if not failed else "fail",
        "checks": state,
        "failed": failed,
    }


def build_ops_app(session: GatewaySession) -> Starlette:
    async def healthz(_request):
        return JSONResponse({"status": "ok"}, headers=NO_STORE)

    async def readyz(_request):
        payload = build_readiness_status(readiness_state(session))
        status_code = 200 if payload["status"] == "ok" else 503
        return JSONResponse(payload, status_code=status_code, headers=NO_STORE)

    ops_app = Starlette()
    ops_app.add_route("/healthz", healthz, methods=["GET"])
    ops_app.add_route("/readyz", readyz, methods=["GET"])
    return ops_app


__all__ = [
    "OPS_PATHS",
    "is_ops_path",
    "readiness_state",
    "build_readiness_status",
    "build_ops_app",
]
