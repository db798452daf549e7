"""
REST surface: ``/<plural>`` CRUD routes plus relationship listings.

Handlers translate the HTTP request into an operation-core call and the
OperationResult back into the ``{success, data|error}`` envelope.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, List

from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from pipedrive_mcp.core import operations
from pipedrive_mcp.core.client import PipedriveHTTPError
from pipedrive_mcp.core.context import GatewaySession
from pipedrive_mcp.core.descriptors import RESOURCES, ResourceDescriptor
from pipedrive_mcp.core.errors import ConfigurationError, InvalidInputError
from pipedrive_mcp.core.operations import OperationResult
from pipedrive_mcp.core.registry import describe_tools

log = logging.getLogger(__name__)

FORWARDED_UPSTREAM_STATUSES = {400, 401, 403, 404, 409, 422, 429}


# --- Envelope -------------------------------------------------------------- #


def success(data: Any = None, *, status_code: int = 200, message: str | None = None):
    body: Dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    else:
        body["data"] = data
    return JSONResponse(body, status_code=status_code)


def failure(error: str, status_code: int) -> JSONResponse:
    return JSONResponse({"success": False, "error": error}, status_code=status_code)


def _render(result: OperationResult, *, status_code: int = 200) -> JSONResponse:
    if not result.found:
        return failure(result.message or "Not found", 404)
    return success(result.data, status_code=status_code)


async def _json_body(request: Request) -> Any:
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise InvalidInputError("Request body must be valid JSON") from exc


# --- Exception handlers ---------------------------------------------------- #


async def invalid_input_handler(request: Request, exc: Exception) -> JSONResponse:
    return failure(str(exc), 400)


async def configuration_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log.error("Configuration error on %s: %s", request.url.path, exc)
    return failure(str(exc), 500)


async def upstream_http_error_handler(request: Request, exc: Exception) -> JSONResponse:
    status = getattr(exc, "status_code", 500)
    if status not in FORWARDED_UPSTREAM_STATUSES:
        status = 500
    return failure(getattr(exc, "message", None) or str(exc), status)


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, HTTPException)
    return failure(exc.detail, exc.status_code)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log.error(
        "Unhandled error on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=exc,
        extra={"method": request.method, "path": request.url.path},
    )
    return failure("Internal Server Error", 500)


EXCEPTION_HANDLERS = {
    InvalidInputError: invalid_input_handler,
    ConfigurationError: configuration_error_handler,
    PipedriveHTTPError: upstream_http_error_handler,
    HTTPException: http_exception_handler,
    Exception: unhandled_error_handler,
}


# --- Route generation ------------------------------------------------------ #


def _resource_routes(
    descriptor: ResourceDescriptor, session: GatewaySession
) -> List[Route]:
    plural = descriptor.plural

    async def list_items(request: Request):
        params = dict(request.query_params)
        return _render(await operations.list_resource(session, plural, params))

    async def get_item(request: Request):
        item_id = request.path_params["item_id"]
        return _render(await operations.get_resource(session, plural, item_id))

    async def create_item(request: Request):
        body = await _json_body(request)
        result = await operations.create_resource(session, plural, body)
        return _render(result, status_code=201)

    async def update_item(request: Request):
        item_id = request.path_params["item_id"]
        body = await _json_body(request)
        return _render(
            await operations.update_resource(session, plural, item_id, body)
        )

    async def delete_item(request: Request):
        item_id = request.path_params["item_id"]
        result = await operations.delete_resource(session, plural, item_id)
        if not result.found:
            return failure(result.message or "Not found", 404)
        return success(message=result.message)

    def related(relation: str) -> Callable:
        async def list_related(request: Request):
            item_id = request.path_params["item_id"]
            params = dict(request.query_params)
            return _render(
                await operations.list_related(
                    session, plural, item_id, relation, params
                )
            )

        return list_related

    routes = [Route(f"/{plural}", list_items, methods=["GET"])]
    if descriptor.writable:
        routes.append(Route(f"/{plural}", create_item, methods=["POST"]))
    routes.append(Route(f"/{plural}/{{item_id}}", get_item, methods=["GET"]))
    if descriptor.writable:
        routes.append(Route(f"/{plural}/{{item_id}}", update_item, methods=["PUT"]))
        routes.append(
            Route(f"/{plural}/{{item_id}}", delete_item, methods=["DELETE"])
        )
    for relation in descriptor.relations:
        routes.append(
            Route(
                f"/{plural}/{{item_id}}/{relation}",
                related(relation),
                methods=["GET"],
            )
        )
    return routes


def build_rest_routes(session: GatewaySession) -> List[Route]:
    """All REST routes; ``/users/me`` precedes ``/users/{item_id}``."""

    async def current_user(request: Request):
        return _render(await operations.get_current_user(session))

    async def tools_document(request: Request):
        return JSONResponse(describe_tools())

    routes: List[Route] = [
        Route("/users/me", current_user, methods=["GET"]),
        Route("/tools", tools_document, methods=["GET"]),
    ]
    for descriptor in RESOURCES.values():
        if descriptor.rest:
            routes.extend(_resource_routes(descriptor, session))
    return routes


__all__ = [
    "build_rest_routes",
    "EXCEPTION_HANDLERS",
    "FORWARDED_UPSTREAM_STATUSES",
    "success",
    "failure",
]
