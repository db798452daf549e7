"""
Operation core shared by the REST and tool front ends.

Every CRM operation is defined here once. Front ends translate their native
request into these calls and the OperationResult back into their own
response shape. Upstream failures are logged with context and re-raised;
"not found" is a result, never an exception.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Dict, Mapping, Optional, TypeVar

from .client import PipedriveHTTPError
from .context import GatewaySession
from .descriptors import ResourceDescriptor, get_descriptor
from .errors import InvalidInputError, UpstreamError
from .models import prepare_body
from .normalize import normalize, single_item
from .options import map_options, parse_int
from .observability import log_upstream_failure

T = TypeVar("T")


@dataclass(frozen=True)
class OperationResult:
    data: Any = None
    found: bool = True
    message: Optional[str] = None
    pagination: Optional[Dict[str, Any]] = None

    @classmethod
    def not_found(cls, message: str) -> "OperationResult":
        return cls(data=None, found=False, message=message)


async def _guarded(
    call: Awaitable[T],
    operation: str,
    resource: str,
    resource_id: Any = None,
    *,
    missing_ok: bool = False,
) -> T:
    try:
        return await call
    except UpstreamError as exc:
        if missing_ok and _is_missing(exc):
            raise
        log_upstream_failure(
            operation,
            exc,
            resource=resource,
            resource_id=None if resource_id is None else str(resource_id),
        )
        raise


def _writable(resource: str) -> ResourceDescriptor:
    descriptor = get_descriptor(resource)
    if not descriptor.writable:
        raise InvalidInputError(f"{descriptor.label} records are read-only")
    return descriptor


def _require_id(resource_id: Any) -> str:
    text = str(resource_id).strip() if resource_id is not None else ""
    if not text:
        raise InvalidInputError("Resource ID is required")
    return text


def _is_missing(exc: UpstreamError) -> bool:
    return isinstance(exc, PipedriveHTTPError) and exc.status_code == 404


async def list_resource(
    session: GatewaySession,
    resource: str,
    params: Optional[Mapping[str, Any]] = None,
) -> OperationResult:
    """List a collection with the resource's filters and pagination defaults."""
    descriptor = get_descriptor(resource)
    options = descriptor.list_options(params)
    raw = await _guarded(
        descriptor.fetch_many(session, options), f"getting {resource}", resource
    )
    collection = normalize(raw)
    return OperationResult(data=collection.items, pagination=collection.pagination)


async def get_resource(
    session: GatewaySession, resource: str, resource_id: Any
) -> OperationResult:
    descriptor = get_descriptor(resource)
    item_id = _require_id(resource_id)
    item = await _guarded(
        descriptor.fetch_one(session, item_id),
        f"getting {descriptor.name} by ID",
        resource,
        item_id,
    )
    if item is None:
        return OperationResult.not_found(f"{descriptor.label} not found")
    return OperationResult(data=item)


async def create_resource(
    session: GatewaySession, resource: str, body: Any
) -> OperationResult:
    descriptor = _writable(resource)
    payload = prepare_body(resource, "create", body)
    raw = await _guarded(
        descriptor.handle(session).create(payload),
        f"creating {descriptor.name}",
        resource,
    )
    return OperationResult(data=raw.get("data"))


async def update_resource(
    session: GatewaySession, resource: str, resource_id: Any, body: Any
) -> OperationResult:
    descriptor = _writable(resource)
    item_id = _require_id(resource_id)
    payload = prepare_body(resource, "update", body)
    try:
        raw = await _guarded(
            descriptor.handle(session).update(item_id, payload),
            f"updating {descriptor.name}",
            resource,
            item_id,
            missing_ok=True,
        )
    except UpstreamError as exc:
        if _is_missing(exc):
            return OperationResult.not_found(f"{descriptor.label} not found")
        raise
    item = single_item(raw)
    if item is None:
        return OperationResult.not_found(f"{descriptor.label} not found")
    return OperationResult(data=item)


def _delete_succeeded(raw: Mapping[str, Any]) -> bool:
    data = raw.get("data")
    if not data or raw.get("success") is False:
        return False
    if isinstance(data, Mapping) and data.get("success") is False:
        return False
    return True


async def delete_resource(
    session: GatewaySession, resource: str, resource_id: Any
) -> OperationResult:
    descriptor = _writable(resource)
    item_id = _require_id(resource_id)
    failure = f"{descriptor.label} not found or could not be deleted"
    try:
        raw = await _guarded(
            descriptor.handle(session).delete(item_id),
            f"deleting {descriptor.name}",
            resource,
            item_id,
            missing_ok=True,
        )
    except UpstreamError as exc:
        if _is_missing(exc):
            return OperationResult.not_found(failure)
        raise
    if not _delete_succeeded(raw):
        return OperationResult.not_found(failure)
    return OperationResult(
        data=raw.get("data"), message=f"{descriptor.label} deleted successfully"
    )


async def list_related(
    session: GatewaySession,
    resource: str,
    resource_id: Any,
    relation: str,
    params: Optional[Mapping[str, Any]] = None,
) -> OperationResult:
    """E.g. ``list_related(session, "deals", 5, "notes")``."""
    descriptor = get_descriptor(resource)
    rel = descriptor.relations.get(relation)
    if rel is None:
        raise InvalidInputError(
            f"Unsupported relation {relation!r} for {descriptor.plural}"
        )
    item_id = _require_id(resource_id)
    operation = f"getting {descriptor.name} {relation}"

    if rel.via_filter is not None:
        parent_id = parse_int(item_id)
        if parent_id is None or parent_id <= 0:
            raise InvalidInputError(f"{descriptor.label} ID must be a positive integer")
        target = get_descriptor(rel.target)
        options = target.list_options(params)
        options.update(map_options({rel.via_filter: parent_id}))
        call = target.fetch_many(session, options)
    else:
        call = descriptor.handle(session).nested(item_id, relation)

    raw = await _guarded(call, operation, resource, item_id)
    collection = normalize(raw)
    return OperationResult(data=collection.items, pagination=collection.pagination)


async def get_current_user(session: GatewaySession) -> OperationResult:
    handle = session.get_resource_handle("users")
    raw = await _guarded(handle.get_current(), "getting current user", "users", "me")
    return OperationResult(data=raw.get("data"))


__all__ = [
    "OperationResult",
    "list_resource",
    "get_resource",
    "create_resource",
    "update_resource",
    "delete_resource",
    "list_related",
    "get_current_user",
]
