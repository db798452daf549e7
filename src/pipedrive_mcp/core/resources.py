"""
``crm://<type>[/<id>]`` addressing for the protocol resource surface.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from .context import GatewaySession
from .descriptors import RESOURCES, get_descriptor
from .errors import InvalidUriError, UnknownResourceError
from .normalize import is_shape_mismatch, normalize

log = logging.getLogger("pipedrive_mcp.core.resources")

SCHEME = "crm"
SCHEME_SEPARATOR = "://"
REGISTRY_URI = f"{SCHEME}{SCHEME_SEPARATOR}registry"
LIST_LIMIT = 100


@dataclass(frozen=True)
class ResourceURI:
    scheme: str
    resource_type: str
    id: Optional[str] = None

    def __str__(self) -> str:
        return build_uri(self.resource_type, self.id)


class ResourceSummary(BaseModel):
    name: str
    description: str
    uri: str


def build_uri(resource_type: str, item_id: Any = None) -> str:
    base = f"{SCHEME}{SCHEME_SEPARATOR}{resource_type}"
    return base if item_id is None else f"{base}/{item_id}"


def resolve(uri: str, *, require_id: bool = False) -> ResourceURI:
    """
    Parse ``crm://deals/42`` into ``ResourceURI("crm", "deals", "42")``.

    Raises InvalidUriError for a foreign scheme, a malformed string, an
    unregistered resource type, or (with ``require_id``) a missing id.
    """
    if not isinstance(uri, str):
        raise InvalidUriError(f"Invalid URI: {uri!r}")
    parts = uri.split(SCHEME_SEPARATOR)
    if len(parts) != 2:
        raise InvalidUriError(
            f"Invalid URI format: {uri!r}. Expected {SCHEME}://{{resource}}/{{id}}"
        )
    scheme, path = parts
    if scheme != SCHEME:
        raise InvalidUriError(
            f"Invalid URI scheme {scheme!r} in {uri!r}; expected {SCHEME!r}"
        )

    segments = path.split("/")
    if len(segments) == 2 and segments[1] == "":
        segments = segments[:1]
    if len(segments) > 2 or any(not s for s in segments):
        raise InvalidUriError(
            f"Invalid URI path in {uri!r}. Expected {SCHEME}://{{resource}}/{{id}}"
        )

    resource_type = segments[0]
    if resource_type not in RESOURCES:
        raise InvalidUriError(f"Unsupported resource type: {resource_type}")

    item_id = segments[1] if len(segments) == 2 else None
    if require_id and item_id is None:
        raise InvalidUriError(f"Resource ID is required in {uri!r}")

    return ResourceURI(scheme=scheme, resource_type=resource_type, id=item_id)


async def resolve_one(
    session: GatewaySession, resource_type: str, item_id: str
) -> Optional[Dict[str, Any]]:
    """Fetch a single item; None when the upstream has nothing for ``item_id``."""
    descriptor = _descriptor(resource_type)
    return await descriptor.fetch_one(session, item_id)


async def resolve_many(
    session: GatewaySession, resource_type: str
) -> List[ResourceSummary]:
    """Fetch up to LIST_LIMIT items and summarize each as name/description/uri."""
    descriptor = _descriptor(resource_type)
    raw = await descriptor.fetch_many(session, {"limit": LIST_LIMIT})
    collection = normalize(raw)

    if is_shape_mismatch(raw):
        log.error(
            "Unexpected %s response structure",
            resource_type,
            extra={"resource": resource_type},
        )

    summaries: List[ResourceSummary] = []
    for item in collection:
        item_id = item.get("id")
        if item_id is None:
            log.debug("Skipping %s item without id", resource_type)
            continue
        summary = descriptor.summarize(item)
        summaries.append(
            ResourceSummary(
                name=summary["name"],
                description=summary["description"],
                uri=build_uri(resource_type, item_id),
            )
        )

    log.info(
        "Returning %d resources for %s",
        len(summaries),
        resource_type,
        extra={"resource": resource_type},
    )
    return summaries


def registry_document() -> Dict[str, Any]:
    return {
        "description": "Pipedrive CRM Resources",
        "resources": [
            {
                "name": d.plural.capitalize(),
                "uri": build_uri(d.plural),
                "description": d.description,
            }
            for d in RESOURCES.values()
        ],
    }


def _descriptor(resource_type: str):
    try:
        return get_descriptor(resource_type)
    except UnknownResourceError as exc:
        raise InvalidUriError(str(exc)) from exc


__all__ = [
    "SCHEME",
    "REGISTRY_URI",
    "LIST_LIMIT",
    "ResourceURI",
    "ResourceSummary",
    "build_uri",
    "resolve",
    "resolve_one",
    "resolve_many",
    "registry_document",
]
