"""
Protocol resources: the ``crm://registry`` index, one collection per
resource type and one item template per resource type.
"""

from __future__ import annotations

import json
import logging
from typing import Callable, List

from .context import GatewaySession
from .descriptors import RESOURCES, ResourceDescriptor
from .errors import GatewayError
from .resources import REGISTRY_URI, build_uri, registry_document, resolve_many, resolve_one

log = logging.getLogger("pipedrive_mcp.core.resource_handlers")

MIME_JSON = "application/json"


def _error_text(exc: Exception) -> str:
    return f"Error: {exc}"


def _collection_reader(
    descriptor: ResourceDescriptor, session_provider: Callable[[], GatewaySession]
):
    async def read_collection() -> str:
        try:
            summaries = await resolve_many(session_provider(), descriptor.plural)
        except GatewayError as exc:
            log.error(
                "Error listing %s: %s",
                descriptor.plural,
                exc,
                extra={"uri": build_uri(descriptor.plural)},
            )
            return _error_text(exc)
        return json.dumps(
            {"resources": [s.model_dump() for s in summaries]}, indent=2
        )

    read_collection.__name__ = f"list_{descriptor.plural}"
    return read_collection


def _item_reader(
    descriptor: ResourceDescriptor, session_provider: Callable[[], GatewaySession]
):
    async def read_item(item_id: str) -> str:
        uri = build_uri(descriptor.plural, item_id)
        try:
            item = await resolve_one(session_provider(), descriptor.plural, item_id)
        except GatewayError as exc:
            log.error("Error reading %s: %s", uri, exc, extra={"uri": uri})
            return _error_text(exc)
        if item is None:
            log.info("No %s found for %s", descriptor.name, uri, extra={"uri": uri})
            return ""
        return json.dumps(item, indent=2)

    read_item.__name__ = f"read_{descriptor.name}"
    return read_item


def register_resources(
    app, session_provider: Callable[[], GatewaySession] | GatewaySession
) -> List[str]:
    """Register the registry, collection and item resources on ``app``."""
    if isinstance(session_provider, GatewaySession):
        _session = session_provider

        def session_provider():
            return _session

    if not hasattr(app, "resource"):
        raise TypeError("app must expose a 'resource' decorator")

    registered: List[str] = []

    @app.resource(
        REGISTRY_URI,
        name="registry",
        description="Available Pipedrive resource collections",
        mime_type=MIME_JSON,
    )
    async def read_registry() -> str:
        return json.dumps(registry_document(), indent=2)

    registered.append(REGISTRY_URI)

    for descriptor in RESOURCES.values():
        collection_uri = build_uri(descriptor.plural)
        app.resource(
            collection_uri,
            name=descriptor.plural,
            description=descriptor.description,
            mime_type=MIME_JSON,
        )(_collection_reader(descriptor, session_provider))

        item_uri = build_uri(descriptor.plural, "{item_id}")
        app.resource(
            item_uri,
            name=descriptor.name,
            description=f"A single Pipedrive {descriptor.name}",
            mime_type=MIME_JSON,
        )(_item_reader(descriptor, session_provider))

        registered.extend([collection_uri, item_uri])
        log.debug("Registered resources for %s", descriptor.plural)

    return registered


__all__ = ["register_resources", "MIME_JSON"]
