"""
Typed per-resource handles bound to a PipedriveClient.

Handles accept upstream options in camelCase (``filterId``, ``userId`` ...) and
translate them to the wire's snake_case query parameters. They return the raw
response body untouched; shape handling lives in normalize.py.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Mapping, Optional, Type

from .client import PipedriveClient
from .errors import UnknownResourceError

_CAMEL_BOUNDARY_RE = re.compile(r"(?<!^)(?=[A-Z])")


def to_wire_params(options: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """``{"filterId": 7}`` -> ``{"filter_id": 7}``; ``None`` values are dropped."""
    if not options:
        return {}
    return {
        _CAMEL_BOUNDARY_RE.sub("_", key).lower(): value
        for key, value in options.items()
        if value is not None
    }


class ResourceHandle:
    """Generic CRUD access to one Pipedrive collection endpoint."""

    path: str = ""

    def __init__(self, client: PipedriveClient):
        self.client = client

    def _item_path(self, item_id: int | str) -> str:
        return f"/{self.path}/{item_id}"

    async def list(self, options: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return await self.client.get(
            f"/{self.path}",
            params=to_wire_params(options),
            operation=f"{self.path}.list",
        )

    async def get(self, item_id: int | str) -> Dict[str, Any]:
        return await self.client.get(
            self._item_path(item_id), operation=f"{self.path}.get"
        )

    async def create(self, body: Mapping[str, Any]) -> Dict[str, Any]:
        return await self.client.post(
            f"/{self.path}", json=dict(body), operation=f"{self.path}.create"
        )

    async def update(self, item_id: int | str, body: Mapping[str, Any]) -> Dict[str, Any]:
        return await self.client.put(
            self._item_path(item_id), json=dict(body), operation=f"{self.path}.update"
        )

    async def delete(self, item_id: int | str) -> Dict[str, Any]:
        return await self.client.delete(
            self._item_path(item_id), operation=f"{self.path}.delete"
        )

    async def nested(self, item_id: int | str, relation: str) -> Dict[str, Any]:
        """GET /<path>/<id>/<relation>, e.g. /deals/5/activities."""
        return await self.client.get(
            f"{self._item_path(item_id)}/{relation}",
            operation=f"{self.path}.{relation}",
        )


class DealsHandle(ResourceHandle):
    path = "deals"

    async def get_activities(self, deal_id: int | str) -> Dict[str, Any]:
        return await self.nested(deal_id, "activities")


class PersonsHandle(ResourceHandle):
    path = "persons"

    async def get_deals(self, person_id: int | str) -> Dict[str, Any]:
        return await self.nested(person_id, "deals")

    async def get_activities(self, person_id: int | str) -> Dict[str, Any]:
        return await self.nested(person_id, "activities")


class OrganizationsHandle(ResourceHandle):
    path = "organizations"

    async def get_deals(self, org_id: int | str) -> Dict[str, Any]:
        return await self.nested(org_id, "deals")

    async def get_persons(self, org_id: int | str) -> Dict[str, Any]:
        return await self.nested(org_id, "persons")


class ActivitiesHandle(ResourceHandle):
    path = "activities"


class PipelinesHandle(ResourceHandle):
    path = "pipelines"


class NotesHandle(ResourceHandle):
    path = "notes"


class StagesHandle(ResourceHandle):
    path = "stages"


class UsersHandle(ResourceHandle):
    path = "users"

    async def get_current(self) -> Dict[str, Any]:
        return await self.client.get("/users/me", operation="users.me")


HANDLE_TYPES: Dict[str, Type[ResourceHandle]] = {
    "deals": DealsHandle,
    "persons": PersonsHandle,
    "organizations": OrganizationsHandle,
    "activities": ActivitiesHandle,
    "pipelines": PipelinesHandle,
    "notes": NotesHandle,
    "users": UsersHandle,
    "stages": StagesHandle,
}


def handle_type_for(resource_name: str) -> Type[ResourceHandle]:
    try:
        return HANDLE_TYPES[resource_name]
    except KeyError:
        raise UnknownResourceError(
            f"Unknown Pipedrive resource: {resource_name}"
        ) from None


__all__ = [
    "ResourceHandle",
    "DealsHandle",
    "PersonsHandle",
    "OrganizationsHandle",
    "ActivitiesHandle",
    "PipelinesHandle",
    "NotesHandle",
    "StagesHandle",
    "UsersHandle",
    "HANDLE_TYPES",
    "handle_type_for",
    "to_wire_params",
]
