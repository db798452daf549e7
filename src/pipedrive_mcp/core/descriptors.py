"""
Static registry of the CRM resource types.

Each ResourceDescriptor bundles the upstream calls for one resource family,
its list filters, its relationship listings and the summary used when the
collection is browsed as protocol resources.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from .client import PipedriveHTTPError
from .context import GatewaySession
from .errors import UnknownResourceError
from .handles import ResourceHandle
from .normalize import single_item
from .options import build_list_options

Summary = Dict[str, str]

_TAG_RE = re.compile(r"<[^>]+>")


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


# --- Summaries ------------------------------------------------------------- #


def summarize_deal(item: Mapping[str, Any]) -> Summary:
    status = _text(item.get("status")) or "unknown"
    worth = _text(item.get("formatted_value")) or "unknown value"
    return {
        "name": _text(item.get("title")) or f"Deal {item.get('id')}",
        "description": f"{status} deal worth {worth}",
    }


def _first_email(item: Mapping[str, Any]) -> Optional[str]:
    emails = item.get("email") or item.get("emails")
    if isinstance(emails, list) and emails:
        first = emails[0]
        if isinstance(first, dict):
            return _text(first.get("value")) or "N/A"
        return _text(first) or "N/A"
    return _text(item.get("primary_email")) or None


def summarize_person(item: Mapping[str, Any]) -> Summary:
    email = _first_email(item)
    return {
        "name": _text(item.get("name")) or f"Person {item.get('id')}",
        "description": f"Email: {email}" if email else "No email provided",
    }


def summarize_organization(item: Mapping[str, Any]) -> Summary:
    count = item.get("open_deals_count") or 0
    return {
        "name": _text(item.get("name")) or f"Organization {item.get('id')}",
        "description": f"{count} open deals",
    }


def summarize_activity(item: Mapping[str, Any]) -> Summary:
    kind = _text(item.get("type")) or "task"
    due = _text(item.get("due_date"))
    return {
        "name": _text(item.get("subject")) or "Untitled activity",
        "description": f"{kind} activity due {due}" if due else f"{kind} activity with no due date",
    }


def summarize_pipeline(item: Mapping[str, Any]) -> Summary:
    active = item.get("active")
    if active is None:
        description = "Pipeline"
    else:
        description = "Active pipeline" if active else "Inactive pipeline"
    return {
        "name": _text(item.get("name")) or f"Pipeline {item.get('id')}",
        "description": description,
    }


def summarize_note(item: Mapping[str, Any]) -> Summary:
    content = " ".join(_TAG_RE.sub(" ", _text(item.get("content"))).split())
    for key, label in (("deal_id", "deal"), ("person_id", "person"), ("org_id", "organization")):
        if item.get(key):
            description = f"Note on {label} {item[key]}"
            break
    else:
        description = "Unattached note"
    return {"name": content[:60] or "Untitled note", "description": description}


def summarize_user(item: Mapping[str, Any]) -> Summary:
    email = _text(item.get("email"))
    return {
        "name": _text(item.get("name")) or f"User {item.get('id')}",
        "description": email or "No email provided",
    }


def summarize_stage(item: Mapping[str, Any]) -> Summary:
    pipeline_id = item.get("pipeline_id")
    return {
        "name": _text(item.get("name")) or f"Stage {item.get('id')}",
        "description": f"Stage in pipeline {pipeline_id}" if pipeline_id else "Pipeline stage",
    }


# --- Descriptors ----------------------------------------------------------- #


@dataclass(frozen=True)
class Relation:
    """
    A relationship listing such as ``/deals/{id}/notes``.

    With ``via_filter`` the target collection is listed with that filter set to
    the parent id; without it the upstream nested endpoint is used.
    """

    name: str
    target: str
    via_filter: Optional[str] = None


@dataclass(frozen=True)
class ResourceDescriptor:
    name: str
    plural: str
    label: str
    summarize: Callable[[Mapping[str, Any]], Summary]
    description: str
    list_filters: Tuple[str, ...] = ()
    paginated: bool = True
    writable: bool = True
    rest: bool = True
    relations: Mapping[str, Relation] = field(default_factory=dict)

    def handle(self, session: GatewaySession) -> ResourceHandle:
        return session.get_resource_handle(self.plural)

    async def fetch_one(
        self, session: GatewaySession, item_id: int | str
    ) -> Optional[Dict[str, Any]]:
        """The item, or None when the upstream reports nothing for that id."""
        try:
            raw = await self.handle(session).get(item_id)
        except PipedriveHTTPError as exc:
            if exc.status_code == 404:
                return None
            raise
        return single_item(raw)

    async def fetch_many(
        self, session: GatewaySession, options: Optional[Mapping[str, Any]] = None
    ) -> Dict[str, Any]:
        return await self.handle(session).list(options)

    def list_options(self, params: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        return build_list_options(params, self.list_filters, paginated=self.paginated)


def _relations(*items: Relation) -> Dict[str, Relation]:
    return {r.name: r for r in items}


RESOURCES: Dict[str, ResourceDescriptor] = {
    d.plural: d
    for d in (
        ResourceDescriptor(
            name="deal",
            plural="deals",
            label="Deal",
            summarize=summarize_deal,
            description="Access Pipedrive deals",
            list_filters=("filter_id", "user_id", "stage_id", "status"),
            relations=_relations(
                Relation("activities", "activities"),
                Relation("notes", "notes", via_filter="deal_id"),
            ),
        ),
        ResourceDescriptor(
            name="person",
            plural="persons",
            label="Person",
            summarize=summarize_person,
            description="Access Pipedrive persons/contacts",
            list_filters=("filter_id",),
            relations=_relations(
                Relation("deals", "deals"),
                Relation("activities", "activities"),
            ),
        ),
        ResourceDescriptor(
            name="organization",
            plural="organizations",
            label="Organization",
            summarize=summarize_organization,
            description="Access Pipedrive organizations/companies",
            list_filters=("filter_id",),
            relations=_relations(
                Relation("deals", "deals"),
                Relation("persons", "persons"),
            ),
        ),
        ResourceDescriptor(
            name="activity",
            plural="activities",
            label="Activity",
            summarize=summarize_activity,
            description="Access Pipedrive activities",
            list_filters=("user_id",),
        ),
        ResourceDescriptor(
            name="pipeline",
            plural="pipelines",
            label="Pipeline",
            summarize=summarize_pipeline,
            description="Access Pipedrive pipelines",
            paginated=False,
            writable=False,
            relations=_relations(
                Relation("deals", "deals"),
                Relation("stages", "stages", via_filter="pipeline_id"),
            ),
        ),
        ResourceDescriptor(
            name="note",
            plural="notes",
            label="Note",
            summarize=summarize_note,
            description="Access Pipedrive notes",
            list_filters=("deal_id", "person_id", "org_id"),
        ),
        ResourceDescriptor(
            name="user",
            plural="users",
            label="User",
            summarize=summarize_user,
            description="Access Pipedrive users",
            paginated=False,
            writable=False,
            relations=_relations(
                Relation("deals", "deals", via_filter="user_id"),
                Relation("activities", "activities", via_filter="user_id"),
            ),
        ),
        ResourceDescriptor(
            name="stage",
            plural="stages",
            label="Stage",
            summarize=summarize_stage,
            description="Access Pipedrive pipeline stages",
            list_filters=("pipeline_id",),
            paginated=False,
            writable=False,
            rest=False,
        ),
    )
}


def get_descriptor(resource_type: str) -> ResourceDescriptor:
    try:
        return RESOURCES[resource_type]
    except KeyError:
        raise UnknownResourceError(
            f"Unsupported resource type: {resource_type}"
        ) from None


__all__ = [
    "Relation",
    "ResourceDescriptor",
    "RESOURCES",
    "get_descriptor",
    "summarize_deal",
    "summarize_person",
    "summarize_organization",
    "summarize_activity",
    "summarize_pipeline",
    "summarize_note",
    "summarize_user",
    "summarize_stage",
]
