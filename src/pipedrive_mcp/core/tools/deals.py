from __future__ import annotations

from typing import Annotated, Optional

from pydantic import Field

from pipedrive_mcp.core.context import GatewaySession
from pipedrive_mcp.core.models import DealStatus
from pipedrive_mcp.core.operations import (
    create_resource,
    get_resource,
    list_resource,
    update_resource,
)
from pipedrive_mcp.core.options import DEFAULT_LIMIT
from pipedrive_mcp.core.tools._render import render_result


_ID_FIELDS = ("person_id", "org_id", "stage_id")


def _deal_fields(**fields) -> dict:
    # an id of 0 means "not set"
    return {
        k: v
        for k, v in fields.items()
        if v is not None and not (k in _ID_FIELDS and v == 0)
    }


async def get_deals(
    session: GatewaySession,
    filter_id: Annotated[
        Optional[int], Field(description="Filter ID to filter deals")
    ] = None,
    user_id: Annotated[
        Optional[int], Field(description="User ID to filter deals by owner")
    ] = None,
    stage_id: Annotated[
        Optional[int], Field(description="Stage ID to filter deals by stage")
    ] = None,
    status: Annotated[
        Optional[DealStatus], Field(description="Status to filter deals (open, won, lost)")
    ] = None,
    limit: Annotated[
        int, Field(description="Limit for the number of deals to return")
    ] = DEFAULT_LIMIT,
) -> str:
    """Get deals from Pipedrive."""
    params = {
        "filter_id": filter_id,
        "user_id": user_id,
        "stage_id": stage_id,
        "status": status,
        "limit": limit,
    }
    return await render_result("getting deals", list_resource(session, "deals", params))


async def get_deal(
    session: GatewaySession,
    deal_id: Annotated[int, Field(description="The ID of the deal to retrieve")],
) -> str:
    """Get a specific deal by ID."""
    return await render_result(
        "getting deal by ID", get_resource(session, "deals", deal_id)
    )


async def create_deal(
    session: GatewaySession,
    title: Annotated[str, Field(description="The title of the deal")],
    value: Annotated[Optional[float], Field(description="The value of the deal")] = None,
    currency: Annotated[
        Optional[str], Field(description="The currency of the deal")
    ] = None,
    person_id: Annotated[
        Optional[int], Field(description="Person ID to associate with the deal")
    ] = None,
    org_id: Annotated[
        Optional[int], Field(description="Organization ID to associate with the deal")
    ] = None,
    stage_id: Annotated[Optional[int], Field(description="Stage ID for the deal")] = None,
    status: Annotated[
        Optional[DealStatus], Field(description="Status of the deal (open, won, lost)")
    ] = None,
) -> str:
    """Create a new deal."""
    body = _deal_fields(
        title=title,
        value=value,
        currency=currency,
        person_id=person_id,
        org_id=org_id,
        stage_id=stage_id,
        status=status,
    )
    return await render_result(
        "creating deal",
        create_resource(session, "deals", body),
        success_prefix="Deal created successfully",
    )


async def update_deal(
    session: GatewaySession,
    deal_id: Annotated[int, Field(description="The ID of the deal to update")],
    title: Annotated[Optional[str], Field(description="New title for the deal")] = None,
    value: Annotated[Optional[float], Field(description="New value for the deal")] = None,
    currency: Annotated[
        Optional[str], Field(description="New currency for the deal")
    ] = None,
    person_id: Annotated[
        Optional[int], Field(description="New person ID to associate with the deal")
    ] = None,
    org_id: Annotated[
        Optional[int],
        Field(description="New organization ID to associate with the deal"),
    ] = None,
    stage_id: Annotated[
        Optional[int], Field(description="New stage ID for the deal")
    ] = None,
    status: Annotated[
        Optional[DealStatus], Field(description="New status for the deal (open, won, lost)")
    ] = None,
) -> str:
    """Update an existing deal."""
    body = _deal_fields(
        title=title,
        value=value,
        currency=currency,
        person_id=person_id,
        org_id=org_id,
        stage_id=stage_id,
        status=status,
    )
    return await render_result(
        "updating deal",
        update_resource(session, "deals", deal_id, body),
        success_prefix="Deal updated successfully",
    )
