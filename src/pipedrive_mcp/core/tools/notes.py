from __future__ import annotations

from typing import Annotated, Optional

from pydantic import Field

from pipedrive_mcp.core.context import GatewaySession
from pipedrive_mcp.core.operations import list_resource
from pipedrive_mcp.core.options import DEFAULT_LIMIT
from pipedrive_mcp.core.tools._render import render_result


async def get_notes(
    session: GatewaySession,
    deal_id: Annotated[Optional[int], Field(description="Deal ID to filter notes")] = None,
    person_id: Annotated[
        Optional[int], Field(description="Person ID to filter notes")
    ] = None,
    org_id: Annotated[
        Optional[int], Field(description="Organization ID to filter notes")
    ] = None,
    limit: Annotated[
        int, Field(description="Limit for the number of notes to return")
    ] = DEFAULT_LIMIT,
) -> str:
    """Get notes from Pipedrive."""
    params = {
        "deal_id": deal_id,
        "person_id": person_id,
        "org_id": org_id,
        "limit": limit,
    }
    return await render_result("getting notes", list_resource(session, "notes", params))
