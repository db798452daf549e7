from __future__ import annotations

from typing import Annotated, Optional

from pydantic import Field

from pipedrive_mcp.core.context import GatewaySession
from pipedrive_mcp.core.operations import list_resource
from pipedrive_mcp.core.options import DEFAULT_LIMIT
from pipedrive_mcp.core.tools._render import render_result


async def get_organizations(
    session: GatewaySession,
    filter_id: Annotated[
        Optional[int], Field(description="Filter ID to filter organizations")
    ] = None,
    limit: Annotated[
        int, Field(description="Limit for the number of organizations to return")
    ] = DEFAULT_LIMIT,
) -> str:
    """Get organizations from Pipedrive."""
    return await render_result(
        "getting organizations",
        list_resource(
            session, "organizations", {"filter_id": filter_id, "limit": limit}
        ),
    )
