from __future__ import annotations

from typing import Annotated, Optional

from pydantic import Field

from pipedrive_mcp.core.context import GatewaySession
from pipedrive_mcp.core.operations import list_resource
from pipedrive_mcp.core.options import DEFAULT_LIMIT
from pipedrive_mcp.core.tools._render import render_result


async def get_activities(
    session: GatewaySession,
    user_id: Annotated[
        Optional[int], Field(description="User ID to filter activities by owner")
    ] = None,
    limit: Annotated[
        int, Field(description="Limit for the number of activities to return")
    ] = DEFAULT_LIMIT,
) -> str:
    """Get activities from Pipedrive."""
    return await render_result(
        "getting activities",
        list_resource(session, "activities", {"user_id": user_id, "limit": limit}),
    )
