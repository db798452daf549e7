from __future__ import annotations

from typing import Annotated, Optional

from pydantic import Field

from pipedrive_mcp.core.context import GatewaySession
from pipedrive_mcp.core.operations import list_resource
from pipedrive_mcp.core.options import DEFAULT_LIMIT
from pipedrive_mcp.core.tools._render import render_result


async def get_persons(
    session: GatewaySession,
    filter_id: Annotated[
        Optional[int], Field(description="Filter ID to filter persons")
    ] = None,
    limit: Annotated[
        int, Field(description="Limit for the number of persons to return")
    ] = DEFAULT_LIMIT,
) -> str:
    """Get persons from Pipedrive."""
    return await render_result(
        "getting persons",
        list_resource(session, "persons", {"filter_id": filter_id, "limit": limit}),
    )
