from pipedrive_mcp.core.context import GatewaySession
from pipedrive_mcp.core.operations import list_resource
from pipedrive_mcp.core.tools._render import render_result


async def get_users(session: GatewaySession) -> str:
    """Get users from Pipedrive."""
    return await render_result("getting users", list_resource(session, "users"))
