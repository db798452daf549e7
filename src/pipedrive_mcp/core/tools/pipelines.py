from pipedrive_mcp.core.context import GatewaySession
from pipedrive_mcp.core.operations import list_resource
from pipedrive_mcp.core.tools._render import render_result


async def get_pipelines(session: GatewaySession) -> str:
    """Get pipelines from Pipedrive."""
    return await render_result("getting pipelines", list_resource(session, "pipelines"))
