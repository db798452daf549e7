import json

import pytest
import respx
from httpx import Response
from mcp.server.fastmcp import FastMCP
from pipedrive_mcp.core.context import GatewaySession
from pipedrive_mcp.core.resource_handlers import register_resources

BASE = "https://mock.pipedrive.test/v1"


@pytest.fixture
def app():
    session = GatewaySession()
    session.initialize("test-token", base_url=BASE)
    fastmcp = FastMCP("test")
    register_resources(fastmcp, session)
    return fastmcp


async def _read(app: FastMCP, uri: str) -> str:
    contents = list(await app.read_resource(uri))
    assert len(contents) == 1
    return contents[0].content


@pytest.mark.asyncio
async def test_registry_and_collections_are_listed(app):
    uris = {str(r.uri).rstrip("/") for r in await app.list_resources()}
    templates = {t.uriTemplate for t in await app.list_resource_templates()}

    assert "crm://registry" in uris
    assert {"crm://deals", "crm://stages", "crm://users"} <= uris
    assert "crm://deals/{item_id}" in templates
    assert "crm://notes/{item_id}" in templates


@pytest.mark.asyncio
async def test_read_registry(app):
    doc = json.loads(await _read(app, "crm://registry"))

    assert doc["description"] == "Pipedrive CRM Resources"
    assert len(doc["resources"]) == 8


@pytest.mark.asyncio
@respx.mock
async def test_read_collection_returns_summaries(app):
    respx.get(f"{BASE}/organizations").mock(
        return_value=Response(
            200,
            json={"data": [{"id": 3, "name": "Acme", "open_deals_count": 2}]},
        )
    )

    doc = json.loads(await _read(app, "crm://organizations"))

    assert doc == {
        "resources": [
            {
                "name": "Acme",
                "description": "2 open deals",
                "uri": "crm://organizations/3",
            }
        ]
    }


@pytest.mark.asyncio
@respx.mock
async def test_read_item(app):
    respx.get(f"{BASE}/deals/42").mock(
        return_value=Response(200, json={"data": {"id": 42, "title": "Big"}})
    )

    assert json.loads(await _read(app, "crm://deals/42")) == {"id": 42, "title": "Big"}


@pytest.mark.asyncio
@respx.mock
async def test_missing_item_is_empty_content(app):
    respx.get(f"{BASE}/persons/9").mock(
        return_value=Response(200, json={"success": True, "data": None})
    )

    assert await _read(app, "crm://persons/9") == ""


@pytest.mark.asyncio
@respx.mock
async def test_upstream_failure_is_error_text(app):
    respx.get(f"{BASE}/deals").mock(
        return_value=Response(500, json={"success": False, "error": "boom"})
    )

    text = await _read(app, "crm://deals")

    assert text.startswith("Error: ")
    assert "boom" in text
