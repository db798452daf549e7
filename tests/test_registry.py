import inspect
from types import ModuleType

import pytest
from mcp.server.fastmcp import FastMCP
from pipedrive_mcp.core.context import GatewaySession
from pipedrive_mcp.core.registry import (
    describe_tools,
    discover_tool_modules,
    register_discovered_tools,
)

BASE = "https://mock.pipedrive.test/v1"

EXPECTED_TOOLS = {
    "get_deals",
    "get_deal",
    "create_deal",
    "update_deal",
    "get_persons",
    "get_organizations",
    "get_activities",
    "get_pipelines",
    "get_notes",
    "get_users",
}


def _make_module(name: str, code: str) -> ModuleType:
    module = ModuleType(name)
    exec(code, module.__dict__)
    return module


@pytest.fixture
def session():
    s = GatewaySession()
    s.initialize("test-token", base_url=BASE)
    return s


@pytest.mark.asyncio
async def test_register_discovered_tools_registers_valid_tools_only(session):
    code = """
async def tool_fn(session, *, foo: int = 1):
    return (session.client.base_url, foo)

async def _private(session):
    return None

async def wrong_first(arg1, session):
    return None

def sync_func(session):
    return None
"""
    mod = _make_module("fake_mod", code)

    app = FastMCP("test")
    registered = []

    def record_tool(name):
        def decorator(fn):
            registered.append((name, fn))
            return fn

        return decorator

    app.tool = record_tool  # type: ignore[attr-defined]

    names = register_discovered_tools(app, session, modules=[mod])

    assert names == ["tool_fn"]
    assert [n for n, _ in registered] == ["tool_fn"]

    sig = inspect.signature(registered[0][1])
    assert "session" not in sig.parameters

    result = await registered[0][1](foo=5)
    assert result == (BASE, 5)


def test_duplicate_tool_names_raise(session):
    mod1 = _make_module("mod1", "async def tool_fn(session): return None")
    mod2 = _make_module("mod2", "async def tool_fn(session): return None")

    with pytest.raises(ValueError):
        register_discovered_tools(FastMCP("test"), session, modules=[mod1, mod2])


def test_discovery_skips_private_helper_modules():
    names = {m.__name__.rsplit(".", 1)[-1] for m in discover_tool_modules()}

    assert "_render" not in names
    assert {"deals", "persons", "organizations", "activities"} <= names


@pytest.mark.asyncio
async def test_all_tools_are_registered_with_schemas(session):
    app = FastMCP("test")
    register_discovered_tools(app, session)

    tools = {t.name: t for t in await app.list_tools()}

    assert set(tools) == EXPECTED_TOOLS
    deals_schema = tools["get_deals"].inputSchema
    assert "session" not in deals_schema["properties"]
    assert deals_schema["properties"]["limit"]["default"] == 100
    assert (
        deals_schema["properties"]["filter_id"]["description"]
        == "Filter ID to filter deals"
    )
    assert set(tools["create_deal"].inputSchema["required"]) == {"title"}
    assert set(tools["update_deal"].inputSchema["required"]) == {"deal_id"}
    assert tools["get_pipelines"].inputSchema["properties"] == {}


def test_describe_tools_document():
    doc = describe_tools()

    assert len(doc["tools"]) == 1
    group = doc["tools"][0]
    assert group["name"] == "pipedrive"
    methods = {m["name"]: m for m in group["methods"]}
    assert set(methods) == EXPECTED_TOOLS

    get_deal = methods["get_deal"]
    assert get_deal["description"] == "Get a specific deal by ID."
    assert get_deal["parameters"] == [
        {
            "name": "deal_id",
            "description": "The ID of the deal to retrieve",
            "required": True,
        }
    ]

    notes_params = {p["name"]: p for p in methods["get_notes"]["parameters"]}
    assert set(notes_params) == {"deal_id", "person_id", "org_id", "limit"}
    assert notes_params["limit"]["required"] is False
