import json
import logging

import httpx
import pytest
import respx
from httpx import Response
from pipedrive_mcp.core.context import GatewaySession
from pipedrive_mcp.transports.http.app import build_http_app
from pipedrive_mcp.transports.http.config import HttpConfig
from starlette.testclient import TestClient

BASE = "https://mock.pipedrive.test/v1"


@pytest.fixture
def session():
    s = GatewaySession()
    s.initialize("test-token", base_url=BASE)
    return s


@pytest.fixture
def client(session):
    app = build_http_app(session, HttpConfig(enable_mcp=False))
    return TestClient(app, raise_server_exceptions=False)


def test_list_deals_forwards_limit_and_default_start(client):
    deals = [{"id": 1, "title": "A"}, {"id": 2, "title": "B"}]
    with respx.mock:
        route = respx.get(f"{BASE}/deals").mock(
            return_value=Response(200, json={"success": True, "data": {"data": deals}})
        )
        resp = client.get("/deals?limit=5")

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "data": deals}
    params = route.calls.last.request.url.params
    assert params["limit"] == "5"
    assert params["start"] == "0"


def test_list_query_filters_are_mapped(client):
    with respx.mock:
        route = respx.get(f"{BASE}/deals").mock(
            return_value=Response(200, json={"data": []})
        )
        resp = client.get("/deals?status=won&user_id=abc&stage_id=3&colour=red")

    assert resp.json() == {"success": True, "data": []}
    params = route.calls.last.request.url.params
    assert params["status"] == "won"
    assert params["stage_id"] == "3"
    assert "user_id" not in params
    assert "colour" not in params


def test_delete_failure_is_404(client):
    with respx.mock:
        respx.delete(f"{BASE}/deals/99").mock(
            return_value=Response(200, json={"success": True, "data": {"success": False}})
        )
        resp = client.delete("/deals/99")

    assert resp.status_code == 404
    assert resp.json() == {
        "success": False,
        "error": "Deal not found or could not be deleted",
    }


def test_delete_success(client):
    with respx.mock:
        respx.delete(f"{BASE}/persons/4").mock(
            return_value=Response(200, json={"success": True, "data": {"id": 4}})
        )
        resp = client.delete("/persons/4")

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "Person deleted successfully"}


def test_get_missing_item_is_404(client):
    with respx.mock:
        respx.get(f"{BASE}/organizations/7").mock(
            return_value=Response(200, json={"success": True, "data": None})
        )
        resp = client.get("/organizations/7")

    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Organization not found"}


def test_get_item(client):
    with respx.mock:
        respx.get(f"{BASE}/activities/7").mock(
            return_value=Response(200, json={"data": {"id": 7, "subject": "Call"}})
        )
        resp = client.get("/activities/7")

    assert resp.json() == {"success": True, "data": {"id": 7, "subject": "Call"}}


def test_create_returns_201(client):
    with respx.mock:
        route = respx.post(f"{BASE}/deals").mock(
            return_value=Response(201, json={"data": {"id": 10, "title": "New"}})
        )
        resp = client.post("/deals", json={"title": "New", "value": 100})

    assert resp.status_code == 201
    assert resp.json() == {"success": True, "data": {"id": 10, "title": "New"}}
    assert json.loads(route.calls.last.request.content) == {
        "title": "New",
        "value": 100,
    }


def test_create_invalid_body_is_400(client):
    resp = client.post("/deals", json={"value": 100})

    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["error"].startswith("Invalid request body")


def test_malformed_json_is_400(client):
    resp = client.post(
        "/notes", content=b"{not json", headers={"Content-Type": "application/json"}
    )

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Request body must be valid JSON"}


def test_update_missing_is_404(client):
    with respx.mock:
        respx.put(f"{BASE}/deals/3").mock(return_value=Response(404, json={}))
        resp = client.put("/deals/3", json={"title": "x"})

    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Deal not found"}


def test_update(client):
    with respx.mock:
        respx.put(f"{BASE}/notes/3").mock(
            return_value=Response(200, json={"data": {"id": 3, "content": "x"}})
        )
        resp = client.put("/notes/3", json={"content": "x"})

    assert resp.json() == {"success": True, "data": {"id": 3, "content": "x"}}


def test_read_only_resources_have_no_write_routes(client):
    assert client.post("/pipelines", json={"name": "P"}).status_code == 405
    assert client.delete("/users/1").status_code == 405


def test_stages_are_not_exposed_over_rest(client):
    resp = client.get("/stages")

    assert resp.status_code == 404
    assert resp.json()["success"] is False


def test_users_me_precedes_user_by_id(client):
    with respx.mock:
        me = respx.get(f"{BASE}/users/me").mock(
            return_value=Response(200, json={"data": {"id": 1, "name": "Me"}})
        )
        resp = client.get("/users/me")

    assert me.called
    assert resp.json() == {"success": True, "data": {"id": 1, "name": "Me"}}


@pytest.mark.parametrize(
    "path, upstream, params",
    [
        ("/deals/5/activities", "/deals/5/activities", {}),
        ("/deals/5/notes", "/notes", {"deal_id": "5"}),
        ("/persons/5/deals", "/persons/5/deals", {}),
        ("/persons/5/activities", "/persons/5/activities", {}),
        ("/organizations/5/deals", "/organizations/5/deals", {}),
        ("/organizations/5/persons", "/organizations/5/persons", {}),
        ("/pipelines/5/deals", "/pipelines/5/deals", {}),
        ("/pipelines/5/stages", "/stages", {"pipeline_id": "5"}),
        ("/users/5/deals", "/deals", {"user_id": "5"}),
        ("/users/5/activities", "/activities", {"user_id": "5"}),
    ],
)
def test_relationship_listings(client, path, upstream, params):
    with respx.mock:
        route = respx.get(f"{BASE}{upstream}").mock(
            return_value=Response(200, json={"data": [{"id": 1}]})
        )
        resp = client.get(path)

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "data": [{"id": 1}]}
    sent = route.calls.last.request.url.params
    for key, value in params.items():
        assert sent[key] == value


def test_upstream_status_is_forwarded_when_known(client):
    with respx.mock:
        respx.get(f"{BASE}/deals").mock(
            return_value=Response(429, json={"success": False, "error": "Too many"})
        )
        resp = client.get("/deals")

    assert resp.status_code == 429
    assert resp.json() == {"success": False, "error": "Too many"}


def test_unknown_upstream_status_becomes_500(client):
    with respx.mock:
        respx.get(f"{BASE}/deals").mock(
            return_value=Response(503, json={"success": False, "error": "down"})
        )
        resp = client.get("/deals")

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "down"}


def test_network_failure_is_generic_500(client, caplog):
    with respx.mock:
        respx.get(f"{BASE}/persons").mock(side_effect=httpx.ConnectError("refused"))
        with caplog.at_level(logging.ERROR):
            resp = client.get("/persons")

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "Internal Server Error"}
    assert any("Error getting persons" in r.getMessage() for r in caplog.records)


def test_uninitialized_session_is_500():
    app = build_http_app(GatewaySession(), HttpConfig(enable_mcp=False))
    client = TestClient(app, raise_server_exceptions=False)

    resp = client.get("/deals")

    assert resp.status_code == 500
    assert resp.json() == {
        "success": False,
        "error": "Pipedrive client not initialized",
    }


def test_tools_document(client):
    resp = client.get("/tools")

    assert resp.status_code == 200
    group = resp.json()["tools"][0]
    assert group["name"] == "pipedrive"
    assert {m["name"] for m in group["methods"]} >= {"get_deals", "create_deal"}


def test_request_id_is_echoed(client, caplog):
    with caplog.at_level(logging.INFO, logger="pipedrive_mcp.observability"):
        resp = client.get("/tools", headers={"X-Request-Id": "abc123"})

    assert resp.headers["X-Request-Id"] == "abc123"
    record = next(r for r in caplog.records if r.getMessage() == "http_request")
    assert record.request_id == "abc123"
    assert record.path == "/tools"
    assert record.status == 200


def test_request_id_is_generated(client):
    resp = client.get("/tools")

    assert len(resp.headers["X-Request-Id"]) == 32
