"""Tests for the HTTP front door and its session routing."""

import pytest
from starlette.responses import PlainTextResponse
from starlette.testclient import TestClient

from http_app import create_app
from server import create_server
from transports.sessions import SessionStore

MCP_HEADERS = {
    "Accept": "application/json, text/event-stream",
    "Content-Type": "application/json",
}

INITIALIZE = {
    "jsonrpc": "2.0",
    "id": 1,
    "method": "initialize",
    "params": {
        "protocolVersion": "2025-03-26",
        "capabilities": {},
        "clientInfo": {"name": "pytest", "version": "1.0"},
    },
}


class FakeChannel:
    """Stands in for a transport channel; answers with its own label."""

    def __init__(self, label):
        self.label = label
        self.requests = []

    async def handle_request(self, scope, receive, send):
        self.requests.append(scope["method"])
        await PlainTextResponse(self.label)(scope, receive, send)

    handle_post_message = handle_request


@pytest.fixture
def stores():
    return SessionStore("streamable"), SessionStore("sse")


@pytest.fixture
def app(registry, stores):
    streamable_sessions, sse_sessions = stores
    return create_app(
        create_server(registry),
        streamable_sessions=streamable_sessions,
        sse_sessions=sse_sessions,
        json_response=True,
    )


class TestHealth:
    """Test suite for the liveness route."""

    def test_root(self, app):
        response = TestClient(app).get("/")

        assert response.status_code == 200
        assert response.text == "trello-mcp is running"


class TestSseMessages:
    """Test suite for POST /messages."""

    def test_unknown_session_is_rejected(self, app, stores, trello_client):
        _, sse_sessions = stores
        other = FakeChannel("other")
        sse_sessions.create("known", other)

        response = TestClient(app).post(
            "/messages?sessionId=never-issued",
            json={"jsonrpc": "2.0", "id": 1, "method": "tools/call",
                  "params": {"name": "trello_list_boards", "arguments": {}}},
        )

        assert response.status_code == 400
        assert response.text == "No transport found for sessionId"
        assert other.requests == []
        trello_client.call.assert_not_called()

    def test_missing_session_id_is_rejected(self, app):
        response = TestClient(app).post("/messages", json={"jsonrpc": "2.0", "method": "ping", "id": 1})
        assert response.status_code == 400

    def test_known_session_is_forwarded(self, app, stores):
        _, sse_sessions = stores
        first, second = FakeChannel("first"), FakeChannel("second")
        sse_sessions.create("s1", first)
        sse_sessions.create("s2", second)

        response = TestClient(app).post("/messages?sessionId=s2", json={"jsonrpc": "2.0", "method": "ping", "id": 1})

        assert response.text == "second"
        assert second.requests == ["POST"]
        assert first.requests == []

    def test_get_not_allowed(self, app):
        assert TestClient(app).get("/messages").status_code == 405


class TestStreamableRouting:
    """Test suite for /mcp session routing."""

    def test_known_session_routes_to_its_channel(self, app, stores):
        streamable_sessions, _ = stores
        first, second = FakeChannel("first"), FakeChannel("second")
        streamable_sessions.create("s1", first)
        streamable_sessions.create("s2", second)
        client = TestClient(app)

        assert client.post("/mcp", headers={"mcp-session-id": "s1"}, json={}).text == "first"
        assert client.get("/mcp", headers={"mcp-session-id": "s1"}).text == "first"
        assert client.delete("/mcp", headers={"mcp-session-id": "s2"}).text == "second"

        assert first.requests == ["POST", "GET"]
        assert second.requests == ["DELETE"]

    def test_unknown_session_is_rejected(self, app, stores):
        streamable_sessions, _ = stores
        existing = FakeChannel("existing")
        streamable_sessions.create("s1", existing)

        response = TestClient(app).post("/mcp", headers={"mcp-session-id": "stale"}, json={})

        assert response.status_code == 400
        assert existing.requests == []
        assert streamable_sessions.ids() == ["s1"]


class TestStreamableSessions:
    """End-to-end MCP handshake over /mcp."""

    def test_initialize_then_resume(self, app, stores):
        streamable_sessions, _ = stores

        with TestClient(app) as client:
            init = client.post("/mcp", json=INITIALIZE, headers=MCP_HEADERS)

            assert init.status_code == 200
            session_id = init.headers["mcp-session-id"]
            assert session_id in streamable_sessions
            assert init.json()["result"]["serverInfo"]["name"] == "trello-mcp"

            resumed = {**MCP_HEADERS, "mcp-session-id": session_id, "mcp-protocol-version": "2025-03-26"}
            initialized = client.post(
                "/mcp", json={"jsonrpc": "2.0", "method": "notifications/initialized"}, headers=resumed
            )
            assert initialized.status_code == 202

            listed = client.post("/mcp", json={"jsonrpc": "2.0", "id": 2, "method": "tools/list"}, headers=resumed)
            assert listed.status_code == 200
            names = [t["name"] for t in listed.json()["result"]["tools"]]
            assert names == ["trello_list_boards", "trello_list_lists", "trello_create_card"]
            assert len(streamable_sessions) == 1

        assert len(streamable_sessions) == 0

    def test_each_initialize_gets_its_own_session(self, app, stores):
        streamable_sessions, _ = stores

        with TestClient(app) as client:
            first = client.post("/mcp", json=INITIALIZE, headers=MCP_HEADERS)
            second = client.post("/mcp", json=INITIALIZE, headers=MCP_HEADERS)

            assert first.headers["mcp-session-id"] != second.headers["mcp-session-id"]
            assert len(streamable_sessions) == 2

    def test_delete_closes_session(self, app, stores):
        streamable_sessions, _ = stores

        with TestClient(app) as client:
            init = client.post("/mcp", json=INITIALIZE, headers=MCP_HEADERS)
            session_id = init.headers["mcp-session-id"]
            resumed = {**MCP_HEADERS, "mcp-session-id": session_id, "mcp-protocol-version": "2025-03-26"}

            deleted = client.delete("/mcp", headers=resumed)

            assert deleted.status_code == 200
            assert session_id not in streamable_sessions
            stale = client.post("/mcp", json={"jsonrpc": "2.0", "id": 2, "method": "tools/list"}, headers=resumed)
            assert stale.status_code == 400
            assert len(streamable_sessions) == 0


class TestStreamableWithoutSession:
    """Requests to /mcp that carry no mcp-session-id."""

    def test_non_initialize_post_opens_nothing(self, app, stores):
        streamable_sessions, _ = stores

        with TestClient(app) as client:
            for request_id in range(5):
                response = client.post(
                    "/mcp",
                    json={"jsonrpc": "2.0", "id": request_id, "method": "tools/list"},
                    headers=MCP_HEADERS,
                )
                assert response.status_code == 400
                assert "mcp-session-id" not in response.headers

            assert len(streamable_sessions) == 0

    @pytest.mark.parametrize("method", ["GET", "DELETE"])
    def test_other_methods_open_nothing(self, app, stores, method):
        streamable_sessions, _ = stores

        with TestClient(app) as client:
            response = client.request(method, "/mcp", headers=MCP_HEADERS)

            assert response.status_code == 400
            assert len(streamable_sessions) == 0

    def test_unparseable_body_opens_nothing(self, app, stores):
        streamable_sessions, _ = stores

        with TestClient(app) as client:
            response = client.post("/mcp", content=b"{not json", headers=MCP_HEADERS)

            assert response.status_code == 400
            assert len(streamable_sessions) == 0

    def test_rejected_initialize_leaves_no_session(self, app, stores):
        streamable_sessions, _ = stores

        with TestClient(app) as client:
            response = client.post(
                "/mcp",
                json=INITIALIZE,
                headers={"Accept": "text/plain", "Content-Type": "application/json"},
            )

            assert response.status_code >= 400
            assert len(streamable_sessions) == 0
