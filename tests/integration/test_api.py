"""End-to-end tests of the HTTP API with a mocked upstream transport."""

import uuid

import pytest
from fastapi.testclient import TestClient

from chainpost.dependencies import ServiceContainer, get_container
from chainpost.main import app
from chainpost.services.execution.executor_factory import RequestExecutorFactory
from tests.helpers import RecordingHandler, json_response, mock_client


@pytest.fixture
def upstream() -> RecordingHandler:
    return RecordingHandler(json_response({"token": "abc123", "id": 7}))


@pytest.fixture
def container(upstream) -> ServiceContainer:
    return ServiceContainer(http_client=mock_client(upstream))


@pytest.fixture
def client(container):
    app.dependency_overrides[get_container] = lambda: container
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _create_environment(client: TestClient, **overrides) -> dict:
    payload = {"name": "Dev", "variables": {"baseUrl": "https://api.test"}, **overrides}
    response = client.post("/api/environments", json=payload)
    assert response.status_code == 200
    return response.json()


def _create_rest_request(client: TestClient, **overrides) -> dict:
    payload = {"type": "rest", "name": "Login", "method": "POST", "url": "{{baseUrl}}/login", **overrides}
    response = client.post("/api/requests", json=payload)
    assert response.status_code == 200
    return response.json()


def test_health(client) -> None:
    assert client.get("/health").json() == {"status": "healthy"}


class TestEnvironmentsApi:
    def test_crud(self, client) -> None:
        env = _create_environment(client, variables={"baseUrl": "x", "password": "p"}, secret_variable_names=["password"])

        fetched = client.get(f"/api/environments/{env['id']}").json()
        assert fetched["variables"] == {"baseUrl": "x", "password": "p"}

        listed = client.get("/api/environments").json()
        assert listed[0]["variable_count"] == 2

        updated = client.patch(f"/api/environments/{env['id']}", json={"name": "Renamed"}).json()
        assert updated["name"] == "Renamed"
        assert updated["variables"]["password"] == "p"

        assert client.delete(f"/api/environments/{env['id']}").status_code == 200
        assert client.get(f"/api/environments/{env['id']}").status_code == 404

    def test_activate(self, client) -> None:
        env = _create_environment(client)

        assert client.post(f"/api/environments/{env['id']}/activate").status_code == 200

        assert client.get("/api/environments/active").json()["id"] == env["id"]
        assert client.get("/api/environments").json()[0]["is_active"] is True

    def test_unknown_environment(self, client) -> None:
        assert client.post(f"/api/environments/{uuid.uuid4()}/activate").status_code == 404
        assert client.patch(f"/api/environments/{uuid.uuid4()}", json={"name": "x"}).status_code == 404


class TestCollectionsApi:
    def test_children(self, client) -> None:
        parent = client.post("/api/collections", json={"name": "Root"}).json()
        client.post("/api/collections", json={"name": "Child", "parent_collection_id": parent["id"]})

        children = client.get(f"/api/collections/{parent['id']}/children").json()

        assert [c["name"] for c in children] == ["Child"]
        assert [c["name"] for c in client.get("/api/collections").json()] == ["Root"]

    def test_unknown_parent(self, client) -> None:
        response = client.post("/api/collections", json={"name": "Orphan", "parent_collection_id": str(uuid.uuid4())})
        assert response.status_code == 404


class TestRequestsApi:
    def test_create_variants(self, client) -> None:
        rest = _create_rest_request(client)
        graphql = client.post("/api/requests", json={"type": "graphql", "name": "Q", "query": "{ ping }"}).json()
        websocket = client.post("/api/requests", json={"type": "websocket", "name": "WS", "message": "hi"}).json()

        assert rest["type"] == "rest" and rest["method"] == "POST"
        assert graphql["type"] == "graphql" and graphql["query"] == "{ ping }"
        assert websocket["type"] == "websocket" and websocket["message"] == "hi"
        assert len(client.get("/api/requests").json()) == 3

    def test_unknown_type_rejected(self, client) -> None:
        assert client.post("/api/requests", json={"type": "ftp", "name": "x"}).status_code == 422

    def test_update_keeps_id(self, client) -> None:
        created = _create_rest_request(client)

        updated = client.put(
            f"/api/requests/{created['id']}",
            json={"type": "rest", "name": "Renamed", "url": "https://other.test"},
        ).json()

        assert updated["id"] == created["id"]
        assert client.get(f"/api/requests/{created['id']}").json()["name"] == "Renamed"

    def test_execute_with_environment(self, client, upstream) -> None:
        env = _create_environment(client)
        request = _create_rest_request(
            client,
            response_extractions=[{"pattern": "$.token", "variable_name": "token"}],
        )

        response = client.post(f"/api/requests/{request['id']}/execute", params={"environment_id": env["id"]})

        assert response.status_code == 200
        assert response.json()["status_code"] == 200
        assert str(upstream.request.url) == "https://api.test/login"
        assert client.get(f"/api/environments/{env['id']}").json()["variables"]["token"] == "abc123"

    def test_execute_uses_active_environment(self, client, upstream) -> None:
        env = _create_environment(client, variables={"baseUrl": "https://active.test"})
        client.post(f"/api/environments/{env['id']}/activate")
        request = _create_rest_request(client)

        client.post(f"/api/requests/{request['id']}/execute")

        assert upstream.request.url.host == "active.test"

    def test_execute_unknown_ids(self, client) -> None:
        assert client.post(f"/api/requests/{uuid.uuid4()}/execute").status_code == 404

        request = _create_rest_request(client)
        response = client.post(
            f"/api/requests/{request['id']}/execute",
            params={"environment_id": str(uuid.uuid4())},
        )
        assert response.status_code == 404

    def test_execute_without_executor(self, client, container) -> None:
        container.request_service.executor_factory = RequestExecutorFactory([])
        request = _create_rest_request(client)

        response = client.post(f"/api/requests/{request['id']}/execute")

        assert response.status_code == 422
        assert "No executor found" in response.json()["detail"]


class TestFlowsApi:
    def test_create_and_execute(self, client, upstream) -> None:
        env = _create_environment(client)
        login = _create_rest_request(
            client,
            response_extractions=[{"pattern": "$.token", "variable_name": "token"}],
        )
        profile = _create_rest_request(
            client, name="Profile", method="GET", url="{{baseUrl}}/me",
            headers={"Authorization": "Bearer {{token}}"},
        )
        flow = client.post("/api/flows", json={
            "name": "Login then profile",
            "steps": [
                {"order": 2, "request_id": profile["id"]},
                {"order": 1, "request_id": login["id"]},
            ],
        }).json()

        result = client.post(f"/api/flows/{flow['id']}/execute", json={"environment_id": env["id"]}).json()

        assert result["status"] == "completed"
        assert [s["request_name"] for s in result["step_results"]] == ["Login", "Profile"]
        assert upstream.requests[-1].headers["Authorization"] == "Bearer abc123"
        assert "token" not in client.get(f"/api/environments/{env['id']}").json()["variables"]

    def test_missing_step_request_rejected(self, client) -> None:
        response = client.post("/api/flows", json={
            "name": "Broken",
            "steps": [{"order": 1, "request_id": str(uuid.uuid4())}],
        })
        assert response.status_code == 404

    def test_execute_unknown_flow_or_environment(self, client) -> None:
        env = _create_environment(client)
        assert client.post(f"/api/flows/{uuid.uuid4()}/execute", json={"environment_id": env["id"]}).status_code == 404

        flow = client.post("/api/flows", json={"name": "Empty"}).json()
        response = client.post(f"/api/flows/{flow['id']}/execute", json={"environment_id": str(uuid.uuid4())})
        assert response.status_code == 404

    def test_update_and_delete(self, client) -> None:
        flow = client.post("/api/flows", json={"name": "Flow"}).json()

        updated = client.patch(f"/api/flows/{flow['id']}", json={"name": "Renamed"}).json()
        assert updated["name"] == "Renamed"

        assert client.delete(f"/api/flows/{flow['id']}").status_code == 200
        assert client.get(f"/api/flows/{flow['id']}").status_code == 404


class TestHistoryApi:
    def test_list_and_clear(self, client) -> None:
        env = _create_environment(client)
        request = _create_rest_request(client)
        for _ in range(2):
            client.post(f"/api/requests/{request['id']}/execute", params={"environment_id": env["id"]})

        history = client.get("/api/history").json()
        assert len(history) == 2
        assert history[0]["request_name"] == "Login"

        assert client.delete("/api/history").status_code == 200
        assert client.get("/api/history").json() == []
