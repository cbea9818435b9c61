"""
Connection Metadata API Tests

POST /connection/metadata replaces metadata, PATCH merges it. Requests
are all-or-nothing across the addressed connections.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from api.routes.connections import get_connection_store
from api.server import create_app
from core.connections.store import Connection, InMemoryConnectionStore


@pytest.fixture
def store():
    store = InMemoryConnectionStore()
    for connection_id, token in (("acme", "tok-acme"), ("globex", "tok-globex")):
        asyncio.run(store.save(Connection(
            connection_id=connection_id,
            provider_config_key="netsuite",
            environment_id=1,
            connection_token=token,
            credentials={"access_token": "secret"},
            metadata={"accountId": "123", "region": "us"},
        )))
    return store


@pytest.fixture
def client(store):
    app = create_app()
    app.dependency_overrides[get_connection_store] = lambda: store
    return TestClient(app)


def metadata_of(store, connection_id, environment_id=1):
    connection = asyncio.run(store.get(connection_id, "netsuite", environment_id))
    return connection.metadata


class TestSetMetadata:

    def test_replaces_metadata(self, client, store):
        body = {"connection_id": "acme", "provider_config_key": "netsuite", "metadata": {"syncSince": "2024-01-01"}}
        response = client.post("/connection/metadata", json=body)

        assert response.status_code == 200
        assert response.json() == body
        assert metadata_of(store, "acme") == {"syncSince": "2024-01-01"}
        assert metadata_of(store, "globex") == {"accountId": "123", "region": "us"}

    def test_multiple_connection_ids(self, client, store):
        body = {"connection_id": ["acme", "globex"], "provider_config_key": "netsuite", "metadata": {"a": 1}}
        assert client.post("/connection/metadata", json=body).status_code == 200
        assert metadata_of(store, "acme") == {"a": 1}
        assert metadata_of(store, "globex") == {"a": 1}

    def test_by_connection_token(self, client, store):
        body = {"connection_token": "tok-globex", "metadata": {"b": 2}}
        assert client.post("/connection/metadata", json=body).status_code == 200
        assert metadata_of(store, "globex") == {"b": 2}


class TestUpdateMetadata:

    def test_merges_metadata(self, client, store):
        body = {"connection_id": "acme", "provider_config_key": "netsuite", "metadata": {"region": "eu", "x": True}}
        response = client.patch("/connection/metadata", json=body)

        assert response.status_code == 200
        assert metadata_of(store, "acme") == {"accountId": "123", "region": "eu", "x": True}


class TestUnknownConnections:

    def test_unknown_id_updates_nothing(self, client, store):
        body = {"connection_id": ["acme", "initech"], "provider_config_key": "netsuite", "metadata": {"a": 1}}
        response = client.post("/connection/metadata", json=body)

        assert response.status_code == 404
        error = response.json()["error"]
        assert error["code"] == "unknown_connection"
        assert "initech" in error["message"]
        assert metadata_of(store, "acme") == {"accountId": "123", "region": "us"}

    def test_unknown_token(self, client):
        response = client.patch("/connection/metadata", json={"connection_token": ["tok-acme", "nope"], "metadata": {}})
        assert response.status_code == 404
        assert "nope" in response.json()["error"]["message"]

    def test_other_environment(self, client):
        body = {"connection_id": "acme", "provider_config_key": "netsuite", "metadata": {}}
        response = client.post("/connection/metadata", json=body, headers={"X-Environment-Id": "2"})
        assert response.status_code == 404


class TestValidation:

    def test_query_params_rejected(self, client):
        body = {"connection_id": "acme", "provider_config_key": "netsuite", "metadata": {}}
        response = client.post("/connection/metadata?force=true", json=body)

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "invalid_query_params"
        assert error["errors"][0]["path"] == ["force"]

    @pytest.mark.parametrize("body", [
        {"connection_id": "acme", "provider_config_key": "netsuite"},
        {"connection_id": "acme", "metadata": {}},
        {"provider_config_key": "netsuite", "metadata": {}},
        {"connection_id": "", "provider_config_key": "netsuite", "metadata": {}},
        {"connection_id": "acme", "provider_config_key": "netsuite", "metadata": "x"},
        {"connection_id": "acme", "provider_config_key": "netsuite", "metadata": {}, "extra": 1},
        ["not", "an", "object"],
    ])
    def test_invalid_body(self, client, body):
        response = client.post("/connection/metadata", json=body)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "invalid_body"

    def test_non_json_body(self, client):
        response = client.post("/connection/metadata", content=b"not json", headers={"Content-Type": "application/json"})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "invalid_body"


def test_health_lists_syncs(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert set(response.json()["syncs"]) >= {"invoices", "payments"}
