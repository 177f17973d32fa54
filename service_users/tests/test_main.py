"""
Unit tests for Users main service.
"""

import pytest
from fastapi.testclient import TestClient

from service_users.app.main import UsersService, create_app
from service_users.app.repository import USERS_CACHE_KEY


class TestUsersService:
    """Test cases for UsersService."""

    @pytest.fixture
    def users_service(self, config, store, cache):
        """Create UsersService with in-memory store and cache."""
        return UsersService(config, store=store, cache=cache)

    @pytest.fixture
    def client(self, users_service):
        """Create test client; entering it runs the app lifespan."""
        with TestClient(users_service.app) as client:
            yield client

    @pytest.fixture
    def registration(self):
        return {"name": "Al", "password": "x", "email": "a@x.com", "age": 21}

    def test_service_initialization(self, users_service):
        assert users_service.service_name == "users"
        assert users_service.port == 8080
        assert users_service.repository.repository is users_service.store
        assert users_service.repository.cache is users_service.cache
        assert users_service.user_service.repository is users_service.repository

    def test_lifespan_starts_and_stops_store(self, users_service, store):
        with TestClient(users_service.app):
            assert store.started is True
        assert store.started is False

    def test_root_endpoint(self, client):
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "users"
        assert "caching" in data["capabilities"]

    def test_create_user(self, client, registration):
        """Registration answers 201 with the id as plain text."""
        response = client.post("/user", json=registration)

        assert response.status_code == 201
        assert response.text == "1"
        assert response.headers["content-type"].startswith("text/plain")

    def test_create_user_malformed_json(self, client, store):
        response = client.post("/user", content=b"{not json")

        assert response.status_code == 400
        assert response.headers["content-type"].startswith("text/plain")
        assert store.create_calls == 0

    @pytest.mark.parametrize("body", [b"[1, 2]", b'{"age": "twenty"}', b'{"name": 5, "age": 30}', b""])
    def test_create_user_undecodable_body(self, client, body):
        response = client.post("/user", content=body)
        assert response.status_code == 400

    def test_create_underage_user(self, client, store, registration):
        """Validation failures map to 500 with a plain text message."""
        registration["age"] = 17

        response = client.post("/user", json=registration)

        assert response.status_code == 500
        assert "less than 18" in response.text
        assert store.create_calls == 0

    def test_missing_age_is_rejected_by_rule(self, client):
        response = client.post("/user", json={"name": "Al", "email": "a@x.com"})
        assert response.status_code == 500

    @pytest.mark.parametrize("body", [b"null", b'{"name": "Al", "age": null}'])
    def test_null_decodes_to_zero_values(self, client, store, body):
        """JSON nulls are valid bodies; the zero age then fails the age rule."""
        response = client.post("/user", content=body)

        assert response.status_code == 500
        assert "less than 18" in response.text
        assert store.create_calls == 0

    def test_keys_match_case_insensitively(self, client):
        response = client.post(
            "/user",
            json={"Name": "Al", "PASSWORD": "x", "Email": "a@x.com", "Age": 21},
        )

        assert response.status_code == 201
        assert client.get("/users").json() == [
            {"id": 1, "name": "Al", "password": "x", "email": "a@x.com", "age": 21}
        ]

    def test_create_duplicate_email(self, client, registration):
        """Constraint violations also map to 500."""
        assert client.post("/user", json=registration).status_code == 201

        registration.update(name="Bo", password="y", age=25)
        response = client.post("/user", json=registration)

        assert response.status_code == 500
        assert "a@x.com" in response.text

    def test_list_users_empty(self, client):
        response = client.get("/users")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json"
        assert response.json() == []

    def test_registration_scenario(self, client):
        assert client.post("/user", json={"name": "Al", "password": "x", "email": "a@x.com", "age": 17}).status_code == 500
        created = client.post("/user", json={"name": "Al", "password": "x", "email": "a@x.com", "age": 21})
        assert created.status_code == 201
        assert created.text == "1"
        assert client.post("/user", json={"name": "Bo", "password": "y", "email": "a@x.com", "age": 25}).status_code == 500

        response = client.get("/users")
        assert response.status_code == 200
        assert response.json() == [
            {"id": 1, "name": "Al", "password": "x", "email": "a@x.com", "age": 21}
        ]

    def test_list_users_served_from_cache(self, client, store, cache, registration):
        client.post("/user", json=registration)
        first = client.get("/users")
        assert USERS_CACHE_KEY in cache.entries

        store.available = False
        second = client.get("/users")

        assert second.status_code == 200
        assert second.json() == first.json()

    def test_list_users_store_failure(self, client, store):
        store.available = False

        response = client.get("/users")

        assert response.status_code == 500
        assert "connection refused" in response.text

    def test_create_then_list_reflects_new_user(self, client, registration):
        client.post("/user", json=registration)
        assert len(client.get("/users").json()) == 1

        registration.update(name="Bo", email="b@x.com")
        client.post("/user", json=registration)

        assert [u["email"] for u in client.get("/users").json()] == ["a@x.com", "b@x.com"]

    def test_health_endpoint(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "users"
        assert data["status"] == "ok"
        assert data["dependencies"] == {"redis": "ok", "postgres": "ok"}

    def test_health_reports_store_outage(self, client, store):
        store.available = False
        data = client.get("/health").json()
        assert data["dependencies"]["postgres"] == "error"

    def test_request_id_echoed(self, client):
        response = client.get("/", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"

    def test_metrics_endpoint(self, client, registration):
        client.post("/user", json=registration)

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "users_created_total 1.0" in response.text


def test_create_app_builds_default_backends(config):
    """Without injected backends the app wires PostgreSQL and Redis."""
    app = create_app(config=config)
    assert app.title == "Users Service"
