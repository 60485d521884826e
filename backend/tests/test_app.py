# tests/test_app.py — Application-level behaviour (health, headers, error bodies)
import pytest
from httpx import AsyncClient

from errors import AppError, BusinessEmailExists, CategoryExists, MissingFields, NotOwner, TaskNotFound
from tests.conftest import get_auth_headers


@pytest.mark.asyncio
async def test_root(client: AsyncClient):
    resp = await client.get("/")
    assert resp.status_code == 200
    assert resp.json()["name"] == "Task Manager API"


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert "database" in resp.json()


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient):
    resp = await client.get("/", headers={"X-Request-ID": "abc-123"})
    assert resp.headers["X-Request-ID"] == "abc-123"
    assert resp.headers["X-Correlation-ID"] == "abc-123"
    assert resp.headers["X-Content-Type-Options"] == "nosniff"


@pytest.mark.asyncio
async def test_domain_error_body(client: AsyncClient, test_user):
    resp = await client.get(
        "/tasks/unknown", headers={**get_auth_headers(test_user), "X-Request-ID": "rid-1"},
    )
    assert resp.status_code == 404
    assert resp.json() == {"error": "Task not found", "code": "TM-TASK-001", "request_id": "rid-1"}


class TestErrorTaxonomy:
    def test_statuses(self):
        assert TaskNotFound().http_status == 404
        assert NotOwner().http_status == 401
        assert CategoryExists().http_status == 500
        assert BusinessEmailExists().http_status == 409
        assert MissingFields(["a"]).http_status == 400

    def test_message_override(self):
        err = AppError("Something specific")
        assert err.to_dict() == {"error": "Something specific", "code": "TM-SYS-001"}
        assert str(err) == "Something specific"

    def test_missing_fields_message(self):
        assert MissingFields(["title", "status"]).message == "Missing required fields: title, status"
