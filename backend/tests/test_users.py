# tests/test_users.py — User management router tests
import pytest
from httpx import AsyncClient
from sqlalchemy import select, func

from models import Business, Task
from tests.conftest import get_auth_headers


@pytest.mark.asyncio
async def test_list_users_as_admin(client: AsyncClient, admin_user, test_user):
    """Admin gets users as edges with page info"""
    headers = get_auth_headers(admin_user)
    resp = await client.get("/users", headers=headers)
    assert resp.status_code == 200
    data = resp.json()
    assert len(data["edges"]) == 2
    assert data["page_info"]["total"] == 2
    assert data["page_info"]["has_next_page"] is False
    assert data["page_info"]["has_previous_page"] is False


@pytest.mark.asyncio
async def test_list_users_search_and_paging(client: AsyncClient, admin_user, test_user, other_user):
    headers = get_auth_headers(admin_user)
    resp = await client.get("/users", params={"search": "other"}, headers=headers)
    assert [u["email"] for u in resp.json()["edges"]] == ["other@taskhub.dev"]

    resp = await client.get("/users", params={"page": 1, "limit": 2}, headers=headers)
    page = resp.json()
    assert len(page["edges"]) == 2
    assert page["page_info"]["has_next_page"] is True

    resp = await client.get("/users", params={"page": 2, "limit": 2}, headers=headers)
    page = resp.json()
    assert len(page["edges"]) == 1
    assert page["page_info"]["has_previous_page"] is True


@pytest.mark.asyncio
async def test_list_users_forbidden_for_regular_user(client: AsyncClient, test_user):
    """Regular users cannot list users"""
    resp = await client.get("/users", headers=get_auth_headers(test_user))
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_admin_creates_user_with_role(client: AsyncClient, admin_user):
    resp = await client.post(
        "/users",
        json={"name": "Second Admin", "email": "second@taskhub.dev", "password": "SecurePass123!", "role": "admin"},
        headers=get_auth_headers(admin_user),
    )
    assert resp.status_code == 200
    assert resp.json()["role"] == "admin"


@pytest.mark.asyncio
async def test_get_user_by_id(client: AsyncClient, admin_user, test_user):
    headers = get_auth_headers(admin_user)
    resp = await client.get(f"/users/{test_user.id}", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["email"] == test_user.email

    resp = await client.get("/users/missing", headers=headers)
    assert resp.status_code == 404
    assert resp.json()["error"] == "User not found"


@pytest.mark.asyncio
async def test_update_self(client: AsyncClient, test_user):
    resp = await client.put(
        f"/users/{test_user.id}", json={"name": "Renamed"}, headers=get_auth_headers(test_user),
    )
    assert resp.status_code == 200
    assert resp.json()["name"] == "Renamed"
    assert resp.json()["email"] == test_user.email


@pytest.mark.asyncio
async def test_update_other_user_forbidden(client: AsyncClient, test_user, other_user):
    resp = await client.put(
        f"/users/{other_user.id}", json={"name": "Hacked"}, headers=get_auth_headers(test_user),
    )
    assert resp.status_code == 401
    assert resp.json()["error"] == "Updating user is forbidden"


@pytest.mark.asyncio
async def test_admin_updates_anyone(client: AsyncClient, admin_user, test_user, other_user):
    headers = get_auth_headers(admin_user)
    resp = await client.put(f"/users/{test_user.id}", json={"email": "fresh@taskhub.dev"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["email"] == "fresh@taskhub.dev"

    resp = await client.put(f"/users/{test_user.id}", json={"email": other_user.email}, headers=headers)
    assert resp.status_code == 500
    assert resp.json()["error"] == "Email already in use"


@pytest.mark.asyncio
async def test_delete_user_cascades(client: AsyncClient, db_session, test_user, other_user):
    headers = get_auth_headers(test_user)
    await client.post(
        "/tasks",
        json={"title": "Doomed", "status": "todo", "subtasks": [{"title": "Also doomed", "status": "todo"}]},
        headers=headers,
    )
    await client.post(
        "/businesses",
        data={
            "name": "Doomed Ltd", "employee_count": "1", "phone_number": "1",
            "email": "doomed@example.com", "country": "UK", "city": "Hull",
        },
        headers=headers,
    )

    resp = await client.delete(f"/users/{test_user.id}", headers=get_auth_headers(other_user))
    assert resp.status_code == 401
    assert resp.json()["error"] == "Deleting user is forbidden"

    resp = await client.delete(f"/users/{test_user.id}", headers=headers)
    assert resp.status_code == 204

    result = await db_session.execute(select(func.count(Task.id)))
    assert result.scalar() == 0
    result = await db_session.execute(select(func.count(Business.id)))
    assert result.scalar() == 0

    # Tokens of a deleted account stop working
    resp = await client.get("/auth/me", headers=headers)
    assert resp.status_code == 401
