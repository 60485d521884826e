# tests/test_auth.py — Authentication & authorization tests
from datetime import timedelta

import pytest
from httpx import AsyncClient

from auth import AuthService
from tests.conftest import get_auth_headers, TEST_PASSWORD


@pytest.mark.asyncio
class TestRegistration:
    async def test_register_success(self, client: AsyncClient):
        res = await client.post("/auth/register", json={
            "name": "New User",
            "email": "newuser@test.com",
            "password": "SecurePass123!",
        })
        assert res.status_code == 200
        data = res.json()
        assert data["email"] == "newuser@test.com"
        assert data["role"] == "user"
        assert "password" not in data
        assert "password_hash" not in data

    async def test_register_admin(self, client: AsyncClient):
        res = await client.post("/auth/register-admin", json={
            "name": "Boss",
            "email": "boss@test.com",
            "password": "SecurePass123!",
        })
        assert res.status_code == 200
        assert res.json()["role"] == "admin"

    async def test_register_weak_password(self, client: AsyncClient):
        res = await client.post("/auth/register", json={
            "name": "Weak",
            "email": "weak@test.com",
            "password": "short",
        })
        assert res.status_code == 400

    async def test_register_name_length(self, client: AsyncClient):
        res = await client.post("/auth/register", json={
            "name": "X",
            "email": "x@test.com",
            "password": "SecurePass123!",
        })
        assert res.status_code == 400

    async def test_register_duplicate_email(self, client: AsyncClient):
        payload = {"name": "Dupe", "email": "dupe@test.com", "password": "SecurePass123!"}
        await client.post("/auth/register", json=payload)
        res = await client.post("/auth/register", json=payload)
        assert res.status_code == 500
        assert res.json()["error"] == "Email already in use"

    async def test_register_invalid_email(self, client: AsyncClient):
        res = await client.post("/auth/register", json={
            "name": "Bad Mail",
            "email": "not-an-email",
            "password": "SecurePass123!",
        })
        assert res.status_code == 400


@pytest.mark.asyncio
class TestLogin:
    async def test_login_success(self, client: AsyncClient, test_user):
        res = await client.post("/auth/login", json={
            "email": "testuser@taskhub.dev",
            "password": TEST_PASSWORD,
        })
        assert res.status_code == 200
        data = res.json()
        assert "access_token" in data
        assert "refresh_token" in data
        assert data["user"]["email"] == "testuser@taskhub.dev"

        me = await client.get("/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"})
        assert me.status_code == 200
        assert me.json()["id"] == test_user.id

    async def test_login_wrong_password(self, client: AsyncClient, test_user):
        res = await client.post("/auth/login", json={
            "email": "testuser@taskhub.dev",
            "password": "WrongPassword123!",
        })
        assert res.status_code == 401
        assert res.json()["error"] == "Invalid username or password"

    async def test_login_nonexistent_user(self, client: AsyncClient):
        res = await client.post("/auth/login", json={
            "email": "nobody@test.com",
            "password": "SomePassword123!",
        })
        assert res.status_code == 401


@pytest.mark.asyncio
class TestTokens:
    async def test_access_protected_route(self, client: AsyncClient, test_user):
        res = await client.get("/auth/me", headers=get_auth_headers(test_user))
        assert res.status_code == 200
        assert res.json()["email"] == test_user.email

    async def test_missing_token(self, client: AsyncClient):
        res = await client.get("/auth/me")
        assert res.status_code in (401, 403)

    async def test_garbage_token(self, client: AsyncClient):
        res = await client.get("/auth/me", headers={"Authorization": "Bearer not.a.token"})
        assert res.status_code == 401

    async def test_expired_token(self, client: AsyncClient, test_user):
        token = AuthService.create_access_token({"sub": test_user.id}, expires_delta=timedelta(seconds=-1))
        res = await client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert res.status_code == 401
        assert res.json()["error"] == "Token expired"

    async def test_refresh_token_cannot_access(self, client: AsyncClient, test_user):
        token = AuthService.create_refresh_token({"sub": test_user.id})
        res = await client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert res.status_code == 401

    async def test_refresh(self, client: AsyncClient, test_user):
        token = AuthService.create_refresh_token({"sub": test_user.id})
        res = await client.post("/auth/refresh", json={"refresh_token": token})
        assert res.status_code == 200
        assert res.json()["user"]["id"] == test_user.id

    async def test_refresh_rejects_access_token(self, client: AsyncClient, test_user):
        token = AuthService.create_access_token({"sub": test_user.id})
        res = await client.post("/auth/refresh", json={"refresh_token": token})
        assert res.status_code == 401

    async def test_verify_token(self, client: AsyncClient, admin_user):
        res = await client.post("/auth/verify-token", headers=get_auth_headers(admin_user))
        assert res.status_code == 200
        assert res.json() == {"valid": True, "user_id": admin_user.id, "role": "admin"}


@pytest.mark.asyncio
class TestChangePassword:
    async def test_change_password(self, client: AsyncClient, test_user):
        headers = get_auth_headers(test_user)
        res = await client.post("/auth/change-password", json={
            "old_password": TEST_PASSWORD,
            "new_password": "BrandNewPass456!",
        }, headers=headers)
        assert res.status_code == 200

        res = await client.post("/auth/login", json={
            "email": test_user.email,
            "password": "BrandNewPass456!",
        })
        assert res.status_code == 200

    async def test_change_password_wrong_old(self, client: AsyncClient, test_user):
        res = await client.post("/auth/change-password", json={
            "old_password": "not-my-password",
            "new_password": "BrandNewPass456!",
        }, headers=get_auth_headers(test_user))
        assert res.status_code == 401
        assert res.json()["error"] == "Invalid password"


class TestPasswordHashing:
    def test_hash_and_verify(self):
        hashed = AuthService.hash_password("CorrectHorse1")
        assert hashed != "CorrectHorse1"
        assert AuthService.verify_password("CorrectHorse1", hashed)
        assert not AuthService.verify_password("WrongHorse1", hashed)

    def test_overlong_password_never_verifies(self):
        hashed = AuthService.hash_password("CorrectHorse1")
        assert not AuthService.verify_password("x" * 100, hashed)
