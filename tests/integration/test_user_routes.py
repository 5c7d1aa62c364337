"""
Integration tests for user routes.

Tests cover:
- Signup validation and conflicts
- Own account read, update and deletion
- Admin-only access to other accounts
- Path parameter resolution errors
"""

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from calendarium.models import UserPassword, UserSession


# ============================================================================
# Signup Tests
# ============================================================================
class TestSignup:
    """Test the public signup endpoint."""

    @pytest.mark.asyncio
    async def test_signup_success(self, async_client: AsyncClient):
        response = await async_client.post(
            "/user",
            json={"lastname": "D", "firstname": "J", "email": "j@x.io", "password": "secret1"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert isinstance(body["data"]["user_id"], int)

    @pytest.mark.asyncio
    async def test_signup_duplicate_email(self, async_client: AsyncClient, test_user):
        response = await async_client.post(
            "/user",
            json={"lastname": "X", "firstname": "Y", "email": "j@x.io", "password": "secret2"},
        )

        assert response.status_code == 409
        assert response.json() == {"success": False, "error": "UserAlreadyExists"}

    @pytest.mark.asyncio
    async def test_signup_short_password(self, async_client: AsyncClient):
        response = await async_client.post(
            "/user",
            json={"lastname": "D", "firstname": "J", "email": "j@x.io", "password": "12345"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "PasswordTooShort"

    @pytest.mark.asyncio
    async def test_signup_invalid_email(self, async_client: AsyncClient):
        response = await async_client.post(
            "/user",
            json={"lastname": "D", "firstname": "J", "email": "nope", "password": "secret1"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidData"

    @pytest.mark.asyncio
    async def test_signup_missing_field(self, async_client: AsyncClient):
        response = await async_client.post(
            "/user", json={"lastname": "D", "email": "j@x.io", "password": "secret1"}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidData"

    @pytest.mark.asyncio
    async def test_email_reusable_after_deletion(self, async_client: AsyncClient, test_user):
        """Uniqueness only holds among live users."""
        await async_client.delete("/user/me", headers=test_user["headers"])

        response = await async_client.post(
            "/user",
            json={"lastname": "D", "firstname": "J", "email": "j@x.io", "password": "secret1"},
        )

        assert response.status_code == 201


# ============================================================================
# Own Account Tests
# ============================================================================
class TestOwnAccount:
    """Test the /user/me endpoints."""

    @pytest.mark.asyncio
    async def test_get_me(self, async_client: AsyncClient, test_user):
        response = await async_client.get("/user/me", headers=test_user["headers"])

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user_id"] == test_user["user_id"]
        assert data["email"] == "j@x.io"
        assert "password" not in data

    @pytest.mark.asyncio
    async def test_update_without_fields_advances_updated_at(
        self, async_client: AsyncClient, test_user, clock
    ):
        clock.advance(minutes=5)

        response = await async_client.put("/user/me", json={}, headers=test_user["headers"])

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["updated_at"] is not None
        assert data["firstname"] == "Jane"

    @pytest.mark.asyncio
    async def test_update_invalid_email_format(self, async_client: AsyncClient, test_user):
        response = await async_client.put(
            "/user/me", json={"email": "bad@format"}, headers=test_user["headers"]
        )

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidEmailFormat"

    @pytest.mark.asyncio
    async def test_update_short_password(self, async_client: AsyncClient, test_user):
        response = await async_client.put(
            "/user/me", json={"password": "abc"}, headers=test_user["headers"]
        )

        assert response.status_code == 400
        assert response.json()["error"] == "PasswordTooShort"

    @pytest.mark.asyncio
    async def test_update_email_taken(self, async_client: AsyncClient, test_user, other_user):
        response = await async_client.put(
            "/user/me", json={"email": "k@x.io"}, headers=test_user["headers"]
        )

        assert response.status_code == 409
        assert response.json()["error"] == "UserAlreadyExists"

    @pytest.mark.asyncio
    async def test_update_own_email_unchanged(self, async_client: AsyncClient, test_user):
        """Re-submitting one's own email is not a conflict."""
        response = await async_client.put(
            "/user/me", json={"email": "j@x.io", "lastname": "Roe"}, headers=test_user["headers"]
        )

        assert response.status_code == 200
        assert response.json()["data"]["lastname"] == "Roe"

    @pytest.mark.asyncio
    async def test_login_with_updated_mixed_case_email(
        self, async_client: AsyncClient, test_user
    ):
        """The email typed into the update also works at login."""
        response = await async_client.put(
            "/user/me", json={"email": "New@Example.COM"}, headers=test_user["headers"]
        )
        assert response.status_code == 200
        assert response.json()["data"]["email"] == "New@example.com"

        login = await async_client.post(
            "/auth/login", json={"email": "New@Example.COM", "password": "secret1"}
        )

        assert login.status_code == 200
        assert login.json()["data"]["user"]["user_id"] == test_user["user_id"]

    @pytest.mark.asyncio
    async def test_update_email_taken_in_other_case(
        self, async_client: AsyncClient, sign_up, test_user
    ):
        await sign_up("Ann@Example.COM")

        response = await async_client.put(
            "/user/me", json={"email": "Ann@EXAMPLE.com"}, headers=test_user["headers"]
        )

        assert response.status_code == 409
        assert response.json()["error"] == "UserAlreadyExists"

    @pytest.mark.asyncio
    async def test_signup_email_reads_back_as_stored(self, async_client: AsyncClient, sign_up):
        user = await sign_up("Ann@Example.COM")

        response = await async_client.get("/user/me", headers=user["headers"])

        assert response.json()["data"]["email"] == "Ann@example.com"

    @pytest.mark.asyncio
    async def test_password_change(self, async_client: AsyncClient, test_user):
        response = await async_client.put(
            "/user/me", json={"password": "new-secret"}, headers=test_user["headers"]
        )
        assert response.status_code == 200

        old = await async_client.post("/auth/login", json={"email": "j@x.io", "password": "secret1"})
        new = await async_client.post(
            "/auth/login", json={"email": "j@x.io", "password": "new-secret"}
        )

        assert old.status_code == 401
        assert new.status_code == 200

    @pytest.mark.asyncio
    async def test_delete_me_fans_out(self, async_client: AsyncClient, test_user, db_session):
        """Deletion tombstones passwords and ends sessions."""
        response = await async_client.delete("/user/me", headers=test_user["headers"])
        assert response.status_code == 200

        me = await async_client.get("/user/me", headers=test_user["headers"])
        assert me.status_code == 401

        passwords = (
            await db_session.execute(
                select(UserPassword).where(UserPassword.user_id == test_user["user_id"])
            )
        ).scalars().all()
        assert passwords and all(p.deleted_at is not None for p in passwords)

        sessions = (
            await db_session.execute(
                select(UserSession).where(UserSession.user_id == test_user["user_id"])
            )
        ).scalars().all()
        assert sessions and all(s.is_active is False for s in sessions)


# ============================================================================
# Admin Tests
# ============================================================================
class TestAdminUserAccess:
    """Test the admin-gated /user/{user_id} endpoints."""

    @pytest.mark.asyncio
    async def test_non_admin_forbidden(self, async_client: AsyncClient, test_user, other_user):
        response = await async_client.get(
            f"/user/{other_user['user_id']}", headers=test_user["headers"]
        )

        assert response.status_code == 403
        assert response.json()["error"] == "InsufficientPermissions"

    @pytest.mark.asyncio
    async def test_admin_get_user(self, async_client: AsyncClient, admin_user, test_user):
        response = await async_client.get(
            f"/user/{test_user['user_id']}", headers=admin_user["headers"]
        )

        assert response.status_code == 200
        assert response.json()["data"]["email"] == "j@x.io"

    @pytest.mark.asyncio
    async def test_admin_get_user_with_roles(self, async_client: AsyncClient, admin_user):
        response = await async_client.get(
            f"/user/{admin_user['user_id']}/with-roles", headers=admin_user["headers"]
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["user_id"] == admin_user["user_id"]
        assert sorted(role["name"] for role in data["roles"]) == ["admin", "user"]

    @pytest.mark.asyncio
    async def test_invalid_user_id(self, async_client: AsyncClient, admin_user):
        response = await async_client.get("/user/abc", headers=admin_user["headers"])

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidUserID"

    @pytest.mark.asyncio
    async def test_unknown_user(self, async_client: AsyncClient, admin_user):
        response = await async_client.get("/user/9999", headers=admin_user["headers"])

        assert response.status_code == 404
        assert response.json()["error"] == "UserNotFound"

    @pytest.mark.asyncio
    async def test_admin_update_user(self, async_client: AsyncClient, admin_user, test_user):
        response = await async_client.put(
            f"/user/{test_user['user_id']}",
            json={"firstname": "Janet"},
            headers=admin_user["headers"],
        )

        assert response.status_code == 200
        assert response.json()["data"]["firstname"] == "Janet"

    @pytest.mark.asyncio
    async def test_admin_delete_user(self, async_client: AsyncClient, admin_user, test_user):
        response = await async_client.delete(
            f"/user/{test_user['user_id']}", headers=admin_user["headers"]
        )
        assert response.status_code == 200

        again = await async_client.get(
            f"/user/{test_user['user_id']}", headers=admin_user["headers"]
        )
        assert again.status_code == 404
