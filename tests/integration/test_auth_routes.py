"""
Integration tests for authentication routes.

Tests cover:
- Login (success, credential indistinguishability)
- Logout (idempotence, malformed header)
- Session token refresh
- Session validation through protected routes
- Listing and deleting sessions
"""

import re
from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from calendarium.models import UserSession

HEX64 = re.compile(r"^[0-9a-f]{64}$")


# ============================================================================
# Login Tests
# ============================================================================
class TestLogin:
    """Test the login endpoint."""

    @pytest.mark.asyncio
    async def test_login_success(self, async_client: AsyncClient, test_user, clock):
        """Login returns opaque tokens, a one hour expiry and the user's roles."""
        response = await async_client.post(
            "/auth/login", json={"email": "j@x.io", "password": "secret1"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        data = body["data"]
        assert HEX64.match(data["session_token"])
        assert HEX64.match(data["refresh_token"])
        assert data["session_token"] != data["refresh_token"]
        assert datetime.fromisoformat(data["expires_at"]) == clock.now() + timedelta(hours=1)
        assert data["user"]["user_id"] == test_user["user_id"]
        assert [role["name"] for role in data["roles"]] == ["user"]

    @pytest.mark.asyncio
    async def test_login_records_client_details(
        self, async_client: AsyncClient, test_user, db_session
    ):
        """Device and address are captured; loopback resolves to Local."""
        await async_client.post(
            "/auth/login",
            json={"email": "j@x.io", "password": "secret1"},
            headers={"User-Agent": "pytest-agent"},
        )

        result = await db_session.execute(
            select(UserSession).where(UserSession.device_info == "pytest-agent")
        )
        user_session = result.scalar_one()
        assert user_session.ip_address == "127.0.0.1"
        assert user_session.location == "Local"
        assert user_session.is_active is True

    @pytest.mark.asyncio
    async def test_bad_credentials_are_indistinguishable(
        self, async_client: AsyncClient, test_user
    ):
        """Wrong password and unknown email produce byte-identical responses."""
        wrong_password = await async_client.post(
            "/auth/login", json={"email": "j@x.io", "password": "nope-nope"}
        )
        unknown_email = await async_client.post(
            "/auth/login", json={"email": "nobody@x.io", "password": "whatever"}
        )

        assert wrong_password.status_code == 401
        assert unknown_email.status_code == 401
        assert wrong_password.json() == {"success": False, "error": "InvalidCredentials"}
        assert wrong_password.content == unknown_email.content

    @pytest.mark.asyncio
    async def test_login_invalid_body(self, async_client: AsyncClient):
        """A body failing validation is InvalidData."""
        response = await async_client.post("/auth/login", json={"email": "not-an-email"})

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "InvalidData"}

    @pytest.mark.asyncio
    async def test_login_malformed_json(self, async_client: AsyncClient):
        """A body that is not JSON is InvalidData."""
        response = await async_client.post(
            "/auth/login",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "InvalidData"


# ============================================================================
# Authentication Header Tests
# ============================================================================
class TestBearerAuthentication:
    """Test how protected routes treat the Authorization header."""

    @pytest.mark.asyncio
    async def test_missing_header(self, async_client: AsyncClient):
        response = await async_client.get("/auth/me")

        assert response.status_code == 401
        assert response.json()["error"] == "UserNotAuthenticated"

    @pytest.mark.asyncio
    async def test_wrong_scheme(self, async_client: AsyncClient, test_user):
        response = await async_client.get(
            "/auth/me", headers={"Authorization": f"Token {test_user['session_token']}"}
        )

        assert response.status_code == 401
        assert response.json()["error"] == "UserNotAuthenticated"

    @pytest.mark.asyncio
    async def test_unknown_token(self, async_client: AsyncClient):
        response = await async_client.get(
            "/auth/me", headers={"Authorization": "Bearer " + "0" * 64}
        )

        assert response.status_code == 401
        assert response.json()["error"] == "SessionInvalid"

    @pytest.mark.asyncio
    async def test_expired_session(self, async_client: AsyncClient, test_user, clock):
        """A session stops validating once its expiry has passed."""
        clock.advance(hours=1)

        response = await async_client.get("/auth/me", headers=test_user["headers"])

        assert response.status_code == 401
        assert response.json()["error"] == "SessionInvalid"

    @pytest.mark.asyncio
    async def test_me_returns_user_and_roles(self, async_client: AsyncClient, test_user):
        response = await async_client.get("/auth/me", headers=test_user["headers"])

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["email"] == "j@x.io"
        assert [role["name"] for role in data["roles"]] == ["user"]


# ============================================================================
# Logout Tests
# ============================================================================
class TestLogout:
    """Test the logout endpoint."""

    @pytest.mark.asyncio
    async def test_logout_is_idempotent(self, async_client: AsyncClient, test_user):
        """Logging out twice succeeds both times and the token stops working."""
        first = await async_client.post("/auth/logout", headers=test_user["headers"])
        second = await async_client.post("/auth/logout", headers=test_user["headers"])

        assert first.status_code == 200
        assert second.status_code == 200
        assert second.json()["success"] is True

        response = await async_client.get("/auth/me", headers=test_user["headers"])
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_logout_malformed_header(self, async_client: AsyncClient):
        response = await async_client.post(
            "/auth/logout", headers={"Authorization": "Bearer"}
        )

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "SessionInvalid"}


# ============================================================================
# Refresh Tests
# ============================================================================
class TestRefresh:
    """Test the token refresh endpoint."""

    @pytest.mark.asyncio
    async def test_refresh_issues_new_session_token(
        self, async_client: AsyncClient, test_user, clock
    ):
        """The new token validates; the refresh token keeps working on the same row."""
        clock.advance(minutes=30)

        response = await async_client.post(
            "/auth/refresh", json={"refresh_token": test_user["refresh_token"]}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert HEX64.match(data["session_token"])
        assert data["session_token"] != test_user["session_token"]
        assert datetime.fromisoformat(data["expires_at"]) == clock.now() + timedelta(hours=1)

        me = await async_client.get(
            "/auth/me", headers={"Authorization": f"Bearer {data['session_token']}"}
        )
        assert me.status_code == 200

        # The row now holds the new token only
        old = await async_client.get("/auth/me", headers=test_user["headers"])
        assert old.status_code == 401

        again = await async_client.post(
            "/auth/refresh", json={"refresh_token": test_user["refresh_token"]}
        )
        assert again.status_code == 200

    @pytest.mark.asyncio
    async def test_refresh_unknown_token(self, async_client: AsyncClient):
        response = await async_client.post("/auth/refresh", json={"refresh_token": "f" * 64})

        assert response.status_code == 401
        assert response.json()["error"] == "SessionInvalid"

    @pytest.mark.asyncio
    async def test_refresh_expired_session(self, async_client: AsyncClient, test_user, clock):
        clock.advance(hours=2)

        response = await async_client.post(
            "/auth/refresh", json={"refresh_token": test_user["refresh_token"]}
        )

        assert response.status_code == 401
        assert response.json()["error"] == "SessionExpired"

    @pytest.mark.asyncio
    async def test_refresh_after_logout(self, async_client: AsyncClient, test_user):
        await async_client.post("/auth/logout", headers=test_user["headers"])

        response = await async_client.post(
            "/auth/refresh", json={"refresh_token": test_user["refresh_token"]}
        )

        assert response.status_code == 401
        assert response.json()["error"] == "SessionInvalid"


# ============================================================================
# Session Listing Tests
# ============================================================================
class TestSessions:
    """Test listing and deleting the caller's sessions."""

    @pytest.mark.asyncio
    async def test_list_sessions_masks_tokens(self, async_client: AsyncClient, test_user):
        await async_client.post("/auth/login", json={"email": "j@x.io", "password": "secret1"})

        response = await async_client.get("/auth/sessions", headers=test_user["headers"])

        assert response.status_code == 200
        sessions = response.json()["data"]
        assert len(sessions) == 2
        assert all(s["session_token"] == "***" for s in sessions)
        assert all("refresh_token" not in s for s in sessions)
        # Newest first
        assert sessions[0]["user_session_id"] > sessions[1]["user_session_id"]

    @pytest.mark.asyncio
    async def test_delete_session_twice(self, async_client: AsyncClient, test_user):
        """Deleting a session is not idempotent: the second call is a 404."""
        second = await async_client.post(
            "/auth/login", json={"email": "j@x.io", "password": "secret1"}
        )
        assert second.status_code == 200
        sessions = (
            await async_client.get("/auth/sessions", headers=test_user["headers"])
        ).json()["data"]
        target = sessions[0]["user_session_id"]

        first_delete = await async_client.delete(
            f"/auth/sessions/{target}", headers=test_user["headers"]
        )
        second_delete = await async_client.delete(
            f"/auth/sessions/{target}", headers=test_user["headers"]
        )

        assert first_delete.status_code == 200
        assert second_delete.status_code == 404
        assert second_delete.json()["error"] == "SessionNotFound"

    @pytest.mark.asyncio
    async def test_delete_session_of_other_user(
        self, async_client: AsyncClient, test_user, other_user
    ):
        sessions = (
            await async_client.get("/auth/sessions", headers=other_user["headers"])
        ).json()["data"]

        response = await async_client.delete(
            f"/auth/sessions/{sessions[0]['user_session_id']}", headers=test_user["headers"]
        )

        assert response.status_code == 404
        assert response.json()["error"] == "SessionNotFound"

    @pytest.mark.asyncio
    async def test_delete_session_non_numeric_id(self, async_client: AsyncClient, test_user):
        response = await async_client.delete("/auth/sessions/abc", headers=test_user["headers"])

        assert response.status_code == 404
        assert response.json()["error"] == "SessionNotFound"
