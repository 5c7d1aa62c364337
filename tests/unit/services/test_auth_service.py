"""
Unit tests for AuthService.

All tests are fully mocked - no database or external dependencies.
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from calendarium.core.clock import FixedClock
from calendarium.core.security import MASKED_TOKEN
from calendarium.exceptions import (
    InvalidCredentialsError,
    SessionExpiredError,
    SessionInvalidError,
    SessionNotFoundError,
    SessionValidationError,
)
from calendarium.models.session import UserSession
from calendarium.models.user import User, UserPassword
from calendarium.services.auth_service import AuthService

NOW = datetime(2024, 1, 15, 8, 0, tzinfo=UTC)


@pytest.fixture
def mock_session():
    """Create a mock AsyncSession already inside a transaction."""
    session = AsyncMock()
    session.in_transaction = MagicMock(return_value=True)
    return session


@pytest.fixture
def mock_user_repo():
    return AsyncMock()


@pytest.fixture
def mock_role_repo():
    repo = AsyncMock()
    repo.get_user_roles.return_value = []
    return repo


@pytest.fixture
def mock_session_repo():
    repo = AsyncMock()
    repo.add.side_effect = lambda row: row
    repo.update.side_effect = lambda row: row
    return repo


@pytest.fixture
def tokens():
    """Deterministic token factory."""
    counter = iter(range(1, 100))
    return lambda: f"{next(counter):064x}"


@pytest.fixture
def auth_service(mock_session, mock_user_repo, mock_role_repo, mock_session_repo, tokens):
    """Create AuthService with mocked dependencies."""
    with (
        patch("calendarium.services.auth_service.UserRepository", return_value=mock_user_repo),
        patch("calendarium.services.auth_service.RoleRepository", return_value=mock_role_repo),
        patch(
            "calendarium.services.auth_service.SessionRepository",
            return_value=mock_session_repo,
        ),
    ):
        service = AuthService(
            mock_session,
            FixedClock(NOW),
            token_factory=tokens,
            locator=AsyncMock(return_value="Local"),
        )
    return service


@pytest.fixture
def sample_user():
    return User(user_id=1, lastname="D", firstname="J", email="j@x.io", created_at=NOW)


def _session(**overrides) -> UserSession:
    values = {
        "user_session_id": 7,
        "user_id": 1,
        "session_token": "a" * 64,
        "refresh_token": "b" * 64,
        "expires_at": NOW + timedelta(hours=1),
        "is_active": True,
        "created_at": NOW,
    }
    values.update(overrides)
    return UserSession(**values)


class TestLogin:
    """Test the login method."""

    @pytest.mark.asyncio
    @patch("calendarium.services.auth_service.verify_password", return_value=True)
    async def test_login_success(
        self, mock_verify, auth_service, mock_user_repo, mock_session_repo, sample_user
    ):
        mock_user_repo.get_with_password.return_value = (
            sample_user,
            UserPassword(user_id=1, password_hash="hash"),
        )

        result = await auth_service.login("j@x.io", "secret1", "agent", "127.0.0.1")

        assert result.user is sample_user
        assert result.session.session_token == f"{1:064x}"
        assert result.session.refresh_token == f"{2:064x}"
        assert result.session.expires_at == NOW + timedelta(hours=1)
        assert result.session.location == "Local"
        mock_session_repo.add.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_login_unknown_email(self, auth_service, mock_user_repo, mock_session_repo):
        mock_user_repo.get_with_password.return_value = None

        with pytest.raises(InvalidCredentialsError):
            await auth_service.login("nobody@x.io", "secret1")

        mock_session_repo.add.assert_not_called()

    @pytest.mark.asyncio
    @patch("calendarium.services.auth_service.verify_password", return_value=False)
    async def test_login_wrong_password(self, mock_verify, auth_service, mock_user_repo, sample_user):
        mock_user_repo.get_with_password.return_value = (
            sample_user,
            UserPassword(user_id=1, password_hash="hash"),
        )

        with pytest.raises(InvalidCredentialsError):
            await auth_service.login("j@x.io", "wrong")

    @pytest.mark.asyncio
    @patch("calendarium.services.auth_service.verify_password", return_value=True)
    async def test_login_truncates_device_info(
        self, mock_verify, auth_service, mock_user_repo, sample_user
    ):
        mock_user_repo.get_with_password.return_value = (
            sample_user,
            UserPassword(user_id=1, password_hash="hash"),
        )

        result = await auth_service.login("j@x.io", "secret1", "x" * 400)

        assert len(result.session.device_info) == 255


class TestRefresh:
    """Test the refresh method."""

    @pytest.mark.asyncio
    async def test_refresh_rewrites_same_row(self, auth_service, mock_session_repo):
        row = _session(expires_at=NOW + timedelta(minutes=5))
        mock_session_repo.get_active_by_refresh_token.return_value = row

        refreshed = await auth_service.refresh("b" * 64)

        assert refreshed is row
        assert refreshed.session_token == f"{1:064x}"
        assert refreshed.refresh_token == "b" * 64
        assert refreshed.expires_at == NOW + timedelta(hours=1)
        assert refreshed.updated_at == NOW

    @pytest.mark.asyncio
    async def test_refresh_unknown(self, auth_service, mock_session_repo):
        mock_session_repo.get_active_by_refresh_token.return_value = None

        with pytest.raises(SessionInvalidError):
            await auth_service.refresh("b" * 64)

    @pytest.mark.asyncio
    async def test_refresh_expired_at_boundary(self, auth_service, mock_session_repo):
        mock_session_repo.get_active_by_refresh_token.return_value = _session(expires_at=NOW)

        with pytest.raises(SessionExpiredError):
            await auth_service.refresh("b" * 64)

        mock_session_repo.update.assert_not_called()


class TestValidateSession:
    """Test the validate_session method."""

    @pytest.mark.asyncio
    async def test_valid(self, auth_service, mock_session_repo, sample_user):
        mock_session_repo.get_active_with_user.return_value = (_session(), sample_user)

        assert await auth_service.validate_session("a" * 64) is sample_user

    @pytest.mark.asyncio
    async def test_unknown(self, auth_service, mock_session_repo):
        mock_session_repo.get_active_with_user.return_value = None

        with pytest.raises(SessionNotFoundError):
            await auth_service.validate_session("a" * 64)

    @pytest.mark.asyncio
    async def test_expired(self, auth_service, mock_session_repo, sample_user):
        mock_session_repo.get_active_with_user.return_value = (
            _session(expires_at=NOW - timedelta(seconds=1)),
            sample_user,
        )

        with pytest.raises(SessionExpiredError):
            await auth_service.validate_session("a" * 64)

    @pytest.mark.asyncio
    async def test_database_failure(self, auth_service, mock_session_repo):
        mock_session_repo.get_active_with_user.side_effect = OperationalError("SELECT", {}, Exception())

        with pytest.raises(SessionValidationError):
            await auth_service.validate_session("a" * 64)


class TestSessions:
    """Test listing and deleting sessions."""

    @pytest.mark.asyncio
    async def test_list_masks_tokens(self, auth_service, mock_session_repo):
        mock_session_repo.list_for_user.return_value = [_session(), _session(user_session_id=8)]

        sessions = await auth_service.list_sessions(1)

        assert [s.session_token for s in sessions] == [MASKED_TOKEN, MASKED_TOKEN]

    @pytest.mark.asyncio
    async def test_delete_non_numeric_id(self, auth_service, mock_session_repo):
        with pytest.raises(SessionNotFoundError):
            await auth_service.delete_session(1, "abc")

        mock_session_repo.get_owned.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_not_owned(self, auth_service, mock_session_repo):
        mock_session_repo.get_owned.return_value = None

        with pytest.raises(SessionNotFoundError):
            await auth_service.delete_session(1, "7")

    @pytest.mark.asyncio
    async def test_delete(self, auth_service, mock_session_repo):
        row = _session()
        mock_session_repo.get_owned.return_value = row

        await auth_service.delete_session(1, "7")

        mock_session_repo.soft_delete.assert_awaited_once_with(row, NOW)

    @pytest.mark.asyncio
    async def test_logout_already_inactive(self, auth_service, mock_session_repo, mock_session):
        mock_session_repo.deactivate_by_token.return_value = 0

        await auth_service.logout("a" * 64)

        mock_session_repo.deactivate_by_token.assert_awaited_once_with("a" * 64, NOW)
        mock_session.commit.assert_awaited_once()
