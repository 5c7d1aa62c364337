"""
Unit tests for request dependencies.

Dependencies are plain async callables, so they are called directly with
mocked collaborators.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.security import HTTPAuthorizationCredentials

from calendarium.api.dependencies import (
    RequestContext,
    optional_auth,
    parse_path_id,
    require_admin,
    require_auth,
    require_role,
    require_roles,
)
from calendarium.exceptions import (
    InsufficientPermissionsError,
    InvalidCalendarIDError,
    SessionExpiredError,
    SessionInvalidError,
    SessionNotFoundError,
    SessionValidationError,
    UserNotAuthenticatedError,
)
from calendarium.models.role import Role
from calendarium.models.user import User


@pytest.fixture
def user():
    return User(user_id=1, lastname="D", firstname="J", email="j@x.io")


@pytest.fixture
def auth_service(user):
    service = AsyncMock()
    service.validate_session.return_value = user
    service.get_user_roles.return_value = [Role(role_id=2, name="user")]
    return service


def bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestRequireAuth:
    @pytest.mark.asyncio
    async def test_missing_credentials(self, auth_service):
        with pytest.raises(UserNotAuthenticatedError):
            await require_auth(RequestContext(), auth_service, None)

        auth_service.validate_session.assert_not_called()

    @pytest.mark.asyncio
    async def test_populates_context(self, auth_service, user):
        context = RequestContext()

        result = await require_auth(context, auth_service, bearer("tok"))

        assert result is user
        assert context.auth_user is user
        assert context.role_names == {"user"}
        assert context.session_token == "tok"
        assert context.user is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [SessionNotFoundError, SessionExpiredError])
    async def test_invalid_session(self, auth_service, error):
        auth_service.validate_session.side_effect = error()

        with pytest.raises(SessionInvalidError):
            await require_auth(RequestContext(), auth_service, bearer("tok"))

    @pytest.mark.asyncio
    async def test_lookup_failure_is_not_masked(self, auth_service):
        auth_service.validate_session.side_effect = SessionValidationError()

        with pytest.raises(SessionValidationError):
            await require_auth(RequestContext(), auth_service, bearer("tok"))

    @pytest.mark.asyncio
    async def test_optional_auth_never_fails(self, auth_service):
        auth_service.validate_session.side_effect = SessionExpiredError()
        context = RequestContext()

        assert await optional_auth(context, auth_service, bearer("tok")) is None
        assert context.auth_user is None


class TestRoleGates:
    @pytest.mark.asyncio
    async def test_admin_gate_rejects_plain_user(self, user):
        context = RequestContext(auth_user=user, auth_roles=[Role(name="user")])

        with pytest.raises(InsufficientPermissionsError):
            await require_admin(user, context)

    @pytest.mark.asyncio
    async def test_admin_gate_admits_admin(self, user):
        context = RequestContext(auth_user=user, auth_roles=[Role(name="admin")])

        assert await require_admin(user, context) is user

    @pytest.mark.asyncio
    async def test_any_of_several_roles(self, user):
        gate = require_roles("admin", "auditor")
        context = RequestContext(auth_user=user, auth_roles=[Role(name="auditor")])

        assert await gate(user, context) is user

    def test_gates_are_cached(self):
        assert require_role("admin") is require_admin
        assert require_roles("a", "b") is require_roles("a", "b")


class TestParsePathId:
    def _request(self, **params):
        request = MagicMock()
        request.path_params = params
        return request

    def test_integer(self):
        assert parse_path_id(self._request(calendar_id="12"), "calendar_id", InvalidCalendarIDError) == 12

    @pytest.mark.parametrize("raw", ["abc", "1.5", ""])
    def test_not_an_integer(self, raw):
        with pytest.raises(InvalidCalendarIDError):
            parse_path_id(self._request(calendar_id=raw), "calendar_id", InvalidCalendarIDError)

    def test_missing(self):
        with pytest.raises(InvalidCalendarIDError):
            parse_path_id(self._request(), "calendar_id", InvalidCalendarIDError)
