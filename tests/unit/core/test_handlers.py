"""
Unit tests for exception handlers.
"""

import json
from unittest.mock import MagicMock

import pytest
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded

from calendarium.core.handlers import (
    app_exception_handler,
    general_exception_handler,
    rate_limit_handler,
    validation_exception_handler,
)
from calendarium.exceptions import CalendarCreationError, NoAccessToCalendarError


@pytest.fixture
def request_mock():
    request = MagicMock()
    request.method = "GET"
    request.url.path = "/calendar/1"
    request.client.host = "127.0.0.1"
    return request


def body(response) -> dict:
    return json.loads(response.body)


@pytest.mark.asyncio
async def test_app_exception(request_mock):
    response = await app_exception_handler(request_mock, NoAccessToCalendarError())

    assert response.status_code == 403
    assert body(response) == {"success": False, "error": "NoAccessToCalendar"}


@pytest.mark.asyncio
async def test_server_side_kind(request_mock):
    response = await app_exception_handler(request_mock, CalendarCreationError())

    assert response.status_code == 500
    assert body(response) == {"success": False, "error": "CalendarCreation"}


@pytest.mark.asyncio
async def test_validation_error(request_mock):
    exc = RequestValidationError([{"loc": ("body", "title"), "msg": "required", "type": "missing"}])

    response = await validation_exception_handler(request_mock, exc)

    assert response.status_code == 400
    assert body(response) == {"success": False, "error": "InvalidData"}


@pytest.mark.asyncio
async def test_rate_limit(request_mock):
    exc = RateLimitExceeded(MagicMock(error_message=None, limit="10/minute"))

    response = await rate_limit_handler(request_mock, exc)

    assert response.status_code == 429
    assert body(response) == {"success": False, "error": "RateLimitExceeded"}


@pytest.mark.asyncio
async def test_unexpected_error_hides_details(request_mock):
    response = await general_exception_handler(request_mock, RuntimeError("secret detail"))

    assert response.status_code == 500
    assert body(response) == {"success": False, "error": "Internal"}
    assert b"secret" not in response.body
