"""
Custom exception classes for Calendarium.

This module defines a hierarchy of custom exceptions that map to HTTP status codes
and provide consistent error responses across the API. Every concrete class
carries a stable ``error_code`` that is sent to clients in the ``error`` field
of the response envelope.

Exception hierarchy:
    AppException (base, 500)
    ├── ClientInputError (400)
    │   ├── InvalidDataError
    │   ├── Invalid<Entity>IDError
    │   ├── InvalidYearError / InvalidMonthError / InvalidDayError / InvalidWeekNumberError
    │   ├── InvalidDurationError / InvalidFilterTypeError
    │   └── InvalidEmailFormatError / PasswordTooShortError
    ├── AuthenticationError (401)
    │   ├── UserNotAuthenticatedError
    │   ├── SessionInvalidError
    │   ├── SessionExpiredError
    │   └── InvalidCredentialsError
    ├── AuthorizationError (403)
    │   ├── InsufficientPermissionsError
    │   └── NoAccessToCalendarError
    ├── NotFoundError (404)
    ├── ConflictError (409)
    ├── RateLimitExceededError (429)
    └── InternalError (500)
        ├── TransactionStartError / TransactionCommitError
        └── <Operation>Error (creation, update, deletion, verification...)
"""

from typing import Any


class AppException(Exception):
    """
    Base exception class for all application exceptions.

    All custom exceptions should inherit from this class to ensure
    consistent error handling and response formatting.

    Attributes:
        status_code: HTTP status code for the error
        error_code: Stable error kind sent to the client
        message: Human-readable message, used for logs only
        details: Optional additional error details, used for logs only
    """

    status_code: int = 500
    error_code: str = "Internal"
    message: str = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        status_code: int | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize application exception.

        Args:
            message: Human-readable error message (default: class message)
            status_code: HTTP status code (default: class status)
            error_code: Error kind (default: class error code)
            details: Optional dictionary with additional error details
        """
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code
        if error_code is not None:
            self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to the error envelope.

        The message is intentionally left out so that sensitive kinds
        (InvalidCredentials, SessionInvalid) render identically whatever
        the underlying cause.
        """
        return {"success": False, "error": self.error_code}


# =============================================================================
# Client Input Errors (400 Bad Request)
# =============================================================================


class ClientInputError(AppException):
    """Base class for malformed or out-of-range client input."""

    status_code = 400
    error_code = "InvalidData"
    message = "Invalid request data"


class InvalidDataError(ClientInputError):
    """Raised when the request body or query fails validation."""


class InvalidUserIDError(ClientInputError):
    error_code = "InvalidUserID"
    message = "User id must be an integer"


class InvalidCalendarIDError(ClientInputError):
    error_code = "InvalidCalendarID"
    message = "Calendar id must be an integer"


class InvalidEventIDError(ClientInputError):
    error_code = "InvalidEventID"
    message = "Event id must be an integer"


class InvalidYearError(ClientInputError):
    error_code = "InvalidYear"
    message = "Year must be a positive integer"


class InvalidMonthError(ClientInputError):
    error_code = "InvalidMonth"
    message = "Month must be between 1 and 12"


class InvalidDayError(ClientInputError):
    error_code = "InvalidDay"
    message = "Day must be between 1 and 31"


class InvalidWeekNumberError(ClientInputError):
    error_code = "InvalidWeekNumber"
    message = "Week must be between 1 and 53"


class InvalidFilterTypeError(ClientInputError):
    error_code = "InvalidFilterType"
    message = "filter_type must be one of day, week, month"


class InvalidDurationError(ClientInputError):
    error_code = "InvalidDuration"
    message = "Duration must be at least one minute"


class InvalidEmailFormatError(ClientInputError):
    error_code = "InvalidEmailFormat"
    message = "Email address is malformed"


class PasswordTooShortError(ClientInputError):
    error_code = "PasswordTooShort"
    message = "Password is too short"


# =============================================================================
# Authentication Errors (401 Unauthorized)
# =============================================================================


class AuthenticationError(AppException):
    """Base class for authentication errors."""

    status_code = 401
    error_code = "UserNotAuthenticated"
    message = "Authentication failed"


class UserNotAuthenticatedError(AuthenticationError):
    """Raised when no usable bearer credentials accompany the request."""

    message = "Missing authentication credentials"


class SessionInvalidError(AuthenticationError):
    """Raised when a session or refresh token does not match a live session."""

    error_code = "SessionInvalid"
    message = "Invalid session"


class SessionExpiredError(AuthenticationError):
    """Raised when a session has passed its expiry."""

    error_code = "SessionExpired"
    message = "Session expired"


class InvalidCredentialsError(AuthenticationError):
    """Raised when login credentials are invalid (unknown email or wrong password)."""

    error_code = "InvalidCredentials"
    message = "Invalid email or password"


# =============================================================================
# Authorization Errors (403 Forbidden)
# =============================================================================


class AuthorizationError(AppException):
    """Base class for authorization errors."""

    status_code = 403
    error_code = "InsufficientPermissions"
    message = "Access denied"


class InsufficientPermissionsError(AuthorizationError):
    """Raised when the authenticated user lacks a required role."""

    message = "Insufficient permissions"


class NoAccessToCalendarError(AuthorizationError):
    """Raised when the authenticated user is not linked to the calendar."""

    error_code = "NoAccessToCalendar"
    message = "No access to this calendar"


# =============================================================================
# Not Found Errors (404 Not Found)
# =============================================================================


class NotFoundError(AppException):
    """Base class for missing (or logically deleted) resources."""

    status_code = 404
    error_code = "NotFound"
    message = "Resource not found"


class UserNotFoundError(NotFoundError):
    error_code = "UserNotFound"
    message = "User not found"


class CalendarNotFoundError(NotFoundError):
    error_code = "CalendarNotFound"
    message = "Calendar not found"


class EventNotFoundError(NotFoundError):
    error_code = "EventNotFound"
    message = "Event not found"


class RoleNotFoundError(NotFoundError):
    error_code = "RoleNotFound"
    message = "Role not found"


class SessionNotFoundError(NotFoundError):
    error_code = "SessionNotFound"
    message = "Session not found"


class UserCalendarNotFoundError(NotFoundError):
    error_code = "UserCalendarNotFound"
    message = "User-calendar link not found"


class RoleAssignmentNotFoundError(NotFoundError):
    """Raised when revoking a role the user does not hold."""

    message = "Role assignment not found"


# =============================================================================
# Conflict Errors (409 Conflict)
# =============================================================================


class ConflictError(AppException):
    """Base class for uniqueness conflicts among live rows."""

    status_code = 409
    error_code = "AlreadyExists"
    message = "Resource already exists"


class UserAlreadyExistsError(ConflictError):
    error_code = "UserAlreadyExists"
    message = "A user with this email already exists"


class RoleAlreadyExistsError(ConflictError):
    error_code = "RoleAlreadyExists"
    message = "A role with this name already exists"


class RoleAlreadyAssignedError(ConflictError):
    error_code = "RoleAlreadyAssigned"
    message = "Role already assigned to this user"


class UserCalendarAlreadyExistsError(ConflictError):
    error_code = "UserCalendarAlreadyExists"
    message = "User is already linked to this calendar"


# =============================================================================
# Rate Limiting (429 Too Many Requests)
# =============================================================================


class RateLimitExceededError(AppException):
    status_code = 429
    error_code = "RateLimitExceeded"
    message = "Rate limit exceeded"


# =============================================================================
# Internal Errors (500 Internal Server Error)
# =============================================================================


class InternalError(AppException):
    """Base class for server-side failures; never retried."""


class TransactionStartError(InternalError):
    error_code = "TransactionStart"
    message = "Could not start transaction"


class TransactionCommitError(InternalError):
    error_code = "TransactionCommit"
    message = "Could not commit transaction"


class PasswordHashingError(InternalError):
    error_code = "PasswordHashing"
    message = "Could not hash password"


class TokenGenerationError(InternalError):
    error_code = "TokenGeneration"
    message = "Could not generate token"


class UserVerificationError(InternalError):
    error_code = "UserVerification"
    message = "User verification failed"


class UserCreationError(InternalError):
    error_code = "UserCreation"
    message = "User creation failed"


class UserUpdateError(InternalError):
    error_code = "UserUpdate"
    message = "User update failed"


class UserDeleteError(InternalError):
    error_code = "UserDelete"
    message = "User delete failed"


class CalendarVerificationError(InternalError):
    error_code = "CalendarVerification"
    message = "Calendar verification failed"


class CalendarAccessCheckError(InternalError):
    error_code = "CalendarAccessCheck"
    message = "Calendar access check failed"


class CalendarCreationError(InternalError):
    error_code = "CalendarCreation"
    message = "Calendar creation failed"


class CalendarUpdateError(InternalError):
    error_code = "CalendarUpdate"
    message = "Calendar update failed"


class CalendarDeleteError(InternalError):
    error_code = "CalendarDelete"
    message = "Calendar delete failed"


class EventVerificationError(InternalError):
    error_code = "EventVerification"
    message = "Event verification failed"


class EventCreationError(InternalError):
    error_code = "EventCreation"
    message = "Event creation failed"


class EventUpdateError(InternalError):
    error_code = "EventUpdate"
    message = "Event update failed"


class EventDeleteError(InternalError):
    error_code = "EventDelete"
    message = "Event delete failed"


class EventListError(InternalError):
    error_code = "EventList"
    message = "Event list failed"


class UserCalendarCreationError(InternalError):
    error_code = "UserCalendarCreation"
    message = "User calendar creation failed"


class UserCalendarUpdateError(InternalError):
    error_code = "UserCalendarUpdate"
    message = "User calendar update failed"


class UserCalendarDeleteError(InternalError):
    error_code = "UserCalendarDelete"
    message = "User calendar delete failed"


class UserCalendarListError(InternalError):
    error_code = "UserCalendarList"
    message = "User calendar list failed"


class RoleListError(InternalError):
    error_code = "RoleList"
    message = "Role list failed"


class RoleCreationError(InternalError):
    error_code = "RoleCreation"
    message = "Role creation failed"


class RoleUpdateError(InternalError):
    error_code = "RoleUpdate"
    message = "Role update failed"


class RoleDeleteError(InternalError):
    error_code = "RoleDelete"
    message = "Role delete failed"


class RoleAssignmentError(InternalError):
    error_code = "RoleAssignment"
    message = "Role assignment failed"


class RoleRevocationError(InternalError):
    error_code = "RoleRevocation"
    message = "Role revocation failed"


class SessionCreationError(InternalError):
    error_code = "SessionCreation"
    message = "Session creation failed"


class SessionUpdateError(InternalError):
    error_code = "SessionUpdate"
    message = "Session update failed"


class SessionDeleteError(InternalError):
    error_code = "SessionDelete"
    message = "Session delete failed"


class SessionListError(InternalError):
    error_code = "SessionList"
    message = "Session list failed"


class SessionValidationError(InternalError):
    error_code = "SessionValidation"
    message = "Session validation failed"
