"""
Security utilities for authentication.

This module provides:
- Password hashing with Argon2id (adaptive, tunable cost)
- Opaque session/refresh token generation
- Bearer header parsing
- Email format checks and normalization, password length checks
"""

import logging
import re
import secrets

from argon2 import PasswordHasher
from argon2.exceptions import (
    HashingError,
    InvalidHashError,
    VerificationError,
    VerifyMismatchError,
)
from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError

from calendarium.core.config import settings
from calendarium.exceptions import (
    InvalidEmailFormatError,
    PasswordHashingError,
    PasswordTooShortError,
    TokenGenerationError,
)

logger = logging.getLogger(__name__)

# Sentinel that replaces session tokens in session listings
MASKED_TOKEN = "***"

BEARER_PREFIX = "Bearer "

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


# =============================================================================
# Password Hashing with Argon2id
# =============================================================================
# Argon2id is memory-hard and its cost is tunable through settings, which
# lets tests run with a tiny memory footprint.
# =============================================================================

pwd_hasher = PasswordHasher(
    time_cost=settings.argon2_time_cost,
    memory_cost=settings.argon2_memory_cost,
    parallelism=settings.argon2_parallelism,
    hash_len=32,
    salt_len=16,
)


def hash_password(password: str) -> str:
    """
    Hash a password using Argon2id.

    Args:
        password: Plain text password to hash

    Returns:
        Argon2id hash string (includes algorithm, parameters, salt, and hash)

    Raises:
        PasswordHashingError: If the hasher fails

    Example:
        >>> hashed = hash_password("secret1")
        >>> # Returns: $argon2id$v=19$m=65536,t=2,p=4$...
    """
    try:
        return pwd_hasher.hash(password)
    except HashingError as e:
        logger.error(f"Password hashing failed: {e}")
        raise PasswordHashingError() from e


def verify_password(password: str, hashed_password: str) -> bool:
    """
    Verify a password against an Argon2id hash.

    Args:
        password: Plain text password to verify
        hashed_password: Argon2id hash to verify against

    Returns:
        True if password matches hash, False otherwise

    Example:
        >>> hashed = hash_password("secret1")
        >>> verify_password("secret1", hashed)
        True
        >>> verify_password("wrong", hashed)
        False
    """
    try:
        pwd_hasher.verify(hashed_password, password)
        return True
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


# =============================================================================
# Opaque Tokens
# =============================================================================


def generate_token() -> str:
    """
    Generate an opaque session or refresh token.

    32 bytes from the OS CSPRNG, hex encoded: always 64 lowercase hex
    characters. Collisions are treated as impossible and never retried.

    Raises:
        TokenGenerationError: If the OS random source is unavailable
    """
    try:
        return secrets.token_hex(32)
    except OSError as e:
        logger.error(f"Token generation failed: {e}")
        raise TokenGenerationError() from e


def extract_bearer_token(authorization: str | None) -> str | None:
    """
    Return the token from an ``Authorization: Bearer <token>`` header.

    Returns None when the header is absent, uses another scheme, or carries
    an empty token.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


# =============================================================================
# Credential Checks
# =============================================================================


def validate_email_format(email: str) -> None:
    """Raise InvalidEmailFormatError unless ``email`` looks like an address."""
    if not EMAIL_PATTERN.match(email):
        raise InvalidEmailFormatError()


def normalize_email(email: str) -> str:
    """
    Return the stored form of ``email``.

    Applies the same normalization as the ``EmailStr`` fields on signup
    and login (the domain is lowercased), so that every stored email and
    every lookup agree on one spelling of an address.

    Raises:
        InvalidEmailFormatError: ``email`` is not a valid address

    Example:
        >>> normalize_email("New@Example.COM")
        'New@example.com'
    """
    validate_email_format(email)
    try:
        _, normalized = validate_email(email)
    except PydanticCustomError:
        raise InvalidEmailFormatError() from None
    return normalized


def validate_password_length(password: str) -> None:
    """Raise PasswordTooShortError below the configured minimum length."""
    if len(password) < settings.min_password_length:
        raise PasswordTooShortError()
