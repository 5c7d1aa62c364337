"""
Unit tests for security utilities.
"""

import pytest

from calendarium.core.security import (
    extract_bearer_token,
    generate_token,
    hash_password,
    normalize_email,
    validate_email_format,
    validate_password_length,
    verify_password,
)
from calendarium.exceptions import InvalidEmailFormatError, PasswordTooShortError


class TestPasswordHashing:
    def test_hash_is_argon2id(self):
        hashed = hash_password("secret1")

        assert hashed.startswith("$argon2id$")
        assert hashed != "secret1"

    def test_hashes_are_salted(self):
        assert hash_password("secret1") != hash_password("secret1")

    def test_verify(self):
        hashed = hash_password("secret1")

        assert verify_password("secret1", hashed) is True
        assert verify_password("secret2", hashed) is False

    def test_verify_garbage_hash(self):
        assert verify_password("secret1", "not-a-hash") is False


class TestTokens:
    def test_token_format(self):
        token = generate_token()

        assert len(token) == 64
        assert all(c in "0123456789abcdef" for c in token)

    def test_tokens_are_unique(self):
        assert len({generate_token() for _ in range(50)}) == 50

    @pytest.mark.parametrize(
        "header, expected",
        [
            ("Bearer abc", "abc"),
            ("Bearer   abc  ", "abc"),
            ("Bearer ", None),
            ("Bearer", None),
            ("Basic abc", None),
            ("", None),
            (None, None),
        ],
    )
    def test_extract_bearer_token(self, header, expected):
        assert extract_bearer_token(header) == expected


class TestCredentialChecks:
    @pytest.mark.parametrize("email", ["j@x.io", "first.last+tag@example.co.uk"])
    def test_valid_email(self, email):
        validate_email_format(email)

    @pytest.mark.parametrize("email", ["nope", "a@b", "@x.io", "a b@x.io"])
    def test_invalid_email(self, email):
        with pytest.raises(InvalidEmailFormatError):
            validate_email_format(email)

    def test_normalize_lowercases_domain_only(self):
        assert normalize_email("New@Example.COM") == "New@example.com"

    def test_normalize_is_stable(self):
        assert normalize_email("New@example.com") == "New@example.com"

    @pytest.mark.parametrize("email", ["nope", "a..b@x.io"])
    def test_normalize_rejects_invalid(self, email):
        with pytest.raises(InvalidEmailFormatError):
            normalize_email(email)

    def test_password_length_boundary(self):
        validate_password_length("123456")
        with pytest.raises(PasswordTooShortError):
            validate_password_length("12345")
