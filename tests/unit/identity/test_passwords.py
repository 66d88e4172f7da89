"""
Name: Password Hashing Tests

Responsibilities:
  - Versioned PBKDF2 format and verification
  - Legacy SHA-256 migration flags
  - Malformed hashes never validate
"""

import base64

import pytest

from spaced_api.identity.passwords import (
    PASSWORD_HASH_ITERATIONS,
    PASSWORD_HASH_VERSION,
    PASSWORD_MIN_ITERATIONS,
    constant_time_equals,
    dummy_password_hash,
    hash_password,
    hash_password_legacy_sha256,
    verify_password,
)

pytestmark = pytest.mark.unit


class TestHashFormat:
    def test_hash_has_four_dollar_separated_parts(self):
        stored = hash_password("secret")
        version, iterations, salt, derived = stored.split("$")

        assert version == PASSWORD_HASH_VERSION
        assert int(iterations) == PASSWORD_HASH_ITERATIONS
        assert len(base64.b64decode(salt)) == 16
        assert len(base64.b64decode(derived)) == 32

    def test_same_password_gets_different_salts(self):
        assert hash_password("secret") != hash_password("secret")

    def test_fixed_salt_is_deterministic(self):
        salt = b"\x01" * 16
        assert hash_password("secret", salt=salt) == hash_password("secret", salt=salt)


class TestVerifyPassword:
    def test_current_hash_is_valid_without_rehash(self):
        check = verify_password("secret", hash_password("secret"))

        assert check.valid is True
        assert check.needs_rehash is False

    def test_wrong_password_is_invalid(self):
        check = verify_password("other", hash_password("secret"))

        assert check.valid is False
        assert check.needs_rehash is False

    def test_low_iteration_hash_needs_rehash(self):
        stored = hash_password("secret", iterations=PASSWORD_MIN_ITERATIONS)

        check = verify_password("secret", stored)

        assert check.valid is True
        assert check.needs_rehash is True

    def test_below_minimum_iterations_is_rejected(self):
        stored = hash_password("secret", iterations=PASSWORD_MIN_ITERATIONS - 1)

        assert verify_password("secret", stored).valid is False

    def test_legacy_sha256_is_valid_and_needs_rehash(self):
        legacy = hash_password_legacy_sha256("secret")

        check = verify_password("secret", legacy)

        assert check.valid is True
        assert check.needs_rehash is True

    def test_legacy_sha256_wrong_password(self):
        legacy = hash_password_legacy_sha256("secret")

        check = verify_password("nope", legacy)

        assert check.valid is False
        assert check.needs_rehash is False

    @pytest.mark.parametrize(
        "stored",
        [
            None,
            "",
            "   ",
            f"{PASSWORD_HASH_VERSION}$abc$AAAA$AAAA",
            f"{PASSWORD_HASH_VERSION}$210000$not*base64$AAAA",
            f"{PASSWORD_HASH_VERSION}$-5$AAAA$AAAA",
        ],
    )
    def test_malformed_hash_is_invalid(self, stored):
        check = verify_password("secret", stored)

        assert check.valid is False
        assert check.needs_rehash is False

    def test_dummy_hash_is_a_current_hash(self):
        stored = dummy_password_hash()

        assert stored.startswith(f"{PASSWORD_HASH_VERSION}${PASSWORD_HASH_ITERATIONS}$")
        assert verify_password("anything", stored).valid is False


class TestConstantTimeEquals:
    def test_equal_bytes(self):
        assert constant_time_equals(b"abc", b"abc") is True

    def test_different_bytes_same_length(self):
        assert constant_time_equals(b"abc", b"abd") is False

    def test_different_lengths(self):
        assert constant_time_equals(b"abc", b"abcd") is False
