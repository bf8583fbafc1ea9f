"""
Unit tests for CredentialHasher.

Tests verify:
- bcrypt output with the configured cost factor
- Per-call salting
- Input bound enforcement
- verify() never raising on malformed hashes
"""

import re

import pytest

from otpgate.domain.exceptions import InputTooLarge
from otpgate.domain.hashing import MAX_PASSWORD_BYTES, CredentialHasher


class TestHash:
    """Tests for hash()."""

    def test_hash_is_bcrypt(self, hasher: CredentialHasher) -> None:
        """Hash uses a bcrypt prefix ($2a$, $2b$ or $2y$)."""
        password_hash = hasher.hash("password123")
        assert re.match(r"^\$2[aby]\$", password_hash)

    def test_hash_is_not_plaintext(self, hasher: CredentialHasher) -> None:
        assert hasher.hash("password123") != "password123"

    def test_hash_uses_configured_cost(self) -> None:
        """bcrypt format: $2b$XX$... where XX is the cost factor."""
        password_hash = CredentialHasher(cost=5).hash("password123")
        assert int(password_hash.split("$")[2]) == 5

    def test_hash_is_salted_per_call(self, hasher: CredentialHasher) -> None:
        """Same plaintext hashed twice gives different hashes."""
        assert hasher.hash("password123") != hasher.hash("password123")

    def test_hash_accepts_multibyte_utf8(self, hasher: CredentialHasher) -> None:
        password_hash = hasher.hash("pässwörd-密码")
        assert hasher.verify("pässwörd-密码", password_hash)

    def test_hash_accepts_exactly_72_bytes(self, hasher: CredentialHasher) -> None:
        password = "a" * MAX_PASSWORD_BYTES
        assert hasher.verify(password, hasher.hash(password))

    def test_hash_rejects_over_72_bytes(self, hasher: CredentialHasher) -> None:
        with pytest.raises(InputTooLarge):
            hasher.hash("a" * (MAX_PASSWORD_BYTES + 1))

    def test_hash_bound_counts_bytes_not_characters(self, hasher: CredentialHasher) -> None:
        """37 two-byte characters are 74 bytes."""
        with pytest.raises(InputTooLarge):
            hasher.hash("é" * 37)


class TestVerify:
    """Tests for verify()."""

    def test_verify_correct_password(self, hasher: CredentialHasher) -> None:
        assert hasher.verify("password123", hasher.hash("password123")) is True

    def test_verify_wrong_password(self, hasher: CredentialHasher) -> None:
        assert hasher.verify("wrong", hasher.hash("password123")) is False

    @pytest.mark.parametrize("bad_hash", ["", "not-a-hash", "$2b$04$short", "$$$$"])
    def test_verify_malformed_hash_returns_false(
        self, hasher: CredentialHasher, bad_hash: str
    ) -> None:
        """Malformed hashes fail closed instead of raising."""
        assert hasher.verify("password123", bad_hash) is False

    def test_verify_missing_hash_returns_false(self, hasher: CredentialHasher) -> None:
        assert hasher.verify("password123", None) is False

    def test_verify_over_long_password_returns_false(self, hasher: CredentialHasher) -> None:
        password_hash = hasher.hash("a" * MAX_PASSWORD_BYTES)
        assert hasher.verify("a" * 100, password_hash) is False
