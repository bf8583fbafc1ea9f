"""
Unit tests for the in-memory store adapters.
"""

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from otpgate.adapters.memory import InMemoryIdentityRepository, InMemoryPendingRegistrationStore
from otpgate.domain.exceptions import DuplicateEmail, IdentityNotFound
from otpgate.domain.models import Identity, PendingRegistration

NOW = datetime(2026, 2, 1, 8, 0, tzinfo=timezone.utc)


def make_pending(email: str = "ada@example.com", code: str = "123456", minutes: int = 10):
    return PendingRegistration(
        email=email,
        display_name="Ada",
        password_hash="$2b$04$hash",
        otp_code=code,
        otp_expires_at=NOW + timedelta(minutes=minutes),
    )


def make_identity(email: str = "ada@example.com") -> Identity:
    return Identity(
        display_name="Ada",
        email=email,
        password_hash="$2b$04$hash",
        created_at=NOW,
        updated_at=NOW,
    )


class TestPendingStore:
    """Tests for InMemoryPendingRegistrationStore."""

    def test_get_missing_returns_none(self, pending_store: InMemoryPendingRegistrationStore) -> None:
        assert pending_store.get("nobody@example.com") is None

    def test_put_then_get(self, pending_store: InMemoryPendingRegistrationStore) -> None:
        entry = make_pending()
        pending_store.put(entry)
        assert pending_store.get("ada@example.com") == entry

    def test_put_replaces_earlier_entry(self, pending_store: InMemoryPendingRegistrationStore) -> None:
        """Latest registration attempt wins."""
        pending_store.put(make_pending(code="111111"))
        pending_store.put(make_pending(code="222222"))
        assert pending_store.get("ada@example.com").otp_code == "222222"
        assert len(pending_store) == 1

    def test_delete_is_idempotent(self, pending_store: InMemoryPendingRegistrationStore) -> None:
        pending_store.put(make_pending())
        pending_store.delete("ada@example.com")
        pending_store.delete("ada@example.com")
        assert pending_store.get("ada@example.com") is None

    def test_purge_removes_only_expired(self, pending_store: InMemoryPendingRegistrationStore) -> None:
        pending_store.put(make_pending("old@example.com", minutes=-1))
        pending_store.put(make_pending("edge@example.com", minutes=0))
        pending_store.put(make_pending("fresh@example.com", minutes=5))

        removed = pending_store.purge_expired(NOW)

        assert removed == 2
        assert pending_store.get("fresh@example.com") is not None
        assert pending_store.get("old@example.com") is None
        assert pending_store.get("edge@example.com") is None


class TestIdentityRepository:
    """Tests for InMemoryIdentityRepository."""

    def test_create_and_find(self, identities: InMemoryIdentityRepository) -> None:
        identity = identities.create(make_identity())
        assert identities.find_by_email("ada@example.com") == identity
        assert identities.find_by_id(identity.id) == identity

    def test_find_missing_returns_none(self, identities: InMemoryIdentityRepository) -> None:
        assert identities.find_by_email("nobody@example.com") is None
        assert identities.find_by_id("missing") is None

    def test_create_duplicate_email_raises(self, identities: InMemoryIdentityRepository) -> None:
        identities.create(make_identity())
        with pytest.raises(DuplicateEmail):
            identities.create(make_identity())
        assert len(identities.list_all()) == 1

    def test_ids_are_unique(self, identities: InMemoryIdentityRepository) -> None:
        first = identities.create(make_identity("a@example.com"))
        second = identities.create(make_identity("b@example.com"))
        assert first.id != second.id

    def test_save_updates_record(self, identities: InMemoryIdentityRepository) -> None:
        identity = identities.create(make_identity())
        identities.save(replace(identity, display_name="Ada L."))
        assert identities.find_by_id(identity.id).display_name == "Ada L."

    def test_save_moves_email_index(self, identities: InMemoryIdentityRepository) -> None:
        identity = identities.create(make_identity())
        identities.save(replace(identity, email="lovelace@example.com"))
        assert identities.find_by_email("ada@example.com") is None
        assert identities.find_by_email("lovelace@example.com").id == identity.id

    def test_save_to_taken_email_raises(self, identities: InMemoryIdentityRepository) -> None:
        identities.create(make_identity("taken@example.com"))
        identity = identities.create(make_identity())
        with pytest.raises(DuplicateEmail):
            identities.save(replace(identity, email="taken@example.com"))
        assert identities.find_by_email("ada@example.com").id == identity.id

    def test_save_unknown_id_raises(self, identities: InMemoryIdentityRepository) -> None:
        with pytest.raises(IdentityNotFound):
            identities.save(make_identity())

    def test_delete(self, identities: InMemoryIdentityRepository) -> None:
        identity = identities.create(make_identity())
        assert identities.delete(identity.id) is True
        assert identities.find_by_email("ada@example.com") is None
        assert identities.delete(identity.id) is False

    def test_email_reusable_after_delete(self, identities: InMemoryIdentityRepository) -> None:
        identity = identities.create(make_identity())
        identities.delete(identity.id)
        identities.create(make_identity())
        assert len(identities.list_all()) == 1
