"""
In-memory store adapters - Implement the storage ports with dicts.

Each store guards its dicts with a single lock, so every operation is
atomic. create() checks and inserts under that lock, which gives the
unique-email guarantee the identity port requires. Contents are lost on
restart; use the postgres adapters for durable storage.
"""

import threading
from datetime import datetime

from otpgate.domain.exceptions import DuplicateEmail, IdentityNotFound
from otpgate.domain.models import Identity, PendingRegistration


class InMemoryPendingRegistrationStore:
    """
    Implements PendingRegistrationStore protocol with a dict keyed by email.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self) -> None:
        self._entries: dict[str, PendingRegistration] = {}
        self._lock = threading.Lock()

    def put(self, registration: PendingRegistration) -> None:
        with self._lock:
            self._entries[registration.email] = registration

    def get(self, email: str) -> PendingRegistration | None:
        with self._lock:
            return self._entries.get(email)

    def delete(self, email: str) -> None:
        with self._lock:
            self._entries.pop(email, None)

    def purge_expired(self, now: datetime) -> int:
        with self._lock:
            expired = [email for email, entry in self._entries.items() if entry.is_expired(now)]
            for email in expired:
                del self._entries[email]
            return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class InMemoryIdentityRepository:
    """
    Implements IdentityRepository protocol with two dicts (by id, email -> id).

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self) -> None:
        self._by_id: dict[str, Identity] = {}
        self._id_by_email: dict[str, str] = {}
        self._lock = threading.Lock()

    def find_by_email(self, email: str) -> Identity | None:
        with self._lock:
            identity_id = self._id_by_email.get(email)
            return self._by_id.get(identity_id) if identity_id is not None else None

    def find_by_id(self, identity_id: str) -> Identity | None:
        with self._lock:
            return self._by_id.get(identity_id)

    def create(self, identity: Identity) -> Identity:
        with self._lock:
            if identity.email in self._id_by_email:
                raise DuplicateEmail(identity.email)
            if identity.id in self._by_id:
                raise ValueError(f"Identity id already exists: {identity.id}")
            self._by_id[identity.id] = identity
            self._id_by_email[identity.email] = identity.id
            return identity

    def save(self, identity: Identity) -> Identity:
        with self._lock:
            current = self._by_id.get(identity.id)
            if current is None:
                raise IdentityNotFound(identity.id)
            owner = self._id_by_email.get(identity.email)
            if owner is not None and owner != identity.id:
                raise DuplicateEmail(identity.email)
            if current.email != identity.email:
                del self._id_by_email[current.email]
            self._by_id[identity.id] = identity
            self._id_by_email[identity.email] = identity.id
            return identity

    def delete(self, identity_id: str) -> bool:
        with self._lock:
            identity = self._by_id.pop(identity_id, None)
            if identity is None:
                return False
            self._id_by_email.pop(identity.email, None)
            return True

    def list_all(self) -> list[Identity]:
        with self._lock:
            return list(self._by_id.values())
