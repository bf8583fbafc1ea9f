"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- An injectable clock that tests advance by hand
- A notifier that records every code it is asked to deliver
- Domain services wired to the in-memory stores
"""

from datetime import timedelta

import pytest

from otpgate.adapters.memory import InMemoryIdentityRepository, InMemoryPendingRegistrationStore
from otpgate.domain.accounts import AccountService
from otpgate.domain.hashing import CredentialHasher
from otpgate.domain.models import AdminCredentials
from otpgate.domain.otp import OtpGenerator
from otpgate.domain.registration import RegistrationService
from otpgate.domain.tokens import TokenIssuer

from tests.support import ADMIN_EMAIL, ADMIN_PASSWORD, TEST_SECRET, FakeClock, RecordingNotifier


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture(scope="session")
def hasher() -> CredentialHasher:
    """bcrypt at the minimum cost keeps the suite fast."""
    return CredentialHasher(cost=4)


@pytest.fixture
def otp() -> OtpGenerator:
    return OtpGenerator(digits=6, ttl=timedelta(minutes=10))


@pytest.fixture
def tokens(clock: FakeClock) -> TokenIssuer:
    return TokenIssuer(secret=TEST_SECRET, ttl=timedelta(hours=1), clock=clock)


@pytest.fixture
def pending_store() -> InMemoryPendingRegistrationStore:
    return InMemoryPendingRegistrationStore()


@pytest.fixture
def identities() -> InMemoryIdentityRepository:
    return InMemoryIdentityRepository()


@pytest.fixture
def admin() -> AdminCredentials:
    return AdminCredentials(email=ADMIN_EMAIL, password=ADMIN_PASSWORD)


@pytest.fixture
def service(
    pending_store: InMemoryPendingRegistrationStore,
    identities: InMemoryIdentityRepository,
    notifier: RecordingNotifier,
    hasher: CredentialHasher,
    otp: OtpGenerator,
    tokens: TokenIssuer,
    admin: AdminCredentials,
    clock: FakeClock,
) -> RegistrationService:
    """Registration service over in-memory stores and a recording notifier."""
    return RegistrationService(
        pending=pending_store,
        identities=identities,
        notifier=notifier,
        hasher=hasher,
        otp=otp,
        tokens=tokens,
        admin=admin,
        clock=clock,
    )


@pytest.fixture
def accounts(
    identities: InMemoryIdentityRepository, hasher: CredentialHasher, clock: FakeClock
) -> AccountService:
    return AccountService(identities=identities, hasher=hasher, clock=clock)
