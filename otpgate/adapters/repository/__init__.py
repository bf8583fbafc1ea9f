"""Repository adapters - Database implementations."""

from .postgres import (
    PostgresIdentityRepository,
    PostgresPendingRegistrationStore,
    create_pool,
    run_migrations,
)

__all__ = [
    "PostgresIdentityRepository",
    "PostgresPendingRegistrationStore",
    "create_pool",
    "run_migrations",
]
