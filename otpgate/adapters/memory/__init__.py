"""In-process store adapters."""

from .stores import InMemoryIdentityRepository, InMemoryPendingRegistrationStore

__all__ = ["InMemoryIdentityRepository", "InMemoryPendingRegistrationStore"]
