"""Shared infrastructure for Bitback services.

Attributes:
    queries: Domain-specific SQL query functions centralized in one module
        to avoid scattering inline SQL across services.
    stores: Read-only store ``Protocol`` types consumed by the key services
        and their PostgreSQL implementations.

See Also:
    [Store][bitback.core.store.Store]: Database facade consumed by all
        query functions in this package.
"""

from .stores import (
    HostStore,
    PostgresHostStore,
    PostgresSubscriptionStore,
    PostgresUserStore,
    SubscriptionStore,
    UserStore,
)


__all__ = [
    "HostStore",
    "PostgresHostStore",
    "PostgresSubscriptionStore",
    "PostgresUserStore",
    "SubscriptionStore",
    "UserStore",
]
