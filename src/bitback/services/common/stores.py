"""Read-only store interfaces consumed by key generation.

The key services depend on the narrow ``Protocol`` types below, never on
SQL. The ``Postgres*`` classes implement them on top of the shared
[Store][bitback.core.store.Store] facade using the functions in
[queries][bitback.services.common.queries].

Missing rows raise
[RecordNotFoundError][bitback.core.exceptions.RecordNotFoundError]; any other
[DatabaseError][bitback.core.exceptions.DatabaseError] propagates unchanged.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from bitback.core.exceptions import RecordNotFoundError

from . import queries


if TYPE_CHECKING:
    from uuid import UUID

    from bitback.core.store import Store
    from bitback.models.host import Host
    from bitback.models.user import User


class UserStore(Protocol):
    async def get_by_id(self, user_id: UUID) -> User:
        """Return the user, or raise ``RecordNotFoundError``."""
        ...


class SubscriptionStore(Protocol):
    async def has_active_subscription(self, user_id: UUID) -> bool:
        """Whether the user holds at least one active subscription."""
        ...


class HostStore(Protocol):
    async def get_random_active_host(self, is_free_tier: bool, country: str | None) -> Host:
        """Return a random online host, or raise ``RecordNotFoundError``."""
        ...


class PostgresUserStore:
    """[UserStore][bitback.services.common.stores.UserStore] backed by PostgreSQL."""

    def __init__(self, store: Store) -> None:
        self._store = store

    async def get_by_id(self, user_id: UUID) -> User:
        user = await queries.fetch_user_by_id(self._store, user_id)
        if user is None:
            raise RecordNotFoundError(f"user {user_id} not found")
        return user


class PostgresSubscriptionStore:
    """[SubscriptionStore][bitback.services.common.stores.SubscriptionStore] backed by PostgreSQL."""

    def __init__(self, store: Store) -> None:
        self._store = store

    async def has_active_subscription(self, user_id: UUID) -> bool:
        return await queries.has_active_subscription(self._store, user_id)


class PostgresHostStore:
    """[HostStore][bitback.services.common.stores.HostStore] backed by PostgreSQL."""

    def __init__(self, store: Store) -> None:
        self._store = store

    async def get_random_active_host(self, is_free_tier: bool, country: str | None) -> Host:
        host = await queries.fetch_random_host(self._store, is_free_tier, country)
        if host is None:
            raise RecordNotFoundError(
                f"no online host (free_tier={is_free_tier}, country={country or 'any'})"
            )
        return host
