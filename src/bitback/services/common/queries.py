"""Domain-specific database queries for Bitback services.

All SQL used by services is centralized here. Each function accepts a
[Store][bitback.core.store.Store] instance and returns typed results or
raw scalars. Services import from this module instead of writing inline SQL.

- **User queries**: ``fetch_user_by_id``
- **Subscription queries**: ``has_active_subscription``
- **Host queries**: ``fetch_random_host``, ``count_online_hosts``

Warning:
    All queries use ``timeouts.query`` from
    [StoreTimeoutsConfig][bitback.core.store.StoreTimeoutsConfig]. The
    PostgreSQL ``statement_timeout`` acts as a server-side safety net.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from bitback.core.exceptions import QueryError
from bitback.models.host import Host
from bitback.models.user import User


if TYPE_CHECKING:
    from uuid import UUID

    from bitback.core.store import Store

logger = logging.getLogger(__name__)


# =============================================================================
# User queries
# =============================================================================


async def fetch_user_by_id(store: Store, user_id: UUID) -> User | None:
    """Fetch a non-deleted user by id, or None if there is no such row."""
    row = await store.fetchrow(
        """
        SELECT id, name, email, telegram_id, is_active
        FROM users
        WHERE id = $1 AND deleted_at IS NULL
        """,
        user_id,
    )
    if row is None:
        return None
    return User.from_record(row)


# =============================================================================
# Subscription queries
# =============================================================================


async def has_active_subscription(store: Store, user_id: UUID) -> bool:
    """Whether the user holds at least one active, unexpired subscription."""
    result = await store.fetchval(
        """
        SELECT EXISTS (
            SELECT 1
            FROM subscriptions
            WHERE user_id = $1
              AND is_active
              AND end_date > NOW()
              AND deleted_at IS NULL
        )
        """,
        user_id,
    )
    return bool(result)


# =============================================================================
# Host queries
# =============================================================================


_HOST_COLUMNS = """
    id, address, port, protocol, network, security_type, sni, fingerprint,
    public_key, short_id, flow, is_free_tier, is_online, status,
    country, city, region, provider, host_name, is_private
"""


async def fetch_random_host(
    store: Store,
    is_free_tier: bool,
    country: str | None = None,
) -> Host | None:
    """Pick one online host of the given tier uniformly at random.

    Hosts with ``status = 'active'`` are preferred; when none exist the pick
    falls back to any online host, including those with a NULL status. Rows
    without an address or port are never picked. ``country`` is compared
    case-insensitively and ignored when None or empty. The choice is made
    in a single statement, so a concurrently changing host set can only
    result in no row.

    Returns:
        The chosen [Host][bitback.models.host.Host], or None when no host
        matches.

    Raises:
        QueryError: The picked row fails [Host][bitback.models.host.Host]
            validation.
    """
    if country:
        row = await store.fetchrow(
            f"""
            SELECT {_HOST_COLUMNS}
            FROM hosts
            WHERE is_online
              AND is_free_tier = $1
              AND LOWER(country) = LOWER($2)
              AND address <> ''
              AND port::text <> ''
              AND deleted_at IS NULL
            ORDER BY (status = 'active') IS TRUE DESC, RANDOM()
            LIMIT 1
            """,  # noqa: S608
            is_free_tier,
            country,
        )
    else:
        row = await store.fetchrow(
            f"""
            SELECT {_HOST_COLUMNS}
            FROM hosts
            WHERE is_online
              AND is_free_tier = $1
              AND address <> ''
              AND port::text <> ''
              AND deleted_at IS NULL
            ORDER BY (status = 'active') IS TRUE DESC, RANDOM()
            LIMIT 1
            """,  # noqa: S608
            is_free_tier,
        )
    if row is None:
        return None
    try:
        return Host.from_record(row)
    except (ValueError, TypeError) as e:
        logger.warning("Invalid host row %s: %s", row["id"], e)
        raise QueryError(f"host {row['id']} has invalid data: {e}") from e


async def count_online_hosts(store: Store, is_free_tier: bool | None = None) -> int:
    """Count online hosts, optionally restricted to one tier."""
    if is_free_tier is None:
        result = await store.fetchval(
            "SELECT COUNT(*) FROM hosts WHERE is_online AND deleted_at IS NULL",
        )
    else:
        result = await store.fetchval(
            """
            SELECT COUNT(*)
            FROM hosts
            WHERE is_online AND is_free_tier = $1 AND deleted_at IS NULL
            """,
            is_free_tier,
        )
    return int(result or 0)
