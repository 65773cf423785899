"""Host selection by tier with a country-relaxing fallback."""

from __future__ import annotations

from typing import TYPE_CHECKING

from bitback.core.exceptions import (
    DatabaseError,
    HostLookupFailedError,
    NoHostAvailableError,
    RecordNotFoundError,
)
from bitback.core.logger import Logger
from bitback.models.constants import Tier


if TYPE_CHECKING:
    from bitback.models.host import Host
    from bitback.services.common.stores import HostStore


class HostSelector:
    """Pick one online host eligible for a tier, preferring a country.

    When a country is requested and no host there is online, the search is
    retried once without the country filter. Among eligible hosts the choice
    is uniform at random (delegated to the
    [HostStore][bitback.services.common.stores.HostStore]).

    Example:
        selector = HostSelector(PostgresHostStore(store))
        host = await selector.select(Tier.FREE, country="US")
    """

    def __init__(self, hosts: HostStore) -> None:
        self._hosts = hosts
        self._logger = Logger("host_selector")

    async def select(self, tier: Tier, country: str | None = None) -> Host:
        """Return a host for ``tier``, trying ``country`` first.

        Raises:
            NoHostAvailableError: No online host matches the tier, with or
                without the country filter.
            HostLookupFailedError: The host store failed.
        """
        is_free_tier = tier is Tier.FREE
        country = country or None

        host = await self._lookup(is_free_tier, country)
        if host is None and country is not None:
            self._logger.info("host_fallback_without_country", tier=tier, country=country)
            host = await self._lookup(is_free_tier, None)

        if host is None:
            raise NoHostAvailableError("no active hosts available for the requested criteria")
        return host

    async def _lookup(self, is_free_tier: bool, country: str | None) -> Host | None:
        try:
            return await self._hosts.get_random_active_host(is_free_tier, country)
        except RecordNotFoundError:
            return None
        except DatabaseError as e:
            raise HostLookupFailedError(
                f"host lookup failed (free_tier={is_free_tier}, country={country or 'any'}): {e}"
            ) from e
