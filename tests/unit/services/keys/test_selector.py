"""Unit tests for services.keys.selector module.

Tests:
- Tier routing (free/paid)
- Country-first search and single relaxed retry
- NoHostAvailableError when nothing matches
- Store faults surfaced as HostLookupFailedError
"""

from unittest.mock import AsyncMock

import pytest

from bitback.core.exceptions import (
    ConnectionPoolError,
    HostLookupFailedError,
    NoHostAvailableError,
    QueryError,
    RecordNotFoundError,
)
from bitback.models import Tier
from bitback.services.keys.selector import HostSelector


class TestTierRouting:
    async def test_free_tier_gets_free_host(self, host_factory, fake_host_store) -> None:
        free = host_factory(id=1, is_free_tier=True)
        paid = host_factory(id=2, is_free_tier=False)
        selector = HostSelector(fake_host_store([paid, free]))

        assert (await selector.select(Tier.FREE)).id == 1

    async def test_paid_tier_gets_paid_host(self, host_factory, fake_host_store) -> None:
        free = host_factory(id=1, is_free_tier=True)
        paid = host_factory(id=2, is_free_tier=False)
        selector = HostSelector(fake_host_store([free, paid]))

        assert (await selector.select(Tier.PAID)).id == 2

    async def test_paid_tier_without_paid_hosts(self, host_factory, fake_host_store) -> None:
        store = fake_host_store([host_factory(is_free_tier=True)])
        selector = HostSelector(store)

        with pytest.raises(NoHostAvailableError, match="no active hosts available"):
            await selector.select(Tier.PAID, None)
        assert store.calls == [(False, None)]

    async def test_offline_hosts_ignored(self, host_factory, fake_host_store) -> None:
        selector = HostSelector(fake_host_store([host_factory(is_online=False)]))
        with pytest.raises(NoHostAvailableError):
            await selector.select(Tier.FREE)


class TestCountryFallback:
    async def test_country_match(self, host_factory, fake_host_store) -> None:
        store = fake_host_store(
            [host_factory(id=1, country="DE"), host_factory(id=2, country="US")]
        )
        host = await HostSelector(store).select(Tier.FREE, "us")

        assert host.id == 2
        assert store.calls == [(True, "us")]

    async def test_falls_back_to_other_country(self, host_factory, fake_host_store) -> None:
        store = fake_host_store([host_factory(id=5, country="NL")])
        host = await HostSelector(store).select(Tier.FREE, "US")

        assert host.id == 5
        assert host.country == "NL"
        assert store.calls == [(True, "US"), (True, None)]

    async def test_no_fallback_without_country(self, fake_host_store) -> None:
        store = fake_host_store([])
        with pytest.raises(NoHostAvailableError):
            await HostSelector(store).select(Tier.FREE)
        assert store.calls == [(True, None)]

    async def test_empty_country_treated_as_absent(self, fake_host_store) -> None:
        store = fake_host_store([])
        with pytest.raises(NoHostAvailableError):
            await HostSelector(store).select(Tier.FREE, "")
        assert store.calls == [(True, None)]

    async def test_fallback_exhausted(self, fake_host_store) -> None:
        store = fake_host_store([])
        with pytest.raises(NoHostAvailableError):
            await HostSelector(store).select(Tier.PAID, "US")
        assert store.calls == [(False, "US"), (False, None)]


class TestStoreFaults:
    @pytest.mark.parametrize("error", [ConnectionPoolError("down"), QueryError("bad sql")])
    async def test_database_error_wrapped(self, error) -> None:
        hosts = AsyncMock()
        hosts.get_random_active_host = AsyncMock(side_effect=error)

        with pytest.raises(HostLookupFailedError) as exc_info:
            await HostSelector(hosts).select(Tier.FREE, "US")
        assert exc_info.value.__cause__ is error

    async def test_fault_on_fallback_wrapped(self, host) -> None:
        hosts = AsyncMock()
        hosts.get_random_active_host = AsyncMock(
            side_effect=[RecordNotFoundError("none"), ConnectionPoolError("down")]
        )

        with pytest.raises(HostLookupFailedError):
            await HostSelector(hosts).select(Tier.FREE, "US")

    async def test_lookup_failure_is_not_no_host(self) -> None:
        hosts = AsyncMock()
        hosts.get_random_active_host = AsyncMock(side_effect=ConnectionPoolError("down"))

        with pytest.raises(HostLookupFailedError) as exc_info:
            await HostSelector(hosts).select(Tier.FREE)
        assert not isinstance(exc_info.value, NoHostAvailableError)
