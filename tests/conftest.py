"""
Pytest configuration and shared fixtures for Bitback tests.

Provides:
- Mock fixtures for asyncpg, Pool and Store
- Sample host and user fixtures
- In-memory store doubles for the key services
"""

import logging
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest

from bitback.core.exceptions import RecordNotFoundError
from bitback.core.pool import DatabaseConfig, Pool, PoolConfig
from bitback.core.store import Store
from bitback.models import Host, HostStatus, User


# ============================================================================
# Logging Configuration
# ============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_logging() -> None:
    """Configure logging for tests."""
    logging.basicConfig(level=logging.DEBUG)


# ============================================================================
# Mock Fixtures
# ============================================================================


@pytest.fixture
def mock_connection() -> MagicMock:
    """Create a mock asyncpg connection."""
    conn = MagicMock()
    conn.fetchrow = AsyncMock(return_value=None)
    conn.fetchval = AsyncMock(return_value=1)
    return conn


@pytest.fixture
def mock_asyncpg_pool(mock_connection: MagicMock) -> MagicMock:
    """Create a mock asyncpg pool."""
    pool = MagicMock()
    pool.close = AsyncMock()

    mock_acquire = MagicMock()
    mock_acquire.__aenter__ = AsyncMock(return_value=mock_connection)
    mock_acquire.__aexit__ = AsyncMock(return_value=None)
    pool.acquire = MagicMock(return_value=mock_acquire)

    return pool


@pytest.fixture
def mock_pool(
    mock_asyncpg_pool: MagicMock, mock_connection: MagicMock, monkeypatch: pytest.MonkeyPatch
) -> Pool:
    """Create a Pool with mocked internals."""
    monkeypatch.setenv("DB_PASSWORD", "test_password")

    config = PoolConfig(
        database=DatabaseConfig(
            host="localhost",
            port=5432,
            database="test_db",
            user="test_user",
        )
    )
    pool = Pool(config=config)
    pool._pool = mock_asyncpg_pool
    pool._is_connected = True

    # Store mock connection for easy access in tests
    pool._mock_connection = mock_connection  # type: ignore[attr-defined]

    return pool


@pytest.fixture
def mock_store(mock_pool: Pool) -> Store:
    """Create a Store instance with mocked pool."""
    return Store(pool=mock_pool)


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def pool_config_dict() -> dict[str, Any]:
    """Sample pool configuration dictionary."""
    return {
        "database": {
            "host": "localhost",
            "port": 5432,
            "database": "test_db",
            "user": "test_user",
            "password": "test_pass",
        },
        "limits": {
            "min_size": 2,
            "max_size": 10,
            "max_queries": 1000,
            "max_inactive_connection_lifetime": 60.0,
        },
        "timeouts": {"acquisition": 5.0},
        "retry": {
            "max_attempts": 2,
            "initial_delay": 0.5,
            "max_delay": 2.0,
            "exponential_backoff": True,
        },
        "server_settings": {
            "application_name": "test_app",
            "timezone": "UTC",
        },
    }


# ============================================================================
# Sample Data Fixtures
# ============================================================================


USER_ID = UUID("00000000-0000-0000-0000-000000000001")


def make_host(**overrides: Any) -> Host:
    """Build a free, online, non-Reality host with optional overrides."""
    fields: dict[str, Any] = {
        "id": 1,
        "address": "1.2.3.4",
        "port": "443",
        "protocol": "vless",
        "network": "",
        "security_type": "none",
        "is_free_tier": True,
        "is_online": True,
        "status": HostStatus.ACTIVE,
    }
    fields.update(overrides)
    return Host(**fields)


@pytest.fixture
def host() -> Host:
    """A plain free-tier host."""
    return make_host()


@pytest.fixture
def reality_host() -> Host:
    """A paid Reality host with public key and short id."""
    return make_host(
        id=2,
        security_type="reality",
        sni="www.example.com",
        fingerprint="chrome",
        public_key="PBK123",
        short_id="SID1",
        flow="xtls-rprx-vision",
        is_free_tier=False,
        country="DE",
    )


@pytest.fixture
def user() -> User:
    """An active user."""
    return User(id=USER_ID, name="alice", email="alice@example.com", telegram_id=42)


@pytest.fixture
def host_record() -> dict[str, Any]:
    """A ``hosts`` row as returned by asyncpg (mapping interface)."""
    return {
        "id": 7,
        "address": "vpn.example.com",
        "port": 8443,
        "protocol": "vless",
        "network": None,
        "security_type": "reality",
        "sni": "www.example.com",
        "fingerprint": "chrome",
        "public_key": "PBK",
        "short_id": None,
        "flow": "",
        "is_free_tier": True,
        "is_online": True,
        "status": "active",
        "country": "US",
        "city": None,
        "region": "",
        "provider": "hetzner",
        "host_name": "us-1",
        "is_private": False,
    }


# ============================================================================
# Store Doubles
# ============================================================================


class FakeHostStore:
    """In-memory host store picking the first eligible host.

    Filters exactly like the PostgreSQL implementation: online hosts of the
    requested tier, country compared case-insensitively when given.
    """

    def __init__(self, hosts: list[Host]) -> None:
        self.hosts = hosts
        self.calls: list[tuple[bool, str | None]] = []

    async def get_random_active_host(self, is_free_tier: bool, country: str | None) -> Host:
        self.calls.append((is_free_tier, country))
        for h in self.hosts:
            if not h.is_online or h.is_free_tier != is_free_tier:
                continue
            if country and (h.country or "").lower() != country.lower():
                continue
            return h
        raise RecordNotFoundError("no host")


@pytest.fixture
def fake_host_store() -> type[FakeHostStore]:
    """The in-memory host store class."""
    return FakeHostStore


@pytest.fixture
def host_factory() -> Any:
    """The ``make_host`` builder, for tests that need several hosts."""
    return make_host
