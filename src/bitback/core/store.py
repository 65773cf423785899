"""
Database facade shared by all Bitback services.

``Store`` owns a private [Pool][bitback.core.pool.Pool] and exposes the
read-only query surface services need (``fetchrow`` and
``fetchval``), applying the configured default timeout to every call. All
domain SQL lives in [queries][bitback.services.common.queries], not here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field, field_validator

from .logger import Logger
from .pool import Pool, PoolConfig
from .yaml import load_yaml


if TYPE_CHECKING:
    import asyncpg


_MIN_TIMEOUT_SECONDS = 0.1


class StoreTimeoutsConfig(BaseModel):
    """Default client-side timeouts for Store queries (in seconds).

    ``None`` means no client-side limit; the server-side
    ``statement_timeout`` still applies.
    """

    query: float | None = Field(default=5.0, description="Query timeout (seconds, None=infinite)")

    @field_validator("query", mode="after")
    @classmethod
    def validate_timeout(cls, v: float | None) -> float | None:
        """Validate timeout: None (infinite) or >= 0.1 seconds."""
        if v is not None and v < _MIN_TIMEOUT_SECONDS:
            raise ValueError(
                f"Timeout must be None (infinite) or >= {_MIN_TIMEOUT_SECONDS} seconds"
            )
        return v


class StoreConfig(BaseModel):
    """Aggregate configuration for the Store facade."""

    timeouts: StoreTimeoutsConfig = Field(default_factory=StoreTimeoutsConfig)


class Store:
    """High-level database interface wrapping a connection pool.

    Example:
        store = Store.from_yaml("config/store.yaml")

        async with store:
            user = await queries.fetch_user_by_id(store, user_id)
    """

    def __init__(self, pool: Pool | None = None, config: StoreConfig | None = None) -> None:
        self._pool = pool or Pool()
        self._config = config or StoreConfig()
        self._logger = Logger("store")

    @property
    def config(self) -> StoreConfig:
        """The Store configuration (read-only)."""
        return self._config

    @property
    def pool(self) -> Pool:
        """The underlying connection pool."""
        return self._pool

    @classmethod
    def from_yaml(cls, config_path: str) -> Store:
        """Create a Store from a YAML file with a ``pool`` key and optional ``timeouts``."""
        return cls.from_dict(load_yaml(config_path))

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> Store:
        """Create a Store from a configuration dictionary.

        The ``pool`` key builds the [Pool][bitback.core.pool.Pool]; the
        remaining keys are [StoreConfig][bitback.core.store.StoreConfig]
        fields.
        """
        pool = Pool.from_dict(config_dict["pool"]) if "pool" in config_dict else None
        store_dict = {k: v for k, v in config_dict.items() if k != "pool"}
        config = StoreConfig(**store_dict) if store_dict else None
        return cls(pool=pool, config=config)

    def _timeout(self, timeout: float | None) -> float | None:
        return timeout if timeout is not None else self._config.timeouts.query

    async def fetchrow(
        self,
        query: str,
        *args: Any,
        timeout: float | None = None,  # noqa: ASYNC109
    ) -> asyncpg.Record | None:
        """Execute a query and return the first row, or None."""
        return await self._pool.fetchrow(query, *args, timeout=self._timeout(timeout))

    async def fetchval(self, query: str, *args: Any, timeout: float | None = None) -> Any:  # noqa: ASYNC109
        """Execute a query and return the first column of the first row."""
        return await self._pool.fetchval(query, *args, timeout=self._timeout(timeout))

    async def __aenter__(self) -> Store:
        await self._pool.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any | None,
    ) -> None:
        await self._pool.close()

    def __repr__(self) -> str:
        return f"Store(pool={self._pool!r})"
