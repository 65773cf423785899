"""
Async PostgreSQL connection pool built on asyncpg.

Manages a pool of database connections with configurable size limits and
automatic retry with exponential backoff, both when the pool is created and
when a query hits a broken connection.

Driver errors never leave this module raw: connection-level failures and
query timeouts become
[ConnectionPoolError][bitback.core.exceptions.ConnectionPoolError], and
server-side errors (syntax, constraint violations) become
[QueryError][bitback.core.exceptions.QueryError].

Examples:
    ```python
    pool = Pool.from_yaml("config/pool.yaml")

    async with pool:
        row = await pool.fetchrow("SELECT * FROM hosts WHERE id = $1", 7)
    ```

See Also:
    [Store][bitback.core.store.Store]: Facade that wraps this pool and applies
        configured default timeouts.
"""

from __future__ import annotations

import asyncio
import os
from contextlib import AbstractAsyncContextManager
from typing import Any, Literal, cast

import asyncpg
from pydantic import BaseModel, Field, SecretStr, ValidationInfo, field_validator, model_validator

from .exceptions import ConnectionPoolError, QueryError
from .logger import Logger
from .yaml import load_yaml


# ---------------------------------------------------------------------------
# Configuration Models
# ---------------------------------------------------------------------------


class DatabaseConfig(BaseModel):
    """PostgreSQL connection parameters.

    The password is read from the environment variable named by
    ``password_env`` (default ``DB_PASSWORD``) and never from configuration
    files.
    """

    host: str = Field(default="localhost", min_length=1, description="Database hostname")
    port: int = Field(default=5432, ge=1, le=65535, description="Database port")
    database: str = Field(default="bitcloud", min_length=1, description="Database name shared with the existing deployment")
    user: str = Field(default="admin", min_length=1, description="Database user")
    ssl: Literal["disable", "prefer", "require", "verify-ca", "verify-full"] = Field(
        default="disable", description="SSL mode passed to asyncpg"
    )
    password_env: str = Field(
        default="DB_PASSWORD",  # pragma: allowlist secret
        min_length=1,
        description="Environment variable name for database password",
    )
    password: SecretStr = Field(description="Database password (loaded from password_env)")

    @model_validator(mode="before")
    @classmethod
    def resolve_password(cls, data: Any) -> Any:
        """Resolve the database password from the environment variable."""
        if isinstance(data, dict) and data.get("password") is None:
            env_var = data.get("password_env", "DB_PASSWORD")  # pragma: allowlist secret
            value = os.getenv(env_var)
            if not value:
                raise ValueError(f"{env_var} environment variable not set")
            data = {**data, "password": SecretStr(value)}
        return data


class PoolLimitsConfig(BaseModel):
    """Connection pool size and recycling limits."""

    min_size: int = Field(default=2, ge=1, le=100, description="Minimum connections")
    max_size: int = Field(default=25, ge=1, le=200, description="Maximum connections")
    max_queries: int = Field(default=50_000, ge=100, description="Queries before recycling")
    max_inactive_connection_lifetime: float = Field(
        default=300.0, ge=0.0, description="Idle timeout (seconds)"
    )

    @field_validator("max_size")
    @classmethod
    def validate_max_size(cls, v: int, info: ValidationInfo) -> int:
        """Ensure max_size >= min_size."""
        min_size = info.data.get("min_size", 2)
        if v < min_size:
            raise ValueError(f"max_size ({v}) must be >= min_size ({min_size})")
        return v


class PoolTimeoutsConfig(BaseModel):
    """Timeout settings for pool operations (in seconds)."""

    acquisition: float = Field(default=10.0, ge=0.1, description="Connection acquisition timeout")


class PoolRetryConfig(BaseModel):
    """Retry strategy for failed connection attempts.

    Exponential backoff waits ``initial_delay * 2^attempt``; linear backoff
    waits ``initial_delay * (attempt + 1)``. Both are capped at ``max_delay``.
    """

    max_attempts: int = Field(default=3, ge=1, le=10, description="Max retry attempts")
    initial_delay: float = Field(default=0.5, ge=0.01, description="Initial retry delay")
    max_delay: float = Field(default=5.0, ge=0.01, description="Maximum retry delay")
    exponential_backoff: bool = Field(default=True, description="Use exponential backoff")

    @field_validator("max_delay")
    @classmethod
    def validate_max_delay(cls, v: float, info: ValidationInfo) -> float:
        """Ensure max_delay >= initial_delay."""
        initial_delay = info.data.get("initial_delay", 0.5)
        if v < initial_delay:
            raise ValueError(f"max_delay ({v}) must be >= initial_delay ({initial_delay})")
        return v


class ServerSettingsConfig(BaseModel):
    """PostgreSQL session settings applied to every pooled connection.

    ``statement_timeout`` is in milliseconds and is a server-side safety net
    on top of the client-side per-query ``timeout``.
    """

    application_name: str = Field(default="bitback", description="Application name")
    timezone: str = Field(default="UTC", description="Timezone")
    statement_timeout: int = Field(
        default=30_000, ge=0, description="Max query execution time in milliseconds (0=unlimited)"
    )


class PoolConfig(BaseModel):
    """Aggregate configuration for the connection pool."""

    database: DatabaseConfig = Field(default_factory=lambda: DatabaseConfig.model_validate({}))
    limits: PoolLimitsConfig = Field(default_factory=PoolLimitsConfig)
    timeouts: PoolTimeoutsConfig = Field(default_factory=PoolTimeoutsConfig)
    retry: PoolRetryConfig = Field(default_factory=PoolRetryConfig)
    server_settings: ServerSettingsConfig = Field(default_factory=ServerSettingsConfig)


# ---------------------------------------------------------------------------
# Pool Class
# ---------------------------------------------------------------------------

# OSError covers refused or reset sockets when the pool opens a new connection
_TRANSIENT_ERRORS = (asyncpg.InterfaceError, asyncpg.PostgresConnectionError, OSError)


class Pool:
    """Async PostgreSQL connection pool manager.

    Wraps ``asyncpg.Pool`` with retry logic and typed error mapping. Build it
    directly from a [PoolConfig][bitback.core.pool.PoolConfig] or through
    [from_yaml()][bitback.core.pool.Pool.from_yaml] /
    [from_dict()][bitback.core.pool.Pool.from_dict].

    Note:
        Services never use ``Pool`` directly; they go through
        [Store][bitback.core.store.Store].
    """

    def __init__(self, config: PoolConfig | None = None) -> None:
        """Initialize the pool in a disconnected state.

        Args:
            config: Pool configuration. Defaults read ``DB_PASSWORD`` from
                the environment.
        """
        self._config = config or PoolConfig()
        self._pool: asyncpg.Pool[asyncpg.Record] | None = None
        self._is_connected: bool = False
        self._connection_lock = asyncio.Lock()
        self._logger = Logger("pool")

    @classmethod
    def from_yaml(cls, config_path: str) -> Pool:
        """Create a Pool from a YAML configuration file."""
        return cls.from_dict(load_yaml(config_path))

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> Pool:
        """Create a Pool from a dictionary matching ``PoolConfig`` fields."""
        return cls(config=PoolConfig(**config_dict))

    def _retry_delay(self, attempt: int) -> float:
        """Compute retry backoff delay for the given attempt number."""
        retry = self._config.retry
        if retry.exponential_backoff:
            delay = retry.initial_delay * (2**attempt)
        else:
            delay = retry.initial_delay * (attempt + 1)
        return float(min(delay, retry.max_delay))

    # -------------------------------------------------------------------------
    # Connection Lifecycle
    # -------------------------------------------------------------------------

    async def connect(self) -> None:
        """Create the asyncpg connection pool, retrying with backoff.

        Guarded by an internal lock so concurrent callers create a single
        pool. Calling it on a connected pool is a no-op.

        Raises:
            ConnectionPoolError: If all retry attempts are exhausted.
        """
        async with self._connection_lock:
            if self._is_connected:
                return

            db = self._config.database
            self._logger.info(
                "connection_starting",
                host=db.host,
                port=db.port,
                database=db.database,
            )

            for attempt in range(self._config.retry.max_attempts):
                try:
                    self._pool = await asyncpg.create_pool(
                        host=db.host,
                        port=db.port,
                        database=db.database,
                        user=db.user,
                        password=db.password.get_secret_value(),
                        ssl=db.ssl,
                        min_size=self._config.limits.min_size,
                        max_size=self._config.limits.max_size,
                        max_queries=self._config.limits.max_queries,
                        max_inactive_connection_lifetime=self._config.limits.max_inactive_connection_lifetime,
                        timeout=self._config.timeouts.acquisition,
                        server_settings={
                            "application_name": self._config.server_settings.application_name,
                            "timezone": self._config.server_settings.timezone,
                            "statement_timeout": str(
                                self._config.server_settings.statement_timeout
                            ),
                        },
                    )
                    self._is_connected = True
                    self._logger.info("connection_established")
                    return

                except (asyncpg.PostgresError, OSError, ConnectionError) as e:
                    if attempt + 1 >= self._config.retry.max_attempts:
                        self._logger.error("connection_failed", attempts=attempt + 1, error=str(e))
                        raise ConnectionPoolError(
                            f"Failed to connect after {attempt + 1} attempts: {e}"
                        ) from e

                    delay = self._retry_delay(attempt)
                    self._logger.warning(
                        "connection_retry", attempt=attempt + 1, delay=delay, error=str(e)
                    )
                    await asyncio.sleep(delay)

    async def close(self) -> None:
        """Close the pool and release all connections. Idempotent."""
        async with self._connection_lock:
            if self._pool is not None:
                try:
                    await self._pool.close()
                    self._logger.info("connection_closed")
                finally:
                    self._pool = None
                    self._is_connected = False

    def acquire(self) -> AbstractAsyncContextManager[asyncpg.Connection[asyncpg.Record]]:
        """Acquire a connection from the pool as an async context manager.

        Raises:
            RuntimeError: If the pool has not been connected yet.
        """
        if not self._is_connected or self._pool is None:
            raise RuntimeError("Pool not connected. Call connect() first.")
        return cast(
            "AbstractAsyncContextManager[asyncpg.Connection[asyncpg.Record]]",
            self._pool.acquire(),
        )

    # -------------------------------------------------------------------------
    # Query Methods
    # -------------------------------------------------------------------------

    async def _execute_with_retry(
        self,
        operation: Literal["fetchrow", "fetchval"],
        query: str,
        args: tuple[Any, ...],
        timeout: float | None,  # noqa: ASYNC109
    ) -> Any:
        """Run a named asyncpg operation, retrying on broken connections.

        Each attempt acquires a fresh connection, so a socket that died
        mid-query is not reused. Query-level errors and timeouts are not
        retried.

        Raises:
            ConnectionPoolError: Connection errors after the last attempt,
                or the query timed out.
            QueryError: The server rejected the query.
        """
        max_attempts = self._config.retry.max_attempts

        for attempt in range(max_attempts):
            try:
                async with self.acquire() as conn:
                    method = getattr(conn, operation)
                    return await method(query, *args, timeout=timeout)
            except TimeoutError as e:
                self._logger.warning("query_timeout", operation=operation, timeout=timeout)
                raise ConnectionPoolError(f"{operation} timed out after {timeout}s") from e
            except _TRANSIENT_ERRORS as e:
                if attempt < max_attempts - 1:
                    delay = self._retry_delay(attempt)
                    self._logger.warning(
                        "query_retry",
                        operation=operation,
                        attempt=attempt + 1,
                        delay_s=delay,
                        error=str(e),
                    )
                    await asyncio.sleep(delay)
                    continue
                self._logger.error(
                    "query_failed", operation=operation, attempts=max_attempts, error=str(e)
                )
                raise ConnectionPoolError(
                    f"{operation} failed after {max_attempts} attempts: {e}"
                ) from e
            except asyncpg.PostgresError as e:
                raise QueryError(f"{operation} rejected by server: {e}") from e

        raise RuntimeError("Unexpected state in _execute_with_retry")

    async def fetchrow(
        self,
        query: str,
        *args: Any,
        timeout: float | None = None,  # noqa: ASYNC109
    ) -> asyncpg.Record | None:
        """Execute a query and return the first row, or None."""
        result = await self._execute_with_retry("fetchrow", query, args, timeout)
        return cast("asyncpg.Record | None", result)

    async def fetchval(
        self,
        query: str,
        *args: Any,
        timeout: float | None = None,  # noqa: ASYNC109
    ) -> Any:
        """Execute a query and return the first column of the first row."""
        return await self._execute_with_retry("fetchval", query, args, timeout)

    # -------------------------------------------------------------------------
    # Properties and Context Manager
    # -------------------------------------------------------------------------

    @property
    def is_connected(self) -> bool:
        """Whether the pool has an active connection to the database."""
        return self._is_connected

    @property
    def config(self) -> PoolConfig:
        """The pool configuration (read-only)."""
        return self._config

    async def __aenter__(self) -> Pool:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any | None,
    ) -> None:
        await self.close()

    def __repr__(self) -> str:
        db = self._config.database
        return f"Pool(host={db.host}, database={db.database}, connected={self._is_connected})"
