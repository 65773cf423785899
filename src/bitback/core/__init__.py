"""Core layer providing the foundation for all Bitback services.

Depends only on ``bitback.models`` and is depended upon by
``bitback.services``.

Attributes:
    Pool: Async PostgreSQL connection pool with retry/backoff and typed
        error mapping. See [Pool][bitback.core.pool.Pool].
    Store: Database facade applying default timeouts. Services use
        [Store][bitback.core.store.Store], never the pool directly.
    BaseService: Abstract generic base class with lifecycle management,
        YAML/dict factories and Prometheus metrics.
    Logger: Structured logger supporting key=value and JSON output modes.
    MetricsServer: Prometheus ``/metrics`` HTTP endpoint.
    load_yaml: Safe YAML loading with ``yaml.safe_load()``.
"""

from .base_service import BaseService, BaseServiceConfig, ConfigT
from .exceptions import (
    BitbackError,
    ConfigurationError,
    ConnectionPoolError,
    DatabaseError,
    HostLookupFailedError,
    KeyGenerationError,
    KeyValidationError,
    NoHostAvailableError,
    QueryError,
    RecordNotFoundError,
    UserNotFoundError,
)
from .logger import Logger, StructuredFormatter, format_kv_pairs
from .metrics import (
    CYCLE_DURATION_SECONDS,
    KEYS_GENERATED,
    SERVICE_COUNTER,
    SERVICE_GAUGE,
    SERVICE_INFO,
    MetricsConfig,
    MetricsServer,
    start_metrics_server,
)
from .pool import (
    DatabaseConfig,
    Pool,
    PoolConfig,
    PoolLimitsConfig,
    PoolRetryConfig,
    PoolTimeoutsConfig,
    ServerSettingsConfig,
)
from .store import Store, StoreConfig, StoreTimeoutsConfig
from .yaml import load_yaml


__all__ = [
    "CYCLE_DURATION_SECONDS",
    "KEYS_GENERATED",
    "SERVICE_COUNTER",
    "SERVICE_GAUGE",
    "SERVICE_INFO",
    "BaseService",
    "BaseServiceConfig",
    "BitbackError",
    "ConfigT",
    "ConfigurationError",
    "ConnectionPoolError",
    "DatabaseConfig",
    "DatabaseError",
    "HostLookupFailedError",
    "KeyGenerationError",
    "KeyValidationError",
    "Logger",
    "MetricsConfig",
    "MetricsServer",
    "NoHostAvailableError",
    "Pool",
    "PoolConfig",
    "PoolLimitsConfig",
    "PoolRetryConfig",
    "PoolTimeoutsConfig",
    "QueryError",
    "RecordNotFoundError",
    "ServerSettingsConfig",
    "Store",
    "StoreConfig",
    "StoreTimeoutsConfig",
    "StructuredFormatter",
    "UserNotFoundError",
    "format_kv_pairs",
    "load_yaml",
    "start_metrics_server",
]
