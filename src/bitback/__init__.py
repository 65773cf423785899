r"""Bitback -- key generation and host selection backend for a VPN service.

Bitback picks an eligible proxy host for a user (or an anonymous free-tier
request) and encodes the connection parameters as a ``vless://`` key. Users,
subscriptions and hosts are read from a shared PostgreSQL database.

Imports flow strictly downward:

```text
            services         Key generation, host selection, HTTP API
               |
             core            Pool, store, base service, logging, metrics
               |
            models           Pure frozen dataclasses (zero I/O)
```

Note:
    Top-level imports (``from bitback import KeyService``) use lazy loading
    and resolve on first access.
"""

import importlib
from importlib.metadata import version as _get_version


__version__ = _get_version("bitback")

__all__ = [
    "Api",
    "ApiConfig",
    "BaseService",
    "ConfigT",
    "FreeKey",
    "Host",
    "HostSelector",
    "HostStatus",
    "KeyService",
    "KeyServiceConfig",
    "Logger",
    "Pool",
    "PoolConfig",
    "Store",
    "StoreConfig",
    "Tier",
    "User",
    "UserKey",
    "encode_vless_key",
]

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    "BaseService": ("bitback.core", "BaseService"),
    "ConfigT": ("bitback.core", "ConfigT"),
    "Logger": ("bitback.core", "Logger"),
    "Pool": ("bitback.core", "Pool"),
    "PoolConfig": ("bitback.core", "PoolConfig"),
    "Store": ("bitback.core", "Store"),
    "StoreConfig": ("bitback.core", "StoreConfig"),
    "Host": ("bitback.models", "Host"),
    "HostStatus": ("bitback.models", "HostStatus"),
    "Tier": ("bitback.models", "Tier"),
    "User": ("bitback.models", "User"),
    "Api": ("bitback.services", "Api"),
    "ApiConfig": ("bitback.services", "ApiConfig"),
    "FreeKey": ("bitback.services", "FreeKey"),
    "HostSelector": ("bitback.services", "HostSelector"),
    "KeyService": ("bitback.services", "KeyService"),
    "KeyServiceConfig": ("bitback.services", "KeyServiceConfig"),
    "UserKey": ("bitback.services", "UserKey"),
    "encode_vless_key": ("bitback.services", "encode_vless_key"),
}


def __getattr__(name: str) -> object:
    if name in _LAZY_IMPORTS:
        module_path, attr_name = _LAZY_IMPORTS[name]
        module = importlib.import_module(module_path)
        value = getattr(module, attr_name)
        globals()[name] = value  # Cache for subsequent access
        return value
    raise AttributeError(f"module 'bitback' has no attribute {name!r}")


def __dir__() -> list[str]:
    return __all__
