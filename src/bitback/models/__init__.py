"""Pure frozen dataclasses with zero I/O for hosts, users and tiers.

The models layer has no dependencies on any other Bitback package, only the
Python standard library. Every model uses ``@dataclass(frozen=True,
slots=True)`` and validates in ``__post_init__``.

Attributes:
    Host: Proxy host with transport, security, tier and location fields.
    User: Read-only user record.
    HostStatus: Administrative host status; unknown values degrade to
        ``UNKNOWN``.
    Tier: Free or paid eligibility class.
    ServiceName: Canonical service identifiers.
"""

from .constants import (
    DEFAULT_NETWORK,
    FREE_TIER_CLIENT_ID,
    SECURITY_NONE,
    SECURITY_REALITY,
    HostStatus,
    ServiceName,
    Tier,
)
from .host import Host
from .user import User


__all__ = [
    "DEFAULT_NETWORK",
    "FREE_TIER_CLIENT_ID",
    "SECURITY_NONE",
    "SECURITY_REALITY",
    "Host",
    "HostStatus",
    "ServiceName",
    "Tier",
    "User",
]
