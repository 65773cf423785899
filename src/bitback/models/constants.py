"""Shared constants for the models layer.

Defines enumerations and string constants used by the models, the key
encoder and the services. Keeping them here avoids circular imports between
``bitback.models`` and ``bitback.services``.

See Also:
    [bitback.models.host][]: Uses [HostStatus][bitback.models.constants.HostStatus]
        to normalise the status column.
    [bitback.services.keys][]: Uses [Tier][bitback.models.constants.Tier] to
        route users to free or paid hosts.
"""

from __future__ import annotations

from enum import StrEnum


class ServiceName(StrEnum):
    """Canonical service identifiers used in logging and metrics.

    Attributes:
        API: HTTP service issuing keys
            ([Api][bitback.services.api.Api]).
    """

    API = "api"


class HostStatus(StrEnum):
    """Administrative status of a proxy host.

    Values read from storage that are not one of these members degrade to
    ``UNKNOWN`` (see [HostStatus.parse][bitback.models.constants.HostStatus.parse]).
    """

    UNKNOWN = "unknown"
    ACTIVE = "active"
    INACTIVE = "inactive"
    MAINTENANCE = "maintenance"

    @classmethod
    def parse(cls, value: str | None) -> HostStatus:
        """Map a stored status string to a member, defaulting to ``UNKNOWN``."""
        if not value:
            return cls.UNKNOWN
        try:
            return cls(value.lower())
        except ValueError:
            return cls.UNKNOWN


class Tier(StrEnum):
    """Eligibility class that decides which hosts a client may be routed to.

    Attributes:
        FREE: Anonymous requests and users without an active subscription.
        PAID: Users with at least one active subscription.
    """

    FREE = "free"
    PAID = "paid"


DEFAULT_NETWORK = "tcp"
"""Transport written to the ``type`` parameter when a host has none."""

SECURITY_NONE = "none"
SECURITY_REALITY = "reality"

FREE_TIER_CLIENT_ID = "5ccc43c4-3c3e-4220-a878-761aa1182dd9"
"""Placeholder client id embedded in anonymous free-tier keys."""
