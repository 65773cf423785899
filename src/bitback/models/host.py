"""Proxy host model.

A [Host][bitback.models.host.Host] is a read-only snapshot of one row of the
``hosts`` table: where the proxy listens, which transport and security
parameters a client must use, and which tier and location it serves.

All validation happens in ``__post_init__`` so invalid instances never
escape the constructor. A Reality host without a public key is still a
valid ``Host``; only the key encoder rejects it.

See Also:
    [bitback.services.keys.encoder][]: Turns a host into a ``vless://`` key.
    [bitback.services.common.stores][]: Builds hosts from database rows via
        [Host.from_record][bitback.models.host.Host.from_record].
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ._validation import (
    validate_bool,
    validate_instance,
    validate_int,
    validate_optional_str,
    validate_str_no_null,
    validate_str_not_empty,
)
from .constants import SECURITY_REALITY, HostStatus


if TYPE_CHECKING:
    from collections.abc import Mapping


_TRANSPORT_FIELDS = (
    "protocol",
    "network",
    "security_type",
    "sni",
    "fingerprint",
    "public_key",
    "short_id",
    "flow",
)

_LOCATION_FIELDS = ("country", "city", "region", "provider", "host_name")


@dataclass(frozen=True, slots=True)
class Host:
    """Immutable proxy host eligible for key generation.

    Attributes:
        id: Database identifier.
        address: Hostname or IP address clients connect to.
        port: Listening port, kept as text exactly as stored.
        protocol: Proxy protocol (``"vless"``).
        network: Transport (``"tcp"``, ``"ws"``, ``"grpc"``); empty means tcp.
        security_type: ``"none"``, ``"tls"``, ``"reality"`` or empty.
        sni: TLS server name indication.
        fingerprint: TLS client fingerprint (``fp``).
        public_key: Reality public key (``pbk``).
        short_id: Reality short id (``sid``).
        flow: XTLS flow control.
        is_free_tier: Whether free-tier clients may be routed here.
        is_online: Last known reachability.
        status: Administrative [HostStatus][bitback.models.constants.HostStatus].
        country: Optional location and ownership metadata, as are
            ``city``, ``region``, ``provider`` and ``host_name``.
        is_private: Whether the host is reserved for private use.

    Raises:
        TypeError: If a field has the wrong type.
        ValueError: If ``address`` or ``port`` is empty or any string
            contains null bytes.
    """

    id: int
    address: str
    port: str
    protocol: str = "vless"
    network: str = ""
    security_type: str = ""
    sni: str = ""
    fingerprint: str = ""
    public_key: str = ""
    short_id: str = ""
    flow: str = ""
    is_free_tier: bool = False
    is_online: bool = True
    status: HostStatus = HostStatus.UNKNOWN
    country: str | None = None
    city: str | None = None
    region: str | None = None
    provider: str | None = None
    host_name: str | None = None
    is_private: bool = False

    def __post_init__(self) -> None:
        validate_int(self.id, "id")
        validate_str_not_empty(self.address, "address")
        validate_str_not_empty(self.port, "port")
        for name in _TRANSPORT_FIELDS:
            validate_str_no_null(getattr(self, name), name)
        for name in _LOCATION_FIELDS:
            validate_optional_str(getattr(self, name), name)
        validate_bool(self.is_free_tier, "is_free_tier")
        validate_bool(self.is_online, "is_online")
        validate_bool(self.is_private, "is_private")
        validate_instance(self.status, HostStatus, "status")

    @property
    def is_reality(self) -> bool:
        """Whether the host uses Reality security (case-insensitive)."""
        return self.security_type.lower() == SECURITY_REALITY

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Host:
        """Build a host from a database row.

        NULL transport columns become empty strings, the port is converted
        to text and an unrecognised status degrades to ``UNKNOWN``.
        """
        transport = {name: record.get(name) or "" for name in _TRANSPORT_FIELDS}
        location = {name: record.get(name) or None for name in _LOCATION_FIELDS}
        port = record.get("port")
        return cls(
            id=record["id"],
            address=record.get("address") or "",
            port="" if port is None else str(port),
            is_free_tier=bool(record.get("is_free_tier")),
            is_online=bool(record.get("is_online")),
            status=HostStatus.parse(record.get("status")),
            is_private=bool(record.get("is_private")),
            **transport,
            **location,
        )
