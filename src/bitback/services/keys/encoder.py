"""``vless://`` key encoding.

A key has the shape::

    vless://<client_id>@<address>:<port>[?<query>][#<remarks>]

Query parameters are derived from the [Host][bitback.models.host.Host]
transport fields, sorted by name and form-encoded (space becomes ``+``).
The remarks fragment is path-escaped: space becomes ``%20`` and the
sub-delimiters legal inside a path segment are left as-is.

Encoding is a pure function of its inputs, so identical arguments always
yield byte-identical keys.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import quote, urlencode

from bitback.core.exceptions import KeyValidationError
from bitback.models.constants import DEFAULT_NETWORK, SECURITY_NONE


if TYPE_CHECKING:
    from bitback.models.host import Host


VLESS_SCHEME = "vless"

# Characters a URL path segment may carry unescaped besides the unreserved set.
_FRAGMENT_SAFE = "$&+:=@"


def build_query_params(host: Host) -> dict[str, str]:
    """Map host fields to ``vless://`` query parameters.

    Raises:
        KeyValidationError: If the host uses Reality without a public key.
    """
    params: dict[str, str] = {}

    if host.security_type and host.security_type != SECURITY_NONE:
        params["security"] = host.security_type
    if host.sni:
        params["sni"] = host.sni
    if host.fingerprint:
        params["fp"] = host.fingerprint

    if host.is_reality:
        if not host.public_key:
            raise KeyValidationError(
                f"selected host (ID: {host.id}) is configured for Reality "
                "but missing public key (pbk)"
            )
        params["pbk"] = host.public_key
        if host.short_id:
            params["sid"] = host.short_id

    if host.flow:
        params["flow"] = host.flow

    params["type"] = host.network or DEFAULT_NETWORK
    return params


def encode_vless_key(client_id: str, host: Host, remarks: str = "") -> str:
    """Encode a ``vless://`` key for ``client_id`` connecting to ``host``.

    Args:
        client_id: Client UUID in canonical text form.
        host: Selected proxy host.
        remarks: Human-readable label placed in the fragment; omitted when
            empty.

    Returns:
        The complete key.

    Raises:
        KeyValidationError: If the host is configured for Reality but has
            no public key. No partial key is produced.
    """
    params = build_query_params(host)

    key = f"{VLESS_SCHEME}://{client_id}@{host.address}:{host.port}"
    query = urlencode(sorted(params.items()))
    if query:
        key += f"?{query}"
    if remarks:
        key += f"#{quote(remarks, safe=_FRAGMENT_SAFE)}"
    return key
