"""Host selection and ``vless://`` key generation.

See Also:
    [KeyService][bitback.services.keys.service.KeyService]: Orchestrates
        user lookup, tier decision, host selection and encoding.
    [HostSelector][bitback.services.keys.selector.HostSelector]: Tier and
        country aware host selection.
    [encode_vless_key][bitback.services.keys.encoder.encode_vless_key]:
        Deterministic key encoder.
"""

from .encoder import build_query_params, encode_vless_key
from .selector import HostSelector
from .service import FreeKey, KeyService, KeyServiceConfig, UserKey


__all__ = [
    "FreeKey",
    "HostSelector",
    "KeyService",
    "KeyServiceConfig",
    "UserKey",
    "build_query_params",
    "encode_vless_key",
]
