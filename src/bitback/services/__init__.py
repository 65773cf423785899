"""Key generation services and the HTTP API that exposes them.

Services depend on [bitback.core][bitback.core] and
[bitback.models][bitback.models]. The long-running
[Api][bitback.services.api.Api] extends
[BaseService][bitback.core.base_service.BaseService]; the key services are
plain classes it composes.

Examples:
    ```python
    from bitback.core import Store
    from bitback.services import Api

    store = Store.from_yaml("config/store.yaml")
    async with store:
        async with Api(store=store) as api:
            await api.run_forever()
    ```
"""

from .api import (
    Api,
    ApiConfig,
)
from .keys import (
    FreeKey,
    HostSelector,
    KeyService,
    KeyServiceConfig,
    UserKey,
    encode_vless_key,
)


__all__ = [
    "Api",
    "ApiConfig",
    "FreeKey",
    "HostSelector",
    "KeyService",
    "KeyServiceConfig",
    "UserKey",
    "encode_vless_key",
]
