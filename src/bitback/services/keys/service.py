"""Key generation orchestration.

[KeyService][bitback.services.keys.service.KeyService] ties the stores, the
[HostSelector][bitback.services.keys.selector.HostSelector] and the
[encoder][bitback.services.keys.encoder] together:

```text
user store -> subscription store -> tier -> selector -> host store -> encoder
```

A failing subscription check does not fail the request: it is logged and
the user is served as free tier. This keeps key issuance available while
the subscription table is unreachable, at the cost of temporarily
downgrading paying users.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from bitback.core.exceptions import (
    DatabaseError,
    HostLookupFailedError,
    KeyGenerationError,
    KeyValidationError,
    NoHostAvailableError,
    RecordNotFoundError,
    UserNotFoundError,
)
from bitback.core.logger import Logger
from bitback.core.metrics import KEYS_GENERATED
from bitback.models.constants import FREE_TIER_CLIENT_ID, Tier

from .encoder import encode_vless_key
from .selector import HostSelector


if TYPE_CHECKING:
    from bitback.models.host import Host
    from bitback.models.user import User
    from bitback.services.common.stores import HostStore, SubscriptionStore, UserStore


_OUTCOMES: dict[type[KeyGenerationError], str] = {
    UserNotFoundError: "user_not_found",
    NoHostAvailableError: "no_host",
    HostLookupFailedError: "host_lookup_failed",
    KeyValidationError: "invalid_host",
}


class KeyServiceConfig(BaseModel):
    """Configuration for [KeyService][bitback.services.keys.service.KeyService].

    Example:
        ```yaml
        keys:
          free_tier_client_id: 5ccc43c4-3c3e-4220-a878-761aa1182dd9
        ```
    """

    model_config = ConfigDict(frozen=True)

    free_tier_client_id: UUID = Field(
        default=UUID(FREE_TIER_CLIENT_ID),
        description="Client id embedded in anonymous free-tier keys",
    )


@dataclass(frozen=True, slots=True)
class UserKey:
    """Key issued to a registered user."""

    vless_key: str
    has_active_subscription: bool


@dataclass(frozen=True, slots=True)
class FreeKey:
    """Key issued to an anonymous free-tier client."""

    vless_key: str


class KeyService:
    """Generate ``vless://`` keys for users and anonymous free-tier clients.

    Holds no mutable state; concurrent calls are independent.

    Example:
        service = KeyService(
            users=PostgresUserStore(store),
            subscriptions=PostgresSubscriptionStore(store),
            hosts=PostgresHostStore(store),
        )
        key = await service.generate_key_for_user(user_id, "BittenVPN", country="DE")
    """

    def __init__(
        self,
        users: UserStore,
        subscriptions: SubscriptionStore,
        hosts: HostStore,
        config: KeyServiceConfig | None = None,
        *,
        metrics_enabled: bool = False,
    ) -> None:
        self._users = users
        self._subscriptions = subscriptions
        self._selector = HostSelector(hosts)
        self._config = config or KeyServiceConfig()
        self._metrics_enabled = metrics_enabled
        self._logger = Logger("keys")

    @property
    def config(self) -> KeyServiceConfig:
        return self._config

    async def generate_key_for_user(
        self,
        user_id: UUID,
        remarks: str,
        country: str | None = None,
    ) -> UserKey:
        """Generate a key for a registered user.

        Users with an active subscription are routed to paid hosts, everyone
        else to free hosts. ``country`` is a preference: when no host there
        is online any host of the tier is used.

        Raises:
            UserNotFoundError: The user does not exist.
            KeyGenerationError: The user store failed.
            NoHostAvailableError: No online host for the tier.
            HostLookupFailedError: The host store failed.
            KeyValidationError: The selected host cannot be encoded.
        """
        tier: Tier | None = None
        try:
            user = await self._get_user(user_id)
            active = await self._check_subscription(user.id)
            tier = Tier.PAID if active else Tier.FREE

            host = await self._selector.select(tier, country)
            vless_key = encode_vless_key(str(user.id), host, remarks)
        except KeyGenerationError as e:
            self._count(tier, _OUTCOMES.get(type(e), "error"))
            raise

        self._count(tier, "success")
        self._log_generated(host, tier, user_id=user.id)
        return UserKey(vless_key=vless_key, has_active_subscription=active)

    async def generate_free_key(self, remarks: str, country: str | None = None) -> FreeKey:
        """Generate an anonymous free-tier key using the placeholder client id.

        Raises:
            NoHostAvailableError: No online free host.
            HostLookupFailedError: The host store failed.
            KeyValidationError: The selected host cannot be encoded.
        """
        try:
            host = await self._selector.select(Tier.FREE, country)
            vless_key = encode_vless_key(str(self._config.free_tier_client_id), host, remarks)
        except KeyGenerationError as e:
            self._count(Tier.FREE, _OUTCOMES.get(type(e), "error"))
            raise

        self._count(Tier.FREE, "success")
        self._log_generated(host, Tier.FREE)
        return FreeKey(vless_key=vless_key)

    async def _get_user(self, user_id: UUID) -> User:
        try:
            return await self._users.get_by_id(user_id)
        except RecordNotFoundError as e:
            raise UserNotFoundError(user_id) from e
        except DatabaseError as e:
            raise KeyGenerationError(f"failed to get user {user_id}: {e}") from e

    async def _check_subscription(self, user_id: UUID) -> bool:
        try:
            return await self._subscriptions.has_active_subscription(user_id)
        except DatabaseError as e:
            self._logger.error("subscription_check_failed", user_id=user_id, error=str(e))
            return False

    def _log_generated(self, host: Host, tier: Tier, **fields: object) -> None:
        self._logger.info(
            "key_generated",
            tier=tier,
            host_id=host.id,
            country=host.country or "",
            **fields,
        )

    def _count(self, tier: Tier | None, outcome: str) -> None:
        if not self._metrics_enabled:
            return
        KEYS_GENERATED.labels(tier=tier or "unknown", outcome=outcome).inc()
