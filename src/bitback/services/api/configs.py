"""API service configuration models.

See Also:
    [Api][bitback.services.api.Api]: The service class that consumes
        these configurations.
    [BaseServiceConfig][bitback.core.base_service.BaseServiceConfig]:
        Base class providing ``interval``, ``max_consecutive_failures``,
        and ``metrics`` fields.
"""

from __future__ import annotations

from pydantic import Field, field_validator

from bitback.core.base_service import BaseServiceConfig
from bitback.services.keys.service import KeyServiceConfig  # noqa: TC001 (Pydantic runtime)


class ApiConfig(BaseServiceConfig):
    """Configuration for the API service.

    Attributes:
        host: Bind address for the HTTP server.
        port: Port for the HTTP server.
        route_prefix: URL prefix for the key routes (e.g. ``/v1``).
        cors_origins: Allowed CORS origins. Empty list disables CORS.
        request_timeout: Upper bound for one key request, in seconds.
        user_remarks: Remarks used for user keys when the request has none.
        free_remarks: Remarks used for free keys when the request has none.
        keys: [KeyServiceConfig][bitback.services.keys.service.KeyServiceConfig]
            passed to the key service.
    """

    host: str = Field(default="0.0.0.0", min_length=1, description="HTTP bind address")  # noqa: S104
    port: int = Field(default=9080, ge=1, le=65535, description="HTTP port")
    route_prefix: str = Field(default="/v1", min_length=1)
    cors_origins: list[str] = Field(default_factory=list)
    request_timeout: float = Field(default=30.0, ge=1.0, le=300.0)
    user_remarks: str = Field(default="BittenVPN", min_length=1)
    free_remarks: str = Field(default="BittenVPN-Free", min_length=1)
    keys: KeyServiceConfig = Field(default_factory=KeyServiceConfig)

    @field_validator("route_prefix")
    @classmethod
    def _normalize_route_prefix(cls, v: str) -> str:
        v = v.strip("/")
        if not v:
            msg = "route_prefix must not be empty"
            raise ValueError(msg)
        return f"/{v}"
