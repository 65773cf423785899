"""Unit tests for services.api.configs module.

Tests:
- ApiConfig defaults and validation
"""

from __future__ import annotations

from uuid import UUID

import pytest

from bitback.services.api.configs import ApiConfig


class TestApiConfig:
    """Tests for ApiConfig Pydantic model."""

    def test_default_values(self) -> None:
        config = ApiConfig()
        assert config.host == "0.0.0.0"
        assert config.port == 9080
        assert config.route_prefix == "/v1"
        assert config.cors_origins == []
        assert config.user_remarks == "BittenVPN"
        assert config.free_remarks == "BittenVPN-Free"
        assert config.keys.free_tier_client_id == UUID("5ccc43c4-3c3e-4220-a878-761aa1182dd9")

    def test_inherits_base_service_config(self) -> None:
        config = ApiConfig(interval=120.0)
        assert config.interval == 120.0
        assert config.max_consecutive_failures == 5

    def test_request_timeout_default(self) -> None:
        assert ApiConfig().request_timeout == 30.0

    @pytest.mark.parametrize("timeout", [0.5, 301.0])
    def test_request_timeout_bounds(self, timeout: float) -> None:
        with pytest.raises(ValueError):
            ApiConfig(request_timeout=timeout)

    def test_keys_from_dict(self) -> None:
        config = ApiConfig(keys={"free_tier_client_id": "11111111-1111-1111-1111-111111111111"})
        assert config.keys.free_tier_client_id == UUID("11111111-1111-1111-1111-111111111111")

    @pytest.mark.parametrize(
        ("raw", "expected"), [("v1", "/v1"), ("/api/v1/", "/api/v1"), ("/v2", "/v2")]
    )
    def test_route_prefix_normalized(self, raw: str, expected: str) -> None:
        assert ApiConfig(route_prefix=raw).route_prefix == expected

    def test_route_prefix_only_slashes_rejected(self) -> None:
        with pytest.raises(ValueError, match="route_prefix"):
            ApiConfig(route_prefix="///")

    def test_empty_host_rejected(self) -> None:
        with pytest.raises(ValueError):
            ApiConfig(host="")

    def test_empty_remarks_rejected(self) -> None:
        with pytest.raises(ValueError):
            ApiConfig(user_remarks="")

    @pytest.mark.parametrize("port", [0, 65536])
    def test_invalid_port(self, port: int) -> None:
        with pytest.raises(ValueError):
            ApiConfig(port=port)
