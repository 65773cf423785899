"""Shared fixtures and helpers for services.api test package."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from bitback.core.store import Store
from bitback.services.api.service import Api, ApiConfig
from bitback.services.keys.service import FreeKey, KeyService, UserKey


@pytest.fixture
def api_config() -> ApiConfig:
    """Minimal API config for testing."""
    return ApiConfig(
        interval=60.0,
        host="127.0.0.1",
        port=9999,
    )


@pytest.fixture
def key_service() -> MagicMock:
    """KeyService double returning fixed keys."""
    service = MagicMock(spec=KeyService)
    service.generate_key_for_user = AsyncMock(
        return_value=UserKey(vless_key="vless://user-key", has_active_subscription=True)
    )
    service.generate_free_key = AsyncMock(return_value=FreeKey(vless_key="vless://free-key"))
    return service


@pytest.fixture
def api_service(mock_store: Store, api_config: ApiConfig, key_service: MagicMock) -> Api:
    """Api service with a mocked key service."""
    return Api(store=mock_store, config=api_config, key_service=key_service)


@pytest.fixture
def test_client(api_service: Api) -> TestClient:
    """FastAPI TestClient from the Api service."""
    app = api_service._build_app()
    return TestClient(app)
