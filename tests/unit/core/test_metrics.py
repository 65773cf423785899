"""
Unit tests for core.metrics module.

Tests:
- MetricsConfig defaults and validation
- MetricsServer lifecycle and handler
- Metric object types
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from prometheus_client import Counter, Gauge, Histogram, Info
from pydantic import ValidationError

from bitback.core.metrics import (
    CYCLE_DURATION_SECONDS,
    KEYS_GENERATED,
    SERVICE_COUNTER,
    SERVICE_GAUGE,
    SERVICE_INFO,
    MetricsConfig,
    MetricsServer,
    start_metrics_server,
)


class TestMetricsConfig:
    def test_defaults(self) -> None:
        config = MetricsConfig()
        assert config.enabled is False
        assert config.port == 8000
        assert config.host == "127.0.0.1"
        assert config.path == "/metrics"

    @pytest.mark.parametrize("port", [80, 70000])
    def test_port_bounds(self, port: int) -> None:
        with pytest.raises(ValidationError):
            MetricsConfig(port=port)


class TestMetricsServer:
    async def test_start_disabled_is_noop(self) -> None:
        server = MetricsServer(MetricsConfig(enabled=False))
        await server.start()
        assert server._runner is None

    async def test_start_enabled_creates_runner(self) -> None:
        server = MetricsServer(MetricsConfig(enabled=True, port=9100))
        runner = MagicMock()
        runner.setup = AsyncMock()
        site = MagicMock()
        site.start = AsyncMock()

        with (
            patch("bitback.core.metrics.web.AppRunner", return_value=runner),
            patch("bitback.core.metrics.web.TCPSite", return_value=site) as tcp_site,
        ):
            await server.start()

        runner.setup.assert_awaited_once()
        tcp_site.assert_called_once_with(runner, "127.0.0.1", 9100)
        site.start.assert_awaited_once()

    async def test_stop_cleans_up_runner(self) -> None:
        server = MetricsServer(MetricsConfig(enabled=True))
        runner = MagicMock()
        runner.cleanup = AsyncMock()
        server._runner = runner

        await server.stop()
        await server.stop()

        runner.cleanup.assert_awaited_once()
        assert server._runner is None

    async def test_handle_metrics(self) -> None:
        response = await MetricsServer._handle_metrics(MagicMock())
        assert response.status == 200
        assert response.headers["Content-Type"].startswith("text/plain")
        assert isinstance(response.body, bytes)

    async def test_start_metrics_server_default_config(self) -> None:
        server = await start_metrics_server(None)
        assert isinstance(server, MetricsServer)
        assert server._runner is None


class TestMetricObjects:
    def test_types(self) -> None:
        assert isinstance(SERVICE_INFO, Info)
        assert isinstance(CYCLE_DURATION_SECONDS, Histogram)
        assert isinstance(SERVICE_GAUGE, Gauge)
        assert isinstance(SERVICE_COUNTER, Counter)
        assert isinstance(KEYS_GENERATED, Counter)

    def test_keys_generated_labels(self) -> None:
        before = KEYS_GENERATED.labels(tier="paid", outcome="no_host")._value.get()
        KEYS_GENERATED.labels(tier="paid", outcome="no_host").inc()
        assert KEYS_GENERATED.labels(tier="paid", outcome="no_host")._value.get() == before + 1
