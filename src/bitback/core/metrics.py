"""
Prometheus metrics and their HTTP exposition.

Module-level metric objects are process-wide singletons.
``BaseService.run_forever()`` records cycle counts, durations and failure
streaks; services add their own values through ``set_gauge()`` and
``inc_counter()``. Key generation outcomes are counted in
``KEYS_GENERATED``.

Architecture:
    SERVICE_INFO:            Static metadata set once at startup.
    SERVICE_GAUGE:           Point-in-time values (current state).
    SERVICE_COUNTER:         Cumulative totals (monotonically increasing).
    CYCLE_DURATION_SECONDS:  Histogram of service cycle durations.
    KEYS_GENERATED:          Key generation attempts by tier and outcome.
"""

from __future__ import annotations

from aiohttp import web
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Gauge,
    Histogram,
    Info,
    generate_latest,
)
from pydantic import BaseModel, Field


class MetricsConfig(BaseModel):
    """Configuration for the Prometheus metrics endpoint.

    The endpoint is only started when ``enabled`` is True. Bind ``host`` to
    ``"0.0.0.0"`` in containers so the scraper can reach it.
    """

    enabled: bool = Field(default=False, description="Enable metrics collection")
    port: int = Field(default=8000, ge=1024, le=65535, description="Metrics HTTP port")
    host: str = Field(default="127.0.0.1", description="Metrics HTTP bind address")
    path: str = Field(default="/metrics", description="Metrics endpoint path")


SERVICE_INFO = Info(
    "service",
    "Service information and metadata",
)

CYCLE_DURATION_SECONDS = Histogram(
    "cycle_duration_seconds",
    "Duration of service cycle in seconds",
    ["service"],
    buckets=(0.01, 0.05, 0.1, 0.5, 1, 5, 10, 30, 60),
)

SERVICE_GAUGE = Gauge(
    "service_gauge",
    "Service gauge values (point-in-time state)",
    ["service", "name"],
)

SERVICE_COUNTER = Counter(
    "service_counter",
    "Service counter values (cumulative totals)",
    ["service", "name"],
)

# outcome: success | user_not_found | no_host | host_lookup_failed | invalid_host | error
KEYS_GENERATED = Counter(
    "keys_generated",
    "Key generation attempts by tier and outcome",
    ["tier", "outcome"],
)


class MetricsServer:
    """Async HTTP server exposing a Prometheus-compatible endpoint (aiohttp).

    Example:
        server = MetricsServer(MetricsConfig(enabled=True, port=8001))
        await server.start()
        # ... service runs ...
        await server.stop()
    """

    def __init__(self, config: MetricsConfig) -> None:
        self._config = config
        self._runner: web.AppRunner | None = None

    async def start(self) -> None:
        """Bind the endpoint. No-op when metrics are disabled.

        Raises:
            OSError: If the port is already in use or binding fails.
        """
        if not self._config.enabled:
            return

        app = web.Application()
        app.router.add_get(self._config.path, self._handle_metrics)

        self._runner = web.AppRunner(app, access_log=None)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self._config.host, self._config.port)
        await site.start()

    async def stop(self) -> None:
        """Stop the server. Idempotent."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None

    @staticmethod
    async def _handle_metrics(_request: web.Request) -> web.Response:
        return web.Response(
            body=generate_latest(),
            headers={"Content-Type": CONTENT_TYPE_LATEST},
        )


async def start_metrics_server(config: MetricsConfig | None = None) -> MetricsServer:
    """Create and start a metrics server; the caller must ``stop()`` it."""
    server = MetricsServer(config or MetricsConfig())
    await server.start()
    return server
