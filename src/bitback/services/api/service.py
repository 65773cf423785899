"""HTTP service issuing ``vless://`` keys via FastAPI.

Routes (``/v1`` being the default ``route_prefix``):

- ``GET /health``
- ``GET /v1/users/{user_id}/vless-key?remarks=&country=``
- ``GET /v1/key/free?remarks=&country=``

Empty query values are treated as absent. Errors are returned as
``{"error": message}``; store details never reach the client.

The HTTP server runs as a background ``asyncio.Task`` alongside the
standard ``run_forever()`` cycle. Each ``run()`` cycle logs request
statistics and updates Prometheus metrics.

See Also:
    [KeyService][bitback.services.keys.service.KeyService]: Key
        generation the routes delegate to.
    [BaseService][bitback.core.base_service.BaseService]: Abstract
        base class providing lifecycle and metrics.
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from typing import TYPE_CHECKING, Any, ClassVar
from uuid import UUID

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bitback.core.base_service import BaseService
from bitback.core.exceptions import (
    KeyGenerationError,
    NoHostAvailableError,
    UserNotFoundError,
)
from bitback.models.constants import ServiceName
from bitback.services.common import queries
from bitback.services.common.stores import (
    PostgresHostStore,
    PostgresSubscriptionStore,
    PostgresUserStore,
)
from bitback.services.keys.service import KeyService

from .configs import ApiConfig


if TYPE_CHECKING:
    from types import TracebackType

    from bitback.core.store import Store

_HTTP_ERROR_THRESHOLD = 400

_MSG_INVALID_USER_ID = "Invalid User ID format in path."
_MSG_NO_HOSTS = "Unable to generate key: No active hosts are currently available for your criteria."
_MSG_NO_FREE_HOSTS = "Unable to generate key: No active free hosts are currently available."
_MSG_TIMEOUT = "Key generation timed out."
_MSG_FAILED = "Failed to generate VLESS key."


class Api(BaseService[ApiConfig]):
    """HTTP service exposing key generation.

    Lifecycle:
        1. ``__aenter__``: build FastAPI app, start uvicorn.
        2. ``run()``: log statistics and update Prometheus gauges.
        3. ``__aexit__``: cancel the HTTP server task.

    Note:
        Authentication and rate limiting are handled in front of this
        service (reverse proxy).
    """

    SERVICE_NAME: ClassVar[ServiceName] = ServiceName.API
    CONFIG_CLASS: ClassVar[type[ApiConfig]] = ApiConfig

    def __init__(
        self,
        store: Store,
        config: ApiConfig | None = None,
        key_service: KeyService | None = None,
    ) -> None:
        super().__init__(store, config)
        self._keys = key_service or KeyService(
            users=PostgresUserStore(store),
            subscriptions=PostgresSubscriptionStore(store),
            hosts=PostgresHostStore(store),
            config=self._config.keys,
            metrics_enabled=self._config.metrics.enabled,
        )
        self._server_task: asyncio.Task[None] | None = None
        self._requests_total = 0
        self._requests_failed = 0

    async def __aenter__(self) -> Api:
        await super().__aenter__()

        app = self._build_app()
        self._server_task = asyncio.create_task(self._run_server(app))
        self._logger.info(
            "http_server_started",
            host=self._config.host,
            port=self._config.port,
        )

        return self

    async def __aexit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc_val: BaseException | None,
        _exc_tb: TracebackType | None,
    ) -> None:
        if self._server_task is not None:
            self._server_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._server_task
            self._server_task = None
        self._logger.info("http_server_stopped")
        await super().__aexit__(_exc_type, _exc_val, _exc_tb)

    async def run(self) -> None:
        """Log request stats and update Prometheus counters and host gauges."""
        if self._server_task is not None and self._server_task.done():
            exc = self._server_task.exception() if not self._server_task.cancelled() else None
            self._logger.error("http_server_crashed", error=str(exc) if exc else "cancelled")
            raise RuntimeError("HTTP server task has stopped unexpectedly") from exc

        # Snapshot and reset per-cycle counters
        total = self._requests_total
        failed = self._requests_failed
        self._requests_total = 0
        self._requests_failed = 0

        free_hosts = await queries.count_online_hosts(self._store, is_free_tier=True)
        paid_hosts = await queries.count_online_hosts(self._store, is_free_tier=False)

        self._logger.info(
            "cycle_stats",
            requests_total=total,
            requests_failed=failed,
            free_hosts_online=free_hosts,
            paid_hosts_online=paid_hosts,
        )
        self.inc_counter("requests_total", total)
        self.inc_counter("requests_failed", failed)
        self.set_gauge("free_hosts_online", free_hosts)
        self.set_gauge("paid_hosts_online", paid_hosts)

    def _build_app(self) -> FastAPI:
        """Construct the FastAPI application with the key routes."""
        app = FastAPI(title="Bitback API")
        prefix = self._config.route_prefix

        if self._config.cors_origins:
            app.add_middleware(
                CORSMiddleware,
                allow_origins=self._config.cors_origins,
                allow_methods=["GET"],
                allow_headers=["*"],
            )

        # Request logging middleware
        @app.middleware("http")
        async def log_requests(request: Request, call_next: Any) -> Response:
            start = time.monotonic()
            self._logger.info(
                "request_received",
                method=request.method,
                path=request.url.path,
                params=str(request.query_params),
            )
            try:
                response: Response = await call_next(request)
            except Exception as exc:  # HTTP request error boundary
                self._logger.error(
                    "unhandled_error",
                    error=str(exc),
                    path=request.url.path,
                )
                response = JSONResponse(
                    {"error": "Internal server error"},
                    status_code=500,
                )
            duration_ms = (time.monotonic() - start) * 1000
            self._requests_total += 1
            if response.status_code >= _HTTP_ERROR_THRESHOLD:
                self._requests_failed += 1
                self._logger.warning(
                    "request_failed",
                    method=request.method,
                    path=request.url.path,
                    status=response.status_code,
                    duration_ms=round(duration_ms, 1),
                )
            else:
                self._logger.info(
                    "request_completed",
                    method=request.method,
                    path=request.url.path,
                    status=response.status_code,
                    duration_ms=round(duration_ms, 1),
                )
            return response

        @app.get("/health")
        async def health() -> dict[str, str]:
            return {"status": "ok"}

        @app.get(f"{prefix}/users/{{user_id}}/vless-key")
        async def user_key(
            user_id: str,
            remarks: str | None = None,
            country: str | None = None,
        ) -> JSONResponse:
            try:
                uid = UUID(user_id)
            except ValueError:
                self._logger.warning("invalid_user_id", user_id=user_id)
                return _error(400, _MSG_INVALID_USER_ID)

            remarks = remarks or self._config.user_remarks
            try:
                result = await asyncio.wait_for(
                    self._keys.generate_key_for_user(uid, remarks, country or None),
                    timeout=self._config.request_timeout,
                )
            except TimeoutError:
                return _error(504, _MSG_TIMEOUT)
            except UserNotFoundError as e:
                return _error(404, str(e))
            except NoHostAvailableError:
                return _error(503, _MSG_NO_HOSTS)
            except KeyGenerationError as e:
                self._logger.error("key_generation_failed", user_id=uid, error=str(e))
                return _error(500, _MSG_FAILED)

            return JSONResponse(
                {
                    "vless_key": result.vless_key,
                    "user_id": str(uid),
                    "remarks": remarks,
                    "has_active_subscription": result.has_active_subscription,
                }
            )

        @app.get(f"{prefix}/key/free")
        async def free_key(
            remarks: str | None = None,
            country: str | None = None,
        ) -> JSONResponse:
            remarks = remarks or self._config.free_remarks
            try:
                result = await asyncio.wait_for(
                    self._keys.generate_free_key(remarks, country or None),
                    timeout=self._config.request_timeout,
                )
            except TimeoutError:
                return _error(504, _MSG_TIMEOUT)
            except NoHostAvailableError:
                return _error(503, _MSG_NO_FREE_HOSTS)
            except KeyGenerationError as e:
                self._logger.error("key_generation_failed", error=str(e))
                return _error(500, _MSG_FAILED)

            return JSONResponse({"vless_key": result.vless_key, "remarks": remarks})

        return app

    async def _run_server(self, app: FastAPI) -> None:
        """Run uvicorn as an asyncio server."""
        config = uvicorn.Config(
            app,
            host=self._config.host,
            port=self._config.port,
            log_level="warning",
            access_log=False,
        )
        server = uvicorn.Server(config)
        await server.serve()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)
