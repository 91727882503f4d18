"""FastAPI surface for the PDA directory."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.responses import Response

from pdadirectory.config import ACTIVE_DB_KEY, LAST_UPDATE_KEY, Settings
from pdadirectory.errors import (
    INTERNAL_ERROR_MESSAGE,
    ConfigurationError,
    PdaDirectoryError,
    ValidationError,
)
from pdadirectory.kv import HttpKV, KVStore, MemoryKV
from pdadirectory.ratelimit import AllowAll, HttpRateLimiter, RateLimiter
from pdadirectory.router import DatabaseRouter
from pdadirectory.service import PdaService
from pdadirectory.store import SqliteRegistryStore

LOG = logging.getLogger(__name__)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(PdaDirectoryError)
    async def _handle_directory_error(request: Request, exc: PdaDirectoryError) -> JSONResponse:
        if exc.status_code >= 500:
            LOG.error(
                "%s %s: %s: %s",
                request.method,
                request.url.path,
                type(exc).__name__,
                exc,
                exc_info=exc,
            )
        return error_response(exc.status_code, exc.public_message)

    @app.exception_handler(Exception)
    async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        LOG.error(
            "%s %s: unhandled error: %s", request.method, request.url.path, exc, exc_info=exc
        )
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


def install_logging_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def _log_request(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        LOG.debug(
            "%s %s -> %d in %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - start) * 1000,
        )
        return response


async def _read_body(request: Request) -> Any:
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except ValueError as e:
        # JSONDecodeError, UnicodeDecodeError, and number literals too long to convert.
        raise ValidationError("request body is not valid JSON") from e


def _client_key(request: Request, trust_cf_header: bool) -> str:
    # Only Cloudflare can be trusted to set this header.
    if trust_cf_header:
        forwarded = request.headers.get("cf-connecting-ip")
        if forwarded:
            return forwarded
    return request.client.host if request.client else ""


def create_app(
    service: PdaService,
    kv: KVStore | None = None,
    on_shutdown: Callable[[], Awaitable[None]] | None = None,
    trust_cf_header: bool = False,
) -> FastAPI:
    """Build the HTTP app around an already-wired service.

    Set ``trust_cf_header`` only when the app is reachable solely through
    Cloudflare; it makes the rate-limit key come from ``cf-connecting-ip``.
    """

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        if on_shutdown is not None:
            await on_shutdown()

    app = FastAPI(title="PDA Directory", lifespan=lifespan)
    install_exception_handlers(app)
    install_logging_middleware(app)

    async def query_pdas(request: Request) -> dict[str, Any]:
        body = await _read_body(request)
        return await service.query(body, _client_key(request, trust_cf_header))

    app.add_api_route("/api/pda/query", query_pdas, methods=["POST"])
    app.add_api_route("/api/pda/list", query_pdas, methods=["POST"])

    @app.get("/api/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/last_update_time")
    async def last_update_time() -> dict[str, Any]:
        if kv is None:
            raise ConfigurationError("last update store is not configured")
        value = await kv.get(LAST_UPDATE_KEY)
        return {"lastUpdateTime": value or None}

    @app.get("/api/total_entries")
    async def total_entries() -> dict[str, int]:
        return {"totalEntries": await service.total_entries()}

    @app.api_route(
        "/{path:path}",
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"],
        include_in_schema=False,
    )
    async def invalid_request(path: str) -> JSONResponse:
        return error_response(status.HTTP_400_BAD_REQUEST, "Invalid request")

    return app


def build_app(settings: Settings) -> FastAPI:
    """Wire stores, pointer store and limiter from settings."""
    stores = {
        "blue": SqliteRegistryStore(settings.blue_db_path, "blue"),
        "green": SqliteRegistryStore(settings.green_db_path, "green"),
    }

    kv: KVStore | None
    if settings.kv_url:
        kv = HttpKV(settings.kv_url, settings.kv_token)
    elif settings.active_db:
        kv = MemoryKV({ACTIVE_DB_KEY: settings.active_db})
    else:
        kv = None

    limiter: RateLimiter
    if settings.rate_limit_url:
        limiter = HttpRateLimiter(settings.rate_limit_url)
    else:
        limiter = AllowAll()

    router = DatabaseRouter(kv, stores, ttl=settings.active_db_ttl)
    service = PdaService(router, limiter, settings.limits)

    async def close() -> None:
        for client in (kv, limiter):
            aclose = getattr(client, "aclose", None)
            if aclose is not None:
                await aclose()

    LOG.info(
        "serving blue=%s green=%s pointer=%s",
        settings.blue_db_path,
        settings.green_db_path,
        "kv" if settings.kv_url else settings.active_db or "unset",
    )
    return create_app(
        service, kv, on_shutdown=close, trust_cf_header=settings.trust_cf_header
    )
