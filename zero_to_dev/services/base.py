"""FastAPI 앱 팩토리: 서비스 공통 패턴 (요청 로그, 404, 에러 envelope).

Usage:
    from zero_to_dev.services.base import create_app

    app = create_app("zero-to-dev-api", version="1.0.0", lifespan=lifespan)
"""

import logging
import time
import traceback
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import structlog
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from zero_to_dev.domain.config import get_config
from zero_to_dev.domain.errors import HTTPError

logger = logging.getLogger(__name__)
access_logger = logging.getLogger("zero_to_dev.access")


def utc_timestamp() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def error_envelope(request: Request, exc: Exception) -> dict:
    """{error, message, timestamp, path} (development 에서는 stack 포함)."""
    body = {
        "error": type(exc).__name__ or "InternalServerError",
        "message": str(exc) or "An unexpected error occurred",
        "timestamp": utc_timestamp(),
        "path": request.url.path,
    }
    if get_config().is_development:
        body["stack"] = "".join(traceback.format_exception(exc))
    return body


def create_app(
    service_name: str,
    *,
    version: str = "1.0.0",
    lifespan: Callable | None = None,
) -> FastAPI:
    """FastAPI 앱 팩토리: 공통 미들웨어 + 에러 핸들러.

    Args:
        service_name: 서비스 식별자 (예: "zero-to-dev-api")
        version: 서비스 버전
        lifespan: 커스텀 lifespan context manager (startup/shutdown)
    """

    @asynccontextmanager
    async def wrapped_lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("[%s] Starting v%s", service_name, version)
        if lifespan:
            async with lifespan(app):
                yield
        else:
            yield
        logger.info("[%s] Shutting down", service_name)

    app = FastAPI(
        title=service_name,
        version=version,
        lifespan=wrapped_lifespan,
    )

    # --- Request Logging ---

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.monotonic()
        status_code = 500
        with structlog.contextvars.bound_contextvars(method=request.method, path=request.url.path):
            try:
                try:
                    response = await call_next(request)
                except Exception as exc:
                    # envelope 을 여기서 만들어야 바깥 CORSMiddleware 를 거침
                    response = await unhandled_error_handler(request, exc)
                status_code = response.status_code
                return response
            finally:
                duration_ms = (time.monotonic() - start) * 1000
                access_logger.info(
                    "%s %s - %d - %dms",
                    request.method,
                    request.url.path,
                    status_code,
                    duration_ms,
                )

    # 마지막에 추가 = 가장 바깥 (500 응답에도 CORS 헤더)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- Error Handlers ---

    @app.exception_handler(StarletteHTTPException)
    async def not_found_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code != 404:
            return await http_exception_handler(request, exc)
        return JSONResponse(
            status_code=404,
            content={
                "error": "Not Found",
                "message": f"Cannot {request.method} {request.url.path}",
                "timestamp": utc_timestamp(),
            },
        )

    @app.exception_handler(HTTPError)
    async def http_error_handler(request: Request, exc: HTTPError) -> JSONResponse:
        logger.error("Error occurred: %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=exc.status_code, content=error_envelope(request, exc))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error: %s %s", request.method, request.url.path)
        status_code = getattr(exc, "status_code", None)
        if not isinstance(status_code, int):
            status_code = 500
        return JSONResponse(status_code=status_code, content=error_envelope(request, exc))

    return app
