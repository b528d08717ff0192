"""Health API 서버.

- GET /              서비스 정보 + 엔드포인트 목록
- GET /health        API liveness
- GET /health/db     PostgreSQL 도달성
- GET /health/cache  Redis 도달성
- GET /health/all    종합 상태 (200 | 503)
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI

from zero_to_dev.domain.config import get_config
from zero_to_dev.services.base import create_app
from zero_to_dev.services.health.context import HealthContext

from .routers import health
from .schemas import RootInfo

logger = logging.getLogger(__name__)

ENDPOINTS = {
    "health": "/health",
    "healthDb": "/health/db",
    "healthCache": "/health/cache",
    "healthAll": "/health/all",
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    config = get_config()
    ctx = HealthContext.from_config(config)
    ctx.connect()
    app.state.health = ctx
    logger.info("API is ready (env=%s, port=%d)", config.env, config.port)
    try:
        yield
    finally:
        await ctx.close()


_config = get_config()

app = create_app(_config.service_name, version=_config.version, lifespan=lifespan)
app.include_router(health.router)


@app.get("/")
async def root() -> RootInfo:
    config = get_config()
    return RootInfo(
        service=config.service_name,
        version=config.version,
        timestamp=datetime.now(UTC),
        endpoints=ENDPOINTS,
    )


def main() -> None:
    """uvicorn 으로 API 실행 (zero-to-dev-api)."""
    import uvicorn

    from zero_to_dev.infra.observability.logging import setup_logging

    config = get_config()
    setup_logging(config.service_name, log_level=config.log_level, json_output=config.json_logs)
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=config.port,
        log_config=None,
        access_log=False,
    )


if __name__ == "__main__":
    main()
