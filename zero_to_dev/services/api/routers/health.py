"""Health API: API liveness + PostgreSQL / Redis 도달성."""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from zero_to_dev.domain.config import AppConfig
from zero_to_dev.domain.enums import HealthState
from zero_to_dev.domain.health import ProbeResult
from zero_to_dev.services.deps import get_app_config, get_health_context
from zero_to_dev.services.health.context import (
    CACHE_HISTORY_NAME,
    DATABASE_HISTORY_NAME,
    HealthContext,
)

from ..schemas import BasicHealth, ComprehensiveHealth, ServiceHealth, SubsystemHealth
from ..system import collect_system_metrics

router = APIRouter(prefix="/health", tags=["health"])

logger = logging.getLogger(__name__)


@router.get("")
async def health(
    ctx: HealthContext = Depends(get_health_context),
    config: AppConfig = Depends(get_app_config),
) -> BasicHealth:
    """API 자체 liveness. 의존성은 확인하지 않음."""
    return BasicHealth(
        service=config.service_name,
        timestamp=datetime.now(UTC),
        uptime=ctx.uptime,
        environment=config.env,
    )


@router.get("/db", responses={503: {"model": SubsystemHealth}})
async def database_health(ctx: HealthContext = Depends(get_health_context)) -> JSONResponse:
    result = await ctx.aggregator.check_one(
        "database", ctx.database_probe(), history_name=DATABASE_HISTORY_NAME
    )
    return _subsystem_response("postgresql", result)


@router.get("/cache", responses={503: {"model": SubsystemHealth}})
async def cache_health(ctx: HealthContext = Depends(get_health_context)) -> JSONResponse:
    result = await ctx.aggregator.check_one(
        "cache", ctx.cache_probe(), history_name=CACHE_HISTORY_NAME
    )
    return _subsystem_response("redis", result)


@router.get("/all", responses={503: {"model": ComprehensiveHealth}})
async def all_health(ctx: HealthContext = Depends(get_health_context)) -> JSONResponse:
    """api / database / cache 동시 체크. 전부 healthy 면 200, 아니면 503."""
    composite = await ctx.aggregator.check_all(ctx.subsystem_probes())

    services = {
        name: ServiceHealth(
            status=HealthState.OK if r.healthy else HealthState.ERROR,
            healthy=r.healthy,
            message=r.message or None,
        )
        for name, r in composite.subsystems.items()
    }
    if "api" in services:
        services["api"] = services["api"].model_copy(update={"uptime": ctx.uptime})

    body = ComprehensiveHealth(
        status=composite.status,
        timestamp=composite.timestamp,
        services=services,
        system=collect_system_metrics(ctx.uptime),
    )
    return JSONResponse(
        status_code=composite.http_status,
        content=body.model_dump(mode="json", by_alias=True),
    )


def _subsystem_response(service: str, result: ProbeResult) -> JSONResponse:
    if not result.healthy:
        logger.warning("%s health check failed: %s", service, result.message)
    body = SubsystemHealth(
        status=HealthState.OK if result.healthy else HealthState.ERROR,
        service=service,
        timestamp=result.checked_at,
        message=result.message,
    )
    return JSONResponse(
        status_code=200 if result.healthy else 503,
        content=body.model_dump(mode="json"),
    )
