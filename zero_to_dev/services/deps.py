"""FastAPI Depends 기반 DI: 서비스 공통 의존성.

Usage:
    from zero_to_dev.services.deps import get_health_context

    @router.get("/health/db")
    async def db_health(ctx: HealthContext = Depends(get_health_context)):
        ...
"""

from fastapi import Request

from zero_to_dev.domain.config import AppConfig, get_config
from zero_to_dev.services.health.context import HealthContext


def get_health_context(request: Request) -> HealthContext:
    """lifespan 에서 생성된 HealthContext (app.state.health)."""
    return request.app.state.health


def get_app_config() -> AppConfig:
    return get_config()
