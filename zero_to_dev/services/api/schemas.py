"""API 응답 스키마."""

from datetime import datetime

from pydantic import BaseModel, Field

from zero_to_dev.domain.enums import HealthState


class RootInfo(BaseModel):
    service: str
    version: str
    status: str = "running"
    timestamp: datetime
    endpoints: dict[str, str]


class BasicHealth(BaseModel):
    """GET /health"""

    status: HealthState = HealthState.OK
    service: str
    timestamp: datetime
    uptime: float  # 초
    environment: str


class SubsystemHealth(BaseModel):
    """GET /health/db, /health/cache"""

    status: HealthState
    service: str  # "postgresql" | "redis"
    timestamp: datetime
    message: str


class ServiceHealth(BaseModel):
    """/health/all 의 services 항목."""

    status: HealthState
    healthy: bool
    message: str | None = None
    uptime: float | None = None  # api 항목만


class MemoryUsage(BaseModel):
    used: int
    total: int
    unit: str = "MB"


class SystemMetrics(BaseModel):
    memory: MemoryUsage
    uptime: int
    python_version: str = Field(serialization_alias="pythonVersion")
    platform: str


class ComprehensiveHealth(BaseModel):
    """GET /health/all"""

    status: HealthState
    timestamp: datetime
    services: dict[str, ServiceHealth]
    system: SystemMetrics
