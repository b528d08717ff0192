"""SQLModel 테이블 정의: health_checks (append-only 헬스 체크 이력)."""

from datetime import UTC, datetime

from sqlalchemy import Index
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class HealthCheckDB(SQLModel, table=True):
    __tablename__ = "health_checks"

    id: int | None = Field(default=None, primary_key=True)
    service_name: str = Field(max_length=100)
    status: str = Field(max_length=50)
    checked_at: datetime = Field(default_factory=_utcnow)

    __table_args__ = (Index("idx_health_checks_checked_at", "checked_at"),)
