"""헬스 체크 이력 Repository.

모든 쿼리는 SQLModel Session 을 받아 순수 함수로 동작.
이력은 append-only: 수정/삭제 API 없음.
"""

from datetime import UTC

from sqlalchemy import desc
from sqlmodel import Session, select

from zero_to_dev.domain.health import HistoryRecord

from .models import HealthCheckDB


class HealthCheckRepository:
    """health_checks 테이블 쓰기/조회."""

    @staticmethod
    def save(session: Session, record: HistoryRecord) -> HealthCheckDB:
        row = HealthCheckDB(
            service_name=record.service_name,
            status=record.status,
            checked_at=record.checked_at.astimezone(UTC).replace(tzinfo=None),
        )
        session.add(row)
        session.commit()
        return row

    @staticmethod
    def get_recent(
        session: Session,
        service_name: str | None = None,
        limit: int = 50,
    ) -> list[HealthCheckDB]:
        stmt = select(HealthCheckDB)
        if service_name:
            stmt = stmt.where(HealthCheckDB.service_name == service_name)
        stmt = stmt.order_by(desc(HealthCheckDB.checked_at), desc(HealthCheckDB.id)).limit(limit)
        return list(session.exec(stmt).all())
