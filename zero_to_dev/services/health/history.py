"""HistoryLog: append-only 헬스 체크 이력.

이력 기록 실패는 헬스 체크 결과에 영향을 주지 않음 (로그만 남기고 버림).
"""

import logging
from typing import Protocol

from sqlalchemy import Engine
from sqlmodel import Session

from zero_to_dev.domain.health import HistoryRecord
from zero_to_dev.infra.database.repositories import HealthCheckRepository

logger = logging.getLogger(__name__)

ALL_SERVICES = "all_services"


class HistoryLog(Protocol):
    """이력 저장소 인터페이스 (쓰기 전용)."""

    def append(self, record: HistoryRecord) -> None: ...


class SqlHistoryLog:
    """health_checks 테이블 기반 HistoryLog."""

    def __init__(self, engine: Engine):
        self._engine = engine

    def append(self, record: HistoryRecord) -> None:
        with Session(self._engine) as session:
            HealthCheckRepository.save(session, record)


def append_quietly(history: HistoryLog, record: HistoryRecord) -> None:
    """이력 기록 시도. 어떤 예외도 전파하지 않음."""
    try:
        history.append(record)
    except Exception:
        logger.warning(
            "Failed to log health check: service=%s status=%s",
            record.service_name,
            record.status,
            exc_info=True,
        )
