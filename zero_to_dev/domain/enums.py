"""열거형 정의: 헬스 체크 상태값."""

from enum import StrEnum


class HealthState(StrEnum):
    """종합 헬스 상태 (API 응답의 status 필드)"""

    OK = "ok"
    DEGRADED = "degraded"
    ERROR = "error"


class HistoryStatus(StrEnum):
    """health_checks 테이블에 기록되는 상태 문자열"""

    HEALTHY = "healthy"
    DEGRADED = "degraded"


class PollState(StrEnum):
    """PollLoop 상태 (PENDING → SUCCEEDED | EXHAUSTED)"""

    PENDING = "PENDING"
    SUCCEEDED = "SUCCEEDED"
    EXHAUSTED = "EXHAUSTED"
