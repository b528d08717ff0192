"""헬스 체크 모델.

ProbeResult / CompositeHealth 는 체크마다 새로 생성되고 이후 변경되지 않음 (frozen).
PollConfig 는 poll 호출 단위로 한 번 생성.
"""

from dataclasses import dataclass
from datetime import UTC, datetime

from pydantic import BaseModel, Field, model_validator

from .enums import HealthState, HistoryStatus, PollState
from .errors import ConfigurationError


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ProbeResult(BaseModel):
    """단일 프로브 결과."""

    healthy: bool
    status_code: int | None = None  # HTTP 프로브에서만 채워짐
    message: str = ""
    checked_at: datetime = Field(default_factory=_utcnow)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _unhealthy_has_message(self) -> "ProbeResult":
        if not self.healthy and not self.message:
            raise ValueError("unhealthy ProbeResult requires a message")
        return self

    @classmethod
    def ok(cls, message: str = "", status_code: int | None = None) -> "ProbeResult":
        return cls(healthy=True, message=message, status_code=status_code)

    @classmethod
    def fail(cls, message: str, status_code: int | None = None) -> "ProbeResult":
        return cls(healthy=False, message=message or "unknown error", status_code=status_code)


class CompositeHealth(BaseModel):
    """여러 서브시스템의 종합 헬스 상태.

    status == OK 는 모든 서브시스템이 healthy 일 때만. 하나라도 실패하면 DEGRADED.
    """

    status: HealthState
    subsystems: dict[str, ProbeResult]
    timestamp: datetime = Field(default_factory=_utcnow)

    model_config = {"frozen": True}

    @classmethod
    def from_results(cls, subsystems: dict[str, ProbeResult]) -> "CompositeHealth":
        healthy = all(r.healthy for r in subsystems.values())
        return cls(
            status=HealthState.OK if healthy else HealthState.DEGRADED,
            subsystems=dict(subsystems),
        )

    @property
    def all_healthy(self) -> bool:
        return self.status == HealthState.OK

    @property
    def http_status(self) -> int:
        return 200 if self.all_healthy else 503

    @property
    def history_status(self) -> HistoryStatus:
        return HistoryStatus.HEALTHY if self.all_healthy else HistoryStatus.DEGRADED


class HistoryRecord(BaseModel):
    """health_checks 테이블 한 행 (append-only)."""

    service_name: str
    status: str
    checked_at: datetime = Field(default_factory=_utcnow)

    model_config = {"frozen": True}


@dataclass(frozen=True)
class PollConfig:
    """PollLoop 설정.

    Args:
        max_attempts: 최대 시도 횟수 (양수)
        interval_millis: 실패 후 다음 시도까지 대기 (0 허용, 마지막 시도 후에는 대기 없음)
        per_attempt_timeout_millis: 시도별 타임아웃
    """

    max_attempts: int = 30
    interval_millis: int = 2000
    per_attempt_timeout_millis: int = 5000

    def __post_init__(self) -> None:
        if self.max_attempts <= 0:
            raise ConfigurationError(f"max_attempts must be positive, got {self.max_attempts}")
        if self.interval_millis < 0:
            raise ConfigurationError(f"interval_millis must be >= 0, got {self.interval_millis}")
        if self.per_attempt_timeout_millis <= 0:
            raise ConfigurationError(
                f"per_attempt_timeout_millis must be positive, got {self.per_attempt_timeout_millis}"
            )

    @property
    def interval_seconds(self) -> float:
        return self.interval_millis / 1000

    @property
    def timeout_seconds(self) -> float:
        return self.per_attempt_timeout_millis / 1000


@dataclass(frozen=True)
class PollOutcome:
    """PollLoop 종료 결과. bool() 은 healthy 와 같음."""

    healthy: bool
    attempts: int
    last_result: ProbeResult | None = None

    def __bool__(self) -> bool:
        return self.healthy

    @property
    def state(self) -> PollState:
        return PollState.SUCCEEDED if self.healthy else PollState.EXHAUSTED
