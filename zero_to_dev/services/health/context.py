"""HealthContext: DB / Redis 핸들과 집계기를 묶은 프로세스 단위 컨텍스트.

전역 싱글턴 대신 시작 시 한 번 생성하여 명시적으로 전달 (테스트에서는 가짜 협력자 주입).
"""

import logging
import time
from dataclasses import dataclass, field

import redis
from sqlalchemy import Engine

from zero_to_dev.domain.config import AppConfig
from zero_to_dev.domain.health import ProbeResult
from zero_to_dev.infra.database.engine import create_db_engine, verify_database
from zero_to_dev.infra.redis.client import create_redis, verify_connection

from .aggregator import HealthAggregator
from .history import SqlHistoryLog
from .probes import Probe, ProbeClient

logger = logging.getLogger(__name__)

# /health/db, /health/cache 성공 시 health_checks.service_name
DATABASE_HISTORY_NAME = "database"
CACHE_HISTORY_NAME = "redis"


@dataclass
class HealthContext:
    """API 헬스 체크 협력자 묶음.

    Args:
        engine: SQLAlchemy Engine (커넥션 풀은 engine 소유)
        redis: Redis 클라이언트
        probes: 프로브 팩토리
        aggregator: 집계기 (이력 기록 포함)
        database_timeout / cache_timeout: 프로브별 타임아웃 (초)
    """

    engine: Engine
    redis: redis.Redis
    probes: ProbeClient
    aggregator: HealthAggregator
    database_timeout: float = 5.0
    cache_timeout: float = 5.0
    started_at: float = field(default_factory=time.monotonic)

    @classmethod
    def from_config(cls, config: AppConfig) -> "HealthContext":
        engine = create_db_engine(config.db, echo=config.debug)
        return cls(
            engine=engine,
            redis=create_redis(config.redis),
            probes=ProbeClient(timeout=config.probe.http_timeout_ms / 1000),
            aggregator=HealthAggregator(
                SqlHistoryLog(engine),
                max_pending_writes=config.probe.history_max_pending,
            ),
            database_timeout=config.probe.database_timeout_ms / 1000,
            cache_timeout=config.probe.cache_timeout_ms / 1000,
        )

    @property
    def uptime(self) -> float:
        return time.monotonic() - self.started_at

    def database_probe(self) -> Probe:
        return self.probes.database(self.engine, timeout=self.database_timeout)

    def cache_probe(self) -> Probe:
        return self.probes.cache(self.redis, timeout=self.cache_timeout)

    async def api_probe(self) -> ProbeResult:
        # 요청을 처리 중이라는 것 자체가 API liveness
        return ProbeResult.ok("API is running")

    def subsystem_probes(self) -> dict[str, Probe]:
        return {
            "api": self.api_probe,
            "database": self.database_probe(),
            "cache": self.cache_probe(),
        }

    def connect(self) -> None:
        """시작 시 DB/Redis 연결 확인. 실패하면 예외 전파 (기동 중단)."""
        logger.info("Connecting to PostgreSQL...")
        verify_database(self.engine)
        logger.info("PostgreSQL connected")
        logger.info("Connecting to Redis...")
        verify_connection(self.redis)

    async def close(self) -> None:
        await self.aggregator.close()
        self.engine.dispose()
        logger.info("PostgreSQL disconnected")
        self.redis.close()
        logger.info("Redis disconnected")
