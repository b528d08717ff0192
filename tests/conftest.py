"""공용 Fixtures: SQLite in-memory DB, FakeRedis, 설정 캐시 초기화."""

import fakeredis
import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from zero_to_dev.domain.config import get_config
from zero_to_dev.infra.database.models import HealthCheckDB  # noqa: F401


@pytest.fixture(autouse=True)
def _clear_config_cache():
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture
def sqlite_engine():
    """스레드 간 공유되는 in-memory SQLite (health_checks 테이블 포함)."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def fake_redis():
    return fakeredis.FakeRedis(decode_responses=True)
