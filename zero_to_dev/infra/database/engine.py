"""SQLModel engine factory."""

from sqlalchemy import Engine, text
from sqlmodel import SQLModel, create_engine

from zero_to_dev.domain.config import DatabaseConfig


def create_db_engine(config: DatabaseConfig, *, echo: bool = False) -> Engine:
    """PostgreSQL 커넥션 풀 생성.

    pool_min/pool_max 는 pool_size/max_overflow 로, 타임아웃(ms)은 초 단위로 변환.
    프로세스 시작 시 한 번 생성하여 HealthContext 로 전달.
    """
    connect_args = {}
    if config.url.startswith("postgresql"):
        connect_args["connect_timeout"] = max(config.connection_timeout_ms // 1000, 1)

    return create_engine(
        config.url,
        pool_size=config.pool_min,
        max_overflow=config.max_overflow,
        pool_timeout=config.connection_timeout_ms / 1000,
        pool_recycle=config.idle_timeout_ms // 1000,
        pool_pre_ping=True,
        connect_args=connect_args,
        echo=echo,
    )


def ping_database(engine: Engine) -> None:
    """SELECT 1 왕복. 실패 시 드라이버 예외를 그대로 전파."""
    with engine.connect() as conn:
        row = conn.execute(text("SELECT 1 AS health_check")).first()
    if row is None:
        raise RuntimeError("SELECT 1 returned no rows")


def verify_database(engine: Engine) -> None:
    """시작 시 연결 확인 + health_checks 테이블 보장.

    운영 스키마는 alembic 으로 관리하고, 여기서는 누락된 테이블만 생성.
    """
    from . import models  # noqa: F401

    ping_database(engine)
    SQLModel.metadata.create_all(engine)
