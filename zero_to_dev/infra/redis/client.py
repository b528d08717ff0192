"""Redis client factory."""

import logging

import redis
from redis.backoff import ExponentialBackoff
from redis.retry import Retry

from zero_to_dev.domain.config import RedisConfig

logger = logging.getLogger(__name__)

CONNECTION_TEST_KEY = "connection_test"


def create_redis(config: RedisConfig) -> redis.Redis:
    """재시도 정책이 적용된 Redis 클라이언트 생성.

    재시도 간격은 retry_delay_ms 부터 증가, 최대 3초.
    프로세스 시작 시 한 번 생성하여 HealthContext 로 전달.
    """
    retry = Retry(
        ExponentialBackoff(cap=3.0, base=config.retry_delay_ms / 1000),
        retries=config.max_retries,
    )
    return redis.Redis.from_url(
        config.url,
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
        retry=retry,
        retry_on_timeout=True,
    )


def ping_redis(client: redis.Redis) -> None:
    """PING 왕복. PONG 이 아니면 RuntimeError."""
    if not client.ping():
        raise RuntimeError("Redis PING failed")


def verify_connection(client: redis.Redis) -> None:
    """시작 시 연결 확인: PING + 10초짜리 테스트 키 쓰기."""
    ping_redis(client)
    client.set(CONNECTION_TEST_KEY, "OK", ex=10)
    logger.info("Redis connected")
