"""ProbeClient: 단일 서브시스템 헬스 프로브.

호출당 한 번의 요청 (HTTP 리다이렉트 추적 제외). 내부 재시도 없음 (재시도는 PollLoop 책임).
모든 실패(연결 거부, 타임아웃, non-200, 드라이버 예외)는 ProbeResult(healthy=False)로 변환.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from functools import partial

import httpx
import redis
from sqlalchemy import Engine

from zero_to_dev.domain.health import ProbeResult
from zero_to_dev.infra.database.engine import ping_database
from zero_to_dev.infra.redis.client import ping_redis

logger = logging.getLogger(__name__)

Probe = Callable[[], Awaitable[ProbeResult]]


def _error_text(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


def _timeout_text(timeout: float) -> str:
    return f"timed out after {int(timeout * 1000)}ms"


class ProbeClient:
    """HTTP / DB / Redis 프로브 팩토리.

    Usage:
        client = ProbeClient(timeout=5.0)
        result = await client.http("http://localhost:4000/health")
        db_probe = client.database(engine)
        result = await db_probe()
    """

    def __init__(self, *, timeout: float = 5.0, http_client: httpx.AsyncClient | None = None):
        self._timeout = timeout
        self._http_client = http_client

    @property
    def timeout(self) -> float:
        return self._timeout

    async def http(self, url: str, *, timeout: float | None = None) -> ProbeResult:
        """GET 1회 (리다이렉트는 따라감). 최종 응답이 200 이면 healthy."""
        timeout = timeout or self._timeout
        try:
            if self._http_client is not None:
                resp = await self._http_client.get(url, timeout=timeout, follow_redirects=True)
            else:
                async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
                    resp = await client.get(url)
        except httpx.TimeoutException:
            return ProbeResult.fail(_timeout_text(timeout))
        except httpx.ConnectError as e:
            return ProbeResult.fail(f"Connection refused: {_error_text(e)}")
        except Exception as e:
            return ProbeResult.fail(_error_text(e))

        if resp.status_code == 200:
            return ProbeResult.ok("OK", status_code=resp.status_code)
        return ProbeResult.fail(f"HTTP {resp.status_code}", status_code=resp.status_code)

    async def blocking(
        self,
        check: Callable[[], object],
        *,
        name: str = "probe",
        success_message: str = "",
        timeout: float | None = None,
    ) -> ProbeResult:
        """동기 드라이버 호출을 워커 스레드에서 실행하고 타임아웃으로 제한."""
        timeout = timeout or self._timeout
        try:
            await asyncio.wait_for(asyncio.to_thread(check), timeout)
        except TimeoutError:
            return ProbeResult.fail(_timeout_text(timeout))
        except Exception as e:
            logger.warning("Probe %s failed: %s", name, e)
            return ProbeResult.fail(_error_text(e))
        return ProbeResult.ok(success_message)

    def url(self, url: str) -> Probe:
        return partial(self.http, url)

    def database(self, engine: Engine, *, timeout: float | None = None) -> Probe:
        """SELECT 1 왕복 프로브."""
        return partial(
            self.blocking,
            partial(ping_database, engine),
            name="database",
            success_message="Database connection is healthy",
            timeout=timeout,
        )

    def cache(self, client: redis.Redis, *, timeout: float | None = None) -> Probe:
        """PING 왕복 프로브."""
        return partial(
            self.blocking,
            partial(ping_redis, client),
            name="cache",
            success_message="Redis connection is healthy",
            timeout=timeout,
        )
