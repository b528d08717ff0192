"""HealthAggregator: 독립 프로브 N개를 동시에 실행하여 CompositeHealth 로 집계.

- check_all: 모든 프로브를 asyncio.gather 로 동시 실행, 전부 끝날 때까지 대기 (short-circuit 없음).
  지연 시간은 프로브 타임아웃의 합이 아니라 최댓값으로 제한됨.
- check_one: 단일 프로브. 성공 시에만 이력 기록.
- 이력 기록은 백그라운드 태스크 (fire-and-forget). 호출자는 기록 완료를 기다리지 않음.
  기록은 집계기 전용 스레드 풀에서 실행 (프로브가 쓰는 기본 executor 와 분리).
  대기 중인 기록이 max_pending_writes 에 도달하면 새 기록은 버림.
"""

import asyncio
import logging
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor

import structlog

from zero_to_dev.domain.enums import HistoryStatus
from zero_to_dev.domain.health import CompositeHealth, HistoryRecord, ProbeResult

from .history import ALL_SERVICES, HistoryLog, append_quietly
from .probes import Probe

logger = logging.getLogger(__name__)


class HealthAggregator:
    """서브시스템 헬스 집계기.

    Args:
        history: 이력 저장소 (None 이면 기록 안 함, CLI 용)
        probe_timeout: 프로브별 상한 (초). 프로브 자체 타임아웃이 없을 때의 안전장치
        history_workers: 이력 기록 전용 스레드 수
        max_pending_writes: 동시에 대기할 수 있는 이력 기록 수
    """

    def __init__(
        self,
        history: HistoryLog | None = None,
        *,
        probe_timeout: float | None = None,
        history_workers: int = 1,
        max_pending_writes: int = 32,
    ):
        self._history = history
        self._probe_timeout = probe_timeout
        self._max_pending = max_pending_writes
        self._pending: set[asyncio.Future] = set()
        self._executor: ThreadPoolExecutor | None = None
        if history is not None:
            self._executor = ThreadPoolExecutor(max_workers=history_workers, thread_name_prefix="health-history")

    @property
    def pending_writes(self) -> int:
        return len(self._pending)

    async def check_all(self, probes: Mapping[str, Probe]) -> CompositeHealth:
        names = list(probes)
        results = await asyncio.gather(*(self._run(name, probes[name]) for name in names))
        composite = CompositeHealth.from_results(dict(zip(names, results, strict=True)))

        if not composite.all_healthy:
            failed = [n for n, r in composite.subsystems.items() if not r.healthy]
            logger.warning("Health degraded: %s", ", ".join(failed))

        self._record(HistoryRecord(service_name=ALL_SERVICES, status=composite.history_status.value))
        return composite

    async def check_one(self, name: str, probe: Probe, *, history_name: str | None = None) -> ProbeResult:
        """단일 서브시스템 체크. 실패는 이력에 남기지 않음."""
        result = await self._run(name, probe)
        if result.healthy:
            self._record(HistoryRecord(service_name=history_name or name, status=HistoryStatus.HEALTHY.value))
        return result

    async def drain(self, timeout: float | None = None) -> None:
        """대기 중인 이력 기록 완료까지 대기 (shutdown / 테스트). timeout 초과분은 그대로 둠."""
        if self._pending:
            await asyncio.wait(list(self._pending), timeout=timeout)

    async def close(self, timeout: float = 5.0) -> None:
        """남은 기록을 timeout 까지 기다린 뒤 이력 스레드 풀 종료."""
        await self.drain(timeout)
        if self._pending:
            logger.warning("Abandoning %d pending health history write(s)", len(self._pending))
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None

    async def _run(self, name: str, probe: Probe) -> ProbeResult:
        with structlog.contextvars.bound_contextvars(subsystem=name):
            try:
                if self._probe_timeout is not None:
                    return await asyncio.wait_for(probe(), self._probe_timeout)
                return await probe()
            except TimeoutError as e:
                timeout_ms = int((self._probe_timeout or 0) * 1000)
                return ProbeResult.fail(str(e) or f"timed out after {timeout_ms}ms")
            except Exception as e:
                logger.warning("Probe %s raised: %s", name, e)
                return ProbeResult.fail(str(e) or type(e).__name__)

    def _record(self, record: HistoryRecord) -> None:
        if self._history is None or self._executor is None:
            return
        if len(self._pending) >= self._max_pending:
            logger.warning(
                "Dropping health history write (%d pending): service=%s status=%s",
                len(self._pending),
                record.service_name,
                record.status,
            )
            return
        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(self._executor, append_quietly, self._history, record)
        self._pending.add(future)
        future.add_done_callback(self._pending.discard)
