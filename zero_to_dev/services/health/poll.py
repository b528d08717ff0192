"""PollLoop: healthy 가 될 때까지 고정 간격으로 프로브 반복.

시도는 항상 순차 실행. 실패한 시도 사이에만 interval 만큼 대기하고,
마지막 시도 후에는 대기하지 않음. 소진 시 예외 없이 PollOutcome(healthy=False) 반환.
asyncio.CancelledError 는 잡지 않고 그대로 전파 (shutdown 시그널).
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping

from zero_to_dev.domain.health import PollConfig, PollOutcome, ProbeResult

from .aggregator import HealthAggregator
from .probes import Probe

logger = logging.getLogger(__name__)

PollTarget = Callable[[], Awaitable[ProbeResult | bool]]
AttemptCallback = Callable[[int, ProbeResult], None]


async def wait_until_healthy(
    probe: PollTarget,
    config: PollConfig | None = None,
    *,
    on_attempt: AttemptCallback | None = None,
) -> PollOutcome:
    """probe 가 healthy 를 반환할 때까지 최대 max_attempts 회 시도.

    Args:
        probe: ProbeResult 또는 bool 을 반환하는 코루틴 함수
        config: 시도 횟수 / 간격 / 시도별 타임아웃
        on_attempt: 매 시도 후 (attempt, result) 로 호출 (CLI 진행 표시용)

    Returns:
        PollOutcome: healthy, 시도 횟수, 마지막 프로브 결과
    """
    config = config or PollConfig()
    result: ProbeResult | None = None

    for attempt in range(1, config.max_attempts + 1):
        result = await _attempt(probe, config.timeout_seconds)
        if on_attempt is not None:
            on_attempt(attempt, result)

        if result.healthy:
            logger.info("Healthy after %d attempt(s)", attempt)
            return PollOutcome(healthy=True, attempts=attempt, last_result=result)

        logger.info("Attempt %d/%d not healthy: %s", attempt, config.max_attempts, result.message)
        if attempt < config.max_attempts:
            await asyncio.sleep(config.interval_seconds)

    logger.warning("Gave up after %d attempts: %s", config.max_attempts, result.message if result else "")
    return PollOutcome(healthy=False, attempts=config.max_attempts, last_result=result)


def composite_probe(aggregator: HealthAggregator, probes: Mapping[str, Probe]) -> Probe:
    """HealthAggregator 를 단일 프로브로 감쌈 ("전부 healthy 될 때까지 대기" 용)."""

    async def _probe() -> ProbeResult:
        composite = await aggregator.check_all(probes)
        if composite.all_healthy:
            return ProbeResult.ok("all services healthy")
        failed = [f"{name}: {r.message}" for name, r in composite.subsystems.items() if not r.healthy]
        return ProbeResult.fail("; ".join(failed))

    return _probe


async def _attempt(probe: PollTarget, timeout: float) -> ProbeResult:
    try:
        outcome = await asyncio.wait_for(probe(), timeout)
    except TimeoutError:
        return ProbeResult.fail(f"timed out after {int(timeout * 1000)}ms")
    except Exception as e:
        return ProbeResult.fail(str(e) or type(e).__name__)

    if isinstance(outcome, ProbeResult):
        return outcome
    return ProbeResult.ok() if outcome else ProbeResult.fail("probe reported unhealthy")
