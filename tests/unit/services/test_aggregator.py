"""HealthAggregator 단위 테스트."""

import asyncio
import logging
import threading
import time
from unittest.mock import MagicMock

import pytest

from zero_to_dev.domain.enums import HealthState
from zero_to_dev.domain.health import HistoryRecord, ProbeResult
from zero_to_dev.services.health.aggregator import HealthAggregator
from zero_to_dev.services.health.history import ALL_SERVICES
from zero_to_dev.services.health.probes import ProbeClient


def _probe(result: ProbeResult, delay: float = 0.0):
    async def probe() -> ProbeResult:
        if delay:
            await asyncio.sleep(delay)
        return result

    return probe


class _ListHistory:
    def __init__(self):
        self.records: list[HistoryRecord] = []

    def append(self, record: HistoryRecord) -> None:
        self.records.append(record)


class _BlockedHistory(_ListHistory):
    """release 전까지 append 가 멈추는 이력 저장소 (응답 없는 DB)."""

    def __init__(self):
        super().__init__()
        self.release = threading.Event()

    def append(self, record: HistoryRecord) -> None:
        self.release.wait(timeout=10)
        super().append(record)


class TestCheckAll:
    @pytest.mark.asyncio
    async def test_all_healthy_is_ok(self):
        agg = HealthAggregator()
        composite = await agg.check_all(
            {
                "api": _probe(ProbeResult.ok()),
                "database": _probe(ProbeResult.ok("Database connection is healthy")),
                "cache": _probe(ProbeResult.ok("Redis connection is healthy")),
            }
        )
        assert composite.status == HealthState.OK
        assert composite.http_status == 200
        assert set(composite.subsystems) == {"api", "database", "cache"}

    @pytest.mark.asyncio
    async def test_unhealthy_preserves_message(self):
        agg = HealthAggregator()
        composite = await agg.check_all(
            {
                "api": _probe(ProbeResult.ok()),
                "database": _probe(ProbeResult.fail('connection to server at "db" failed')),
                "cache": _probe(ProbeResult.ok()),
            }
        )
        assert composite.status == HealthState.DEGRADED
        assert composite.http_status == 503
        assert composite.subsystems["database"].message == 'connection to server at "db" failed'
        assert composite.subsystems["cache"].healthy is True

    @pytest.mark.asyncio
    async def test_raising_probe_becomes_unhealthy_result(self):
        async def boom() -> ProbeResult:
            raise ConnectionRefusedError("Error 111 connecting to localhost:6379")

        agg = HealthAggregator()
        composite = await agg.check_all({"api": _probe(ProbeResult.ok()), "cache": boom})
        assert composite.status == HealthState.DEGRADED
        assert composite.subsystems["cache"].healthy is False
        assert composite.subsystems["cache"].message == "Error 111 connecting to localhost:6379"
        assert composite.subsystems["api"].healthy is True

    @pytest.mark.asyncio
    async def test_latency_bounded_by_slowest_probe(self):
        agg = HealthAggregator()
        start = time.monotonic()
        composite = await agg.check_all(
            {
                "fast": _probe(ProbeResult.ok(), delay=0.05),
                "slow": _probe(ProbeResult.ok(), delay=4.0),
            }
        )
        elapsed = time.monotonic() - start
        assert composite.all_healthy
        assert elapsed < 4.5

    @pytest.mark.asyncio
    async def test_probe_timeout_does_not_block_others(self):
        agg = HealthAggregator(probe_timeout=0.1)
        start = time.monotonic()
        composite = await agg.check_all(
            {
                "fast": _probe(ProbeResult.ok()),
                "hung": _probe(ProbeResult.ok(), delay=10.0),
            }
        )
        assert time.monotonic() - start < 1.0
        assert composite.subsystems["fast"].healthy is True
        assert composite.subsystems["hung"].healthy is False
        assert composite.subsystems["hung"].message == "timed out after 100ms"

    @pytest.mark.asyncio
    async def test_appends_aggregate_history(self):
        history = _ListHistory()
        agg = HealthAggregator(history)

        await agg.check_all({"api": _probe(ProbeResult.ok())})
        await agg.check_all({"api": _probe(ProbeResult.ok()), "cache": _probe(ProbeResult.fail("down"))})
        await agg.drain()

        assert [(r.service_name, r.status) for r in history.records] == [
            (ALL_SERVICES, "healthy"),
            (ALL_SERVICES, "degraded"),
        ]

    @pytest.mark.asyncio
    async def test_history_failure_does_not_change_result(self):
        probes = {"api": _probe(ProbeResult.ok()), "cache": _probe(ProbeResult.fail("down"))}
        baseline = await HealthAggregator().check_all(probes)

        broken = MagicMock()
        broken.append.side_effect = RuntimeError("relation health_checks does not exist")
        agg = HealthAggregator(broken)

        composite = await agg.check_all(probes)
        await agg.drain()

        broken.append.assert_called_once()
        assert composite.status == baseline.status
        assert {k: (v.healthy, v.message) for k, v in composite.subsystems.items()} == {
            k: (v.healthy, v.message) for k, v in baseline.subsystems.items()
        }

    @pytest.mark.asyncio
    async def test_slow_history_does_not_delay_result(self):
        class SlowHistory:
            def append(self, record):
                time.sleep(0.5)

        agg = HealthAggregator(SlowHistory())
        start = time.monotonic()
        await agg.check_all({"api": _probe(ProbeResult.ok())})
        assert time.monotonic() - start < 0.4
        await agg.drain()


class TestCheckOne:
    @pytest.mark.asyncio
    async def test_idempotent(self):
        agg = HealthAggregator()
        probe = _probe_factory_ok()
        r1 = await agg.check_one("database", probe)
        r2 = await agg.check_one("database", probe)
        assert r1.model_dump(exclude={"checked_at"}) == r2.model_dump(exclude={"checked_at"})

    @pytest.mark.asyncio
    async def test_success_is_logged(self):
        history = _ListHistory()
        agg = HealthAggregator(history)
        await agg.check_one("database", _probe(ProbeResult.ok()), history_name="database")
        await agg.drain()
        assert [(r.service_name, r.status) for r in history.records] == [("database", "healthy")]

    @pytest.mark.asyncio
    async def test_failure_is_not_logged(self):
        history = _ListHistory()
        agg = HealthAggregator(history)
        result = await agg.check_one("cache", _probe(ProbeResult.fail("Redis PING failed")))
        await agg.drain()
        assert result.healthy is False
        assert result.message == "Redis PING failed"
        assert history.records == []


def _probe_factory_ok():
    """호출마다 새 ProbeResult 를 생성하는 프로브."""

    async def probe() -> ProbeResult:
        return ProbeResult.ok("Database connection is healthy")

    return probe


class TestHistoryIsolation:
    @pytest.mark.asyncio
    async def test_hung_history_does_not_starve_blocking_probes(self):
        history = _BlockedHistory()
        agg = HealthAggregator(history)
        try:
            for _ in range(64):
                await agg.check_all({"api": _probe(ProbeResult.ok())})

            cache = ProbeClient(timeout=0.5)
            composite = await agg.check_all(
                {
                    "api": _probe(ProbeResult.ok()),
                    "cache": lambda: cache.blocking(lambda: None, name="cache", success_message="pong"),
                }
            )
            assert composite.subsystems["cache"].healthy is True
            assert composite.subsystems["cache"].message == "pong"
        finally:
            history.release.set()
            await agg.close()

    @pytest.mark.asyncio
    async def test_pending_writes_are_capped(self, caplog):
        history = _BlockedHistory()
        agg = HealthAggregator(history, max_pending_writes=2)

        with caplog.at_level(logging.WARNING):
            for _ in range(5):
                await agg.check_all({"api": _probe(ProbeResult.ok())})

        assert agg.pending_writes == 2
        assert caplog.text.count("Dropping health history write") == 3

        history.release.set()
        await agg.drain()
        assert len(history.records) == 2
        assert agg.pending_writes == 0

    @pytest.mark.asyncio
    async def test_close_does_not_wait_past_timeout(self):
        history = _BlockedHistory()
        agg = HealthAggregator(history)
        await agg.check_all({"api": _probe(ProbeResult.ok())})

        start = time.monotonic()
        await agg.close(timeout=0.1)
        assert time.monotonic() - start < 1.0

        history.release.set()
        await agg.drain(timeout=2)
        assert history.records and agg.pending_writes == 0

    @pytest.mark.asyncio
    async def test_no_history_after_close(self):
        history = _ListHistory()
        agg = HealthAggregator(history)
        await agg.close()
        await agg.check_all({"api": _probe(ProbeResult.ok())})
        assert agg.pending_writes == 0
        assert history.records == []
