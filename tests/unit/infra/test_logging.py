"""structlog 포맷터 테스트: stdlib 로그 + contextvars 병합."""

import json
import logging
import sys

import structlog

from zero_to_dev.infra.observability import logging as obs_logging
from zero_to_dev.infra.observability.logging import build_formatter, setup_logging


def _record(msg: str, *args, level: int = logging.WARNING, exc_info=None) -> logging.LogRecord:
    return logging.LogRecord("zero_to_dev.services.health.probes", level, __file__, 1, msg, args, exc_info)


class TestBuildFormatter:
    def test_json_merges_request_and_subsystem_context(self):
        formatter = build_formatter(json_output=True)
        with structlog.contextvars.bound_contextvars(path="/health/all", method="GET", subsystem="cache"):
            line = json.loads(formatter.format(_record("Probe %s failed: %s", "cache", "timed out after 5000ms")))

        assert line["event"] == "Probe cache failed: timed out after 5000ms"
        assert line["level"] == "warning"
        assert line["logger"] == "zero_to_dev.services.health.probes"
        assert line["path"] == "/health/all"
        assert line["subsystem"] == "cache"
        assert "timestamp" in line

    def test_context_does_not_leak(self):
        formatter = build_formatter(json_output=True)
        with structlog.contextvars.bound_contextvars(subsystem="database"):
            pass
        line = json.loads(formatter.format(_record("Health degraded: %s", "database")))
        assert "subsystem" not in line

    def test_json_renders_exception(self):
        formatter = build_formatter(json_output=True)
        try:
            raise RuntimeError("relation health_checks does not exist")
        except RuntimeError:
            record = _record("Failed to log health check", exc_info=sys.exc_info())
        line = json.loads(formatter.format(record))
        assert "RuntimeError: relation health_checks does not exist" in line["exception"]

    def test_drops_uvicorn_color_message(self):
        formatter = build_formatter(json_output=True)
        record = _record("Started server process")
        record.color_message = "\x1b[32mStarted server process\x1b[0m"
        line = json.loads(formatter.format(record))
        assert "color_message" not in line

    def test_console_output(self):
        formatter = build_formatter(json_output=False)
        assert "Health degraded: cache" in formatter.format(_record("Health degraded: %s", "cache"))


class TestSetupLogging:
    def test_reconfigure_replaces_handler(self):
        root = logging.getLogger()
        before = list(root.handlers)
        level = root.level
        try:
            setup_logging("zero-to-dev-api", log_level="DEBUG")
            first = obs_logging._handler
            setup_logging("zero-to-dev-api", log_level="INFO", json_output=False)

            assert first not in root.handlers
            assert obs_logging._handler in root.handlers
            assert root.level == logging.INFO
            assert logging.getLogger("httpx").level == logging.WARNING
        finally:
            root.removeHandler(obs_logging._handler)
            obs_logging._handler = None
            root.setLevel(level)
            structlog.contextvars.clear_contextvars()
        assert root.handlers == before
