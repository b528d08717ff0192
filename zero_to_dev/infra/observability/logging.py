"""Structured logging: structlog 기반 설정.

stdlib logging.getLogger(__name__) 로 남긴 로그도 같은 포맷터를 거침.
요청 중에는 method / path, 프로브 실행 중에는 subsystem 이 contextvars 로 붙음
(services.base.log_requests, HealthAggregator._run 에서 바인딩).

Usage:
    from zero_to_dev.infra.observability.logging import setup_logging

    setup_logging(service_name="zero-to-dev-api")
    logger = logging.getLogger(__name__)
    logger.warning("Probe %s failed: %s", "cache", "timed out after 5000ms")
    # {"event": "Probe cache failed: ...", "service": "zero-to-dev-api",
    #  "path": "/health/all", "subsystem": "cache", "level": "warning", ...}
"""

import logging
import sys

import structlog

# 요청마다 INFO 를 남기는 라이브러리 로거 (uvicorn 자체 access log 는 미들웨어와 중복)
_NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")

# setup_logging 이 root 에 붙인 핸들러 (재호출 시 교체)
_handler: logging.Handler | None = None


def _drop_uvicorn_color_message(_, __, event_dict: dict) -> dict:
    # uvicorn 이 extra 로 넘기는 ANSI 버전 메시지
    event_dict.pop("color_message", None)
    return event_dict


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.ExtraAdder(),
        _drop_uvicorn_color_message,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def build_formatter(json_output: bool = True) -> structlog.stdlib.ProcessorFormatter:
    """stdlib Handler 용 포맷터. JSON 이면 예외를 문자열 필드로 렌더링."""
    if json_output:
        processors = [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    else:
        processors = [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.dev.ConsoleRenderer(),
        ]
    return structlog.stdlib.ProcessorFormatter(
        processors=processors,
        foreign_pre_chain=_shared_processors(),
    )


def setup_logging(
    service_name: str = "zero-to-dev",
    *,
    log_level: str = "INFO",
    json_output: bool = True,
    quiet_loggers: tuple[str, ...] = _NOISY_LOGGERS,
) -> None:
    """전역 structlog + stdlib 로깅 설정.

    Args:
        service_name: 모든 로그에 붙는 service 필드
        log_level: 로그 레벨 (DEBUG, INFO, WARNING, ERROR)
        json_output: True면 JSON 형식 (API), False면 콘솔 형식 (CLI)
        quiet_loggers: WARNING 이상만 출력할 로거 이름
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    global _handler
    root = logging.getLogger()
    if _handler is not None:
        root.removeHandler(_handler)
    _handler = logging.StreamHandler(sys.stdout)
    _handler.setFormatter(build_formatter(json_output))
    root.addHandler(_handler)
    root.setLevel(level)

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    structlog.contextvars.bind_contextvars(service=service_name)
