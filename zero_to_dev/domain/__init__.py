"""zero-to-dev 도메인 모델.

Usage:
    from zero_to_dev.domain import ProbeResult, CompositeHealth, PollConfig
    from zero_to_dev.domain.config import AppConfig
"""

from .enums import HealthState, HistoryStatus, PollState
from .errors import ConfigurationError, HTTPError
from .health import CompositeHealth, HistoryRecord, PollConfig, PollOutcome, ProbeResult

__all__ = [
    "HealthState",
    "HistoryStatus",
    "PollState",
    "ConfigurationError",
    "HTTPError",
    "CompositeHealth",
    "HistoryRecord",
    "PollConfig",
    "PollOutcome",
    "ProbeResult",
]
