"""헬스 체크 코어: ProbeClient, HealthAggregator, PollLoop, HistoryLog."""

from .aggregator import HealthAggregator
from .context import HealthContext
from .history import ALL_SERVICES, HistoryLog, SqlHistoryLog, append_quietly
from .poll import composite_probe, wait_until_healthy
from .probes import Probe, ProbeClient

__all__ = [
    "ALL_SERVICES",
    "HealthAggregator",
    "HealthContext",
    "HistoryLog",
    "Probe",
    "ProbeClient",
    "SqlHistoryLog",
    "append_quietly",
    "composite_probe",
    "wait_until_healthy",
]
