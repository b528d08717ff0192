"""프로세스/시스템 메트릭 (/health/all 의 system 항목)."""

import platform
import sys

import psutil

from .schemas import MemoryUsage, SystemMetrics

_MB = 1024 * 1024


def collect_system_metrics(uptime: float) -> SystemMetrics:
    process = psutil.Process()
    return SystemMetrics(
        memory=MemoryUsage(
            used=round(process.memory_info().rss / _MB),
            total=round(psutil.virtual_memory().total / _MB),
        ),
        uptime=round(uptime),
        python_version=platform.python_version(),
        platform=sys.platform,
    )
