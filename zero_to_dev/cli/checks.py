"""로컬 개발 환경 체크: 포트, Docker, HTTP 헬스, 폴링.

외부 도구(lsof, ps, docker)가 없거나 실패해도 예외를 던지지 않고 falsy 값을 반환.
"""

import logging
import socket
import subprocess
from dataclasses import dataclass
from pathlib import Path

from zero_to_dev.domain.health import CompositeHealth, PollConfig, PollOutcome, ProbeResult
from zero_to_dev.services.health.aggregator import HealthAggregator
from zero_to_dev.services.health.poll import AttemptCallback, composite_probe, wait_until_healthy
from zero_to_dev.services.health.probes import ProbeClient

logger = logging.getLogger(__name__)

_COMMAND_TIMEOUT = 10.0


@dataclass(frozen=True)
class ContainerStatus:
    """docker ps 기준 컨테이너 상태."""

    running: bool
    status: str


def _run(*cmd: str, timeout: float = _COMMAND_TIMEOUT) -> subprocess.CompletedProcess | None:
    """명령 실행. 실행 불가/타임아웃이면 None."""
    try:
        return subprocess.run(cmd, capture_output=True, text=True, timeout=timeout, check=False)
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug("Command %s failed: %s", cmd[0], e)
        return None


def _succeeded(cmd: tuple[str, ...]) -> bool:
    proc = _run(*cmd)
    return proc is not None and proc.returncode == 0


# ─── Ports ──────────────────────────────────────────────────────


def is_port_in_use(port: int, host: str = "127.0.0.1", timeout: float = 0.5) -> bool:
    """TCP 연결이 수락되면 사용 중."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.settimeout(timeout)
        return sock.connect_ex((host, port)) == 0


def get_process_on_port(port: int) -> str | None:
    """포트를 LISTEN 중인 프로세스 이름 (lsof + ps)."""
    proc = _run("lsof", "-i", f":{port}", "-sTCP:LISTEN", "-t")
    if proc is None or proc.returncode != 0:
        return None
    pids = proc.stdout.split()
    if not pids:
        return None

    ps = _run("ps", "-p", pids[0], "-o", "comm=")
    if ps is None or ps.returncode != 0:
        return None
    return ps.stdout.strip() or None


# ─── Docker ─────────────────────────────────────────────────────


def is_docker_running() -> bool:
    return _succeeded(("docker", "info"))


def is_docker_compose_available() -> bool:
    return _succeeded(("docker", "compose", "version"))


def get_container_status(container_name: str) -> ContainerStatus:
    proc = _run(
        "docker", "ps", "-a",
        "--filter", f"name={container_name}",
        "--format", "{{.Status}}",
    )  # fmt: skip
    if proc is None or proc.returncode != 0:
        return ContainerStatus(running=False, status="Error checking status")
    status = proc.stdout.strip()
    return ContainerStatus(running="up" in status.lower(), status=status or "Not found")


def get_service_logs(service: str, lines: int = 50) -> str:
    proc = _run("docker", "compose", "logs", f"--tail={lines}", service)
    if proc is None:
        return "Error getting logs: docker not available"
    if proc.returncode != 0:
        return f"Error getting logs: {proc.stderr.strip()}"
    return proc.stdout


def env_file_exists(path: str | Path = ".env") -> bool:
    return Path(path).is_file()


# ─── HTTP Health ────────────────────────────────────────────────


async def check_http_health(url: str, timeout: float = 5.0) -> ProbeResult:
    return await ProbeClient(timeout=timeout).http(url)


async def check_all_services(services: dict[str, str], timeout: float = 5.0) -> CompositeHealth:
    """서비스별 HTTP 헬스를 동시에 체크 (이력 기록 없음)."""
    client = ProbeClient(timeout=timeout)
    return await HealthAggregator().check_all({name: client.url(url) for name, url in services.items()})


async def wait_for_healthy(
    url: str,
    config: PollConfig | None = None,
    *,
    on_attempt: AttemptCallback | None = None,
) -> PollOutcome:
    """url 이 200 을 반환할 때까지 폴링."""
    config = config or PollConfig()
    client = ProbeClient(timeout=config.timeout_seconds)
    return await wait_until_healthy(client.url(url), config, on_attempt=on_attempt)


async def wait_for_all_healthy(
    services: dict[str, str],
    config: PollConfig | None = None,
    *,
    on_attempt: AttemptCallback | None = None,
) -> PollOutcome:
    """모든 서비스가 동시에 healthy 가 될 때까지 폴링."""
    config = config or PollConfig()
    client = ProbeClient(timeout=config.timeout_seconds)
    probes = {name: client.url(url) for name, url in services.items()}
    return await wait_until_healthy(composite_probe(HealthAggregator(), probes), config, on_attempt=on_attempt)
