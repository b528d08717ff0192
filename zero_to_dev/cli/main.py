"""zero-to-dev 로컬 개발 CLI.

Usage:
    zero-to-dev ports [PORT ...]
    zero-to-dev docker
    zero-to-dev check [URL ...]
    zero-to-dev wait [URL] [--all] [--max-attempts 30] [--interval-ms 2000] [--timeout-ms 5000]
    zero-to-dev logs SERVICE [--lines 50]
    zero-to-dev env
"""

import argparse
import asyncio
import logging
import sys

from zero_to_dev.domain.config import get_config
from zero_to_dev.domain.errors import ConfigurationError
from zero_to_dev.domain.health import PollConfig, ProbeResult
from zero_to_dev.infra.observability.logging import setup_logging

from . import checks

logger = logging.getLogger(__name__)


def _mark(ok: bool) -> str:
    return "✓" if ok else "✗"


def cmd_ports(args: argparse.Namespace) -> int:
    ports = args.ports or get_config().cli.port_list
    for port in ports:
        if checks.is_port_in_use(port):
            owner = checks.get_process_on_port(port) or "unknown process"
            print(f"  port {port}: in use ({owner})")
        else:
            print(f"  port {port}: free")
    return 0


def cmd_docker(args: argparse.Namespace) -> int:
    running = checks.is_docker_running()
    print(f"{_mark(running)} Docker daemon")
    print(f"{_mark(checks.is_docker_compose_available())} Docker Compose")
    if not running:
        return 1
    for name in args.containers or get_config().cli.container_list:
        status = checks.get_container_status(name)
        print(f"  {_mark(status.running)} {name}: {status.status}")
    return 0


def _service_urls(urls: list[str]) -> dict[str, str]:
    if urls:
        return {url: url for url in urls}
    cli = get_config().cli
    return {
        "api": f"{cli.api_url.rstrip('/')}/health/all",
        "frontend": cli.frontend_url,
    }


def cmd_check(args: argparse.Namespace) -> int:
    composite = asyncio.run(checks.check_all_services(_service_urls(args.urls), timeout=args.timeout_ms / 1000))
    for name, result in composite.subsystems.items():
        code = f" [{result.status_code}]" if result.status_code is not None else ""
        print(f"{_mark(result.healthy)} {name}{code}: {result.message}")
    return 0 if composite.all_healthy else 1


def cmd_wait(args: argparse.Namespace) -> int:
    config = PollConfig(
        max_attempts=args.max_attempts,
        interval_millis=args.interval_ms,
        per_attempt_timeout_millis=args.timeout_ms,
    )

    def progress(attempt: int, result: ProbeResult) -> None:
        if not result.healthy:
            print(f"  attempt {attempt}/{config.max_attempts}: {result.message}")

    if args.all:
        target = "all services"
        coro = checks.wait_for_all_healthy(_service_urls([]), config, on_attempt=progress)
    else:
        target = args.url or f"{get_config().cli.api_url.rstrip('/')}/health"
        coro = checks.wait_for_healthy(target, config, on_attempt=progress)

    print(f"Waiting for {target}...")
    outcome = asyncio.run(coro)
    if outcome.healthy:
        print(f"{_mark(True)} {target} is healthy (attempt {outcome.attempts})")
        return 0

    last = outcome.last_result.message if outcome.last_result else "no result"
    print(f"{_mark(False)} {target} not healthy after {outcome.attempts} attempts: {last}")
    return 1


def cmd_logs(args: argparse.Namespace) -> int:
    print(checks.get_service_logs(args.service, lines=args.lines))
    return 0


def cmd_env(args: argparse.Namespace) -> int:
    exists = checks.env_file_exists(args.path)
    print(f"{_mark(exists)} {args.path}")
    return 0 if exists else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="zero-to-dev", description="로컬 개발 환경 헬스 체크")
    parser.add_argument("-v", "--verbose", action="store_true", help="INFO 로그 출력")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("ports", help="포트 사용 여부")
    p.add_argument("ports", nargs="*", type=int)
    p.set_defaults(func=cmd_ports)

    p = sub.add_parser("docker", help="Docker / 컨테이너 상태")
    p.add_argument("containers", nargs="*")
    p.set_defaults(func=cmd_docker)

    p = sub.add_parser("check", help="HTTP 헬스 체크 (동시 실행)")
    p.add_argument("urls", nargs="*")
    p.add_argument("--timeout-ms", type=int, default=5000)
    p.set_defaults(func=cmd_check)

    p = sub.add_parser("wait", help="healthy 가 될 때까지 폴링")
    p.add_argument("url", nargs="?")
    p.add_argument("--all", action="store_true", help="API + frontend 가 모두 healthy 일 때까지")
    p.add_argument("--max-attempts", type=int, default=30)
    p.add_argument("--interval-ms", type=int, default=2000)
    p.add_argument("--timeout-ms", type=int, default=5000)
    p.set_defaults(func=cmd_wait)

    p = sub.add_parser("logs", help="docker compose 서비스 로그")
    p.add_argument("service")
    p.add_argument("--lines", type=int, default=50)
    p.set_defaults(func=cmd_logs)

    p = sub.add_parser("env", help=".env 파일 존재 여부")
    p.add_argument("--path", default=".env")
    p.set_defaults(func=cmd_env)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging("zero-to-dev-cli", log_level="INFO" if args.verbose else "WARNING", json_output=False)

    try:
        return args.func(args)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
