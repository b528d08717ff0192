"""Dashboard: /health/all 을 주기적으로 폴링하는 단일 HTML 페이지.

API URL 과 폴링 주기는 런타임에 window.__API_URL__ / window.__POLL_INTERVAL_MS__ 로 주입.
"""

import json
from functools import lru_cache
from pathlib import Path

from fastapi.responses import HTMLResponse

from zero_to_dev.domain.config import DashboardConfig, get_config
from zero_to_dev.services.base import create_app

_INDEX = Path(__file__).parent / "static" / "index.html"

app = create_app("zero-to-dev-dashboard", version=get_config().version)


@lru_cache
def _template() -> str:
    return _INDEX.read_text(encoding="utf-8")


def render_index(config: DashboardConfig) -> str:
    # 바깥 따옴표는 템플릿 쪽에 있음. "</" 는 script 블록을 닫지 않도록 이스케이프
    api_url = json.dumps(config.api_url.rstrip("/"))[1:-1].replace("</", "<\\/")
    return (
        _template()
        .replace("{{API_URL}}", api_url)
        .replace("{{POLL_INTERVAL_MS}}", str(int(config.poll_interval_ms)))
    )


@app.get("/", response_class=HTMLResponse)
async def index() -> HTMLResponse:
    return HTMLResponse(render_index(get_config().dashboard))
