from __future__ import annotations

import platform
import shutil
import sys
import time
from collections.abc import Callable
from typing import Any

from starlette.requests import Request
from starlette.responses import JSONResponse

from github_ci_mcp.config import SERVER_START_TIME, get_config
from github_ci_mcp.http_clients import _get_optional_github_token
from github_ci_mcp.mcp_server.registry import registered_tool_names


def _build_health_payload() -> dict[str, Any]:
    github_token_present = bool(_get_optional_github_token())
    unzip_available = shutil.which("unzip") is not None
    uptime_seconds = max(0, int(time.time() - SERVER_START_TIME))
    config = get_config()

    payload = {
        "status": "ok" if github_token_present and unzip_available else "warning",
        "uptime_seconds": uptime_seconds,
        "github_token_present": github_token_present,
        "unzip_available": unzip_available,
        "tool_count": len(registered_tool_names()),
        "runtime": {
            "python": sys.version.split()[0],
            "platform": platform.platform(),
        },
        "defaults": {
            "owner": config.owner,
            "repo": config.repo,
            "workflow_id": config.workflow_id,
            "ci_repo": config.ci_repo,
            "ci_workflow_id": config.ci_workflow_id,
            "workflow_logs_dir": config.workflow_logs_dir,
        },
    }
    return payload


def build_healthz_endpoint() -> Callable[[Request], Any]:
    async def _endpoint(_: Request) -> JSONResponse:
        return JSONResponse(_build_health_payload())

    return _endpoint


def register_healthz_route(app: Any) -> None:
    """Register the /healthz route on the ASGI app."""

    app.add_route("/healthz", build_healthz_endpoint(), methods=["GET"])


__all__ = ["register_healthz_route"]
