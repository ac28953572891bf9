"""
Request + tool execution context.

Goals:
- Own the single FastMCP instance every tool registers against.
- Carry correlation ids for logs through contextvars.
"""

from __future__ import annotations

import os
import time
from contextvars import ContextVar
from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

SERVER_NAME = "github_ci_mcp"

SERVER_INSTRUCTIONS = (
    "GitHub repository, issue, pull request, search and Actions tools. "
    "To triage a failed CI run, call get_workflow_run_logs (or get_ci_workflow_run_logs) "
    "for a download URL and pass it to analyze_workflow_logs, which downloads, unzips and "
    "scans the Bazel logs for the most relevant error excerpt."
)


def _resolve_host() -> str:
    host = (os.getenv("FASTMCP_HOST") or os.getenv("HOST") or "").strip()
    return host or "127.0.0.1"


mcp = FastMCP(SERVER_NAME, instructions=SERVER_INSTRUCTIONS, host=_resolve_host())


# -----------------------------------------------------------------------------
# Correlation ids (set these in request middleware / entrypoints)
# -----------------------------------------------------------------------------

REQUEST_MESSAGE_ID: ContextVar[Optional[str]] = ContextVar("REQUEST_MESSAGE_ID", default=None)
REQUEST_SESSION_ID: ContextVar[Optional[str]] = ContextVar("REQUEST_SESSION_ID", default=None)
REQUEST_PATH: ContextVar[Optional[str]] = ContextVar("REQUEST_PATH", default=None)


def get_request_context() -> Dict[str, Any]:
    """Small, stable context blob suitable for logs (avoid secrets)."""
    return {
        "message_id": REQUEST_MESSAGE_ID.get(),
        "session_id": REQUEST_SESSION_ID.get(),
        "path": REQUEST_PATH.get(),
        "ts": time.time(),
    }
