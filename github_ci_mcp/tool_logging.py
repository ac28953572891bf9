"""Logging helpers for outbound GitHub requests.

Goals:
- Keep provider logs human-readable and clickable.
- Preserve structured metadata (status, duration, url) as logging extras.
- Avoid circular imports between HTTP helpers and the MCP server.
"""

from __future__ import annotations

from typing import Any, Optional
from urllib.parse import urlparse

import httpx

from github_ci_mcp.config import GITHUB_LOGGER


def _derive_github_web_url(api_url: str) -> Optional[str]:
    """Convert an api.github.com URL into a human-friendly github.com URL.

    Raw API links show 404 in a browser for private repos, so the log line
    carries the equivalent web page as well.
    """

    try:
        parsed = urlparse(api_url)
    except ValueError:  # pragma: no cover
        return None

    parts = [p for p in parsed.path.split("/") if p]
    if len(parts) < 3 or parts[0] != "repos":
        return None

    full_name = f"{parts[1]}/{parts[2]}"

    # /repos/{owner}/{repo}/actions/runs/{run_id}[/...]
    if len(parts) >= 6 and parts[3] == "actions" and parts[4] == "runs":
        return f"https://github.com/{full_name}/actions/runs/{parts[5]}"

    # /repos/{owner}/{repo}/issues/{n} and /pulls/{n}
    if len(parts) >= 5 and parts[3] in {"issues", "pulls"}:
        kind = "pull" if parts[3] == "pulls" else "issues"
        return f"https://github.com/{full_name}/{kind}/{parts[4]}"

    return f"https://github.com/{full_name}"


def _shorten_api_url(api_url: str) -> str:
    for prefix in ("https://api.github.com", "http://api.github.com"):
        if api_url.startswith(prefix):
            return api_url[len(prefix) :]
    return api_url


def _record_github_request(
    *,
    status_code: Optional[int],
    duration_ms: int,
    error: bool,
    resp: Optional[httpx.Response] = None,
    exc: Optional[BaseException] = None,
    method: Optional[str] = None,
    url: Optional[str] = None,
) -> None:
    """Emit one log line describing a GitHub API request."""

    log_extra: dict[str, Any] = {
        "status_code": status_code,
        "duration_ms": duration_ms,
        "error": error,
    }
    if method:
        log_extra["method"] = method
    if url:
        log_extra["url"] = url
        web_url = _derive_github_web_url(url)
        if web_url:
            log_extra["web_url"] = web_url
    if resp is not None:
        log_extra["rate_limit_remaining"] = resp.headers.get("X-RateLimit-Remaining")
    if exc is not None:
        log_extra["exc_type"] = exc.__class__.__name__

    status = status_code if status_code is not None else "ERR"
    msg = f"GitHub API {method or '?'} {_shorten_api_url(url or '')} -> {status} ({duration_ms}ms)"
    web_url_val = log_extra.get("web_url")
    if isinstance(web_url_val, str) and web_url_val:
        # Keep the URL off the end of the line; some viewers swallow trailing punctuation.
        msg += f" | web: {web_url_val} [web]"

    if error:
        GITHUB_LOGGER.warning(msg, extra=log_extra)
    else:
        GITHUB_LOGGER.info(msg, extra=log_extra)


__all__ = ["_record_github_request"]
