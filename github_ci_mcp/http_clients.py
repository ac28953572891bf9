"""Async HTTP client helpers with request logging."""

from __future__ import annotations

import asyncio
import os
import time
import weakref
from typing import Any, Callable, Dict, Mapping, Optional, Tuple
from urllib.parse import urlencode

import httpx

from .config import (
    GITHUB_API_BASE,
    GITHUB_API_VERSION,
    GITHUB_TOKEN_ENV_VARS,
    HTTPX_MAX_CONNECTIONS,
    HTTPX_MAX_KEEPALIVE,
    HTTPX_TIMEOUT,
    MAX_CONCURRENCY,
    USER_AGENT,
)
from .exceptions import GitHubAPIError, GitHubAuthError
from .tool_logging import _record_github_request

_loop_semaphores: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, asyncio.Semaphore]" = (
    weakref.WeakKeyDictionary()
)
_http_client_github: Optional[httpx.AsyncClient] = None
_http_client_github_loop: Optional[asyncio.AbstractEventLoop] = None
_http_client_github_token: Optional[str] = None
_http_client_external: Optional[httpx.AsyncClient] = None
_http_client_external_loop: Optional[asyncio.AbstractEventLoop] = None


# ---------------------------------------------------------------------------
# Token + header helpers
# ---------------------------------------------------------------------------


def _get_optional_github_token() -> Optional[str]:
    """Return a trimmed GitHub token or None when missing/empty.

    Reads the environment on every call so a token rotated at runtime (or set
    by a test) is picked up without reloading the module.
    """

    for env_var in GITHUB_TOKEN_ENV_VARS:
        candidate = os.environ.get(env_var)
        if candidate is not None:
            token = candidate.strip()
            if token:
                return token

    return None


def _github_headers(token: Optional[str] = None) -> Dict[str, str]:
    headers = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": GITHUB_API_VERSION,
        "User-Agent": USER_AGENT,
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def build_url(base_url: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """Append ``params`` to ``base_url`` as a query string.

    ``None`` values are dropped; booleans are encoded as ``true``/``false``.
    """

    if not params:
        return base_url

    cleaned: Dict[str, str] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            cleaned[key] = "true" if value else "false"
        else:
            cleaned[key] = str(value)

    if not cleaned:
        return base_url

    separator = "&" if "?" in base_url else "?"
    return f"{base_url}{separator}{urlencode(cleaned)}"


# ---------------------------------------------------------------------------
# Concurrency helpers
# ---------------------------------------------------------------------------


def _active_event_loop() -> asyncio.AbstractEventLoop:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.get_event_loop()


def _get_concurrency_semaphore() -> asyncio.Semaphore:
    """Return a per-event-loop semaphore to cap concurrent outbound requests.

    Asyncio primitives are bound to the loop that created them, and test
    runners create a fresh loop per test, so the semaphore is cached per loop.
    """

    loop = _active_event_loop()
    semaphore = _loop_semaphores.get(loop)
    if semaphore is None:
        semaphore = asyncio.Semaphore(MAX_CONCURRENCY)
        _loop_semaphores[loop] = semaphore
    return semaphore


def _refresh_async_client(
    client: Optional[httpx.AsyncClient],
    *,
    client_loop: Optional[asyncio.AbstractEventLoop],
    rebuild: Callable[[], httpx.AsyncClient],
    force_refresh: bool = False,
) -> Tuple[httpx.AsyncClient, asyncio.AbstractEventLoop]:
    """Return a loop-safe AsyncClient, rebuilding if necessary."""

    loop = _active_event_loop()

    needs_refresh = force_refresh or client is None or client.is_closed
    if not needs_refresh and client_loop is not None and client_loop is not loop:
        needs_refresh = True

    if not needs_refresh:
        return client, client_loop or loop

    if client is not None and not client.is_closed:
        if client_loop is not None and not client_loop.is_closed():
            client_loop.create_task(client.aclose())

    return rebuild(), loop


# ---------------------------------------------------------------------------
# Client factories
# ---------------------------------------------------------------------------


def _github_client_instance() -> httpx.AsyncClient:
    """Singleton async client for GitHub API requests."""

    global _http_client_github, _http_client_github_loop, _http_client_github_token

    current_token = _get_optional_github_token()
    token_changed = current_token != _http_client_github_token

    def _build_client() -> httpx.AsyncClient:
        http_limits = httpx.Limits(
            max_connections=HTTPX_MAX_CONNECTIONS,
            max_keepalive_connections=HTTPX_MAX_KEEPALIVE,
        )
        return httpx.AsyncClient(
            base_url=GITHUB_API_BASE,
            timeout=HTTPX_TIMEOUT,
            limits=http_limits,
            headers=_github_headers(current_token),
        )

    _http_client_github, _http_client_github_loop = _refresh_async_client(
        _http_client_github,
        client_loop=_http_client_github_loop,
        rebuild=_build_client,
        force_refresh=token_changed,
    )
    _http_client_github_token = current_token
    return _http_client_github


def _external_client_instance() -> httpx.AsyncClient:
    """Singleton async client for non-GitHub downloads (log archives)."""

    global _http_client_external, _http_client_external_loop

    def _build_client() -> httpx.AsyncClient:
        http_limits = httpx.Limits(
            max_connections=HTTPX_MAX_CONNECTIONS,
            max_keepalive_connections=HTTPX_MAX_KEEPALIVE,
        )
        return httpx.AsyncClient(
            timeout=HTTPX_TIMEOUT,
            limits=http_limits,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        )

    _http_client_external, _http_client_external_loop = _refresh_async_client(
        _http_client_external,
        client_loop=_http_client_external_loop,
        rebuild=_build_client,
    )
    return _http_client_external


# ---------------------------------------------------------------------------
# Request helpers
# ---------------------------------------------------------------------------


def _github_api_url_for_logs(path: str, params: Optional[Dict[str, Any]] = None) -> str:
    """Build an absolute GitHub API URL for logging."""

    if path.startswith(("http://", "https://")):
        url = path
    else:
        base = (GITHUB_API_BASE or "https://api.github.com").rstrip("/")
        normalized = path if path.startswith("/") else f"/{path}"
        url = f"{base}{normalized}"
    return build_url(url, params)


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return ""
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return body["message"]
    return ""


async def _github_request(
    method: str,
    path: str,
    *,
    params: Optional[Dict[str, Any]] = None,
    json_body: Optional[Any] = None,
    headers: Optional[Dict[str, str]] = None,
    expect_json: bool = True,
    client_factory: Optional[Callable[[], httpx.AsyncClient]] = None,
) -> Dict[str, Any]:
    """Async GitHub request wrapper with typed errors and request logging.

    Returns ``{"status_code", "headers", "text", "json"}``; ``json`` is only
    present when ``expect_json`` is true. Any non-2xx status raises.
    """

    client_factory = client_factory or _github_client_instance
    api_url_for_logs = _github_api_url_for_logs(path, params=params)
    cleaned_params = {k: v for k, v in (params or {}).items() if v is not None} or None

    start = time.time()
    client = client_factory()
    try:
        async with _get_concurrency_semaphore():
            resp = await client.request(
                method, path, params=cleaned_params, json=json_body, headers=headers
            )
    except httpx.HTTPError as exc:
        _record_github_request(
            method=method,
            url=api_url_for_logs,
            status_code=None,
            duration_ms=int((time.time() - start) * 1000),
            error=True,
            exc=exc,
        )
        raise GitHubAPIError(f"GitHub request failed: {exc}") from exc

    error_flag = resp.status_code >= 400
    _record_github_request(
        method=method,
        url=api_url_for_logs,
        status_code=resp.status_code,
        duration_ms=int((time.time() - start) * 1000),
        error=error_flag,
        resp=resp,
    )

    if resp.status_code in (401, 403):
        message = _error_message(resp) or "Authentication failed"
        raise GitHubAuthError(
            f"GitHub authentication failed: {resp.status_code} {message}",
            status_code=resp.status_code,
            body=resp.text,
        )

    if error_flag:
        raise GitHubAPIError(
            f"GitHub API error {resp.status_code}: {resp.text[:200]}",
            status_code=resp.status_code,
            body=resp.text,
        )

    result: Dict[str, Any] = {
        "status_code": resp.status_code,
        "headers": dict(resp.headers),
        "text": resp.text,
    }
    if expect_json:
        result["json"] = resp.json() if resp.content else None
    return result


async def _github_redirect_location(
    path: str,
    *,
    expected_status: int = 302,
    client_factory: Optional[Callable[[], httpx.AsyncClient]] = None,
) -> str:
    """Issue a GET without following redirects and return the ``Location`` header.

    GitHub answers log-archive requests with a redirect to a short-lived
    download URL instead of a JSON body.
    """

    client_factory = client_factory or _github_client_instance
    client = client_factory()
    request = client.build_request("GET", path)

    api_url_for_logs = _github_api_url_for_logs(path)

    start = time.time()
    try:
        async with _get_concurrency_semaphore():
            resp = await client.send(request, follow_redirects=False)
    except httpx.HTTPError as exc:
        _record_github_request(
            method="GET",
            url=api_url_for_logs,
            status_code=None,
            duration_ms=int((time.time() - start) * 1000),
            error=True,
            exc=exc,
        )
        raise GitHubAPIError(f"GitHub request failed: {exc}") from exc

    _record_github_request(
        method="GET",
        url=api_url_for_logs,
        status_code=resp.status_code,
        duration_ms=int((time.time() - start) * 1000),
        error=resp.status_code != expected_status,
        resp=resp,
    )

    if resp.status_code != expected_status:
        raise GitHubAPIError(
            f"Failed to get logs download URL: {resp.status_code} {resp.reason_phrase}\n{resp.text}",
            status_code=resp.status_code,
            body=resp.text,
        )

    location = resp.headers.get("location")
    if not location:
        raise GitHubAPIError(
            "No download URL found in the response headers",
            status_code=resp.status_code,
        )
    return location


__all__ = [
    "_external_client_instance",
    "_get_concurrency_semaphore",
    "_get_optional_github_token",
    "_github_client_instance",
    "_github_headers",
    "_github_redirect_location",
    "_github_request",
    "build_url",
]
