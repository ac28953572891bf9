"""GitHub search API tools (code, issues/PRs, users)."""

from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from github_ci_mcp.http_clients import build_url
from github_ci_mcp.response_schemas import CODE_SEARCH, ISSUE_SEARCH, USER_SEARCH, validate_response

from ._main import _main


async def _search(
    kind: str,
    schema: Dict[str, Any],
    *,
    q: str,
    sort: Optional[str],
    order: Optional[str],
    per_page: Optional[int],
    page: Optional[int],
) -> Dict[str, Any]:
    if not q.strip():
        raise ValueError("q must be a non-empty search query")

    m = _main()
    url = build_url(
        f"/search/{kind}",
        {"q": q, "sort": sort, "order": order, "per_page": per_page, "page": page},
    )
    resp = await m._github_request("GET", url)
    return validate_response(resp.get("json"), schema, context=f"search_{kind}")


async def search_code(
    q: str,
    order: Optional[Literal["asc", "desc"]] = None,
    per_page: Optional[int] = None,
    page: Optional[int] = None,
) -> Dict[str, Any]:
    return await _search(
        "code", CODE_SEARCH, q=q, sort=None, order=order, per_page=per_page, page=page
    )


async def search_issues(
    q: str,
    sort: Optional[
        Literal[
            "comments",
            "reactions",
            "reactions-+1",
            "reactions--1",
            "reactions-smile",
            "reactions-thinking_face",
            "reactions-heart",
            "reactions-tada",
            "interactions",
            "created",
            "updated",
        ]
    ] = None,
    order: Optional[Literal["asc", "desc"]] = None,
    per_page: Optional[int] = None,
    page: Optional[int] = None,
) -> Dict[str, Any]:
    return await _search(
        "issues", ISSUE_SEARCH, q=q, sort=sort, order=order, per_page=per_page, page=page
    )


async def search_users(
    q: str,
    sort: Optional[Literal["followers", "repositories", "joined"]] = None,
    order: Optional[Literal["asc", "desc"]] = None,
    per_page: Optional[int] = None,
    page: Optional[int] = None,
) -> Dict[str, Any]:
    return await _search(
        "users", USER_SEARCH, q=q, sort=sort, order=order, per_page=per_page, page=page
    )
