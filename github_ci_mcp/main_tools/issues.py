"""Issue tools.

Tool implementations for the main MCP surface.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from github_ci_mcp.config import get_config
from github_ci_mcp.http_clients import build_url
from github_ci_mcp.response_schemas import ISSUE, ISSUE_COMMENT, ISSUE_LIST, validate_response

from ._main import _main


def _issue_payload(**fields: Any) -> Dict[str, Any]:
    return {k: v for k, v in fields.items() if v is not None}


async def list_issues(
    owner: Optional[str] = None,
    repo: Optional[str] = None,
    state: Optional[Literal["open", "closed", "all"]] = None,
    labels: Optional[List[str]] = None,
    sort: Optional[Literal["created", "updated", "comments"]] = None,
    direction: Optional[Literal["asc", "desc"]] = None,
    since: Optional[str] = None,
    page: Optional[int] = None,
    per_page: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """List issues for a repository (GitHub includes PRs in this listing)."""

    owner, repo = get_config().resolve_owner_and_repo(owner, repo)
    m = _main()

    url = build_url(
        f"/repos/{owner}/{repo}/issues",
        {
            "state": state,
            "labels": ",".join(labels) if labels else None,
            "sort": sort,
            "direction": direction,
            "since": since,
            "page": page,
            "per_page": per_page,
        },
    )
    resp = await m._github_request("GET", url)
    return validate_response(resp.get("json"), ISSUE_LIST, context="list_issues")


async def get_issue(
    issue_number: int,
    owner: Optional[str] = None,
    repo: Optional[str] = None,
) -> Dict[str, Any]:
    """Fetch a GitHub issue."""

    owner, repo = get_config().resolve_owner_and_repo(owner, repo)
    m = _main()
    resp = await m._github_request("GET", f"/repos/{owner}/{repo}/issues/{issue_number}")
    return validate_response(resp.get("json"), ISSUE, context="get_issue")


async def create_issue(
    title: str,
    owner: Optional[str] = None,
    repo: Optional[str] = None,
    body: Optional[str] = None,
    assignees: Optional[List[str]] = None,
    labels: Optional[List[str]] = None,
    milestone: Optional[int] = None,
) -> Dict[str, Any]:
    """Create a GitHub issue."""

    owner, repo = get_config().resolve_owner_and_repo(owner, repo)
    m = _main()

    payload = _issue_payload(
        title=title, body=body, assignees=assignees, labels=labels, milestone=milestone
    )
    resp = await m._github_request("POST", f"/repos/{owner}/{repo}/issues", json_body=payload)
    return validate_response(resp.get("json"), ISSUE, context="create_issue")


async def update_issue(
    issue_number: int,
    owner: Optional[str] = None,
    repo: Optional[str] = None,
    title: Optional[str] = None,
    body: Optional[str] = None,
    state: Optional[Literal["open", "closed"]] = None,
    labels: Optional[List[str]] = None,
    assignees: Optional[List[str]] = None,
    milestone: Optional[int] = None,
) -> Dict[str, Any]:
    """Update fields on an existing GitHub issue; omitted fields are left unchanged."""

    owner, repo = get_config().resolve_owner_and_repo(owner, repo)

    payload = _issue_payload(
        title=title,
        body=body,
        state=state,
        labels=labels,
        assignees=assignees,
        milestone=milestone,
    )
    if not payload:
        raise ValueError("At least one field must be provided to update_issue")

    m = _main()
    resp = await m._github_request(
        "PATCH", f"/repos/{owner}/{repo}/issues/{issue_number}", json_body=payload
    )
    return validate_response(resp.get("json"), ISSUE, context="update_issue")


async def add_issue_comment(
    issue_number: int,
    body: str,
    owner: Optional[str] = None,
    repo: Optional[str] = None,
) -> Dict[str, Any]:
    """Post a comment on an issue (or pull request)."""

    owner, repo = get_config().resolve_owner_and_repo(owner, repo)
    m = _main()
    resp = await m._github_request(
        "POST",
        f"/repos/{owner}/{repo}/issues/{issue_number}/comments",
        json_body={"body": body},
    )
    return validate_response(resp.get("json"), ISSUE_COMMENT, context="add_issue_comment")
