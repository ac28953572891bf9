from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from github_ci_mcp.config import get_config
from github_ci_mcp.http_clients import build_url
from github_ci_mcp.response_schemas import (
    COMBINED_STATUS,
    MERGE_RESULT,
    PULL_REQUEST,
    PULL_REQUEST_FILES,
    PULL_REQUEST_LIST,
    validate_response,
)

from ._main import _main


async def list_pull_requests(
    owner: Optional[str] = None,
    repo: Optional[str] = None,
    state: Optional[Literal["open", "closed", "all"]] = None,
    head: Optional[str] = None,
    base: Optional[str] = None,
    sort: Optional[Literal["created", "updated", "popularity", "long-running"]] = None,
    direction: Optional[Literal["asc", "desc"]] = None,
    per_page: Optional[int] = None,
    page: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """List pull requests for a repository."""

    owner, repo = get_config().resolve_owner_and_repo(owner, repo)
    m = _main()

    url = build_url(
        f"/repos/{owner}/{repo}/pulls",
        {
            "state": state,
            "head": head,
            "base": base,
            "sort": sort,
            "direction": direction,
            "per_page": per_page,
            "page": page,
        },
    )
    resp = await m._github_request("GET", url)
    return validate_response(resp.get("json"), PULL_REQUEST_LIST, context="list_pull_requests")


async def get_pull_request(
    pull_number: int,
    owner: Optional[str] = None,
    repo: Optional[str] = None,
) -> Dict[str, Any]:
    owner, repo = get_config().resolve_owner_and_repo(owner, repo)
    m = _main()
    resp = await m._github_request("GET", f"/repos/{owner}/{repo}/pulls/{pull_number}")
    return validate_response(resp.get("json"), PULL_REQUEST, context="get_pull_request")


async def create_pull_request(
    title: str,
    head: str,
    base: str,
    owner: Optional[str] = None,
    repo: Optional[str] = None,
    body: Optional[str] = None,
    draft: Optional[bool] = None,
    maintainer_can_modify: Optional[bool] = None,
) -> Dict[str, Any]:
    """Open a pull request from ``head`` into ``base``."""

    owner, repo = get_config().resolve_owner_and_repo(owner, repo)
    m = _main()

    payload: Dict[str, Any] = {"title": title, "head": head, "base": base}
    if body is not None:
        payload["body"] = body
    if draft is not None:
        payload["draft"] = draft
    if maintainer_can_modify is not None:
        payload["maintainer_can_modify"] = maintainer_can_modify

    resp = await m._github_request("POST", f"/repos/{owner}/{repo}/pulls", json_body=payload)
    return validate_response(resp.get("json"), PULL_REQUEST, context="create_pull_request")


async def get_pull_request_files(
    pull_number: int,
    owner: Optional[str] = None,
    repo: Optional[str] = None,
) -> List[Dict[str, Any]]:
    owner, repo = get_config().resolve_owner_and_repo(owner, repo)
    m = _main()
    resp = await m._github_request("GET", f"/repos/{owner}/{repo}/pulls/{pull_number}/files")
    return validate_response(resp.get("json"), PULL_REQUEST_FILES, context="get_pull_request_files")


async def get_pull_request_status(
    pull_number: int,
    owner: Optional[str] = None,
    repo: Optional[str] = None,
) -> Dict[str, Any]:
    """Combined commit status for the pull request's head commit."""

    owner, repo = get_config().resolve_owner_and_repo(owner, repo)
    pr = await get_pull_request(pull_number, owner=owner, repo=repo)

    m = _main()
    head_sha = pr["head"]["sha"]
    resp = await m._github_request("GET", f"/repos/{owner}/{repo}/commits/{head_sha}/status")
    return validate_response(resp.get("json"), COMBINED_STATUS, context="get_pull_request_status")


async def merge_pull_request(
    pull_number: int,
    owner: Optional[str] = None,
    repo: Optional[str] = None,
    commit_title: Optional[str] = None,
    commit_message: Optional[str] = None,
    merge_method: Optional[Literal["merge", "squash", "rebase"]] = None,
) -> Dict[str, Any]:
    """Merge a pull request."""

    owner, repo = get_config().resolve_owner_and_repo(owner, repo)
    m = _main()

    payload: Dict[str, Any] = {}
    if commit_title is not None:
        payload["commit_title"] = commit_title
    if commit_message is not None:
        payload["commit_message"] = commit_message
    if merge_method is not None:
        payload["merge_method"] = merge_method

    resp = await m._github_request(
        "PUT", f"/repos/{owner}/{repo}/pulls/{pull_number}/merge", json_body=payload
    )
    return validate_response(resp.get("json"), MERGE_RESULT, context="merge_pull_request")
