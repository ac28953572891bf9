from __future__ import annotations

import base64
from typing import Any, Dict, List, Optional, Union
from urllib.parse import quote

from github_ci_mcp.config import get_config
from github_ci_mcp.exceptions import GitHubAPIError
from github_ci_mcp.http_clients import build_url
from github_ci_mcp.response_schemas import (
    COMMIT_LIST,
    FILE_CONTENTS,
    FILE_UPDATE,
    GIT_REFERENCE,
    REPOSITORY,
    REPOSITORY_SEARCH,
    validate_response,
)

from ._main import _main


def _contents_path(owner: str, repo: str, path: str) -> str:
    return f"/repos/{owner}/{repo}/contents/{quote(path.lstrip('/'), safe='/')}"


def _decode_file_content(entry: Dict[str, Any]) -> Dict[str, Any]:
    if entry.get("encoding") != "base64" or not isinstance(entry.get("content"), str):
        return entry
    decoded = base64.b64decode(entry["content"]).decode("utf-8", errors="replace")
    return {**entry, "content": decoded, "encoding": "utf-8"}


async def search_repositories(
    query: str,
    page: Optional[int] = None,
    per_page: Optional[int] = None,
) -> Dict[str, Any]:
    """Search GitHub repositories."""

    m = _main()
    url = build_url("/search/repositories", {"q": query, "page": page, "per_page": per_page})
    resp = await m._github_request("GET", url)
    return validate_response(resp.get("json"), REPOSITORY_SEARCH, context="search_repositories")


async def create_repository(
    name: str,
    description: Optional[str] = None,
    private: Optional[bool] = None,
    auto_init: Optional[bool] = None,
) -> Dict[str, Any]:
    """Create a repository owned by the authenticated user."""

    m = _main()
    payload: Dict[str, Any] = {"name": name}
    if description is not None:
        payload["description"] = description
    if private is not None:
        payload["private"] = private
    if auto_init is not None:
        payload["auto_init"] = auto_init

    resp = await m._github_request("POST", "/user/repos", json_body=payload)
    return validate_response(resp.get("json"), REPOSITORY, context="create_repository")


async def get_file_contents(
    path: str,
    owner: Optional[str] = None,
    repo: Optional[str] = None,
    branch: Optional[str] = None,
) -> Union[Dict[str, Any], List[Dict[str, Any]]]:
    """Return a file (content decoded to text) or a directory listing."""

    owner, repo = get_config().resolve_owner_and_repo(owner, repo)
    m = _main()

    url = build_url(_contents_path(owner, repo, path), {"ref": branch})
    resp = await m._github_request("GET", url)
    body = validate_response(resp.get("json"), FILE_CONTENTS, context="get_file_contents")

    if isinstance(body, list):
        return body
    return _decode_file_content(body)


async def _existing_file_sha(owner: str, repo: str, path: str, branch: str) -> Optional[str]:
    m = _main()
    url = build_url(_contents_path(owner, repo, path), {"ref": branch})
    try:
        resp = await m._github_request("GET", url)
    except GitHubAPIError as exc:
        if exc.status_code == 404:
            return None
        raise
    body = resp.get("json")
    if isinstance(body, dict) and isinstance(body.get("sha"), str):
        return body["sha"]
    return None


async def create_or_update_file(
    path: str,
    content: str,
    message: str,
    branch: str,
    owner: Optional[str] = None,
    repo: Optional[str] = None,
    sha: Optional[str] = None,
) -> Dict[str, Any]:
    """Create or replace a single file with a commit on ``branch``.

    When ``sha`` is omitted the current blob sha is looked up so existing
    files can be overwritten without a separate read.
    """

    owner, repo = get_config().resolve_owner_and_repo(owner, repo)
    m = _main()

    if sha is None:
        sha = await _existing_file_sha(owner, repo, path, branch)

    payload: Dict[str, Any] = {
        "message": message,
        "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
        "branch": branch,
    }
    if sha:
        payload["sha"] = sha

    resp = await m._github_request("PUT", _contents_path(owner, repo, path), json_body=payload)
    return validate_response(resp.get("json"), FILE_UPDATE, context="create_or_update_file")


async def fork_repository(
    owner: Optional[str] = None,
    repo: Optional[str] = None,
    organization: Optional[str] = None,
) -> Dict[str, Any]:
    owner, repo = get_config().resolve_owner_and_repo(owner, repo)
    m = _main()

    url = build_url(f"/repos/{owner}/{repo}/forks", {"organization": organization})
    resp = await m._github_request("POST", url)
    return validate_response(resp.get("json"), REPOSITORY, context="fork_repository")


async def _default_branch(owner: str, repo: str) -> str:
    m = _main()
    resp = await m._github_request("GET", f"/repos/{owner}/{repo}")
    body = validate_response(resp.get("json"), REPOSITORY, context="get_repository")
    return body.get("default_branch") or "main"


async def create_branch(
    branch: str,
    owner: Optional[str] = None,
    repo: Optional[str] = None,
    from_branch: Optional[str] = None,
) -> Dict[str, Any]:
    """Create ``branch`` from ``from_branch`` (the default branch when omitted)."""

    owner, repo = get_config().resolve_owner_and_repo(owner, repo)
    m = _main()

    source = from_branch or await _default_branch(owner, repo)
    ref_resp = await m._github_request(
        "GET", f"/repos/{owner}/{repo}/git/refs/heads/{quote(source, safe='/')}"
    )
    source_ref = validate_response(ref_resp.get("json"), GIT_REFERENCE, context="create_branch")

    resp = await m._github_request(
        "POST",
        f"/repos/{owner}/{repo}/git/refs",
        json_body={"ref": f"refs/heads/{branch}", "sha": source_ref["object"]["sha"]},
    )
    return validate_response(resp.get("json"), GIT_REFERENCE, context="create_branch")


async def list_commits(
    owner: Optional[str] = None,
    repo: Optional[str] = None,
    sha: Optional[str] = None,
    page: Optional[int] = None,
    per_page: Optional[int] = None,
) -> List[Dict[str, Any]]:
    owner, repo = get_config().resolve_owner_and_repo(owner, repo)
    m = _main()

    url = build_url(
        f"/repos/{owner}/{repo}/commits", {"sha": sha, "page": page, "per_page": per_page}
    )
    resp = await m._github_request("GET", url)
    return validate_response(resp.get("json"), COMMIT_LIST, context="list_commits")
