from __future__ import annotations

from typing import Any, Dict, Optional

from github_ci_mcp.config import get_config
from github_ci_mcp.http_clients import build_url
from github_ci_mcp.response_schemas import WORKFLOW_RUN, WORKFLOW_RUNS, validate_response

from ._main import _main


def _check_paging(per_page: Optional[int], page: Optional[int]) -> None:
    if per_page is not None and not 1 <= per_page <= 100:
        raise ValueError("per_page must be between 1 and 100")
    if page is not None and page <= 0:
        raise ValueError("page must be > 0")


async def list_runs_at(
    path: str,
    *,
    context: str,
    branch: Optional[str] = None,
    actor: Optional[str] = None,
    event: Optional[str] = None,
    status: Optional[str] = None,
    created: Optional[str] = None,
    exclude_pull_requests: Optional[bool] = None,
    check_suite_id: Optional[int] = None,
    head_sha: Optional[str] = None,
    per_page: Optional[int] = None,
    page: Optional[int] = None,
) -> Dict[str, Any]:
    """GET a workflow-runs collection and validate the body."""

    _check_paging(per_page, page)
    m = _main()

    url = build_url(
        path,
        {
            "branch": branch,
            "actor": actor,
            "event": event,
            "status": status,
            "created": created,
            "exclude_pull_requests": exclude_pull_requests,
            "check_suite_id": check_suite_id,
            "head_sha": head_sha,
            "per_page": per_page,
            "page": page,
        },
    )
    resp = await m._github_request("GET", url)
    return validate_response(resp.get("json"), WORKFLOW_RUNS, context=context)


async def fetch_run_at(path: str, *, context: str) -> Dict[str, Any]:
    m = _main()
    resp = await m._github_request("GET", path)
    return validate_response(resp.get("json"), WORKFLOW_RUN, context=context)


async def fetch_logs_url_at(path: str) -> Dict[str, str]:
    """Resolve the short-lived archive URL GitHub redirects ``path`` to."""

    m = _main()
    location = await m._github_redirect_location(path)
    return {"download_url": location}


async def list_workflow_runs(
    owner: Optional[str] = None,
    repo: Optional[str] = None,
    branch: Optional[str] = None,
    actor: Optional[str] = None,
    event: Optional[str] = None,
    status: Optional[str] = None,
    per_page: Optional[int] = None,
    page: Optional[int] = None,
) -> Dict[str, Any]:
    """List recent GitHub Actions workflow runs with optional filters."""

    owner, repo = get_config().resolve_owner_and_repo(owner, repo)
    return await list_runs_at(
        f"/repos/{owner}/{repo}/actions/runs",
        context="list_workflow_runs",
        branch=branch,
        actor=actor,
        event=event,
        status=status,
        per_page=per_page,
        page=page,
    )


async def get_workflow_run(
    run_id: int,
    owner: Optional[str] = None,
    repo: Optional[str] = None,
) -> Dict[str, Any]:
    """Retrieve a specific workflow run."""

    owner, repo = get_config().resolve_owner_and_repo(owner, repo)
    return await fetch_run_at(
        f"/repos/{owner}/{repo}/actions/runs/{run_id}", context="get_workflow_run"
    )


async def list_workflow_runs_by_workflow_id(
    owner: Optional[str] = None,
    repo: Optional[str] = None,
    workflow_id: Optional[str] = None,
    branch: Optional[str] = None,
    actor: Optional[str] = None,
    event: Optional[str] = None,
    status: Optional[str] = None,
    created: Optional[str] = None,
    exclude_pull_requests: Optional[bool] = None,
    check_suite_id: Optional[int] = None,
    head_sha: Optional[str] = None,
    per_page: Optional[int] = None,
    page: Optional[int] = None,
) -> Dict[str, Any]:
    """List runs of one workflow (numeric id or file name)."""

    config = get_config()
    owner, repo = config.resolve_owner_and_repo(owner, repo)
    workflow_id = config.resolve_workflow_id(workflow_id)
    return await list_runs_at(
        f"/repos/{owner}/{repo}/actions/workflows/{workflow_id}/runs",
        context="list_workflow_runs_by_workflow_id",
        branch=branch,
        actor=actor,
        event=event,
        status=status,
        created=created,
        exclude_pull_requests=exclude_pull_requests,
        check_suite_id=check_suite_id,
        head_sha=head_sha,
        per_page=per_page,
        page=page,
    )


async def get_workflow_run_logs(
    run_id: int,
    owner: Optional[str] = None,
    repo: Optional[str] = None,
) -> Dict[str, str]:
    """Return the download URL for a run's log archive (valid for about a minute)."""

    owner, repo = get_config().resolve_owner_and_repo(owner, repo)
    return await fetch_logs_url_at(f"/repos/{owner}/{repo}/actions/runs/{run_id}/logs")
