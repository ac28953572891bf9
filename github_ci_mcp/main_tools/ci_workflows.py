"""Workflow-run tools pinned to the configured CI repository and workflow.

The repository comes from ``GITHUB_CI_REPO`` and the workflow file from
``GITHUB_CI_WORKFLOW_ID``; callers never pass owner/repo here.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from github_ci_mcp.config import get_config

from .workflows import fetch_logs_url_at, fetch_run_at, list_runs_at


def _ci_repo_path() -> str:
    owner, repo = get_config().ci_owner_and_repo()
    return f"/repos/{owner}/{repo}"


async def list_ci_workflow_runs(
    branch: Optional[str] = None,
    actor: Optional[str] = None,
    event: Optional[str] = None,
    status: Optional[str] = None,
    per_page: Optional[int] = None,
    page: Optional[int] = None,
) -> Dict[str, Any]:
    return await list_runs_at(
        f"{_ci_repo_path()}/actions/runs",
        context="list_ci_workflow_runs",
        branch=branch,
        actor=actor,
        event=event,
        status=status,
        per_page=per_page,
        page=page,
    )


async def get_ci_workflow_run(run_id: int) -> Dict[str, Any]:
    return await fetch_run_at(
        f"{_ci_repo_path()}/actions/runs/{run_id}", context="get_ci_workflow_run"
    )


async def list_ci_workflow_runs_for_branch(
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
    """List runs of the CI workflow, usually filtered to one branch."""

    workflow_id = get_config().ci_workflow_id
    return await list_runs_at(
        f"{_ci_repo_path()}/actions/workflows/{workflow_id}/runs",
        context="list_ci_workflow_runs_for_branch",
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


async def get_ci_workflow_run_logs(run_id: int) -> Dict[str, str]:
    return await fetch_logs_url_at(f"{_ci_repo_path()}/actions/runs/{run_id}/logs")
