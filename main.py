"""GitHub CI MCP server exposing repository, workflow and log-analysis tools.

This module is the entry point for the MCP server. It lists the tools, their
arguments, and behaviors in a single place so an assistant can decide how to
interact with the server. Tool bodies live under ``github_ci_mcp.main_tools``
and reach back into this module (``_main()``) for ``_github_request`` so tests
can monkeypatch a single symbol.
"""

import json
from urllib.parse import parse_qs
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import Field

import github_ci_mcp.server as server  # noqa: F401
from github_ci_mcp.config import (
    BASE_LOGGER,
    GITHUB_API_BASE,  # noqa: F401
    HTTPX_MAX_CONNECTIONS,  # noqa: F401
    HTTPX_MAX_KEEPALIVE,  # noqa: F401
    HTTPX_TIMEOUT,  # noqa: F401
    MAX_CONCURRENCY,  # noqa: F401
)
from github_ci_mcp.exceptions import (  # noqa: F401
    ArchiveExtractionError,
    ConfigurationError,
    DownloadError,
    GitHubAPIError,
    GitHubAuthError,
    ResponseValidationError,
)
from github_ci_mcp.http_clients import (  # noqa: F401
    _external_client_instance,
    _github_client_instance,
)
from github_ci_mcp.mcp_server.context import REQUEST_MESSAGE_ID, REQUEST_PATH, REQUEST_SESSION_ID
from github_ci_mcp.server import (  # noqa: F401
    _REGISTERED_MCP_TOOLS,
    _find_registered_tool,
    _github_redirect_location,
    _github_request,
    _structured_tool_error,
    mcp_tool,
)
from github_ci_mcp.http_routes.healthz import register_healthz_route

WorkflowRunStatus = Literal[
    "completed",
    "action_required",
    "cancelled",
    "failure",
    "neutral",
    "skipped",
    "stale",
    "success",
    "timed_out",
    "in_progress",
    "queued",
    "requested",
    "waiting",
    "pending",
]


class _RequestContextMiddleware:
    """ASGI middleware that extracts stable identifiers for logging.

    For POST /messages, we capture:
      - `session_id` from the query string
      - MCP JSON-RPC `id` from the request body

    We avoid BaseHTTPMiddleware to preserve streaming semantics.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope.get("type") != "http":
            return await self.app(scope, receive, send)

        path = scope.get("path", "") or ""

        # Reset context for this request.
        REQUEST_PATH.set(path)
        REQUEST_SESSION_ID.set(None)
        REQUEST_MESSAGE_ID.set(None)

        raw_qs = (scope.get("query_string") or b"").decode("utf-8", errors="ignore")
        session_id = (parse_qs(raw_qs).get("session_id") or [None])[0]
        if session_id:
            REQUEST_SESSION_ID.set(str(session_id))

        if not (path.endswith("/messages") or path.endswith("/messages/")) or scope.get("method") != "POST":
            return await self.app(scope, receive, send)

        body_chunks: list[bytes] = []
        more_body = True
        while more_body:
            msg = await receive()
            if msg.get("type") != "http.request":
                # Disconnects are forwarded untouched.
                return await self.app(scope, receive, send)
            body_chunks.append(msg.get("body", b"") or b"")
            more_body = bool(msg.get("more_body"))

        body = b"".join(body_chunks)
        try:
            payload = json.loads(body.decode("utf-8", errors="replace")) if body else None
        except ValueError:
            payload = None
        if isinstance(payload, dict) and payload.get("id") is not None:
            REQUEST_MESSAGE_ID.set(str(payload["id"]))

        # Replay the drained body to downstream consumers.
        replayed = False

        async def receive_replay():
            nonlocal replayed
            if replayed:
                return await receive()
            replayed = True
            return {"type": "http.request", "body": body, "more_body": False}

        return await self.app(scope, receive_replay, send)


# Re-exported symbols used by helper modules and tests that import `main`.
__all__ = [
    "ArchiveExtractionError",
    "ConfigurationError",
    "DownloadError",
    "GitHubAPIError",
    "GitHubAuthError",
    "ResponseValidationError",
    "_github_redirect_location",
    "_github_request",
    "app",
]

LOGGER = BASE_LOGGER.getChild("main")


# ---------------------------------------------------------------------------
# Shared parameter types
# ---------------------------------------------------------------------------

Owner = Annotated[
    Optional[str],
    Field(description="Repository owner (username or organization). If not provided, uses GITHUB_OWNER env var."),
]
Repo = Annotated[
    Optional[str],
    Field(description="Repository name. If not provided, uses GITHUB_REPO env var."),
]
Page = Annotated[Optional[int], Field(description="Page number of the results")]
PerPage = Annotated[Optional[int], Field(description="Results per page (max 100)")]
Order = Annotated[Optional[Literal["asc", "desc"]], Field(description="Sort direction of the results")]
RunId = Annotated[int, Field(description="The ID of the workflow run")]
IssueNumber = Annotated[int, Field(description="Issue (or pull request) number")]
PullNumber = Annotated[int, Field(description="Pull request number")]
Branch = Annotated[Optional[str], Field(description="Filter by branch name")]
Actor = Annotated[Optional[str], Field(description="Filter by GitHub username who triggered the workflow")]
Event = Annotated[
    Optional[str],
    Field(description="Filter by event type that triggered the workflow (e.g., push, pull_request)"),
]
RunStatus = Annotated[Optional[WorkflowRunStatus], Field(description="Filter by workflow status")]
Created = Annotated[Optional[str], Field(description="Date range filter (e.g., '>=2020-01-01')")]
ExcludePullRequests = Annotated[
    Optional[bool],
    Field(description="If true, excludes workflow runs triggered by pull requests"),
]
CheckSuiteId = Annotated[Optional[int], Field(description="Filter by check suite ID")]
HeadSha = Annotated[Optional[str], Field(description="Only returns workflow runs associated with this SHA")]


# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------


@mcp_tool(tags=["repositories"])
async def search_repositories(
    query: Annotated[str, Field(description="Search query (see GitHub search syntax)")],
    page: Page = None,
    per_page: PerPage = None,
) -> Dict[str, Any]:
    """Search for GitHub repositories using GitHub search syntax."""
    from github_ci_mcp.main_tools.repositories import search_repositories as _impl
    return await _impl(query=query, page=page, per_page=per_page)


@mcp_tool(tags=["repositories"])
async def create_repository(
    name: Annotated[str, Field(description="Repository name")],
    description: Annotated[Optional[str], Field(description="Repository description")] = None,
    private: Annotated[Optional[bool], Field(description="Whether the repository should be private")] = None,
    auto_init: Annotated[Optional[bool], Field(description="Initialize the repository with a README")] = None,
) -> Dict[str, Any]:
    """Create a new repository in the authenticated user's account."""
    from github_ci_mcp.main_tools.repositories import create_repository as _impl
    return await _impl(name=name, description=description, private=private, auto_init=auto_init)


@mcp_tool(tags=["repositories"])
async def get_file_contents(
    path: Annotated[str, Field(description="Path to the file or directory")],
    owner: Owner = None,
    repo: Repo = None,
    branch: Annotated[Optional[str], Field(description="Branch to read from; the default branch when omitted")] = None,
) -> Union[Dict[str, Any], List[Dict[str, Any]]]:
    """Get a file (decoded to text) or a directory listing. owner/repo default to GITHUB_OWNER/GITHUB_REPO."""
    from github_ci_mcp.main_tools.repositories import get_file_contents as _impl
    return await _impl(path=path, owner=owner, repo=repo, branch=branch)


@mcp_tool(tags=["repositories"])
async def create_or_update_file(
    path: Annotated[str, Field(description="Path where to create or update the file")],
    content: Annotated[str, Field(description="Content of the file")],
    message: Annotated[str, Field(description="Commit message")],
    branch: Annotated[str, Field(description="Branch to commit to")],
    owner: Owner = None,
    repo: Repo = None,
    sha: Annotated[
        Optional[str],
        Field(description="Blob SHA of the file being replaced; looked up when omitted"),
    ] = None,
) -> Dict[str, Any]:
    """Create or update a single file with a commit on the given branch."""
    from github_ci_mcp.main_tools.repositories import create_or_update_file as _impl
    return await _impl(
        path=path, content=content, message=message, branch=branch, owner=owner, repo=repo, sha=sha
    )


@mcp_tool(tags=["repositories"])
async def fork_repository(
    owner: Owner = None,
    repo: Repo = None,
    organization: Annotated[
        Optional[str],
        Field(description="Organization to fork into; your account when omitted"),
    ] = None,
) -> Dict[str, Any]:
    """Fork a repository into your account or the given organization."""
    from github_ci_mcp.main_tools.repositories import fork_repository as _impl
    return await _impl(owner=owner, repo=repo, organization=organization)


@mcp_tool(tags=["repositories"])
async def create_branch(
    branch: Annotated[str, Field(description="Name for the new branch")],
    owner: Owner = None,
    repo: Repo = None,
    from_branch: Annotated[
        Optional[str],
        Field(description="Source branch to create from; the repository default branch when omitted"),
    ] = None,
) -> Dict[str, Any]:
    """Create a branch from from_branch, or from the default branch when omitted."""
    from github_ci_mcp.main_tools.repositories import create_branch as _impl
    return await _impl(branch=branch, owner=owner, repo=repo, from_branch=from_branch)


@mcp_tool(tags=["repositories"])
async def list_commits(
    owner: Owner = None,
    repo: Repo = None,
    sha: Annotated[Optional[str], Field(description="Branch name or commit SHA to start listing from")] = None,
    page: Page = None,
    per_page: PerPage = None,
) -> List[Dict[str, Any]]:
    """List commits on a branch or starting at a sha."""
    from github_ci_mcp.main_tools.repositories import list_commits as _impl
    return await _impl(owner=owner, repo=repo, sha=sha, page=page, per_page=per_page)


# ---------------------------------------------------------------------------
# Issues
# ---------------------------------------------------------------------------


@mcp_tool(tags=["issues"])
async def list_issues(
    owner: Owner = None,
    repo: Repo = None,
    state: Annotated[Optional[Literal["open", "closed", "all"]], Field(description="Filter by issue state")] = None,
    labels: Annotated[Optional[List[str]], Field(description="Only issues carrying all of these labels")] = None,
    sort: Annotated[
        Optional[Literal["created", "updated", "comments"]],
        Field(description="What to sort results by"),
    ] = None,
    direction: Order = None,
    since: Annotated[
        Optional[str],
        Field(description="Only issues updated at or after this ISO 8601 timestamp"),
    ] = None,
    page: Page = None,
    per_page: PerPage = None,
) -> List[Dict[str, Any]]:
    """List issues in a repository with optional filters."""
    from github_ci_mcp.main_tools.issues import list_issues as _impl
    return await _impl(
        owner=owner,
        repo=repo,
        state=state,
        labels=labels,
        sort=sort,
        direction=direction,
        since=since,
        page=page,
        per_page=per_page,
    )


@mcp_tool(tags=["issues"])
async def get_issue(
    issue_number: IssueNumber,
    owner: Owner = None,
    repo: Repo = None,
) -> Dict[str, Any]:
    """Get one issue by number."""
    from github_ci_mcp.main_tools.issues import get_issue as _impl
    return await _impl(issue_number=issue_number, owner=owner, repo=repo)


@mcp_tool(tags=["issues"])
async def create_issue(
    title: Annotated[str, Field(description="Issue title")],
    owner: Owner = None,
    repo: Repo = None,
    body: Annotated[Optional[str], Field(description="Issue body (Markdown)")] = None,
    assignees: Annotated[Optional[List[str]], Field(description="Usernames to assign")] = None,
    labels: Annotated[Optional[List[str]], Field(description="Labels to apply")] = None,
    milestone: Annotated[Optional[int], Field(description="Milestone number to attach")] = None,
) -> Dict[str, Any]:
    """Open a new issue; unset fields are left out of the request."""
    from github_ci_mcp.main_tools.issues import create_issue as _impl
    return await _impl(
        title=title,
        owner=owner,
        repo=repo,
        body=body,
        assignees=assignees,
        labels=labels,
        milestone=milestone,
    )


@mcp_tool(tags=["issues"])
async def update_issue(
    issue_number: IssueNumber,
    owner: Owner = None,
    repo: Repo = None,
    title: Annotated[Optional[str], Field(description="New title")] = None,
    body: Annotated[Optional[str], Field(description="New body")] = None,
    state: Annotated[Optional[Literal["open", "closed"]], Field(description="New state")] = None,
    labels: Annotated[Optional[List[str]], Field(description="Replacement label list")] = None,
    assignees: Annotated[Optional[List[str]], Field(description="Replacement assignee list")] = None,
    milestone: Annotated[Optional[int], Field(description="Milestone number")] = None,
) -> Dict[str, Any]:
    """Update an existing issue; omitted fields are left unchanged."""
    from github_ci_mcp.main_tools.issues import update_issue as _impl
    return await _impl(
        issue_number=issue_number,
        owner=owner,
        repo=repo,
        title=title,
        body=body,
        state=state,
        labels=labels,
        assignees=assignees,
        milestone=milestone,
    )


@mcp_tool(tags=["issues"])
async def add_issue_comment(
    issue_number: IssueNumber,
    body: Annotated[str, Field(description="Comment text (Markdown)")],
    owner: Owner = None,
    repo: Repo = None,
) -> Dict[str, Any]:
    """Add a comment to an issue or pull request."""
    from github_ci_mcp.main_tools.issues import add_issue_comment as _impl
    return await _impl(issue_number=issue_number, body=body, owner=owner, repo=repo)


# ---------------------------------------------------------------------------
# Pull requests
# ---------------------------------------------------------------------------


@mcp_tool(tags=["pull_requests"])
async def list_pull_requests(
    owner: Owner = None,
    repo: Repo = None,
    state: Annotated[
        Optional[Literal["open", "closed", "all"]],
        Field(description="Filter by pull request state"),
    ] = None,
    head: Annotated[
        Optional[str],
        Field(description="Filter by head user or organization and branch, as user:ref-name"),
    ] = None,
    base: Annotated[Optional[str], Field(description="Filter by base branch name")] = None,
    sort: Annotated[
        Optional[Literal["created", "updated", "popularity", "long-running"]],
        Field(description="What to sort results by"),
    ] = None,
    direction: Order = None,
    per_page: PerPage = None,
    page: Page = None,
) -> List[Dict[str, Any]]:
    """List pull requests in a repository with optional filters."""
    from github_ci_mcp.main_tools.pull_requests import list_pull_requests as _impl
    return await _impl(
        owner=owner,
        repo=repo,
        state=state,
        head=head,
        base=base,
        sort=sort,
        direction=direction,
        per_page=per_page,
        page=page,
    )


@mcp_tool(tags=["pull_requests"])
async def get_pull_request(
    pull_number: PullNumber,
    owner: Owner = None,
    repo: Repo = None,
) -> Dict[str, Any]:
    """Get one pull request by number."""
    from github_ci_mcp.main_tools.pull_requests import get_pull_request as _impl
    return await _impl(pull_number=pull_number, owner=owner, repo=repo)


@mcp_tool(tags=["pull_requests"])
async def create_pull_request(
    title: Annotated[str, Field(description="Pull request title")],
    head: Annotated[str, Field(description="Branch containing the changes")],
    base: Annotated[str, Field(description="Branch to merge the changes into")],
    owner: Owner = None,
    repo: Repo = None,
    body: Annotated[Optional[str], Field(description="Pull request description")] = None,
    draft: Annotated[Optional[bool], Field(description="Open as a draft pull request")] = None,
    maintainer_can_modify: Annotated[
        Optional[bool],
        Field(description="Allow maintainers to push to the head branch"),
    ] = None,
) -> Dict[str, Any]:
    """Open a pull request from head into base."""
    from github_ci_mcp.main_tools.pull_requests import create_pull_request as _impl
    return await _impl(
        title=title,
        head=head,
        base=base,
        owner=owner,
        repo=repo,
        body=body,
        draft=draft,
        maintainer_can_modify=maintainer_can_modify,
    )


@mcp_tool(tags=["pull_requests"])
async def get_pull_request_files(
    pull_number: PullNumber,
    owner: Owner = None,
    repo: Repo = None,
) -> List[Dict[str, Any]]:
    """List the files changed by a pull request."""
    from github_ci_mcp.main_tools.pull_requests import get_pull_request_files as _impl
    return await _impl(pull_number=pull_number, owner=owner, repo=repo)


@mcp_tool(tags=["pull_requests"])
async def get_pull_request_status(
    pull_number: PullNumber,
    owner: Owner = None,
    repo: Repo = None,
) -> Dict[str, Any]:
    """Combined status checks for the head commit of a pull request."""
    from github_ci_mcp.main_tools.pull_requests import get_pull_request_status as _impl
    return await _impl(pull_number=pull_number, owner=owner, repo=repo)


@mcp_tool(tags=["pull_requests"])
async def merge_pull_request(
    pull_number: PullNumber,
    owner: Owner = None,
    repo: Repo = None,
    commit_title: Annotated[Optional[str], Field(description="Title for the merge commit")] = None,
    commit_message: Annotated[Optional[str], Field(description="Extra detail for the merge commit")] = None,
    merge_method: Annotated[
        Optional[Literal["merge", "squash", "rebase"]],
        Field(description="Merge method to use"),
    ] = None,
) -> Dict[str, Any]:
    """Merge a pull request."""
    from github_ci_mcp.main_tools.pull_requests import merge_pull_request as _impl
    return await _impl(
        pull_number=pull_number,
        owner=owner,
        repo=repo,
        commit_title=commit_title,
        commit_message=commit_message,
        merge_method=merge_method,
    )


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------

SearchQuery = Annotated[str, Field(description="Search query (see GitHub search syntax)")]


@mcp_tool(tags=["search"])
async def search_code(
    q: SearchQuery,
    order: Order = None,
    per_page: PerPage = None,
    page: Page = None,
) -> Dict[str, Any]:
    """Search for code across GitHub repositories."""
    from github_ci_mcp.main_tools.search import search_code as _impl
    return await _impl(q=q, order=order, per_page=per_page, page=page)


@mcp_tool(tags=["search"])
async def search_issues(
    q: SearchQuery,
    sort: Annotated[
        Optional[str],
        Field(description="Sort field, e.g. comments, reactions, created or updated"),
    ] = None,
    order: Order = None,
    per_page: PerPage = None,
    page: Page = None,
) -> Dict[str, Any]:
    """Search issues and pull requests across GitHub repositories."""
    from github_ci_mcp.main_tools.search import search_issues as _impl
    return await _impl(q=q, sort=sort, order=order, per_page=per_page, page=page)


@mcp_tool(tags=["search"])
async def search_users(
    q: SearchQuery,
    sort: Annotated[
        Optional[Literal["followers", "repositories", "joined"]],
        Field(description="What to sort results by"),
    ] = None,
    order: Order = None,
    per_page: PerPage = None,
    page: Page = None,
) -> Dict[str, Any]:
    """Search for users on GitHub."""
    from github_ci_mcp.main_tools.search import search_users as _impl
    return await _impl(q=q, sort=sort, order=order, per_page=per_page, page=page)


# ---------------------------------------------------------------------------
# Workflow runs
# ---------------------------------------------------------------------------


@mcp_tool(tags=["workflows"])
async def list_workflow_runs(
    owner: Owner = None,
    repo: Repo = None,
    branch: Branch = None,
    actor: Actor = None,
    event: Event = None,
    status: RunStatus = None,
    per_page: PerPage = None,
    page: Page = None,
) -> Dict[str, Any]:
    """List workflow runs for a repository. owner/repo default to GITHUB_OWNER/GITHUB_REPO."""
    from github_ci_mcp.main_tools.workflows import list_workflow_runs as _impl
    return await _impl(
        owner=owner,
        repo=repo,
        branch=branch,
        actor=actor,
        event=event,
        status=status,
        per_page=per_page,
        page=page,
    )


@mcp_tool(tags=["workflows"])
async def get_workflow_run(
    run_id: RunId,
    owner: Owner = None,
    repo: Repo = None,
) -> Dict[str, Any]:
    """Get details about a specific workflow run."""
    from github_ci_mcp.main_tools.workflows import get_workflow_run as _impl
    return await _impl(run_id=run_id, owner=owner, repo=repo)


@mcp_tool(tags=["workflows"])
async def list_workflow_runs_by_workflow_id(
    owner: Owner = None,
    repo: Repo = None,
    workflow_id: Annotated[
        Optional[str],
        Field(description="The ID of the workflow or filename. If not provided, uses GITHUB_WORKFLOW_ID env var."),
    ] = None,
    branch: Branch = None,
    actor: Actor = None,
    event: Event = None,
    status: RunStatus = None,
    created: Created = None,
    exclude_pull_requests: ExcludePullRequests = None,
    check_suite_id: CheckSuiteId = None,
    head_sha: HeadSha = None,
    per_page: PerPage = None,
    page: Page = None,
) -> Dict[str, Any]:
    """List runs of one workflow (id or file name, defaults to GITHUB_WORKFLOW_ID)."""
    from github_ci_mcp.main_tools.workflows import list_workflow_runs_by_workflow_id as _impl
    return await _impl(
        owner=owner,
        repo=repo,
        workflow_id=workflow_id,
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


@mcp_tool(tags=["workflows"])
async def get_workflow_run_logs(
    run_id: RunId,
    owner: Owner = None,
    repo: Repo = None,
) -> Dict[str, str]:
    """Get the short-lived download URL of a workflow run's log archive."""
    from github_ci_mcp.main_tools.workflows import get_workflow_run_logs as _impl
    return await _impl(run_id=run_id, owner=owner, repo=repo)


# ---------------------------------------------------------------------------
# CI workflow runs (repository and workflow fixed by configuration)
# ---------------------------------------------------------------------------


@mcp_tool(tags=["ci"])
async def list_ci_workflow_runs(
    branch: Branch = None,
    actor: Actor = None,
    event: Event = None,
    status: RunStatus = None,
    per_page: PerPage = None,
    page: Page = None,
) -> Dict[str, Any]:
    """List workflow runs in the configured CI repository."""
    from github_ci_mcp.main_tools.ci_workflows import list_ci_workflow_runs as _impl
    return await _impl(
        branch=branch, actor=actor, event=event, status=status, per_page=per_page, page=page
    )


@mcp_tool(tags=["ci"])
async def get_ci_workflow_run(run_id: RunId) -> Dict[str, Any]:
    """Get a workflow run from the configured CI repository."""
    from github_ci_mcp.main_tools.ci_workflows import get_ci_workflow_run as _impl
    return await _impl(run_id=run_id)


@mcp_tool(tags=["ci"])
async def list_ci_workflow_runs_for_branch(
    branch: Branch = None,
    actor: Actor = None,
    event: Event = None,
    status: RunStatus = None,
    created: Created = None,
    exclude_pull_requests: ExcludePullRequests = None,
    check_suite_id: CheckSuiteId = None,
    head_sha: HeadSha = None,
    per_page: PerPage = None,
    page: Page = None,
) -> Dict[str, Any]:
    """List runs of the configured CI workflow, typically for one branch."""
    from github_ci_mcp.main_tools.ci_workflows import list_ci_workflow_runs_for_branch as _impl
    return await _impl(
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


@mcp_tool(tags=["ci"])
async def get_ci_workflow_run_logs(run_id: RunId) -> Dict[str, str]:
    """Get the log archive download URL for a run in the configured CI repository."""
    from github_ci_mcp.main_tools.ci_workflows import get_ci_workflow_run_logs as _impl
    return await _impl(run_id=run_id)


# ---------------------------------------------------------------------------
# Log archives
# ---------------------------------------------------------------------------


@mcp_tool(tags=["logs"])
async def download_and_unzip(
    url: Annotated[str, Field(description="http(s) URL of the zip archive to download")],
    output_dir: Annotated[str, Field(description="Directory to extract into; created when missing")] = "/tmp",
    filename: Annotated[
        Optional[str],
        Field(description="Name for the temporary archive file (default github-logs.zip)"),
    ] = None,
) -> Dict[str, Any]:
    """Download a zip archive from a URL and extract it into output_dir."""
    from github_ci_mcp.main_tools.workflow_logs import download_logs_archive as _impl
    return await _impl(url=url, output_dir=output_dir, filename=filename)


@mcp_tool(tags=["logs"])
async def analyze_bazel_logs(
    extracted_dir: Annotated[str, Field(description="Directory holding the extracted log archive")],
    bazel_logs_folder_name: Annotated[
        str,
        Field(description="Name of the Bazel job folder inside extracted_dir"),
    ] = "Bazel Build and Test",
) -> Dict[str, Any]:
    """Scan an extracted log directory's Bazel job folder for the most relevant error."""
    from github_ci_mcp.main_tools.workflow_logs import analyze_extracted_logs as _impl
    return await _impl(extracted_dir=extracted_dir, bazel_logs_folder_name=bazel_logs_folder_name)


@mcp_tool(tags=["logs"])
async def analyze_workflow_logs(
    url: Annotated[
        str,
        Field(description="Log archive URL, e.g. the download_url from get_workflow_run_logs"),
    ],
    output_dir: Annotated[
        Optional[str],
        Field(description="Base directory for the per-run analysis folder. If not provided, uses WORKFLOW_LOGS_DIR."),
    ] = None,
    bazel_logs_folder_name: Annotated[
        str,
        Field(description="Name of the Bazel job folder inside the archive"),
    ] = "Bazel build and test",
) -> Dict[str, Any]:
    """Download a workflow log archive and summarize its Bazel errors.

    Never raises: failures come back as success=false with errorSummary and
    errorDetails. output_dir defaults to WORKFLOW_LOGS_DIR (/tmp/workflow_logs).
    """
    from github_ci_mcp.main_tools.workflow_logs import analyze_workflow_logs as _impl
    result = await _impl(url, output_dir, bazel_logs_folder_name)
    return result.to_dict()


# Expose an ASGI app for hosting via uvicorn. FastMCP builds a Starlette
# application serving the SSE transport at /sse and /messages/.
app = server.mcp.sse_app()
app.add_middleware(_RequestContextMiddleware)
register_healthz_route(app)

LOGGER.info("Registered %d MCP tools", len(_REGISTERED_MCP_TOOLS))
