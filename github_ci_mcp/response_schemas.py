"""JSON schemas for the GitHub responses the tools hand back.

Each tool validates the decoded body before returning it. A mismatch means
GitHub changed its contract (or the request hit the wrong endpoint), so it is
surfaced as ``ResponseValidationError`` rather than passed through silently.
The schemas pin only the fields callers rely on and allow extra keys.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

import jsonschema

from github_ci_mcp.exceptions import ResponseValidationError

WORKFLOW_RUN_STATUSES = (
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
)

_STR = {"type": "string"}
_INT = {"type": "integer"}
_NULLABLE_STR = {"type": ["string", "null"]}


def _obj(required: Dict[str, Any], **optional: Any) -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": {**required, **optional},
        "required": sorted(required),
    }


def _array_of(item: Mapping[str, Any]) -> Dict[str, Any]:
    return {"type": "array", "items": dict(item)}


USER = _obj({"login": _STR, "id": _INT}, html_url=_STR, type=_STR, site_admin={"type": "boolean"})

REPOSITORY = _obj(
    {
        "id": _INT,
        "name": _STR,
        "full_name": _STR,
        "owner": USER,
    },
    private={"type": "boolean"},
    html_url=_STR,
    description=_NULLABLE_STR,
    default_branch=_STR,
)

REPOSITORY_SEARCH = _obj(
    {
        "total_count": _INT,
        "incomplete_results": {"type": "boolean"},
        "items": _array_of(REPOSITORY),
    }
)

CONTENT_FILE = _obj(
    {"type": _STR, "name": _STR, "path": _STR, "sha": _STR},
    size=_INT,
    content=_STR,
    encoding=_STR,
    download_url=_NULLABLE_STR,
)

# get_file_contents returns a list for directories and an object for files.
FILE_CONTENTS = {"anyOf": [CONTENT_FILE, _array_of(CONTENT_FILE)]}

FILE_UPDATE = _obj(
    {
        "content": {"anyOf": [CONTENT_FILE, {"type": "null"}]},
        "commit": _obj({"sha": _STR}, html_url=_STR, message=_STR),
    }
)

GIT_REFERENCE = _obj(
    {
        "ref": _STR,
        "node_id": _STR,
        "url": _STR,
        "object": _obj({"sha": _STR, "type": _STR, "url": _STR}),
    }
)

COMMIT = _obj(
    {
        "sha": _STR,
        "commit": _obj({"message": _STR}),
    },
    html_url=_STR,
    author={"anyOf": [USER, {"type": "null"}]},
)

COMMIT_LIST = _array_of(COMMIT)

LABEL = {"anyOf": [_obj({"name": _STR}), _STR]}

ISSUE = _obj(
    {
        "id": _INT,
        "number": _INT,
        "title": _STR,
        "state": _STR,
        "user": USER,
    },
    body=_NULLABLE_STR,
    html_url=_STR,
    labels=_array_of(LABEL),
    assignees=_array_of(USER),
)

ISSUE_LIST = _array_of(ISSUE)

ISSUE_COMMENT = _obj(
    {"id": _INT, "body": _STR, "user": USER},
    html_url=_STR,
    created_at=_STR,
)

ISSUE_SEARCH = _obj(
    {
        "total_count": _INT,
        "incomplete_results": {"type": "boolean"},
        "items": _array_of(ISSUE),
    }
)

_BRANCH_REF = _obj({"ref": _STR, "sha": _STR}, label=_STR)

PULL_REQUEST = _obj(
    {
        "id": _INT,
        "number": _INT,
        "title": _STR,
        "state": _STR,
        "user": USER,
        "head": _BRANCH_REF,
        "base": _BRANCH_REF,
    },
    body=_NULLABLE_STR,
    html_url=_STR,
    draft={"type": "boolean"},
    merged={"type": "boolean"},
    mergeable={"type": ["boolean", "null"]},
)

PULL_REQUEST_LIST = _array_of(PULL_REQUEST)

PULL_REQUEST_FILE = _obj(
    {
        "sha": _STR,
        "filename": _STR,
        "status": _STR,
        "additions": _INT,
        "deletions": _INT,
        "changes": _INT,
    },
    patch=_STR,
)

PULL_REQUEST_FILES = _array_of(PULL_REQUEST_FILE)

COMBINED_STATUS = _obj(
    {
        "state": _STR,
        "sha": _STR,
        "total_count": _INT,
        "statuses": _array_of(_obj({"state": _STR, "context": _STR}, description=_NULLABLE_STR)),
    }
)

MERGE_RESULT = _obj({"sha": _STR, "merged": {"type": "boolean"}, "message": _STR})

CODE_SEARCH = _obj(
    {
        "total_count": _INT,
        "incomplete_results": {"type": "boolean"},
        "items": _array_of(
            _obj({"name": _STR, "path": _STR, "sha": _STR, "repository": REPOSITORY})
        ),
    }
)

USER_SEARCH = _obj(
    {
        "total_count": _INT,
        "incomplete_results": {"type": "boolean"},
        "items": _array_of(USER),
    }
)

WORKFLOW_RUN = _obj(
    {
        "id": _INT,
        "name": _NULLABLE_STR,
        "node_id": _STR,
        "head_branch": _NULLABLE_STR,
        "head_sha": _STR,
        "run_number": _INT,
        "event": _STR,
        "status": {"enum": list(WORKFLOW_RUN_STATUSES) + [None]},
        "conclusion": _NULLABLE_STR,
        "workflow_id": _INT,
        "url": _STR,
        "html_url": _STR,
        "created_at": _STR,
        "updated_at": _STR,
        "jobs_url": _STR,
        "logs_url": _STR,
    },
    check_suite_id=_INT,
    run_attempt=_INT,
    run_started_at=_STR,
    artifacts_url=_STR,
    cancel_url=_STR,
    rerun_url=_STR,
    workflow_url=_STR,
    repository=_obj({"id": _INT, "name": _STR, "full_name": _STR, "owner": USER}),
)

WORKFLOW_RUNS = _obj(
    {
        "total_count": _INT,
        "workflow_runs": _array_of(WORKFLOW_RUN),
    }
)


def validate_response(payload: Any, schema: Mapping[str, Any], *, context: str) -> Any:
    """Validate ``payload`` against ``schema`` and return it unchanged."""

    try:
        jsonschema.validate(instance=payload, schema=schema)
    except jsonschema.ValidationError as exc:
        path = list(exc.absolute_path)
        where = " -> ".join(str(p) for p in path)
        message = f"{exc.message} (at {where})" if where else exc.message
        raise ResponseValidationError(context, message) from exc
    return payload


__all__ = [
    "CODE_SEARCH",
    "COMBINED_STATUS",
    "COMMIT_LIST",
    "FILE_CONTENTS",
    "FILE_UPDATE",
    "GIT_REFERENCE",
    "ISSUE",
    "ISSUE_COMMENT",
    "ISSUE_LIST",
    "ISSUE_SEARCH",
    "MERGE_RESULT",
    "PULL_REQUEST",
    "PULL_REQUEST_FILES",
    "PULL_REQUEST_LIST",
    "REPOSITORY",
    "REPOSITORY_SEARCH",
    "USER_SEARCH",
    "WORKFLOW_RUN",
    "WORKFLOW_RUNS",
    "WORKFLOW_RUN_STATUSES",
    "validate_response",
]
