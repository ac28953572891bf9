import jsonschema
import pytest

from github_ci_mcp.exceptions import (
    ArchiveExtractionError,
    ConfigurationError,
    DownloadError,
    GitHubAPIError,
    GitHubAuthError,
    ResponseValidationError,
)
from github_ci_mcp.mcp_server.errors import ToolInputValidationError, _structured_tool_error


@pytest.mark.parametrize(
    "exc,category",
    [
        (ConfigurationError("Repository owner is required."), "configuration"),
        (GitHubAuthError("bad creds", status_code=401), "auth"),
        (GitHubAPIError("GitHub API error 404: Not Found", status_code=404), "github_api"),
        (ResponseValidationError("get_issue", "'id' is a required property"), "response_schema"),
        (DownloadError("HTTP error! Status: 500, Message: x", status_code=500), "local_io"),
        (ArchiveExtractionError("Unzip process exited with code 9: bad", returncode=9), "local_io"),
        (ToolInputValidationError("get_issue", "bad", "issue_number"), "validation"),
        (ValueError("Please provide a valid URL"), "validation"),
        (TimeoutError(), "timeout"),
        (RuntimeError("something odd"), "unknown"),
    ],
)
def test_categories(exc, category):
    payload = _structured_tool_error(exc, context="tool")

    assert payload["error"]["category"] == category
    assert payload["error"]["context"] == "tool"
    assert payload["error"]["error"] == type(exc).__name__


def test_status_code_and_path_are_included():
    payload = _structured_tool_error(
        GitHubAPIError("GitHub API error 422: nope", status_code=422),
        context="create_issue",
        path="/repos/o/r/issues",
    )

    assert payload["error"]["status_code"] == 422
    assert payload["error"]["path"] == "/repos/o/r/issues"
    assert payload["error"]["message"] == "GitHub API error 422: nope"
    assert "hint" in payload["error"]


def test_jsonschema_errors_report_location():
    with pytest.raises(jsonschema.ValidationError) as excinfo:
        jsonschema.validate({"a": {"b": "x"}}, {"properties": {"a": {"properties": {"b": {"type": "integer"}}}}})

    payload = _structured_tool_error(excinfo.value, context="tool")

    assert payload["error"]["message"].endswith("(at a -> b)")
    assert payload["error"]["category"] == "validation"


def test_exception_attributes():
    err = ArchiveExtractionError("boom", returncode=2, stderr="bad zip")
    assert (err.returncode, err.stderr, str(err)) == (2, "bad zip", "boom")

    api = GitHubAPIError("x", status_code=500, body="oops")
    assert (api.status_code, api.body) == (500, "oops")
    assert isinstance(GitHubAuthError("y"), GitHubAPIError)

    shape = ResponseValidationError("list_issues", "bad")
    assert str(shape) == "Unexpected response shape for list_issues: bad"
    assert shape.context == "list_issues"

    tool_err = ToolInputValidationError("get_issue", "True is not of type 'integer'", "issue_number")
    assert isinstance(tool_err, ValueError)
    assert str(tool_err) == "get_issue: True is not of type 'integer' (field=issue_number)"
