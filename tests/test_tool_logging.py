import logging

import pytest

from github_ci_mcp.tool_logging import (
    _derive_github_web_url,
    _record_github_request,
    _shorten_api_url,
)


@pytest.mark.parametrize(
    "api_url,expected",
    [
        (
            "https://api.github.com/repos/octo/demo/actions/runs/42/logs",
            "https://github.com/octo/demo/actions/runs/42",
        ),
        ("https://api.github.com/repos/octo/demo/pulls/8/files", "https://github.com/octo/demo/pull/8"),
        ("https://api.github.com/repos/octo/demo/issues/3", "https://github.com/octo/demo/issues/3"),
        ("https://api.github.com/repos/octo/demo/commits", "https://github.com/octo/demo"),
        ("https://api.github.com/search/code?q=x", None),
    ],
)
def test_derive_github_web_url(api_url, expected):
    assert _derive_github_web_url(api_url) == expected


def test_shorten_api_url():
    assert _shorten_api_url("https://api.github.com/repos/o/r") == "/repos/o/r"
    assert _shorten_api_url("https://example.com/x") == "https://example.com/x"


def test_record_github_request_levels(caplog):
    caplog.set_level(logging.INFO, logger="github_ci_mcp.github_client")

    _record_github_request(
        status_code=200,
        duration_ms=12,
        error=False,
        method="GET",
        url="https://api.github.com/repos/octo/demo/issues/3",
    )
    _record_github_request(
        status_code=None,
        duration_ms=5,
        error=True,
        exc=TimeoutError(),
        method="GET",
        url="https://api.github.com/repos/octo/demo",
    )

    ok, failed = caplog.records[-2:]
    assert ok.levelno == logging.INFO
    assert ok.getMessage().startswith("GitHub API GET /repos/octo/demo/issues/3 -> 200 (12ms)")
    assert ok.web_url == "https://github.com/octo/demo/issues/3"
    assert failed.levelno == logging.WARNING
    assert "-> ERR" in failed.getMessage()
    assert failed.exc_type == "TimeoutError"
