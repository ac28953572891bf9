import asyncio
import re
from datetime import datetime, timezone

import pytest

from github_ci_mcp.downloader import DownloadResult
from github_ci_mcp.exceptions import DownloadError
from github_ci_mcp.log_analyzer import LogAnalysisResult
from github_ci_mcp.main_tools import workflow_logs


def test_analysis_dir_name_replaces_colons_and_dots():
    stamp = workflow_logs._analysis_dir_name(datetime(2024, 5, 6, 7, 8, 9, 123456, tzinfo=timezone.utc))

    assert stamp == "2024-05-06T07-08-09-123Z"


@pytest.mark.asyncio
async def test_successful_flow_returns_analyzer_result(tmp_path, monkeypatch):
    seen = {}

    async def fake_download(url, output_dir, filename=None, *, client_factory=None):
        seen["url"] = url
        seen["output_dir"] = output_dir
        job_dir = tmp_path / output_dir / "Bazel build and test"
        job_dir.mkdir(parents=True)
        (job_dir / "Build Incremental.txt").write_text("ERROR: compile failed\n")
        return DownloadResult(True, "ok", output_dir, ["Bazel build and test"])

    monkeypatch.setattr(workflow_logs, "download_and_unzip", fake_download)

    result = await workflow_logs.analyze_workflow_logs("https://example.com/logs.zip", str(tmp_path))

    assert seen["url"] == "https://example.com/logs.zip"
    parent, leaf = seen["output_dir"].rsplit("/", 1)
    assert parent == str(tmp_path)
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}-\d{3}Z", leaf)
    assert result.error_summary == "Build errors detected"
    assert result.source_file == "Build Incremental.txt"


@pytest.mark.asyncio
async def test_unsuccessful_download_result_is_reported(tmp_path, monkeypatch):
    async def fake_download(url, output_dir, filename=None, *, client_factory=None):
        return DownloadResult(False, "archive was empty", output_dir, [])

    def unexpected_analyze(*_args):
        raise AssertionError("analyzer should not run")

    monkeypatch.setattr(workflow_logs, "download_and_unzip", fake_download)
    monkeypatch.setattr(workflow_logs, "analyze_bazel_logs", unexpected_analyze)

    result = await workflow_logs.analyze_workflow_logs("https://example.com/logs.zip", str(tmp_path))

    assert result == LogAnalysisResult(
        success=False,
        error_summary="Failed to download or extract logs",
        error_details="archive was empty",
    )


@pytest.mark.asyncio
async def test_fetcher_exception_is_converted(tmp_path, monkeypatch):
    async def failing_download(url, output_dir, filename=None, *, client_factory=None):
        raise DownloadError("HTTP error! Status: 410, Message: Gone", status_code=410)

    monkeypatch.setattr(workflow_logs, "download_and_unzip", failing_download)

    result = await workflow_logs.analyze_workflow_logs("https://example.com/logs.zip", str(tmp_path))

    assert result.to_dict() == {
        "success": False,
        "errorSummary": "Error analyzing workflow logs",
        "errorDetails": "HTTP error! Status: 410, Message: Gone",
    }


@pytest.mark.asyncio
async def test_invalid_url_never_escapes(tmp_path):
    result = await workflow_logs.analyze_workflow_logs("not-a-url", str(tmp_path))

    assert result.success is False
    assert result.error_summary == "Error analyzing workflow logs"
    assert result.error_details == "Please provide a valid URL"
    assert list(tmp_path.iterdir()) == []


@pytest.mark.asyncio
async def test_output_dir_defaults_to_config(tmp_path, monkeypatch):
    from github_ci_mcp import config

    monkeypatch.setattr(config, "_ACTIVE_CONFIG", config.ServerConfig(workflow_logs_dir=str(tmp_path / "logs")))
    seen = {}

    async def fake_download(url, output_dir, filename=None, *, client_factory=None):
        seen["output_dir"] = output_dir
        return DownloadResult(True, "ok", output_dir, [])

    monkeypatch.setattr(workflow_logs, "download_and_unzip", fake_download)

    result = await workflow_logs.analyze_workflow_logs("https://example.com/logs.zip")

    assert seen["output_dir"].startswith(str(tmp_path / "logs"))
    assert result.error_summary == "Bazel logs folder not found"


@pytest.mark.asyncio
async def test_boundary_wraps_any_coroutine():
    @workflow_logs.analysis_error_boundary
    async def explode():
        raise RuntimeError("kaboom")

    result = await explode()

    assert result.error_summary == "Error analyzing workflow logs"
    assert result.error_details == "kaboom"


@pytest.mark.asyncio
async def test_analyze_extracted_logs_returns_dict(tmp_path):
    payload = await workflow_logs.analyze_extracted_logs(str(tmp_path))

    assert payload["success"] is False
    assert payload["errorSummary"] == "Bazel logs folder not found"


def test_create_analysis_dir_suffixes_taken_names(tmp_path):
    now = datetime(2024, 5, 6, 7, 8, 9, 123000, tzinfo=timezone.utc)
    base = tmp_path / "logs"

    first = workflow_logs._create_analysis_dir(str(base), now)
    second = workflow_logs._create_analysis_dir(str(base), now)
    third = workflow_logs._create_analysis_dir(str(base), now)

    assert first == str(base / "2024-05-06T07-08-09-123Z")
    assert second == str(base / "2024-05-06T07-08-09-123Z-1")
    assert third == str(base / "2024-05-06T07-08-09-123Z-2")


@pytest.mark.asyncio
async def test_concurrent_analyses_get_distinct_directories(tmp_path, monkeypatch):
    seen = []

    async def fake_download(url, output_dir, filename=None, *, client_factory=None):
        seen.append(output_dir)
        await asyncio.sleep(0)
        return DownloadResult(True, "ok", output_dir, [])

    monkeypatch.setattr(workflow_logs, "download_and_unzip", fake_download)

    results = await asyncio.gather(
        *(workflow_logs.analyze_workflow_logs("https://example.com/logs.zip", str(tmp_path)) for _ in range(5))
    )

    assert len(seen) == 5
    assert len(set(seen)) == 5
    assert all(r.error_summary == "Bazel logs folder not found" for r in results)
