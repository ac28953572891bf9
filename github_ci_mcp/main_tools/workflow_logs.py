"""Log-archive tools: download/unzip, Bazel log analysis, and the combined flow.

``analyze_workflow_logs`` is the only place where failures are turned into
result objects instead of exceptions; see ``analysis_error_boundary``.
"""

from __future__ import annotations

import asyncio
import functools
import os
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional

from github_ci_mcp.config import LOG_ANALYSIS_LOGGER, get_config
from github_ci_mcp.downloader import DEFAULT_OUTPUT_DIR, download_and_unzip, validate_url
from github_ci_mcp.log_analyzer import (
    DEFAULT_BAZEL_LOGS_FOLDER,
    LogAnalysisResult,
    analyze_bazel_logs,
)

# The job folder inside a downloaded run archive; GitHub names it after the
# job, which this workflow spells in lower case.
DEFAULT_WORKFLOW_BAZEL_FOLDER = "Bazel build and test"

LOGGER = LOG_ANALYSIS_LOGGER


def analysis_error_boundary(
    func: Callable[..., Awaitable[LogAnalysisResult]],
) -> Callable[..., Awaitable[LogAnalysisResult]]:
    """Turn any exception raised by ``func`` into a failed ``LogAnalysisResult``."""

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> LogAnalysisResult:
        try:
            return await func(*args, **kwargs)
        except Exception as exc:
            LOGGER.warning("Workflow log analysis failed: %s", exc, exc_info=True)
            return LogAnalysisResult(
                success=False,
                error_summary="Error analyzing workflow logs",
                error_details=str(exc) or exc.__class__.__name__,
            )

    return wrapper


def _analysis_dir_name(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    stamp = now.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return stamp.replace(":", "-").replace(".", "-")


def _create_analysis_dir(base_dir: str, now: Optional[datetime] = None) -> str:
    """Create a new timestamp-named directory under ``base_dir`` and return its path.

    ``os.mkdir`` either creates the directory or fails, so two runs started in
    the same millisecond never share one; the later run gets a numeric suffix.
    """

    os.makedirs(base_dir, exist_ok=True)
    stamp = _analysis_dir_name(now)
    candidate = os.path.join(base_dir, stamp)
    suffix = 0
    while True:
        try:
            os.mkdir(candidate)
            return candidate
        except FileExistsError:
            suffix += 1
            candidate = os.path.join(base_dir, f"{stamp}-{suffix}")


@analysis_error_boundary
async def analyze_workflow_logs(
    url: str,
    output_dir: Optional[str] = None,
    bazel_logs_folder_name: str = DEFAULT_WORKFLOW_BAZEL_FOLDER,
    *,
    client_factory: Optional[Callable[[], Any]] = None,
) -> LogAnalysisResult:
    """Download a run's log archive into a fresh directory and analyze it."""

    validate_url(url)
    base_dir = output_dir or get_config().workflow_logs_dir
    analysis_dir = _create_analysis_dir(base_dir)
    LOGGER.info("Analyzing workflow logs in %s", analysis_dir)

    download = await download_and_unzip(url, analysis_dir, client_factory=client_factory)
    if not download.success:
        return LogAnalysisResult(
            success=False,
            error_summary="Failed to download or extract logs",
            error_details=download.message or "Unknown error occurred during download",
        )

    return await asyncio.to_thread(
        analyze_bazel_logs, download.extracted_directory, bazel_logs_folder_name
    )


async def download_logs_archive(
    url: str,
    output_dir: str = DEFAULT_OUTPUT_DIR,
    filename: Optional[str] = None,
) -> Dict[str, Any]:
    result = await download_and_unzip(url, output_dir, filename)
    return result.to_dict()


async def analyze_extracted_logs(
    extracted_dir: str,
    bazel_logs_folder_name: str = DEFAULT_BAZEL_LOGS_FOLDER,
) -> Dict[str, Any]:
    result = await asyncio.to_thread(analyze_bazel_logs, extracted_dir, bazel_logs_folder_name)
    return result.to_dict()
