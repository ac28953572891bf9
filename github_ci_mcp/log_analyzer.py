"""Heuristic error extraction for Bazel build-and-test workflow logs.

A workflow's log archive unpacks into one folder per job. The Bazel job folder
holds a handful of step logs; three of them are worth reading, in this order:

1. ``Get errors during workflow run.txt``: a curated summary of errors.
2. ``View Failed Test Logs.txt``: output of the failed tests.
3. ``Build Incremental.txt``: the raw build log.

The first rule that matches decides the result; later files are never read.
Missing files are a normal outcome reported through ``success=False``, while
genuine I/O failures (permissions, unreadable directories) propagate.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from github_ci_mcp.config import LOG_ANALYSIS_LOGGER

DEFAULT_BAZEL_LOGS_FOLDER = "Bazel Build and Test"

LOGGER = LOG_ANALYSIS_LOGGER


@dataclass(frozen=True)
class LogAnalysisSettings:
    """Tunable constants of the log heuristic."""

    summary_file_marker: str = "get errors during workflow run.txt"
    failed_tests_file_marker: str = "view failed test logs.txt"
    build_log_file_marker: str = "build incremental.txt"
    error_indicators: Sequence[str] = (
        "ERROR:",
        "FAILED:",
        "BUILD FAILED",
        "Exception:",
        "error:",
        "failed:",
        "Execution failed",
    )
    error_detail_pattern: str = r"ERROR:|FAILED:|Exception:|error:|failed:|BUILD FAILED"
    error_detail_lines: int = 10
    preview_chars: int = 500
    verbatim_max_chars: int = 2000
    context_lines_before: int = 5
    context_lines_after: int = 15
    fallback_head_lines: int = 10
    fallback_tail_lines: int = 20


DEFAULT_SETTINGS = LogAnalysisSettings()


@dataclass(frozen=True)
class LogAnalysisResult:
    success: bool
    error_summary: str
    error_details: str
    source_file: Optional[str] = None
    relevant_log_content: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "success": self.success,
            "errorSummary": self.error_summary,
            "errorDetails": self.error_details,
        }
        if self.source_file is not None:
            payload["sourceFile"] = self.source_file
        if self.relevant_log_content is not None:
            payload["relevantLogContent"] = self.relevant_log_content
        return payload


def contains_errors(content: str, settings: LogAnalysisSettings = DEFAULT_SETTINGS) -> bool:
    """Case-sensitive substring check against the error indicators."""

    return any(indicator in content for indicator in settings.error_indicators)


def extract_error_details(content: str, settings: LogAnalysisSettings = DEFAULT_SETTINGS) -> str:
    """Return the first error line and the lines after it.

    Without any match, fall back to a short preview of the start of the log.
    """

    pattern = re.compile(settings.error_detail_pattern, re.IGNORECASE)
    if pattern.search(content):
        lines = content.split("\n")
        for index, line in enumerate(lines):
            if pattern.search(line):
                return "\n".join(lines[index : index + settings.error_detail_lines])

    preview = content[: settings.preview_chars]
    if len(content) > settings.preview_chars:
        preview += "..."
    return preview


def extract_relevant_content(content: str, settings: LogAnalysisSettings = DEFAULT_SETTINGS) -> str:
    """Trim a build log down to the part around its first error."""

    if len(content) <= settings.verbatim_max_chars:
        return content

    lines = content.split("\n")
    for index, line in enumerate(lines):
        if contains_errors(line, settings):
            start = max(0, index - settings.context_lines_before)
            end = min(len(lines), index + settings.context_lines_after)
            return "\n".join(lines[start:end])

    # No single line carries an indicator.
    head = "\n".join(lines[: settings.fallback_head_lines])
    tail = "\n".join(lines[max(0, len(lines) - settings.fallback_tail_lines) :])
    return f"{head}\n\n...\n\n{tail}"


def _find_log_file(files: List[str], marker: str) -> Optional[str]:
    for name in files:
        if marker in name.lower():
            return name
    return None


def _read_text(path: str) -> str:
    with open(path, "r", encoding="utf-8", errors="replace") as handle:
        return handle.read()


def analyze_bazel_logs(
    extracted_dir: str,
    bazel_logs_folder_name: str = DEFAULT_BAZEL_LOGS_FOLDER,
    *,
    settings: LogAnalysisSettings = DEFAULT_SETTINGS,
) -> LogAnalysisResult:
    """Scan the Bazel job folder of an extracted log archive for errors."""

    bazel_logs_path = os.path.join(extracted_dir, bazel_logs_folder_name)

    if not os.path.exists(bazel_logs_path):
        LOGGER.info("Bazel logs folder missing: %s", bazel_logs_path)
        return LogAnalysisResult(
            success=False,
            error_summary="Bazel logs folder not found",
            error_details=(
                f"Could not find '{bazel_logs_folder_name}' folder in the "
                f"extracted directory '{bazel_logs_path}'"
            ),
        )

    files = sorted(os.listdir(bazel_logs_path))
    LOGGER.detailed("Scanning %d log files in %s", len(files), bazel_logs_path)

    for marker, summary in (
        (settings.summary_file_marker, "Workflow run errors found"),
        (settings.failed_tests_file_marker, "Test failures detected"),
    ):
        name = _find_log_file(files, marker)
        if name is None:
            continue
        content = _read_text(os.path.join(bazel_logs_path, name))
        if not content.strip():
            LOGGER.detailed("Skipping empty log file %s", name)
            continue
        LOGGER.info("%s in %s", summary, name)
        return LogAnalysisResult(
            success=False,
            error_summary=summary,
            error_details=extract_error_details(content, settings),
            source_file=name,
            relevant_log_content=content,
        )

    build_file = _find_log_file(files, settings.build_log_file_marker)
    if build_file is not None:
        content = _read_text(os.path.join(bazel_logs_path, build_file))
        if contains_errors(content, settings):
            LOGGER.info("Build errors detected in %s", build_file)
            return LogAnalysisResult(
                success=False,
                error_summary="Build errors detected",
                error_details=extract_error_details(content, settings),
                source_file=build_file,
                relevant_log_content=extract_relevant_content(content, settings),
            )
        return LogAnalysisResult(
            success=True,
            error_summary="No errors found in build log",
            error_details="Build appears successful",
            source_file=build_file,
        )

    return LogAnalysisResult(
        success=False,
        error_summary="No relevant log files found",
        error_details=f"Could not find expected log files in '{bazel_logs_folder_name}' folder",
    )


__all__ = [
    "DEFAULT_BAZEL_LOGS_FOLDER",
    "DEFAULT_SETTINGS",
    "LogAnalysisResult",
    "LogAnalysisSettings",
    "analyze_bazel_logs",
    "contains_errors",
    "extract_error_details",
    "extract_relevant_content",
]
