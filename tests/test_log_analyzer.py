from pathlib import Path

import pytest

from github_ci_mcp.log_analyzer import (
    DEFAULT_BAZEL_LOGS_FOLDER,
    LogAnalysisResult,
    LogAnalysisSettings,
    analyze_bazel_logs,
    contains_errors,
    extract_error_details,
    extract_relevant_content,
)


def _bazel_dir(tmp_path: Path, files: dict[str, str], folder: str = DEFAULT_BAZEL_LOGS_FOLDER) -> Path:
    logs = tmp_path / folder
    logs.mkdir(parents=True)
    for name, content in files.items():
        (logs / name).write_text(content, encoding="utf-8")
    return tmp_path


def test_missing_folder_reports_not_found(tmp_path):
    result = analyze_bazel_logs(str(tmp_path))

    assert result.success is False
    assert result.error_summary == "Bazel logs folder not found"
    assert "Bazel Build and Test" in result.error_details
    assert result.source_file is None


def test_summary_file_wins_over_failed_tests(tmp_path):
    root = _bazel_dir(
        tmp_path,
        {
            "1_Get errors during workflow run.txt": "ERROR: //foo:bar failed to build\n",
            "2_View Failed Test Logs.txt": "FAILED: //foo:test\n",
        },
    )

    result = analyze_bazel_logs(str(root))

    assert result.success is False
    assert result.error_summary == "Workflow run errors found"
    assert result.source_file == "1_Get errors during workflow run.txt"
    assert result.relevant_log_content == "ERROR: //foo:bar failed to build\n"
    assert result.error_details.startswith("ERROR: //foo:bar")


def test_empty_summary_falls_through_to_failed_tests(tmp_path):
    root = _bazel_dir(
        tmp_path,
        {
            "1_Get errors during workflow run.txt": "   \n\n",
            "2_View Failed Test Logs.txt": "running\nFAILED: //foo:test (see log)\n",
        },
    )

    result = analyze_bazel_logs(str(root))

    assert result.error_summary == "Test failures detected"
    assert result.source_file == "2_View Failed Test Logs.txt"
    assert result.error_details == "FAILED: //foo:test (see log)\n"


def test_build_log_without_indicators_is_success(tmp_path):
    root = _bazel_dir(tmp_path, {"Build Incremental.txt": "Compiling...\nINFO: Build completed successfully\n"})

    result = analyze_bazel_logs(str(root))

    assert result == LogAnalysisResult(
        success=True,
        error_summary="No errors found in build log",
        error_details="Build appears successful",
        source_file="Build Incremental.txt",
    )


def test_build_log_with_errors_returns_content_verbatim_when_short(tmp_path):
    content = "Compiling...\nBUILD FAILED: target //foo failed\nsee above\n"
    root = _bazel_dir(tmp_path, {"Build Incremental.txt": content})

    result = analyze_bazel_logs(str(root))

    assert result.to_dict() == {
        "success": False,
        "errorSummary": "Build errors detected",
        "errorDetails": "BUILD FAILED: target //foo failed\nsee above\n",
        "sourceFile": "Build Incremental.txt",
        "relevantLogContent": content,
    }


def test_no_relevant_files(tmp_path):
    root = _bazel_dir(tmp_path, {"Set up job.txt": "hello"})

    result = analyze_bazel_logs(str(root))

    assert result.to_dict() == {
        "success": False,
        "errorSummary": "No relevant log files found",
        "errorDetails": "Could not find expected log files in 'Bazel Build and Test' folder",
    }


def test_custom_folder_name(tmp_path):
    root = _bazel_dir(tmp_path, {"3_build incremental.txt": "ok\n"}, folder="Bazel build and test")

    result = analyze_bazel_logs(str(root), "Bazel build and test")

    assert result.success is True
    assert result.source_file == "3_build incremental.txt"


def test_undecodable_bytes_are_replaced(tmp_path):
    logs = tmp_path / DEFAULT_BAZEL_LOGS_FOLDER
    logs.mkdir()
    (logs / "Build Incremental.txt").write_bytes(b"\xff\xfe ERROR: bad byte\n")

    result = analyze_bazel_logs(str(tmp_path))

    assert result.error_summary == "Build errors detected"
    assert "ERROR: bad byte" in result.relevant_log_content


def test_error_details_returns_ten_lines_from_match():
    lines = ["setup", "ERROR: disk full"] + [f"line {i}" for i in range(15)]
    excerpt = extract_error_details("\n".join(lines))

    excerpt_lines = excerpt.split("\n")
    assert len(excerpt_lines) == 10
    assert excerpt_lines[0] == "ERROR: disk full"
    assert excerpt_lines[-1] == "line 8"


def test_error_details_match_is_case_insensitive():
    excerpt = extract_error_details("start\nbuild Failed: nope\nend")

    assert excerpt == "build Failed: nope\nend"


def test_error_details_near_end_returns_fewer_lines():
    assert extract_error_details("a\nb\nerror: last") == "error: last"


def test_error_details_without_match_previews_content():
    long_text = "x" * 600
    assert extract_error_details(long_text) == "x" * 500 + "..."
    assert extract_error_details("all good") == "all good"


def test_relevant_content_short_text_is_unchanged():
    text = "ERROR: boom\n" * 10
    assert extract_relevant_content(text) == text


def test_relevant_content_windows_around_first_indicator():
    lines = [f"step {i:04d} " + "." * 40 for i in range(100)]
    lines[50] = "Execution failed for task :app"
    text = "\n".join(lines)
    assert len(text) > 2000

    excerpt = extract_relevant_content(text).split("\n")

    assert excerpt[0] == lines[45]
    assert excerpt[5] == "Execution failed for task :app"
    assert excerpt[-1] == lines[64]
    assert len(excerpt) == 20


def test_relevant_content_window_clamps_at_start():
    lines = ["FAILED: first line"] + [f"noise {i} " + "." * 40 for i in range(80)]
    excerpt = extract_relevant_content("\n".join(lines)).split("\n")

    assert excerpt[0] == "FAILED: first line"
    assert len(excerpt) == 15


def test_relevant_content_head_tail_fallback_without_indicator_line():
    lines = [f"line {i:03d} " + "-" * 40 for i in range(100)]
    text = "\n".join(lines)

    result = extract_relevant_content(text)

    head, tail = result.split("\n\n...\n\n")
    assert head.split("\n") == lines[:10]
    assert tail.split("\n") == lines[-20:]


def test_settings_tune_window_sizes():
    settings = LogAnalysisSettings(
        verbatim_max_chars=10,
        fallback_head_lines=1,
        fallback_tail_lines=1,
        context_lines_before=1,
        context_lines_after=2,
    )

    assert extract_relevant_content("first\nmiddle\nlast line", settings) == "first\n\n...\n\nlast line"
    assert extract_relevant_content("a\nb\nERROR: c\nd\ne", settings) == "b\nERROR: c\nd"


@pytest.mark.parametrize(
    "text,expected",
    [
        ("BUILD FAILED", True),
        ("Execution failed", True),
        ("error: x", True),
        ("Error: x", False),
        ("all green", False),
    ],
)
def test_contains_errors_is_case_sensitive(text, expected):
    assert contains_errors(text) is expected
