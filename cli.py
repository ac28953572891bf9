from __future__ import annotations

import argparse
import shutil
import sys
from pathlib import Path


def _load_project_version(pyproject_path: Path | None = None) -> str:
    """Best-effort loader for the project version from pyproject.toml.

    This avoids importing the server module (and its FastMCP wiring) just to
    answer a simple CLI query like `--version`.
    """
    if pyproject_path is None:
        pyproject_path = Path(__file__).with_name("pyproject.toml")

    import tomllib

    try:
        data = tomllib.loads(pyproject_path.read_text(encoding="utf-8"))
    except (FileNotFoundError, tomllib.TOMLDecodeError):
        return "0.0.0"

    project = data.get("project") or {}
    version = project.get("version")
    if isinstance(version, str) and version.strip():
        return version.strip()
    return "0.0.0"


def _collect_checks() -> list[dict[str, str]]:
    # Lazy import so `--version` never configures logging or reads config.
    from github_ci_mcp.config import get_config
    from github_ci_mcp.http_clients import _get_optional_github_token

    config = get_config()
    checks: list[dict[str, str]] = []

    if _get_optional_github_token():
        checks.append({"name": "github_token", "level": "ok", "message": "token configured"})
    else:
        checks.append(
            {
                "name": "github_token",
                "level": "warning",
                "message": "GITHUB_PERSONAL_ACCESS_TOKEN is not set; requests are unauthenticated",
            }
        )

    unzip_path = shutil.which("unzip")
    if unzip_path:
        checks.append({"name": "unzip", "level": "ok", "message": unzip_path})
    else:
        checks.append(
            {
                "name": "unzip",
                "level": "error",
                "message": "unzip not found on PATH; log archive tools will fail",
            }
        )

    for name, value, env_var in (
        ("default_owner", config.owner, "GITHUB_OWNER"),
        ("default_repo", config.repo, "GITHUB_REPO"),
        ("default_workflow_id", config.workflow_id, "GITHUB_WORKFLOW_ID"),
    ):
        if value:
            checks.append({"name": name, "level": "ok", "message": value})
        else:
            checks.append({"name": name, "level": "warning", "message": f"{env_var} not set"})

    checks.append(
        {
            "name": "ci_workflow",
            "level": "ok",
            "message": f"{config.ci_repo} / {config.ci_workflow_id}",
        }
    )
    checks.append({"name": "workflow_logs_dir", "level": "ok", "message": config.workflow_logs_dir})
    return checks


def _run_doctor() -> int:
    """Run basic environment checks and print a human-readable summary."""

    checks = _collect_checks()
    ok = sum(1 for c in checks if c["level"] == "ok")
    warning = sum(1 for c in checks if c["level"] == "warning")
    error = sum(1 for c in checks if c["level"] == "error")
    status = "error" if error else ("warning" if warning else "ok")

    print(f"Status: {status}")
    print(f"Checks: ok={ok}, warning={warning}, error={error}")
    for check in checks:
        print(f"- [{check['level']}] {check['name']}: {check['message']}")

    return 0 if status != "error" else 1


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="github-ci-mcp",
        description="GitHub CI MCP server helpers.",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print the github-ci-mcp version and exit.",
    )

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser(
        "doctor",
        help="Check token, unzip and configured defaults, and print a summary.",
    )

    if argv is None:
        argv = sys.argv[1:]

    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        # When used as a library function in tests, return the exit code
        # instead of raising.
        return int(getattr(exc, "code", 1) or 0)

    if args.version and not args.command:
        print(_load_project_version())
        return 0

    if args.command == "doctor":
        return _run_doctor()

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
