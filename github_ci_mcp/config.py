"""Configuration and logging helpers for the GitHub CI MCP server."""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, replace
from typing import Mapping, Optional, Tuple

from .exceptions import ConfigurationError

# Custom log levels
# ------------------------------------------------------------------------------
#
# CHAT: user-facing progress messages for long-running tools (downloads,
# extraction, log scans).
# DETAILED: verbose operational logging that is more detailed than INFO but less
# noisy than full DEBUG.

DETAILED_LEVEL = 15
CHAT_LEVEL = 25


def _install_custom_log_levels() -> None:
    if not hasattr(logging, "DETAILED"):
        logging.addLevelName(DETAILED_LEVEL, "DETAILED")
        setattr(logging, "DETAILED", DETAILED_LEVEL)

    if not hasattr(logging, "CHAT"):
        logging.addLevelName(CHAT_LEVEL, "CHAT")
        setattr(logging, "CHAT", CHAT_LEVEL)

    # Logger helpers: logger.chat(...), logger.detailed(...)
    if not hasattr(logging.Logger, "detailed"):
        def detailed(self: logging.Logger, msg, *args, **kwargs):
            if self.isEnabledFor(DETAILED_LEVEL):
                self._log(DETAILED_LEVEL, msg, args, **kwargs)
        logging.Logger.detailed = detailed  # type: ignore[attr-defined]

    if not hasattr(logging.Logger, "chat"):
        def chat(self: logging.Logger, msg, *args, **kwargs):
            if self.isEnabledFor(CHAT_LEVEL):
                self._log(CHAT_LEVEL, msg, args, **kwargs)
        logging.Logger.chat = chat  # type: ignore[attr-defined]


def _resolve_log_level(level_name: str | None) -> int:
    if not level_name:
        return logging.INFO

    name = str(level_name).strip().upper()
    if not name:
        return logging.INFO

    if name.lstrip("-").isdigit():
        return int(name)

    if name == "DETAILED":
        return DETAILED_LEVEL
    if name == "CHAT":
        return CHAT_LEVEL

    return getattr(logging, name, logging.INFO)


_install_custom_log_levels()

# Process-wide settings
# ------------------------------------------------------------------------------

GITHUB_TOKEN_ENV_VARS: Tuple[str, ...] = ("GITHUB_PERSONAL_ACCESS_TOKEN", "GITHUB_TOKEN")
GITHUB_API_BASE = os.environ.get("GITHUB_API_BASE", "https://api.github.com")
GITHUB_API_VERSION = os.environ.get("GITHUB_API_VERSION", "2022-11-28")
USER_AGENT = os.environ.get("GITHUB_USER_AGENT", "github-ci-mcp")

HTTPX_TIMEOUT = float(os.environ.get("HTTPX_TIMEOUT", 150))
HTTPX_MAX_CONNECTIONS = int(os.environ.get("HTTPX_MAX_CONNECTIONS", 300))
HTTPX_MAX_KEEPALIVE = int(os.environ.get("HTTPX_MAX_KEEPALIVE", 200))
MAX_CONCURRENCY = int(os.environ.get("MAX_CONCURRENCY", 80))

DEFAULT_CI_REPO = "askscio/scio"
DEFAULT_CI_WORKFLOW_ID = "bazel_pr_runner.yml"
DEFAULT_WORKFLOW_LOGS_DIR = "/tmp/workflow_logs"

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_STYLE = os.environ.get("LOG_STYLE", "color").lower()
LOG_FORMAT = os.environ.get(
    "LOG_FORMAT",
    "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)


class _ColorFormatter(logging.Formatter):
    """Level-colored formatter for console logs."""

    _C = {
        "DEBUG": "\x1b[36m",  # cyan
        "DETAILED": "\x1b[36m",  # cyan
        "INFO": "\x1b[32m",  # green
        "CHAT": "\x1b[34m",  # blue
        "WARNING": "\x1b[33m",  # yellow
        "ERROR": "\x1b[31m",  # red
        "CRITICAL": "\x1b[35m",  # magenta
        "RESET": "\x1b[0m",
    }

    def __init__(self, fmt: str, *, use_color: bool) -> None:
        super().__init__(fmt)
        self._use_color = bool(use_color)

    def format(self, record: logging.LogRecord) -> str:  # pragma: no cover - formatting
        levelname = record.levelname
        if self._use_color and levelname in self._C:
            record.levelname = f"{self._C[levelname]}{levelname}{self._C['RESET']}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def _configure_logging() -> None:
    # Avoid reconfiguring during module reloads.
    root = logging.getLogger()
    if getattr(root, "_github_ci_mcp_configured", False):
        return

    use_color = LOG_STYLE in {"color", "ansi", "colored"}

    # stdio transports own stdout, so console logs go to stderr.
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(_ColorFormatter(LOG_FORMAT, use_color=use_color))

    logging.basicConfig(
        level=_resolve_log_level(LOG_LEVEL),
        handlers=[console_handler],
        force=True,
    )

    for noisy in (
        "uvicorn.access",
        "mcp",
        "mcp.server",
        "mcp.server.lowlevel.server",
        "httpx",
        "httpcore",
    ):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    setattr(root, "_github_ci_mcp_configured", True)


_configure_logging()

BASE_LOGGER = logging.getLogger("github_ci_mcp")
GITHUB_LOGGER = logging.getLogger("github_ci_mcp.github_client")
TOOLS_LOGGER = logging.getLogger("github_ci_mcp.tools")
LOG_ANALYSIS_LOGGER = logging.getLogger("github_ci_mcp.log_analysis")

SERVER_START_TIME = time.time()


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class ServerConfig:
    """Process-wide defaults handed to the tool layer at startup.

    Tools never read the environment directly; they ask the active config to
    resolve owner/repo/workflow identifiers so tests can swap the object
    instead of mutating ``os.environ``.
    """

    owner: Optional[str] = None
    repo: Optional[str] = None
    workflow_id: Optional[str] = None
    ci_repo: str = DEFAULT_CI_REPO
    ci_workflow_id: str = DEFAULT_CI_WORKFLOW_ID
    workflow_logs_dir: str = DEFAULT_WORKFLOW_LOGS_DIR

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServerConfig":
        env = os.environ if environ is None else environ
        return cls(
            owner=_clean(env.get("GITHUB_OWNER")),
            repo=_clean(env.get("GITHUB_REPO")),
            workflow_id=_clean(env.get("GITHUB_WORKFLOW_ID")),
            ci_repo=_clean(env.get("GITHUB_CI_REPO")) or DEFAULT_CI_REPO,
            ci_workflow_id=_clean(env.get("GITHUB_CI_WORKFLOW_ID")) or DEFAULT_CI_WORKFLOW_ID,
            workflow_logs_dir=_clean(env.get("WORKFLOW_LOGS_DIR")) or DEFAULT_WORKFLOW_LOGS_DIR,
        )

    def with_overrides(self, **changes: Optional[str]) -> "ServerConfig":
        return replace(self, **changes)

    def resolve_owner_and_repo(
        self, owner: Optional[str] = None, repo: Optional[str] = None
    ) -> Tuple[str, str]:
        """Return ``(owner, repo)``, falling back to the configured defaults."""

        resolved_owner = owner or self.owner
        resolved_repo = repo or self.repo

        if not resolved_owner:
            raise ConfigurationError(
                "Repository owner is required. Either provide it as a parameter "
                "or set GITHUB_OWNER environment variable."
            )
        if not resolved_repo:
            raise ConfigurationError(
                "Repository name is required. Either provide it as a parameter "
                "or set GITHUB_REPO environment variable."
            )
        return resolved_owner, resolved_repo

    def resolve_workflow_id(self, workflow_id: Optional[str] = None) -> str:
        resolved = workflow_id or self.workflow_id
        if not resolved:
            raise ConfigurationError(
                "Workflow ID is required. Either provide it as a parameter "
                "or set GITHUB_WORKFLOW_ID environment variable."
            )
        return resolved

    def ci_owner_and_repo(self) -> Tuple[str, str]:
        owner, _, repo = self.ci_repo.partition("/")
        if not owner or not repo:
            raise ConfigurationError(
                f"GITHUB_CI_REPO must be in 'owner/repo' format, got {self.ci_repo!r}."
            )
        return owner, repo


_ACTIVE_CONFIG: ServerConfig = ServerConfig.from_env()


def get_config() -> ServerConfig:
    return _ACTIVE_CONFIG


def set_config(config: ServerConfig) -> None:
    """Install ``config`` as the active server configuration."""

    global _ACTIVE_CONFIG
    _ACTIVE_CONFIG = config


__all__ = [
    "BASE_LOGGER",
    "CHAT_LEVEL",
    "DEFAULT_CI_REPO",
    "DEFAULT_CI_WORKFLOW_ID",
    "DEFAULT_WORKFLOW_LOGS_DIR",
    "DETAILED_LEVEL",
    "GITHUB_API_BASE",
    "GITHUB_API_VERSION",
    "GITHUB_LOGGER",
    "GITHUB_TOKEN_ENV_VARS",
    "HTTPX_MAX_CONNECTIONS",
    "HTTPX_MAX_KEEPALIVE",
    "HTTPX_TIMEOUT",
    "LOG_ANALYSIS_LOGGER",
    "MAX_CONCURRENCY",
    "SERVER_START_TIME",
    "ServerConfig",
    "TOOLS_LOGGER",
    "USER_AGENT",
    "get_config",
    "set_config",
]
