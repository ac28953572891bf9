"""Custom exception types used across the GitHub CI MCP server."""

from __future__ import annotations

from typing import Any, Optional


class ConfigurationError(Exception):
    """Raised when a required identifier is missing and no default is configured."""

    pass


class GitHubAPIError(Exception):
    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        body: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class GitHubAuthError(GitHubAPIError):
    """Raised when GitHub rejects the configured credentials (401/403)."""

    pass


class ResponseValidationError(Exception):
    """Raised when a GitHub response body does not match the expected shape."""

    def __init__(self, context: str, message: str) -> None:
        super().__init__(f"Unexpected response shape for {context}: {message}")
        self.context = context


class DownloadError(Exception):
    """Raised when an archive URL answers with a non-success status."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ArchiveExtractionError(Exception):
    """Raised when the external unzip utility cannot be run or fails."""

    def __init__(
        self,
        message: str,
        *,
        returncode: Optional[int] = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


__all__ = [
    "ArchiveExtractionError",
    "ConfigurationError",
    "DownloadError",
    "GitHubAPIError",
    "GitHubAuthError",
    "ResponseValidationError",
]
