"""Utilities for producing consistent tool-failure payloads.

The payload shape should remain stable so clients can rely on it.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx
import jsonschema

from github_ci_mcp.config import BASE_LOGGER
from github_ci_mcp.exceptions import (
    ArchiveExtractionError,
    ConfigurationError,
    DownloadError,
    GitHubAPIError,
    GitHubAuthError,
    ResponseValidationError,
)


@dataclass(eq=False)
class ToolInputValidationError(ValueError):
    """Raised when tool inputs fail validation before any network call."""

    tool_name: str
    message: str
    field: str | None = None

    def __str__(self) -> str:
        if self.field:
            return f"{self.tool_name}: {self.message} (field={self.field})"
        return f"{self.tool_name}: {self.message}"


def _summarize_exception(exc: BaseException) -> str:
    """Create a short human-readable message."""
    if isinstance(exc, jsonschema.ValidationError):
        path = list(exc.path)
        base_message = exc.message or exc.__class__.__name__
        if path:
            path_display = " -> ".join(str(p) for p in path)
            return f"{base_message} (at {path_display})"
        return base_message

    return str(exc) or exc.__class__.__name__


def _classify_category(exc: BaseException, message: str) -> str:
    """Best-effort category for client UX."""
    if isinstance(exc, ConfigurationError):
        return "configuration"
    if isinstance(exc, GitHubAuthError):
        return "auth"
    if isinstance(exc, GitHubAPIError):
        return "github_api"
    if isinstance(exc, ResponseValidationError):
        return "response_schema"
    if isinstance(exc, (asyncio.TimeoutError, TimeoutError, httpx.TimeoutException)):
        return "timeout"
    if isinstance(exc, (DownloadError, ArchiveExtractionError, OSError)):
        return "local_io"

    if isinstance(exc, (jsonschema.ValidationError, ToolInputValidationError, ValueError, TypeError)):
        return "validation"

    lowered = (message or "").lower()
    if "timeout" in lowered or "timed out" in lowered:
        return "timeout"

    return "unknown"


_HINTS = {
    "configuration": "Pass the missing owner/repo/workflow_id argument or set the named environment variable.",
    "auth": "Check GITHUB_PERSONAL_ACCESS_TOKEN and its scopes.",
    "github_api": "Check the identifiers in the request; GitHub rejected it.",
    "response_schema": "GitHub returned an unexpected payload; the endpoint contract may have changed.",
    "local_io": "Check that the URL is reachable, unzip is installed and the output directory is writable.",
    "validation": "Validate tool parameters against the input schema and retry with corrected args.",
    "timeout": "Retry later or raise HTTPX_TIMEOUT.",
}


def _structured_tool_error(
    exc: BaseException, *, context: str, path: Optional[str] = None
) -> Dict[str, Any]:
    """Build a serializable payload for MCP clients and logs."""
    message = _summarize_exception(exc)
    category = _classify_category(exc, message)

    payload: Dict[str, Any] = {
        "error": {
            "error": exc.__class__.__name__,
            "message": message,
            "context": context,
            "category": category,
        }
    }

    hint = _HINTS.get(category)
    if hint:
        payload["error"]["hint"] = hint

    status_code = getattr(exc, "status_code", None)
    if status_code is not None:
        payload["error"]["status_code"] = status_code

    if path:
        payload["error"]["path"] = path

    BASE_LOGGER.debug("Structured tool error", extra={"tool_context": context, "tool_category": category})
    return payload
