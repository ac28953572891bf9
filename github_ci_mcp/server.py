"""Shared server setup and decorator utilities for the GitHub CI MCP.

This module is the stable public import surface.
Implementation lives under `github_ci_mcp.mcp_server.*`.
"""

from __future__ import annotations

from github_ci_mcp.http_clients import _github_redirect_location, _github_request
from github_ci_mcp.mcp_server.context import get_request_context, mcp
from github_ci_mcp.mcp_server.decorators import mcp_tool
from github_ci_mcp.mcp_server.errors import ToolInputValidationError, _structured_tool_error
from github_ci_mcp.mcp_server.registry import (  # noqa: F401
    _REGISTERED_MCP_TOOLS,
    _find_registered_tool,
    registered_tool_names,
)
from github_ci_mcp.mcp_server.schemas import (  # noqa: F401
    _normalize_tool_description,
    _schema_from_signature,
)

__all__ = [
    "ToolInputValidationError",
    "_REGISTERED_MCP_TOOLS",
    "_find_registered_tool",
    "_github_redirect_location",
    "_github_request",
    "_structured_tool_error",
    "get_request_context",
    "mcp",
    "mcp_tool",
    "registered_tool_names",
]
