from __future__ import annotations

from typing import Any, Optional

_REGISTERED_MCP_TOOLS: list[tuple[Any, Any]] = []


def _find_registered_tool(tool_name: str) -> Optional[tuple[Any, Any]]:
    for tool, func in _REGISTERED_MCP_TOOLS:
        name = getattr(tool, "name", None) or getattr(func, "__mcp_tool_name__", None)
        if name == tool_name:
            return tool, func
    return None


def registered_tool_names() -> list[str]:
    names = []
    for tool, func in _REGISTERED_MCP_TOOLS:
        names.append(getattr(tool, "name", None) or getattr(func, "__mcp_tool_name__", ""))
    return sorted(names)
