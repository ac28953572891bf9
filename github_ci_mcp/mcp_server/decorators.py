"""Decorator utilities for MCP tool registration and consistent tool telemetry.

This module wraps MCP tools to provide:
- input schema capture (for the tool registry and argument validation)
- request context propagation
- consistent tool-event telemetry

Logging philosophy
- Console logs should be readable without printing huge nested dicts.
- We emit a short one-line summary to the console, and attach a compact JSON string
  under `tool_json` for debugging.

A tool event includes fields similar to:
- event: tool_call.start | tool_call.ok | tool_call.error
- status: start | ok | error
- tool_name
- call_id
- duration_ms (for ok/error)
- schema_hash
- request (minimal: path + session_id + message_id when available)
"""

from __future__ import annotations

import functools
import hashlib
import inspect
import json
import time
import uuid
from typing import Any, Callable, Mapping, Optional

import jsonschema

from github_ci_mcp.config import DETAILED_LEVEL, TOOLS_LOGGER
from github_ci_mcp.mcp_server.context import get_request_context, mcp
from github_ci_mcp.mcp_server.errors import ToolInputValidationError, _structured_tool_error
from github_ci_mcp.mcp_server.registry import _REGISTERED_MCP_TOOLS
from github_ci_mcp.mcp_server.schemas import (
    _jsonable,
    _normalize_tool_description,
    _schema_from_signature,
)


def _schema_hash(schema: Mapping[str, Any]) -> str:
    raw = json.dumps(schema, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()[:16]


def _extract_context(args: Mapping[str, Any]) -> dict[str, Any]:
    keys = sorted([k for k in args.keys() if k not in {"token", "authorization", "auth"}])
    return {"arg_keys": keys[:32], "arg_count": len(keys)}


def _minimal_request(req: Any) -> dict[str, Any]:
    if not isinstance(req, Mapping):
        return {}
    out: dict[str, Any] = {}
    for k in ("path", "session_id", "message_id"):
        if req.get(k) is not None:
            out[k] = _jsonable(req.get(k))
    return out


def _log_tool_event(payload: Mapping[str, Any]) -> None:
    """Emit a single readable console line + attach full payload as JSON string."""

    safe = _jsonable(dict(payload))
    event = safe.get("event", "tool")
    status = safe.get("status", "")
    tool = safe.get("tool_name", "")
    call_id = safe.get("call_id", "")
    dur = safe.get("duration_ms")
    dur_s = f" {int(dur)}ms" if isinstance(dur, (int, float)) else ""

    msg = f"[tool] {tool} {status}{dur_s} ({event})"
    tool_json = json.dumps(safe, ensure_ascii=False, sort_keys=True, separators=(",", ":"))
    extra = {"event": "tool_json", "tool_json": tool_json, "tool_name": tool, "call_id": call_id}

    if status == "error":
        TOOLS_LOGGER.warning(msg, extra=extra)
    elif TOOLS_LOGGER.isEnabledFor(DETAILED_LEVEL):
        TOOLS_LOGGER.detailed(msg, extra=extra)
    else:
        TOOLS_LOGGER.info(msg, extra=extra)


def _bind_call_args(sig: inspect.Signature, args: tuple[Any, ...], kwargs: dict[str, Any]) -> dict[str, Any]:
    bound = sig.bind_partial(*args, **kwargs)
    bound.apply_defaults()
    return dict(bound.arguments)


def _validate_tool_args_schema(tool_name: str, schema: Mapping[str, Any], args: Mapping[str, Any]) -> None:
    """Reject malformed arguments before the tool body runs."""
    try:
        jsonschema.validate(instance=dict(args), schema=dict(schema))
    except jsonschema.ValidationError as exc:
        field = ".".join(str(p) for p in exc.path) or None
        raise ToolInputValidationError(tool_name, exc.message, field) from exc


def _lookup_fastmcp_tool(name: str) -> Any:
    manager = getattr(mcp, "_tool_manager", None)
    get_tool = getattr(manager, "get_tool", None)
    if callable(get_tool):
        return get_tool(name)
    return None


def mcp_tool(
    name: Optional[str] = None,
    description: Optional[str] = None,
    *,
    tags: Optional[list[str]] = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Register an async function as an MCP tool with validation and telemetry."""

    tags = list(tags or [])

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        tool_name = name or func.__name__
        tool_description = description or _normalize_tool_description(func)
        signature = inspect.signature(func, eval_str=True)
        schema = _schema_from_signature(signature)
        schema_hash = _schema_hash(schema)

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            call_id = str(uuid.uuid4())
            try:
                all_args = _bind_call_args(signature, args, kwargs)
            except TypeError as exc:
                raise ToolInputValidationError(tool_name, str(exc)) from exc

            _validate_tool_args_schema(tool_name, schema, all_args)

            ctx = _extract_context(all_args)
            start = time.perf_counter()
            _log_tool_event(
                {
                    "event": "tool_call.start",
                    "status": "start",
                    "tool_name": tool_name,
                    "call_id": call_id,
                    "request": _minimal_request(get_request_context()),
                    "schema_hash": schema_hash,
                    "arg_keys": ctx["arg_keys"],
                    "arg_count": ctx["arg_count"],
                }
            )

            try:
                result = await func(*args, **kwargs)
            except Exception as exc:
                duration_ms = int((time.perf_counter() - start) * 1000)
                _log_tool_event(
                    {
                        "event": "tool_call.error",
                        "status": "error",
                        "phase": "execute",
                        "tool_name": tool_name,
                        "call_id": call_id,
                        "duration_ms": duration_ms,
                        "schema_hash": schema_hash,
                        "error": _structured_tool_error(exc, context=tool_name),
                    }
                )
                raise

            duration_ms = int((time.perf_counter() - start) * 1000)
            _log_tool_event(
                {
                    "event": "tool_call.ok",
                    "status": "ok",
                    "tool_name": tool_name,
                    "call_id": call_id,
                    "duration_ms": duration_ms,
                    "schema_hash": schema_hash,
                    "result_type": type(result).__name__,
                }
            )
            return result

        # Attach metadata for registry.
        async_wrapper.__mcp_tool_name__ = tool_name
        async_wrapper.__mcp_description__ = tool_description
        async_wrapper.__mcp_input_schema__ = schema
        async_wrapper.__mcp_input_schema_hash__ = schema_hash
        async_wrapper.__mcp_tags__ = list(tags)

        mcp.tool(name=tool_name, description=tool_description)(async_wrapper)
        _REGISTERED_MCP_TOOLS.append((_lookup_fastmcp_tool(tool_name), async_wrapper))

        return async_wrapper

    return decorator
