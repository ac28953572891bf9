"""Schema + metadata helpers."""

from __future__ import annotations

import inspect
import json
import types
import typing
from typing import Annotated, Any, Dict, Literal, Mapping, Optional, get_args, get_origin


def _jsonable(value: Any) -> Any:
    """Convert arbitrary Python values into something JSON-serializable.

    Keeps structured logging stable when values include non-JSON types
    (exceptions, bytes, sets, dataclasses).
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value

    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")

    if isinstance(value, Mapping):
        return {str(k): _jsonable(v) for k, v in value.items()}

    if isinstance(value, (list, tuple, set, frozenset)):
        return [_jsonable(v) for v in value]

    import dataclasses

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _jsonable(dataclasses.asdict(value))

    if isinstance(value, BaseException):
        return {"type": type(value).__name__, "message": str(value)}

    try:
        json.dumps(value, ensure_ascii=False)
        return value
    except (TypeError, ValueError):
        return str(value)


def _annotation_to_schema(annotation: Any) -> Dict[str, Any]:
    if annotation is inspect.Signature.empty:
        return {}
    if annotation is None or annotation is type(None):
        return {"type": "null"}

    origin = get_origin(annotation)
    if origin is Annotated:
        base, *metadata = get_args(annotation)
        schema = dict(_annotation_to_schema(base))
        for meta in metadata:
            # pydantic Field(description=...) and similar carry a description attribute.
            description = getattr(meta, "description", None)
            if isinstance(description, str) and description:
                schema["description"] = description
        return schema

    if origin is None:
        if annotation is str:
            return {"type": "string"}
        if annotation is bool:
            return {"type": "boolean"}
        if annotation is int:
            return {"type": "integer"}
        if annotation is float:
            return {"type": "number"}
        if annotation is list:
            return {"type": "array"}
        if annotation is dict:
            return {"type": "object"}
        return {}

    if origin is Literal:
        return {"enum": list(get_args(annotation))}
    if origin is list:
        args = get_args(annotation)
        items = _annotation_to_schema(args[0]) if args else {}
        return {"type": "array", "items": items}
    if origin is dict:
        args = get_args(annotation)
        value_schema = _annotation_to_schema(args[1]) if len(args) > 1 else {}
        return {"type": "object", "additionalProperties": value_schema}
    if origin is typing.Union or origin is getattr(types, "UnionType", None):
        args = get_args(annotation)
        return {"anyOf": [_annotation_to_schema(arg) for arg in args]}

    return {}


def _schema_from_signature(signature: Optional[inspect.Signature]) -> Dict[str, Any]:
    properties: Dict[str, Any] = {}
    required: list[str] = []

    if signature is None:
        return {"type": "object", "properties": {}}

    for param in signature.parameters.values():
        if param.name == "self":
            continue
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        param_schema: Dict[str, Any] = _annotation_to_schema(param.annotation)
        if param.default is inspect.Parameter.empty:
            required.append(param.name)
        else:
            param_schema = dict(param_schema)
            param_schema["default"] = _jsonable(param.default)
        properties[param.name] = param_schema

    schema: Dict[str, Any] = {"type": "object", "properties": properties, "additionalProperties": False}
    if required:
        schema["required"] = required
    return schema


def _title_from_tool_name(name: str) -> str:
    parts = [p for p in name.strip().split("_") if p]
    if not parts:
        return "Tool"
    return " ".join(p[:1].upper() + p[1:] for p in parts)


def _normalize_tool_description(func: Any) -> str:
    """Prefer the docstring; fall back to a title built from the tool name."""
    doc = (inspect.getdoc(func) or "").strip()
    if doc:
        return doc
    return f"{_title_from_tool_name(getattr(func, '__name__', 'tool'))}."
