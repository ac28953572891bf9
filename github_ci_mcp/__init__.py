"""GitHub REST and CI-log tools served over the Model Context Protocol.

The MCP tool surface and ASGI app live in the top-level ``main`` module; the
package only exposes the pieces that are useful without starting a server.
"""

from __future__ import annotations

import importlib
from typing import Any

__all__ = ["downloader", "log_analyzer"]


def __getattr__(name: str) -> Any:
    if name in __all__:
        return importlib.import_module(f"{__name__}.{name}")
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + __all__)
