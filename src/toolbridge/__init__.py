"""toolbridge — call MCP-style tools with schema-aware argument normalization."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from toolbridge.core.config import ConnectionConfig as ConnectionConfig
    from toolbridge.sdk.invoker import invoke as invoke
    from toolbridge.sdk.invoker import list_tools as list_tools
    from toolbridge.sdk.invoker import ping as ping

_LAZY_EXPORTS = {
    "ConnectionConfig": "toolbridge.core.config",
    "invoke": "toolbridge.sdk.invoker",
    "list_tools": "toolbridge.sdk.invoker",
    "ping": "toolbridge.sdk.invoker",
}


def __getattr__(name: str) -> object:
    module_path = _LAZY_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'toolbridge' has no attribute {name!r}")
