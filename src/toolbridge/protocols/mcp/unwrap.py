"""Response unwrapping for servers that nest multi-step results.

The multi-step execute tool answers with its useful payload buried under
``data.data``; everything else is returned as the server sent it.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from toolbridge.core.config import DEFAULT_MULTI_EXECUTE_TOOL

_OPTIONAL_FIELDS = ("session", "memory", "time_info")


def unwrap(
    tool_name: str,
    raw_result: Any,
    *,
    multi_execute_tool: str = DEFAULT_MULTI_EXECUTE_TOOL,
) -> Any:
    """Return the caller-facing payload of a tool result."""
    payload = raw_result
    if isinstance(raw_result, Mapping) and "result" in raw_result:
        payload = raw_result["result"]

    if tool_name != multi_execute_tool:
        return payload

    inner = _nested_data(payload)
    if inner is None or "results" not in inner:
        return payload

    flattened: dict[str, Any] = {"results": inner["results"]}
    for field in _OPTIONAL_FIELDS:
        if field in inner:
            flattened[field] = inner[field]
    return flattened


def _nested_data(payload: Any) -> Mapping[str, Any] | None:
    if not isinstance(payload, Mapping):
        return None
    outer = payload.get("data")
    if not isinstance(outer, Mapping):
        return None
    inner = outer.get("data")
    return inner if isinstance(inner, Mapping) else None
