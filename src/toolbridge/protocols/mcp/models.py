"""MCP models — JSON-RPC 2.0 messages and tool definitions.

Implements the message format used for tool discovery (``tools/list``) and
execution (``tools/call``), plus extraction of tool catalogs from the
different shapes servers actually return.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from toolbridge.core.normalization.models import ObjectSchema
from toolbridge.core.normalization.schema import normalize_schema

# ---------------------------------------------------------------------------
# JSON-RPC 2.0 envelope
# ---------------------------------------------------------------------------


class JsonRpcRequest(BaseModel):
    """A JSON-RPC 2.0 request message."""

    jsonrpc: str = "2.0"
    id: int | str = 1
    method: str
    params: dict[str, Any] = {}


class JsonRpcError(BaseModel):
    """A JSON-RPC 2.0 error object."""

    code: int = 0
    message: str = ""
    data: Any = None


class JsonRpcResponse(BaseModel):
    """A JSON-RPC 2.0 response message.

    ``result`` is kept as ``Any``: servers return objects, lists, or bare
    acknowledgements.
    """

    jsonrpc: str = "2.0"
    id: int | str | None = None
    result: Any = None
    error: JsonRpcError | None = None


# ---------------------------------------------------------------------------
# Tool catalog
# ---------------------------------------------------------------------------


class ToolDefinition(BaseModel):
    """A tool as exposed by a server, with its parameters canonicalised."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    parameter_schema: ObjectSchema = Field(default_factory=ObjectSchema)

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> ToolDefinition:
        """Build from a ``tools/list`` entry or a Rube ``tool_schemas`` entry."""
        name = raw.get("name") or raw.get("tool_slug") or ""
        schema = raw.get("inputSchema")
        if schema is None:
            schema = raw.get("input_schema")
        if schema is None:
            schema = raw.get("parameters_schema")
        return cls(
            name=str(name),
            description=str(raw.get("description") or ""),
            parameter_schema=normalize_schema(schema),
        )


def extract_tool_definitions(result: Any) -> list[ToolDefinition]:
    """Pull tool definitions out of a ``tools/list`` result.

    Recognised shapes, in order of preference:

    * ``{"data": {"data": {"tool_schemas": {slug: {...}}}}}`` (Rube)
    * ``{"tool_schemas": {slug: {...}}}``
    * ``{"tools": [{...}, ...]}``
    * a bare list of tool entries

    Entries without a name are skipped; later duplicates replace earlier ones.
    """
    entries: list[Any] = []
    if isinstance(result, Mapping):
        nested = _dig(result, "data", "data", "tool_schemas")
        schemas = nested if nested is not None else result.get("tool_schemas")
        if isinstance(schemas, Mapping) and schemas:
            entries = list(schemas.values())
        elif isinstance(result.get("tools"), list):
            entries = result["tools"]
    elif isinstance(result, list):
        entries = result

    tools: dict[str, ToolDefinition] = {}
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        tool = ToolDefinition.from_raw(entry)
        if tool.name:
            tools[tool.name] = tool
    return list(tools.values())


def _dig(data: Mapping[str, Any], *path: str) -> Any:
    current: Any = data
    for key in path:
        if not isinstance(current, Mapping) or key not in current:
            return None
        current = current[key]
    return current
