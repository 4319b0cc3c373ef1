"""MCP protocol — JSON-RPC tool server client."""

from toolbridge.protocols.mcp.client import MCPClient
from toolbridge.protocols.mcp.models import (
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    ToolDefinition,
    extract_tool_definitions,
)
from toolbridge.protocols.mcp.sse import EventStreamDecoder, read_event_stream
from toolbridge.protocols.mcp.transport import HttpTransport, MCPTransport, WebSocketTransport
from toolbridge.protocols.mcp.unwrap import unwrap

__all__ = [
    "EventStreamDecoder",
    "HttpTransport",
    "JsonRpcError",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "MCPClient",
    "MCPTransport",
    "ToolDefinition",
    "WebSocketTransport",
    "extract_tool_definitions",
    "read_event_stream",
    "unwrap",
]
