"""MCPClient — connects to a tool server and exposes its tools.

Implements ``ping``, tool discovery (``tools/list``) and execution
(``tools/call`` or ``tools/execute``) over an :class:`MCPTransport`.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from toolbridge import __version__
from toolbridge.protocols.errors import ConnectionError, ProtocolError, ToolNotFoundError
from toolbridge.protocols.mcp.models import (
    JsonRpcRequest,
    JsonRpcResponse,
    ToolDefinition,
    extract_tool_definitions,
)
from toolbridge.protocols.mcp.transport import HttpTransport, MCPTransport, WebSocketTransport
from toolbridge.utils.telemetry import (
    ATTR_RPC_ID,
    ATTR_RPC_METHOD,
    connection_attributes,
    get_tracer,
    traced,
)

if TYPE_CHECKING:
    from toolbridge.core.config import ConnectionConfig

_tracer = get_tracer(__name__)

PROTOCOL_VERSION = "2024-11-05"

# execute method -> (tool-name key, arguments key)
_EXECUTE_PARAM_KEYS: dict[str, tuple[str, str]] = {
    "tools/call": ("name", "arguments"),
    "tools.call": ("name", "arguments"),
    "tools/execute": ("tool", "params"),
}


class MCPClient:
    """Async context manager that connects to a tool server.

    Usage::

        config = ConnectionConfig(url="wss://tools.example.com/mcp", api_key="...")
        async with MCPClient(config) as client:
            tools = await client.list_tools()
            result = await client.execute_tool("send_email", {"to": "a@b.com"})
    """

    def __init__(self, config: ConnectionConfig) -> None:
        self._config = config
        self._transport: MCPTransport | None = None
        self._tools: dict[str, ToolDefinition] | None = None
        self._next_id = 1

    @property
    def config(self) -> ConnectionConfig:
        return self._config

    @property
    def tools(self) -> dict[str, ToolDefinition] | None:
        """The last fetched catalog, or ``None`` before :meth:`list_tools`."""
        return self._tools

    async def __aenter__(self) -> MCPClient:
        await self.connect()
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()

    async def connect(self) -> None:
        """Create the transport, connect, and optionally perform the handshake.

        The transport is closed again if any step fails.
        """
        self._transport = self._create_transport()
        try:
            try:
                await self._transport.connect()
            except ConnectionError:
                raise
            except Exception as exc:
                raise ConnectionError(str(exc)) from exc
            if self._config.initialize:
                await self._handshake()
        except BaseException:
            await self.close()
            raise

    async def close(self) -> None:
        """Close the underlying transport."""
        if self._transport is not None:
            await self._transport.close()
            self._transport = None

    async def call(self, method: str, params: dict[str, Any] | None = None) -> Any:
        """Send a JSON-RPC request and return its ``result``.

        Servers that reply without a ``result`` member get the whole reply
        returned.  A JSON-RPC error envelope raises :class:`ProtocolError`.
        """
        reply = await self.request(method, params)
        return reply["result"] if "result" in reply else reply

    async def request(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Send a JSON-RPC request and return the validated reply envelope."""
        if self._transport is None:
            msg = "Client not connected"
            raise RuntimeError(msg)

        request_id = self._next_id
        self._next_id += 1
        request = JsonRpcRequest(id=request_id, method=method, params=params or {})

        attributes = {
            **connection_attributes(self._config),
            ATTR_RPC_METHOD: method,
            ATTR_RPC_ID: request_id,
        }
        with traced(_tracer, "toolbridge.rpc", attributes):
            reply = await self._transport.request(
                request.model_dump(), timeout=self._config.timeout
            )

        if not isinstance(reply, Mapping):
            msg = f"{method}: expected a JSON object reply"
            raise ProtocolError(msg, body=reply)

        try:
            response = JsonRpcResponse.model_validate(reply)
        except ValidationError as exc:
            msg = f"{method}: malformed JSON-RPC reply"
            raise ProtocolError(msg, body=reply) from exc

        if response.error is not None:
            raise ProtocolError(
                f"{method} failed: {response.error.message}",
                code=response.error.code,
                body=dict(reply),
            )
        return dict(reply)

    async def ping(self) -> Any:
        """Send ``ping``; returns the server's acknowledgement."""
        return await self.call("ping")

    async def list_tools(self) -> list[ToolDefinition]:
        """Send ``tools/list`` and cache the resulting catalog."""
        result = await self.call("tools/list")
        tools = extract_tool_definitions(result)
        self._tools = {tool.name: tool for tool in tools}
        return tools

    async def execute_tool(self, name: str, arguments: Mapping[str, Any]) -> Any:
        """Invoke the named tool and return its raw result payload."""
        reply = await self.execute_tool_reply(name, arguments)
        return reply["result"] if "result" in reply else reply

    async def execute_tool_reply(
        self, name: str, arguments: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Invoke the named tool and return the whole reply envelope."""
        if self._tools is not None and name not in self._tools:
            raise ToolNotFoundError(name)

        method = self._config.execute_method
        name_key, args_key = _EXECUTE_PARAM_KEYS.get(method, ("name", "arguments"))
        return await self.request(method, {name_key: name, args_key: dict(arguments)})

    def _create_transport(self) -> MCPTransport:
        """Build the appropriate transport from the connection config."""
        headers = self._config.request_headers()
        if self._config.transport == "websocket":
            return WebSocketTransport(url=self._config.url, headers=headers)
        return HttpTransport(url=self._config.url, headers=headers)

    async def _handshake(self) -> None:
        """Perform the MCP initialize handshake."""
        await self.call(
            "initialize",
            {
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {},
                "clientInfo": {"name": "toolbridge", "version": __version__},
            },
        )
