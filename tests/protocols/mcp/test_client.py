"""Tests for MCPClient with mocked transport."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from toolbridge.core.config import ConnectionConfig
from toolbridge.protocols.errors import ConnectionError, ProtocolError, ToolNotFoundError
from toolbridge.protocols.mcp.client import PROTOCOL_VERSION, MCPClient
from toolbridge.protocols.mcp.transport import HttpTransport, WebSocketTransport


def _make_transport(responses: list[Any]) -> MagicMock:
    """Create a mock transport that returns a sequence of reply envelopes."""
    transport = MagicMock()
    transport.connect = AsyncMock()
    transport.close = AsyncMock()
    transport.request = AsyncMock(side_effect=responses)
    return transport


def _tools_list_response(request_id: int = 1) -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "result": {
            "tools": [
                {
                    "name": "send_email",
                    "description": "Send an email",
                    "inputSchema": {
                        "type": "object",
                        "properties": {
                            "recipient_email": {"type": "string"},
                            "subject": {"type": "string"},
                        },
                        "required": ["recipient_email"],
                    },
                },
                {"name": "ping_tool", "description": "No arguments"},
            ]
        },
    }


def _sent(transport: MagicMock, index: int = -1) -> dict[str, Any]:
    return transport.request.await_args_list[index].args[0]


async def _connected(
    responses: list[Any], config: ConnectionConfig | None = None
) -> tuple[MCPClient, MagicMock]:
    transport = _make_transport(responses)
    client = MCPClient(config or ConnectionConfig(url="wss://tools.example.com", timeout=7))
    with patch.object(MCPClient, "_create_transport", return_value=transport):
        await client.connect()
    return client, transport


class TestConnect:
    async def test_context_manager_connects_and_closes(self) -> None:
        transport = _make_transport([])
        with patch.object(MCPClient, "_create_transport", return_value=transport):
            async with MCPClient(ConnectionConfig(url="wss://x")):
                transport.connect.assert_awaited_once()
        transport.close.assert_awaited_once()
        transport.request.assert_not_awaited()

    async def test_connect_failure_wrapped(self) -> None:
        transport = _make_transport([])
        transport.connect.side_effect = RuntimeError("boom")
        client = MCPClient(ConnectionConfig(url="wss://x"))
        with patch.object(MCPClient, "_create_transport", return_value=transport):
            with pytest.raises(ConnectionError, match="boom"):
                await client.connect()
        transport.close.assert_awaited_once()

    async def test_handshake_failure_closes_transport(self) -> None:
        config = ConnectionConfig(url="wss://x", initialize=True)
        transport = _make_transport([
            {"jsonrpc": "2.0", "id": 1, "error": {"code": -32600, "message": "bad version"}}
        ])
        client = MCPClient(config)
        with patch.object(MCPClient, "_create_transport", return_value=transport):
            with pytest.raises(ProtocolError, match="initialize failed: bad version"):
                await client.connect()
        transport.close.assert_awaited_once()
        with pytest.raises(RuntimeError, match="not connected"):
            await client.call("ping")

    async def test_initialize_handshake(self) -> None:
        config = ConnectionConfig(url="wss://x", initialize=True)
        client, transport = await _connected(
            [{"jsonrpc": "2.0", "id": 1, "result": {"capabilities": {}}}], config
        )
        handshake = _sent(transport, 0)
        assert handshake["method"] == "initialize"
        assert handshake["params"]["protocolVersion"] == PROTOCOL_VERSION
        assert handshake["params"]["clientInfo"]["name"] == "toolbridge"

    async def test_call_before_connect(self) -> None:
        with pytest.raises(RuntimeError, match="not connected"):
            await MCPClient(ConnectionConfig(url="wss://x")).call("ping")


class TestTransportSelection:
    def test_websocket(self) -> None:
        client = MCPClient(ConnectionConfig(url="wss://x"))
        assert isinstance(client._create_transport(), WebSocketTransport)

    def test_http(self) -> None:
        client = MCPClient(ConnectionConfig(url="https://x", api_key="k"))
        transport = client._create_transport()
        assert isinstance(transport, HttpTransport)
        assert transport._headers["Authorization"] == "Bearer k"


class TestCall:
    async def test_ids_increment_and_timeout_forwarded(self) -> None:
        client, transport = await _connected([
            {"jsonrpc": "2.0", "id": 1, "result": {}},
            {"jsonrpc": "2.0", "id": 2, "result": {}},
        ])
        await client.ping()
        await client.ping()

        assert [_sent(transport, i)["id"] for i in range(2)] == [1, 2]
        assert transport.request.await_args_list[0].kwargs == {"timeout": 7}
        assert _sent(transport, 0) == {"jsonrpc": "2.0", "id": 1, "method": "ping", "params": {}}

    async def test_error_envelope(self) -> None:
        reply = {"jsonrpc": "2.0", "id": 1, "error": {"code": -32601, "message": "Nope"}}
        client, _ = await _connected([reply])
        with pytest.raises(ProtocolError, match="ping failed: Nope") as exc_info:
            await client.ping()
        assert exc_info.value.code == -32601
        assert exc_info.value.body == reply

    async def test_reply_without_result_returned_whole(self) -> None:
        client, _ = await _connected([{"ok": True}])
        assert await client.call("custom") == {"ok": True}

    async def test_null_result(self) -> None:
        client, _ = await _connected([{"jsonrpc": "2.0", "id": 1, "result": None}])
        assert await client.call("custom") is None

    async def test_non_object_reply(self) -> None:
        client, _ = await _connected([["not", "an", "object"]])
        with pytest.raises(ProtocolError, match="expected a JSON object"):
            await client.call("custom")


class TestListTools:
    async def test_list_tools(self) -> None:
        client, transport = await _connected([_tools_list_response()])
        assert client.tools is None

        tools = await client.list_tools()

        assert [t.name for t in tools] == ["send_email", "ping_tool"]
        assert _sent(transport)["method"] == "tools/list"
        assert set(client.tools or {}) == {"send_email", "ping_tool"}
        assert tools[0].parameter_schema.required == ("recipient_email",)


class TestExecuteTool:
    async def test_tools_call_envelope(self) -> None:
        client, transport = await _connected([{"jsonrpc": "2.0", "id": 1, "result": "sent"}])
        result = await client.execute_tool("send_email", {"recipient_email": "a@b.com"})

        assert result == "sent"
        assert _sent(transport)["method"] == "tools/call"
        assert _sent(transport)["params"] == {
            "name": "send_email",
            "arguments": {"recipient_email": "a@b.com"},
        }

    async def test_tools_execute_envelope(self) -> None:
        config = ConnectionConfig(url="wss://x", execute_method="tools/execute")
        client, transport = await _connected([{"result": {"ok": 1}}], config)
        await client.execute_tool("search", {"q": "x"})

        assert _sent(transport)["method"] == "tools/execute"
        assert _sent(transport)["params"] == {"tool": "search", "params": {"q": "x"}}

    async def test_unknown_tool_after_listing(self) -> None:
        client, transport = await _connected([_tools_list_response()])
        await client.list_tools()

        with pytest.raises(ToolNotFoundError, match="nonexistent"):
            await client.execute_tool("nonexistent", {})
        assert transport.request.await_count == 1

    async def test_reply_envelope_kept_whole(self) -> None:
        reply = {"jsonrpc": "2.0", "id": 1, "result": {"result": "ok"}}
        client, _ = await _connected([reply])
        assert await client.execute_tool_reply("search", {"q": "x"}) == reply

    async def test_unlisted_tool_is_sent_without_catalog(self) -> None:
        client, transport = await _connected([{"result": "ok"}])
        assert await client.execute_tool("anything", {}) == "ok"
        assert _sent(transport)["params"]["name"] == "anything"
