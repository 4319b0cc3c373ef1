"""MCP transports — persistent websocket and per-call HTTP.

Each transport satisfies the :class:`MCPTransport` protocol, providing
``connect``, ``request`` and ``close``.  ``request`` sends one JSON-RPC
envelope and returns the correlated reply envelope, or raises.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from typing import Any, Protocol, runtime_checkable

import httpx
import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from toolbridge.protocols.errors import (
    CallTimeoutError,
    ConnectionError,
    ParseError,
    ProtocolError,
    UnsupportedContentTypeError,
)
from toolbridge.protocols.mcp.sse import EventStreamDecoder, read_event_stream

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
EVENT_STREAM_CONTENT_TYPE = "text/event-stream"
SESSION_HEADER = "mcp-session-id"


@runtime_checkable
class MCPTransport(Protocol):
    """Abstract transport for MCP JSON-RPC communication."""

    async def connect(self) -> None: ...
    async def request(self, message: dict[str, Any], *, timeout: float) -> Any: ...
    async def close(self) -> None: ...


class WebSocketTransport:
    """One long-lived websocket shared by every call of a client.

    Outgoing requests register a future under their id; a background
    listener resolves futures as replies arrive, in any order.  Each wait is
    bounded by the caller's deadline, and a dropped connection fails every
    outstanding call.
    """

    def __init__(self, url: str, headers: dict[str, str] | None = None) -> None:
        self._url = url
        self._headers = dict(headers or {})
        self._ws: Any = None  # websockets.asyncio.client.ClientConnection
        self._listener: asyncio.Task[None] | None = None
        self._pending: dict[str, asyncio.Future[Any]] = {}

    @property
    def pending_count(self) -> int:
        """Number of requests still waiting for a reply."""
        return len(self._pending)

    async def connect(self) -> None:
        """Open the websocket and start the inbound listener."""
        try:
            self._ws = await websockets.connect(
                self._url, additional_headers=self._headers or None
            )
        except (OSError, TimeoutError, WebSocketException) as exc:
            raise ConnectionError(f"Cannot open {self._url}: {exc}") from exc
        self._listener = asyncio.create_task(self._listen(self._ws))

    async def request(self, message: dict[str, Any], *, timeout: float) -> Any:
        """Send *message* and wait up to *timeout* seconds for its reply."""
        if self._ws is None:
            msg = "Transport not connected"
            raise RuntimeError(msg)
        if self._listener is not None and self._listener.done():
            msg = "Connection closed"
            raise ConnectionError(msg)

        key = str(message["id"])
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self._pending[key] = future
        try:
            await self._ws.send(json.dumps(message))
            logger.debug("sent %s id=%s", message.get("method"), key)
            return await asyncio.wait_for(future, timeout)
        except ConnectionClosed as exc:
            raise ConnectionError(f"Connection closed: {exc}") from exc
        except TimeoutError as exc:
            raise CallTimeoutError(str(message.get("method", "")), timeout) from exc
        finally:
            self._pending.pop(key, None)

    async def close(self) -> None:
        """Close the websocket and stop the listener."""
        if self._ws is not None:
            await self._ws.close()
            self._ws = None
        if self._listener is not None:
            self._listener.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._listener
            self._listener = None

    async def _listen(self, ws: Any) -> None:
        try:
            async for raw in ws:
                self._dispatch(raw)
        except ConnectionClosed as exc:
            logger.debug("Websocket closed: %s", exc)
        finally:
            self._fail_pending(ConnectionError("Connection closed before reply arrived"))

    def _dispatch(self, raw: str | bytes) -> None:
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Dropping unparseable websocket frame")
            return
        if not isinstance(data, dict) or data.get("id") is None:
            logger.debug("Dropping message without id")
            return
        future = self._pending.pop(str(data["id"]), None)
        if future is None:
            logger.debug("Dropping reply for unknown id=%s", data["id"])
            return
        logger.debug("received id=%s", data["id"])
        if not future.done():
            future.set_result(data)

    def _fail_pending(self, exc: Exception) -> None:
        pending, self._pending = self._pending, {}
        for future in pending.values():
            if not future.done():
                future.set_exception(exc)


class HttpTransport:
    """One HTTP POST per call, answered with JSON or an event stream.

    Pass *client* to share an existing :class:`httpx.AsyncClient`; otherwise
    the transport creates and owns one.
    """

    def __init__(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._headers = {
            "Accept": f"{JSON_CONTENT_TYPE}, {EVENT_STREAM_CONTENT_TYPE}",
            **(headers or {}),
        }
        self._client = client
        self._owns_client = client is None
        self._session_id: str | None = None

    async def connect(self) -> None:
        """Create the HTTP client (no network traffic until the first call)."""
        if self._client is None:
            self._client = httpx.AsyncClient()

    async def request(self, message: dict[str, Any], *, timeout: float) -> Any:
        """POST *message* and return the decoded reply envelope."""
        if self._client is None:
            msg = "Transport not connected"
            raise RuntimeError(msg)

        headers = dict(self._headers)
        if self._session_id:
            headers[SESSION_HEADER] = self._session_id
        method = str(message.get("method", ""))
        try:
            async with (
                asyncio.timeout(timeout),
                self._client.stream(
                    "POST", self._url, json=message, headers=headers, timeout=timeout
                ) as response,
            ):
                session_id = response.headers.get(SESSION_HEADER)
                if session_id:
                    self._session_id = session_id
                return await self._read_reply(response)
        except (TimeoutError, httpx.TimeoutException) as exc:
            raise CallTimeoutError(method, timeout) from exc
        except httpx.TransportError as exc:
            raise ConnectionError(f"Cannot reach {self._url}: {exc}") from exc

    async def close(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _read_reply(self, response: httpx.Response) -> Any:
        content_type = response.headers.get("content-type", "").lower()
        logger.debug("HTTP %s (%s)", response.status_code, content_type or "no content type")

        if not response.is_success:
            body = await self._read_lenient(response, content_type)
            raise ProtocolError(
                f"HTTP {response.status_code}", status_code=response.status_code, body=body
            )

        if EVENT_STREAM_CONTENT_TYPE in content_type:
            reply = await read_event_stream(response.aiter_bytes())
            return reply if reply is not None else {}

        if JSON_CONTENT_TYPE in content_type:
            raw = await response.aread()
            try:
                return json.loads(raw)
            except ValueError as exc:
                raise ParseError(str(exc)) from exc

        raise UnsupportedContentTypeError(content_type, status_code=response.status_code)

    @staticmethod
    async def _read_lenient(response: httpx.Response, content_type: str) -> Any:
        """Best-effort body capture for error replies; never raises on bad content.

        A read failure midway keeps whatever was parsed up to that point.
        """
        if EVENT_STREAM_CONTENT_TYPE in content_type:
            decoder = EventStreamDecoder()
            try:
                async for chunk in response.aiter_bytes():
                    decoder.feed(chunk)
            except httpx.TransportError as exc:
                logger.debug("Error body truncated: %s", exc)
            decoder.close()
            return decoder.last

        try:
            raw = await response.aread()
        except httpx.TransportError as exc:
            logger.debug("Error body unreadable: %s", exc)
            return None
        try:
            return json.loads(raw)
        except ValueError:
            return None
