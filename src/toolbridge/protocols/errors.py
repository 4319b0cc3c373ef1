"""Shared error types for the protocol layer."""

from __future__ import annotations

from typing import Any


class ToolBridgeError(Exception):
    """Base error for everything raised by toolbridge."""


class ConnectionError(ToolBridgeError):
    """The channel to the server was refused, reset, or never opened."""


class ProtocolError(ToolBridgeError):
    """The server answered, but not with a usable result.

    Covers non-success HTTP statuses and JSON-RPC error envelopes.  Whatever
    body could be parsed is kept on ``body`` for diagnostics.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: int | None = None,
        body: Any = None,
    ) -> None:
        self.status_code = status_code
        self.code = code
        self.body = body
        super().__init__(message)


class UnsupportedContentTypeError(ProtocolError):
    """The reply declared a content type that is neither JSON nor an event stream."""

    def __init__(self, content_type: str, *, status_code: int | None = None) -> None:
        self.content_type = content_type
        super().__init__(
            f"Unrecognized reply format: {content_type or '(none)'}",
            status_code=status_code,
        )


class ParseError(ToolBridgeError):
    """A single-document JSON reply could not be decoded."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__("Malformed JSON reply" + (f": {detail}" if detail else ""))


class CallTimeoutError(ToolBridgeError):
    """No reply arrived within the per-call deadline."""

    def __init__(self, method: str, timeout: float) -> None:
        self.method = method
        self.timeout = timeout
        super().__init__(f"{method} timed out after {timeout}s")


class ToolNotFoundError(ToolBridgeError):
    """Requested tool does not exist in the fetched catalog."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool not found: {name}")
