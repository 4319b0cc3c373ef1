"""Protocol layer — transports, wire models, and error types."""

from toolbridge.protocols.errors import (
    CallTimeoutError,
    ConnectionError,
    ParseError,
    ProtocolError,
    ToolBridgeError,
    ToolNotFoundError,
    UnsupportedContentTypeError,
)

__all__ = [
    "CallTimeoutError",
    "ConnectionError",
    "ParseError",
    "ProtocolError",
    "ToolBridgeError",
    "ToolNotFoundError",
    "UnsupportedContentTypeError",
]
