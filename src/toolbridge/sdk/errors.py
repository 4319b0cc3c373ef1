"""SDK error types."""

from __future__ import annotations

from toolbridge.protocols.errors import ToolBridgeError


class ConfigError(ToolBridgeError):
    """Raised when a connections file fails reading, parsing or validation."""
