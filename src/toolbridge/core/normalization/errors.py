"""Error types for the argument normalization layer."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from toolbridge.protocols.errors import ToolBridgeError

if TYPE_CHECKING:
    from toolbridge.core.normalization.models import NormalizationDecision


class ArgumentValidationError(ToolBridgeError):
    """Required parameters could not be resolved from the caller's arguments.

    Raised before any network call.  The partial normalized mapping and the
    decision log are attached so callers can show what went wrong.
    """

    def __init__(
        self,
        tool_name: str,
        missing: list[str],
        normalized: dict[str, Any],
        log: list[NormalizationDecision],
    ) -> None:
        self.tool_name = tool_name
        self.missing = missing
        self.normalized = normalized
        self.log = log
        super().__init__(
            f"Missing required argument(s) for {tool_name}: {', '.join(missing)}"
        )
