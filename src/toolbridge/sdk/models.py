"""Pydantic models returned by the toolbridge SDK."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from toolbridge.core.normalization.models import NormalizationDecision


class InvocationResult(BaseModel):
    """Outcome of :func:`toolbridge.sdk.invoker.invoke`."""

    tool_name: str
    normalized_arguments: dict[str, Any] = Field(default_factory=dict)
    log: list[NormalizationDecision] = Field(default_factory=list)
    result: Any = None
