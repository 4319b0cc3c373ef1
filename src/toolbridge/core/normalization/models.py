"""Normalization models — canonical schemas and the decision log.

An :class:`ObjectSchema` is the single shape every server-declared parameter
description is reduced to before argument matching.  Each matching step
records a :class:`NormalizationDecision`; the ordered list of decisions is
returned alongside the normalized arguments.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

PropertyType = Literal["string", "number", "integer", "boolean", "array", "object", "unspecified"]

PROPERTY_TYPES: frozenset[str] = frozenset(
    {"string", "number", "integer", "boolean", "array", "object"}
)

# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------


class PropertySchema(BaseModel):
    """A single declared parameter."""

    model_config = ConfigDict(frozen=True)

    type: PropertyType = "unspecified"
    description: str = ""


class ObjectSchema(BaseModel):
    """Canonical object schema: ordered properties plus required names."""

    model_config = ConfigDict(frozen=True)

    properties: dict[str, PropertySchema] = Field(default_factory=dict)
    required: tuple[str, ...] = ()

    @model_validator(mode="after")
    def _required_subset(self) -> ObjectSchema:
        unknown = [name for name in self.required if name not in self.properties]
        if unknown:
            msg = f"required names not declared in properties: {', '.join(unknown)}"
            raise ValueError(msg)
        return self

    def is_required(self, name: str) -> bool:
        return name in self.required

    def to_json_schema(self) -> dict[str, Any]:
        """Render as a plain JSON-Schema object (``unspecified`` types omitted)."""
        properties: dict[str, Any] = {}
        for name, prop in self.properties.items():
            rendered: dict[str, Any] = {}
            if prop.type != "unspecified":
                rendered["type"] = prop.type
            if prop.description:
                rendered["description"] = prop.description
            properties[name] = rendered
        schema: dict[str, Any] = {"type": "object", "properties": properties}
        if self.required:
            schema["required"] = list(self.required)
        return schema


# ---------------------------------------------------------------------------
# Decision log
# ---------------------------------------------------------------------------


class MatchReason(str, Enum):
    """Why a key ended up (or did not end up) in the normalized arguments."""

    DIRECT = "direct-match"
    SYNONYM = "synonym-match"
    FUZZY = "fuzzy-match"
    MISSING_REQUIRED = "missing-required"
    UNMATCHED_OPTIONAL = "unmatched-optional"
    PASSTHROUGH_EXTRA = "passthrough-extra"
    SHADOWED_EXTRA = "shadowed-extra"


class NormalizationDecision(BaseModel):
    """One entry of the normalization log."""

    model_config = ConfigDict(frozen=True)

    target_key: str
    source_key: str | None = None
    reason: MatchReason
    concept: str | None = None
    score: float | None = None

    @property
    def detail(self) -> str:
        """Human-readable reason, e.g. ``synonym-match(recipient_email)``."""
        if self.reason is MatchReason.SYNONYM and self.concept:
            return f"{self.reason.value}({self.concept})"
        if self.reason is MatchReason.FUZZY and self.score is not None:
            return f"{self.reason.value}({self.score:.2f})"
        return self.reason.value


class NormalizationResult(BaseModel):
    """Normalized arguments plus the ordered decision log."""

    normalized: dict[str, Any] = Field(default_factory=dict)
    log: list[NormalizationDecision] = Field(default_factory=list)

    @property
    def missing_required(self) -> list[str]:
        return [d.target_key for d in self.log if d.reason is MatchReason.MISSING_REQUIRED]
