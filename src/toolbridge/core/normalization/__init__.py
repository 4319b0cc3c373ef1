"""Argument normalization — schema canonicalisation and argument matching."""

from toolbridge.core.normalization.concepts import CONCEPT_SYNONYMS, classify_concept, synonyms_for
from toolbridge.core.normalization.errors import ArgumentValidationError
from toolbridge.core.normalization.matcher import (
    ArgumentMatcher,
    coerce_value,
    normalize_arguments,
    token_similarity,
    tokenize,
)
from toolbridge.core.normalization.models import (
    MatchReason,
    NormalizationDecision,
    NormalizationResult,
    ObjectSchema,
    PropertySchema,
)
from toolbridge.core.normalization.schema import normalize_schema

__all__ = [
    "CONCEPT_SYNONYMS",
    "ArgumentMatcher",
    "ArgumentValidationError",
    "MatchReason",
    "NormalizationDecision",
    "NormalizationResult",
    "ObjectSchema",
    "PropertySchema",
    "classify_concept",
    "coerce_value",
    "normalize_arguments",
    "normalize_schema",
    "synonyms_for",
    "token_similarity",
    "tokenize",
]
