"""ArgumentMatcher — reconcile caller arguments with a tool's declared schema.

For every schema property the matcher tries, in order:

1. **Direct** — the normalized property name equals a normalized raw key.
2. **Synonym** — the property belongs to a known concept and one of the
   concept's surface names is present.
3. **Fuzzy** — token-set Jaccard similarity against the raw keys not yet
   consumed, above a threshold.

Matched values are coerced to the declared type.  Unmatched required
properties become ``None``; unmatched optional ones are left out.  Raw keys
nobody claimed are passed through untouched, so normalization never drops
caller data.
"""

from __future__ import annotations

import json
import logging
import math
import re
from collections.abc import Callable, Mapping
from typing import Any

from toolbridge.core.normalization.concepts import classify_concept, synonyms_for
from toolbridge.core.normalization.models import (
    MatchReason,
    NormalizationDecision,
    NormalizationResult,
    ObjectSchema,
)

logger = logging.getLogger(__name__)

DEFAULT_FUZZY_THRESHOLD = 0.6

_NON_ALNUM = re.compile(r"[^a-z0-9]")
_SEPARATORS = re.compile(r"[-_]")
_CAMEL_BOUNDARY = re.compile(r"([a-z])([A-Z])")

_TRUTHY = frozenset({"true", "yes", "1"})
_FALSY = frozenset({"false", "no", "0"})

# ---------------------------------------------------------------------------
# Name helpers
# ---------------------------------------------------------------------------


def normalize_key(name: str) -> str:
    """Lowercase *name* and strip everything that is not a letter or digit."""
    return _NON_ALNUM.sub("", name.lower())


def tokenize(name: str) -> list[str]:
    """Split snake_case, kebab-case and camelCase names into lowercase tokens."""
    spaced = _CAMEL_BOUNDARY.sub(r"\1 \2", _SEPARATORS.sub(" ", name))
    return spaced.lower().split()


def token_similarity(a: str, b: str) -> float:
    """Jaccard similarity of the token sets of *a* and *b*."""
    tokens_a = set(tokenize(a))
    tokens_b = set(tokenize(b))
    if not tokens_a or not tokens_b:
        return 0.0
    return len(tokens_a & tokens_b) / len(tokens_a | tokens_b)


# ---------------------------------------------------------------------------
# Type coercion
# ---------------------------------------------------------------------------


def _to_string(value: Any) -> Any:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (Mapping, list)):
        return json.dumps(value, default=str)
    return str(value)


def _to_number(value: Any) -> Any:
    if isinstance(value, bool) or not isinstance(value, str):
        return value
    text = value.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return value
    return number if math.isfinite(number) else value


def _to_boolean(value: Any) -> Any:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUTHY:
            return True
        if lowered in _FALSY:
            return False
    return value


def _to_array(value: Any) -> Any:
    if isinstance(value, list):
        return value
    if isinstance(value, tuple):
        return list(value)
    if isinstance(value, str):
        return [part.strip() for part in value.split(",")]
    return [value]


def _to_object(value: Any) -> Any:
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except ValueError:
            return value
        if isinstance(parsed, dict):
            return parsed
    return value


_COERCERS: dict[str, Callable[[Any], Any]] = {
    "string": _to_string,
    "number": _to_number,
    "integer": _to_number,
    "boolean": _to_boolean,
    "array": _to_array,
    "object": _to_object,
}


def coerce_value(value: Any, declared_type: str) -> Any:
    """Light-touch coercion of *value* towards *declared_type*.

    Values that cannot be converted are returned unchanged; ``None`` is never
    coerced.
    """
    if value is None:
        return None
    coercer = _COERCERS.get(declared_type)
    return coercer(value) if coercer is not None else value


# ---------------------------------------------------------------------------
# Matcher
# ---------------------------------------------------------------------------


class ArgumentMatcher:
    """Maps loosely-named caller arguments onto a canonical schema.

    Instances hold no per-call state and can be shared freely.

    Usage::

        matcher = ArgumentMatcher()
        result = matcher.normalize(tool.parameter_schema, {"to": "a@b.com"})
        result.normalized   # {"recipient_email": "a@b.com"}
        result.log          # [NormalizationDecision(...)]
    """

    def __init__(self, *, fuzzy_threshold: float = DEFAULT_FUZZY_THRESHOLD) -> None:
        self._fuzzy_threshold = fuzzy_threshold

    def normalize(
        self,
        schema: ObjectSchema,
        raw_args: Mapping[str, Any] | None,
    ) -> NormalizationResult:
        """Resolve every schema property against *raw_args*."""
        raw = dict(raw_args or {})
        lookup: dict[str, str] = {}
        for key in raw:
            lookup.setdefault(normalize_key(key), key)

        consumed: set[str] = set()
        normalized: dict[str, Any] = {}
        log: list[NormalizationDecision] = []

        for name, prop in schema.properties.items():
            decision = self._resolve(schema, name, raw, lookup, consumed)
            if decision.source_key is not None:
                consumed.add(decision.source_key)
                normalized[name] = coerce_value(raw[decision.source_key], prop.type)
            elif decision.reason is MatchReason.MISSING_REQUIRED:
                normalized[name] = None
            self._record(log, decision)

        for key, value in raw.items():
            if key in consumed:
                continue
            if key in normalized:
                # Already filled by a matched property; the raw value is dropped.
                reason = MatchReason.SHADOWED_EXTRA
            else:
                normalized[key] = value
                reason = MatchReason.PASSTHROUGH_EXTRA
            self._record(
                log, NormalizationDecision(target_key=key, source_key=key, reason=reason)
            )

        return NormalizationResult(normalized=normalized, log=log)

    def _resolve(
        self,
        schema: ObjectSchema,
        name: str,
        raw: dict[str, Any],
        lookup: dict[str, str],
        consumed: set[str],
    ) -> NormalizationDecision:
        source = lookup.get(normalize_key(name))
        if source is not None:
            return NormalizationDecision(
                target_key=name, source_key=source, reason=MatchReason.DIRECT
            )

        concept = classify_concept(name)
        if concept is not None:
            for candidate in synonyms_for(concept):
                source = lookup.get(normalize_key(candidate))
                if source is not None:
                    return NormalizationDecision(
                        target_key=name,
                        source_key=source,
                        reason=MatchReason.SYNONYM,
                        concept=concept,
                    )

        best_key: str | None = None
        best_score = 0.0
        for key in raw:
            if key in consumed:
                continue
            score = token_similarity(name, key)
            if score >= self._fuzzy_threshold and (best_key is None or score > best_score):
                best_key, best_score = key, score
        if best_key is not None:
            return NormalizationDecision(
                target_key=name, source_key=best_key, reason=MatchReason.FUZZY, score=best_score
            )

        if schema.is_required(name):
            return NormalizationDecision(target_key=name, reason=MatchReason.MISSING_REQUIRED)
        return NormalizationDecision(target_key=name, reason=MatchReason.UNMATCHED_OPTIONAL)

    @staticmethod
    def _record(log: list[NormalizationDecision], decision: NormalizationDecision) -> None:
        logger.debug(
            "normalize %s <- %s: %s", decision.target_key, decision.source_key, decision.detail
        )
        log.append(decision)


_default_matcher = ArgumentMatcher()


def normalize_arguments(
    schema: ObjectSchema,
    raw_args: Mapping[str, Any] | None,
) -> NormalizationResult:
    """Normalize *raw_args* against *schema* with the default matcher."""
    return _default_matcher.normalize(schema, raw_args)
