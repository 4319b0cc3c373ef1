"""Concept table — canonical argument roles and their surface names.

A *concept* is a semantic role (e.g. ``recipient_email``) that shows up
under many different field names across tool schemas.  Both tables below are
ordered tuples: classification rules are tried top to bottom and synonyms
are scanned left to right, so tie-breaks are stable.
"""

from __future__ import annotations

CONCEPT_SYNONYMS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("recipient_email", ("to", "email", "recipient", "recipient_email", "mail_to", "send_to")),
    ("subject", ("subject", "title", "topic", "headline")),
    ("body", ("body", "message", "msg", "content", "text")),
    ("query", ("q", "query", "search", "keyword", "term")),
    ("url", ("url", "link", "href", "address", "endpoint")),
    ("amount", ("amount", "value", "total", "price")),
    ("date", ("date", "when", "day")),
    ("phone", ("phone", "phone_number", "mobile", "cell")),
)

# (concept, substrings that classify, exact names that classify)
CONCEPT_RULES: tuple[tuple[str, tuple[str, ...], tuple[str, ...]], ...] = (
    ("recipient_email", ("email",), ("to",)),
    ("subject", ("subject", "title"), ()),
    ("body", ("body", "message", "content"), ()),
    ("query", ("query", "search"), ()),
    ("url", ("url", "link"), ()),
    ("amount", ("amount", "total", "price"), ()),
    ("date", ("date", "day"), ()),
    ("phone", ("phone", "mobile"), ()),
)

_SYNONYMS_BY_CONCEPT: dict[str, tuple[str, ...]] = dict(CONCEPT_SYNONYMS)


def classify_concept(name: str) -> str | None:
    """Return the concept a schema property name belongs to, if any."""
    key = name.lower()
    for concept, substrings, exact in CONCEPT_RULES:
        if key in exact or any(part in key for part in substrings):
            return concept
    return None


def synonyms_for(concept: str) -> tuple[str, ...]:
    """Ordered surface names accepted for *concept* (empty if unknown)."""
    return _SYNONYMS_BY_CONCEPT.get(concept, ())
