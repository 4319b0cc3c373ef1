"""Schema normalization — reduce any declared parameter shape to an ObjectSchema.

Servers describe tool parameters in several ways: a proper JSON-Schema
object, a flat list of field descriptors, or nothing at all.  Everything
funnels through :func:`normalize_schema`, which never raises.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from toolbridge.core.normalization.models import PROPERTY_TYPES, ObjectSchema, PropertySchema


def normalize_schema(raw: Any) -> ObjectSchema:
    """Convert *raw* into an :class:`ObjectSchema`.

    Accepted shapes::

        {"type": "object", "properties": {...}, "required": [...]}
        [{"name": "to", "type": "string", "required": true}, ...]

    Anything else (``None``, scalars, empty containers, unknown mappings)
    yields an empty schema.
    """
    if isinstance(raw, ObjectSchema):
        return raw
    if isinstance(raw, Mapping):
        return _from_json_schema(raw)
    if isinstance(raw, Sequence) and not isinstance(raw, (str, bytes)):
        return _from_field_list(raw)
    return ObjectSchema()


def _from_json_schema(raw: Mapping[str, Any]) -> ObjectSchema:
    properties = raw.get("properties")
    if raw.get("type", "object") != "object" or not isinstance(properties, Mapping):
        return ObjectSchema()

    props = {
        str(name): _property(spec if isinstance(spec, Mapping) else {})
        for name, spec in properties.items()
    }
    required = raw.get("required")
    names: list[str] = []
    if isinstance(required, Sequence) and not isinstance(required, str):
        for name in required:
            if name in props and name not in names:
                names.append(name)
    return ObjectSchema(properties=props, required=tuple(names))


def _from_field_list(fields: Sequence[Any]) -> ObjectSchema:
    props: dict[str, PropertySchema] = {}
    required: list[str] = []
    for field in fields:
        if not isinstance(field, Mapping) or not field.get("name"):
            continue
        name = str(field["name"])
        props[name] = _property({"type": field.get("type") or "string", **_described(field)})
        if field.get("required") and name not in required:
            required.append(name)
    return ObjectSchema(properties=props, required=tuple(required))


def _described(field: Mapping[str, Any]) -> dict[str, Any]:
    description = field.get("description")
    return {"description": description} if isinstance(description, str) else {}


def _property(spec: Mapping[str, Any]) -> PropertySchema:
    declared = spec.get("type")
    # JSON Schema allows a list of types; the first concrete one wins.
    if isinstance(declared, list):
        declared = next((t for t in declared if _known_type(t)), None)
    description = spec.get("description")
    return PropertySchema(
        type=declared if _known_type(declared) else "unspecified",
        description=description if isinstance(description, str) else "",
    )


def _known_type(value: Any) -> bool:
    return isinstance(value, str) and value in PROPERTY_TYPES
