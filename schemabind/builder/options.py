"""Apply parsed field annotations onto a property schema."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from schemabind.schemas.schema import Schema

# ``required`` and ``nullable`` are absent: the builder consumes them when
# deciding the required list and the null wrapper.
_ATTRIBUTES = {
    "title": "title",
    "description": "description",
    "format": "format",
    "pattern": "pattern",
    "deprecated": "deprecated",
    "readonly": "read_only",
    "writeonly": "write_only",
    "enum": "enum",
    "minlength": "min_length",
    "maxlength": "max_length",
    "minitems": "min_items",
    "maxitems": "max_items",
    "multipleof": "multiple_of",
    "minimum": "minimum",
    "maximum": "maximum",
    "exclusiveminimum": "exclusive_minimum",
    "exclusivemaximum": "exclusive_maximum",
}


def has_schema_overrides(options: Mapping[str, Any]) -> bool:
    return any(key in _ATTRIBUTES for key in options)


def apply_options(schema: Schema, options: Mapping[str, Any]) -> Schema:
    """Write annotation values onto ``schema`` in place and return it.

    The caller is responsible for passing an unnamed node it owns.
    """
    for key, value in options.items():
        attribute = _ATTRIBUTES.get(key)
        if attribute is None:
            continue
        if isinstance(value, list):
            value = list(value)
        setattr(schema, attribute, value)
    return schema
