"""Best-effort conversion of value-tree leaves toward a destination type."""

from __future__ import annotations

import logging
import re
from typing import Any

from schemabind.binding.tree import ValueNode
from schemabind.reflect.descriptor import describe
from schemabind.reflect.types import Kind
from schemabind.reflect.types import element_type
from schemabind.reflect.types import kind_of
from schemabind.reflect.types import literal_values
from schemabind.reflect.types import map_value_type
from schemabind.reflect.types import strip_annotated
from schemabind.reflect.types import tuple_shape
from schemabind.reflect.types import unwrap_optional

logger = logging.getLogger(__name__)

_TRUE_LITERALS = frozenset({"1", "t", "true"})
_FALSE_LITERALS = frozenset({"0", "f", "false"})
_INTEGER = re.compile(r"^[+-]?[0-9]+$")


def parse_bool(raw: str) -> bool:
    normalized = raw.strip().lower()
    if normalized in _TRUE_LITERALS:
        return True
    if normalized in _FALSE_LITERALS:
        return False
    raise ValueError(f"invalid boolean literal: {raw!r}")


def parse_int(raw: str) -> int:
    text = raw.strip()
    if not _INTEGER.match(text):
        raise ValueError(f"invalid integer literal: {raw!r}")
    return int(text)


def parse_scalar(tp: Any, raw: str) -> Any:
    """Parse one raw string for ``tp``; on failure the string is returned unchanged."""
    inner, optional = unwrap_optional(strip_annotated(tp))
    if optional and raw == "":
        return None

    try:
        return _parse(inner, raw)
    except ValueError:
        logger.debug("Leaving %r unparsed for %r", raw, inner)
        return raw


def _parse(tp: Any, raw: str) -> Any:
    kind = kind_of(tp)
    if kind is Kind.INTEGER:
        return parse_int(raw)
    if kind is Kind.NUMBER:
        return float(raw.strip())
    if kind is Kind.BOOLEAN:
        return parse_bool(raw)
    if kind is Kind.ENUM:
        return _parse_enum_value(tp, raw)
    if kind is Kind.LITERAL:
        for allowed in literal_values(tp):
            if _literal_text(allowed) == raw:
                return allowed
        raise ValueError(f"{raw!r} is not one of the literal values")
    if kind in (Kind.LIST, Kind.SET):
        item_type = element_type(tp)
        return [parse_scalar(item_type, part) for part in raw.split(",")]
    if kind is Kind.TUPLE:
        parts = raw.split(",")
        shape = tuple_shape(tp)
        if shape is None:
            item_type = element_type(tp)
            return [parse_scalar(item_type, part) for part in parts]
        return [
            parse_scalar(shape[index], part) if index < len(shape) else part
            for index, part in enumerate(parts)
        ]
    return raw


def _parse_enum_value(tp: Any, raw: str) -> Any:
    values = [member.value for member in tp]
    for value in values:
        if isinstance(value, str) and value == raw:
            return value
    for value in values:
        if isinstance(value, bool):
            continue
        if isinstance(value, int):
            return parse_int(raw)
        if isinstance(value, float):
            return float(raw.strip())
    return raw


def _literal_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def coerce(value: Any, tp: Any) -> Any:
    """Walk ``value`` alongside ``tp`` and parse scalar leaves.

    Object keys are matched case-insensitively to wire names and rewritten to
    the declared spelling; fields of embedded dataclasses stay at the level
    where they appear. Anything that does not line up with ``tp`` is passed
    through for the strict decoder to reject.
    """
    if isinstance(value, ValueNode):
        value = value.convert()
    if value is None:
        return None
    if isinstance(value, str):
        return parse_scalar(tp, value)

    inner, _ = unwrap_optional(strip_annotated(tp))
    kind = kind_of(inner)
    if isinstance(value, dict):
        if kind is Kind.STRUCT:
            return _coerce_struct(value, inner)
        if kind is Kind.MAP:
            value_type = map_value_type(inner)
            return {key: coerce(item, value_type) for key, item in value.items()}
        return value

    if isinstance(value, list):
        if kind in (Kind.LIST, Kind.SET):
            item_type = element_type(inner)
            return [coerce(item, item_type) for item in _drop_gaps(value, item_type)]
        if kind is Kind.TUPLE:
            shape = tuple_shape(inner)
            if shape is None:
                item_type = element_type(inner)
                return [coerce(item, item_type) for item in _drop_gaps(value, item_type)]
            return [
                coerce(item, shape[index]) if index < len(shape) else item
                for index, item in enumerate(value)
            ]
    return value


def _coerce_struct(document: dict[str, Any], tp: Any) -> dict[str, Any]:
    descriptor = describe(tp)
    coerced: dict[str, Any] = {}
    for key, item in document.items():
        chain = descriptor.lookup(key) if descriptor is not None else None
        if chain is None:
            coerced.setdefault(key, item)
            continue
        leaf = chain[-1]
        coerced.setdefault(leaf.wire_name, coerce(item, leaf.annotation))
    return coerced


def _drop_gaps(items: list[Any], item_type: Any) -> list[Any]:
    """Keep unset array slots only where the element type accepts None."""
    inner, optional = unwrap_optional(strip_annotated(item_type))
    if optional or kind_of(inner) is Kind.ANY:
        return items
    return [item for item in items if item is not None]
