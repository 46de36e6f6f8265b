"""Structural classification of type annotations."""

from __future__ import annotations

import collections.abc
import dataclasses
from enum import Enum
import types
from typing import Annotated
from typing import Any
from typing import Literal
from typing import Union
from typing import get_args
from typing import get_origin

NONE_TYPE = type(None)

_LIST_ORIGINS = frozenset(
    {
        list,
        collections.abc.Sequence,
        collections.abc.MutableSequence,
        collections.abc.Iterable,
        collections.abc.Collection,
    }
)
_SET_ORIGINS = frozenset({set, frozenset, collections.abc.Set, collections.abc.MutableSet})
_MAP_ORIGINS = frozenset({dict, collections.abc.Mapping, collections.abc.MutableMapping})


class Kind(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    LIST = "list"
    SET = "set"
    TUPLE = "tuple"
    MAP = "map"
    STRUCT = "struct"
    ENUM = "enum"
    LITERAL = "literal"
    UNION = "union"
    ANY = "any"
    UNSUPPORTED = "unsupported"


def strip_annotated(tp: Any) -> Any:
    """Remove ``Annotated`` layers, keeping the underlying type."""
    while get_origin(tp) is Annotated:
        tp = get_args(tp)[0]
    return tp


def _is_union(tp: Any) -> bool:
    origin = get_origin(tp)
    return origin is Union or origin is types.UnionType


def unwrap_optional(tp: Any) -> tuple[Any, bool]:
    """Split ``X | None`` into ``(X, True)``; other types return ``(tp, False)``."""
    tp = strip_annotated(tp)
    if not _is_union(tp):
        return tp, False

    members = get_args(tp)
    remaining = tuple(member for member in members if member is not NONE_TYPE)
    if len(remaining) == len(members):
        return tp, False
    if len(remaining) == 1:
        return strip_annotated(remaining[0]), True
    return Union[remaining], True


def is_struct(tp: Any) -> bool:
    return isinstance(tp, type) and dataclasses.is_dataclass(tp)


def kind_of(tp: Any) -> Kind:
    """Classify a (non-optional) annotation into the kind the builder and binder dispatch on."""
    tp = strip_annotated(tp)
    if tp is Any or tp is object:
        return Kind.ANY

    origin = get_origin(tp)
    if origin is Literal:
        return Kind.LITERAL
    if _is_union(tp):
        return Kind.UNION
    if origin is not None:
        if origin in _LIST_ORIGINS:
            return Kind.LIST
        if origin in _SET_ORIGINS:
            return Kind.SET
        if origin is tuple:
            return Kind.TUPLE
        if origin in _MAP_ORIGINS:
            return Kind.MAP
        return Kind.UNSUPPORTED

    if not isinstance(tp, type):
        return Kind.UNSUPPORTED
    if issubclass(tp, Enum):
        return Kind.ENUM
    if issubclass(tp, bool):
        return Kind.BOOLEAN
    if issubclass(tp, int):
        return Kind.INTEGER
    if issubclass(tp, float):
        return Kind.NUMBER
    if issubclass(tp, str):
        return Kind.STRING
    if is_struct(tp):
        return Kind.STRUCT
    if tp is list:
        return Kind.LIST
    if tp in (set, frozenset):
        return Kind.SET
    if tp is tuple:
        return Kind.TUPLE
    if tp is dict:
        return Kind.MAP
    return Kind.UNSUPPORTED


def element_type(tp: Any) -> Any:
    """Element type of a list, set or variadic tuple annotation."""
    args = get_args(strip_annotated(tp))
    if not args:
        return Any
    return args[0]


def tuple_shape(tp: Any) -> tuple[Any, ...] | None:
    """Positional types of a fixed-length tuple, or ``None`` when it is variadic."""
    args = get_args(strip_annotated(tp))
    if not args or (len(args) == 2 and args[1] is Ellipsis):
        return None
    return args


def map_value_type(tp: Any) -> Any:
    args = get_args(strip_annotated(tp))
    if len(args) != 2:
        return Any
    return args[1]


def union_members(tp: Any) -> tuple[Any, ...]:
    return get_args(strip_annotated(tp))


def literal_values(tp: Any) -> list[Any]:
    return list(get_args(strip_annotated(tp)))
