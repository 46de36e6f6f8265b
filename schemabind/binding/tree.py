"""Untyped value tree assembled from flat key-path/value pairs."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
import logging
import re
from typing import Any

from schemabind.core.config import get_binder_settings

logger = logging.getLogger(__name__)

_SEGMENT_DELIMITERS = re.compile(r"[\]\[.]+")
_INDEX = re.compile(r"^[0-9]+$")


class NodeKind(str, Enum):
    UNSET = "unset"
    SCALAR = "scalar"
    ARRAY = "array"
    OBJECT = "object"


def split_key(key: str) -> list[str]:
    """Split ``items[0][name]`` style keys into ``["items", "0", "name"]``."""
    key = key.rstrip("]")
    if not key:
        return []
    return _SEGMENT_DELIMITERS.split(key)


class ValueNode:
    """One node of the tree; its kind is fixed by the first access."""

    __slots__ = ("kind", "value", "items", "fields")

    def __init__(self) -> None:
        self.kind = NodeKind.UNSET
        self.value: str | None = None
        self.items: list[ValueNode | None] = []
        self.fields: dict[str, ValueNode] = {}

    def __repr__(self) -> str:
        return f"ValueNode({self.kind.value}, {self.convert()!r})"

    def get(self, segment: str, *, max_index: int) -> ValueNode | None:
        """Child for ``segment``, created on demand; ``None`` when the access conflicts."""
        if _INDEX.match(segment):
            index = int(segment)
            if index > max_index:
                logger.debug("Dropping array index %d above the limit of %d", index, max_index)
                return None
            if not self._fix(NodeKind.ARRAY, segment):
                return None
            if index >= len(self.items):
                self.items.extend([None] * (index + 1 - len(self.items)))
            child = self.items[index]
            if child is None:
                child = self.items[index] = ValueNode()
            return child

        if not self._fix(NodeKind.OBJECT, segment):
            return None
        child = self.fields.get(segment)
        if child is None:
            child = self.fields[segment] = ValueNode()
        return child

    def set(self, value: str) -> bool:
        """Store a scalar; the first value for a node wins."""
        if self.kind is not NodeKind.UNSET:
            logger.debug("Ignoring value %r for an already %s node", value, self.kind.value)
            return False
        self.kind = NodeKind.SCALAR
        self.value = value
        return True

    def convert(self) -> Any:
        """Plain ``str``/``list``/``dict`` form with unset nodes as ``None``."""
        if self.kind is NodeKind.SCALAR:
            return self.value
        if self.kind is NodeKind.ARRAY:
            return [None if item is None else item.convert() for item in self.items]
        if self.kind is NodeKind.OBJECT:
            return {name: child.convert() for name, child in self.fields.items()}
        return None

    def _fix(self, kind: NodeKind, segment: str) -> bool:
        if self.kind is NodeKind.UNSET:
            self.kind = kind
            return True
        if self.kind is kind:
            return True
        logger.debug("Dropping segment %r on a %s node", segment, self.kind.value)
        return False


def build_tree(
    pairs: Iterable[tuple[str, str]],
    *,
    split: bool = True,
    max_index: int | None = None,
) -> ValueNode:
    """Assemble pairs into a tree rooted at an object node.

    With ``split=False`` every key is taken literally as one segment, which
    is how matched route parameters are bound.
    """
    if max_index is None:
        max_index = get_binder_settings().max_array_index

    root = ValueNode()
    root.kind = NodeKind.OBJECT
    for key, value in pairs:
        segments = split_key(key) if split else [key]
        if not segments:
            continue

        node: ValueNode | None = root
        for segment in segments[:-1]:
            node = node.get(segment, max_index=max_index)
            if node is None:
                break
        if node is None:
            continue

        # The leaf of a flat key is a field name, never an index.
        leaf = node.get(segments[-1], max_index=max_index) if split else _field(node, segments[-1])
        if leaf is not None:
            leaf.set(value)
    return root


def _field(node: ValueNode, name: str) -> ValueNode:
    child = node.fields.get(name)
    if child is None:
        child = node.fields[name] = ValueNode()
    return child
