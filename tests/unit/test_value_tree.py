"""Unit tests for key-path splitting and value tree assembly."""

from __future__ import annotations

from schemabind.binding.tree import NodeKind
from schemabind.binding.tree import build_tree
from schemabind.binding.tree import split_key


def test_split_key_handles_dots_and_brackets() -> None:
    assert split_key("items[0][name]") == ["items", "0", "name"]
    assert split_key("user.address.city") == ["user", "address", "city"]
    assert split_key("matrix[1].cells[2]") == ["matrix", "1", "cells", "2"]


def test_indexed_pairs_build_an_array_of_objects() -> None:
    tree = build_tree([("items[0][name]", "a"), ("items[1][name]", "b")])

    assert tree.fields["items"].kind is NodeKind.ARRAY
    assert tree.convert() == {"items": [{"name": "a"}, {"name": "b"}]}


def test_arrays_grow_to_highest_index_leaving_gaps() -> None:
    tree = build_tree([("slots[2]", "x"), ("slots[0]", "y")])

    assert tree.convert() == {"slots": ["y", None, "x"]}


def test_first_value_wins_for_repeated_keys() -> None:
    tree = build_tree([("q", "1"), ("q", "2")])

    assert tree.convert() == {"q": "1"}


def test_conflicting_access_is_dropped() -> None:
    scalar_then_object = build_tree([("a", "1"), ("a.b", "2")])
    array_then_object = build_tree([("a[0]", "x"), ("a.b", "y")])

    assert scalar_then_object.convert() == {"a": "1"}
    assert array_then_object.convert() == {"a": ["x"]}


def test_indices_above_the_limit_are_dropped() -> None:
    tree = build_tree([("a[5]", "x"), ("b[3]", "y")], max_index=3)

    assert tree.convert() == {"a": None, "b": [None, None, None, "y"]}


def test_max_index_defaults_to_settings(monkeypatch) -> None:
    monkeypatch.setenv("SCHEMABIND_MAX_ARRAY_INDEX", "1")

    tree = build_tree([("a[2]", "x"), ("a[1]", "y")])

    assert tree.convert() == {"a": [None, "y"]}


def test_flat_keys_are_not_split() -> None:
    tree = build_tree([("user.id", "7"), ("0", "zero")], split=False)

    assert tree.convert() == {"user.id": "7", "0": "zero"}
