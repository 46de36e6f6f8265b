"""Unit tests for coercion, strict decoding and the per-source binders."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum
import io

from pydantic import ValidationError
import pytest
from starlette.datastructures import UploadFile

from schemabind.binding.binder import UnsupportedContentTypeError
from schemabind.binding.binder import bind_body
from schemabind.binding.binder import bind_form
from schemabind.binding.binder import bind_headers
from schemabind.binding.binder import bind_path
from schemabind.binding.binder import bind_query
from schemabind.binding.coerce import coerce
from schemabind.binding.coerce import parse_scalar
from schemabind.binding.decode import reshape
from schemabind.binding.decode import transfer
from schemabind.binding.tree import build_tree
from schemabind.reflect.descriptor import field


class Color(str, Enum):
    RED = "red"
    BLUE = "blue"


class Level(int, Enum):
    LOW = 1
    HIGH = 2


@dataclass
class Item:
    name: str
    count: int = 0


@dataclass
class Cart:
    items: list[Item] = dataclasses.field(default_factory=list)
    coupon: str | None = None


@dataclass
class Filters:
    limit: int = 10
    ratio: float = 1.0
    active: bool = False
    tags: list[str] = dataclasses.field(default_factory=list)
    ids: list[int] = dataclasses.field(default_factory=list)
    color: Color | None = None
    level: Level = Level.LOW
    since: str | None = None
    page_size: int = field(json="pageSize", default=20)


@dataclass
class Readings:
    values: list[int | None] = dataclasses.field(default_factory=list)


@dataclass
class Audit:
    created_by: str = field(json="createdBy", default="")


@dataclass
class Note:
    audit: Audit = field(embed=True, default_factory=Audit)
    text: str = ""


@dataclass
class Tracing:
    request_id: str = field(json="X-Request-Id", default="")


@dataclass
class ItemPath:
    item_id: int


@dataclass
class Submission:
    title: str
    attachment: str = ""


def test_query_pairs_bind_to_an_array_of_objects() -> None:
    cart = bind_query([("items[0][name]", "a"), ("items[1][name]", "b")], Cart)

    assert cart == Cart(items=[Item(name="a"), Item(name="b")])


def test_sparse_indices_skip_unset_slots_of_non_optional_elements() -> None:
    cart = bind_query([("items[1][name]", "b")], Cart)
    filters = bind_query("ids[2]=5", Filters)

    assert cart == Cart(items=[Item(name="b")])
    assert filters.ids == [5]


def test_sparse_indices_keep_unset_slots_of_optional_elements() -> None:
    readings = bind_query("values[2]=5", Readings)

    assert readings == Readings(values=[None, None, 5])


def test_query_string_scalars_are_coerced() -> None:
    filters = bind_query("limit=5&ratio=0.5&active=t&tags=a,b&ids=1,2&color=red&level=2&since=", Filters)

    assert filters == Filters(
        limit=5,
        ratio=0.5,
        active=True,
        tags=["a", "b"],
        ids=[1, 2],
        color=Color.RED,
        level=Level.HIGH,
        since=None,
    )


def test_flat_values_round_trip_through_the_pipeline() -> None:
    original = Filters(limit=3, ratio=2.5, active=True, page_size=50)
    pairs = [
        ("limit", str(original.limit)),
        ("ratio", str(original.ratio)),
        ("active", "true"),
        ("pageSize", str(original.page_size)),
    ]

    assert transfer(coerce(build_tree(pairs), Filters), Filters) == original


def test_wire_names_match_case_insensitively() -> None:
    filters = bind_query("LIMIT=3&pagesize=40", Filters)

    assert filters.limit == 3
    assert filters.page_size == 40


def test_uncoercible_values_fail_in_the_strict_decoder() -> None:
    with pytest.raises(ValidationError):
        bind_query("limit=abc", Filters)


def test_embedded_fields_bind_at_the_parent_level() -> None:
    expected = Note(audit=Audit(created_by="ann"), text="hi")

    assert bind_query("createdBy=ann&text=hi", Note) == expected
    assert bind_body(b'{"createdBy": "ann", "text": "hi"}', "application/json", Note) == expected


def test_reshape_moves_embedded_keys_and_drops_unknown_ones() -> None:
    assert reshape({"CreatedBy": "ann", "extra": 1}, Note) == {"audit": {"created_by": "ann"}}


def test_json_body_is_decoded_strictly() -> None:
    with pytest.raises(ValidationError):
        bind_body(b'{"limit": "5"}', "application/json", Filters)

    assert bind_body(b'{"limit": 5}', "application/vnd.api+json", Filters).limit == 5


def test_malformed_json_raises_value_error() -> None:
    with pytest.raises(ValueError):
        bind_body(b"{", "application/json", Filters)


def test_urlencoded_body_reuses_the_tree() -> None:
    filters = bind_body(b"limit=7&tags=x", "application/x-www-form-urlencoded; charset=utf-8", Filters)

    assert filters.limit == 7
    assert filters.tags == ["x"]


def test_unsupported_content_type_is_rejected() -> None:
    with pytest.raises(UnsupportedContentTypeError):
        bind_body(b"hello", "text/plain", Filters)


def test_headers_use_the_first_value_per_name() -> None:
    tracing = bind_headers([("x-request-id", "abc"), ("X-Request-Id", "def")], Tracing)

    assert tracing.request_id == "abc"


def test_path_values_are_bound_without_key_splitting() -> None:
    assert bind_path({"item_id": "42"}, ItemPath) == ItemPath(item_id=42)


def test_form_uploads_contribute_their_filename() -> None:
    upload = UploadFile(file=io.BytesIO(b"data"), filename="report.pdf")

    submission = bind_form([("title", "Q3"), ("attachment", upload)], Submission)

    assert submission == Submission(title="Q3", attachment="report.pdf")


def test_parse_scalar_edge_cases() -> None:
    assert parse_scalar(int | None, "") is None
    assert parse_scalar(int, "x") == "x"
    assert parse_scalar(int, "+5") == 5
    assert parse_scalar(int, "1_000") == "1_000"
    assert parse_scalar(Level, "1_0") == "1_0"
    assert parse_scalar(bool, "T") is True
    assert parse_scalar(bool, "0") is False
    assert parse_scalar(bool, "yes") == "yes"
    assert parse_scalar(tuple[int, str], "1,a") == [1, "a"]
    assert parse_scalar(set[int], "1,2") == [1, 2]


def test_coerce_normalises_keys_to_wire_names() -> None:
    assert coerce({"LIMIT": "5", "PAGESIZE": "9"}, Filters) == {"limit": 5, "pageSize": 9}
    assert coerce({"a": "1.5"}, dict[str, float]) == {"a": 1.5}
