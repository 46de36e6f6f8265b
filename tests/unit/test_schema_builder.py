"""Unit tests for schema derivation from dataclass annotations."""

from __future__ import annotations

from collections.abc import Callable
import dataclasses
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Literal

import pytest

from schemabind.builder.schema_builder import SchemaBuilder
from schemabind.reflect.annotations import AnnotationError
from schemabind.reflect.descriptor import describe
from schemabind.reflect.descriptor import field
from schemabind.schemas.schema import DataType
from schemabind.schemas.schema import Schema


class Color(str, Enum):
    RED = "red"
    GREEN = "green"


@dataclass
class Address:
    street: str
    city: str = field(json="city,omitempty", default="")


@dataclass
class Person:
    name: str = field(api="minlength=1,maxlength=50")
    age: int | None = field(json="age,omitempty", default=None)
    address: Address | None = None
    tags: list[str] = dataclasses.field(default_factory=list)
    note: str = field(json="note,omitempty", default="")
    secret: str = field(json="-", default="")
    _cache: str = ""


@dataclass
class TreeNode:
    value: int
    child: TreeNode | None = None


@dataclass
class Paint:
    color: Color = field(api="description=Primary color")
    nickname: str | None = field(json="nickname,omitempty", api="required", default=None)


@dataclass
class Audit:
    created_by: str = field(json="createdBy", default="")


@dataclass
class Document:
    audit: Audit = field(embed=True, default_factory=Audit)
    title: str = ""


@dataclass
class Pet:
    name: str

    @classmethod
    def api_name(cls) -> str:
        return "pet record"


@dataclass
class Reading:
    value: int | None = field(default=None, api="required")
    source: Address | None = field(default=None, api="required")


class Celsius:
    @classmethod
    def api_base_schema(cls) -> Schema:
        return Schema(type=DataType.NUMBER)

    @classmethod
    def api_description(cls) -> str:
        return "Temperature in degrees Celsius"

    @classmethod
    def api_example(cls) -> float:
        return 21.5


class Money:
    @classmethod
    def api_full_schema(cls) -> Schema:
        return Schema(type=DataType.STRING, pattern=r"^\d+\.\d{2}$")


def test_build_is_idempotent(builder: SchemaBuilder) -> None:
    first = builder.build(Person)
    second = builder.build(Person)

    assert first is second
    assert first.to_dict() == second.to_dict()


def test_struct_schema_lists_properties_and_required_fields(builder: SchemaBuilder) -> None:
    schema = builder.build(Person)

    assert schema.type == DataType.OBJECT
    assert schema.additional_properties is False
    assert list(schema.properties) == ["name", "age", "address", "tags", "note"]
    assert schema.required == ["name", "address", "tags"]
    assert schema.properties["name"].min_length == 1
    assert schema.properties["name"].max_length == 50
    assert builder.build(str).min_length is None


def test_optional_named_type_uses_one_of_reference_and_null(builder: SchemaBuilder) -> None:
    schema = builder.build(Person)

    assert schema.properties["address"].to_dict() == {
        "oneOf": [{"$ref": "#/components/schemas/Address"}, {"type": "null"}],
    }


def test_optional_scalar_uses_inline_nullable_flag(builder: SchemaBuilder) -> None:
    age = builder.build(Person).properties["age"]

    assert age.to_dict() == {"type": "integer", "nullable": True}
    assert age.one_of is None


def test_self_reference_builds_a_finite_schema(builder: SchemaBuilder) -> None:
    schema = builder.build(TreeNode)
    child = schema.properties["child"]

    assert child.to_dict() == {
        "oneOf": [{"$ref": "#/components/schemas/TreeNode"}, {"type": "null"}],
    }
    assert child.one_of[0].resolve() is schema
    assert schema.to_dict()["required"] == ["value", "child"]


def test_named_property_overrides_wrap_the_reference(builder: SchemaBuilder) -> None:
    schema = builder.build(Paint)

    assert schema.properties["color"].to_dict() == {
        "allOf": [{"$ref": "#/components/schemas/Color"}],
        "description": "Primary color",
    }
    assert builder.build(Color).description is None
    assert builder.build(Color).to_dict() == {"type": "string", "enum": ["red", "green"]}


def test_required_annotation_overrides_omitempty(builder: SchemaBuilder) -> None:
    schema = builder.build(Paint)

    assert "nickname" in schema.required


def test_nullable_is_optional_drops_nullable_fields_from_required() -> None:
    builder = SchemaBuilder(nullable_is_optional=True)

    schema = builder.build(Person)

    assert schema.required == ["name", "tags"]


def test_optional_is_nullable_marks_omitempty_fields_nullable() -> None:
    builder = SchemaBuilder(optional_is_nullable=True)

    schema = builder.build(Person)

    assert schema.properties["note"].to_dict() == {"type": "string", "nullable": True}


def test_embedded_fields_are_spliced_into_the_parent(builder: SchemaBuilder) -> None:
    schema = builder.build(Document)

    assert list(schema.properties) == ["createdBy", "title"]
    assert schema.required == ["createdBy", "title"]
    assert "Audit" not in builder.named_schemas()


def test_collection_and_literal_mappings(builder: SchemaBuilder) -> None:
    assert builder.build(set[int]).to_dict() == {
        "type": "array",
        "items": {"type": "integer"},
        "uniqueItems": True,
    }
    assert builder.build(tuple[int, int, int]).to_dict() == {
        "type": "array",
        "items": {"type": "integer"},
        "minItems": 3,
        "maxItems": 3,
    }
    assert builder.build(dict[str, float]).to_dict() == {
        "type": "object",
        "additionalProperties": {"type": "number"},
    }
    assert builder.build(Literal["a", "b"]).to_dict() == {"type": "string", "enum": ["a", "b"]}
    assert builder.build(int | str).to_dict() == {"anyOf": [{"type": "integer"}, {"type": "string"}]}


def test_unsupported_types_have_no_schema(builder: SchemaBuilder) -> None:
    class Opaque:
        pass

    assert builder.build(Callable[[], None]) is None
    assert builder.build(Opaque) is None


def test_default_and_custom_full_schemas(builder: SchemaBuilder) -> None:
    assert builder.build(datetime).to_dict() == {"type": "string", "format": "date-time"}
    assert builder.build(Money).to_dict() == {"type": "string", "pattern": r"^\d+\.\d{2}$"}
    assert "Money" in builder.named_schemas()


def test_registered_full_schema_is_used_verbatim() -> None:
    builder = SchemaBuilder()
    builder.set_full_schema(Address, Schema(type=DataType.STRING, format="address"))

    assert builder.build(Address).to_dict() == {"type": "string", "format": "address"}


def test_custom_name_hook_names_the_schema(builder: SchemaBuilder) -> None:
    builder.build(Pet)

    assert list(builder.named_schemas()) == ["PetRecord"]
    assert builder.components()["schemas"]["PetRecord"]["required"] == ["name"]


def test_name_collisions_fall_back_to_qualified_names(builder: SchemaBuilder) -> None:
    first = dataclasses.make_dataclass("Item", [("a", int)])
    first.__module__ = "shop.models"
    second = dataclasses.make_dataclass("Item", [("b", str)])
    second.__module__ = "warehouse.models"
    third = dataclasses.make_dataclass("Item", [("c", bool)])
    third.__module__ = "warehouse.models"

    builder.build(first)
    builder.build(second)
    builder.build(third)

    assert sorted(builder.named_schemas()) == ["Item", "WarehouseModelsItem"]
    assert list(builder.collisions) == [third]


def test_malformed_annotation_is_rejected_when_described() -> None:
    @dataclass
    class Bad:
        name: str = field(api="minlength=abc", default="")

    with pytest.raises(AnnotationError):
        describe(Bad)


def test_base_schema_values_are_kept_and_introspection_fills_the_rest() -> None:
    builder = SchemaBuilder()
    builder.set_base_schema(Address, Schema(description="Postal address"))

    schema = builder.build(Address)

    assert schema.description == "Postal address"
    assert list(schema.properties) == ["street", "city"]
    assert schema.required == ["street"]


def test_required_annotation_clears_nullable_on_optional_fields(builder: SchemaBuilder) -> None:
    schema = builder.build(Reading)
    value = schema.properties["value"]
    source = schema.properties["source"]

    assert schema.required == ["value", "source"]
    assert not value.is_nullable()
    assert value.to_dict() == {"type": "integer"}
    assert not source.is_nullable()
    assert source.to_dict() == {"$ref": "#/components/schemas/Address"}


def test_description_and_example_hooks_fill_unset_values(builder: SchemaBuilder) -> None:
    schema = builder.build(Celsius)

    assert schema.to_dict() == {
        "type": "number",
        "description": "Temperature in degrees Celsius",
        "example": 21.5,
    }
