"""Lock-step validation of a value against a schema."""

from __future__ import annotations

from collections.abc import Mapping
import dataclasses
from decimal import Decimal
from decimal import InvalidOperation
from enum import Enum
from functools import lru_cache
import logging
import re
from typing import Any

from schemabind.reflect.descriptor import describe
from schemabind.reflect.hooks import CanValidateFull
from schemabind.reflect.hooks import CanValidatePost
from schemabind.schemas.schema import DataType
from schemabind.schemas.schema import Schema
from schemabind.schemas.validation import ValidationRule
from schemabind.validation.formats import check_format
from schemabind.validation.validator import Validator

logger = logging.getLogger(__name__)

_SEQUENCE_TYPES = (list, tuple, set, frozenset)
_SCALAR_TYPES = (bool, int, float, complex, str, bytes, Decimal)


def to_string(value: Any) -> str:
    """Textual form used for pattern, format, enum and uniqueness comparisons."""
    if isinstance(value, Enum):
        value = value.value
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(to_string(item) for item in value) + "]"
    return str(value)


@lru_cache(maxsize=512)
def _compile_pattern(pattern: str) -> re.Pattern[str] | None:
    try:
        return re.compile(pattern)
    except re.error:
        logger.debug("Ignoring invalid schema pattern %r", pattern)
        return None


def _is_zero(value: Any) -> bool:
    if isinstance(value, Enum):
        return _is_zero(value.value)
    if isinstance(value, _SCALAR_TYPES + _SEQUENCE_TYPES + (dict,)):
        return not value
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return all(_is_zero(getattr(value, item.name)) for item in dataclasses.fields(value))
    return value is None


def validate(schema: Schema | None, value: Any, v: Validator) -> None:
    """Validate ``value`` against ``schema``, appending failures to ``v``."""
    if isinstance(value, CanValidateFull) and not isinstance(value, type):
        value.full_validate(v)
        return

    if schema is None:
        return
    schema = schema.resolve()

    options = v.options_for(type(value))
    if options.skip:
        return

    name = schema.name
    if value is None:
        if not schema.is_nullable() and schema.type != DataType.NULL:
            v.fail(ValidationRule.NULLABLE, "null is not an allowed value", schema_name=name)
        return
    if schema.type == DataType.NULL:
        v.fail(ValidationRule.TYPE, f"{to_string(value)} is not null", schema_name=name)
        return

    if schema.deprecated and options.fail_deprecated and not _is_zero(value):
        v.fail(ValidationRule.DEPRECATED, f"{to_string(value)} is a deprecated value", schema_name=name)

    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        _validate_number(schema, value, v)
    elif isinstance(value, str):
        _validate_string(schema, value, v)
    elif isinstance(value, _SEQUENCE_TYPES):
        _validate_sequence(schema, value, v)
    elif isinstance(value, Mapping):
        _validate_mapping(schema, value, v)
    elif dataclasses.is_dataclass(value) and not isinstance(value, type):
        _validate_struct(schema, value, v)

    _validate_text_rules(schema, value, v, enforce_format=options.enforce_format)
    _validate_composites(schema, value, v)

    if isinstance(value, CanValidatePost):
        value.post_validate(v)


def _validate_number(schema: Schema, value: int | float | Decimal, v: Validator) -> None:
    number = float(value) if isinstance(value, Decimal) else value
    text = to_string(value)
    name = schema.name

    if schema.maximum is not None:
        if (schema.exclusive_maximum and number >= schema.maximum) or number > schema.maximum:
            v.fail(
                ValidationRule.MAXIMUM,
                f"{text} exceeds the maximum of {to_string(schema.maximum)}",
                schema_name=name,
            )
    if schema.minimum is not None:
        if (schema.exclusive_minimum and number <= schema.minimum) or number < schema.minimum:
            v.fail(
                ValidationRule.MINIMUM,
                f"{text} is below the minimum of {to_string(schema.minimum)}",
                schema_name=name,
            )
    if schema.multiple_of:
        if not _is_multiple(value, schema.multiple_of):
            v.fail(
                ValidationRule.MULTIPLE_OF,
                f"{text} is not a multiple of {to_string(schema.multiple_of)}",
                schema_name=name,
            )


def _is_multiple(value: int | float | Decimal, divisor: float) -> bool:
    try:
        return Decimal(str(value)) % Decimal(str(divisor)) == 0
    except InvalidOperation:
        return False


def _validate_string(schema: Schema, value: str, v: Validator) -> None:
    length = len(value)
    if schema.min_length is not None and length < schema.min_length:
        v.fail(
            ValidationRule.MIN_LENGTH,
            f"{length} does not meet the minimum length of {schema.min_length}",
            schema_name=schema.name,
        )
    if schema.max_length is not None and length > schema.max_length:
        v.fail(
            ValidationRule.MAX_LENGTH,
            f"{length} exceeds the maximum length of {schema.max_length}",
            schema_name=schema.name,
        )


def _validate_sequence(schema: Schema, value: Any, v: Validator) -> None:
    items = list(value)
    count = len(items)
    if schema.min_items is not None and count < schema.min_items:
        v.fail(
            ValidationRule.MIN_ITEMS,
            f"{count} does not meet the minimum items of {schema.min_items}",
            schema_name=schema.name,
        )
    if schema.max_items is not None and count > schema.max_items:
        v.fail(
            ValidationRule.MAX_ITEMS,
            f"{count} exceeds the maximum items of {schema.max_items}",
            schema_name=schema.name,
        )

    if schema.items is not None:
        for index, item in enumerate(items):
            validate(schema.items, item, v.next(index))

    if schema.unique_items:
        seen: set[str] = set()
        for item in items:
            key = to_string(item)
            if key in seen:
                v.fail(ValidationRule.UNIQUE_ITEMS, f"{key} is not a unique item", schema_name=schema.name)
                break
            seen.add(key)


def _validate_mapping(schema: Schema, value: Mapping[Any, Any], v: Validator) -> None:
    count = len(value)
    if schema.min_properties is not None and count < schema.min_properties:
        v.fail(
            ValidationRule.MIN_PROPERTIES,
            f"{count} does not meet the minimum properties of {schema.min_properties}",
            schema_name=schema.name,
        )
    if schema.max_properties is not None and count > schema.max_properties:
        v.fail(
            ValidationRule.MAX_PROPERTIES,
            f"{count} exceeds the maximum properties of {schema.max_properties}",
            schema_name=schema.name,
        )

    required = schema.required or []
    for key in required:
        if value.get(key) is None:
            v.next(key).fail(ValidationRule.REQUIRED, f"{key} is a required field", schema_name=schema.name)

    properties = schema.properties or {}
    additional = schema.additional_properties if isinstance(schema.additional_properties, Schema) else None
    for key, item in value.items():
        key_text = to_string(key)
        property_schema = properties.get(key_text)
        if property_schema is not None:
            if item is not None:
                validate(property_schema, item, v.next(key_text))
        elif additional is not None and not (item is None and key_text in required):
            validate(additional, item, v.next(key_text))


def _validate_struct(schema: Schema, value: Any, v: Validator) -> None:
    descriptor = describe(type(value))
    if descriptor is None:
        return

    required = {name.lower() for name in schema.required or []}
    properties = schema.properties or {}
    for item in descriptor.fields:
        field_value = getattr(value, item.name, None)
        if field_value is None:
            if item.wire_name.lower() in required:
                v.next(item.wire_name).fail(
                    ValidationRule.REQUIRED,
                    f"{item.wire_name} is a required field",
                    schema_name=schema.name,
                )
            continue

        if item.embedded and item.descriptor is not None:
            _validate_struct(schema, field_value, v.next(item.wire_name))
            continue

        property_schema = properties.get(item.wire_name)
        if property_schema is not None:
            validate(property_schema, field_value, v.next(item.wire_name))


def _validate_text_rules(schema: Schema, value: Any, v: Validator, *, enforce_format: bool) -> None:
    if schema.pattern:
        pattern = _compile_pattern(schema.pattern)
        text = to_string(value)
        if pattern is not None and pattern.search(text) is None:
            v.fail(
                ValidationRule.PATTERN,
                f"{text} does not match the pattern {schema.pattern}",
                schema_name=schema.name,
            )

    if schema.format and enforce_format:
        text = to_string(value)
        if check_format(schema.format, text) is False:
            v.fail(
                ValidationRule.FORMAT,
                f"{text} does not match the format {schema.format}",
                schema_name=schema.name,
            )

    if schema.enum:
        text = to_string(value)
        if not any(to_string(allowed) == text for allowed in schema.enum):
            v.fail(
                ValidationRule.ENUM,
                f"{text} does not match one of the enum values {to_string(schema.enum)}",
                schema_name=schema.name,
            )


def _passes(schema: Schema, value: Any, v: Validator) -> bool:
    """Validate against a detached cursor; only the outcome reaches the caller."""
    detached = v.detach()
    validate(schema, value, detached)
    return detached.is_valid()


def _validate_composites(schema: Schema, value: Any, v: Validator) -> None:
    text = to_string(value)

    if schema.one_of:
        matches = 0
        for branch in schema.one_of:
            if _passes(branch, value, v):
                matches += 1
                if matches > 1:
                    break
        if matches != 1:
            v.fail(
                ValidationRule.ONE_OF,
                f"{text} does not match exactly one of the possible schemas",
                schema_name=schema.name,
            )

    if schema.all_of:
        for branch in schema.all_of:
            if not _passes(branch, value, v):
                v.fail(
                    ValidationRule.ALL_OF,
                    f"{text} does not match all of the possible schemas",
                    schema_name=schema.name,
                )
                break

    if schema.any_of:
        if not any(_passes(branch, value, v) for branch in schema.any_of):
            v.fail(
                ValidationRule.ANY_OF,
                f"{text} does not match any of the possible schemas",
                schema_name=schema.name,
            )

    if schema.not_ is not None:
        if _passes(schema.not_, value, v):
            v.fail(ValidationRule.NOT, f"{text} matches the not schema", schema_name=schema.name)
