"""Tokenizers for field markers.

Two small languages live in dataclass field metadata:

* ``json``: ``"wire_name[,omitempty]"``; a wire name of ``-`` skips the field.
* ``api``: ``"key=value[,key=value...]"`` schema overrides; a key without a
  value is a flag. A backslash escapes a following delimiter.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

_PLACEHOLDER = "\x00"


class AnnotationError(ValueError):
    """Raised when a field annotation cannot be parsed."""


@dataclass(frozen=True)
class WireOptions:
    """Parsed ``json`` marker of a field."""

    name: str
    optional: bool
    skip: bool


def split_with_escape(value: str, delimiter: str, escape: str = "\\") -> list[str]:
    """Split ``value`` on ``delimiter`` unless the delimiter is preceded by ``escape``."""
    protected = value.replace(escape + delimiter, _PLACEHOLDER)
    return [token.replace(_PLACEHOLDER, delimiter) for token in protected.split(delimiter)]


def parse_wire_options(marker: str | None, default_name: str) -> WireOptions:
    """Derive the wire name and optionality from a ``json`` marker."""
    if not marker:
        return WireOptions(name=default_name, optional=False, skip=False)

    tokens = marker.split(",")
    optional = len(tokens) > 1 and tokens[1].strip().lower() == "omitempty"
    name = tokens[0].strip()
    if name == "-":
        return WireOptions(name=default_name, optional=optional, skip=True)
    return WireOptions(name=name or default_name, optional=optional, skip=False)


_KEY_ALIASES = {
    "desc": "description",
    "null": "nullable",
    "min": "minimum",
    "max": "maximum",
    "exclusivemin": "exclusiveminimum",
    "exclusivemax": "exclusivemaximum",
}
_TEXT_KEYS = frozenset({"title", "description", "format", "pattern"})
_FLAG_KEYS = frozenset(
    {
        "deprecated",
        "required",
        "nullable",
        "readonly",
        "writeonly",
        "exclusivemaximum",
        "exclusiveminimum",
    }
)
_INTEGER_KEYS = frozenset({"minlength", "maxlength", "minitems", "maxitems"})
_NUMBER_KEYS = frozenset({"multipleof", "minimum", "maximum"})


def parse_api_options(tag: str | None) -> dict[str, Any]:
    """Parse an ``api`` annotation into a canonical key to typed value map.

    Aliases collapse onto one key (``min`` -> ``minimum``), numbers and flags
    are converted, ``enum`` becomes a list. Unknown keys are ignored and later
    occurrences of a key win.
    """
    options: dict[str, Any] = {}
    if not tag:
        return options

    for raw_option in split_with_escape(tag, ","):
        raw_key, separator, raw_value = raw_option.partition("=")
        key = raw_key.strip().lower()
        key = _KEY_ALIASES.get(key, key)
        value = raw_value if separator else None

        if key in _TEXT_KEYS:
            options[key] = value or ""
        elif key in _FLAG_KEYS:
            options[key] = parse_flag(key, value)
        elif key in _INTEGER_KEYS:
            number = parse_number(key, value)
            if not isinstance(number, int):
                raise AnnotationError(f"Annotation `{key}` requires an integer, got {value}")
            options[key] = number
        elif key in _NUMBER_KEYS:
            options[key] = parse_number(key, value)
        elif key == "enum":
            options[key] = parse_enum_values(value or "")
    return options


def parse_enum_values(value: str) -> list[str]:
    """Split a pipe separated enum list, dropping empty entries."""
    return [constant for constant in split_with_escape(value, "|") if constant != ""]


def parse_number(key: str, value: str | None) -> int | float:
    if value is None:
        raise AnnotationError(f"Annotation `{key}` requires a numeric value")
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError as exc:
        raise AnnotationError(f"Error parsing `{key}` from annotation: {value}") from exc


def parse_flag(key: str, value: str | None) -> bool:
    """Parse a boolean annotation value; a bare key means ``True``."""
    if value is None:
        return True
    normalized = value.strip().lower()
    if normalized in {"1", "t", "true"}:
        return True
    if normalized in {"0", "f", "false"}:
        return False
    raise AnnotationError(f"Error parsing `{key}` from annotation: {value}")
