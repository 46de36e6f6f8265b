"""Named string formats checked when format enforcement is enabled."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date
from datetime import datetime
from datetime import time
import ipaddress
import re

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_HOSTNAME = re.compile(
    r"^(?=.{1,253}$)[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)*$"
)
_UUID = re.compile(r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$")
_URI = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:[^\s]*$")
_DURATION = re.compile(
    r"^P(?!$)(\d+Y)?(\d+M)?(\d+W)?(\d+D)?(T(?=\d)(\d+H)?(\d+M)?(\d+(\.\d+)?S)?)?$"
)
_BYTE = re.compile(r"^(?:[A-Za-z0-9+/]{4})*(?:[A-Za-z0-9+/]{2}==|[A-Za-z0-9+/]{3}=)?$")
_INTEGER = re.compile(r"^-?\d+$")


def _parses(parser: Callable[[str], object]) -> Callable[[str], bool]:
    def check(value: str) -> bool:
        try:
            parser(value)
        except ValueError:
            return False
        return True

    return check


def _iso_datetime(value: str) -> datetime:
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    if "T" not in value.upper():
        raise ValueError("date-time requires a time part")
    return datetime.fromisoformat(value)


def _iso_time(value: str) -> time:
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    return time.fromisoformat(value)


def _bounded_integer(bits: int) -> Callable[[str], bool]:
    low, high = -(2 ** (bits - 1)), 2 ** (bits - 1) - 1

    def check(value: str) -> bool:
        return bool(_INTEGER.match(value)) and low <= int(value) <= high

    return check


FORMAT_CHECKS: dict[str, Callable[[str], bool]] = {
    "date-time": _parses(_iso_datetime),
    "date": _parses(date.fromisoformat),
    "time": _parses(_iso_time),
    "email": lambda value: bool(_EMAIL.match(value)),
    "hostname": lambda value: bool(_HOSTNAME.match(value)),
    "ipv4": _parses(ipaddress.IPv4Address),
    "ipv6": _parses(ipaddress.IPv6Address),
    "uuid": lambda value: bool(_UUID.match(value)),
    "uri": lambda value: bool(_URI.match(value)),
    "duration": lambda value: bool(_DURATION.match(value)),
    "byte": lambda value: bool(_BYTE.match(value)),
    "int32": _bounded_integer(32),
    "int64": _bounded_integer(64),
}


def check_format(format_name: str, value: str) -> bool | None:
    """Return whether ``value`` matches the named format, or ``None`` for unknown formats."""
    check = FORMAT_CHECKS.get(format_name)
    if check is None:
        return None
    return check(value)
