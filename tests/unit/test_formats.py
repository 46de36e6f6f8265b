"""Unit tests for the named string format registry."""

from __future__ import annotations

import pytest

from schemabind.validation.formats import check_format


@pytest.mark.parametrize(
    ("format_name", "value"),
    [
        ("date-time", "2024-05-01T10:30:00Z"),
        ("date", "2024-05-01"),
        ("time", "10:30:00"),
        ("email", "dev@example.com"),
        ("hostname", "api.example.com"),
        ("ipv4", "192.168.0.1"),
        ("ipv6", "::1"),
        ("uuid", "3f2504e0-4f89-11d3-9a0c-0305e82c3301"),
        ("uri", "https://example.com/a?b=c"),
        ("duration", "P1DT2H"),
        ("byte", "aGVsbG8="),
        ("int32", "-2147483648"),
        ("int64", "9223372036854775807"),
    ],
)
def test_valid_values_match_their_format(format_name: str, value: str) -> None:
    assert check_format(format_name, value) is True


@pytest.mark.parametrize(
    ("format_name", "value"),
    [
        ("date-time", "2024-05-01"),
        ("date", "05/01/2024"),
        ("email", "dev@"),
        ("hostname", "-bad-.com"),
        ("ipv4", "256.1.1.1"),
        ("ipv6", "12345::"),
        ("uuid", "not-a-uuid"),
        ("uri", "no scheme"),
        ("duration", "P"),
        ("byte", "abc"),
        ("int32", "2147483648"),
        ("int64", "1.5"),
    ],
)
def test_invalid_values_do_not_match(format_name: str, value: str) -> None:
    assert check_format(format_name, value) is False


def test_unknown_formats_are_not_checked() -> None:
    assert check_format("password", "hunter2") is None
