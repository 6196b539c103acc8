from datetime import timedelta

import pytest

from config import _parse_timedelta


@pytest.mark.parametrize(
    ["value", "expected"],
    [
        ("5d", timedelta(days=5)),
        ("1h", timedelta(hours=1)),
        ("90m", timedelta(minutes=90)),
        ("1.5h", timedelta(hours=1.5)),
        (timedelta(seconds=3), timedelta(seconds=3)),
    ],
)
def test_parse_timedelta(value, expected: timedelta):
    assert _parse_timedelta(value) == expected


@pytest.mark.parametrize("value", ["5y", "abc"])
def test_parse_timedelta_invalid(value: str):
    with pytest.raises(AssertionError):
        _parse_timedelta(value)
