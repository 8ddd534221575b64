from __future__ import annotations

import pytest

from lib_log_context.domain.errors import InvalidLevel
from lib_log_context.domain.levels import LogLevel


def test_levels_are_ordered() -> None:
    assert LogLevel.TRACE < LogLevel.DEBUG < LogLevel.INFO < LogLevel.WARN < LogLevel.ERROR


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("info", LogLevel.INFO),
        (" DEBUG ", LogLevel.DEBUG),
        ("Warning", LogLevel.WARN),
        ("critical", LogLevel.ERROR),
        ("fatal", LogLevel.ERROR),
        (5, LogLevel.TRACE),
        ("30", LogLevel.WARN),
        (LogLevel.ERROR, LogLevel.ERROR),
    ],
)
def test_parse_accepts_names_numbers_and_aliases(raw, expected) -> None:
    assert LogLevel.parse(raw) is expected


@pytest.mark.parametrize("raw", ["loud", "", 15, "15", True, None, 2.5])
def test_parse_rejects_unknown_values(raw) -> None:
    with pytest.raises(InvalidLevel):
        LogLevel.parse(raw)
