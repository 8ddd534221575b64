"""Verbosity thresholds shared by the gate, the records, and the sinks.

Purpose
-------
Define the ordered level enumeration used everywhere a logging decision is
made. Numeric values line up with the standard library (``DEBUG=10`` …
``ERROR=40``) so sinks forwarding into :mod:`logging` need no lookup table for
the common levels.

Contents
--------
* :class:`LogLevel` – ``IntEnum`` ordered ``TRACE < DEBUG < INFO < WARN < ERROR``.
* :data:`_ALIASES` – alternative spellings accepted by :meth:`LogLevel.parse`.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Final

from .errors import InvalidLevel


class LogLevel(IntEnum):
    """Ordered verbosity threshold.

    A call at level ``L`` passes a logger whose effective threshold is ``T``
    iff ``L >= T``.

    Examples
    --------
    >>> LogLevel.DEBUG < LogLevel.INFO
    True
    >>> LogLevel.parse("warning") is LogLevel.WARN
    True
    """

    TRACE = 5
    DEBUG = 10
    INFO = 20
    WARN = 30
    ERROR = 40

    @classmethod
    def parse(cls, value: LogLevel | int | str) -> LogLevel:
        """Coerce *value* into a :class:`LogLevel` or raise :class:`InvalidLevel`.

        Why
        ----
        Levels arrive from environment variables, CLI options, and plain
        mappings; each source spells them differently.

        What
        ----
        Accepts members, integers (or digit strings) equal to a member value,
        and case-insensitive names (including the aliases in :data:`_ALIASES`).

        Examples
        --------
        >>> LogLevel.parse(10)
        <LogLevel.DEBUG: 10>
        >>> LogLevel.parse(" Fatal ")
        <LogLevel.ERROR: 40>
        >>> LogLevel.parse("loud")
        Traceback (most recent call last):
        ...
        lib_log_context.domain.errors.InvalidLevel: Unknown log level: 'loud'
        """

        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError as exc:
                raise InvalidLevel(f"Unknown log level: {value!r}") from exc
        if isinstance(value, str) and value.strip().isdigit():
            return cls.parse(int(value))
        if isinstance(value, str):
            name = value.strip().upper()
            name = _ALIASES.get(name, name)
            member = cls.__members__.get(name)
            if member is not None:
                return member
        raise InvalidLevel(f"Unknown log level: {value!r}")


_ALIASES: Final[dict[str, str]] = {
    "WARNING": "WARN",
    "FATAL": "ERROR",
    "CRITICAL": "ERROR",
}
"""Alternative level names accepted from configuration sources."""
