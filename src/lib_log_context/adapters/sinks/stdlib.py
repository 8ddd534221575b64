"""Sink that forwards finished records into the standard :mod:`logging` package.

Purpose
-------
Let applications keep their existing handlers and formatters while the core
decides eligibility, renders messages and attaches correlation context.

Contents
--------
* :data:`STDLIB_LEVELS` – mapping from :class:`LogLevel` to ``logging`` numbers.
* :class:`StdlibLoggingSink` – the adapter.

System Role
-----------
Structured fields travel in ``extra={"context": ...}``, the same convention
:mod:`lib_log_context.observability` uses, so one formatter can render both.
``logging`` handlers already report their own failures via ``handleError``,
which makes this sink best-effort from the caller's perspective.
"""

from __future__ import annotations

import logging
from typing import Final

from ...domain.levels import LogLevel
from ...domain.records import LogRecord

TRACE_LEVEL_NAME: Final[str] = "TRACE"

STDLIB_LEVELS: Final[dict[LogLevel, int]] = {
    LogLevel.TRACE: int(LogLevel.TRACE),
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}

if logging.getLevelName(int(LogLevel.TRACE)) != TRACE_LEVEL_NAME:
    logging.addLevelName(int(LogLevel.TRACE), TRACE_LEVEL_NAME)


class StdlibLoggingSink:
    """Emit each record through ``logging.getLogger(prefix + record.logger_name)``.

    Parameters
    ----------
    logger_prefix:
        Optional prefix prepended (with a dot) to every logger name, useful to
        keep forwarded records under one handler tree.

    Examples
    --------
    >>> sink = StdlibLoggingSink(logger_prefix="app")
    >>> sink.target_name("db.pool")
    'app.db.pool'
    """

    def __init__(self, *, logger_prefix: str = "") -> None:
        self._prefix = logger_prefix.strip(".")

    def target_name(self, logger_name: str) -> str:
        if not self._prefix:
            return logger_name
        if not logger_name:
            return self._prefix
        return f"{self._prefix}.{logger_name}"

    def accept(self, record: LogRecord) -> None:
        logger = logging.getLogger(self.target_name(record.logger_name))
        level = STDLIB_LEVELS[record.level]
        if not logger.isEnabledFor(level):
            return
        exc_info = None
        if record.cause is not None:
            exc_info = (type(record.cause), record.cause, record.cause.__traceback__)
        logger.log(
            level,
            record.message,
            exc_info=exc_info,
            extra={
                "context": record.context.as_dict(),
                "template": record.template,
                "record_timestamp": record.timestamp.isoformat(),
            },
        )
