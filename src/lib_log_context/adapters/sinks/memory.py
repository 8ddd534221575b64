"""In-memory sink used by tests and diagnostic tooling."""

from __future__ import annotations

import threading
from typing import Callable

from ...domain.levels import LogLevel
from ...domain.records import LogRecord


class CollectingSink:
    """Thread-safe list of accepted records.

    Examples
    --------
    >>> sink = CollectingSink()
    >>> sink.records
    ()
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: list[LogRecord] = []

    def accept(self, record: LogRecord) -> None:
        with self._lock:
            self._records.append(record)

    @property
    def records(self) -> tuple[LogRecord, ...]:
        with self._lock:
            return tuple(self._records)

    @property
    def messages(self) -> list[str]:
        return [record.message for record in self.records]

    def at_level(self, level: LogLevel) -> list[LogRecord]:
        return [record for record in self.records if record.level is level]

    def clear(self) -> None:
        with self._lock:
            self._records.clear()


class CallbackSink:
    """Forward every record to a plain callable."""

    def __init__(self, callback: Callable[[LogRecord], None]) -> None:
        self._callback = callback

    def accept(self, record: LogRecord) -> None:
        self._callback(record)
