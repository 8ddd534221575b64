"""Reference sinks: in-memory collection and forwarding into ``logging``."""

from __future__ import annotations

import logging
import threading

import pytest

from lib_log_context.adapters.sinks.memory import CallbackSink, CollectingSink
from lib_log_context.adapters.sinks.stdlib import StdlibLoggingSink
from lib_log_context.domain.levels import LogLevel
from lib_log_context.domain.records import ContextSnapshot, LogRecord


def make_record(level: LogLevel = LogLevel.INFO, *, cause: BaseException | None = None) -> LogRecord:
    return LogRecord(
        level=level,
        logger_name="svc.orders",
        template="order {} shipped",
        args=("o-1",),
        message="order o-1 shipped",
        cause=cause,
        context=ContextSnapshot({"request_id": "r-5"}),
    )


def test_collecting_sink_is_thread_safe() -> None:
    sink = CollectingSink()

    def produce() -> None:
        for _ in range(200):
            sink.accept(make_record())

    threads = [threading.Thread(target=produce) for _ in range(5)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert len(sink.records) == 1000
    assert sink.messages[0] == "order o-1 shipped"


def test_collecting_sink_filters_and_clears() -> None:
    sink = CollectingSink()
    sink.accept(make_record(LogLevel.INFO))
    sink.accept(make_record(LogLevel.ERROR))
    assert [record.level for record in sink.at_level(LogLevel.ERROR)] == [LogLevel.ERROR]
    sink.clear()
    assert sink.records == ()


def test_callback_sink_forwards() -> None:
    received: list[LogRecord] = []
    sink = CallbackSink(received.append)
    record = make_record()
    sink.accept(record)
    assert received == [record]


def test_stdlib_sink_forwards_context_and_cause(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="svc")
    try:
        raise ValueError("carrier lost")
    except ValueError as exc:
        error = exc
    StdlibLoggingSink().accept(make_record(LogLevel.WARN, cause=error))
    record = caplog.records[-1]
    assert record.name == "svc.orders"
    assert record.levelno == logging.WARNING
    assert record.getMessage() == "order o-1 shipped"
    assert getattr(record, "context") == {"request_id": "r-5"}
    assert record.exc_info is not None and record.exc_info[1] is error


def test_stdlib_sink_maps_trace_below_debug(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(1, logger="svc")
    StdlibLoggingSink().accept(make_record(LogLevel.TRACE))
    record = caplog.records[-1]
    assert record.levelno == int(LogLevel.TRACE)
    assert record.levelname == "TRACE"


def test_stdlib_sink_respects_handler_levels(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.ERROR, logger="svc")
    StdlibLoggingSink().accept(make_record(LogLevel.INFO))
    assert not [record for record in caplog.records if record.name == "svc.orders"]


def test_stdlib_sink_prefix() -> None:
    sink = StdlibLoggingSink(logger_prefix="app.")
    assert sink.target_name("db") == "app.db"
    assert sink.target_name("") == "app"
    assert StdlibLoggingSink().target_name("db") == "db"
