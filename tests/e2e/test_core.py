"""End-to-end flows through the composition root.

These tests follow the documented call sequence (gate check, scoped context,
render, sink hand-off) across threads and reloads.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

import pytest

from lib_log_context import (
    CollectingSink,
    ContextStore,
    EnvLevelProvider,
    LevelConfig,
    LogCore,
    LogLevel,
    PropagatingExecutor,
    ScopeOrderError,
    StdlibLoggingSink,
    create_core,
    lazy,
)


def test_emit_builds_record_with_context_and_cause() -> None:
    sink = CollectingSink()
    core = LogCore(sink, config={"orders": "debug"})
    error = TimeoutError("carrier timeout")
    with core.open("request_id", "r-100"), core.open("tenant", "acme"):
        record = core.emit("orders.shipping", LogLevel.WARN, "Shipment {} delayed", "s-9", error)
    assert record is not None
    assert sink.records == (record,)
    assert record.message == "Shipment s-9 delayed"
    assert record.args == ("s-9",)
    assert record.cause is error
    assert record.context == {"request_id": "r-100", "tenant": "acme"}
    assert record.template == "Shipment {} delayed"
    assert core.context() == {}


def test_disabled_level_skips_rendering_and_sink() -> None:
    sink = CollectingSink()
    core = LogCore(sink, config=LevelConfig({}, LogLevel.WARN))
    calls: list[int] = []
    result = core.emit("svc", LogLevel.DEBUG, "value {}", lazy(lambda: calls.append(1)))
    assert result is None
    assert calls == []
    assert sink.records == ()


def test_logger_facade_and_reload() -> None:
    sink = CollectingSink()
    core = LogCore(sink, config={"billing": "error"})
    log = core.get_logger("billing.invoices")
    assert log.effective_level() is LogLevel.ERROR
    assert log.info("hidden") is None
    core.reload({"billing": "info"})
    assert log.is_info_enabled()
    log.info("Invoice {} created", "inv-1")
    log.warning("Invoice {} overdue", "inv-2")
    log.log("error", "Invoice {} failed", "inv-3")
    assert sink.messages == ["Invoice inv-1 created", "Invoice inv-2 overdue", "Invoice inv-3 failed"]
    assert [record.level for record in sink.records] == [LogLevel.INFO, LogLevel.WARN, LogLevel.ERROR]
    assert "billing.invoices" in repr(log)


def test_scope_helper_and_lifo_violation() -> None:
    core = LogCore()
    with core.scope(user="alice", request_id="r-1"):
        assert core.context() == {"user": "alice", "request_id": "r-1"}
    outer = core.open("user", "a")
    core.open("user", "b")
    with pytest.raises(ScopeOrderError):
        outer.close()


def test_context_travels_into_pool_workers() -> None:
    sink = CollectingSink()
    core = LogCore(sink, config={"": "debug"})
    log = core.get_logger("jobs")
    with PropagatingExecutor(ThreadPoolExecutor(max_workers=2), core.bridge) as pool:
        with core.open("batch", "b-1"):
            futures = [pool.submit(log.debug, "item {}", index) for index in range(5)]
        for future in futures:
            future.result()
        unscoped = pool.submit(log.debug, "after").result()
    assert unscoped is not None and unscoped.context == {}
    assert all(record.context == {"batch": "b-1"} for record in sink.records[:5])


def test_shared_store_between_cores() -> None:
    store = ContextStore()
    first = LogCore(store=store, config={"": "info"})
    second = LogCore(store=store, config={"": "info"})
    with first.open("request_id", "r-1"):
        record = second.emit("svc", "info", "shared")
    assert record is not None and record.context == {"request_id": "r-1"}


def test_sink_failures_propagate() -> None:
    class FailingSink:
        def accept(self, record) -> None:
            raise ConnectionError("sink down")

    core = LogCore(FailingSink())
    with pytest.raises(ConnectionError):
        core.emit("svc", LogLevel.ERROR, "lost")


def test_create_core_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("ACME_APP_LEVEL", "error")
    monkeypatch.setenv("ACME_APP_LEVEL__PAYMENTS", "trace")
    core = create_core(slug="acme-app")
    assert core.is_enabled("payments.card", LogLevel.TRACE)
    assert not core.is_enabled("catalog", LogLevel.WARN)
    provided = create_core(provider=EnvLevelProvider("NONE", environ={}))
    assert provided.gate.effective_level("x") is LogLevel.INFO


def test_default_sink_forwards_to_logging(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="payments")
    core = create_core(provider=EnvLevelProvider("NONE", environ={}))
    assert isinstance(core.sink, StdlibLoggingSink)
    with core.open("request_id", "r-7"):
        core.emit("payments.card", LogLevel.INFO, "Charge {} captured", "c-1")
    forwarded = [record for record in caplog.records if record.name == "payments.card"]
    assert [record.getMessage() for record in forwarded] == ["Charge c-1 captured"]
    assert getattr(forwarded[0], "context") == {"request_id": "r-7"}
