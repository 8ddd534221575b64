"""ScopeHandle guarantees: exactly-once restore and LIFO enforcement."""

from __future__ import annotations

import threading

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lib_log_context.application.context_store import ContextStore
from lib_log_context.application.scope import ScopeHandle, open_scope, scoped
from lib_log_context.domain.errors import ScopeOrderError


def test_scope_restores_on_exit() -> None:
    store = ContextStore()
    with open_scope(store, "user", "alice") as scope:
        assert store.get("user") == "alice"
        assert not scope.closed
    assert scope.closed
    assert store.get("user") is None


def test_scope_restores_on_exception() -> None:
    store = ContextStore()
    store.put("user", "outer")
    with pytest.raises(RuntimeError):
        with open_scope(store, "user", "inner"):
            raise RuntimeError("boom")
    assert store.get("user") == "outer"


def test_scope_restores_on_early_return() -> None:
    store = ContextStore()

    def handler() -> str | None:
        with open_scope(store, "request_id", "r-1"):
            return store.get("request_id")

    assert handler() == "r-1"
    assert store.get("request_id") is None


def test_close_is_idempotent() -> None:
    store = ContextStore()
    store.put("k", "base")
    scope = open_scope(store, "k", "v")
    scope.close()
    store.put("k", "later")
    scope.close()
    assert store.get("k") == "later"


def test_out_of_order_close_on_same_key_raises() -> None:
    store = ContextStore()
    outer = open_scope(store, "k", "outer")
    inner = open_scope(store, "k", "inner")
    with pytest.raises(ScopeOrderError) as excinfo:
        outer.close()
    assert excinfo.value.key == "k"
    assert store.get("k") == "inner"
    assert not outer.closed
    inner.close()
    outer.close()
    assert store.get("k") is None


def test_different_keys_may_close_in_any_order() -> None:
    store = ContextStore()
    first = open_scope(store, "a", "1")
    second = open_scope(store, "b", "2")
    first.close()
    assert store.snapshot() == {"b": "2"}
    second.close()
    assert store.snapshot() == {}


def test_close_from_another_thread_raises() -> None:
    store = ContextStore()
    scope = open_scope(store, "k", "v")
    errors: list[BaseException] = []

    def foreign_close() -> None:
        try:
            scope.close()
        except ScopeOrderError as exc:
            errors.append(exc)

    thread = threading.Thread(target=foreign_close)
    thread.start()
    thread.join()
    assert len(errors) == 1
    assert store.get("k") == "v"
    scope.close()
    assert store.get("k") is None


def test_scoped_opens_and_closes_many() -> None:
    store = ContextStore()
    store.put("tenant", "base")
    with scoped(store, {"tenant": "acme"}, request_id="r-2") as inner:
        assert inner is store
        assert store.snapshot() == {"tenant": "acme", "request_id": "r-2"}
    assert store.snapshot() == {"tenant": "base"}


def test_handle_exposes_key_and_value() -> None:
    store = ContextStore()
    scope = ScopeHandle(store, "attempt", 2)
    assert (scope.key, scope.value) == ("attempt", "2")
    assert "open" in repr(scope)
    scope.close()
    assert "closed" in repr(scope)


ACTIONS = st.lists(
    st.one_of(
        st.tuples(st.just("open"), st.sampled_from(["a", "b", "c"]), st.text(max_size=3)),
        st.tuples(st.just("close"), st.none(), st.none()),
    ),
    max_size=25,
)


@given(st.dictionaries(st.sampled_from(["a", "b", "c", "d"]), st.text(max_size=3)), ACTIONS)
def test_nested_scopes_restore_pre_open_snapshot(initial, actions) -> None:
    store = ContextStore()
    for key, value in initial.items():
        store.put(key, value)
    before = store.snapshot()
    open_scopes: list[ScopeHandle] = []
    for action, key, value in actions:
        if action == "open":
            open_scopes.append(open_scope(store, key, value))
        elif open_scopes:
            open_scopes.pop().close()
    while open_scopes:
        open_scopes.pop().close()
    assert store.snapshot() == before
    assert list(store.snapshot().items()) == list(before.items())
