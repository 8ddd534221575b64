"""Scoped acquisition of correlation entries.

Purpose
-------
Tie a :class:`~lib_log_context.application.context_store.ContextStore`
mutation to a bounded span so the shadowed value comes back on every exit path.

Contents
--------
* :class:`ScopeHandle` – context manager returned by :func:`open_scope`.
* :func:`open_scope` – push one entry and return its handle.
* :func:`scoped` – open several entries at once, closed in reverse order.

System Role
-----------
Handles enforce LIFO closing per key. Closing out of order is a bug in the
caller and raises :class:`~lib_log_context.domain.errors.ScopeOrderError`
instead of silently leaving a stale value behind.
"""

from __future__ import annotations

import itertools
from contextlib import ExitStack, contextmanager
from types import TracebackType
from typing import Any, Iterator

from .context_store import ContextStore

_SCOPE_IDS = itertools.count(1)


class ScopeHandle:
    """Undo handle for one correlation entry.

    ``close`` restores the shadowed value exactly once; further calls are
    no-ops. Use it as a context manager so early returns and exceptions are
    covered.

    Examples
    --------
    >>> store = ContextStore()
    >>> with open_scope(store, "user", "alice") as scope:
    ...     store.get("user")
    'alice'
    >>> scope.closed, store.get("user")
    (True, None)
    """

    __slots__ = ("_store", "_key", "_value", "_id", "_token", "_closed")

    def __init__(self, store: ContextStore, key: str, value: Any) -> None:
        self._store = store
        self._key = key
        self._value = value if isinstance(value, str) else str(value)
        self._id = next(_SCOPE_IDS)
        self._token = store.enter_scope(key, self._value, self._id)
        self._closed = False

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<ScopeHandle {self._key}={self._value!r} {state}>"

    def __enter__(self) -> ScopeHandle:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def key(self) -> str:
        return self._key

    @property
    def value(self) -> str:
        return self._value

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Restore the value this scope shadowed.

        Raises
        ------
        ScopeOrderError
            When a newer scope on the same key is still open or the call comes
            from another execution unit; the handle stays open in that case.
        """

        if self._closed:
            return
        self._store.exit_scope(self._key, self._id, self._token)
        self._closed = True


def open_scope(store: ContextStore, key: str, value: Any) -> ScopeHandle:
    """Push ``key=value`` into *store* and return the handle that undoes it."""

    return ScopeHandle(store, key, value)


@contextmanager
def scoped(store: ContextStore, entries: dict[str, Any] | None = None, /, **extra: Any) -> Iterator[ContextStore]:
    """Open one scope per entry and close them in reverse order on exit.

    Examples
    --------
    >>> store = ContextStore()
    >>> with scoped(store, {"tenant": "acme"}, request_id="r-9"):
    ...     store.snapshot().as_dict()
    {'tenant': 'acme', 'request_id': 'r-9'}
    >>> store.snapshot().as_dict()
    {}
    """

    with ExitStack() as stack:
        for key, value in {**(entries or {}), **extra}.items():
            stack.enter_context(open_scope(store, key, value))
        yield store
