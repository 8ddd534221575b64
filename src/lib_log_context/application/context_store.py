"""Per-execution-unit correlation context with stack discipline.

Purpose
-------
Hold the ordered ``key -> value`` entries that decorate every record emitted by
one thread or asyncio task, and give callers exact undo tokens so nested
mutations unwind to the byte-identical prior state.

Contents
--------
* :data:`ABSENT` – sentinel recorded in tokens when a key did not exist.
* :class:`ContextToken` – undo token returned by :meth:`ContextStore.put`.
* :class:`StoreCheckpoint` – whole-unit state for :meth:`ContextStore.rollback`.
* :class:`ContextStore` – the store itself.
* :func:`current_unit` – identity of the calling execution unit.

System Role
-----------
Each store owns a private :class:`contextvars.ContextVar`; there is no module
level ambient context. State published into the variable is immutable and
tagged with the unit that wrote it. A unit that merely inherited a copied
context (a new asyncio task, ``copy_context().run`` in a pooled worker) sees an
empty store until it installs a snapshot explicitly through the propagation
bridge.
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Mapping
from contextvars import ContextVar
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Final

from ..domain.errors import ScopeOrderError
from ..domain.records import EMPTY_SNAPSHOT, ContextSnapshot


class _Absent:
    """Marker type for "no prior value"; a single instance exists."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "ABSENT"

    def __reduce__(self) -> str:
        return "ABSENT"


ABSENT: Final = _Absent()
"""Recorded in a :class:`ContextToken` when the key was not present before ``put``."""

UnitId = tuple[int, int | None]


def current_unit() -> UnitId:
    """Return ``(thread ident, id of the running asyncio task or None)``.

    Examples
    --------
    >>> current_unit()[1] is None
    True
    """

    try:
        task = asyncio.current_task()
    except RuntimeError:
        task = None
    return threading.get_ident(), (id(task) if task is not None else None)


@dataclass(frozen=True, slots=True)
class ContextToken:
    """Undo information for one :meth:`ContextStore.put`.

    Attributes
    ----------
    key:
        Key that was written.
    prior:
        Value shadowed by the write, or :data:`ABSENT`.
    """

    key: str
    prior: str | _Absent


@dataclass(frozen=True, slots=True)
class _UnitState:
    owner: UnitId
    entries: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    scopes: Mapping[str, tuple[int, ...]] = field(default_factory=lambda: MappingProxyType({}))

    def evolve(
        self,
        *,
        entries: dict[str, str] | None = None,
        scopes: dict[str, tuple[int, ...]] | None = None,
    ) -> _UnitState:
        return _UnitState(
            self.owner,
            MappingProxyType(entries) if entries is not None else self.entries,
            MappingProxyType(scopes) if scopes is not None else self.scopes,
        )


@dataclass(frozen=True, slots=True)
class StoreCheckpoint:
    """Raw per-unit state captured by :meth:`ContextStore.checkpoint`."""

    state: _UnitState | None


class ContextStore:
    """Ordered correlation entries isolated per thread and per asyncio task.

    Why
    ----
    Log records need request-scoped identifiers (request id, tenant, user)
    without every function passing them along explicitly, yet one unit's
    identifiers must never appear on another unit's records.

    What
    ----
    Copy-on-write entries live in a per-instance ``ContextVar``. Pushing an
    existing key shadows its value while keeping the key's position; the
    returned :class:`ContextToken` restores the shadowed value exactly.

    Parameters
    ----------
    name:
        Label used for the underlying ``ContextVar`` (diagnostics only).

    Examples
    --------
    >>> store = ContextStore()
    >>> outer = store.put("request_id", "r-1")
    >>> inner = store.put("request_id", "r-2")
    >>> store.snapshot()["request_id"]
    'r-2'
    >>> store.restore("request_id", inner)
    >>> store.snapshot()["request_id"]
    'r-1'
    >>> store.restore("request_id", outer)
    >>> len(store.snapshot())
    0
    """

    def __init__(self, name: str = "lib_log_context") -> None:
        self._name = name
        self._var: ContextVar[_UnitState | None] = ContextVar(f"{name}_context", default=None)

    def __repr__(self) -> str:
        return f"ContextStore(name={self._name!r}, entries={self.snapshot().as_dict()!r})"

    @property
    def name(self) -> str:
        return self._name

    def put(self, key: str, value: Any) -> ContextToken:
        """Push *value* under *key* and return the token that undoes the push.

        Non-string values are stored as ``str(value)``.
        """

        state = self._state()
        entries = dict(state.entries)
        token = ContextToken(key, entries.get(key, ABSENT))
        entries[key] = value if isinstance(value, str) else str(value)
        self._publish(state.evolve(entries=entries))
        return token

    def restore(self, key: str, token: ContextToken) -> None:
        """Revert *key* to the state recorded in *token*."""

        state = self._state()
        entries = dict(state.entries)
        if isinstance(token.prior, _Absent):
            entries.pop(key, None)
        else:
            entries[key] = token.prior
        self._publish(state.evolve(entries=entries))

    def get(self, key: str, default: str | None = None) -> str | None:
        """Return the visible value for *key* or *default*."""

        return self._state().entries.get(key, default)

    def snapshot(self) -> ContextSnapshot:
        """Return an immutable copy of the calling unit's visible entries."""

        entries = self._state().entries
        if not entries:
            return EMPTY_SNAPSHOT
        return ContextSnapshot(entries)

    def clear_all(self) -> None:
        """Drop every entry and all open-scope bookkeeping of the calling unit."""

        self._var.set(None)

    def checkpoint(self) -> StoreCheckpoint:
        """Capture the calling unit's entries and scope bookkeeping as they are now."""

        return StoreCheckpoint(self._var.get())

    def rollback(self, checkpoint: StoreCheckpoint) -> None:
        """Put back exactly the state recorded by :meth:`checkpoint`."""

        self._var.set(checkpoint.state)

    def install(self, snapshot: Mapping[str, str], *, merge: bool = False) -> None:
        """Replace the unit's entries with *snapshot* (or layer it on top with *merge*).

        Open-scope bookkeeping survives a merge and is discarded on replace.
        """

        state = self._state()
        if merge:
            entries = dict(state.entries)
            entries.update(snapshot)
            self._publish(state.evolve(entries=entries))
            return
        self._publish(_UnitState(state.owner, MappingProxyType(dict(snapshot))))

    def enter_scope(self, key: str, value: Any, scope_id: int) -> ContextToken:
        """Push *value* and register *scope_id* as the innermost scope on *key*."""

        token = self.put(key, value)
        state = self._state()
        scopes = dict(state.scopes)
        scopes[key] = scopes.get(key, ()) + (scope_id,)
        self._publish(state.evolve(scopes=scopes))
        return token

    def exit_scope(self, key: str, scope_id: int, token: ContextToken) -> None:
        """Restore *token* if *scope_id* is the innermost open scope on *key*.

        Raises
        ------
        ScopeOrderError
            When a newer scope on *key* is still open, or the scope belongs to
            another execution unit. The store is not modified.
        """

        state = self._state()
        stack = state.scopes.get(key, ())
        if not stack or stack[-1] != scope_id:
            if scope_id in stack:
                raise ScopeOrderError(
                    f"Scope on {key!r} closed while {len(stack) - stack.index(scope_id) - 1} newer scope(s) remain open",
                    key=key,
                )
            raise ScopeOrderError(f"Scope on {key!r} is not open in this execution unit", key=key)
        scopes = dict(state.scopes)
        if len(stack) == 1:
            del scopes[key]
        else:
            scopes[key] = stack[:-1]
        self._publish(state.evolve(scopes=scopes))
        self.restore(key, token)

    def _state(self) -> _UnitState:
        unit = current_unit()
        state = self._var.get()
        if state is None or state.owner != unit:
            return _UnitState(unit)
        return state

    def _publish(self, state: _UnitState) -> None:
        self._var.set(state)
