"""Explicit context hand-off between execution units.

Purpose
-------
Carry correlation context from a submitting unit to the worker that runs the
submitted work, then put back whatever the running unit held before, so reused
pool threads never leak one operation's identifiers into the next and inline
callers keep their own scopes.

Contents
--------
* :class:`PropagationBridge` – capture, install, teardown or restore, plus ``wrap``
  helpers for callables and coroutine functions.

System Role
-----------
Context never crosses units implicitly (see
:mod:`lib_log_context.application.context_store`). This bridge is the only
sanctioned crossing. :class:`lib_log_context.adapters.executors.PropagatingExecutor`
builds on it for ``concurrent.futures`` pools.
"""

from __future__ import annotations

import functools
from collections.abc import Mapping
from typing import Any, Awaitable, Callable, TypeVar

from ..domain.records import ContextSnapshot
from ..observability import log_debug, make_event
from .context_store import ContextStore, StoreCheckpoint

T = TypeVar("T")


class PropagationBridge:
    """Move snapshots of a :class:`ContextStore` across execution units.

    Examples
    --------
    >>> import threading
    >>> store = ContextStore()
    >>> bridge = PropagationBridge(store)
    >>> _ = store.put("request_id", "r-7")
    >>> seen = []
    >>> worker = threading.Thread(target=bridge.wrap(lambda: seen.append(store.get("request_id"))))
    >>> worker.start(); worker.join()
    >>> seen
    ['r-7']
    """

    def __init__(self, store: ContextStore) -> None:
        self._store = store

    @property
    def store(self) -> ContextStore:
        return self._store

    def capture_for_handoff(self) -> ContextSnapshot:
        """Return the calling unit's snapshot for delivery to another unit."""

        return self._store.snapshot()

    def install_on_worker(self, snapshot: Mapping[str, str], *, merge: bool = False) -> None:
        """Make *snapshot* the calling unit's context before it starts work.

        Parameters
        ----------
        snapshot:
            Entries captured by :meth:`capture_for_handoff`.
        merge:
            Layer *snapshot* over existing entries instead of replacing them.
        """

        self._store.install(snapshot, merge=merge)
        log_debug("context_installed", context=snapshot, **make_event("propagation", {"keys": len(snapshot), "merge": merge}))

    def teardown_after_handoff(self) -> None:
        """Clear everything the unit holds once the handed-off work is done."""

        self._store.clear_all()
        log_debug("context_torn_down", **make_event("propagation"))

    def restore_after_handoff(self, checkpoint: StoreCheckpoint) -> None:
        """Return the unit to the state captured before :meth:`install_on_worker`."""

        self._store.rollback(checkpoint)
        log_debug("context_restored", **make_event("propagation"))

    def wrap(self, fn: Callable[..., T], *, merge: bool = False) -> Callable[..., T]:
        """Capture now; return a callable that installs, runs *fn*, and restores.

        The running unit gets back its own prior state afterwards: a pooled worker
        returns to empty, an inline caller keeps its open scopes.
        """

        snapshot = self.capture_for_handoff()

        @functools.wraps(fn)
        def _run(*args: Any, **kwargs: Any) -> T:
            saved = self._store.checkpoint()
            self.install_on_worker(snapshot, merge=merge)
            try:
                return fn(*args, **kwargs)
            finally:
                self.restore_after_handoff(saved)

        return _run

    def wrap_async(self, fn: Callable[..., Awaitable[T]], *, merge: bool = False) -> Callable[..., Awaitable[T]]:
        """Coroutine-function variant of :meth:`wrap` for ``asyncio`` tasks.

        Examples
        --------
        >>> import asyncio
        >>> store = ContextStore()
        >>> bridge = PropagationBridge(store)
        >>> async def handler():
        ...     return store.get("tenant")
        >>> async def main():
        ...     _ = store.put("tenant", "acme")
        ...     plain = await asyncio.create_task(handler())
        ...     bridged = await asyncio.create_task(bridge.wrap_async(handler)())
        ...     return plain, bridged
        >>> asyncio.run(main())
        (None, 'acme')
        """

        snapshot = self.capture_for_handoff()

        @functools.wraps(fn)
        async def _run(*args: Any, **kwargs: Any) -> T:
            saved = self._store.checkpoint()
            self.install_on_worker(snapshot, merge=merge)
            try:
                return await fn(*args, **kwargs)
            finally:
                self.restore_after_handoff(saved)

        return _run
