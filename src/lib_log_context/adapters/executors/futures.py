"""``concurrent.futures`` integration for explicit context hand-off.

Purpose
-------
Pooled worker threads are reused across unrelated submissions. Wrapping the
pool makes every task start with the submitter's correlation snapshot and end
with an empty store, so nothing leaks from one task into the next.

Contents
--------
* :class:`PropagatingExecutor` – decorator around any :class:`~concurrent.futures.Executor`.
"""

from __future__ import annotations

from concurrent.futures import Executor, Future
from typing import Any, Callable, Iterable, Iterator, TypeVar

from ...application.propagation import PropagationBridge

T = TypeVar("T")


class PropagatingExecutor(Executor):
    """Executor that hands the caller's context to each submitted task.

    Parameters
    ----------
    inner:
        Executor that actually runs the work; shut down together with this one.
    bridge:
        Bridge bound to the store whose context should travel.
    merge:
        Merge the snapshot over the worker's existing entries instead of
        replacing them.

    Examples
    --------
    >>> from concurrent.futures import ThreadPoolExecutor
    >>> from lib_log_context.application.context_store import ContextStore
    >>> store = ContextStore()
    >>> bridge = PropagationBridge(store)
    >>> _ = store.put("job", "nightly")
    >>> with PropagatingExecutor(ThreadPoolExecutor(max_workers=1), bridge) as pool:
    ...     pool.submit(store.get, "job").result()
    'nightly'
    """

    def __init__(self, inner: Executor, bridge: PropagationBridge, *, merge: bool = False) -> None:
        self._inner = inner
        self._bridge = bridge
        self._merge = merge

    @property
    def inner(self) -> Executor:
        return self._inner

    def submit(self, fn: Callable[..., T], /, *args: Any, **kwargs: Any) -> Future[T]:
        return self._inner.submit(self._bridge.wrap(fn, merge=self._merge), *args, **kwargs)

    def map(
        self,
        fn: Callable[..., T],
        *iterables: Iterable[Any],
        timeout: float | None = None,
        chunksize: int = 1,
    ) -> Iterator[T]:
        return self._inner.map(self._bridge.wrap(fn, merge=self._merge), *iterables, timeout=timeout, chunksize=chunksize)

    def shutdown(self, wait: bool = True, *, cancel_futures: bool = False) -> None:
        self._inner.shutdown(wait=wait, cancel_futures=cancel_futures)
