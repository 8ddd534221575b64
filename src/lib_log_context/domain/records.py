"""Immutable value objects produced by the logging core.

Purpose
-------
Carry correlation context and finished log records from the core to external
sinks without exposing any mutable state.

Contents
--------
* :class:`ContextSnapshot` – frozen, ordered ``Mapping[str, str]`` view of a
  unit's correlation context.
* :data:`EMPTY_SNAPSHOT` – canonical empty snapshot.
* :class:`LogRecord` – frozen record handed to :class:`~lib_log_context.application.ports.Sink`.
* :func:`cause_chain` – flattens an exception's cause/context chain.
* :func:`failed_str_marker` – placeholder text for values whose ``str()`` raises.

System Role
-----------
Snapshots are what crosses execution units (via the propagation bridge) and
what sinks see on every record. Records never define a wire format; sinks
decide how to serialise :meth:`LogRecord.to_dict`.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Iterator

from .levels import LogLevel


class ContextSnapshot(Mapping[str, str]):
    """Immutable flattened view of correlation entries at a point in time.

    Why
    ----
    Handing the live store to another thread or to a sink would let mutations
    leak across execution units. A snapshot is safe to share.

    What
    ----
    Wraps a private ``dict`` in ``MappingProxyType`` and preserves insertion
    order. Equality follows the :class:`Mapping` contract, so a snapshot equals
    any mapping with the same items.

    Examples
    --------
    >>> snap = ContextSnapshot({"request_id": "r-1", "user": "alice"})
    >>> list(snap)
    ['request_id', 'user']
    >>> snap == {"user": "alice", "request_id": "r-1"}
    True
    >>> snap.with_entries(user="bob")["user"]
    'bob'
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, str] | None = None) -> None:
        self._entries: Mapping[str, str] = MappingProxyType(dict(entries or {}))

    def __getitem__(self, key: str) -> str:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __hash__(self) -> int:
        return hash(frozenset(self._entries.items()))

    def __repr__(self) -> str:
        return f"ContextSnapshot({dict(self._entries)!r})"

    def as_dict(self) -> dict[str, str]:
        """Return a mutable copy preserving insertion order."""

        return dict(self._entries)

    def with_entries(self, entries: Mapping[str, str] | None = None, /, **extra: str) -> ContextSnapshot:
        """Return a new snapshot with *entries* and *extra* layered on top."""

        merged = dict(self._entries)
        merged.update(entries or {})
        merged.update(extra)
        return ContextSnapshot(merged)


EMPTY_SNAPSHOT = ContextSnapshot()
"""Shared empty snapshot returned for units that never touched their store."""


@dataclass(frozen=True, slots=True)
class LogRecord:
    """Finished, immutable log record handed to a sink.

    Why
    ----
    The core decides eligibility and builds the message; everything after that
    (formatting, transport, retries) belongs to the sink. A frozen record makes
    that hand-off safe across threads.

    Attributes
    ----------
    level:
        Level of the logging call.
    logger_name:
        Dotted logger name the call was made on.
    template:
        Unrendered message template with ``{}`` placeholders.
    args:
        Arguments as supplied, excluding a trailing cause.
    message:
        Rendered text.
    cause:
        Exception detached from the arguments, if any.
    context:
        Correlation snapshot captured at emission time.
    timestamp:
        Timezone-aware UTC creation time.
    """

    level: LogLevel
    logger_name: str
    template: str
    args: tuple[Any, ...]
    message: str
    cause: BaseException | None = None
    context: ContextSnapshot = EMPTY_SNAPSHOT
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def cause_chain(self) -> tuple[BaseException, ...]:
        """Return the cause and its chained exceptions, outermost first."""

        return cause_chain(self.cause)

    def to_dict(self) -> dict[str, Any]:
        """Return a plain dictionary suitable for JSON-oriented sinks.

        Examples
        --------
        >>> rec = LogRecord(LogLevel.INFO, "app.web", "hi {}", ("bob",), "hi bob",
        ...                 context=ContextSnapshot({"rid": "1"}),
        ...                 timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc))
        >>> rec.to_dict()["context"], rec.to_dict()["level"]
        ({'rid': '1'}, 'INFO')
        """

        return {
            "timestamp": self.timestamp.isoformat(),
            "level": self.level.name,
            "logger": self.logger_name,
            "message": self.message,
            "template": self.template,
            "args": [_describe(arg) for arg in self.args],
            "context": self.context.as_dict(),
            "cause": [_describe_exception(exc) for exc in self.cause_chain],
        }


def cause_chain(exc: BaseException | None) -> tuple[BaseException, ...]:
    """Flatten *exc* and its ``__cause__``/``__context__`` links.

    Explicit causes win over implicit context; ``__suppress_context__`` is
    honoured and cycles stop the walk.

    Examples
    --------
    >>> try:
    ...     try:
    ...         raise KeyError("k")
    ...     except KeyError as inner:
    ...         raise RuntimeError("outer") from inner
    ... except RuntimeError as outer:
    ...     [type(e).__name__ for e in cause_chain(outer)]
    ['RuntimeError', 'KeyError']
    """

    chain: list[BaseException] = []
    seen: set[int] = set()
    current = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        chain.append(current)
        if current.__cause__ is not None:
            current = current.__cause__
        elif not current.__suppress_context__:
            current = current.__context__
        else:
            current = None
    return tuple(chain)


def failed_str_marker(exc: BaseException) -> str:
    """Text that stands in for a value whose ``str()`` raised *exc*.

    Examples
    --------
    >>> failed_str_marker(RuntimeError("boom"))
    '[FAILED str(): RuntimeError]'
    """

    return f"[FAILED str(): {type(exc).__name__}]"


def _text(value: Any) -> str:
    try:
        return str(value)
    except Exception as exc:  # noqa: BLE001 - serialisation degrades instead of failing the sink
        return failed_str_marker(exc)


def _describe(value: Any) -> Any:
    """Keep JSON-native scalars, stringify everything else."""

    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return _text(value)


def _describe_exception(exc: BaseException) -> dict[str, str]:
    return {"type": type(exc).__name__, "message": _text(exc)}
