"""Application-layer ports describing collaborator responsibilities.

Purpose
-------
Define the structural contracts the core consumes so that transports and
configuration sources stay outside the library's inner layers.

Contents
--------
* :class:`Sink` – accepts finished :class:`~lib_log_context.domain.records.LogRecord` objects.
* :class:`LevelConfigProvider` – supplies a ``(prefix -> level)`` snapshot on demand.

System Role
-----------
The composition root (:mod:`lib_log_context.core`) only talks to these
protocols. Adapters under :mod:`lib_log_context.adapters` implement them.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..domain.level_config import LevelConfig
from ..domain.records import LogRecord


@runtime_checkable
class Sink(Protocol):
    """Consume finished records for formatting and output.

    Why
    ----
    The core never decides how records are serialised or delivered. Latency,
    retries and failures are the sink's own contract; ideally ``accept`` is
    non-blocking and best-effort from the caller's perspective.
    """

    def accept(self, record: LogRecord) -> None:
        """Take ownership of *record*."""


@runtime_checkable
class LevelConfigProvider(Protocol):
    """Produce level configuration snapshots.

    Why
    ----
    Keeps the gate agnostic of where thresholds come from (environment,
    service discovery, tests).
    """

    def load(self) -> LevelConfig:
        """Return the current configuration snapshot."""
