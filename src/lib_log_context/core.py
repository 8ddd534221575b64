"""Composition root for ``lib_log_context``.

Purpose
-------
Wire the context store, scope handles, level gate, renderer, propagation
bridge and a sink into the small surface application code uses:
``open``, ``is_enabled`` and ``emit``.

Contents
--------
* :class:`LogCore` – owns one instance of every component and a sink.
* :class:`Logger` – name-bound facade with level shortcuts.
* :func:`create_core` – convenience factory reading thresholds from the
  environment.

System Role
-----------
Nothing here is global: applications create a :class:`LogCore` (usually one per
process) and pass it, or loggers obtained from it, to the code that needs it.
Sink failures propagate to the caller unchanged; the core neither retries nor
buffers.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ContextManager

from .adapters.env.default import EnvLevelProvider, default_env_prefix
from .adapters.sinks.stdlib import StdlibLoggingSink
from .application.context_store import ContextStore
from .application.level_gate import LevelGate
from .application.ports import LevelConfigProvider, Sink
from .application.propagation import PropagationBridge
from .application.renderer import MessageRenderer
from .application.scope import ScopeHandle, open_scope, scoped
from .domain.level_config import LevelConfig
from .domain.levels import LogLevel
from .domain.records import ContextSnapshot, LogRecord


class LogCore:
    """Decide eligibility, render messages, and hand records to a sink.

    Why
    ----
    Callers need one object that answers "should I log?" cheaply and, when the
    answer is yes, produces a record carrying the current correlation context.

    Parameters
    ----------
    sink:
        Receiver of finished records. Defaults to a :class:`StdlibLoggingSink`,
        so records flow into the application's ``logging`` handlers.
    config:
        Initial level configuration (``LevelConfig`` or plain mapping).
    store / gate / renderer:
        Pre-built components, mainly for tests and for sharing a store between
        several cores.

    Examples
    --------
    >>> core = LogCore(config={"app": "info"})
    >>> with core.open("request_id", "r-42"):
    ...     record = core.emit("app.web", LogLevel.INFO, "User {} logged in", "alice")
    >>> record.message, record.context["request_id"]
    ('User alice logged in', 'r-42')
    >>> core.emit("app.web", LogLevel.DEBUG, "hidden") is None
    True
    """

    def __init__(
        self,
        sink: Sink | None = None,
        *,
        config: LevelConfig | Mapping[str, LogLevel | int | str] | None = None,
        store: ContextStore | None = None,
        gate: LevelGate | None = None,
        renderer: MessageRenderer | None = None,
    ) -> None:
        self._sink: Sink = sink if sink is not None else StdlibLoggingSink()
        self._store = store if store is not None else ContextStore()
        self._gate = gate if gate is not None else LevelGate(config)
        if gate is not None and config is not None:
            self._gate.reload(config)
        self._renderer = renderer if renderer is not None else MessageRenderer()
        self._bridge = PropagationBridge(self._store)

    @property
    def sink(self) -> Sink:
        return self._sink

    @property
    def store(self) -> ContextStore:
        return self._store

    @property
    def gate(self) -> LevelGate:
        return self._gate

    @property
    def renderer(self) -> MessageRenderer:
        return self._renderer

    @property
    def bridge(self) -> PropagationBridge:
        return self._bridge

    def open(self, key: str, value: Any) -> ScopeHandle:
        """Push ``key=value`` for the calling unit; close the handle to undo it."""

        return open_scope(self._store, key, value)

    def scope(self, entries: Mapping[str, Any] | None = None, /, **extra: Any) -> ContextManager[ContextStore]:
        """Open several entries at once; they close in reverse order."""

        return scoped(self._store, dict(entries or {}), **extra)

    def context(self) -> ContextSnapshot:
        """Return the calling unit's current correlation snapshot."""

        return self._store.snapshot()

    def is_enabled(self, logger_name: str, level: LogLevel | int | str) -> bool:
        return self._gate.is_enabled(logger_name, level)

    def emit(self, logger_name: str, level: LogLevel | int | str, template: str, *args: Any) -> LogRecord | None:
        """Build a record and hand it to the sink if *level* passes the gate.

        Returns
        -------
        LogRecord | None
            The record delivered to the sink, or ``None`` when the gate refused
            the call (in which case nothing is rendered).
        """

        parsed = LogLevel.parse(level)
        if not self._gate.is_enabled(logger_name, parsed):
            return None
        rendered = self._renderer.render_sequence(template, args)
        inline_args = args[:-1] if rendered.cause is not None else args
        record = LogRecord(
            level=parsed,
            logger_name=logger_name,
            template=template,
            args=tuple(inline_args),
            message=rendered.text,
            cause=rendered.cause,
            context=self._store.snapshot(),
        )
        self._sink.accept(record)
        return record

    def reload(self, config: LevelConfig | Mapping[str, LogLevel | int | str]) -> None:
        self._gate.reload(config)

    def reload_from(self, provider: LevelConfigProvider) -> LevelConfig:
        return self._gate.reload_from(provider)

    def get_logger(self, name: str) -> Logger:
        return Logger(self, name)


class Logger:
    """Name-bound view of a :class:`LogCore`.

    Examples
    --------
    >>> core = LogCore(config={"": "debug"})
    >>> log = core.get_logger("billing")
    >>> log.is_trace_enabled(), log.is_debug_enabled()
    (False, True)
    >>> log.warn("Retry {} of {}", 2, 5).message
    'Retry 2 of 5'
    """

    __slots__ = ("_core", "_name")

    def __init__(self, core: LogCore, name: str) -> None:
        self._core = core
        self._name = name

    def __repr__(self) -> str:
        return f"<Logger {self._name!r} effective={self.effective_level().name}>"

    @property
    def name(self) -> str:
        return self._name

    def effective_level(self) -> LogLevel:
        return self._core.gate.effective_level(self._name)

    def is_enabled(self, level: LogLevel | int | str) -> bool:
        return self._core.is_enabled(self._name, level)

    def is_trace_enabled(self) -> bool:
        return self.is_enabled(LogLevel.TRACE)

    def is_debug_enabled(self) -> bool:
        return self.is_enabled(LogLevel.DEBUG)

    def is_info_enabled(self) -> bool:
        return self.is_enabled(LogLevel.INFO)

    def is_warn_enabled(self) -> bool:
        return self.is_enabled(LogLevel.WARN)

    def is_error_enabled(self) -> bool:
        return self.is_enabled(LogLevel.ERROR)

    def log(self, level: LogLevel | int | str, template: str, *args: Any) -> LogRecord | None:
        return self._core.emit(self._name, level, template, *args)

    def trace(self, template: str, *args: Any) -> LogRecord | None:
        return self._core.emit(self._name, LogLevel.TRACE, template, *args)

    def debug(self, template: str, *args: Any) -> LogRecord | None:
        return self._core.emit(self._name, LogLevel.DEBUG, template, *args)

    def info(self, template: str, *args: Any) -> LogRecord | None:
        return self._core.emit(self._name, LogLevel.INFO, template, *args)

    def warn(self, template: str, *args: Any) -> LogRecord | None:
        return self._core.emit(self._name, LogLevel.WARN, template, *args)

    warning = warn

    def error(self, template: str, *args: Any) -> LogRecord | None:
        return self._core.emit(self._name, LogLevel.ERROR, template, *args)


def create_core(
    sink: Sink | None = None,
    *,
    slug: str = "lib-log-context",
    provider: LevelConfigProvider | None = None,
) -> LogCore:
    """Return a :class:`LogCore` whose thresholds come from *provider*.

    When *provider* is omitted the environment is read with the prefix derived
    from *slug* (``LIB_LOG_CONTEXT_LEVEL``, ``LIB_LOG_CONTEXT_LEVEL__APP=debug`` …).
    """

    source = provider if provider is not None else EnvLevelProvider(default_env_prefix(slug))
    return LogCore(sink, config=source.load())


__all__ = [
    "LogCore",
    "Logger",
    "create_core",
]
