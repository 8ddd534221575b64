"""Public package surface for scoped correlation context and gated log records.

Exports the composition root (:class:`LogCore`, :class:`Logger`), the
individual components for applications that wire them by hand, and the domain
value objects sinks receive.
"""

from __future__ import annotations

from .adapters.env.default import EnvLevelProvider, default_env_prefix
from .adapters.executors.futures import PropagatingExecutor
from .adapters.sinks.memory import CallbackSink, CollectingSink
from .adapters.sinks.stdlib import StdlibLoggingSink
from .application.context_store import ABSENT, ContextStore, ContextToken, StoreCheckpoint
from .application.level_gate import LevelGate, LevelView
from .application.ports import LevelConfigProvider, Sink
from .application.propagation import PropagationBridge
from .application.renderer import LazyArg, MessageRenderer, RenderedMessage, lazy
from .application.scope import ScopeHandle, open_scope, scoped
from .core import LogCore, Logger, create_core
from .domain.errors import InvalidLevel, LogContextError, ScopeOrderError
from .domain.level_config import LevelConfig
from .domain.levels import LogLevel
from .domain.records import ContextSnapshot, LogRecord, cause_chain
from .observability import get_logger

__all__ = [
    "ABSENT",
    "CallbackSink",
    "CollectingSink",
    "ContextSnapshot",
    "ContextStore",
    "ContextToken",
    "StoreCheckpoint",
    "EnvLevelProvider",
    "InvalidLevel",
    "LazyArg",
    "LevelConfig",
    "LevelConfigProvider",
    "LevelGate",
    "LevelView",
    "LogContextError",
    "LogCore",
    "LogLevel",
    "LogRecord",
    "Logger",
    "MessageRenderer",
    "PropagatingExecutor",
    "PropagationBridge",
    "RenderedMessage",
    "ScopeHandle",
    "ScopeOrderError",
    "Sink",
    "StdlibLoggingSink",
    "cause_chain",
    "create_core",
    "default_env_prefix",
    "get_logger",
    "lazy",
    "open_scope",
    "scoped",
]
