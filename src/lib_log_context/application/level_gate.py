"""Hierarchical, atomically reloadable level resolution.

Purpose
-------
Answer "is ``logger`` enabled at ``level``?" cheaply enough that callers can
use it to skip argument construction, while allowing operators to reload the
thresholds at runtime.

Contents
--------
* :class:`LevelGate` – resolver over an immutable
  :class:`~lib_log_context.domain.level_config.LevelConfig` snapshot.
* :class:`LevelView` – one published configuration plus its lookup cache.
* :func:`iter_prefixes` – most-specific-first walk of a dotted name.

System Role
-----------
The gate owns its configuration explicitly; there is no global logger
registry. A reload builds a new :class:`LevelView` (snapshot plus empty lookup
cache) and publishes it with one attribute assignment. Every gate lookup reads
the view once and answers from it, so no answer mixes two snapshots.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Iterator

from ..domain.level_config import DEFAULT_CONFIG, ROOT, LevelConfig, normalize_prefix
from ..domain.levels import LogLevel
from ..observability import log_debug, make_event
from .ports import LevelConfigProvider

_CACHE_LIMIT = 4096


@dataclass(frozen=True, slots=True)
class LevelView:
    """Answers computed against one configuration snapshot.

    Obtained from :meth:`LevelGate.view`; stays valid (and unchanged) after the
    gate reloads, which lets callers make several related decisions at once.
    """

    config: LevelConfig
    cache: dict[str, LogLevel] = field(default_factory=dict, compare=False, repr=False)

    def effective_level(self, name: str) -> LogLevel:
        cached = self.cache.get(name)
        if cached is not None:
            return cached
        level = _resolve(self.config, name)
        if len(self.cache) < _CACHE_LIMIT:
            self.cache[name] = level
        return level

    def is_enabled(self, name: str, level: LogLevel | int | str) -> bool:
        return self.effective_level(name) <= LogLevel.parse(level)


def iter_prefixes(name: str) -> Iterator[str]:
    """Yield *name* and each shorter dotted prefix, ending with the root.

    Examples
    --------
    >>> list(iter_prefixes("a.b.c"))
    ['a.b.c', 'a.b', 'a', '']
    >>> list(iter_prefixes(""))
    ['']
    """

    current = normalize_prefix(name)
    while current:
        yield current
        cut = current.rfind(".")
        current = current[:cut] if cut > 0 else ROOT
    yield ROOT


class LevelGate:
    """Resolve effective thresholds for dotted logger names.

    Why
    ----
    The gate is consulted before every logging call, so lookups must stay
    lock-free and may never see a partially applied reload.

    What
    ----
    Walks the name from most specific to root and returns the first configured
    level, else the configuration default. Results are cached per snapshot;
    the cache is discarded together with the snapshot on reload.

    Examples
    --------
    >>> gate = LevelGate(LevelConfig({"a.b": "debug", "a": "info"}))
    >>> gate.effective_level("a.b.c")
    <LogLevel.DEBUG: 10>
    >>> gate.is_enabled("a.x", LogLevel.DEBUG)
    False
    >>> gate.reload({"a": "trace"})
    >>> gate.is_enabled("a.x", LogLevel.DEBUG)
    True
    """

    def __init__(self, config: LevelConfig | Mapping[str, LogLevel | int | str] | None = None) -> None:
        self._view = LevelView(_coerce_config(config))

    @property
    def config(self) -> LevelConfig:
        """Return the active configuration snapshot."""

        return self._view.config

    def view(self) -> LevelView:
        """Return the published snapshot so several lookups agree with each other."""

        return self._view

    def effective_level(self, name: str) -> LogLevel:
        """Return the threshold that applies to logger *name*."""

        return self._view.effective_level(name)

    def is_enabled(self, name: str, level: LogLevel | int | str) -> bool:
        """Return ``True`` when a call at *level* on *name* should be emitted."""

        return self._view.is_enabled(name, level)

    def reload(self, config: LevelConfig | Mapping[str, LogLevel | int | str]) -> None:
        """Atomically replace the active configuration.

        Side Effects
        ------------
        Emits a ``level_config_reloaded`` debug event.
        """

        new_view = LevelView(_coerce_config(config))
        self._view = new_view
        log_debug(
            "level_config_reloaded",
            **make_event("level_gate", {"prefixes": len(new_view.config), "default": new_view.config.default.name}),
        )

    def reload_from(self, provider: LevelConfigProvider) -> LevelConfig:
        """Load a configuration from *provider*, activate it, and return it."""

        config = provider.load()
        self.reload(config)
        return config


def _resolve(config: LevelConfig, name: str) -> LogLevel:
    for prefix in iter_prefixes(name):
        level = config.get(prefix)
        if level is not None:
            return level
    return config.default


def _coerce_config(config: LevelConfig | Mapping[str, LogLevel | int | str] | None) -> LevelConfig:
    if config is None:
        return DEFAULT_CONFIG
    if isinstance(config, LevelConfig):
        return config
    return LevelConfig.from_mapping(config)
