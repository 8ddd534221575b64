"""Immutable level configuration value object.

Purpose
-------
Anchor the ``(logger prefix -> level)`` snapshot that the
:class:`~lib_log_context.application.level_gate.LevelGate` swaps atomically on
reload. The module contains no I/O; providers in the adapters layer build
instances from external sources.

Contents
--------
* :class:`LevelConfig` – ``Mapping`` of dotted prefixes to :class:`LogLevel`
  plus a default threshold.
* :data:`ROOT` – prefix naming the root logger.
* :data:`DEFAULT_CONFIG` – canonical configuration with no prefixes and an
  ``INFO`` default.

System Role
-----------
Because instances never change after construction, concurrent readers can keep
using an old snapshot while a reload publishes a new one.
"""

from __future__ import annotations

import json
from collections.abc import Mapping as MappingABC
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Final, Iterator

from .levels import LogLevel

ROOT: Final[str] = ""
"""Prefix that matches every logger name; consulted after all dotted prefixes."""


@dataclass(frozen=True, slots=True)
class LevelConfig(MappingABC[str, LogLevel]):
    """Immutable mapping of logger-name prefixes to thresholds.

    Why
    ----
    Level lookups run on every logging call and must never observe a half-applied
    reload. Freezing the mapping lets the gate publish a new snapshot with a
    single reference swap.

    What
    ----
    Stores prefixes inside ``MappingProxyType`` with normalised keys (stripped,
    lower-cased, no leading/trailing dots) and values coerced through
    :meth:`LogLevel.parse`.

    Parameters
    ----------
    _levels:
        Mapping of dotted prefixes to levels (names, numbers, or members).
    default:
        Threshold used when no prefix matches.

    Examples
    --------
    >>> cfg = LevelConfig({"App.DB": "debug", "app": "warn"}, LogLevel.ERROR)
    >>> cfg["app.db"]
    <LogLevel.DEBUG: 10>
    >>> cfg.default
    <LogLevel.ERROR: 40>
    >>> cfg.with_overrides({"app": "trace"})["app"]
    <LogLevel.TRACE: 5>
    """

    _levels: Mapping[str, LogLevel]
    default: LogLevel = LogLevel.INFO

    def __post_init__(self) -> None:
        """Normalise keys and values and freeze the mapping."""

        levels = {normalize_prefix(prefix): LogLevel.parse(level) for prefix, level in self._levels.items()}
        object.__setattr__(self, "_levels", MappingProxyType(levels))
        object.__setattr__(self, "default", LogLevel.parse(self.default))

    def __getitem__(self, prefix: str) -> LogLevel:
        return self._levels[normalize_prefix(prefix)]

    def __contains__(self, prefix: object) -> bool:
        return isinstance(prefix, str) and normalize_prefix(prefix) in self._levels

    def __iter__(self) -> Iterator[str]:
        return iter(self._levels)

    def __len__(self) -> int:
        return len(self._levels)

    @classmethod
    def from_mapping(
        cls,
        levels: Mapping[str, LogLevel | int | str],
        *,
        default: LogLevel | int | str = LogLevel.INFO,
    ) -> LevelConfig:
        """Build a configuration from a plain mapping as supplied by a provider.

        Raises
        ------
        InvalidLevel
            When any level (including *default*) cannot be parsed.
        """

        return cls(dict(levels), LogLevel.parse(default))

    def get(self, prefix: str, default: LogLevel | None = None) -> LogLevel | None:  # type: ignore[override]
        """Return the level configured for exactly *prefix* or *default*."""

        return self._levels.get(normalize_prefix(prefix), default)

    def with_overrides(
        self,
        overrides: Mapping[str, LogLevel | int | str],
        *,
        default: LogLevel | int | str | None = None,
    ) -> LevelConfig:
        """Return a new configuration with *overrides* applied on top.

        Side Effects
        ------------
        None; the receiver stays untouched.
        """

        merged: dict[str, LogLevel | int | str] = dict(self._levels)
        merged.update({normalize_prefix(prefix): level for prefix, level in overrides.items()})
        return LevelConfig(merged, LogLevel.parse(default) if default is not None else self.default)

    def as_dict(self) -> dict[str, str]:
        """Return level names keyed by prefix; the default lives under ``"*"``.

        Examples
        --------
        >>> LevelConfig({"a": 10}).as_dict()
        {'*': 'INFO', 'a': 'DEBUG'}
        """

        payload = {"*": self.default.name}
        payload.update({prefix: level.name for prefix, level in self._levels.items()})
        return payload

    def to_json(self, *, indent: int | None = None) -> str:
        """Serialise :meth:`as_dict` for diagnostics output."""

        return json.dumps(self.as_dict(), indent=indent, separators=(",", ":"), ensure_ascii=False)


def normalize_prefix(prefix: str) -> str:
    """Return *prefix* stripped, lower-cased, and without surrounding dots.

    Examples
    --------
    >>> normalize_prefix(" .App.Web. ")
    'app.web'
    """

    return prefix.strip().strip(".").lower()


DEFAULT_CONFIG: Final[LevelConfig] = LevelConfig(MappingProxyType({}))
"""Configuration used by a gate that was never given one."""
