"""Domain-level exception hierarchy.

Purpose
-------
Expose the error taxonomy shared by the context store, the level gate, and the
CLI. The hierarchy lives in the domain layer so outer layers can depend on it
without creating cycles.

Contents
--------
* :class:`LogContextError` – umbrella base class for the library.
* :class:`ScopeOrderError` – a scope was closed out of LIFO order or from a
  foreign execution unit.
* :class:`InvalidLevel` – a level name or number could not be parsed.

System Role
-----------
Only programming errors and invalid configuration input raise. Configuration
gaps fall back to defaults and rendering mismatches degrade to literal text,
so neither has an exception type.
"""

from __future__ import annotations


class LogContextError(Exception):
    """Base type for all exceptions emitted by ``lib_log_context``.

    Why
    ----
    Provide a single catch-all type for consumers that do not need fine-grained
    handling.
    """


class ScopeOrderError(LogContextError, AssertionError):
    """Raised when a scope is closed while a newer scope on the same key is open.

    Why
    ----
    Out-of-order restores would resurrect stale correlation values. This is a
    bug in the calling code, never a runtime condition to recover from, so it
    also derives from :class:`AssertionError` and must not be retried.

    What
    ----
    Carries the offending key in :attr:`key`. The store is left untouched when
    the error is raised.
    """

    def __init__(self, message: str, *, key: str) -> None:
        super().__init__(message)
        self.key = key


class InvalidLevel(LogContextError, ValueError):
    """Raised when a configuration source supplies an unknown level.

    Typical Sources
    ---------------
    :meth:`lib_log_context.domain.levels.LogLevel.parse`, the environment
    provider, and CLI options.
    """
