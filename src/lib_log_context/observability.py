"""Diagnostics for the library itself, kept separate from the records it builds.

Purpose
    Report lifecycle events (configuration reloads, context hand-offs, argument
    rendering failures) through the standard :mod:`logging` package without
    forcing host applications to adopt a specific backend.

Contents
    - ``get_logger``: returns the shared package logger (quiet by default).
    - ``log_debug`` / ``log_info`` / ``log_error``: emit structured entries via a
      single private emitter.
    - ``make_event``: convenience builder for structured event payloads.

System Integration
    Used by the gate, the renderer, the propagation bridge and the environment
    provider. Callers may pass the correlation snapshot of the current unit as
    ``context`` so diagnostics carry the same identifiers as application
    records.
"""

from __future__ import annotations

import logging
from typing import Any, Final, Mapping

_LOGGER: Final[logging.Logger] = logging.getLogger("lib_log_context")
_LOGGER.addHandler(logging.NullHandler())


def get_logger() -> logging.Logger:
    """Expose the package logger so applications may attach handlers.

    Why
        Leaves the library silent by default while giving host applications full
        control over handler and formatter configuration.
    """

    return _LOGGER


def log_debug(message: str, *, context: Mapping[str, str] | None = None, **fields: Any) -> None:
    """Emit a structured debug log entry."""

    _emit(logging.DEBUG, message, context, fields)


def log_info(message: str, *, context: Mapping[str, str] | None = None, **fields: Any) -> None:
    """Emit a structured info log entry."""

    _emit(logging.INFO, message, context, fields)


def log_error(message: str, *, context: Mapping[str, str] | None = None, **fields: Any) -> None:
    """Emit a structured error log entry."""

    _emit(logging.ERROR, message, context, fields)


def make_event(component: str, payload: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Build a structured payload naming the *component* that produced it.

    Examples
    --------
    >>> make_event('level_gate', {'prefixes': 3})
    {'component': 'level_gate', 'prefixes': 3}
    """

    event: dict[str, Any] = {"component": component}
    if payload:
        event |= dict(payload)
    return event


def _emit(level: int, message: str, context: Mapping[str, str] | None, fields: Mapping[str, Any]) -> None:
    """Send a log entry through the shared logger with contextual metadata."""

    if not _LOGGER.isEnabledFor(level):
        return
    payload: dict[str, Any] = {"correlation": dict(context or {})}
    payload.update(fields)
    _LOGGER.log(level, message, extra={"context": payload})
