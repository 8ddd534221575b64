"""Environment variable level provider.

Purpose
-------
Build a :class:`~lib_log_context.domain.level_config.LevelConfig` from process
environment variables. It implements the
:class:`~lib_log_context.application.ports.LevelConfigProvider` port.

Key behaviours
--------------
* Enforces a configurable prefix (``default_env_prefix``) so only relevant keys
  are captured.
* ``<PREFIX>_LEVEL`` sets the default threshold.
* ``__`` separates logger-name segments:
  ``<PREFIX>_LEVEL__APP__DB=debug`` configures prefix ``app.db``.
* Values accept level names (case-insensitive, with aliases) or numbers.
* Emits structured logging via :mod:`lib_log_context.observability` to aid
  troubleshooting.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from ...domain.errors import InvalidLevel
from ...domain.level_config import LevelConfig
from ...domain.levels import LogLevel
from ...observability import log_debug, log_error, make_event

LEVEL_KEY = "LEVEL"
"""Variable stem (after the prefix) that holds level settings."""


def default_env_prefix(slug: str) -> str:
    """Return the canonical environment prefix for *slug*.

    Examples
    --------
    >>> default_env_prefix('lib-log-context')
    'LIB_LOG_CONTEXT'
    """

    return slug.replace("-", "_").replace(".", "_").upper()


class EnvLevelProvider:
    """Load logger thresholds that belong to the configured namespace.

    Examples
    --------
    >>> env = {
    ...     'DEMO_LEVEL': 'warn',
    ...     'DEMO_LEVEL__APP__DB': 'debug',
    ...     'OTHER_LEVEL': 'trace',
    ... }
    >>> config = EnvLevelProvider('DEMO', environ=env).load()
    >>> config.default.name, config['app.db'].name, len(config)
    ('WARN', 'DEBUG', 1)
    """

    def __init__(
        self,
        prefix: str = "LIB_LOG_CONTEXT",
        *,
        environ: Mapping[str, str] | None = None,
        default: LogLevel = LogLevel.INFO,
    ) -> None:
        """Initialise the provider with a specific ``environ`` mapping for testability.

        Parameters
        ----------
        prefix:
            Upper-case namespace; a trailing ``_`` is optional.
        environ:
            Mapping to read from. Defaults to :data:`os.environ`, read at every
            :meth:`load` so reloads pick up changes.
        default:
            Threshold used when ``<PREFIX>_LEVEL`` is unset.
        """

        self._prefix = prefix.rstrip("_").upper()
        self._environ = environ
        self._default = default

    @property
    def prefix(self) -> str:
        return self._prefix

    def load(self) -> LevelConfig:
        """Return a fresh :class:`LevelConfig` built from the environment.

        Raises
        ------
        InvalidLevel
            When a matching variable holds an unknown level; the variable name
            is included in the message.

        Side Effects
        ------------
        Emits a ``level_config_loaded`` debug event listing configured prefixes.
        """

        environ = self._environ if self._environ is not None else os.environ
        stem = f"{self._prefix}_{LEVEL_KEY}"
        default: LogLevel = self._default
        levels: dict[str, LogLevel] = {}
        for key, value in environ.items():
            if key == stem:
                default = _parse(key, value)
            elif key.startswith(stem + "__"):
                prefix = logger_prefix(key[len(stem) + 2 :])
                if prefix:
                    levels[prefix] = _parse(key, value)
        config = LevelConfig(levels, default)
        log_debug(
            "level_config_loaded",
            **make_event("env", {"prefix": self._prefix, "prefixes": sorted(levels), "default": default.name}),
        )
        return config


def logger_prefix(suffix: str) -> str:
    """Translate an environment suffix into a dotted logger prefix.

    Examples
    --------
    >>> logger_prefix('APP__DB__POOL')
    'app.db.pool'
    >>> logger_prefix('__')
    ''
    """

    return ".".join(part.lower() for part in suffix.split("__") if part)


def _parse(key: str, value: str) -> LogLevel:
    """Parse *value* and name the variable *key* on failure."""

    try:
        return LogLevel.parse(value)
    except InvalidLevel as exc:
        log_error("level_config_invalid", **make_event("env", {"variable": key, "value": value}))
        raise InvalidLevel(f"Invalid level in {key}: {value!r}") from exc
