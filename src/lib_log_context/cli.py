"""CLI adapter for ``lib_log_context`` built on ``lib_cli_exit_tools``.

Purpose
-------
Let operators check how a level configuration resolves for a logger name, and
preview how templates render, without writing Python code.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command that wires global traceback handling into
  ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata for quick diagnostics.
* :func:`cli_level` – resolves the effective level for a logger name.
* :func:`cli_render` – renders a template with positional arguments.
* :func:`cli_emit` – runs the full gate/scope/render flow and prints the record.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
The CLI lives in the outermost layer. It builds a throwaway
:class:`~lib_log_context.core.LogCore` per command and never reaches into
component internals. ``lib_cli_exit_tools`` centralises the exit code strategy.
"""

from __future__ import annotations

import json
import sys
from importlib import metadata
from typing import Any, Callable, Final, Optional, Sequence, TypeVar

import lib_cli_exit_tools
import rich_click as click

from .adapters.env.default import EnvLevelProvider
from .adapters.sinks.memory import CollectingSink
from .core import LogCore
from .domain.errors import InvalidLevel
from .domain.level_config import LevelConfig
from .domain.levels import LogLevel

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000

F = TypeVar("F", bound=Callable[..., Any])

LEVEL_CHOICES: Final[tuple[str, ...]] = tuple(level.name for level in LogLevel)


def _resolve_version() -> str:
    """Return the installed package version, ``"0.0.0"`` for source checkouts."""

    try:
        return metadata.version("lib_log_context")
    except metadata.PackageNotFoundError:
        return "0.0.0"


def _split_pairs(_ctx: click.Context, param: click.Parameter, values: Sequence[str]) -> tuple[tuple[str, str], ...]:
    """Click callback turning repeated ``KEY=VALUE`` options into pairs."""

    pairs: list[tuple[str, str]] = []
    for raw in values:
        key, sep, value = raw.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(f"Expected KEY=VALUE, got {raw!r}", param=param)
        pairs.append((key.strip(), value))
    return tuple(pairs)


_level_options = [
    click.option(
        "--set",
        "level_pairs",
        multiple=True,
        callback=_split_pairs,
        help="Threshold for a logger prefix as PREFIX=LEVEL (repeatable)",
    ),
    click.option("--default", "default_level", default=None, help="Default threshold when no prefix matches"),
    click.option(
        "--env-prefix",
        default=None,
        help="Read thresholds from <PREFIX>_LEVEL and <PREFIX>_LEVEL__A__B variables first",
    ),
]


def _with_level_options(fn: F) -> F:
    """Attach the shared ``--set``/``--default``/``--env-prefix`` options to *fn*."""

    for option in reversed(_level_options):
        fn = option(fn)
    return fn


def _build_config(
    level_pairs: Sequence[tuple[str, str]],
    default_level: Optional[str],
    env_prefix: Optional[str],
) -> LevelConfig:
    """Combine environment thresholds with ``--set``/``--default`` overrides."""

    try:
        base = EnvLevelProvider(env_prefix).load() if env_prefix else LevelConfig({})
        return base.with_overrides(dict(level_pairs), default=default_level)
    except InvalidLevel as exc:
        raise click.BadParameter(str(exc), param_hint="--set/--default/--env-prefix") from exc


@click.group(
    help="Scoped correlation context and level-gated log records",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="lib_log_context",
    message="lib_log_context version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Root command configuring traceback handling for all subcommands.

    Side Effects
        Mutates ``lib_cli_exit_tools.config.traceback`` and
        ``lib_cli_exit_tools.config.traceback_force_color``.
    """

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata("lib_log_context")
    except metadata.PackageNotFoundError:
        click.echo("lib_log_context (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', 'lib_log_context')}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


@cli.command("level", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("name")
@_with_level_options
def cli_level(
    name: str,
    level_pairs: Sequence[tuple[str, str]],
    default_level: Optional[str],
    env_prefix: Optional[str],
) -> None:
    """Print the effective level of logger NAME and which levels pass.

    Examples
    --------
    >>> from click.testing import CliRunner
    >>> result = CliRunner().invoke(cli, ["level", "a.b.c", "--set", "a.b=debug", "--set", "a=info"])
    >>> json.loads(result.output)["effective_level"]
    'DEBUG'
    """

    core = LogCore(config=_build_config(level_pairs, default_level, env_prefix))
    payload = {
        "logger": name,
        "effective_level": core.gate.effective_level(name).name,
        "enabled": {level.name: core.is_enabled(name, level) for level in LogLevel},
    }
    click.echo(json.dumps(payload, separators=(",", ":")))


@cli.command("render", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("template")
@click.argument("args", nargs=-1)
def cli_render(template: str, args: Sequence[str]) -> None:
    """Render TEMPLATE with ARGS substituted for its ``{}`` placeholders."""

    core = LogCore()
    click.echo(core.renderer.render(template, *args).text)


@cli.command("emit", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("name")
@click.argument("level", type=click.Choice(LEVEL_CHOICES, case_sensitive=False))
@click.argument("template")
@click.argument("args", nargs=-1)
@click.option(
    "--context",
    "context_pairs",
    multiple=True,
    callback=_split_pairs,
    help="Correlation entry active while emitting, as KEY=VALUE (repeatable)",
)
@click.option("--indent", type=int, default=None, help="Pretty-print JSON output with the provided indent size")
@_with_level_options
def cli_emit(
    name: str,
    level: str,
    template: str,
    args: Sequence[str],
    context_pairs: Sequence[tuple[str, str]],
    indent: Optional[int],
    level_pairs: Sequence[tuple[str, str]],
    default_level: Optional[str],
    env_prefix: Optional[str],
) -> None:
    """Emit one record through the gate and print it as JSON (``null`` if suppressed)."""

    sink = CollectingSink()
    core = LogCore(sink, config=_build_config(level_pairs, default_level, env_prefix))
    with core.scope(dict(context_pairs)):
        record = core.emit(name, level, template, *args)
    payload = record.to_dict() if record is not None else None
    click.echo(json.dumps(payload, indent=indent, separators=(",", ":")))


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    restore_traceback: bool = True,
    prog_name: str = "lib_log_context",
) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name=prog_name,
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))
