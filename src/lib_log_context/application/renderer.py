"""Parameterised message construction.

Purpose
-------
Turn a ``{}`` template and its positional arguments into text, detaching a
trailing exception so sinks can render it as a structured cause chain.

Contents
--------
* :data:`PLACEHOLDER` – the ``{}`` marker.
* :class:`RenderedMessage` – rendered text plus optional cause.
* :class:`LazyArg` / :func:`lazy` – arguments computed only when substituted.
* :class:`MessageRenderer` – substitution engine.
* :func:`count_placeholders` – number of unescaped placeholders in a template.

System Role
-----------
Only invoked after the level gate has said yes. The gate saves the renderer's
cost; building the arguments is still the caller's business, which is what
:class:`LazyArg` helps with.

Rules
-----
* Placeholders are filled left to right with ``str(arg)``.
* Surplus arguments are ignored, except that exactly one surplus argument that
  is a :class:`BaseException` becomes the cause instead of being inlined.
* Missing arguments leave the remaining placeholders as literal ``{}``.
* ``\\{}`` renders a literal ``{}``; ``\\\\{}`` renders a backslash followed by
  a substituted placeholder.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Final, Sequence

from ..domain.records import failed_str_marker
from ..observability import log_error, make_event

PLACEHOLDER: Final[str] = "{}"
_ESCAPE: Final[str] = "\\"


@dataclass(frozen=True, slots=True)
class RenderedMessage:
    """Outcome of :meth:`MessageRenderer.render`."""

    text: str
    cause: BaseException | None = None
    consumed: int = 0
    """Number of arguments substituted into the text."""


class LazyArg:
    """Defer computing an argument until the renderer substitutes it.

    The supplier runs at most once; its result is cached.

    Examples
    --------
    >>> calls = []
    >>> arg = lazy(lambda: calls.append(1) or "expensive")
    >>> calls
    []
    >>> str(arg), str(arg), calls
    ('expensive', 'expensive', [1])
    """

    __slots__ = ("_supplier", "_value", "_resolved")

    def __init__(self, supplier: Callable[[], Any]) -> None:
        self._supplier = supplier
        self._value: Any = None
        self._resolved = False

    def resolve(self) -> Any:
        if not self._resolved:
            self._value = self._supplier()
            self._resolved = True
        return self._value

    def __str__(self) -> str:
        return str(self.resolve())

    def __repr__(self) -> str:
        return f"LazyArg({self._value!r})" if self._resolved else "LazyArg(<pending>)"


def lazy(supplier: Callable[[], Any]) -> LazyArg:
    """Wrap *supplier* so it is only called if the message is rendered."""

    return LazyArg(supplier)


def count_placeholders(template: str) -> int:
    """Return the number of substitutable placeholders in *template*.

    Examples
    --------
    >>> count_placeholders("a {} b {} c")
    2
    >>> count_placeholders("literal \\\\{} only")
    0
    """

    return sum(1 for segment in _scan(template) if segment is None)


class MessageRenderer:
    """Substitute ``{}`` placeholders and detach a trailing cause.

    Examples
    --------
    >>> renderer = MessageRenderer()
    >>> renderer.render("User {} logged in", "alice").text
    'User alice logged in'
    >>> boom = ValueError("boom")
    >>> result = renderer.render("Failed for {}", "bob", boom)
    >>> result.text, result.cause is boom
    ('Failed for bob', True)
    >>> renderer.render("{} and {}", "one").text
    'one and {}'
    """

    def render(self, template: str, *args: Any) -> RenderedMessage:
        """Render *template* with *args*; see the module docstring for the rules."""

        return self.render_sequence(template, args)

    def render_sequence(self, template: str, args: Sequence[Any]) -> RenderedMessage:
        """Variant of :meth:`render` taking the arguments as one sequence."""

        segments = _scan(template)
        placeholders = sum(1 for segment in segments if segment is None)
        cause = split_cause(placeholders, args)

        parts: list[str] = []
        available = min(placeholders, len(args))
        consumed = 0
        for segment in segments:
            if segment is not None:
                parts.append(segment)
            elif consumed < available:
                parts.append(_safe_text(args[consumed], consumed))
                consumed += 1
            else:
                parts.append(PLACEHOLDER)
        return RenderedMessage("".join(parts), cause, consumed)


def split_cause(placeholders: int, args: Sequence[Any]) -> BaseException | None:
    """Return the trailing cause when ``len(args) == placeholders + 1``.

    Examples
    --------
    >>> split_cause(1, ("a", KeyError("k")))
    KeyError('k')
    >>> split_cause(2, ("a", KeyError("k"))) is None
    True
    """

    if len(args) == placeholders + 1 and isinstance(args[-1], BaseException):
        return args[-1]
    return None


def _scan(template: str) -> list[str | None]:
    """Split *template* into literal text and ``None`` markers for placeholders."""

    segments: list[str | None] = []
    literal: list[str] = []
    index = 0
    length = len(template)
    while index < length:
        start = template.find(PLACEHOLDER, index)
        if start < 0:
            literal.append(template[index:])
            break
        escapes = 0
        while start - escapes - 1 >= index and template[start - escapes - 1] == _ESCAPE:
            escapes += 1
        if escapes == 1:
            literal.append(template[index : start - 1])
            literal.append(PLACEHOLDER)
        else:
            if escapes >= 2:
                literal.append(template[index : start - 1])
            else:
                literal.append(template[index:start])
            segments.append("".join(literal))
            literal = []
            segments.append(None)
        index = start + len(PLACEHOLDER)
    segments.append("".join(literal))
    return [segment for segment in segments if segment != ""]


def _safe_text(value: Any, position: int) -> str:
    try:
        return str(value)
    except Exception as exc:  # noqa: BLE001 - rendering degrades instead of failing the caller
        log_error(
            "argument_render_failed",
            **make_event("renderer", {"position": position, "error": f"{type(exc).__name__}: {exc}"}),
        )
        return failed_str_marker(exc)
