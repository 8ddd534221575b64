"""MessageRenderer substitution rules and cause detachment."""

from __future__ import annotations

import logging

import pytest

from lib_log_context.application.renderer import MessageRenderer, count_placeholders, lazy, split_cause


@pytest.fixture()
def renderer() -> MessageRenderer:
    return MessageRenderer()


def test_simple_substitution(renderer: MessageRenderer) -> None:
    assert renderer.render("User {} logged in", "alice").text == "User alice logged in"


def test_left_to_right_substitution(renderer: MessageRenderer) -> None:
    result = renderer.render("{} -> {} ({})", "a", 2, None)
    assert result.text == "a -> 2 (None)"
    assert result.consumed == 3
    assert result.cause is None


def test_trailing_exception_becomes_cause(renderer: MessageRenderer) -> None:
    error = ValueError("bad input")
    result = renderer.render("Processing {} failed", "order-7", error)
    assert result.text == "Processing order-7 failed"
    assert result.cause is error


def test_exception_filling_a_placeholder_is_inlined(renderer: MessageRenderer) -> None:
    error = ValueError("bad input")
    result = renderer.render("Failed: {}", error)
    assert result.text == "Failed: bad input"
    assert result.cause is None


def test_surplus_arguments_are_ignored(renderer: MessageRenderer) -> None:
    error = KeyError("k")
    result = renderer.render("only {}", "one", "two", error)
    assert result.text == "only one"
    assert result.cause is None


def test_surplus_non_exception_is_not_cause(renderer: MessageRenderer) -> None:
    result = renderer.render("only {}", "one", "two")
    assert result.text == "only one"
    assert result.cause is None


def test_missing_arguments_leave_literal_placeholders(renderer: MessageRenderer) -> None:
    assert renderer.render("{} and {} and {}", "x").text == "x and {} and {}"
    assert renderer.render("no args {}").text == "no args {}"


def test_template_without_placeholders(renderer: MessageRenderer) -> None:
    error = RuntimeError("x")
    result = renderer.render("static message", error)
    assert result.text == "static message"
    assert result.cause is error


def test_escaped_placeholders(renderer: MessageRenderer) -> None:
    assert renderer.render("literal \\{} then {}", "v").text == "literal {} then v"
    assert renderer.render("path C:\\\\{}", "dir").text == "path C:\\dir"
    assert count_placeholders("literal \\{} then {}") == 1


def test_braces_that_are_not_placeholders_are_kept(renderer: MessageRenderer) -> None:
    assert renderer.render("{x} {} { }", "v").text == "{x} v { }"


def test_lazy_argument_only_evaluated_when_rendered(renderer: MessageRenderer) -> None:
    calls: list[int] = []

    def expensive() -> str:
        calls.append(1)
        return "computed"

    unused = lazy(expensive)
    assert calls == []
    assert renderer.render("value={}", unused).text == "value=computed"
    assert calls == [1]
    renderer.render("no placeholder", lazy(expensive))
    assert calls == [1]


def test_failing_str_degrades(renderer: MessageRenderer, caplog: pytest.LogCaptureFixture) -> None:
    class Broken:
        def __str__(self) -> str:
            raise RuntimeError("nope")

    caplog.set_level(logging.ERROR, logger="lib_log_context")
    result = renderer.render("value={}", Broken())
    assert result.text == "value=[FAILED str(): RuntimeError]"
    assert any(record.getMessage() == "argument_render_failed" for record in caplog.records)


def test_split_cause_rules() -> None:
    error = OSError("disk")
    assert split_cause(0, (error,)) is error
    assert split_cause(1, (error,)) is None
    assert split_cause(1, ("a", "b")) is None
