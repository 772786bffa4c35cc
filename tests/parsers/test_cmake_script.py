"""Tests for CMake tokenization and variable-script evaluation."""

from __future__ import annotations

from pathlib import Path

import pytest

from cmakebase.errors import CMakeParseError
from cmakebase.parsers.cmake.script import CMakeScriptEvaluator, evaluate_script
from cmakebase.parsers.cmake.tokens import BRACKET, QUOTED, UNQUOTED, extract_arg_tokens
from cmakebase.parsers.cmake.variables import CMakeVariableResolver


def test_extract_arg_tokens_handles_quotes_brackets_and_comments() -> None:
    text = 'NAME "quoted value" [[bracket arg]] unquoted # trailing comment\n "" "a#b"'

    assert extract_arg_tokens(text) == [
        "NAME",
        "quoted value",
        "bracket arg",
        "unquoted",
        "",
        "a#b",
    ]


def test_resolver_expands_nested_and_undefined(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CMAKEBASE_TEST_HOME", "/home/dev")
    resolver = CMakeVariableResolver({"NAME": "ARM", "PREFIX_ARM": "/opt/arm"})

    assert resolver.resolve("${PREFIX_${NAME}}/bin") == "/opt/arm/bin"
    assert resolver.resolve("${MISSING}-x") == "-x"
    assert resolver.resolve("$ENV{CMAKEBASE_TEST_HOME}/.local") == "/home/dev/.local"


def test_set_forms() -> None:
    script = """
    set(SCALAR value)
    set(QUOTED "hello world")
    set(LIST a b c)
    set(EMPTY "")
    set(REF "${SCALAR}-suffix")
    set(CACHED 1 CACHE STRING "doc")
    """

    result = CMakeScriptEvaluator().evaluate(script)

    assert result.assignments == {
        "SCALAR": "value",
        "QUOTED": "hello world",
        "LIST": "a;b;c",
        "EMPTY": "",
        "REF": "value-suffix",
        "CACHED": "1",
    }


def test_cache_set_does_not_replace_defined_variable() -> None:
    script = 'set(VERSION_MAJOR 1 CACHE STRING "Major")\nset(FORCED 1 CACHE STRING "" FORCE)\n'

    result = CMakeScriptEvaluator({"VERSION_MAJOR": "3", "FORCED": "0"}).evaluate(script)

    assert "VERSION_MAJOR" not in result.assignments
    assert result.assignments["FORCED"] == "1"


def test_unset_option_and_list_append() -> None:
    script = """
    set(GONE 1)
    unset(GONE)
    option(WITH_TESTS "Build tests" ON)
    option(PRESET "Already set" ON)
    list(APPEND FLAGS -Wall -Wextra)
    """

    result = CMakeScriptEvaluator({"PRESET": "OFF", "FLAGS": "-O2"}).evaluate(script)

    assert result.assignments["GONE"] is None
    assert result.assignments["WITH_TESTS"] == "ON"
    assert "PRESET" not in result.assignments
    assert result.assignments["FLAGS"] == "-O2;-Wall;-Wextra"


def test_include_guard_and_ignored_commands() -> None:
    script = 'include_guard(GLOBAL)\nmessage(STATUS "hi")\nset(X 1)\n'

    result = CMakeScriptEvaluator().evaluate(script)

    assert result.include_guard is True
    assert result.ignored_commands == ["message"]
    assert result.assignments == {"X": "1"}


def test_commands_inside_blocks_are_not_evaluated() -> None:
    script = """
    set(OUTER 1)
    if(WIN32)
      set(INNER 1)
    endif()
    function(helper)
      set(IN_FUNCTION 1 PARENT_SCOPE)
    endfunction()
    """

    result = CMakeScriptEvaluator().evaluate(script)

    assert result.assignments == {"OUTER": "1"}


def test_current_list_dir_is_available(tmp_path: Path) -> None:
    script = tmp_path / "paths.cmake"
    script.write_text('set(HERE "${CMAKE_CURRENT_LIST_DIR}/sub")\n', encoding="utf-8")

    result = evaluate_script(script)

    assert result.assignments["HERE"] == f"{tmp_path}/sub"


def test_parse_error_is_reported() -> None:
    with pytest.raises(CMakeParseError):
        CMakeScriptEvaluator().evaluate("set(UNTERMINATED\n")


def test_tokens_remember_their_kind() -> None:
    tokens = extract_arg_tokens('plain "quoted" [=[bracket]=]')

    assert [t.kind for t in tokens] == [UNQUOTED, QUOTED, BRACKET]
    assert [t.is_bracket for t in tokens] == [False, False, True]


def test_bracket_arguments_are_literal() -> None:
    script = 'set(RAW [[${Y}]])\nset(LONG [==[\n$ENV{HOME}\\n]==])\nset(EXPANDED "${Y}")\n'

    result = CMakeScriptEvaluator({"Y": "val"}).evaluate(script)

    assert result.assignments["RAW"] == "${Y}"
    assert result.assignments["LONG"] == "$ENV{HOME}\\n"
    assert result.assignments["EXPANDED"] == "val"


def test_expanded_values_are_not_expanded_again() -> None:
    resolver = CMakeVariableResolver({"TEMPLATE": "${INNER}", "INNER": "oops"})

    assert resolver.resolve("${TEMPLATE}") == "${INNER}"
    assert resolver.resolve("a-${TEMPLATE}-${INNER}") == "a-${INNER}-oops"


def test_escape_sequences() -> None:
    resolver = CMakeVariableResolver({"X": "1"})

    assert resolver.resolve("\\${X}") == "${X}"
    assert resolver.resolve('say \\"hi\\"') == 'say "hi"'
    assert resolver.resolve("C:\\\\dir") == "C:\\dir"
    assert resolver.resolve("a\\;b") == "a\\;b"
    assert resolver.resolve("${X}}") == "1}"
    assert resolver.resolve("${UNCLOSED") == "${UNCLOSED"


def test_escaped_reference_in_script() -> None:
    result = CMakeScriptEvaluator({"X": "1"}).evaluate('set(LITERAL "\\${X} is ${X}")\n')

    assert result.assignments["LITERAL"] == "${X} is 1"
