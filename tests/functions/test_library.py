"""Tests for the function library."""

from __future__ import annotations

import itertools
import logging

import pytest

from cmakebase.core.target import ApplyOutcome, Target
from cmakebase.env.layers import COMMON_RANK, VariableLayer
from cmakebase.functions import (
    COVERAGE_FLAGS,
    GNU_WARNING_FLAGS,
    MSVC_WARNING_FLAGS,
    add_compiler_warnings,
    configure_preprocessor_definitions,
    enable_code_coverage,
)
from cmakebase.runtime.context import BuildContext

BUILD_TYPES = ["Debug", "Release", "RelWithDebInfo", ""]
COMPILER_IDS = ["GNU", "Clang", "AppleClang", "MSVC", "Intel", ""]


def _context(build_type: str = "Debug", compiler_id: str = "GNU", **variables: str) -> BuildContext:
    layers = [VariableLayer("common", COMMON_RANK, variables)] if variables else []
    return BuildContext.create(layers=layers, build_type=build_type, compiler_id=compiler_id)


@pytest.mark.parametrize("compiler_id", ["GNU", "Clang", "AppleClang"])
def test_gnu_like_warnings_are_exactly_five_flags(compiler_id: str) -> None:
    target = Target("app")

    result = add_compiler_warnings(target, _context(compiler_id=compiler_id))

    assert result.outcome is ApplyOutcome.APPLIED
    assert target.compile_options == list(GNU_WARNING_FLAGS)
    assert len(target.compile_options) == 5


def test_warnings_are_idempotent() -> None:
    target = Target("app")
    context = _context()

    add_compiler_warnings(target, context)
    add_compiler_warnings(target, context)

    assert target.compile_options == list(GNU_WARNING_FLAGS)


def test_msvc_warnings() -> None:
    target = Target("app")

    result = add_compiler_warnings(target, _context(compiler_id="MSVC"))

    assert result.applied
    assert target.compile_options == list(MSVC_WARNING_FLAGS)


def test_unknown_compiler_is_reported_not_swallowed(caplog: pytest.LogCaptureFixture) -> None:
    target = Target("app")

    with caplog.at_level(logging.WARNING, logger="cmakebase.functions.library"):
        result = add_compiler_warnings(target, _context(compiler_id="Intel"))

    assert result.outcome is ApplyOutcome.SKIPPED_UNSUPPORTED
    assert target.compile_options == []
    assert "Intel" in caplog.text


@pytest.mark.parametrize(
    "build_type, compiler_id", list(itertools.product(BUILD_TYPES, COMPILER_IDS))
)
def test_coverage_only_for_debug_gnu_like(build_type: str, compiler_id: str) -> None:
    target = Target("app")
    before = target.snapshot()

    result = enable_code_coverage(target, _context(build_type, compiler_id))

    expected = build_type == "Debug" and compiler_id in {"GNU", "Clang", "AppleClang"}
    if expected:
        assert result.outcome is ApplyOutcome.APPLIED
        assert target.compile_options == list(COVERAGE_FLAGS)
        assert target.link_options == list(COVERAGE_FLAGS)
    else:
        assert result.outcome is not ApplyOutcome.APPLIED
        assert target.snapshot() == before


def test_coverage_does_not_remove_existing_flags() -> None:
    target = Target("app", compile_options=["-O0"])

    enable_code_coverage(target, _context())
    enable_code_coverage(target, _context(build_type="Release"))

    assert target.compile_options == ["-O0", "--coverage"]


@pytest.mark.parametrize(
    "build_type, compiler_id", list(itertools.product(BUILD_TYPES, COMPILER_IDS))
)
def test_exactly_one_build_definition(build_type: str, compiler_id: str) -> None:
    target = Target("app")

    configure_preprocessor_definitions(target, _context(build_type, compiler_id))

    build_defs = {"DEBUG_BUILD", "RELEASE_BUILD"} & set(target.compile_definitions)
    assert len(build_defs) == 1
    expected = "DEBUG_BUILD" if build_type == "Debug" else "RELEASE_BUILD"
    assert build_defs == {expected}


def test_environment_definitions_are_appended() -> None:
    target = Target("app")
    context = _context("Release", ENV_SPECIFIC_DEFINITIONS="PROD_ENVIRONMENT;NDEBUG")

    result = configure_preprocessor_definitions(target, context)

    assert target.compile_definitions == ["RELEASE_BUILD", "PROD_ENVIRONMENT", "NDEBUG"]
    assert result.items == ("RELEASE_BUILD", "PROD_ENVIRONMENT", "NDEBUG")


def test_empty_environment_definitions_add_nothing() -> None:
    target = Target("app")

    configure_preprocessor_definitions(target, _context(ENV_SPECIFIC_DEFINITIONS=""))

    assert target.compile_definitions == ["DEBUG_BUILD"]


def test_environment_cannot_add_the_opposite_build_definition() -> None:
    target = Target("app")
    context = _context("Debug", ENV_SPECIFIC_DEFINITIONS="RELEASE_BUILD;EXTRA")

    configure_preprocessor_definitions(target, context)

    assert target.compile_definitions == ["DEBUG_BUILD", "EXTRA"]
