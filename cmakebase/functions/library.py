"""Function library applied to downstream build targets.

Python counterparts of the functions in `cmake/Functions.cmake`. Each
function mutates a Target according to the BuildContext and reports what it
did as a FunctionResult instead of silently doing nothing.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Tuple

from cmakebase.core.compiler import BuildMode, CompilerFamily
from cmakebase.core.target import ApplyOutcome, FunctionResult, Target
from cmakebase.core.version import set_project_version
from cmakebase.parsers.cmake.tokens import split_list
from cmakebase.runtime.context import BuildContext

logger = logging.getLogger("cmakebase.functions.library")

GNU_WARNING_FLAGS: Tuple[str, ...] = (
    "-Wall",
    "-Wextra",
    "-Wpedantic",
    "-Wconversion",
    "-Wsign-conversion",
)
MSVC_WARNING_FLAGS: Tuple[str, ...] = ("/W4", "/permissive-")
COVERAGE_FLAGS: Tuple[str, ...] = ("--coverage",)

DEBUG_DEFINITION = "DEBUG_BUILD"
RELEASE_DEFINITION = "RELEASE_BUILD"
ENV_DEFINITIONS_VARIABLE = "ENV_SPECIFIC_DEFINITIONS"


def add_compiler_warnings(target: Target, context: BuildContext) -> FunctionResult:
    """Attach the warning flag set for the detected compiler family.

    Unknown compilers get no flags; the result says so and a warning is
    logged.
    """
    family = context.compiler_family
    if family.is_gnu_like:
        flags = GNU_WARNING_FLAGS
    elif family is CompilerFamily.MSVC:
        flags = MSVC_WARNING_FLAGS
    else:
        logger.warning(
            "No warning flags known for compiler '%s'; %s left unchanged",
            context.compiler_id or "<none>",
            target.name,
        )
        return FunctionResult(
            "add_compiler_warnings",
            target.name,
            ApplyOutcome.SKIPPED_UNSUPPORTED,
            reason=f"unsupported compiler '{context.compiler_id}'",
        )

    target.add_compile_options(flags)
    return FunctionResult("add_compiler_warnings", target.name, ApplyOutcome.APPLIED, flags)


def enable_code_coverage(target: Target, context: BuildContext) -> FunctionResult:
    """Instrument a target for coverage in Debug builds with GNU/Clang."""
    if not context.compiler_family.is_gnu_like:
        if context.compiler_family is CompilerFamily.UNKNOWN:
            logger.warning(
                "Coverage not supported for compiler '%s'; %s left unchanged",
                context.compiler_id or "<none>",
                target.name,
            )
            outcome = ApplyOutcome.SKIPPED_UNSUPPORTED
        else:
            outcome = ApplyOutcome.SKIPPED_NOT_APPLICABLE
        return FunctionResult(
            "enable_code_coverage",
            target.name,
            outcome,
            reason=f"compiler '{context.compiler_id}' is not GNU/Clang",
        )

    if context.build_mode is not BuildMode.DEBUG:
        return FunctionResult(
            "enable_code_coverage",
            target.name,
            ApplyOutcome.SKIPPED_NOT_APPLICABLE,
            reason=f"build type '{context.build_type}' is not Debug",
        )

    target.add_compile_options(COVERAGE_FLAGS)
    target.add_link_options(COVERAGE_FLAGS)
    logger.info("Code coverage enabled for %s", target.name)
    return FunctionResult("enable_code_coverage", target.name, ApplyOutcome.APPLIED, COVERAGE_FLAGS)


def configure_preprocessor_definitions(target: Target, context: BuildContext) -> FunctionResult:
    """Attach DEBUG_BUILD or RELEASE_BUILD plus environment definitions."""
    if context.build_mode is BuildMode.DEBUG:
        definitions = [DEBUG_DEFINITION]
    else:
        definitions = [RELEASE_DEFINITION]

    if context.is_defined(ENV_DEFINITIONS_VARIABLE):
        definitions.extend(
            item
            for item in split_list(context.get(ENV_DEFINITIONS_VARIABLE, ""))
            if item not in (DEBUG_DEFINITION, RELEASE_DEFINITION)
        )

    target.add_compile_definitions(definitions)
    return FunctionResult(
        "configure_preprocessor_definitions",
        target.name,
        ApplyOutcome.APPLIED,
        tuple(definitions),
    )


TargetFunction = Callable[[Target, BuildContext], FunctionResult]

FUNCTIONS: Dict[str, TargetFunction] = {
    "add_compiler_warnings": add_compiler_warnings,
    "enable_code_coverage": enable_code_coverage,
    "configure_preprocessor_definitions": configure_preprocessor_definitions,
}


__all__ = [
    "FUNCTIONS",
    "GNU_WARNING_FLAGS",
    "MSVC_WARNING_FLAGS",
    "COVERAGE_FLAGS",
    "add_compiler_warnings",
    "configure_preprocessor_definitions",
    "enable_code_coverage",
    "set_project_version",
]
