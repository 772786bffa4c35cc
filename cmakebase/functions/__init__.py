"""Function library for downstream targets."""

from .library import (
    COVERAGE_FLAGS,
    FUNCTIONS,
    GNU_WARNING_FLAGS,
    MSVC_WARNING_FLAGS,
    add_compiler_warnings,
    configure_preprocessor_definitions,
    enable_code_coverage,
    set_project_version,
)

__all__ = [
    "COVERAGE_FLAGS",
    "FUNCTIONS",
    "GNU_WARNING_FLAGS",
    "MSVC_WARNING_FLAGS",
    "add_compiler_warnings",
    "configure_preprocessor_definitions",
    "enable_code_coverage",
    "set_project_version",
]
