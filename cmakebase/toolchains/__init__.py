"""Cross-compilation toolchain descriptors."""

from .descriptor import (
    BUILTIN_TOOLCHAINS,
    SearchMode,
    SearchPathPolicy,
    ToolchainDescriptor,
    ToolchainRegistry,
    load_toolchain,
    render_toolchain_file,
)

__all__ = [
    "BUILTIN_TOOLCHAINS",
    "SearchMode",
    "SearchPathPolicy",
    "ToolchainDescriptor",
    "ToolchainRegistry",
    "load_toolchain",
    "render_toolchain_file",
]
