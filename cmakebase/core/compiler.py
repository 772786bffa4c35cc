"""Compiler family and build mode detection."""

from __future__ import annotations

import re
from enum import Enum
from pathlib import PurePath, PureWindowsPath
from typing import Optional


class CompilerFamily(str, Enum):
    """Compiler families the function library knows flags for."""

    GNU = "GNU"
    CLANG = "Clang"
    MSVC = "MSVC"
    UNKNOWN = "unknown"

    @classmethod
    def from_compiler_id(cls, compiler_id: Optional[str]) -> "CompilerFamily":
        """Classify a CMake compiler id (CMAKE_CXX_COMPILER_ID).

        Matching is a regex search, as CMake's `MATCHES` is, so `AppleClang`
        and `ARMClang` are Clang.
        """
        if not compiler_id:
            return cls.UNKNOWN
        if re.search("GNU", compiler_id):
            return cls.GNU
        if re.search("Clang", compiler_id):
            return cls.CLANG
        if re.search("MSVC", compiler_id):
            return cls.MSVC
        return cls.UNKNOWN

    @property
    def is_gnu_like(self) -> bool:
        return self in (CompilerFamily.GNU, CompilerFamily.CLANG)


class BuildMode(str, Enum):
    """Two-valued build mode derived from CMAKE_BUILD_TYPE."""

    DEBUG = "Debug"
    RELEASE = "Release"

    @classmethod
    def from_build_type(cls, build_type: Optional[str]) -> "BuildMode":
        """Debug when the build type matches "Debug", Release otherwise.

        An empty build type falls into the Release branch.
        """
        if build_type and re.search("Debug", build_type):
            return cls.DEBUG
        return cls.RELEASE


def detect_compiler_id(compiler_path: Optional[str]) -> str:
    """Infer a CMake compiler id from a compiler executable name.

    Args:
        compiler_path: Executable name or path (e.g. "arm-none-eabi-g++").

    Returns:
        "Clang", "GNU", "MSVC" or an empty string when unrecognised.
    """
    if not compiler_path:
        return ""
    name = PureWindowsPath(compiler_path).name if "\\" in compiler_path else PurePath(compiler_path).name
    name = name.lower()
    if name.endswith(".exe"):
        name = name[: -len(".exe")]

    if "clang" in name:
        return "Clang"
    if name == "cl":
        return "MSVC"
    if re.search(r"(^|-)(g\+\+|gcc|c\+\+|cc)(-\d+(\.\d+)*)?$", name):
        return "GNU"
    return ""
