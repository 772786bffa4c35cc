"""Tests for toolchain descriptors and the toolchain registry."""

from __future__ import annotations

from pathlib import Path

import pytest

from cmakebase.errors import ToolchainError
from cmakebase.runtime.context import BuildContext
from cmakebase.templates.scaffold import resource_path
from cmakebase.toolchains.descriptor import (
    BUILTIN_TOOLCHAINS,
    CORTEX_M4_FLAGS,
    SearchMode,
    ToolchainRegistry,
    load_toolchain_file,
    render_toolchain_file,
)


@pytest.fixture
def registry() -> ToolchainRegistry:
    registry = ToolchainRegistry.get_instance()
    registry.reset()
    yield registry
    registry.reset()


def test_shipped_toolchain_file_matches_builtin() -> None:
    shipped = Path(str(resource_path("cmake/Toolchains/arm-none-eabi.cmake")))

    descriptor = load_toolchain_file(shipped)

    assert descriptor == BUILTIN_TOOLCHAINS["arm-none-eabi"]


def test_builtin_arm_descriptor() -> None:
    descriptor = BUILTIN_TOOLCHAINS["arm-none-eabi"]
    variables = descriptor.to_variables()

    assert variables["CMAKE_SYSTEM_NAME"] == "Generic"
    assert variables["CMAKE_SYSTEM_PROCESSOR"] == "arm"
    assert variables["CMAKE_CXX_COMPILER"] == "arm-none-eabi-g++"
    assert variables["CMAKE_C_FLAGS"] == CORTEX_M4_FLAGS
    assert variables["CMAKE_FIND_ROOT_PATH_MODE_PROGRAM"] == "NEVER"
    assert variables["CMAKE_FIND_ROOT_PATH_MODE_LIBRARY"] == "ONLY"
    assert variables["CMAKE_FIND_ROOT_PATH_MODE_INCLUDE"] == "ONLY"
    assert variables["CMAKE_FIND_ROOT_PATH_MODE_PACKAGE"] == "ONLY"
    assert descriptor.compiler_id == "GNU"


def test_descriptor_is_immutable() -> None:
    descriptor = BUILTIN_TOOLCHAINS["arm-none-eabi"]

    with pytest.raises(Exception):
        descriptor.c_flags = "-O0"  # type: ignore[misc]


def test_loading_twice_returns_same_descriptor(registry: ToolchainRegistry, tmp_path: Path) -> None:
    path = tmp_path / "riscv.cmake"
    path.write_text(
        "include_guard(GLOBAL)\n"
        "set(CMAKE_SYSTEM_NAME Generic)\n"
        "set(CMAKE_SYSTEM_PROCESSOR riscv32)\n"
        "set(CMAKE_C_COMPILER riscv32-unknown-elf-gcc)\n"
        'set(CMAKE_C_FLAGS "${CMAKE_C_FLAGS} -march=rv32imac")\n',
        encoding="utf-8",
    )

    first = registry.load(path)
    second = registry.load(str(path))

    assert first is second
    assert registry.is_loaded(path)
    assert first.c_flags == "-march=rv32imac"
    assert first.include_guard is True
    assert first.search_policy.program is SearchMode.NEVER


def test_loading_twice_gives_identical_context(registry: ToolchainRegistry) -> None:
    once = BuildContext.create(toolchain=registry.load("arm-none-eabi"))
    registry.load("arm-none-eabi")
    twice = BuildContext.create(toolchain=registry.load("arm-none-eabi"))

    assert once.variables == twice.variables
    assert twice.variables["CMAKE_CXX_FLAGS"] == CORTEX_M4_FLAGS


def test_unknown_builtin_name(registry: ToolchainRegistry) -> None:
    with pytest.raises(ToolchainError):
        registry.load("no-such-toolchain")


def test_missing_file(registry: ToolchainRegistry, tmp_path: Path) -> None:
    with pytest.raises(ToolchainError):
        registry.load(tmp_path / "missing.cmake")


def test_toml_descriptor(tmp_path: Path) -> None:
    path = tmp_path / "aarch64.toml"
    path.write_text(
        'system_name = "Linux"\n'
        'system_processor = "aarch64"\n'
        'sysroot = "/opt/sysroot"\n'
        "[compilers]\n"
        'C = "aarch64-linux-gnu-gcc"\n'
        'CXX = "aarch64-linux-gnu-g++"\n'
        "[search_policy]\n"
        'package = "BOTH"\n',
        encoding="utf-8",
    )

    descriptor = load_toolchain_file(path)

    assert descriptor.name == "aarch64"
    assert descriptor.search_policy.package is SearchMode.BOTH
    assert descriptor.to_variables()["CMAKE_FIND_ROOT_PATH"] == "/opt/sysroot"


def test_render_round_trips_through_cmake_file(tmp_path: Path) -> None:
    descriptor = BUILTIN_TOOLCHAINS["arm-none-eabi"]
    path = tmp_path / "arm-none-eabi.cmake"
    path.write_text(render_toolchain_file(descriptor), encoding="utf-8")

    assert load_toolchain_file(path) == descriptor
