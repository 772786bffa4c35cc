"""Cross-compilation toolchain descriptors.

A descriptor is selected once at the start of a configuration run and fixes
the compilers, architecture flags and find-root search policy for the rest
of it. Descriptors are loaded from built-in definitions, CMake toolchain
files or TOML/JSON documents.
"""

from __future__ import annotations

import json
import logging
import threading
import tomllib
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from cmakebase.core.compiler import detect_compiler_id
from cmakebase.errors import ToolchainError
from cmakebase.parsers.cmake.script import evaluate_script

logger = logging.getLogger("cmakebase.toolchains.descriptor")

LANGUAGES = ("C", "CXX", "ASM")
TOOLS = ("AR", "OBJCOPY", "OBJDUMP", "STRIP")


class SearchMode(str, Enum):
    """Values of CMAKE_FIND_ROOT_PATH_MODE_*."""

    NEVER = "NEVER"
    ONLY = "ONLY"
    BOTH = "BOTH"


class SearchPathPolicy(BaseModel):
    """Where find_* commands look: host for programs, sysroot for the rest."""

    model_config = ConfigDict(frozen=True)

    program: SearchMode = SearchMode.NEVER
    library: SearchMode = SearchMode.ONLY
    include: SearchMode = SearchMode.ONLY
    package: SearchMode = SearchMode.ONLY

    def to_variables(self) -> Dict[str, str]:
        return {
            "CMAKE_FIND_ROOT_PATH_MODE_PROGRAM": self.program.value,
            "CMAKE_FIND_ROOT_PATH_MODE_LIBRARY": self.library.value,
            "CMAKE_FIND_ROOT_PATH_MODE_INCLUDE": self.include.value,
            "CMAKE_FIND_ROOT_PATH_MODE_PACKAGE": self.package.value,
        }


class ToolchainDescriptor(BaseModel):
    """Immutable record of one cross-compilation configuration.

    Attributes:
        name: Descriptor name (e.g. "arm-none-eabi").
        system_name: CMAKE_SYSTEM_NAME of the target.
        system_processor: CMAKE_SYSTEM_PROCESSOR of the target.
        compilers: Compiler executable per language (C, CXX, ASM).
        tools: Binutils executables (AR, OBJCOPY, OBJDUMP, STRIP).
        c_flags: Architecture flags for C sources.
        cxx_flags: Architecture flags for C++ sources.
        sysroot: Optional sysroot, also used as the find root path.
        search_policy: Find-root isolation policy.
        include_guard: Whether the source declared an inclusion-once marker.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    system_name: str = "Generic"
    system_processor: str = ""
    compilers: Dict[str, str] = Field(default_factory=dict)
    tools: Dict[str, str] = Field(default_factory=dict)
    c_flags: str = ""
    cxx_flags: str = ""
    sysroot: Optional[str] = None
    search_policy: SearchPathPolicy = Field(default_factory=SearchPathPolicy)
    include_guard: bool = True

    @property
    def compiler_id(self) -> str:
        """Compiler id inferred from the C++ (or C) compiler executable."""
        return detect_compiler_id(self.compilers.get("CXX") or self.compilers.get("C"))

    def to_variables(self) -> Dict[str, str]:
        """CMake variables fixed by this toolchain."""
        variables: Dict[str, str] = {"CMAKE_SYSTEM_NAME": self.system_name}
        if self.system_processor:
            variables["CMAKE_SYSTEM_PROCESSOR"] = self.system_processor
        for lang in LANGUAGES:
            if lang in self.compilers:
                variables[f"CMAKE_{lang}_COMPILER"] = self.compilers[lang]
        for tool in TOOLS:
            if tool in self.tools:
                variables[f"CMAKE_{tool}"] = self.tools[tool]
        if self.c_flags:
            variables["CMAKE_C_FLAGS"] = self.c_flags
        if self.cxx_flags:
            variables["CMAKE_CXX_FLAGS"] = self.cxx_flags
        if self.sysroot:
            variables["CMAKE_SYSROOT"] = self.sysroot
            variables["CMAKE_FIND_ROOT_PATH"] = self.sysroot
        variables.update(self.search_policy.to_variables())
        return variables

    @classmethod
    def from_variables(
        cls, name: str, variables: Dict[str, Optional[str]], include_guard: bool = False
    ) -> "ToolchainDescriptor":
        """Build a descriptor from the variables a toolchain file assigns."""
        def value(key: str) -> str:
            return (variables.get(key) or "").strip()

        policy = {}
        for field_name in ("program", "library", "include", "package"):
            mode = value(f"CMAKE_FIND_ROOT_PATH_MODE_{field_name.upper()}")
            if mode:
                policy[field_name] = mode.upper()

        data = {
            "name": name,
            "system_name": value("CMAKE_SYSTEM_NAME") or "Generic",
            "system_processor": value("CMAKE_SYSTEM_PROCESSOR"),
            "compilers": {
                lang: value(f"CMAKE_{lang}_COMPILER")
                for lang in LANGUAGES
                if value(f"CMAKE_{lang}_COMPILER")
            },
            "tools": {tool: value(f"CMAKE_{tool}") for tool in TOOLS if value(f"CMAKE_{tool}")},
            "c_flags": " ".join(value("CMAKE_C_FLAGS").split()),
            "cxx_flags": " ".join(value("CMAKE_CXX_FLAGS").split()),
            "sysroot": value("CMAKE_SYSROOT") or None,
            "search_policy": policy,
            "include_guard": include_guard,
        }
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ToolchainError(f"Invalid toolchain '{name}': {exc}") from exc


CORTEX_M4_FLAGS = "-mcpu=cortex-m4 -mthumb -mfloat-abi=hard -mfpu=fpv4-sp-d16"

BUILTIN_TOOLCHAINS: Dict[str, ToolchainDescriptor] = {
    "arm-none-eabi": ToolchainDescriptor(
        name="arm-none-eabi",
        system_name="Generic",
        system_processor="arm",
        compilers={
            "C": "arm-none-eabi-gcc",
            "CXX": "arm-none-eabi-g++",
            "ASM": "arm-none-eabi-gcc",
        },
        tools={
            "AR": "arm-none-eabi-ar",
            "OBJCOPY": "arm-none-eabi-objcopy",
            "OBJDUMP": "arm-none-eabi-objdump",
            "STRIP": "arm-none-eabi-strip",
        },
        c_flags=CORTEX_M4_FLAGS,
        cxx_flags=CORTEX_M4_FLAGS,
    ),
}


def load_toolchain_file(path: Path) -> ToolchainDescriptor:
    """Load a descriptor from a CMake toolchain file or a TOML/JSON document.

    Raises:
        ToolchainError: If the file is missing, unsupported or invalid.
    """
    path = Path(path)
    if not path.is_file():
        raise ToolchainError(f"Toolchain file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".cmake":
        result = evaluate_script(path)
        return ToolchainDescriptor.from_variables(
            path.stem, result.assignments, include_guard=result.include_guard
        )
    if suffix in {".toml", ".json"}:
        text = path.read_text(encoding="utf-8")
        try:
            data = json.loads(text) if suffix == ".json" else tomllib.loads(text)
        except (json.JSONDecodeError, tomllib.TOMLDecodeError) as exc:
            raise ToolchainError(f"Cannot parse toolchain file {path}: {exc}") from exc
        data.setdefault("name", path.stem)
        try:
            return ToolchainDescriptor.model_validate(data)
        except ValidationError as exc:
            raise ToolchainError(f"Invalid toolchain file {path}: {exc}") from exc
    raise ToolchainError(f"Unsupported toolchain file type: {path}")


class ToolchainRegistry:
    """Process-wide registry of loaded toolchains.

    Each source (built-in name or resolved file path) is loaded at most once;
    loading it again returns the same descriptor object.
    """

    _instance: Optional["ToolchainRegistry"] = None
    _lock = threading.Lock()

    def __init__(self):
        self._loaded: Dict[str, ToolchainDescriptor] = {}

    @classmethod
    def get_instance(cls) -> "ToolchainRegistry":
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    def reset(self) -> None:
        """Forget loaded toolchains (for tests or a fresh configuration run)."""
        with self._lock:
            self._loaded.clear()

    def is_loaded(self, source: Union[str, Path]) -> bool:
        return self._key(source) in self._loaded

    def load(self, source: Union[str, Path]) -> ToolchainDescriptor:
        """Resolve a built-in toolchain name or a descriptor file.

        Args:
            source: Built-in name (e.g. "arm-none-eabi") or file path.

        Returns:
            The descriptor; identical object on repeated loads.

        Raises:
            ToolchainError: If the source cannot be resolved.
        """
        key = self._key(source)
        with self._lock:
            cached = self._loaded.get(key)
            if cached is not None:
                logger.debug("Toolchain %s already loaded; reusing descriptor", key)
                return cached

            if key in BUILTIN_TOOLCHAINS:
                descriptor = BUILTIN_TOOLCHAINS[key]
            else:
                descriptor = load_toolchain_file(Path(key))
            self._loaded[key] = descriptor

        logger.info(
            "Loaded toolchain %s (%s/%s)",
            descriptor.name,
            descriptor.system_name,
            descriptor.system_processor or "-",
        )
        return descriptor

    @staticmethod
    def _key(source: Union[str, Path]) -> str:
        if isinstance(source, str) and source in BUILTIN_TOOLCHAINS:
            return source
        path = Path(source).expanduser()
        if not path.exists() and isinstance(source, str) and not path.suffix:
            raise ToolchainError(
                f"Unknown toolchain '{source}'. Built-in toolchains: "
                f"{', '.join(sorted(BUILTIN_TOOLCHAINS))}"
            )
        return str(path.resolve())


def load_toolchain(source: Union[str, Path]) -> ToolchainDescriptor:
    """Load a toolchain through the process-wide registry."""
    return ToolchainRegistry.get_instance().load(source)


def render_toolchain_file(descriptor: ToolchainDescriptor) -> str:
    """Render a descriptor as a CMake toolchain file."""
    lines = [
        f"# Toolchain: {descriptor.name}",
        "include_guard(GLOBAL)",
        "",
        f"set(CMAKE_SYSTEM_NAME {descriptor.system_name})",
    ]
    if descriptor.system_processor:
        lines.append(f"set(CMAKE_SYSTEM_PROCESSOR {descriptor.system_processor})")
    if descriptor.sysroot:
        lines.append(f'set(CMAKE_SYSROOT "{descriptor.sysroot}")')
        lines.append(f'set(CMAKE_FIND_ROOT_PATH "{descriptor.sysroot}")')

    lines.append("")
    for lang in LANGUAGES:
        if lang in descriptor.compilers:
            lines.append(f"set(CMAKE_{lang}_COMPILER {descriptor.compilers[lang]})")
    for tool in TOOLS:
        if tool in descriptor.tools:
            lines.append(f"set(CMAKE_{tool} {descriptor.tools[tool]})")

    if descriptor.c_flags or descriptor.cxx_flags:
        lines.append("")
    if descriptor.c_flags:
        lines.append(f'set(CMAKE_C_FLAGS "${{CMAKE_C_FLAGS}} {descriptor.c_flags}")')
    if descriptor.cxx_flags:
        lines.append(f'set(CMAKE_CXX_FLAGS "${{CMAKE_CXX_FLAGS}} {descriptor.cxx_flags}")')

    lines.append("")
    for name, value in descriptor.search_policy.to_variables().items():
        lines.append(f"set({name} {value})")
    return "\n".join(lines) + "\n"
