"""Immutable build context shared by all function library calls.

The context is built once per configuration run from the layered variable
sources and the selected toolchain, then passed explicitly to every
function that needs configuration state.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cmakebase.core.compiler import BuildMode, CompilerFamily, detect_compiler_id
from cmakebase.env.layers import (
    CACHE_RANK,
    COMMAND_LINE_RANK,
    TOOLCHAIN_RANK,
    VariableLayer,
    merge_layers,
)
from cmakebase.runtime.cache import ConfigCache
from cmakebase.toolchains.descriptor import ToolchainDescriptor

logger = logging.getLogger("cmakebase.runtime.context")


class BuildContext(BaseModel):
    """Effective configuration for one run.

    Attributes:
        variables: Merged variables from all layers (read-only).
        build_type: Raw CMAKE_BUILD_TYPE value.
        build_mode: Debug or Release derived from build_type.
        compiler_id: CMake compiler id (may be empty).
        compiler_family: Family derived from compiler_id.
        toolchain: Selected toolchain, if cross-compiling.
        layers: Names of the layers that contributed, in merge order.
    """

    model_config = ConfigDict(frozen=True)

    variables: Mapping[str, str] = Field(default_factory=dict)
    build_type: str = ""
    build_mode: BuildMode = BuildMode.RELEASE
    compiler_id: str = ""
    compiler_family: CompilerFamily = CompilerFamily.UNKNOWN
    toolchain: Optional[ToolchainDescriptor] = None
    layers: Tuple[str, ...] = ()

    @field_validator("variables", mode="after")
    @classmethod
    def _freeze_variables(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(value))

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.variables.get(name, default)

    def is_defined(self, name: str) -> bool:
        return name in self.variables

    @classmethod
    def create(
        cls,
        layers: Iterable[VariableLayer] = (),
        cache: Optional[ConfigCache] = None,
        overrides: Optional[Mapping[str, str]] = None,
        toolchain: Optional[ToolchainDescriptor] = None,
        build_type: Optional[str] = None,
        compiler_id: Optional[str] = None,
    ) -> "BuildContext":
        """Merge all variable sources into a context.

        Precedence from lowest to highest: cache entries, environment layers,
        command-line overrides, toolchain variables.

        Args:
            layers: Environment layers (common, then the override).
            cache: Configuration cache; its entries form the lowest layer.
            overrides: Command-line variable overrides.
            toolchain: Selected toolchain descriptor.
            build_type: Explicit build type; wins over CMAKE_BUILD_TYPE.
            compiler_id: Explicit compiler id; wins over detection.

        Returns:
            Frozen BuildContext.
        """
        all_layers = list(layers)
        if cache is not None and len(cache):
            all_layers.append(VariableLayer("cache", CACHE_RANK, cache.as_dict()))
        if overrides:
            all_layers.append(VariableLayer("command-line", COMMAND_LINE_RANK, overrides))
        if toolchain is not None:
            all_layers.append(
                VariableLayer(f"toolchain:{toolchain.name}", TOOLCHAIN_RANK, toolchain.to_variables())
            )

        variables: Dict[str, str] = merge_layers(all_layers)
        ordered = tuple(layer.name for layer in sorted(all_layers, key=lambda layer: layer.rank))

        resolved_build_type = build_type if build_type is not None else variables.get("CMAKE_BUILD_TYPE", "")
        if resolved_build_type:
            variables["CMAKE_BUILD_TYPE"] = resolved_build_type

        resolved_compiler_id = compiler_id or variables.get("CMAKE_CXX_COMPILER_ID", "")
        if not resolved_compiler_id:
            resolved_compiler_id = detect_compiler_id(
                variables.get("CMAKE_CXX_COMPILER") or variables.get("CMAKE_C_COMPILER")
            )
        if resolved_compiler_id:
            variables["CMAKE_CXX_COMPILER_ID"] = resolved_compiler_id

        context = cls(
            variables=variables,
            build_type=resolved_build_type,
            build_mode=BuildMode.from_build_type(resolved_build_type),
            compiler_id=resolved_compiler_id,
            compiler_family=CompilerFamily.from_compiler_id(resolved_compiler_id),
            toolchain=toolchain,
            layers=ordered,
        )
        logger.debug(
            "Build context: build_type=%r mode=%s compiler=%r family=%s layers=%s",
            context.build_type,
            context.build_mode.value,
            context.compiler_id,
            context.compiler_family.value,
            ", ".join(ordered),
        )
        return context
