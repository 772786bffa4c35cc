"""Project configuration schema using Pydantic for validation.

A downstream project describes its configuration run in a `cmakebase.toml`
(or JSON) file:

    [project]
    name = "demo"

    [build]
    type = "Debug"
    environment = "dev"
    toolchain = "arm-none-eabi"

    [cache]
    VERSION_MAJOR = "2"

    [[targets]]
    name = "demo_app"
    functions = ["add_compiler_warnings", "enable_code_coverage"]
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from cmakebase.functions.library import FUNCTIONS


class ProjectSettings(BaseModel):
    """Project identity.

    Attributes:
        name: Project name; the version variable is `<name>_VERSION`.
    """

    name: str = Field(min_length=1)


class BuildSettings(BaseModel):
    """How the configuration run is performed.

    Attributes:
        type: CMAKE_BUILD_TYPE; None defers to the environment layers.
        compiler_id: Explicit compiler id; None means detect.
        environment: Override layer loaded after `common` (e.g. "dev").
        env_dir: Directory holding the layer files; None uses the shipped
            presets.
        toolchain: Built-in toolchain name or toolchain file path.
        definitions: Command-line variable overrides.
    """

    type: Optional[str] = None
    compiler_id: Optional[str] = None
    environment: Optional[str] = None
    env_dir: Optional[str] = None
    toolchain: Optional[str] = None
    definitions: Dict[str, str] = Field(default_factory=dict)

    model_config = {"extra": "forbid"}


class TargetConfig(BaseModel):
    """A target and the library functions applied to it.

    Attributes:
        name: Target name.
        functions: Function names, applied in order.
    """

    name: str = Field(min_length=1)
    functions: List[str] = Field(default_factory=lambda: list(FUNCTIONS))

    @field_validator("functions")
    @classmethod
    def validate_functions(cls, v: List[str]) -> List[str]:
        """Validate that every function exists in the library."""
        for name in v:
            if name not in FUNCTIONS:
                raise ValueError(
                    f"Unknown function '{name}'. Valid functions: {sorted(FUNCTIONS)}"
                )
        return v


class ProjectConfig(BaseModel):
    """Top-level configuration for a configuration run."""

    project: ProjectSettings
    build: BuildSettings = Field(default_factory=BuildSettings)
    cache: Dict[str, str] = Field(default_factory=dict)
    targets: List[TargetConfig] = Field(default_factory=list)

    @field_validator("cache", mode="before")
    @classmethod
    def stringify_cache(cls, v: Any) -> Any:
        """Cache entries are strings in CMake; accept TOML integers."""
        if isinstance(v, dict):
            return {str(key): str(value) for key, value in v.items()}
        return v

    @field_validator("targets")
    @classmethod
    def validate_unique_targets(cls, v: List[TargetConfig]) -> List[TargetConfig]:
        names = [target.name for target in v]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate targets: {', '.join(duplicates)}")
        return v

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProjectConfig":
        """Create configuration from dictionary.

        Raises:
            ValidationError: If configuration is invalid.
        """
        return cls.model_validate(data)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()
