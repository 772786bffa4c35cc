"""Configuration schema and validation for cmakebase."""

from .schema import (
    BuildSettings,
    ProjectConfig,
    ProjectSettings,
    TargetConfig,
)

__all__ = [
    "BuildSettings",
    "ProjectConfig",
    "ProjectSettings",
    "TargetConfig",
]
