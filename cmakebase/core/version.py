"""Project version stamping."""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from cmakebase.errors import ConfigurationError
from cmakebase.runtime.cache import ConfigCache

logger = logging.getLogger("cmakebase.core.version")


class VersionTriple(BaseModel):
    """Immutable (major, minor, patch) version."""

    model_config = ConfigDict(frozen=True)

    major: int = Field(default=1, ge=0)
    minor: int = Field(default=0, ge=0)
    patch: int = Field(default=0, ge=0)

    @property
    def version(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def __str__(self) -> str:
        return self.version


class ProjectVersion(BaseModel):
    """Version assigned to a named project."""

    model_config = ConfigDict(frozen=True)

    name: str
    triple: VersionTriple

    @property
    def version(self) -> str:
        return self.triple.version

    @property
    def variable_name(self) -> str:
        """Name of the CMake variable holding the version string."""
        return f"{self.name}_VERSION"


def set_project_version(name: str, cache: ConfigCache) -> ProjectVersion:
    """Stamp a project with the version held in the cache.

    Reads VERSION_MAJOR, VERSION_MINOR and VERSION_PATCH from the cache,
    defaulting them to 1, 0 and 0. Existing cache entries are left alone,
    so calling this again with unchanged entries yields the same version.

    Args:
        name: Project name.
        cache: Configuration cache for the current run.

    Returns:
        ProjectVersion whose `.version` is "major.minor.patch".

    Raises:
        ConfigurationError: If a cache entry is not a non-negative integer.
    """
    major = cache.define("VERSION_MAJOR", "1", "Project major version")
    minor = cache.define("VERSION_MINOR", "0", "Project minor version")
    patch = cache.define("VERSION_PATCH", "0", "Project patch version")

    try:
        triple = VersionTriple(major=major, minor=minor, patch=patch)
    except ValidationError as exc:
        raise ConfigurationError(
            f"Invalid version for project {name!r}: {major}.{minor}.{patch}"
        ) from exc

    project_version = ProjectVersion(name=name, triple=triple)
    logger.info("Setting %s version to %s", name, project_version.version)
    return project_version
