"""A full configuration run for a downstream project.

    load env layers -> select toolchain -> build context -> stamp version -> apply functions

Everything is resolved once; the returned ConfigureResult is what the
exporters and the CLI summary consume.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from cmakebase.config.schema import ProjectConfig
from cmakebase.core.target import FunctionResult, Target
from cmakebase.core.version import ProjectVersion, set_project_version
from cmakebase.env.layers import EnvironmentLoader
from cmakebase.functions.library import FUNCTIONS
from cmakebase.runtime.cache import ConfigCache
from cmakebase.runtime.context import BuildContext
from cmakebase.templates.scaffold import resource_path
from cmakebase.toolchains.descriptor import ToolchainDescriptor, load_toolchain

logger = logging.getLogger("cmakebase.runtime.configure")


@dataclass
class ConfigureResult:
    """Outcome of one configuration run."""

    project: str
    context: BuildContext
    version: ProjectVersion
    cache: ConfigCache
    targets: Dict[str, Target] = field(default_factory=dict)
    results: List[FunctionResult] = field(default_factory=list)

    def results_for(self, target_name: str) -> List[FunctionResult]:
        return [result for result in self.results if result.target == target_name]


def default_env_dir() -> Path:
    """Directory of the environment presets shipped with cmakebase."""
    return Path(str(resource_path("env")))


def configure_project(
    config: ProjectConfig,
    base_dir: Optional[Path] = None,
) -> ConfigureResult:
    """Run the configuration step for a project.

    Args:
        config: Validated project configuration.
        base_dir: Directory relative paths in the configuration resolve
            against (normally the directory of the configuration file).

    Returns:
        ConfigureResult with the context, version and configured targets.

    Raises:
        LayerNotFoundError: If the common layer is missing.
        ToolchainError: If the toolchain cannot be resolved.
        ConfigurationError: If a cache or layer value is invalid.
    """
    base = Path(base_dir) if base_dir else Path.cwd()
    build = config.build

    toolchain: Optional[ToolchainDescriptor] = None
    if build.toolchain:
        toolchain = load_toolchain(_resolve_source(build.toolchain, base))

    env_dir = Path(build.env_dir) if build.env_dir else default_env_dir()
    if not env_dir.is_absolute():
        env_dir = base / env_dir

    seed = {
        "CMAKE_SOURCE_DIR": str(base),
        "CMAKE_BINARY_DIR": str(base / "build"),
        "PROJECT_NAME": config.project.name,
    }
    layers = EnvironmentLoader(env_dir, seed=seed).load(build.environment)

    cache = ConfigCache(config.cache)
    # -D entries land in the cache, like cmake -DVAR=value
    for name, value in build.definitions.items():
        cache.set(name, value)
    version = set_project_version(config.project.name, cache)

    context = BuildContext.create(
        layers=layers,
        cache=cache,
        overrides={
            **seed,
            version.variable_name: version.version,
            **build.definitions,
        },
        toolchain=toolchain,
        build_type=build.type,
        compiler_id=build.compiler_id,
    )

    result = ConfigureResult(
        project=config.project.name,
        context=context,
        version=version,
        cache=cache,
    )
    for target_cfg in config.targets:
        target = Target(target_cfg.name)
        for function_name in target_cfg.functions:
            outcome = FUNCTIONS[function_name](target, context)
            logger.debug(
                "%s(%s) -> %s", function_name, target.name, outcome.outcome.value
            )
            result.results.append(outcome)
        result.targets[target.name] = target

    logger.info(
        "Configured %s %s: %d target(s), build type %r, compiler %r",
        config.project.name,
        version.version,
        len(result.targets),
        context.build_type,
        context.compiler_id,
    )
    return result


def _resolve_source(source: str, base: Path) -> str:
    """Resolve a toolchain file path against base; built-in names pass through."""
    candidate = Path(source).expanduser()
    if candidate.suffix and not candidate.is_absolute():
        return str(base / candidate)
    return source
