"""Layered environment variables.

A configuration run sees one effective mapping of variables built from an
ordered list of layers:

    cache (0) -> common (10) -> environment (20) -> command line (90) -> toolchain (100)

Layers are merged left to right by rank with last-write-wins semantics.
A colliding key is replaced by the later layer, never merged with it.
"""

from __future__ import annotations

import json
import logging
import tomllib
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence

from cmakebase.errors import ConfigurationError, LayerNotFoundError
from cmakebase.parsers.cmake.script import evaluate_script

logger = logging.getLogger("cmakebase.env.layers")

CACHE_RANK = 0
COMMON_RANK = 10
ENVIRONMENT_RANK = 20
COMMAND_LINE_RANK = 90
TOOLCHAIN_RANK = 100

COMMON_LAYER = "common"
LAYER_SUFFIXES = (".cmake", ".toml", ".json")


class VariableLayer:
    """A named, ranked set of variable assignments.

    A value of None marks the variable as unset by this layer, which removes
    it from the merged result.
    """

    __slots__ = ("name", "rank", "_variables", "source")

    def __init__(
        self,
        name: str,
        rank: int,
        variables: Optional[Mapping[str, Optional[str]]] = None,
        source: Optional[Path] = None,
    ):
        self.name = name
        self.rank = rank
        self._variables = MappingProxyType(dict(variables or {}))
        self.source = source

    @property
    def variables(self) -> Mapping[str, Optional[str]]:
        return self._variables

    def __repr__(self) -> str:
        return f"VariableLayer({self.name!r}, rank={self.rank}, {len(self._variables)} vars)"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VariableLayer):
            return NotImplemented
        return (self.name, self.rank, dict(self._variables)) == (
            other.name,
            other.rank,
            dict(other._variables),
        )


def merge_layers(layers: Iterable[VariableLayer]) -> Dict[str, str]:
    """Merge layers into one mapping.

    Layers are stably sorted by rank, so equal ranks keep their given order,
    then applied left to right.

    Args:
        layers: Layers in inclusion order.

    Returns:
        Effective variable mapping.
    """
    merged: Dict[str, str] = {}
    for layer in sorted(layers, key=lambda layer: layer.rank):
        for name, value in layer.variables.items():
            if value is None:
                merged.pop(name, None)
            else:
                if name in merged and merged[name] != value:
                    logger.debug(
                        "Layer %s overrides %s: %r -> %r", layer.name, name, merged[name], value
                    )
                merged[name] = value
    return merged


def _stringify(value: Any) -> Optional[str]:
    """Convert a TOML/JSON scalar or list into a CMake string."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "ON" if value else "OFF"
    if isinstance(value, (list, tuple)):
        return ";".join(str(_stringify(item)) for item in value)
    if isinstance(value, (dict,)):
        raise ConfigurationError(f"Nested tables are not valid variable values: {value!r}")
    return str(value)


def _load_mapping(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = tomllib.loads(text)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError) as exc:
        raise ConfigurationError(f"Cannot parse layer file {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"Layer file {path} must contain a mapping")
    if isinstance(data.get("variables"), dict):
        return data["variables"]
    return data


def load_layer(
    path: Path,
    rank: int,
    seed: Optional[Mapping[str, str]] = None,
    name: Optional[str] = None,
) -> VariableLayer:
    """Load a variable layer from a .cmake, .toml or .json file.

    Args:
        path: Layer file.
        rank: Precedence of the layer.
        seed: Variables visible to `${VAR}` references in .cmake files.
        name: Layer name, defaults to the file stem.

    Returns:
        VariableLayer with the file's assignments.

    Raises:
        LayerNotFoundError: If the file does not exist.
        ConfigurationError: If the file format is unsupported or invalid.
    """
    path = Path(path)
    if not path.is_file():
        raise LayerNotFoundError(f"Layer file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".cmake":
        variables = dict(evaluate_script(path, seed).assignments)
    elif suffix in {".toml", ".json"}:
        variables = {str(key): _stringify(value) for key, value in _load_mapping(path).items()}
    else:
        raise ConfigurationError(f"Unsupported layer file type: {path}")

    layer = VariableLayer(name or path.stem, rank, variables, source=path)
    logger.info("Loaded layer %s from %s (%d variables)", layer.name, path, len(variables))
    return layer


def find_layer_file(env_dir: Path, name: str) -> Optional[Path]:
    """Return the first existing `<name>.cmake|.toml|.json` in env_dir."""
    for suffix in LAYER_SUFFIXES:
        candidate = Path(env_dir) / f"{name}{suffix}"
        if candidate.is_file():
            return candidate
    return None


class EnvironmentLoader:
    """Load the common layer and at most one environment override."""

    def __init__(self, env_dir: Path, seed: Optional[Mapping[str, str]] = None):
        self.env_dir = Path(env_dir)
        self.seed = dict(seed or {})

    def load(self, environment: Optional[str] = None) -> Sequence[VariableLayer]:
        """Load `common` and, when given, the named override layer.

        The override layer sees the variables of `common` while it is
        evaluated, so it may reference them.

        Args:
            environment: Override layer name such as "dev" or "prod".

        Returns:
            The loaded layers in inclusion order.

        Raises:
            LayerNotFoundError: If the common layer is missing.
        """
        common_path = find_layer_file(self.env_dir, COMMON_LAYER)
        if common_path is None:
            raise LayerNotFoundError(
                f"Mandatory layer '{COMMON_LAYER}' not found in {self.env_dir}"
            )
        common = load_layer(common_path, COMMON_RANK, seed=self.seed, name=COMMON_LAYER)
        layers = [common]

        if environment and environment != COMMON_LAYER:
            override_path = find_layer_file(self.env_dir, environment)
            if override_path is None:
                logger.warning(
                    "Environment layer '%s' not found in %s; using common only",
                    environment,
                    self.env_dir,
                )
            else:
                seed = {**self.seed, **merge_layers([common])}
                layers.append(
                    load_layer(override_path, ENVIRONMENT_RANK, seed=seed, name=environment)
                )
        return layers


__all__ = [
    "CACHE_RANK",
    "COMMON_RANK",
    "ENVIRONMENT_RANK",
    "COMMAND_LINE_RANK",
    "TOOLCHAIN_RANK",
    "VariableLayer",
    "EnvironmentLoader",
    "find_layer_file",
    "load_layer",
    "merge_layers",
]
