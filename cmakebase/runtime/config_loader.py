"""Helpers for loading project configuration from TOML/JSON sources.

This module provides a single entry point `load_project_config` that
accepts various configuration sources:

* dict -> ProjectConfig.from_dict
* Path / path-like string -> load .toml/.json from filesystem
* Inline JSON/TOML strings
"""

from __future__ import annotations

import json
import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, Union

from pydantic import ValidationError

from cmakebase.config.schema import ProjectConfig
from cmakebase.errors import ConfigurationError

logger = logging.getLogger("cmakebase.runtime.config_loader")

ConfigSource = Union[str, Path, Dict[str, Any]]


def _parse_text(text: str, fmt: str) -> Dict[str, Any]:
    try:
        data = json.loads(text) if fmt == "json" else tomllib.loads(text)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError) as exc:
        raise ConfigurationError(f"Invalid {fmt.upper()} configuration: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError("Top-level configuration must be a mapping/dict")
    return data


def load_project_config(source: ConfigSource) -> ProjectConfig:
    """Load ProjectConfig from various configuration sources.

    Args:
        source: One of:
            * dict: treated as already-parsed configuration mapping
            * str/Path: either a filesystem path to a .toml/.json file,
              or an inline TOML/JSON string (auto-detected)

    Returns:
        ProjectConfig instance.

    Raises:
        ConfigurationError: If the source cannot be parsed or validated.
    """
    if isinstance(source, dict):
        logger.debug("Loading ProjectConfig from provided dict")
        data = source
    elif isinstance(source, (str, Path)):
        path = Path(source)
        if isinstance(source, Path) or (len(str(source)) < 4096 and "\n" not in str(source) and path.exists()):
            if not path.is_file():
                raise ConfigurationError(f"Configuration file not found: {path}")
            text = path.read_text(encoding="utf-8")
            suffix = path.suffix.lower()
            if suffix in {".toml", ".tml"}:
                fmt = "toml"
            elif suffix == ".json":
                fmt = "json"
            else:
                fmt = "json" if text.lstrip().startswith(("{", "[")) else "toml"
            logger.info("Loading configuration from file: %s (fmt=%s)", path, fmt)
        else:
            text = str(source)
            fmt = "json" if text.lstrip().startswith(("{", "[")) else "toml"
            logger.info("Loading configuration from inline %s string", fmt)
        data = _parse_text(text, fmt)
    else:
        raise TypeError(f"Unsupported config source type: {type(source)!r}")

    try:
        return ProjectConfig.from_dict(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid project configuration: {exc}") from exc


__all__ = ["load_project_config"]
