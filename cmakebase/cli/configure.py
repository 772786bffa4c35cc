"""Configure command implementation."""

import logging
from pathlib import Path
from typing import Dict, List, Optional

from rich.console import Console
from rich.table import Table

from cmakebase.config.schema import ProjectConfig
from cmakebase.core.target import ApplyOutcome
from cmakebase.errors import CMakeBaseError
from cmakebase.export import export_cmake, export_json
from cmakebase.runtime.config_loader import load_project_config
from cmakebase.runtime.configure import ConfigureResult, configure_project

logger = logging.getLogger("cmakebase.cli.configure")

DEFAULT_CONFIG_NAME = "cmakebase.toml"

_OUTCOME_STYLES = {
    ApplyOutcome.APPLIED: "green",
    ApplyOutcome.SKIPPED_NOT_APPLICABLE: "dim",
    ApplyOutcome.SKIPPED_UNSUPPORTED: "yellow",
}


def parse_definitions(values: Optional[List[str]]) -> Dict[str, str]:
    """Parse repeated `-D KEY=VALUE` arguments.

    Raises:
        ValueError: If an entry has no `=` or an empty key.
    """
    definitions: Dict[str, str] = {}
    for entry in values or []:
        key, sep, value = entry.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"Invalid definition '{entry}', expected KEY=VALUE")
        # CMake accepts -DKEY:TYPE=VALUE
        key = key.split(":", 1)[0]
        definitions[key] = value
    return definitions


def _load_config(args) -> tuple[ProjectConfig, Path]:
    config_arg = getattr(args, "config", None)
    if config_arg:
        config_path = Path(config_arg)
        base_dir = config_path.parent.resolve() if config_path.is_file() else Path.cwd()
        return load_project_config(config_arg), base_dir

    default_path = Path.cwd() / DEFAULT_CONFIG_NAME
    if default_path.is_file():
        return load_project_config(default_path), Path.cwd()

    name = getattr(args, "project", None) or Path.cwd().name
    logger.info("No %s found; configuring project %s with defaults", DEFAULT_CONFIG_NAME, name)
    return ProjectConfig.from_dict({"project": {"name": name}}), Path.cwd()


def _apply_cli_overrides(config: ProjectConfig, args) -> ProjectConfig:
    build_updates = {}
    for attr, field_name in (
        ("build_type", "type"),
        ("compiler_id", "compiler_id"),
        ("environment", "environment"),
        ("env_dir", "env_dir"),
        ("toolchain", "toolchain"),
    ):
        value = getattr(args, attr, None)
        if value is not None:
            build_updates[field_name] = value

    definitions = parse_definitions(getattr(args, "define", None))
    if definitions:
        build_updates["definitions"] = {**config.build.definitions, **definitions}

    targets = getattr(args, "target", None)
    data = config.to_dict()
    data["build"].update(build_updates)
    if targets:
        existing = {t["name"] for t in data["targets"]}
        data["targets"].extend({"name": name} for name in targets if name not in existing)
    return ProjectConfig.from_dict(data)


def print_summary(result: ConfigureResult, console: Optional[Console] = None) -> None:
    """Print the effective configuration as rich tables."""
    console = console or Console()
    context = result.context

    console.print(
        f"[bold]{result.project}[/bold] {result.version.version}  "
        f"build type: {context.build_type or '<none>'} ({context.build_mode.value})  "
        f"compiler: {context.compiler_id or '<unknown>'}"
    )
    if context.toolchain:
        console.print(
            f"toolchain: {context.toolchain.name} "
            f"({context.toolchain.system_name}/{context.toolchain.system_processor})"
        )
    console.print(f"layers: {', '.join(context.layers)}")

    if not result.results:
        return

    table = Table(title="Function library")
    table.add_column("Target")
    table.add_column("Function")
    table.add_column("Outcome")
    table.add_column("Items / reason")
    for r in result.results:
        style = _OUTCOME_STYLES.get(r.outcome, "")
        detail = " ".join(r.items) if r.items else (r.reason or "")
        table.add_row(r.target, r.function, f"[{style}]{r.outcome.value}[/{style}]", detail)
    console.print(table)


def configure_command(args) -> int:
    """Execute configure command.

    Args:
        args: Parsed command-line arguments.

    Returns:
        int: Exit code.
    """
    try:
        config, base_dir = _load_config(args)
        config = _apply_cli_overrides(config, args)
        result = configure_project(config, base_dir=base_dir)
    except (CMakeBaseError, OSError, ValueError) as e:
        logger.error("Configuration failed: %s", e)
        return 1

    output = getattr(args, "output", None)
    if output:
        output_path = Path(output)
        try:
            if output_path.suffix.lower() == ".json":
                export_json(result, output_path)
            else:
                export_cmake(result, output_path)
        except OSError as e:
            logger.error("Failed to write %s: %s", output_path, e)
            return 1
        logger.info("Configuration written to %s", output_path)

    if not getattr(args, "quiet", False):
        print_summary(result)
    return 0
