"""Toolchain command: inspect or render a toolchain descriptor."""

import logging
from pathlib import Path

from rich.console import Console
from rich.table import Table

from cmakebase.errors import CMakeBaseError
from cmakebase.toolchains.descriptor import (
    BUILTIN_TOOLCHAINS,
    load_toolchain,
    render_toolchain_file,
)

logger = logging.getLogger("cmakebase.cli.toolchain")


def toolchain_command(args) -> int:
    """Execute toolchain command.

    Without a source, lists the built-in toolchains. With `-o`, writes the
    descriptor as a CMake toolchain file.

    Args:
        args: Parsed command-line arguments.

    Returns:
        int: Exit code.
    """
    console = Console()
    source = getattr(args, "source", None)
    if not source:
        for name in sorted(BUILTIN_TOOLCHAINS):
            console.print(name)
        return 0

    try:
        descriptor = load_toolchain(source)
    except (CMakeBaseError, OSError) as e:
        logger.error("Cannot load toolchain %s: %s", source, e)
        return 1

    output = getattr(args, "output", None)
    if output:
        output_path = Path(output)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(render_toolchain_file(descriptor), encoding="utf-8")
        except OSError as e:
            logger.error("Failed to write %s: %s", output_path, e)
            return 1
        logger.info("Toolchain file written to %s", output_path)
        return 0

    table = Table(title=f"Toolchain {descriptor.name}")
    table.add_column("Variable")
    table.add_column("Value")
    for name, value in descriptor.to_variables().items():
        table.add_row(name, value)
    console.print(table)
    return 0
