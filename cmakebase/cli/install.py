"""Install command: copy the CMake base into a destination directory."""

import logging
from pathlib import Path

from cmakebase.errors import TemplateError
from cmakebase.templates.scaffold import install_base

logger = logging.getLogger("cmakebase.cli.install")


def install_command(args) -> int:
    """Execute install command.

    Args:
        args: Parsed command-line arguments.

    Returns:
        int: Exit code.
    """
    destination = Path(args.destination).expanduser()
    try:
        installed = install_base(destination)
    except (TemplateError, OSError) as e:
        logger.error("Install failed: %s", e)
        return 1

    print(f"Installed {', '.join(p.name for p in installed)} into {destination}")
    return 0
