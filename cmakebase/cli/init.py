"""Init command: bootstrap a project from the shipped template."""

import logging
from pathlib import Path

from cmakebase.errors import TemplateError
from cmakebase.templates.scaffold import ProjectTemplate

logger = logging.getLogger("cmakebase.cli.init")


def init_command(args) -> int:
    """Execute init command.

    Args:
        args: Parsed command-line arguments.

    Returns:
        int: Exit code.
    """
    destination = Path(args.destination)
    name = getattr(args, "name", None) or destination.resolve().name
    try:
        written = ProjectTemplate().render(destination, name, force=getattr(args, "force", False))
    except (TemplateError, OSError) as e:
        logger.error("Init failed: %s", e)
        return 1

    for path in written:
        logger.info("Created %s", path)
    print(f"Created project {name} in {destination} ({len(written)} files)")
    return 0
