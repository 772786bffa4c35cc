"""Main CLI entry point for cmakebase.

Provides commands: configure, init, install, toolchain
"""

import argparse
import logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from cmakebase.cli.configure import configure_command
from cmakebase.cli.init import init_command
from cmakebase.cli.install import install_command
from cmakebase.cli.toolchain import toolchain_command

logger = logging.getLogger("cmakebase.cli")


def setup_logging(verbose: bool = False, console: Optional[Console] = None) -> None:
    """Setup logging configuration with Rich integration.

    Args:
        verbose: Enable verbose logging.
        console: Rich Console instance for coordinated output (optional).
    """
    if verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        log_time_format="[%H:%M:%S]",
    )

    logging.basicConfig(
        level=level,
        format="[%(name)s] %(message)s",
        handlers=[handler],
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cmakebase",
        description="CMakeBase - shared CMake configuration base",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    configure_parser = subparsers.add_parser(
        "configure",
        help="Resolve layered configuration and apply the function library to targets",
    )
    configure_parser.add_argument(
        "-c",
        "--config",
        help=(
            "Project configuration. Can be a path to a TOML/JSON file or an "
            "inline TOML/JSON string. Defaults to ./cmakebase.toml when present."
        ),
    )
    configure_parser.add_argument(
        "-p",
        "--project",
        help="Project name when no configuration file is used (default: current directory name)",
    )
    configure_parser.add_argument(
        "-e",
        "--environment",
        help="Environment layer loaded after common (e.g. dev, prod)",
    )
    configure_parser.add_argument(
        "--env-dir",
        help="Directory holding the environment layers (default: shipped presets)",
    )
    configure_parser.add_argument(
        "-b",
        "--build-type",
        help="CMAKE_BUILD_TYPE (e.g. Debug, Release)",
    )
    configure_parser.add_argument(
        "--compiler-id",
        help="CMake compiler id (GNU, Clang, MSVC, ...); detected when omitted",
    )
    configure_parser.add_argument(
        "-t",
        "--toolchain",
        help="Built-in toolchain name or toolchain file",
    )
    configure_parser.add_argument(
        "-D",
        "--define",
        action="append",
        metavar="KEY=VALUE",
        help="Command-line variable override (repeatable)",
    )
    configure_parser.add_argument(
        "--target",
        action="append",
        help="Add a target with all library functions (repeatable)",
    )
    configure_parser.add_argument(
        "-o",
        "--output",
        help="Write the result as CMake (.cmake) or JSON (.json)",
    )
    configure_parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Do not print the summary",
    )

    init_parser = subparsers.add_parser(
        "init",
        help="Create a new project from the template",
    )
    init_parser.add_argument("destination", help="Project directory")
    init_parser.add_argument("-n", "--name", help="Project name (default: directory name)")
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Write into a non-empty directory",
    )

    install_parser = subparsers.add_parser(
        "install",
        help="Copy the cmake, env and templates directories to a destination",
    )
    install_parser.add_argument("destination", help="Install destination")

    toolchain_parser = subparsers.add_parser(
        "toolchain",
        help="List built-in toolchains, or show/render one",
    )
    toolchain_parser.add_argument(
        "source",
        nargs="?",
        help="Built-in toolchain name or toolchain file",
    )
    toolchain_parser.add_argument(
        "-o",
        "--output",
        help="Write the descriptor as a CMake toolchain file",
    )
    return parser


def main() -> int:
    """Main CLI entry point.

    Returns:
        int: Exit code.
    """
    parser = build_parser()
    args = parser.parse_args()

    setup_logging(args.verbose)

    if args.command == "configure":
        return configure_command(args)
    elif args.command == "init":
        return init_command(args)
    elif args.command == "install":
        return install_command(args)
    elif args.command == "toolchain":
        return toolchain_command(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
