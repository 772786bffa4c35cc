"""Project template rendering and installation of the shipped CMake base."""

from __future__ import annotations

import logging
import shutil
from importlib.resources import as_file, files
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import List, Sequence

from cmakebase.errors import TemplateError

logger = logging.getLogger("cmakebase.templates.scaffold")

RESOURCE_PACKAGE = "cmakebase"
RESOURCE_ROOT = "resources"
INSTALLED_DIRECTORIES = ("cmake", "env", "templates")
PROJECT_TEMPLATE = "templates/project"
PROJECT_NAME_PLACEHOLDER = "@PROJECT_NAME@"
TEXT_SUFFIXES = {".txt", ".cmake", ".toml", ".json", ".md", ".cpp", ".c", ".h", ".hpp", ""}


def resource_path(relative: str) -> Traversable:
    """Return a traversable for a file or directory under the shipped resources."""
    node = files(RESOURCE_PACKAGE).joinpath(RESOURCE_ROOT)
    for part in Path(relative).parts:
        node = node.joinpath(part)
    return node


def _is_empty_dir(path: Path) -> bool:
    return not path.exists() or (path.is_dir() and not any(path.iterdir()))


class ProjectTemplate:
    """Skeleton directory a new project copies to start using the base."""

    def __init__(self, template: str = PROJECT_TEMPLATE):
        self.template = template

    def render(self, destination: Path, project_name: str, force: bool = False) -> List[Path]:
        """Copy the template into destination, substituting the project name.

        Args:
            destination: Target directory; created if missing.
            project_name: Value for `@PROJECT_NAME@` placeholders.
            force: Allow writing into a non-empty directory.

        Returns:
            Paths of the files written.

        Raises:
            TemplateError: If destination is not empty and force is False,
                or the template is missing.
        """
        destination = Path(destination)
        if not project_name:
            raise TemplateError("A project name is required")
        if destination.exists() and not destination.is_dir():
            raise TemplateError(f"Destination is not a directory: {destination}")
        if not force and not _is_empty_dir(destination):
            raise TemplateError(f"Destination is not empty: {destination} (use --force)")

        source = resource_path(self.template)
        if not source.is_dir():
            raise TemplateError(f"Template not found: {self.template}")

        written: List[Path] = []
        self._copy_tree(source, destination, project_name, written)
        logger.info("Rendered %d template file(s) into %s", len(written), destination)
        return written

    def _copy_tree(
        self, source: Traversable, destination: Path, project_name: str, written: List[Path]
    ) -> None:
        destination.mkdir(parents=True, exist_ok=True)
        for entry in sorted(source.iterdir(), key=lambda item: item.name):
            if entry.name == "__pycache__":
                continue
            target = destination / entry.name
            if entry.is_dir():
                self._copy_tree(entry, target, project_name, written)
                continue
            if Path(entry.name).suffix.lower() in TEXT_SUFFIXES:
                text = entry.read_text(encoding="utf-8")
                target.write_text(text.replace(PROJECT_NAME_PLACEHOLDER, project_name), encoding="utf-8")
            else:
                target.write_bytes(entry.read_bytes())
            written.append(target)


def install_base(
    destination: Path, directories: Sequence[str] = INSTALLED_DIRECTORIES
) -> List[Path]:
    """Copy the shipped cmake, env and templates directories verbatim.

    Existing files in destination are overwritten.

    Returns:
        The installed directory paths.
    """
    destination = Path(destination)
    destination.mkdir(parents=True, exist_ok=True)
    installed: List[Path] = []
    for name in directories:
        source = resource_path(name)
        if not source.is_dir():
            raise TemplateError(f"Missing shipped directory: {name}")
        target = destination / name
        with as_file(source) as source_dir:
            shutil.copytree(
                source_dir,
                target,
                dirs_exist_ok=True,
                ignore=shutil.ignore_patterns("__pycache__"),
            )
        logger.info("Installed %s -> %s", name, target)
        installed.append(target)
    return installed
