"""Project template and installation helpers."""

from .scaffold import ProjectTemplate, install_base, resource_path

__all__ = ["ProjectTemplate", "install_base", "resource_path"]
