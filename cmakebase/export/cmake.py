"""CMake export of a configuration run.

Produces a script a downstream CMakeLists.txt can `include()` after
declaring its targets.
"""

import logging
from pathlib import Path
from typing import Iterable, List

from cmakebase.runtime.configure import ConfigureResult

logger = logging.getLogger("cmakebase.export.cmake")


def _quote(value: str) -> str:
    # Values are already expanded; an include() must not expand them again
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("$", "\\$")
    return f'"{escaped}"'


def _command(name: str, target: str, items: Iterable[str]) -> List[str]:
    items = list(items)
    if not items:
        return []
    lines = [f"{name}({target} PRIVATE"]
    lines.extend(f"    {item}" for item in items)
    lines.append(")")
    return lines


def render_cmake(result: ConfigureResult) -> str:
    """Render the effective configuration as CMake commands."""
    context = result.context
    lines = [
        f"# Generated by cmakebase for {result.project}",
        "include_guard(GLOBAL)",
        "",
        f"set({result.version.variable_name} {_quote(result.version.version)})",
    ]
    if context.build_type:
        lines.append(f"set(CMAKE_BUILD_TYPE {_quote(context.build_type)})")

    for name, value in sorted(context.variables.items()):
        if name.startswith("CMAKE_") or name == result.version.variable_name:
            continue
        lines.append(f"set({name} {_quote(value)})")

    for target in result.targets.values():
        lines.append("")
        lines.extend(_command("target_compile_options", target.name, target.compile_options))
        lines.extend(_command("target_link_options", target.name, target.link_options))
        lines.extend(_command("target_compile_definitions", target.name, target.compile_definitions))
    return "\n".join(lines) + "\n"


def export_cmake(result: ConfigureResult, output_path: Path) -> None:
    """Write render_cmake output to a file."""
    logger.info("Exporting configuration to CMake: %s", output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_cmake(result), encoding="utf-8")
