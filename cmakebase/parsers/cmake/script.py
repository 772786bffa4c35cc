"""Evaluation of declarative CMake scripts.

Environment presets and toolchain files only assign variables, so this
module interprets the variable commands (`set`, `unset`, `option`,
`list(APPEND)`) and records an `include_guard()` marker. Every other command
is ignored; control flow such as `if()` is not evaluated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from cmakebase.parsers.cmake.grammar import CMAKE_PARSER, CommandInvocation
from cmakebase.parsers.cmake.tokens import SET_KEYWORDS
from cmakebase.parsers.cmake.variables import CMakeVariableResolver

logger = logging.getLogger("cmakebase.parsers.cmake.script")


@dataclass
class ScriptResult:
    """Variables assigned by one script.

    Attributes:
        assignments: Variable name -> final value, or None when the script
            unset the variable. Only names the script touched are present.
        include_guard: Whether the script declares `include_guard()`.
        ignored_commands: Names of commands that were skipped.
    """

    assignments: Dict[str, Optional[str]] = field(default_factory=dict)
    include_guard: bool = False
    ignored_commands: List[str] = field(default_factory=list)


class CMakeScriptEvaluator:
    """Interpret the variable commands of a CMake script."""

    def __init__(self, seed: Optional[Mapping[str, str]] = None):
        self.seed = dict(seed or {})

    def evaluate_file(self, path: Path) -> ScriptResult:
        text = path.read_text(encoding="utf-8")
        return self.evaluate(text, list_file=path)

    def evaluate(self, text: str, list_file: Optional[Path] = None) -> ScriptResult:
        """Evaluate CMake source text.

        Args:
            text: Script contents.
            list_file: Path of the script, used for CMAKE_CURRENT_LIST_DIR.

        Returns:
            ScriptResult describing the assignments made.

        Raises:
            CMakeParseError: If the script cannot be parsed.
        """
        tree = CMAKE_PARSER.parse(text)
        resolver = CMakeVariableResolver(self.seed, list_file=list_file)
        result = ScriptResult()

        for cmd in tree.commands():
            if cmd.nested:
                logger.debug("Skipping %s() inside a block at line %d", cmd.name, cmd.line)
                continue
            self._handle_command(cmd, resolver, result)

        return result

    def _handle_command(
        self,
        cmd: CommandInvocation,
        resolver: CMakeVariableResolver,
        result: ScriptResult,
    ) -> None:
        if cmd.name == "set":
            self._handle_set(cmd, resolver, result)
        elif cmd.name == "unset":
            if cmd.args and not cmd.args[0].startswith("ENV{"):
                name = resolver.resolve_argument(cmd.args[0])
                resolver.unset_variable(name)
                result.assignments[name] = None
        elif cmd.name == "option":
            self._handle_option(cmd, resolver, result)
        elif cmd.name == "list":
            self._handle_list(cmd, resolver, result)
        elif cmd.name == "include_guard":
            result.include_guard = True
        else:
            logger.debug("Ignoring command %s() at line %d", cmd.name, cmd.line)
            result.ignored_commands.append(cmd.name)

    def _handle_set(
        self,
        cmd: CommandInvocation,
        resolver: CMakeVariableResolver,
        result: ScriptResult,
    ) -> None:
        if not cmd.args:
            return
        name = resolver.resolve_argument(cmd.args[0])
        if not name or name.startswith("ENV{"):
            logger.debug("Skipping set(%s) at line %d", cmd.args[0], cmd.line)
            return

        values: List[str] = []
        rest: List[str] = []
        for idx, arg in enumerate(cmd.args[1:], start=1):
            if arg in SET_KEYWORDS:
                rest = cmd.args[idx:]
                break
            values.append(resolver.resolve_argument(arg))

        if not values and not rest:
            resolver.unset_variable(name)
            result.assignments[name] = None
            return

        value = ";".join(values)
        if rest and rest[0] == "CACHE":
            # Cache entries never replace a value that is already defined
            if resolver.is_defined(name) and "FORCE" not in rest:
                return
        resolver.set_variable(name, value)
        result.assignments[name] = value

    def _handle_option(
        self,
        cmd: CommandInvocation,
        resolver: CMakeVariableResolver,
        result: ScriptResult,
    ) -> None:
        if not cmd.args:
            return
        name = resolver.resolve_argument(cmd.args[0])
        if resolver.is_defined(name):
            return
        value = resolver.resolve_argument(cmd.args[2]) if len(cmd.args) > 2 else "OFF"
        resolver.set_variable(name, value)
        result.assignments[name] = value

    def _handle_list(
        self,
        cmd: CommandInvocation,
        resolver: CMakeVariableResolver,
        result: ScriptResult,
    ) -> None:
        if len(cmd.args) < 2 or cmd.args[0].upper() != "APPEND":
            logger.debug("Ignoring list(%s) at line %d", " ".join(cmd.args[:1]), cmd.line)
            return
        name = resolver.resolve_argument(cmd.args[1])
        items = [resolver.resolve_argument(item) for item in cmd.args[2:]]
        resolver.append_to_list(name, [item for item in items if item])
        result.assignments[name] = resolver.get(name)


def evaluate_script(path: Path, seed: Optional[Mapping[str, str]] = None) -> ScriptResult:
    """Evaluate a CMake script file against an initial variable scope."""
    return CMakeScriptEvaluator(seed).evaluate_file(path)


__all__ = ["CMakeScriptEvaluator", "ScriptResult", "evaluate_script"]
