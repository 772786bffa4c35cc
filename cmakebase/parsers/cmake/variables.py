"""CMake variable resolver.

Expands `${VAR}` and `$ENV{VAR}` references the way CMake does at
configuration time: unknown variables expand to an empty string and nested
references such as `${PREFIX_${NAME}}` are resolved inside out.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

from .tokens import split_list

logger = logging.getLogger("cmakebase.parsers.cmake.variables")


class CMakeVariableResolver:
    """Variable scope used while evaluating a single CMake script."""

    def __init__(
        self,
        seed: Optional[Mapping[str, str]] = None,
        list_file: Optional[Path] = None,
    ):
        self.variables: Dict[str, str] = dict(seed or {})
        if list_file is not None:
            self.variables["CMAKE_CURRENT_LIST_FILE"] = str(list_file)
            self.variables["CMAKE_CURRENT_LIST_DIR"] = str(list_file.parent)

    def is_defined(self, name: str) -> bool:
        return name in self.variables

    def get(self, name: str) -> Optional[str]:
        return self.variables.get(name)

    def set_variable(self, name: str, value: str):
        """Set a scalar variable value.

        Args:
            name: Variable name.
            value: Variable value as string.
        """
        self.variables[name] = value

    def unset_variable(self, name: str):
        self.variables.pop(name, None)

    def set_list(self, list_name: str, items: List[str]):
        """Set a CMake list variable value."""
        self.variables[list_name] = ";".join(items)

    def append_to_list(self, list_name: str, items: List[str]):
        """Append items to a CMake list variable.

        Args:
            list_name: Variable name treated as a list.
            items: Items to append.
        """
        current = split_list(self.variables.get(list_name, ""))
        current.extend(items)
        self.set_list(list_name, current)

    def resolve(self, var_expr: str) -> str:
        """Resolve `${VAR}` and `$ENV{VAR}` occurrences within a string.

        References are expanded in a single inside-out pass: a nested name
        such as `${PREFIX_${NAME}}` is built first, and text produced by an
        expansion is never expanded again. Escape sequences (`\\$`, `\\"`,
        `\\\\`, `\\t`, `\\n`, `\\r`) are decoded; `\\;` is kept for list
        splitting.

        Args:
            var_expr: Expression possibly containing placeholders.

        Returns:
            String with every reference expanded.
        """
        # Each frame collects text; frames above the first are open references
        frames: List[List[str]] = [[]]
        kinds: List[str] = []
        i = 0
        n = len(var_expr)
        while i < n:
            ch = var_expr[i]
            if ch == "\\" and i + 1 < n:
                nxt = var_expr[i + 1]
                if nxt == ";":
                    frames[-1].append("\\;")
                elif nxt != "\n":
                    frames[-1].append(_ESCAPES.get(nxt, nxt))
                i += 2
                continue
            opener = _reference_opener(var_expr, i)
            if opener is not None:
                kind, width = opener
                frames.append([])
                kinds.append(kind)
                i += width
                continue
            if ch == "}" and kinds:
                name = "".join(frames.pop())
                frames[-1].append(self._lookup(kinds.pop(), name))
                i += 1
                continue
            frames[-1].append(ch)
            i += 1

        # Unterminated references stay literal
        while kinds:
            inner = "".join(frames.pop())
            prefix = "$ENV{" if kinds.pop() == "env" else "${"
            frames[-1].append(prefix + inner)
        return "".join(frames[0])

    def resolve_argument(self, token: str) -> str:
        """Resolve a command argument; bracket arguments are literal."""
        if getattr(token, "is_bracket", False):
            return str(token)
        return self.resolve(token)

    def _lookup(self, kind: str, name: str) -> str:
        if kind == "env":
            return os.environ.get(name, "")
        value = self.variables.get(name)
        if value is None:
            logger.debug("Variable %s is not defined; expanding to empty string", name)
            return ""
        return value


_ESCAPES = {"t": "\t", "n": "\n", "r": "\r"}


def _reference_opener(text: str, pos: int) -> Optional[Tuple[str, int]]:
    if text.startswith("${", pos):
        return "var", 2
    if text.startswith("$ENV{", pos):
        return "env", 5
    return None
