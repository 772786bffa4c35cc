"""CMake parser using tree-sitter-cmake.

This module provides a tree-sitter-based CMake parser with thin wrapper
classes so the rest of the package never touches tree-sitter nodes directly.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, List

import tree_sitter_cmake
from tree_sitter import Language, Node, Parser, Tree

from cmakebase.errors import CMakeParseError
from cmakebase.parsers.cmake.tokens import ArgToken, extract_arg_tokens

_INVOCATION_RE = re.compile(r"^\s*([A-Za-z_][A-Za-z0-9_]*)\s*\((.*)\)\s*$", re.DOTALL)


@dataclass(frozen=True)
class CommandInvocation:
    """A single `name(args...)` command from a CMake script."""

    name: str
    args: List[ArgToken]
    line: int
    nested: bool = False


# Node names differ between tree-sitter-cmake releases
COMMAND_NODE_TYPES = ("command_invocation", "normal_command")
BLOCK_NODE_TYPES = frozenset(
    {"if_condition", "foreach_loop", "while_loop", "function_def", "macro_def", "block_def"}
)


def _is_nested(node: Node) -> bool:
    """Whether a command sits inside a block such as if() or function()."""
    parent = node.parent
    while parent is not None:
        if parent.type in BLOCK_NODE_TYPES:
            return True
        parent = parent.parent
    return False


class ParseTreeWrapper:
    """Wrapper around tree-sitter Tree for convenient API access."""

    def __init__(self, tree: Tree, source_bytes: bytes):
        self.tree = tree
        self.source_bytes = source_bytes

    def find_data(self, *data_names: str) -> Iterator[ParseNodeWrapper]:
        """Find all nodes with the given type name.

        Args:
            data_names: Node types to search for (e.g., "command_invocation")

        Yields:
            ParseNodeWrapper objects for each matching node, in source order
        """
        def traverse(node: Node) -> Iterator[Node]:
            if node.type in data_names:
                yield node
            for child in node.children:
                yield from traverse(child)

        for node in traverse(self.tree.root_node):
            yield ParseNodeWrapper(node, self.source_bytes)

    def commands(self) -> Iterator[CommandInvocation]:
        """Yield every command invocation with tokenized arguments.

        Command names are lowercased since CMake commands are case-insensitive.
        """
        for cmd in self.find_data(*COMMAND_NODE_TYPES):
            m = _INVOCATION_RE.match(str(cmd))
            if not m:
                continue
            yield CommandInvocation(
                name=m.group(1).lower(),
                args=extract_arg_tokens(m.group(2)),
                line=cmd.node.start_point[0] + 1,
                nested=_is_nested(cmd.node),
            )


class ParseNodeWrapper:
    """Wrapper around tree-sitter Node for convenient API access."""

    def __init__(self, node: Node, source_bytes: bytes):
        self.node = node
        self.source_bytes = source_bytes

    def __str__(self) -> str:
        return self.source_bytes[self.node.start_byte:self.node.end_byte].decode("utf8", errors="ignore")


class CMakeParser:
    """Tree-sitter based CMake parser."""

    def __init__(self):
        self.parser = Parser()
        self.parser.language = Language(tree_sitter_cmake.language())

    def parse(self, text: str) -> ParseTreeWrapper:
        """Parse CMake source code.

        Args:
            text: CMake source code as string

        Returns:
            ParseTreeWrapper with convenient API access

        Raises:
            CMakeParseError: If the source has a syntax error
        """
        source_bytes = text.encode("utf8")
        tree = self.parser.parse(source_bytes)

        if tree.root_node.has_error:
            def find_error(node: Node) -> Node | None:
                if node.is_error or node.is_missing:
                    return node
                for child in node.children:
                    error = find_error(child)
                    if error:
                        return error
                return None

            error_node = find_error(tree.root_node)
            if error_node:
                line = source_bytes[:error_node.start_byte].count(b"\n") + 1
                col = error_node.start_byte - source_bytes.rfind(b"\n", 0, error_node.start_byte)
                raise CMakeParseError(f"Parse error at line {line}, column {col}")
            raise CMakeParseError("Parse error in CMake file")

        return ParseTreeWrapper(tree, source_bytes)


# Expose a single shared parser instance
CMAKE_PARSER = CMakeParser()
