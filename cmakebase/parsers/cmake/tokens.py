"""Tokenization utilities for CMake argument strings.

This module provides utilities for splitting CMake command arguments into
tokens tagged with the way each argument was written.
"""

from __future__ import annotations

import re
from typing import List


TOKEN_RE = re.compile(
    r"""
    (\[(=*)\[(?:.|\n)*?\]\2\])   # bracket-style [[...]] with optional = signs
    |("(?:\\.|[^"\\])*")         # double-quoted string with escapes
    |([^\s()#"]+)                # unquoted token
    """,
    re.VERBOSE,
)


# Keywords that terminate the value part of set()
SET_KEYWORDS = {"CACHE", "PARENT_SCOPE"}


BRACKET = "bracket"
QUOTED = "quoted"
UNQUOTED = "unquoted"


class ArgToken(str):
    """A command argument that remembers how it was written.

    Bracket arguments are taken literally; quoted and unquoted arguments
    still carry their escape sequences and variable references.
    """

    kind: str

    def __new__(cls, value: str, kind: str = UNQUOTED) -> "ArgToken":
        token = super().__new__(cls, value)
        token.kind = kind
        return token

    @property
    def is_bracket(self) -> bool:
        return self.kind == BRACKET


def _strip_comments(arg_text: str) -> str:
    """Drop `#` comments that are not inside a quoted argument."""
    out: List[str] = []
    in_quote = False
    escaped = False
    skipping = False
    for ch in arg_text:
        if skipping:
            if ch == "\n":
                skipping = False
                out.append(ch)
            continue
        if in_quote:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_quote = False
            continue
        if ch == '"':
            in_quote = True
        elif ch == "#":
            skipping = True
            continue
        out.append(ch)
    return "".join(out)


def extract_arg_tokens(arg_text: str) -> List[ArgToken]:
    """Tokenize CMake command arguments into a list of tokens.

    Handles bracket arguments, quoted strings, and unquoted tokens while
    removing comments. Quoted arguments keep their inner whitespace and may
    be empty. Escape sequences are left in place for the variable resolver.

    Args:
        arg_text: Text segment inside the parentheses of a CMake command.

    Returns:
        List of tokens without their quoting, tagged with their kind.
    """
    cleaned_arg_text = _strip_comments(arg_text)

    tokens: List[ArgToken] = []
    for m in TOKEN_RE.finditer(cleaned_arg_text):
        br = m.group(1)
        dq = m.group(3)
        uq = m.group(4)
        if br:
            inner = re.sub(r"^\[(=*)\[", "", br)
            inner = re.sub(r"\](=*)\]$", "", inner)
            # A newline right after the opening bracket is not part of the value
            if inner.startswith("\n"):
                inner = inner[1:]
            tokens.append(ArgToken(inner, BRACKET))
        elif dq is not None:
            tokens.append(ArgToken(dq[1:-1], QUOTED))
        elif uq:
            tokens.append(ArgToken(uq, UNQUOTED))
    return tokens


def split_list(value: str) -> List[str]:
    """Split a CMake `;`-list into its non-empty items."""
    if not value:
        return []
    return [item.strip() for item in value.split(";") if item.strip()]


__all__ = [
    "ArgToken",
    "BRACKET",
    "QUOTED",
    "SET_KEYWORDS",
    "TOKEN_RE",
    "UNQUOTED",
    "extract_arg_tokens",
    "split_list",
]
