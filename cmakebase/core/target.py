"""Build targets and the outcome of applying a function to one."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Tuple


class ApplyOutcome(str, Enum):
    """What a function library call did to its target."""

    APPLIED = "applied"
    SKIPPED_UNSUPPORTED = "skipped-unsupported"
    SKIPPED_NOT_APPLICABLE = "skipped-not-applicable"


@dataclass
class Target:
    """A named compilable unit owned by a downstream project.

    Option and definition lists keep insertion order and never hold the same
    item twice, so applying a function again leaves the target unchanged.
    """

    name: str
    compile_options: List[str] = field(default_factory=list)
    link_options: List[str] = field(default_factory=list)
    compile_definitions: List[str] = field(default_factory=list)

    def add_compile_options(self, options: Iterable[str]) -> None:
        _extend_unique(self.compile_options, options)

    def add_link_options(self, options: Iterable[str]) -> None:
        _extend_unique(self.link_options, options)

    def add_compile_definitions(self, definitions: Iterable[str]) -> None:
        _extend_unique(self.compile_definitions, definitions)

    def snapshot(self) -> Tuple[Tuple[str, ...], Tuple[str, ...], Tuple[str, ...]]:
        """Return an immutable copy of the target's flag state."""
        return (
            tuple(self.compile_options),
            tuple(self.link_options),
            tuple(self.compile_definitions),
        )


def _extend_unique(items: List[str], new_items: Iterable[str]) -> None:
    for item in new_items:
        if item not in items:
            items.append(item)


@dataclass(frozen=True)
class FunctionResult:
    """Result of one function library call.

    Attributes:
        function: CMake function name (e.g. "add_compiler_warnings").
        target: Target name.
        outcome: Whether the function applied or why it was skipped.
        items: Flags or definitions attached by the call.
        reason: Human-readable explanation for skipped calls.
    """

    function: str
    target: str
    outcome: ApplyOutcome
    items: Tuple[str, ...] = ()
    reason: Optional[str] = None

    @property
    def applied(self) -> bool:
        return self.outcome is ApplyOutcome.APPLIED
