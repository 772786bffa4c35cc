"""Core entities: targets, compilers, versions."""

from .compiler import BuildMode, CompilerFamily, detect_compiler_id
from .target import ApplyOutcome, FunctionResult, Target
from .version import ProjectVersion, VersionTriple, set_project_version

__all__ = [
    "ApplyOutcome",
    "BuildMode",
    "CompilerFamily",
    "FunctionResult",
    "ProjectVersion",
    "Target",
    "VersionTriple",
    "detect_compiler_id",
    "set_project_version",
]
