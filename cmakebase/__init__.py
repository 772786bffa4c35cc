"""cmakebase - shared CMake configuration base.

Reusable CMake functions, layered environment presets and cross-compilation
toolchains, together with a Python implementation of the same layering so
the effective configuration can be computed and exported before CMake runs.
"""

__version__ = "1.0.0"
