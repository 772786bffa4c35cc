"""CMake parsing utilities package.

This package contains reusable building blocks:
- grammar: tree-sitter-cmake parser with compatibility wrappers
- tokens: tokenization helpers
- variables: CMake variable resolver
- script: evaluation of variable-only scripts (presets, toolchain files)
"""
