"""Layered environment presets."""

from .layers import EnvironmentLoader, VariableLayer, load_layer, merge_layers

__all__ = ["EnvironmentLoader", "VariableLayer", "load_layer", "merge_layers"]
