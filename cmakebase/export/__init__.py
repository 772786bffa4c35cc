"""Writers for configuration run results."""

from .cmake import export_cmake, render_cmake
from .json import export_json, result_to_dict

__all__ = ["export_cmake", "export_json", "render_cmake", "result_to_dict"]
