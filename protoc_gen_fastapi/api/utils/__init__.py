"""Utility functions for the generator."""

from .formatters import format_python_code
from .paths import extract_path_params, to_route_path, default_route_path

__all__ = [
    "format_python_code",
    "extract_path_params",
    "to_route_path",
    "default_route_path",
]
