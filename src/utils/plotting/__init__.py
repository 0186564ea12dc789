"""Plotting helpers for experiment figures.

Importing the package applies the seaborn-based style:
    from utils import plotting  # Styles applied!
"""

from .styles import apply_styles
from .formatters import format_scientific_latex, build_parameter_string
from . import palettes

apply_styles()

__all__ = [
    "apply_styles",
    "format_scientific_latex",
    "build_parameter_string",
    "palettes",
]
