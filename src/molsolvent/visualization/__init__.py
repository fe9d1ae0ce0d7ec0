"""
Visualization module for molsolvent.

This module provides plotting capabilities for result tables.
"""

from .plotter import ResultPlotter
from .styles import apply_style, DEFAULT_STYLE, COLOR_SCHEMES

__all__ = [
    'ResultPlotter',
    'apply_style',
    'DEFAULT_STYLE',
    'COLOR_SCHEMES'
]
