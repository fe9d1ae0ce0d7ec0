"""
Utilities module for molsolvent.

This module provides various utility functions and configuration management
for the molsolvent package.
"""

from .config_manager import ConfigManager, StepEntry
from .helpers import (
    parse_count,
    parse_float,
    format_number,
    update_dict_recursively,
    ensure_directory,
    default_worker_count,
    minimum_image,
    safe_divide,
)

__all__ = [
    'ConfigManager',
    'StepEntry',
    'parse_count',
    'parse_float',
    'format_number',
    'update_dict_recursively',
    'ensure_directory',
    'default_worker_count',
    'minimum_image',
    'safe_divide',
]
