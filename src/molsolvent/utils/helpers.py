"""
Utility functions for molsolvent.

This module provides helper functions shared by the readers, writers and
calculations.
"""
import math
import os
import numpy as np
import logging
from typing import Union, Sequence
from pathlib import Path

from ..core.errors import ConfigurationError

logger = logging.getLogger(__name__)


def parse_float(token: str) -> float:
    """
    Parse a numeric token from a trajectory row.

    Malformed tokens, including ones with "_" digit separators, become 0.0
    instead of raising. Existing results depend on this permissive policy,
    so keep it.

    Args:
        token: Whitespace-free token from an atom row or a box line

    Returns:
        The parsed value, or 0.0 if the token is not a number
    """
    if "_" in token:
        return 0.0
    try:
        return float(token)
    except ValueError:
        return 0.0


def parse_count(token: str) -> int:
    """Parse a plain decimal integer; digit separators are not accepted."""
    token = token.strip()
    if "_" in token:
        raise ValueError(f"invalid literal for int(): {token!r}")
    return int(token)


def format_number(value: Union[int, float, np.integer, np.floating]) -> str:
    """
    Format a value for a result table.

    Integers are written as-is and floats use the shortest decimal string that
    round-trips to the same double.
    """
    if isinstance(value, (bool, np.bool_)):
        return str(int(value))
    if isinstance(value, (int, np.integer)):
        return str(int(value))
    return repr(float(value))


def update_dict_recursively(base_dict: dict, update_with: dict) -> dict:
    """
    Recursively update a dictionary with another dictionary.

    Args:
        base_dict: Base dictionary to update
        update_with: Dictionary containing updates

    Returns:
        Updated dictionary
    """
    for k, v_update in update_with.items():
        if isinstance(v_update, dict) and k in base_dict and isinstance(base_dict[k], dict):
            update_dict_recursively(base_dict[k], v_update)
        else:
            base_dict[k] = v_update
    return base_dict


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path

    Returns:
        Path object for the directory
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def default_worker_count() -> int:
    """Hardware parallelism minus one pool thread, plus the caller's thread."""
    return max(1, os.cpu_count() or 1)


def minimum_image(delta: np.ndarray, box: np.ndarray) -> np.ndarray:
    """Shift separation vectors by the nearest multiple of the box length."""
    return delta - box * np.round(delta / box)


def shell_volumes(bins: int, dr: float) -> np.ndarray:
    """Volume of each spherical shell [i*dr, (i+1)*dr)."""
    edges = np.arange(bins + 1, dtype=np.float64) * dr
    return 4.0 / 3.0 * math.pi * (edges[1:] ** 3 - edges[:-1] ** 3)


def safe_divide(a: np.ndarray, b: np.ndarray, fill_value: float = 0.0) -> np.ndarray:
    """
    Safely divide arrays, handling division by zero.

    Args:
        a: Numerator array
        b: Denominator array
        fill_value: Value to use when denominator is zero

    Returns:
        Result of division, with fill_value where denominator is zero
    """
    a, b = np.broadcast_arrays(np.asarray(a, dtype=np.float64), np.asarray(b, dtype=np.float64))
    with np.errstate(divide='ignore', invalid='ignore'):
        result = np.divide(a, b, out=np.full_like(a, fill_value), where=b != 0)
    return result


def validate_triplet(values: Sequence, name: str) -> None:
    """
    Validate that a per-axis parameter has exactly three components.

    Raises:
        ConfigurationError: If the sequence does not have three items
    """
    if len(values) != 3:
        raise ConfigurationError(f"{name} must have 3 components (x, y, z), got {len(values)}")
