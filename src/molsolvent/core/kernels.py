"""
Per-frame kernels for the single-threaded calculations.
"""
import numpy as np
from typing import Mapping, Sequence, Tuple

from .errors import ConfigurationError


def distance(xyz1: np.ndarray, xyz2: np.ndarray) -> Tuple[np.ndarray, float]:
    """
    Separation between two atoms.

    Returns:
        The vector ``xyz1 - xyz2`` and its Euclidean norm
    """
    vec = np.asarray(xyz1, dtype=np.float64) - np.asarray(xyz2, dtype=np.float64)
    return vec, float(np.sqrt(np.sum(vec * vec)))


def radius_of_gyration(positions: np.ndarray, types: Sequence[str], masses: Mapping[str, float]) -> float:
    """
    Radius of gyration of a group of atoms.

    The centre is mass weighted, the spread is not: the squared deviations are
    divided by 3 * N, i.e. averaged over atoms and axes.

    Args:
        positions: (atoms, 3) coordinates
        types: Type of each atom
        masses: Mass per atom type

    Raises:
        ConfigurationError: If a type has no mass
    """
    xyz = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
    try:
        weights = np.array([masses[typ] for typ in types], dtype=np.float64)
    except KeyError as exc:
        raise ConfigurationError(f"mass for atom type `{exc.args[0]}` doesn't exist") from None

    com = (weights[:, None] * xyz).sum(axis=0) / weights.sum()
    dev = xyz - com
    return float(np.sqrt(np.sum(dev * dev) / (len(xyz) * 3)))
