"""
Core frame data structures for trajectory snapshots.
"""
from dataclasses import dataclass, field
import numpy as np
from typing import Dict, List, Optional


@dataclass
class AtomRecord:
    position: np.ndarray
    type: Optional[str] = None
    mol: Optional[str] = None
    fields: Optional[List[str]] = None  # raw tokens, only kept when rows are re-emitted


@dataclass
class Frame:
    index: int
    box_lo: np.ndarray
    box: np.ndarray  # orthorhombic lengths (hi - lo)
    header: List[str] = field(default_factory=list)
    atoms: List[AtomRecord] = field(default_factory=list)
    groups: Dict[str, np.ndarray] = field(default_factory=dict)
    order: List[str] = field(default_factory=list)  # types of the kept atoms, in stream order

    def __post_init__(self):
        self.box_lo = np.asarray(self.box_lo, dtype=np.float64)
        self.box = np.asarray(self.box, dtype=np.float64)
        if self.box_lo.shape != (3,):
            raise ValueError(f"Box origin must be a 3-element array, got {self.box_lo.shape}")
        if self.box.shape != (3,):
            raise ValueError(f"Box lengths must be a 3-element array, got {self.box.shape}")
        for typ, xyz in self.groups.items():
            if xyz.ndim != 2 or xyz.shape[1] != 3:
                raise ValueError(f"Positions of type {typ} must be 2D (atoms, xyz), got {xyz.shape}")

    @property
    def n_atoms(self) -> int:
        if self.atoms:
            return len(self.atoms)
        return sum(len(xyz) for xyz in self.groups.values())

    @property
    def volume(self) -> float:
        return float(self.box[0] * self.box[1] * self.box[2])

    @property
    def positions(self) -> np.ndarray:
        """Positions of the select-all records as an (atoms, 3) array."""
        if not self.atoms:
            return np.zeros((0, 3), dtype=np.float64)
        return np.vstack([atom.position for atom in self.atoms])

    @property
    def types(self) -> List[Optional[str]]:
        return [atom.type for atom in self.atoms]
