"""
Periodic-boundary unwrapping.
"""
import numpy as np
import logging
from typing import Dict, List, Mapping, Optional, Sequence

from .errors import FrameParseError
from .frame import Frame
from ..utils.helpers import validate_triplet

logger = logging.getLogger(__name__)


def wrap_step(previous: np.ndarray, raw: np.ndarray, threshold: np.ndarray, box: np.ndarray) -> np.ndarray:
    """
    Move ``raw`` by one box length along every axis where it jumped further than
    ``threshold`` away from ``previous``.
    """
    diff = previous - raw
    return raw + box * (diff > threshold) - box * (diff < -threshold)


class PBCUnwrapper:
    """
    One-pass filter turning wrapped coordinates into continuous ones.

    Frames must be fed in trajectory order. On the first frame every entity (a
    molecule id, or a single atom when there is no molecule column) starts from
    its raw position, and the atoms of a molecule are unwrapped against the
    molecule's running position so that molecules cut by a boundary are made
    whole. On later frames each atom is compared with its own previous unwrapped
    position and a cumulative correction is carried along.

    Args:
        sizes: Per-molecule thresholds (x, y, z) overriding the half-box default
    """

    def __init__(self, sizes: Optional[Mapping[str, Sequence[float]]] = None):
        self.sizes: Dict[str, np.ndarray] = {}
        for mol, size in (sizes or {}).items():
            validate_triplet(size, f"size of molecule {mol}")
            self.sizes[str(mol)] = np.asarray(size, dtype=np.float64)
        self._last: Optional[np.ndarray] = None
        self._corr: Optional[np.ndarray] = None
        self._override: Optional[np.ndarray] = None
        self.frames = 0

    def unwrap_frame(self, frame: Frame) -> np.ndarray:
        mols = [atom.mol for atom in frame.atoms]
        if all(mol is None for mol in mols):
            mols = None
        return self.unwrap(frame.box, frame.positions, mols)

    def unwrap(self, box: np.ndarray, positions: np.ndarray, mols: Optional[List[Optional[str]]] = None) -> np.ndarray:
        box = np.asarray(box, dtype=np.float64)
        raw = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
        if self._last is None:
            out = self._first(box, raw, mols)
        else:
            out = self._next(box, raw)
        self.frames += 1
        return out

    def _first(self, box: np.ndarray, raw: np.ndarray, mols: Optional[List[Optional[str]]]) -> np.ndarray:
        half = box / 2.0
        out = np.empty_like(raw)
        override = np.full_like(raw, np.nan)
        running: Dict[str, np.ndarray] = {}

        for i, xyz in enumerate(raw):
            mol = mols[i] if mols is not None else None
            size = self.sizes.get(mol) if mol is not None else None
            if size is not None:
                override[i] = size
            if mol is None or mol not in running:
                last = xyz.copy()
            else:
                threshold = size if size is not None else half
                last = wrap_step(running[mol], xyz, threshold, box)
            if mol is not None:
                running[mol] = last
            out[i] = last

        if mols is not None:
            logger.debug(f"First frame: {len(running)} molecules, {len(raw)} atoms")
        self._last = out.copy()
        self._corr = np.zeros_like(raw)
        self._override = override
        return out

    def _next(self, box: np.ndarray, raw: np.ndarray) -> np.ndarray:
        if raw.shape != self._last.shape:
            raise FrameParseError(f"expected {len(self._last)} atoms, got {len(raw)}")
        threshold = np.where(np.isnan(self._override), box / 2.0, self._override)
        shifted = raw + self._corr
        diff = self._last - shifted
        step = box * (diff > threshold) - box * (diff < -threshold)
        self._corr += step
        shifted += step
        self._last = shifted
        return shifted.copy()
