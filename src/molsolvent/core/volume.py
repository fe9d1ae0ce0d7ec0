"""
Grid-occupancy estimate of the volume taken by a solute in a solvent.
"""
from dataclasses import dataclass
import numpy as np
import logging
from typing import Iterable, List, Mapping, Sequence

from .errors import ConfigurationError
from .frame import Frame
from ..utils.helpers import minimum_image, validate_triplet

logger = logging.getLogger(__name__)

# candidate cells per distance block
CELL_CHUNK = 256


@dataclass
class VolumeMeasure:
    analyte: float
    solvent: float
    analyte_points: np.ndarray  # centres of the cells attributed to the analyte
    solvent_points: np.ndarray  # candidate cells won by another atom


class VolumeGrid:
    """
    Splits the box into cells of size ``bloc`` and attributes cells near the
    analyte to whichever atom is nearest.

    Cells within ``blocs`` cells of an analyte atom (wrapping around the box)
    are candidates. A candidate belongs to the analyte when its smallest
    analyte score, d^2 / sigma^2, is strictly below the smallest score of every
    other atom, d / sigma. Distances follow the minimum-image convention.

    Args:
        bloc: Cell edge along x, y and z
        blocs: Neighbourhood half-width, in cells, along x, y and z
        analytes: Atom types forming the analyte
        sigma: Characteristic radius of every atom type taken into account
    """

    def __init__(self, bloc: Sequence[float], blocs: Sequence[int],
                 analytes: Iterable[str], sigma: Mapping[str, float]):
        validate_triplet(bloc, "bloc")
        validate_triplet(blocs, "blocs")
        self.bloc = np.asarray(bloc, dtype=np.float64)
        self.blocs = np.asarray(blocs, dtype=np.int64)
        if np.any(self.bloc <= 0):
            raise ConfigurationError("bloc sizes must be positive")
        if np.any(self.blocs < 0):
            raise ConfigurationError("blocs must not be negative")

        self.sigma = {str(typ): float(radius) for typ, radius in sigma.items()}
        if any(radius <= 0 for radius in self.sigma.values()):
            raise ConfigurationError("sigma values must be positive")
        self.analytes = [str(typ) for typ in analytes]
        missing = [typ for typ in self.analytes if typ not in self.sigma]
        if missing:
            raise ConfigurationError(f"no sigma for analyte type(s) {', '.join(missing)}")
        self.others = [typ for typ in self.sigma if typ not in self.analytes]

        ranges = [np.arange(-b, b + 1) for b in self.blocs]
        self._offsets = np.stack(np.meshgrid(*ranges, indexing='ij'), axis=-1).reshape(-1, 3)

    @property
    def types(self) -> List[str]:
        return list(self.sigma)

    @property
    def cell_volume(self) -> float:
        return float(np.prod(self.bloc))

    def shape(self, box: np.ndarray) -> np.ndarray:
        return np.maximum(np.floor(box / self.bloc + 0.5).astype(np.int64), 1)

    def candidate_cells(self, frame: Frame) -> np.ndarray:
        analyte_xyz = [frame.groups[typ] for typ in self.analytes if len(frame.groups.get(typ, ()))]
        if not analyte_xyz:
            return np.zeros((0, 3), dtype=np.int64)
        xyz = np.vstack(analyte_xyz)
        shape = self.shape(frame.box)
        cells = np.floor((xyz - frame.box_lo) / self.bloc).astype(np.int64)
        around = (cells[:, None, :] + self._offsets[None, :, :]) % shape
        return np.unique(around.reshape(-1, 3), axis=0)

    def centres(self, frame: Frame, cells: np.ndarray) -> np.ndarray:
        return frame.box_lo + self.bloc * cells + self.bloc / 2.0

    def _best(self, frame: Frame, points: np.ndarray, types: Sequence[str], squared: bool) -> np.ndarray:
        best = np.full(len(points), np.inf)
        for typ in types:
            xyz = frame.groups.get(typ)
            if xyz is None or len(xyz) == 0:
                continue
            delta = minimum_image(points[:, None, :] - xyz[None, :, :], frame.box)
            d2 = np.einsum('ijk,ijk->ij', delta, delta)
            if squared:
                score = d2 / self.sigma[typ] ** 2
            else:
                score = np.sqrt(d2) / self.sigma[typ]
            np.minimum(best, score.min(axis=1), out=best)
        return best

    def measure(self, frame: Frame) -> VolumeMeasure:
        cells = self.candidate_cells(frame)
        points = self.centres(frame, cells)
        mask = np.zeros(len(points), dtype=bool)
        for start in range(0, len(points), CELL_CHUNK):
            block = points[start:start + CELL_CHUNK]
            analyte = self._best(frame, block, self.analytes, squared=True)
            other = self._best(frame, block, self.others, squared=False)
            mask[start:start + CELL_CHUNK] = analyte < other

        analyte_volume = self.cell_volume * int(mask.sum())
        logger.debug(f"Frame {frame.index}: {len(points)} candidate cells, {int(mask.sum())} analyte cells")
        return VolumeMeasure(analyte=analyte_volume, solvent=frame.volume - analyte_volume,
                             analyte_points=points[mask], solvent_points=points[~mask])
