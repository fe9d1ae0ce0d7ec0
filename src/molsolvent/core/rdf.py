"""
Radial distribution function accumulation and normalization.
"""
from dataclasses import dataclass, field
import math
import numpy as np
import logging
from typing import Dict, List, Mapping, Sequence, Tuple

from .errors import ConfigurationError, FrameParseError
from .frame import Frame
from ..utils.helpers import minimum_image, safe_divide, shell_volumes

logger = logging.getLogger(__name__)

Pair = Tuple[str, str]

# source atoms per distance block, bounds the (sources, targets, 3) temporary
SOURCE_CHUNK = 256


@dataclass
class RDFResult:
    dist: np.ndarray  # bin centres
    gr: Dict[Pair, np.ndarray]
    integral: Dict[Pair, np.ndarray]
    pairs: Dict[str, List[str]]

    def table(self, order: Sequence[str]) -> Tuple[List[str], np.ndarray]:
        """
        Lay the result out as a table: the bin centre, then an integral and a
        g(r) column for every source atom (in ``order``) and every target type.

        Args:
            order: Source-atom types in the order the atoms appear in the first frame
        """
        columns = ['dist']
        data = [self.dist]
        seen: Dict[Pair, int] = {}
        for src in order:
            for dst in self.pairs.get(src, []):
                key = (src, dst)
                row = seen.get(key, 0)
                columns.append(f"{src}-{dst}({row})-intg")
                columns.append(f"{src}-{dst}({row})-hstg")
                data.append(self.integral[key][row])
                data.append(self.gr[key][row])
                seen[key] = row + 1
        return columns, np.column_stack(data)


@dataclass
class RDFHistogram:
    """
    Per-source-atom distance histograms for every configured type pair.

    Counts are integers so that merging the histograms of several workers gives
    the same result whatever the merge order.

    Args:
        pairs: Source type -> target types
        rmax: Cutoff radius
        dr: Bin width
    """
    pairs: Mapping[str, Sequence[str]]
    rmax: float
    dr: float
    population: Dict[str, int] = field(default_factory=dict)
    counts: Dict[Pair, np.ndarray] = field(default_factory=dict)
    volumes: List[float] = field(default_factory=list)

    def __post_init__(self):
        self.pairs = {str(src): [str(dst) for dst in dsts] for src, dsts in self.pairs.items()}
        if not self.pairs:
            raise ConfigurationError("at least one pair of atom types is required")
        if self.dr <= 0 or self.rmax <= 0:
            raise ConfigurationError("rmax and dr must be positive")
        self.bins = int(math.floor(self.rmax / self.dr))
        if self.bins <= 1:
            raise ConfigurationError("the number of bins must be greater than 1")
        self.rmax2 = self.rmax ** 2

    @property
    def types(self) -> List[str]:
        """Every type taking part in a pair, sources first."""
        ordered = list(self.pairs)
        for dsts in self.pairs.values():
            ordered.extend(dsts)
        return list(dict.fromkeys(ordered))

    @property
    def frames(self) -> int:
        return len(self.volumes)

    def allocate(self, frame: Frame) -> None:
        """Fix the row layout from the first frame."""
        for typ in self.types:
            self.population[typ] = len(frame.groups.get(typ, ()))
            if self.population[typ] == 0:
                logger.warning(f"No atom of type {typ} in frame {frame.index}")
        for src, dsts in self.pairs.items():
            for dst in dsts:
                self.counts[(src, dst)] = np.zeros((self.population[src], self.bins), dtype=np.int64)

    def empty_like(self) -> 'RDFHistogram':
        other = RDFHistogram(self.pairs, self.rmax, self.dr, population=dict(self.population))
        other.counts = {key: np.zeros_like(table) for key, table in self.counts.items()}
        return other

    def accumulate(self, frame: Frame) -> None:
        box = frame.box
        for (src, dst), table in self.counts.items():
            xyz_src = frame.groups.get(src, np.zeros((0, 3)))
            xyz_dst = frame.groups.get(dst, np.zeros((0, 3)))
            if len(xyz_src) != table.shape[0]:
                raise FrameParseError(f"{len(xyz_src)} atoms of type {src} (expected {table.shape[0]})",
                                      frame=frame.index)
            if len(xyz_dst) == 0:
                continue
            for start in range(0, len(xyz_src), SOURCE_CHUNK):
                block = xyz_src[start:start + SOURCE_CHUNK]
                delta = minimum_image(block[:, None, :] - xyz_dst[None, :, :], box)
                d2 = np.einsum('ijk,ijk->ij', delta, delta)
                rows, cols = np.nonzero(d2 <= self.rmax2)
                index = (np.sqrt(d2[rows, cols]) / self.dr).astype(np.int64)
                keep = index < self.bins
                np.add.at(table, (rows[keep] + start, index[keep]), 1)
        self.volumes.append(frame.volume)

    def merge(self, other: 'RDFHistogram') -> None:
        for key, table in other.counts.items():
            self.counts[key] += table
        self.volumes.extend(other.volumes)

    def finalize(self, n_frames: int) -> RDFResult:
        """
        Normalize the counts.

        The integral is the cumulative mean count per source atom; g(r) divides
        the mean count by the ideal-gas count of the target type in each shell.

        Args:
            n_frames: Number of frames of the analysed range
        """
        if n_frames <= 0:
            raise ValueError("n_frames must be positive.")
        mean_volume = math.fsum(self.volumes) / n_frames
        shells = shell_volumes(self.bins, self.dr)

        gr: Dict[Pair, np.ndarray] = {}
        integral: Dict[Pair, np.ndarray] = {}
        for (src, dst), table in self.counts.items():
            mean_count = table / n_frames
            ideal = shells * self.population[dst] / mean_volume
            gr[(src, dst)] = safe_divide(mean_count, ideal[None, :])
            integral[(src, dst)] = np.cumsum(mean_count, axis=1)

        dist = (np.arange(self.bins, dtype=np.float64) + 0.5) * self.dr
        return RDFResult(dist=dist, gr=gr, integral=integral, pairs=dict(self.pairs))
