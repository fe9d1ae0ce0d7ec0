"""
Distance between two atoms over a range of frames.
"""
from dataclasses import dataclass
import logging

from tqdm import tqdm

from .base import Calculation, Params, check_frame_range
from ..core.errors import ConfigurationError
from ..core.kernels import distance
from ..io.loader import TrajectoryReader
from ..io.schema import UNWRAPPED, WRAPPED
from ..io.writer import ResultWriter

logger = logging.getLogger(__name__)

COLUMNS = ['cfg', 't', 'x', 'y', 'z', 'dist']


@dataclass
class DistTwoAtomsParams(Params):
    file_in: str
    file_out: str
    cfg_start: int
    cfg_end: int
    atom_1: int
    atom_2: int
    dt: float = 1.0
    plot: bool = False
    progress: bool = True

    def __post_init__(self):
        check_frame_range(self.cfg_start, self.cfg_end)
        if self.atom_1 < 0:
            raise ConfigurationError("Atom1 must not be negative")
        if self.atom_1 >= self.atom_2:
            raise ConfigurationError("Atom1 is greater or equal than Atom2")


class DistTwoAtoms(Calculation):
    """Writes the separation vector and distance of two atoms, one row per frame."""
    name = 'dist_two_atoms'
    params_class = DistTwoAtomsParams

    def start(self) -> None:
        p = self.params
        logger.info(f"Distance between atoms {p.atom_1} and {p.atom_2} in {p.file_in}, "
                    f"frames [{p.cfg_start}, {p.cfg_end})")
        with TrajectoryReader.open(p.file_in, coordinates=(UNWRAPPED, WRAPPED)) as reader, \
                ResultWriter(p.file_out, COLUMNS) as out:
            self.save_parameters(p.file_out)
            reader.skip(p.cfg_start)
            for cfg in tqdm(range(p.cfg_start, p.cfg_end), desc="Distance", unit="fr", disable=not p.progress):
                frame = reader.read()
                if p.atom_2 >= reader.atoms:
                    raise ConfigurationError(f"Atom2 ({p.atom_2}) is out of range: "
                                             f"the trajectory has {reader.atoms} atoms")
                vec, dist = distance(frame.atoms[p.atom_1].position, frame.atoms[p.atom_2].position)
                out.write_row([cfg, cfg * p.dt, vec[0], vec[1], vec[2], dist])

        if p.plot:
            from ..visualization import ResultPlotter
            ResultPlotter(p.file_out, 'series').generate_plot()
