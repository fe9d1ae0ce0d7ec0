"""
Radius of gyration of a contiguous range of atoms.
"""
from dataclasses import dataclass, field
import logging
from typing import Dict

from tqdm import tqdm

from .base import Calculation, Params, check_frame_range
from ..core.errors import ConfigurationError
from ..core.kernels import radius_of_gyration
from ..io.loader import TrajectoryReader
from ..io.schema import UNWRAPPED, WRAPPED
from ..io.writer import ResultWriter

logger = logging.getLogger(__name__)

COLUMNS = ['cfg', 't', 'radius']


@dataclass
class RadiusGyrationParams(Params):
    file_in: str
    file_out: str
    cfg_start: int
    cfg_end: int
    atom_start: int
    atom_end: int
    masses: Dict[str, float] = field(default_factory=dict)
    dt: float = 1.0
    plot: bool = False
    progress: bool = True

    def __post_init__(self):
        check_frame_range(self.cfg_start, self.cfg_end)
        if self.atom_start < 0:
            raise ConfigurationError("AtomStart must not be negative")
        if self.atom_start >= self.atom_end:
            raise ConfigurationError("AtomStart is greater or equal than AtomEnd")
        if not isinstance(self.masses, dict):
            raise ConfigurationError("masses must map atom types to masses")
        self.masses = {str(typ): float(mass) for typ, mass in self.masses.items()}
        if any(mass <= 0 for mass in self.masses.values()):
            raise ConfigurationError("masses must be positive")


class RadiusGyration(Calculation):
    name = 'radius_gyration'
    params_class = RadiusGyrationParams

    def start(self) -> None:
        p = self.params
        logger.info(f"Radius of gyration of atoms [{p.atom_start}, {p.atom_end}) in {p.file_in}, "
                    f"frames [{p.cfg_start}, {p.cfg_end})")
        with TrajectoryReader.open(p.file_in, coordinates=(UNWRAPPED, WRAPPED), require=('type',)) as reader, \
                ResultWriter(p.file_out, COLUMNS) as out:
            self.save_parameters(p.file_out)
            reader.skip(p.cfg_start)
            for cfg in tqdm(range(p.cfg_start, p.cfg_end), desc="Gyration", unit="fr", disable=not p.progress):
                frame = reader.read()
                if p.atom_end > reader.atoms:
                    raise ConfigurationError(f"AtomEnd ({p.atom_end}) is out of range: "
                                             f"the trajectory has {reader.atoms} atoms")
                group = frame.atoms[p.atom_start:p.atom_end]
                positions = frame.positions[p.atom_start:p.atom_end]
                radius = radius_of_gyration(positions, [atom.type for atom in group], p.masses)
                out.write_row([cfg, cfg * p.dt, radius])

        if p.plot:
            from ..visualization import ResultPlotter
            ResultPlotter(p.file_out, 'series').generate_plot()
