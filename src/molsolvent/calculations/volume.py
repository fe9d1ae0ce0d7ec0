"""
Volume occupied by a solute, estimated on a grid.
"""
from dataclasses import dataclass, field
import time
import logging
from typing import Dict, List, Optional

from .base import Calculation, Params, check_frame_range, check_threads
from ..core.errors import ConfigurationError
from ..core.frame import Frame
from ..core.processor import ConcurrentFrameProcessor
from ..core.volume import VolumeGrid
from ..io.loader import TrajectoryReader
from ..io.schema import UNWRAPPED, WRAPPED
from ..io.writer import ResultWriter, write_point_cloud

logger = logging.getLogger(__name__)

COLUMNS = ['cfg', 't', 'vol(atoms)', 'vol(other)']


@dataclass
class VolumeParams(Params):
    file_in: str
    file_out: str
    cfg_start: int
    cfg_end: int
    bloc: List[float]
    blocs: List[int]
    atoms: List[str] = field(default_factory=list)  # analyte types
    sigma: Dict[str, float] = field(default_factory=dict)
    file_out_xyz: Optional[str] = None
    cfg_spacing: int = 0
    dt: float = 1.0
    threads: Optional[int] = None
    plot: bool = False
    progress: bool = True

    def __post_init__(self):
        check_frame_range(self.cfg_start, self.cfg_end)
        check_threads(self.threads)
        if self.cfg_spacing < 0:
            raise ConfigurationError("CfgSpacing must not be negative")
        if not self.atoms:
            raise ConfigurationError("at least one analyte atom type is required")
        self.atoms = [str(typ) for typ in self.atoms]
        if self.file_out_xyz is None:
            self.file_out_xyz = f"{self.file_out}.xyz"


class Volume(Calculation):
    """
    Writes the analyte and solvent volumes of every ``cfg_spacing + 1``-th
    frame. Rows are appended as frames complete, so their order depends on the
    scheduling of the workers; each row carries its frame index.
    """
    name = 'volume'
    params_class = VolumeParams

    def start(self) -> None:
        p = self.params
        grid = VolumeGrid(p.bloc, p.blocs, p.atoms, p.sigma)
        logger.info(f"Volume of {', '.join(grid.analytes)} in {p.file_in}, frames [{p.cfg_start}, {p.cfg_end}) "
                    f"every {p.cfg_spacing + 1}")

        with TrajectoryReader.open(p.file_in, coordinates=(WRAPPED, UNWRAPPED), require=('type',),
                                   types=grid.types) as reader, \
                ResultWriter(p.file_out, COLUMNS) as out:
            self.save_parameters(p.file_out)
            reader.skip(p.cfg_start)

            t0 = time.perf_counter()
            first = reader.read_first()
            measure = grid.measure(first)
            write_point_cloud(p.file_out_xyz, measure.analyte_points, measure.solvent_points)
            self._write(out, first, measure.analyte, measure.solvent)
            t_first = time.perf_counter() - t0

            def work(_, frame: Frame) -> None:
                result = grid.measure(frame)
                self._write(out, frame, result.analyte, result.solvent)

            processor = ConcurrentFrameProcessor(reader, p.cfg_end, workers=p.threads, stride=p.cfg_spacing + 1,
                                                 progress=p.progress, desc="Volume")
            processor.run(work)
            t_total = time.perf_counter() - t0

        logger.info(f"Time (first frame): {t_first:.3f} s, (other frames): {t_total - t_first:.3f} s, "
                    f"(total): {t_total:.3f} s")

        if p.plot:
            from ..visualization import ResultPlotter
            ResultPlotter(p.file_out, 'series').generate_plot()

    def _write(self, out: ResultWriter, frame: Frame, analyte: float, solvent: float) -> None:
        out.write_row([frame.index, frame.index * self.params.dt, analyte, solvent])
