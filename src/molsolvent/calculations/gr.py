"""
Radial distribution function g(r) and its running integral.
"""
from dataclasses import dataclass, field
import logging
from typing import Dict, List, Optional

from .base import Calculation, Params, check_frame_range, check_threads
from ..core.errors import ConfigurationError
from ..core.processor import ConcurrentFrameProcessor
from ..core.rdf import RDFHistogram
from ..io.loader import TrajectoryReader
from ..io.schema import UNWRAPPED, WRAPPED
from ..io.writer import ResultWriter

logger = logging.getLogger(__name__)


@dataclass
class GRParams(Params):
    file_in: str
    file_out: str
    cfg_start: int
    cfg_end: int
    rmax: float
    dr: float
    atoms: Dict[str, List[str]] = field(default_factory=dict)  # source type -> target types
    threads: Optional[int] = None
    plot: bool = False
    progress: bool = True

    def __post_init__(self):
        check_frame_range(self.cfg_start, self.cfg_end)
        check_threads(self.threads)
        if not isinstance(self.atoms, dict) or not self.atoms:
            raise ConfigurationError("atoms must map each source type to a list of target types")
        self.atoms = {str(src): [str(dst) for dst in (dsts if isinstance(dsts, list) else [dsts])]
                      for src, dsts in self.atoms.items()}


class GR(Calculation):
    name = 'gr'
    params_class = GRParams

    def start(self) -> None:
        p = self.params
        hist = RDFHistogram(p.atoms, p.rmax, p.dr)
        logger.info(f"g(r) of {p.file_in}: pairs {hist.pairs}, {hist.bins} bins of {p.dr}, "
                    f"frames [{p.cfg_start}, {p.cfg_end})")

        with TrajectoryReader.open(p.file_in, coordinates=(WRAPPED, UNWRAPPED), require=('type',),
                                   types=hist.types) as reader:
            reader.skip(p.cfg_start)
            first = reader.read_first()
            hist.allocate(first)
            hist.accumulate(first)

            processor = ConcurrentFrameProcessor(reader, p.cfg_end, workers=p.threads,
                                                 progress=p.progress, desc="g(r)")
            states = processor.run(lambda state, frame: state.accumulate(frame), init_state=hist.empty_like)

        for state in states:
            hist.merge(state)
        logger.debug(f"Merged {len(states)} histograms over {hist.frames} frames")

        result = hist.finalize(p.cfg_end - p.cfg_start)
        columns, table = result.table([typ for typ in first.order if typ in hist.pairs])
        with ResultWriter(p.file_out, columns) as out:
            for row in table:
                out.write_row(row)
        self.save_parameters(p.file_out)

        if p.plot:
            from ..visualization import ResultPlotter
            ResultPlotter(p.file_out, 'rdf').generate_plot()
