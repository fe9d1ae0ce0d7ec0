"""
Rewrite a trajectory with unwrapped coordinates.
"""
from dataclasses import dataclass, field
import logging
from typing import Dict, List

from tqdm import tqdm

from .base import Calculation, Params
from ..core.errors import ConfigurationError
from ..core.frame import AtomRecord
from ..core.pbc import PBCUnwrapper
from ..io.loader import TrajectoryReader
from ..io.schema import ColumnSchema, UNWRAPPED, WRAPPED
from ..io.writer import TrajectoryWriter
from ..utils.helpers import format_number

logger = logging.getLogger(__name__)


@dataclass
class NoPBCParams(Params):
    file_in: str
    file_out: str
    size: Dict[str, List[float]] = field(default_factory=dict)  # molecule id -> x, y, z threshold
    progress: bool = True

    def __post_init__(self):
        if not isinstance(self.size, dict):
            raise ConfigurationError("size must map molecule ids to three thresholds")
        self.size = {str(mol): [float(v) for v in values] for mol, values in self.size.items()}


def _rewrite(atom: AtomRecord, schema: ColumnSchema, xyz) -> List[str]:
    fields = list(atom.fields)
    for col, value in zip(schema.coords, xyz):
        fields[col] = format_number(value)
    return fields


class NoPBC(Calculation):
    """Unwraps every frame of the input until the end of the stream."""
    name = 'no_pbc'
    params_class = NoPBCParams

    def start(self) -> None:
        p = self.params
        unwrapper = PBCUnwrapper(p.size)
        logger.info(f"Unwrapping {p.file_in} into {p.file_out}")
        with TrajectoryReader.open(p.file_in, coordinates=(WRAPPED,), optional=('mol',), keep_fields=True) as reader, \
                TrajectoryWriter(p.file_out) as out, \
                tqdm(desc="Unwrap", unit="fr", disable=not p.progress) as bar:
            column_line = None
            for frame in reader:
                schema = reader.schema
                if column_line is None:
                    column_line = schema.header_line(rename=dict(zip(WRAPPED, UNWRAPPED)))
                    if schema.mol is None:
                        logger.warning(f"No 'mol' column in {p.file_in}: every atom is unwrapped on its own")
                unwrapped = unwrapper.unwrap_frame(frame)
                rows = (_rewrite(atom, schema, xyz) for atom, xyz in zip(frame.atoms, unwrapped))
                out.write_frame(frame.header[:-1], column_line, rows)
                bar.update(1)
