"""
Atom-row decoding against a cached column schema.
"""
import numpy as np
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from ..core.errors import FrameParseError
from ..core.frame import AtomRecord
from ..utils.helpers import parse_float
from .cursor import StreamCursor
from .schema import ColumnSchema

logger = logging.getLogger(__name__)


class FrameDecoder:
    """
    Decode the atom rows of one frame.

    Two modes are available: ``decode_all`` keeps every atom in stream order,
    ``decode_by_type`` groups positions per type and drops the types nobody
    asked for.
    """

    def __init__(self, schema: ColumnSchema, atoms: int,
                 types: Optional[Iterable[str]] = None, keep_fields: bool = False):
        if types is not None and schema.type is None:
            raise ValueError("Selecting atoms by type requires a 'type' column in the schema.")
        self.schema = schema
        self.atoms = atoms
        self.types = list(dict.fromkeys(types)) if types is not None else None
        self.keep_fields = keep_fields

    def _split(self, line: str, row: int) -> List[str]:
        fields = line.split()
        if len(fields) != self.schema.cols_len:
            raise FrameParseError(f"number of columns don't match (row {row}, got {len(fields)}, "
                                  f"expected {self.schema.cols_len})")
        return fields

    def _position(self, fields: List[str]) -> Tuple[float, float, float]:
        ix, iy, iz = self.schema.coords
        return parse_float(fields[ix]), parse_float(fields[iy]), parse_float(fields[iz])

    def decode_line(self, line: str, row: int = 0) -> AtomRecord:
        fields = self._split(line, row)
        schema = self.schema
        return AtomRecord(
            position=np.array(self._position(fields), dtype=np.float64),
            type=fields[schema.type] if schema.type is not None else None,
            mol=fields[schema.mol] if schema.mol is not None else None,
            fields=fields if self.keep_fields else None,
        )

    def decode_all(self, cursor: StreamCursor) -> List[AtomRecord]:
        return [self.decode_line(cursor.read_line(), row) for row in range(self.atoms)]

    def decode_by_type(self, cursor: StreamCursor) -> Tuple[Dict[str, np.ndarray], List[str]]:
        """
        Returns:
            Positions per type of interest and the types of the kept atoms in stream order
        """
        wanted = self.types or []
        buckets: Dict[str, List[Tuple[float, float, float]]] = {typ: [] for typ in wanted}
        order: List[str] = []
        type_col = self.schema.type
        for row in range(self.atoms):
            fields = self._split(cursor.read_line(), row)
            typ = fields[type_col]
            bucket = buckets.get(typ)
            if bucket is None:
                continue
            bucket.append(self._position(fields))
            order.append(typ)
        groups = {typ: np.array(xyz, dtype=np.float64).reshape(-1, 3) for typ, xyz in buckets.items()}
        return groups, order
