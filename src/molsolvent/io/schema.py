"""
Frame header and column schema parsing for LAMMPS-style dump files.

A frame looks like::

    ITEM: TIMESTEP
    0
    ITEM: NUMBER OF ATOMS
    3
    ITEM: BOX BOUNDS pp pp pp
    0.0 10.0
    0.0 10.0
    0.0 10.0
    ITEM: ATOMS id type x y z
    1 O 1.0 2.0 3.0
    ...

The first two tokens of the column header are a literal prefix; the remaining
tokens name the columns of every atom row.
"""
from dataclasses import dataclass, field
import numpy as np
import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..core.errors import FrameParseError
from ..utils.helpers import parse_count, parse_float
from .cursor import StreamCursor

logger = logging.getLogger(__name__)

WRAPPED = ('x', 'y', 'z')
UNWRAPPED = ('xu', 'yu', 'zu')

FIRST_PREAMBLE_LINES = 3  # before the atom count
BOUNDS_LABEL_LINES = 1
NEXT_PREAMBLE_LINES = 5  # atom count is known after the first frame
BOX_LINES = 3


@dataclass(frozen=True)
class ColumnSchema:
    prefix: Tuple[str, ...]
    columns: Tuple[str, ...]
    coords: Tuple[int, int, int]
    coord_names: Tuple[str, str, str]
    type: Optional[int] = None
    mol: Optional[int] = None

    @property
    def cols_len(self) -> int:
        return len(self.columns)

    @classmethod
    def from_header(cls, line: str,
                    coordinates: Sequence[Tuple[str, str, str]] = (WRAPPED,),
                    require: Iterable[str] = (),
                    optional: Iterable[str] = ()) -> 'ColumnSchema':
        """
        Resolve column positions from an ``ITEM: ATOMS ...`` line.

        Args:
            line: The column-header line of the first frame
            coordinates: Candidate coordinate triples, in order of preference
            require: Tag fields that must exist ('type', 'mol')
            optional: Tag fields bound only when present

        Raises:
            FrameParseError: If the line is too short or a required field is missing
        """
        tokens = line.split()
        if len(tokens) <= 2:
            raise FrameParseError(f"not enough columns (at least 3; got {len(tokens)})")
        prefix, names = tuple(tokens[:2]), tuple(tokens[2:])

        index: Dict[str, int] = {}
        for k, name in enumerate(names):
            index.setdefault(name, k)

        coords = None
        coord_names = None
        for triple in coordinates:
            if all(name in index for name in triple):
                coords = tuple(index[name] for name in triple)
                coord_names = tuple(triple)
                break
        if coords is None:
            wanted = ' or '.join(', '.join(triple) for triple in coordinates)
            raise FrameParseError(f"cannot find the columns {wanted}")

        require = tuple(require)
        missing = [name for name in require if name not in index]
        if missing:
            raise FrameParseError(f"cannot find the columns {', '.join(missing)}")

        tags = {name: index.get(name) for name in tuple(require) + tuple(optional)}
        schema = cls(prefix=prefix, columns=names, coords=coords, coord_names=coord_names,
                     type=tags.get('type'), mol=tags.get('mol'))
        logger.debug(f"Column schema: {schema.columns} (coordinates {schema.coord_names})")
        return schema

    def header_line(self, rename: Optional[Dict[str, str]] = None) -> str:
        rename = rename or {}
        return ' '.join(self.prefix + tuple(rename.get(name, name) for name in self.columns))


@dataclass
class FrameHeader:
    box_lo: np.ndarray
    box: np.ndarray
    lines: List[str] = field(default_factory=list)  # raw lines up to and including the box block
    column_line: str = ''
    atoms: Optional[int] = None

    @classmethod
    def read_first(cls, cursor: StreamCursor) -> 'FrameHeader':
        lines = [cursor.read_line() for _ in range(FIRST_PREAMBLE_LINES)]
        count_line = cursor.read_line()
        lines.append(count_line)
        try:
            atoms = parse_count(count_line)
        except ValueError:
            raise FrameParseError(f"invalid number of atoms: {count_line.strip()!r}") from None
        if atoms < 0:
            raise FrameParseError(f"invalid number of atoms: {atoms}")
        lines.extend(cursor.read_line() for _ in range(BOUNDS_LABEL_LINES))
        box_lo, box = read_box(cursor, lines)
        column_line = cursor.read_line()
        return cls(box_lo=box_lo, box=box, lines=lines, column_line=column_line, atoms=atoms)

    @classmethod
    def read_next(cls, cursor: StreamCursor) -> 'FrameHeader':
        lines = [cursor.read_line() for _ in range(NEXT_PREAMBLE_LINES)]
        box_lo, box = read_box(cursor, lines)
        column_line = cursor.read_line()  # same layout as the first frame, not re-parsed
        return cls(box_lo=box_lo, box=box, lines=lines, column_line=column_line)


def read_box(cursor: StreamCursor, lines: Optional[List[str]] = None) -> Tuple[np.ndarray, np.ndarray]:
    """Read the three ``lo hi`` lines; returns (origin, lengths)."""
    lo = np.zeros(3, dtype=np.float64)
    hi = np.zeros(3, dtype=np.float64)
    for k in range(BOX_LINES):
        line = cursor.read_line()
        if lines is not None:
            lines.append(line)
        fields = line.split()
        if len(fields) != 2:
            raise FrameParseError(f"unable to get the size of the box: expected 'lo hi', got {line.strip()!r}")
        lo[k] = parse_float(fields[0])
        hi[k] = parse_float(fields[1])
    return lo, hi - lo
