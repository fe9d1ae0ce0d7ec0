"""
Trajectory loading module.

``TrajectoryReader`` streams frames from a LAMMPS-style dump file: the first
frame fixes the atom count and the column schema, later frames are decoded
with the cached schema.
"""
from contextlib import contextmanager
from pathlib import Path
import logging
from typing import Iterable, Iterator, Optional, Sequence, Tuple, Union

from ..core.errors import FrameParseError
from ..core.frame import Frame
from ..utils.helpers import parse_count
from .cursor import StreamCursor
from .decoder import FrameDecoder
from .schema import ColumnSchema, FrameHeader, WRAPPED, FIRST_PREAMBLE_LINES

logger = logging.getLogger(__name__)


@contextmanager
def _frame_errors(index: int):
    try:
        yield
    except FrameParseError as exc:
        if exc.frame is None:
            exc.frame = index
        raise


class TrajectoryReader:
    def __init__(self, cursor: StreamCursor,
                 coordinates: Sequence[Tuple[str, str, str]] = (WRAPPED,),
                 require: Iterable[str] = (), optional: Iterable[str] = (),
                 types: Optional[Iterable[str]] = None, keep_fields: bool = False):
        """
        Args:
            cursor: Stream positioned at the start of a frame
            coordinates: Candidate coordinate column triples, in order of preference
            require: Tag columns that must exist ('type', 'mol')
            optional: Tag columns bound when present
            types: Atom types to keep; when given, frames are grouped per type
            keep_fields: Keep the raw tokens of each row (select-all mode only)
        """
        self.cursor = cursor
        self.coordinates = tuple(coordinates)
        self.require = tuple(require)
        self.optional = tuple(optional)
        self.types = list(types) if types is not None else None
        self.keep_fields = keep_fields

        self.index = 0  # absolute index of the next frame in the stream
        self.atoms: Optional[int] = None
        self.schema: Optional[ColumnSchema] = None
        self.decoder: Optional[FrameDecoder] = None

    @classmethod
    def open(cls, filename: Union[str, Path], **kwargs) -> 'TrajectoryReader':
        return cls(StreamCursor.open(filename), **kwargs)

    def close(self) -> None:
        self.cursor.close()

    def __enter__(self) -> 'TrajectoryReader':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def at_end(self) -> bool:
        return self.cursor.at_end()

    def skip(self, n: int) -> None:
        """Discard ``n`` frames without decoding their rows."""
        for _ in range(n):
            with _frame_errors(self.index):
                self.cursor.skip_lines(FIRST_PREAMBLE_LINES)
                count_line = self.cursor.read_line()
                try:
                    atoms = parse_count(count_line)
                except ValueError:
                    raise FrameParseError(f"invalid number of atoms: {count_line.strip()!r}") from None
                # bounds label, box block, column header, then the rows
                self.cursor.skip_lines(5 + atoms)
            self.index += 1
        if n:
            logger.debug(f"Skipped {n} frames in {self.cursor.name}; next frame is {self.index}")

    def read_first(self) -> Frame:
        with _frame_errors(self.index):
            header = FrameHeader.read_first(self.cursor)
            self.atoms = header.atoms
            self.schema = ColumnSchema.from_header(header.column_line, coordinates=self.coordinates,
                                                   require=self.require, optional=self.optional)
            self.decoder = FrameDecoder(self.schema, self.atoms, types=self.types,
                                        keep_fields=self.keep_fields)
            frame = self._decode(header)
        logger.info(f"Trajectory '{self.cursor.name}': {self.atoms} atoms, "
                    f"{self.schema.cols_len} columns, first frame {frame.index}")
        self.index += 1
        return frame

    def read_next(self) -> Frame:
        if self.decoder is None:
            raise RuntimeError("read_first must be called before read_next.")
        with _frame_errors(self.index):
            header = FrameHeader.read_next(self.cursor)
            frame = self._decode(header)
        self.index += 1
        return frame

    def read(self) -> Frame:
        return self.read_first() if self.decoder is None else self.read_next()

    def __iter__(self) -> Iterator[Frame]:
        while not self.at_end():
            yield self.read()

    def _decode(self, header: FrameHeader) -> Frame:
        lines = header.lines + [header.column_line]
        if self.types is not None:
            groups, order = self.decoder.decode_by_type(self.cursor)
            return Frame(index=self.index, box_lo=header.box_lo, box=header.box,
                         header=lines, groups=groups, order=order)
        atoms = self.decoder.decode_all(self.cursor)
        return Frame(index=self.index, box_lo=header.box_lo, box=header.box,
                     header=lines, atoms=atoms)
