"""
Forward-only, line-structured reader over a trajectory stream.
"""
from pathlib import Path
import logging
from typing import Optional, TextIO, Union

from ..core.errors import TrajectoryEOFError

logger = logging.getLogger(__name__)


class StreamCursor:
    """
    Sequential line reader that never rewinds.

    ``at_end`` peeks by holding at most one line of lookahead, so it works on
    pipes and in-memory streams as well as on files.
    """

    def __init__(self, stream: TextIO, name: Optional[str] = None):
        self._stream = stream
        self._pending: Optional[str] = None
        self._owned = False
        self.name = name or getattr(stream, 'name', '<stream>')
        self.line_number = 0

    @classmethod
    def open(cls, filename: Union[str, Path]) -> 'StreamCursor':
        filepath = Path(filename)
        if not filepath.exists():
            raise FileNotFoundError(f"Trajectory file not found: {filename}")
        cursor = cls(open(filepath, 'r'), name=filepath.name)
        cursor._owned = True
        logger.debug(f"Opened trajectory stream {filepath}")
        return cursor

    def _next_raw(self) -> str:
        if self._pending is not None:
            raw, self._pending = self._pending, None
            return raw
        return self._stream.readline()

    def read_line(self) -> str:
        raw = self._next_raw()
        if raw == '':
            raise TrajectoryEOFError(f"unexpected end of {self.name} after line {self.line_number}")
        self.line_number += 1
        return raw.rstrip('\r\n')

    def skip_lines(self, n: int) -> None:
        for _ in range(n):
            self.read_line()

    def at_end(self) -> bool:
        if self._pending is None:
            self._pending = self._stream.readline()
        return self._pending == ''

    def close(self) -> None:
        if self._owned:
            self._stream.close()

    def __enter__(self) -> 'StreamCursor':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
