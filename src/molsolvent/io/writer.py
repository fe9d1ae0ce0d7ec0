"""
Result writing module for molsolvent.

This module writes result tables, unwrapped trajectories, point clouds and the
parameter sidecar of each calculation.
"""
import threading
import numpy as np
from pathlib import Path
import logging
from typing import Any, Dict, Iterable, List, Sequence, Union
import yaml

from ..utils.helpers import ensure_directory, format_number

logger = logging.getLogger(__name__)


class ResultWriter:
    """
    Whitespace-separated result table: one header line, then one row per call.

    Rows are flushed as soon as they are written so that output produced before
    a failure stays readable. ``write_row`` may be called from several threads.
    """

    def __init__(self, filename: Union[str, Path], columns: Sequence[str]):
        self.filepath = Path(filename)
        ensure_directory(self.filepath.parent)
        self.columns = list(columns)
        self._lock = threading.Lock()
        self._file = open(self.filepath, 'w')
        self._file.write(' '.join(self.columns) + '\n')
        self._file.flush()
        self.rows = 0
        logger.debug(f"Opened result table {self.filepath} with columns {self.columns}")

    def write_row(self, values: Iterable[Any]) -> None:
        line = ' '.join(format_number(v) for v in values) + '\n'
        with self._lock:
            self._file.write(line)
            self._file.flush()
            self.rows += 1

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()
            logger.info(f"Wrote {self.rows} rows to {self.filepath}")

    def __enter__(self) -> 'ResultWriter':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class TrajectoryWriter:
    """Writes frames back in the dump layout they were read from."""

    def __init__(self, filename: Union[str, Path]):
        self.filepath = Path(filename)
        ensure_directory(self.filepath.parent)
        self._file = open(self.filepath, 'w')
        self.frames = 0

    def write_frame(self, header: Sequence[str], column_line: str, rows: Iterable[Sequence[str]]) -> None:
        out = self._file
        for line in header:
            out.write(line + '\n')
        out.write(column_line + '\n')
        for fields in rows:
            out.write(' '.join(fields) + '\n')
        out.flush()
        self.frames += 1

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()
            logger.info(f"Wrote {self.frames} frames to {self.filepath}")

    def __enter__(self) -> 'TrajectoryWriter':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def save_config(config: Dict[str, Any], filename: Union[str, Path]) -> None:
    """
    Save calculation parameters to a YAML file.

    Args:
        config: Parameters to save
        filename: Destination path
    """
    filepath = Path(filename)
    ensure_directory(filepath.parent)
    logger.info(f"Saving configuration to {filepath}")
    with open(filepath, 'w') as f:
        yaml.safe_dump(config, f, default_flow_style=False, sort_keys=False)


def write_point_cloud(filename: Union[str, Path], analyte: np.ndarray, solvent: np.ndarray) -> None:
    """
    Write grid-cell centres as an XYZ file: ``O`` for analyte cells, ``C`` for solvent cells.
    """
    filepath = Path(filename)
    ensure_directory(filepath.parent)
    lines: List[str] = [str(len(analyte) + len(solvent)), ' Atom C == solvent']
    for symbol, points in (('O', analyte), ('C', solvent)):
        for x, y, z in np.asarray(points, dtype=np.float64).reshape(-1, 3):
            lines.append(f"{symbol} {format_number(x)} {format_number(y)} {format_number(z)}")
    with open(filepath, 'w') as f:
        f.write('\n'.join(lines) + '\n')
    logger.info(f"Point cloud with {len(analyte)} analyte and {len(solvent)} solvent cells saved to {filepath}")
