"""
I/O module for molsolvent.

This module reads LAMMPS-style dump trajectories and writes result tables,
unwrapped trajectories and point clouds.
"""

from .cursor import StreamCursor
from .schema import ColumnSchema, FrameHeader, WRAPPED, UNWRAPPED
from .decoder import FrameDecoder
from .loader import TrajectoryReader
from .writer import ResultWriter, TrajectoryWriter, save_config, write_point_cloud

__all__ = [
    'StreamCursor',
    'ColumnSchema',
    'FrameHeader',
    'WRAPPED',
    'UNWRAPPED',
    'FrameDecoder',
    'TrajectoryReader',
    'ResultWriter',
    'TrajectoryWriter',
    'save_config',
    'write_point_cloud',
]
