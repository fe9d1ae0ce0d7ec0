"""
Core module for molsolvent.

This module provides the frame data structures, the periodic-boundary
unwrapper, the concurrent frame processor and the numeric kernels.
"""

from .errors import MolsolventError, FrameParseError, TrajectoryEOFError, ConfigurationError
from .frame import AtomRecord, Frame
from .pbc import PBCUnwrapper
from .processor import ConcurrentFrameProcessor, ProcessorContext
from .kernels import distance, radius_of_gyration
from .rdf import RDFHistogram, RDFResult
from .volume import VolumeGrid, VolumeMeasure

__all__ = [
    'MolsolventError',
    'FrameParseError',
    'TrajectoryEOFError',
    'ConfigurationError',
    'AtomRecord',
    'Frame',
    'PBCUnwrapper',
    'ConcurrentFrameProcessor',
    'ProcessorContext',
    'distance',
    'radius_of_gyration',
    'RDFHistogram',
    'RDFResult',
    'VolumeGrid',
    'VolumeMeasure',
]
