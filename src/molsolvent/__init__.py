"""
molsolvent: analysis of molecular-dynamics trajectories of solutes in solvents.

Distances, radius of gyration, PBC unwrapping, radial distribution functions
and solute volumes computed from LAMMPS-style dump files.
"""

from .core import Frame, FrameParseError, ConfigurationError, MolsolventError
from .io import TrajectoryReader
from .calculations import CALCULATIONS, create, launch

__version__ = "0.1.0"

__all__ = [
    'Frame',
    'FrameParseError',
    'ConfigurationError',
    'MolsolventError',
    'TrajectoryReader',
    'CALCULATIONS',
    'create',
    'launch',
]
