"""
Calculations module for molsolvent.

Each calculation type is a class wiring its parameters, the trajectory reader,
a kernel and a result writer together. ``CALCULATIONS`` maps the type names
used in run files to these classes.
"""
import logging
from typing import Any, Dict, Mapping, Type

from .base import Calculation, Params
from .distance import DistTwoAtoms, DistTwoAtomsParams
from .gyration import RadiusGyration, RadiusGyrationParams
from .nopbc import NoPBC, NoPBCParams
from .gr import GR, GRParams
from .volume import Volume, VolumeParams
from ..core.errors import ConfigurationError

logger = logging.getLogger(__name__)

CALCULATIONS: Dict[str, Type[Calculation]] = {
    cls.name: cls for cls in (DistTwoAtoms, RadiusGyration, NoPBC, GR, Volume)
}


def create(name: str, config: Mapping[str, Any]) -> Calculation:
    """
    Build a calculation from its type name and parameters.

    Raises:
        ConfigurationError: If the type is unknown or the parameters are invalid
    """
    try:
        cls = CALCULATIONS[name]
    except KeyError:
        raise ConfigurationError(f"unknown calculation type: {name} "
                                 f"(known: {', '.join(sorted(CALCULATIONS))})") from None
    return cls.from_config(config)


def launch(name: str, config: Mapping[str, Any]) -> Calculation:
    calc = create(name, config)
    logger.info(f"Starting {name}")
    calc.start()
    logger.info(f"Finished {name}")
    return calc


__all__ = [
    'CALCULATIONS',
    'Calculation',
    'Params',
    'create',
    'launch',
    'DistTwoAtoms',
    'DistTwoAtomsParams',
    'RadiusGyration',
    'RadiusGyrationParams',
    'NoPBC',
    'NoPBCParams',
    'GR',
    'GRParams',
    'Volume',
    'VolumeParams',
]
