"""
Common machinery of the calculations: parameter parsing and the run interface.
"""
import dataclasses
from pathlib import Path
import logging
from typing import Any, ClassVar, Dict, Mapping, Optional, Type, TypeVar

from ..core.errors import ConfigurationError
from ..io.writer import save_config

logger = logging.getLogger(__name__)

P = TypeVar('P', bound='Params')

_SCALARS = (int, float, str, bool)
_BOOL_WORDS = {'true': True, 'yes': True, 'on': True, '1': True,
               'false': False, 'no': False, 'off': False, '0': False}


def _coerce(name: str, value: Any, typ: Any) -> Any:
    if typ not in _SCALARS or value is None:
        return value
    if typ is bool:
        if isinstance(value, str) and value.strip().lower() in _BOOL_WORDS:
            return _BOOL_WORDS[value.strip().lower()]
        if isinstance(value, bool) or (isinstance(value, int) and value in (0, 1)):
            return bool(value)
        raise ConfigurationError(f"setting {name} must be true or false, got {value!r}")
    if typ is int and isinstance(value, float) and not value.is_integer():
        raise ConfigurationError(f"setting {name} must be an integer, got {value}")
    try:
        return typ(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"setting {name} must be of type {typ.__name__}, got {value!r}") from None


@dataclasses.dataclass
class Params:
    """Base class of the parameter sets; subclasses are dataclasses."""

    @classmethod
    def from_dict(cls: Type[P], data: Mapping[str, Any]) -> P:
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"parameters must be a mapping, got {type(data).__name__}")
        known = {f.name: f for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            logger.warning(f"Ignoring unknown settings for {cls.__name__}: {', '.join(map(str, unknown))}")

        kwargs = {}
        for name, f in known.items():
            if name in data:
                kwargs[name] = _coerce(name, data[name], f.type)
            elif f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
                raise ConfigurationError(f"missing required setting: {name}")
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


def check_frame_range(cfg_start: int, cfg_end: int) -> None:
    if cfg_start < 0:
        raise ConfigurationError("CfgStart must not be negative")
    if cfg_start >= cfg_end:
        raise ConfigurationError("CfgStart is greater or equal than CfgEnd")


def check_threads(threads: Optional[int]) -> None:
    if threads is not None and threads < 1:
        raise ConfigurationError("threads must be at least 1")


class Calculation:
    """
    One calculation type. Subclasses set ``name`` and ``params_class`` and
    implement ``start``, which blocks until the calculation is over.
    """
    name: ClassVar[str] = ''
    params_class: ClassVar[Type[Params]] = Params

    def __init__(self, params: Params):
        self.params = params

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> 'Calculation':
        """
        Build the calculation from a parameter mapping. Parameters may sit at
        the top level or under a key named after the calculation type.
        """
        section = config.get(cls.name) if isinstance(config, Mapping) else None
        if isinstance(section, Mapping):
            config = section
        return cls(cls.params_class.from_dict(config))

    def start(self) -> None:
        raise NotImplementedError

    def save_parameters(self, file_out: str) -> None:
        target = Path(file_out)
        save_config({self.name: self.params.to_dict()}, target.with_name(target.name + '.yaml'))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.params})"
