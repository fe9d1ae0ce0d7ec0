"""
Configuration management module for molsolvent.

This module loads run files: an ordered list of steps, each step a list of
calculations that run together. A calculation entry names its ``type`` and
either a parameter ``file`` or inline ``params``. An optional ``defaults``
mapping holds parameters shared by every calculation of a type.
"""
import copy
from dataclasses import dataclass, field
import yaml
from pathlib import Path
import logging
from typing import Dict, Any, List, Optional, Union

from ..core.errors import ConfigurationError
from .helpers import update_dict_recursively

logger = logging.getLogger(__name__)

# parameters holding paths, resolved against the run file's directory
PATH_KEYS = ('file_in', 'file_out', 'file_out_xyz')


@dataclass
class StepEntry:
    type: str
    params: Dict[str, Any] = field(default_factory=dict)
    source: Optional[Path] = None  # parameter file, when the entry named one

    @property
    def label(self) -> str:
        return f"{self.type} ({self.source})" if self.source is not None else self.type


def _read_yaml(path: Path) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    with open(path, 'r') as f:
        try:
            return yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"cannot parse {path}: {exc}") from None


class ConfigManager:
    """Class for managing molsolvent run files."""

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        """
        Initialize the configuration manager.

        Args:
            config_file: Path to the run file (optional)
        """
        self.config: Dict[str, Any] = {}
        self.base_dir: Optional[Path] = None
        if config_file is not None:
            self.load_config(config_file)

    def load_config(self, config_file: Union[str, Path]) -> None:
        """
        Load a run file.

        Args:
            config_file: Path to the run file
        """
        config_path = Path(config_file)
        logger.info(f"Loading configuration from {config_path}")
        self.config = _read_yaml(config_path) or {}
        self.base_dir = config_path.resolve().parent
        self._validate_config()

    def _validate_config(self) -> None:
        """Validate the loaded configuration."""
        if not isinstance(self.config, dict):
            raise ConfigurationError("the run file must be a mapping with a 'steps' key")
        if 'steps' not in self.config:
            raise ConfigurationError("Missing required configuration key: steps")

        if not isinstance(self.config.get('defaults') or {}, dict):
            raise ConfigurationError("defaults must map calculation types to parameters")

        steps = self.config['steps']
        if not isinstance(steps, list):
            raise ConfigurationError("steps must be a list of steps")
        for i, step in enumerate(steps):
            if not isinstance(step, list):
                raise ConfigurationError(f"step {i} must be a list of calculations")
            for j, entry in enumerate(step):
                where = f"step {i}, calculation {j}"
                if not isinstance(entry, dict) or 'type' not in entry:
                    raise ConfigurationError(f"{where}: missing required setting: type")
                if ('file' in entry) == ('params' in entry):
                    raise ConfigurationError(f"{where}: exactly one of 'file' or 'params' is required")
                if 'params' in entry and not isinstance(entry['params'], dict):
                    raise ConfigurationError(f"{where}: params must be a mapping")

    def _resolve(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        if self.base_dir is None or path.is_absolute():
            return path
        return self.base_dir / path

    def _load_entry(self, entry: Dict[str, Any]) -> StepEntry:
        typ = str(entry['type'])
        source = None
        if 'file' in entry:
            source = self._resolve(entry['file'])
            params = _read_yaml(source) or {}
            if not isinstance(params, dict):
                raise ConfigurationError(f"{source}: parameters must be a mapping")
            section = params.get(typ)
            if isinstance(section, dict):
                params = section
        else:
            params = entry['params']

        defaults = self.config.get('defaults') or {}
        params = update_dict_recursively(copy.deepcopy(defaults.get(typ) or {}), dict(params))
        for key in PATH_KEYS:
            if params.get(key) is not None:
                params[key] = str(self._resolve(params[key]))
        return StepEntry(type=typ, params=params, source=source)

    def get_steps(self) -> List[List[StepEntry]]:
        """
        Get the steps of the run with their parameters loaded.

        Returns:
            One list of entries per step, in run order
        """
        return [[self._load_entry(entry) for entry in step] for step in self.config.get('steps', [])]

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any], base_dir: Optional[Union[str, Path]] = None) -> 'ConfigManager':
        """
        Create a ConfigManager instance from a dictionary.

        Args:
            config_dict: Dictionary of configuration settings
            base_dir: Directory relative paths are resolved against

        Returns:
            ConfigManager instance
        """
        instance = cls()
        instance.config = config_dict
        instance.base_dir = Path(base_dir) if base_dir is not None else None
        instance._validate_config()
        return instance
