"""
Diagnostics Configuration
=========================

Runner settings, optionally loaded from a YAML file.

Example file:
    diagnostics:
      max_workers: 5
      timeout_seconds: 5.0

The ``diagnostics:`` section may be omitted and the keys placed at the top level.
"""

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Union

import yaml

from diagnostics.core.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 5
DEFAULT_TIMEOUT_SECONDS = 5.0


@dataclass(frozen=True)
class DiagnosticsConfig:
    """
    Settings for diagnostic execution.

    Attributes:
        max_workers: Number of diagnostics that may execute concurrently
        timeout_seconds: Deadline applied to each diagnostic, measured from its start
    """
    max_workers: int = DEFAULT_MAX_WORKERS
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    def __post_init__(self):
        if isinstance(self.max_workers, bool) or not isinstance(self.max_workers, int):
            raise ConfigError(f"max_workers must be an integer, got {self.max_workers!r}")
        if self.max_workers < 1:
            raise ConfigError(f"max_workers must be at least 1, got {self.max_workers}")
        if isinstance(self.timeout_seconds, bool) or not isinstance(self.timeout_seconds, (int, float)):
            raise ConfigError(f"timeout_seconds must be a number, got {self.timeout_seconds!r}")
        if self.timeout_seconds <= 0:
            raise ConfigError(f"timeout_seconds must be positive, got {self.timeout_seconds}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DiagnosticsConfig":
        """
        Build a config from a mapping, rejecting unknown keys.

        Raises:
            ConfigError: On unknown keys or invalid values
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(str(key) for key in set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown diagnostics config keys: {', '.join(unknown)}")
        return cls(**dict(data))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'max_workers': self.max_workers,
            'timeout_seconds': self.timeout_seconds,
        }


def load_config(path: Union[str, Path]) -> DiagnosticsConfig:
    """
    Load diagnostics settings from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        DiagnosticsConfig with defaults for any missing key

    Raises:
        FileNotFoundError: If the file does not exist
        ConfigError: If the file content is not a valid diagnostics config
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Diagnostics config not found: {path}")

    with open(path, 'r') as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Diagnostics config must be a mapping, got {type(data).__name__}")

    section = data.get('diagnostics', data)
    if section is None:
        section = {}
    if not isinstance(section, dict):
        raise ConfigError("'diagnostics' section must be a mapping")

    config = DiagnosticsConfig.from_dict(section)
    logger.info(f"Loaded diagnostics config from {path}: {config.to_dict()}")
    return config
