"""
Configuration management module for lmp2trr.

This module provides functionality for loading, validating, and managing
conversion settings.
"""
import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ..core.converter import UNIT_SYSTEMS
from ..core.schema import POLICIES
from .helpers import update_dict_recursively

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    'verbose': False,
    'input_path': 'traj.dump',
    'output_path': 'traj.trr',
    'timestep': 0.001,      # ps per LAMMPS step
    'units': 'real',
    'column_policy': 'exact',
    'progress': False,
}


class ConfigManager:
    """Class for managing conversion settings."""

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        """
        Initialize the configuration manager with defaults.

        Args:
            config_file: Path to a YAML file overriding the defaults (optional)
        """
        self.config: Dict[str, Any] = copy.deepcopy(DEFAULT_CONFIG)
        if config_file is not None:
            self.load_config(config_file)

    def load_config(self, config_file: Union[str, Path]) -> None:
        """
        Load settings from a YAML file on top of the current ones.

        Args:
            config_file: Path to the configuration file
        """
        config_path = Path(config_file)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_file}")

        logger.info(f"Loading configuration from {config_path}")
        with open(config_path, 'r') as f:
            user_cfg = yaml.safe_load(f)
        if user_cfg is None:
            user_cfg = {}
        if not isinstance(user_cfg, dict):
            raise ValueError(f"Configuration file {config_path} must contain a mapping")
        self.update_config(user_cfg)

    def _validate_config(self) -> None:
        """Validate the current configuration."""
        unknown = set(self.config) - set(DEFAULT_CONFIG)
        if unknown:
            raise ValueError(f"Unknown configuration key(s): {sorted(unknown)}")

        try:
            timestep = float(self.config['timestep'])
        except (TypeError, ValueError):
            raise ValueError(f"timestep must be a number, got {self.config['timestep']!r}") from None
        if timestep <= 0:
            raise ValueError("timestep must be positive.")
        self.config['timestep'] = timestep

        for key in ('input_path', 'output_path'):
            if not self.config[key]:
                raise ValueError(f"Missing required setting: {key}")
        if self.config['units'] not in UNIT_SYSTEMS:
            raise ValueError(f"Unsupported units '{self.config['units']}'. Must be one of: {list(UNIT_SYSTEMS)}")
        if self.config['column_policy'] not in POLICIES:
            raise ValueError(f"Unknown column_policy '{self.config['column_policy']}'. Must be one of: {list(POLICIES)}")

    def update_config(self, updates: Dict[str, Any]) -> None:
        """
        Update configuration settings.

        Args:
            updates: Dictionary of configuration updates; None values are ignored
        """
        update_dict_recursively(self.config, {k: v for k, v in updates.items() if v is not None})
        self._validate_config()

    def save_config(self, output_file: Union[str, Path]) -> None:
        output_path = Path(output_file)
        logger.info(f"Saving configuration to {output_path}")
        with open(output_path, 'w') as f:
            yaml.dump(self.config, f, default_flow_style=False)

    def to_dict(self) -> Dict[str, Any]:
        return self.config.copy()

    def to_json(self) -> str:
        return json.dumps(self.config, indent=4)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'ConfigManager':
        instance = cls()
        instance.update_config(config_dict)
        return instance
