"""
Configuration loader for YAML files.

Handles loading and validation of the tool configuration, falling back to
the built-in defaults for anything the file leaves out.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError

from ..errors import ConfigError
from .defaults import get_default_gdm_config_paths, get_default_theme_locations
from .models import ToolConfig


class ConfigLoader:
    """
    Loads and validates configuration from a YAML file.

    Without a path the defaults are used unchanged.
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """
        Initialize the config loader.

        Args:
            config_path: Path to a YAML config file
        """
        self.config_path = Path(config_path) if config_path else None
        self._config: Optional[ToolConfig] = None

    def load(self) -> ToolConfig:
        """Load, merge with defaults and validate."""
        data: Dict[str, Any] = {}

        if self.config_path is not None:
            if not self.config_path.is_file():
                raise ConfigError(f"Configuration file does not exist: {self.config_path}")
            data = self._read_yaml(self.config_path)

        self._config = self.from_dict(data)
        return self._config

    @property
    def config(self) -> Optional[ToolConfig]:
        """Get loaded configuration."""
        return self._config

    def _read_yaml(self, file_path: Path) -> Dict[str, Any]:
        """Read and parse a YAML file."""
        try:
            with open(file_path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {file_path}: {e}")
        except IOError as e:
            raise ConfigError(f"Cannot read {file_path}: {e}")

        if not isinstance(data, dict):
            raise ConfigError(f"Top level of {file_path} must be a mapping")
        return data

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> ToolConfig:
        """Build a ToolConfig from a (possibly partial) dictionary."""
        merged = dict(data)
        merged.setdefault("gdm_config_paths", get_default_gdm_config_paths())
        merged.setdefault("theme_locations", get_default_theme_locations())
        try:
            return ToolConfig(**merged)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}")

    @staticmethod
    def save(config: ToolConfig, output_path: Union[str, Path]) -> Path:
        """Write a configuration to YAML."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            yaml.dump(
                config.model_dump(mode="json"),
                f,
                default_flow_style=False,
                sort_keys=False,
            )
        return output_path
