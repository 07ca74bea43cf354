"""Configuration loader for YAML files."""

import yaml
from pathlib import Path

from pydantic import ValidationError

from ..errors import ConfigurationError
from .config_schema import AppConfig


class ConfigLoader:
    """Load and validate configuration from YAML files."""

    @staticmethod
    def load_config(path: str = "config.yaml") -> AppConfig:
        """
        Load configuration from YAML file.

        Args:
            path: Path to configuration file

        Returns:
            Validated AppConfig instance

        Raises:
            ConfigurationError: If the file is missing, empty or invalid
        """
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {path}")

        with open(config_path, "r", encoding="utf-8") as f:
            try:
                config_dict = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Configuration file is not valid YAML: {e}") from e

        if not config_dict:
            raise ConfigurationError("Configuration file is empty")

        return ConfigLoader.build_config(config_dict)

    @staticmethod
    def build_config(config: dict) -> AppConfig:
        """
        Build and validate configuration from a dictionary.

        Args:
            config: Configuration dictionary

        Returns:
            Validated AppConfig instance

        Raises:
            ConfigurationError: If config is invalid
        """
        try:
            app_config = AppConfig(**config)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e
        app_config.validate()
        return app_config


def load_config(path: str = "config.yaml") -> AppConfig:
    """
    Convenience function to load configuration.

    Args:
        path: Path to configuration file

    Returns:
        Validated AppConfig instance
    """
    return ConfigLoader.load_config(path)
