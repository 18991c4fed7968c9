"""
Configuration loader for servicemock.

Handles loading configuration from YAML files and environment variables.
"""

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import DEFAULT_MARKER_ATTRIBUTE, ServiceMockConfig

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SERVICEMOCK_CONFIG"
DEFAULT_CONFIG_FILE = "servicemock.yaml"


class ConfigurationError(Exception):
    """Raised when configuration is invalid."""

    pass


def load_config_from_yaml(config_path: Path) -> ServiceMockConfig:
    """Load configuration from a YAML file."""
    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}")

    if raw_config is None:
        raise ConfigurationError("Configuration file is empty")

    if not isinstance(raw_config, dict):
        raise ConfigurationError("Configuration file must contain a mapping at the top level")

    try:
        config = ServiceMockConfig(**raw_config)
    except ValidationError as e:
        raise ConfigurationError(f"Configuration validation failed:\n{e}")

    # Additional validation
    if not config.injection.marker_attribute.isidentifier():
        raise ConfigurationError(
            f"Invalid injection marker attribute '{config.injection.marker_attribute}'"
        )

    logger.info(f"Loaded configuration from {config_path}")
    return config


def load_config(config_path: Path | None = None) -> ServiceMockConfig:
    """
    Load configuration from the first source available.

    Order: explicit path, SERVICEMOCK_CONFIG, ./servicemock.yaml, defaults.
    """
    if config_path is not None:
        return load_config_from_yaml(config_path)

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return load_config_from_yaml(Path(env_path))

    local = Path(DEFAULT_CONFIG_FILE)
    if local.exists():
        return load_config_from_yaml(local)

    return ServiceMockConfig()


def generate_default_config(output_path: Path) -> None:
    """Generate a default configuration file."""
    default_config = {
        "mocks": {
            "autospec": True,
            "spec_set": False,
        },
        "injection": {
            "enabled": True,
            "marker_attribute": DEFAULT_MARKER_ATTRIBUTE,
        },
        "events": {
            "enabled": True,
        },
        "builtin_types": [],
    }

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        yaml.dump(default_config, f, default_flow_style=False, sort_keys=False)
