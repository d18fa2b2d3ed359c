"""Workspace configuration loading."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from pubz.config.schema import (
    DEFAULT_REGISTRIES,
    BuildConfig,
    GitConfig,
    OrderingConfig,
    PubzConfig,
    PublishConfig,
)
from pubz.errors import ConfigurationError

CONFIG_FILENAME = "pubz.yaml"


def load_config(root: Path) -> PubzConfig:
    """Load pubz.yaml from the workspace root.

    Args:
        root: Workspace root directory.

    Returns:
        Validated configuration; defaults when the file does not exist.

    Raises:
        ConfigurationError: If the file is not valid YAML or fails validation.
    """
    path = root / CONFIG_FILENAME
    if not path.is_file():
        return PubzConfig()

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return PubzConfig()
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping")

    try:
        return PubzConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {path}:\n{e}") from e


__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_REGISTRIES",
    "BuildConfig",
    "GitConfig",
    "OrderingConfig",
    "PublishConfig",
    "PubzConfig",
    "load_config",
]
