"""YAML configuration loading.

Uses ``yaml.safe_load`` so configuration files can only produce plain data
(strings, numbers, lists, mappings). The result is always handed to a
Pydantic model for schema validation, e.g.
[PoolConfig][bitback.core.pool.PoolConfig] or
[ApiConfig][bitback.services.api.configs.ApiConfig].
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigurationError


def load_yaml(config_path: str) -> dict[str, Any]:
    """Load and parse a YAML configuration file.

    Args:
        config_path: Path to the YAML file (absolute or relative).

    Returns:
        The parsed top-level mapping, or an empty dict for an empty file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigurationError: If the YAML is malformed or its top level is
            not a mapping.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with path.open(encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Top level of {config_path} must be a mapping, got {type(data).__name__}"
        )
    return data
