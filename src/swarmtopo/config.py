"""
swarmtopo Configuration
=======================

YAML-based configuration with sensible defaults.
Loads from swarmtopo_config.yaml if present, otherwise uses built-in defaults.

Example swarmtopo_config.yaml:

    topologies:
      max_lanes: 8        # concurrent tasks in circular
      batch_size: 4       # concurrent leaves/receivers in star and broadcast
      steal_fraction: 0.1 # share of the mesh queue taken per steal
    logging:
      level: debug
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from swarmtopo.errors import InvalidArgument

logger = logging.getLogger("swarmtopo.config")

_DEFAULTS = {
    "topologies": {
        "max_lanes": 4,
        "batch_size": 4,
        "steal_fraction": 0.1,
    },
    "logging": {
        "level": "info",
    },
}


def load_config(path: str | Path = "swarmtopo_config.yaml") -> dict:
    """Load configuration from YAML file, merging with defaults.

    Args:
        path: Path to YAML config file. If relative, resolved from CWD.

    Returns:
        Merged config dict with all sections populated and the
        ``topologies`` values checked and coerced.

    Raises:
        InvalidArgument: If the file is not a mapping, a known section is
            not a mapping, or a topology setting is out of range.
    """
    config = {section: dict(values) for section, values in _DEFAULTS.items()}
    config_path = Path(path)
    if not config_path.exists():
        logger.debug(f"No config at {config_path}, using defaults")
        return config

    with open(config_path, encoding="utf-8") as f:
        overrides = yaml.safe_load(f) or {}
    if not isinstance(overrides, dict):
        raise InvalidArgument(f"{config_path} must contain a mapping at top level")

    for section, values in overrides.items():
        if section not in _DEFAULTS:
            config[section] = values
        elif isinstance(values, dict):
            config[section].update(values)
        else:
            raise InvalidArgument(f"Config section '{section}' must be a mapping")

    config["topologies"] = topology_settings(config)
    logger.info(f"Loaded config from {config_path}")
    return config


def topology_settings(config: dict) -> dict:
    """Return ``max_lanes``/``batch_size``/``steal_fraction`` validated.

    Missing keys fall back to the defaults.
    """
    settings = {**_DEFAULTS["topologies"], **config.get("topologies", {})}
    max_lanes = int(settings["max_lanes"])
    batch_size = int(settings["batch_size"])
    steal_fraction = float(settings["steal_fraction"])
    if max_lanes < 1:
        raise InvalidArgument(f"topologies.max_lanes must be at least 1, got {max_lanes}")
    if batch_size < 1:
        raise InvalidArgument(f"topologies.batch_size must be at least 1, got {batch_size}")
    if not 0.0 < steal_fraction <= 1.0:
        raise InvalidArgument(
            f"topologies.steal_fraction must be in (0, 1], got {steal_fraction}"
        )
    return {
        "max_lanes": max_lanes,
        "batch_size": batch_size,
        "steal_fraction": steal_fraction,
    }


def log_level(config: dict) -> int:
    """Translate the ``logging.level`` setting into a logging constant."""
    name = str(config.get("logging", {}).get("level", "info")).upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise InvalidArgument(f"Unknown logging level: {name}")
    return level
