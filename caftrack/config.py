#!/usr/bin/env python3
# CUI // SP-CTI
"""CAFTRACK configuration.

Loads settings from args/caftrack_config.yaml with environment variable
overrides. Missing file falls back to built-in defaults; a file that is
present but unparseable is a ConfigurationError.
"""

import copy
import logging
import os
from pathlib import Path
from typing import Optional

import yaml

from caftrack.resilience.correlation import CorrelationLogFilter
from caftrack.resilience.errors import ConfigurationError

# Base directory: project root (2 levels up from this file)
BASE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_CONFIG_PATH = BASE_DIR / "args" / "caftrack_config.yaml"

LOG_FORMAT = "%(asctime)s [%(correlation_id)s] %(name)s %(levelname)s: %(message)s"

DEFAULTS = {
    "catalog": {
        "path": "context/compliance/ncsc_caf_framework.json",
    },
    "compliance": {
        "default_profile": "Baseline",
        "bands": {"green": 80, "amber": 60},
    },
    "risk": {
        "categories": ["Human", "Financial", "Reputational", "Delivery", "Compliance"],
    },
    "logging": {"level": "INFO"},
    "dashboard": {"host": "127.0.0.1", "port": 8470, "debug": False},
}


def _merge(base: dict, override: dict) -> dict:
    """Recursively merge override into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[Path] = None) -> dict:
    """Load CAFTRACK configuration.

    Resolution order: explicit path, CAFTRACK_CONFIG, args/caftrack_config.yaml.
    Environment overrides CAFTRACK_LOG_LEVEL and CAFTRACK_DEFAULT_PROFILE are
    applied last.
    """
    path = Path(config_path or os.environ.get("CAFTRACK_CONFIG") or DEFAULT_CONFIG_PATH)
    data = {}
    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config root in {path} must be a mapping")

    config = _merge(DEFAULTS, data)

    if os.environ.get("CAFTRACK_LOG_LEVEL"):
        config["logging"]["level"] = os.environ["CAFTRACK_LOG_LEVEL"]
    if os.environ.get("CAFTRACK_DEFAULT_PROFILE"):
        config["compliance"]["default_profile"] = os.environ["CAFTRACK_DEFAULT_PROFILE"]

    bands = config["compliance"]["bands"]
    try:
        green, amber = float(bands["green"]), float(bands["amber"])
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(
            f"compliance.bands must define numeric green and amber: {e}",
            config_key="compliance.bands",
        ) from e
    if not 0 <= amber <= green <= 100:
        raise ConfigurationError(
            "compliance.bands requires 0 <= amber <= green <= 100",
            config_key="compliance.bands",
        )
    return config


def resolve_catalog_path(config: dict) -> Path:
    """Catalog path from config, relative paths anchored at the project root."""
    path = Path(config["catalog"]["path"])
    return path if path.is_absolute() else BASE_DIR / path


def configure_logging(config: dict) -> None:
    """Apply the configured log level for CLI and server entry points.

    Every root handler gets a CorrelationLogFilter so LOG_FORMAT can carry
    the request or CLI run correlation id.
    """
    level_name = str(config.get("logging", {}).get("level", "INFO")).upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        raise ConfigurationError(
            f"Unknown log level '{level_name}'", config_key="logging.level"
        )
    logging.basicConfig(level=level, format=LOG_FORMAT)
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, CorrelationLogFilter) for f in handler.filters):
            handler.addFilter(CorrelationLogFilter())
