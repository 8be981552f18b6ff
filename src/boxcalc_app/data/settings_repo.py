import logging
import os
from functools import lru_cache
from typing import Dict, Optional

import yaml

from .paths import settings_yaml_path

logger = logging.getLogger(__name__)

DEFAULT_GENERAL_SETTINGS: Dict[str, Optional[float]] = {
    "defaultSideMargin": 0.0,
    "defaultFrontMargin": 0.0,
    "defaultTopMargin": 0.0,
    "defaultGapXY": 0.0,
    "defaultGapZ": 0.0,
    "defaultMaxStackLayers": None,
    "defaultBoxPadding": 0.0,
    "packagingMaterialWeightMultiplier": 0.01,
}


def read_yaml_mapping(path: str) -> dict:
    """Mapping stored in a YAML file; empty when the file is missing or unusable."""
    if not os.path.exists(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        logger.exception("Failed to read %s", path)
        return {}
    if not isinstance(loaded, dict):
        logger.warning("Ignoring %s: expected a mapping", path)
        return {}
    return loaded


@lru_cache(maxsize=None)
def load_general_settings() -> Dict[str, Optional[float]]:
    """General defaults from settings.yaml merged over the built-in ones."""
    data = read_yaml_mapping(settings_yaml_path())
    settings = DEFAULT_GENERAL_SETTINGS.copy()
    for key in DEFAULT_GENERAL_SETTINGS:
        value = data.get(key)
        if value is None:
            continue
        try:
            settings[key] = float(value)
        except (TypeError, ValueError):
            logger.warning("Ignoring setting %s=%r", key, value)
    return settings


def save_general_settings(settings: dict) -> None:
    data = {key: settings.get(key) for key in DEFAULT_GENERAL_SETTINGS}
    with open(settings_yaml_path(), "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, sort_keys=False)
    load_general_settings.cache_clear()
