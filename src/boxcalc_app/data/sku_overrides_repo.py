from functools import lru_cache
from typing import Dict

import yaml

from .paths import sku_overrides_yaml_path
from .settings_repo import read_yaml_mapping


@lru_cache(maxsize=None)
def load_sku_overrides() -> Dict[str, dict]:
    """Per-SKU packing overrides keyed by SKU id."""
    data = read_yaml_mapping(sku_overrides_yaml_path())
    return {
        str(sku_id): dict(values)
        for sku_id, values in data.items()
        if isinstance(values, dict)
    }


def save_sku_overrides(overrides: Dict[str, dict]) -> None:
    with open(sku_overrides_yaml_path(), "w", encoding="utf-8") as f:
        yaml.safe_dump({str(k): dict(v) for k, v in overrides.items()}, f, sort_keys=True)
    load_sku_overrides.cache_clear()
