from .boxes_repo import load_boxes, load_boxes_list, save_boxes
from .cache import clear_box_cache, clear_settings_cache
from .paths import boxes_xml_path, data_dir, settings_yaml_path, sku_overrides_yaml_path
from .settings_repo import DEFAULT_GENERAL_SETTINGS, load_general_settings, save_general_settings
from .sku_overrides_repo import load_sku_overrides, save_sku_overrides

__all__ = [
    "DEFAULT_GENERAL_SETTINGS",
    "boxes_xml_path",
    "clear_box_cache",
    "clear_settings_cache",
    "data_dir",
    "load_boxes",
    "load_boxes_list",
    "load_general_settings",
    "load_sku_overrides",
    "save_boxes",
    "save_general_settings",
    "save_sku_overrides",
    "settings_yaml_path",
    "sku_overrides_yaml_path",
]
