def clear_box_cache() -> None:
    from .boxes_repo import load_boxes

    load_boxes.cache_clear()


def clear_settings_cache() -> None:
    from .settings_repo import load_general_settings
    from .sku_overrides_repo import load_sku_overrides

    load_general_settings.cache_clear()
    load_sku_overrides.cache_clear()
