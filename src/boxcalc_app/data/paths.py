import os

DATA_DIR = os.path.join(os.path.dirname(__file__))


def data_dir() -> str:
    return DATA_DIR


def boxes_xml_path() -> str:
    return os.path.join(DATA_DIR, "boxes.xml")


def settings_yaml_path() -> str:
    return os.path.join(DATA_DIR, "settings.yaml")


def sku_overrides_yaml_path() -> str:
    return os.path.join(DATA_DIR, "sku_overrides.yaml")
