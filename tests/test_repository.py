import pytest

from boxcalc_app.data import boxes_repo, settings_repo, sku_overrides_repo
from boxcalc_app.data.cache import clear_box_cache, clear_settings_cache
from boxcalc_app.data.repository import DEFAULT_GENERAL_SETTINGS, load_boxes
from cartonizer_core.models import Box


@pytest.fixture
def data_files(tmp_path, monkeypatch):
    paths = {
        "boxes": tmp_path / "boxes.xml",
        "settings": tmp_path / "settings.yaml",
        "overrides": tmp_path / "sku_overrides.yaml",
    }
    monkeypatch.setattr(boxes_repo, "boxes_xml_path", lambda: str(paths["boxes"]))
    monkeypatch.setattr(settings_repo, "settings_yaml_path", lambda: str(paths["settings"]))
    monkeypatch.setattr(
        sku_overrides_repo, "sku_overrides_yaml_path", lambda: str(paths["overrides"])
    )
    clear_box_cache()
    clear_settings_cache()
    yield paths
    clear_box_cache()
    clear_settings_cache()


def test_packaged_catalog_loads():
    clear_box_cache()
    boxes = load_boxes()
    assert boxes
    assert all(isinstance(box, Box) for box in boxes)


def test_load_boxes_from_xml(data_files):
    data_files["boxes"].write_text(
        '<boxes><box id="3" w="300" d="220" h="200" max_weight="12.5" weight="0.4" />'
        '<box id="4" w="100" d="100" h="90" /></boxes>',
        encoding="utf-8",
    )
    boxes = boxes_repo.load_boxes()
    assert boxes == (
        Box(3, 300, 220, 200, max_weight_kg=12.5, box_weight_kg=0.4),
        Box(4, 100, 100, 90),
    )


def test_missing_boxes_file(data_files):
    with pytest.raises(FileNotFoundError):
        boxes_repo.load_boxes()


def test_invalid_box_data(data_files):
    data_files["boxes"].write_text('<boxes><box id="x" w="1" d="1" h="1" /></boxes>', encoding="utf-8")
    with pytest.raises(ValueError):
        boxes_repo.load_boxes()


def test_malformed_xml(data_files):
    data_files["boxes"].write_text("<boxes><box", encoding="utf-8")
    with pytest.raises(ValueError):
        boxes_repo.load_boxes()


def test_save_boxes_clears_cache(data_files):
    boxes_repo.save_boxes([{"id": 1, "w": 10, "d": 20, "h": 30, "max_weight": "", "weight": 0.1}])
    assert boxes_repo.load_boxes() == (Box(1, 10, 20, 30, box_weight_kg=0.1),)
    boxes_repo.save_boxes([{"id": 2, "w": 40, "d": 50, "h": 60}])
    assert [box.id for box in boxes_repo.load_boxes()] == [2]
    assert boxes_repo.load_boxes_list()[0]["w"] == "40"


def test_general_settings_merge_defaults(data_files):
    data_files["settings"].write_text("defaultGapXY: 2\nunknownKey: 5\n", encoding="utf-8")
    settings = settings_repo.load_general_settings()
    assert settings["defaultGapXY"] == 2.0
    assert "unknownKey" not in settings
    assert settings["packagingMaterialWeightMultiplier"] == 0.01


def test_general_settings_missing_or_broken(data_files):
    assert settings_repo.load_general_settings() == DEFAULT_GENERAL_SETTINGS
    clear_settings_cache()
    data_files["settings"].write_text("defaultGapXY: [unclosed\n", encoding="utf-8")
    assert settings_repo.load_general_settings() == DEFAULT_GENERAL_SETTINGS


def test_save_general_settings(data_files):
    settings = dict(DEFAULT_GENERAL_SETTINGS, defaultTopMargin=7)
    settings_repo.save_general_settings(settings)
    assert settings_repo.load_general_settings()["defaultTopMargin"] == 7.0


def test_sku_overrides(data_files):
    data_files["overrides"].write_text(
        "S1:\n  sideMargin: 4\n  keepUpright: true\nS2: not-a-mapping\n", encoding="utf-8"
    )
    overrides = sku_overrides_repo.load_sku_overrides()
    assert overrides == {"S1": {"sideMargin": 4, "keepUpright": True}}
    sku_overrides_repo.save_sku_overrides({"S3": {"gapXY": 1}})
    assert sku_overrides_repo.load_sku_overrides() == {"S3": {"gapXY": 1}}
