import pytest

from boxcalc_app.core.entries import (
    build_sku,
    create_entry,
    parse_entries,
    resolve_boolean,
    resolve_optional_setting,
    resolve_setting,
    to_finite_number,
)
from cartonizer_core.models import Dims


@pytest.mark.parametrize(
    "value, expected",
    [(5, 5.0), ("12,5", 12.5), (" 3 ", 3.0), ("", None), ("abc", None), (True, None),
     (float("inf"), None), ("nan", None), (None, None), ([1], None)],
)
def test_to_finite_number(value, expected):
    assert to_finite_number(value) == expected


def test_resolve_setting_order():
    assert resolve_setting(2, 3, 4, 0) == 2
    assert resolve_setting(None, "3", 4, 0) == 3
    assert resolve_setting("", None, 4, 0) == 4
    assert resolve_setting(None, None, None, 7) == 7
    assert resolve_optional_setting(None, None, None) is None


def test_resolve_boolean():
    assert resolve_boolean(True) is True
    assert resolve_boolean("false", fallback=True) is False
    assert resolve_boolean("true") is True
    assert resolve_boolean("yes") is False
    assert resolve_boolean(None, fallback=True) is True


def test_create_entry_flat_record():
    entry = create_entry(
        {"w": "10", "d": 20, "h": 30, "quantity": "2.7", "skuId": "S1", "keepUpright": "true"}
    )
    assert entry.dims == Dims(10, 20, 30)
    assert entry.quantity == 2
    assert entry.sku_id == "S1"
    assert entry.keep_upright is True
    assert entry.side_margin is None


def test_create_entry_nested_dims_and_clamps():
    entry = create_entry(
        {"dims": {"w": 1, "d": 2, "h": 3}, "quantity": 0, "maxStackLayers": 0, "skuId": ""}
    )
    assert entry.quantity == 1
    assert entry.max_stack_layers is None
    assert entry.sku_id is None
    assert create_entry({"dims": {"w": 1, "d": 2, "h": 3}, "quantity": 1, "maxStackLayers": 2.9}).max_stack_layers == 2


def test_create_entry_rejects_missing_values():
    assert create_entry({"w": 1, "d": 2, "quantity": 1}) is None
    assert create_entry({"w": 1, "d": 2, "h": 3}) is None


def test_parse_entries():
    raw = '[{"w": 1, "d": 2, "h": 3, "quantity": 4}, {"w": "x"}, 5, {"w": 2, "d": 2, "h": 2, "quantity": 1}]'
    entries = parse_entries(raw)
    assert [entry.quantity for entry in entries] == [4, 1]
    assert parse_entries("not json") == []
    assert parse_entries('{"w": 1}') == []


def test_build_sku_resolution():
    entry = create_entry({"w": 10, "d": 20, "h": 30, "quantity": 1, "skuId": "S1", "gapXY": 1})
    override = {"gapXY": 5, "gapZ": "2", "sideMargin": 3, "maxStackLayers": 4}
    settings = {"defaultGapZ": 9, "defaultFrontMargin": 6, "defaultMaxStackLayers": 8}
    sku = build_sku(entry, override, settings)
    assert sku.gap_xy == 1
    assert sku.gap_z == 2
    assert sku.side_margin == 3
    assert sku.front_margin == 6
    assert sku.top_margin == 0
    assert sku.max_stack_layers == 4
    assert sku.sku_id == "S1"


def test_build_sku_without_override():
    entry = create_entry({"w": 10, "d": 20, "h": 30, "quantity": 1})
    sku = build_sku(entry, None, {"defaultMaxStackLayers": None})
    assert sku.max_stack_layers is None
    assert sku.side_margin == 0
