import json

import pytest

from boxcalc_app.__main__ import main
from boxcalc_app.core.calculator import calculate, single_box_result
from boxcalc_app.core.entries import create_entry
from boxcalc_app.data.settings_repo import DEFAULT_GENERAL_SETTINGS
from cartonizer_core import CalculationTrace, OrientationMode
from cartonizer_core.models import Box, Dims, Sku

BOXES = [Box(1, 300, 220, 200, box_weight_kg=0.5), Box(2, 100, 100, 90)]


def _entry(**record):
    base = {"w": 50, "d": 50, "h": 30, "quantity": 10}
    base.update(record)
    return create_entry(base)


def test_single_sku_report():
    report = calculate(
        [_entry(quantity=1000, unitWeightKg=0.01)],
        boxes=BOXES[:1],
        settings=DEFAULT_GENERAL_SETTINGS,
        overrides={},
    )
    item = report.skus[0]
    assert [s.quantity for s in item.standard.shipments] == [144] * 6 + [136]
    assert len(item.extended.shipments) == 7
    assert item.single_box.shipments == []
    assert item.single_box.leftover == 1000
    assert report.multi is None
    assert report.total_boxes == 7
    assert report.total_leftover == 0
    assert item.weights[0].product_kg == pytest.approx(1.44)
    assert item.weights[0].box_kg == pytest.approx(0.5)


def test_single_box_result_picks_smallest_holding_box():
    sku = Sku(Dims(50, 50, 30))
    result = single_box_result(BOXES, sku, 12)
    assert [(s.plan.box_id, s.quantity) for s in result.shipments] == [(2, 12)]
    result = single_box_result(BOXES, sku, 13)
    assert [(s.plan.box_id, s.quantity) for s in result.shipments] == [(1, 13)]
    assert single_box_result(BOXES, sku, 145).leftover == 145


def test_overrides_and_settings_reach_the_engine():
    settings = dict(DEFAULT_GENERAL_SETTINGS, defaultBoxPadding=20)
    report = calculate(
        [_entry(skuId="S1", quantity=20)],
        boxes=BOXES[:1],
        settings=settings,
        overrides={"S1": {"maxStackLayers": 2}},
    )
    item = report.skus[0]
    assert report.box_padding == 20
    assert item.sku.max_stack_layers == 2
    assert item.standard.shipments[0].plan.capacity == 5 * 4 * 2


def test_modes_are_applied():
    report = calculate(
        [_entry(w=100, d=50, h=20)],
        boxes=[Box(1, 200, 200, 100)],
        settings=DEFAULT_GENERAL_SETTINGS,
        overrides={},
        modes={0: "vertical"},
    )
    item = report.skus[0]
    assert item.mode is OrientationMode.VERTICAL
    assert item.standard.shipments[0].plan.orientation[2] == 100


def test_multi_entry_runs_variant_search():
    trace = CalculationTrace(enabled=True)
    report = calculate(
        [_entry(quantity=40), _entry(w=60, d=40, h=30, quantity=30)],
        boxes=BOXES,
        settings=DEFAULT_GENERAL_SETTINGS,
        overrides={},
        modes={1: OrientationMode.STACKED},
        trace=trace,
    )
    assert report.multi is not None
    assert report.multi.evaluated[:2] == ["base", "vertical-stacked-base"]
    assert report.skus[1].prefers_stacking
    assert any(line.startswith("selected variant") for line in report.logs)


def test_no_boxes_gives_empty_report():
    report = calculate([_entry()], boxes=[], settings=DEFAULT_GENERAL_SETTINGS, overrides={})
    assert report.skus == []
    assert report.total_quantity == 0


def test_cli_prints_summary(tmp_path, capsys):
    path = tmp_path / "entries.json"
    path.write_text(
        json.dumps([{"w": 50, "d": 50, "h": 30, "quantity": 10}, {"w": 60, "d": 40, "h": 30, "quantity": 5}]),
        encoding="utf-8",
    )
    assert main([str(path), "--mode", "1=flat", "--trace"]) == 0
    out = capsys.readouterr().out
    assert "Total: 15 units" in out
    assert "Combined (" in out
    assert "selected variant" in out


def test_cli_rejects_bad_mode(tmp_path):
    path = tmp_path / "entries.json"
    path.write_text("[]", encoding="utf-8")
    with pytest.raises(SystemExit):
        main([str(path), "--mode", "0=sideways"])


def test_cli_reports_unusable_input(tmp_path):
    path = tmp_path / "entries.json"
    path.write_text("not json", encoding="utf-8")
    assert main([str(path)]) == 1
    assert main([str(tmp_path / "missing.json")]) == 1
