import logging
import threading

import pytest

from cartonizer_core import (
    Box,
    CalculationTrace,
    Dims,
    Sku,
    choose_boxes_for_quantity,
    clear_calculation_logs,
    enable_calculation_logging,
    get_calculation_logs,
    search_orientation_variants,
)

BOX = Box(1, 300, 220, 200)
SKU = Sku(Dims(50, 50, 30))


@pytest.fixture
def default_trace():
    clear_calculation_logs()
    yield
    enable_calculation_logging(False)
    clear_calculation_logs()


def test_default_trace_disabled(default_trace):
    choose_boxes_for_quantity([BOX], SKU, 10)
    assert get_calculation_logs() == []


def test_default_trace_collects_lines(default_trace):
    enable_calculation_logging(True)
    choose_boxes_for_quantity([BOX], SKU, 1000)
    logs = get_calculation_logs()
    assert any("capacity=144" in line for line in logs)
    assert any("partial shipment" in line for line in logs)
    clear_calculation_logs()
    assert get_calculation_logs() == []


def test_default_trace_is_per_thread(default_trace):
    enable_calculation_logging(True)
    seen = {}

    def worker():
        choose_boxes_for_quantity([BOX], SKU, 10)
        seen["logs"] = get_calculation_logs()

    thread = threading.Thread(target=worker)
    thread.start()
    thread.join()
    assert seen["logs"] == []
    assert get_calculation_logs() == []


def test_explicit_trace_does_not_touch_default(default_trace):
    trace = CalculationTrace(enabled=True)
    choose_boxes_for_quantity([BOX], SKU, 10, trace=trace)
    assert trace.lines
    assert get_calculation_logs() == []
    lines = trace.drain()
    assert lines and trace.lines == []


def test_tracing_does_not_change_results(default_trace):
    skus = [SKU, Sku(Dims(80, 60, 40))]
    plain = search_orientation_variants([BOX], skus, [100, 20])
    traced = search_orientation_variants(
        [BOX], skus, [100, 20], trace=CalculationTrace(enabled=True)
    )
    assert plain.best == traced.best
    assert plain.single_box == traced.single_box


def test_trace_lines_are_logged(caplog):
    trace = CalculationTrace(enabled=True)
    with caplog.at_level(logging.DEBUG, logger="cartonizer_core.trace"):
        trace.append("box %s: capacity=%d", 7, 12)
    assert trace.lines == ["box 7: capacity=12"]
    assert "box 7: capacity=12" in caplog.text
