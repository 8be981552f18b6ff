from cartonizer_core.stacking import (
    compute_num_layers,
    layers_by_height,
    layers_by_weight,
    payload_kg,
)


def test_layers_by_height():
    assert layers_by_height(200, 30, 0) == 6
    assert layers_by_height(200, 30, 5) == 5
    assert layers_by_height(20, 30, 0) == 0


def test_max_stack_layers_caps_height_bound():
    assert compute_num_layers(200, 30, 0, 24, max_stack_layers=2) == 2


def test_weight_caps_layers():
    assert payload_kg(10, 1) == 9
    assert payload_kg(None, 1) is None
    assert layers_by_weight(10, 1, 0.1, 24) == 3
    assert compute_num_layers(
        200, 30, 0, 24, max_weight_kg=10, box_weight_kg=1, unit_weight_kg=0.1
    ) == 3


def test_weight_without_unit_weight_is_ignored():
    assert layers_by_weight(10, 1, None, 24) is None
    assert compute_num_layers(200, 30, 0, 24, max_weight_kg=10) == 6


def test_box_heavier_than_limit_gives_no_layers():
    assert compute_num_layers(
        200, 30, 0, 24, max_weight_kg=1, box_weight_kg=2, unit_weight_kg=0.1
    ) == 0
