import pytest

from cartonizer_core.units import (
    EPSILON,
    compare_floats,
    floor_count,
    format_void_ratio,
    parse_float,
)


def test_parse_float_accepts_comma():
    assert parse_float("12,5") == 12.5


def test_parse_float_rejects_empty():
    with pytest.raises(ValueError):
        parse_float("   ")


def test_floor_count_tolerates_float_noise():
    assert floor_count(300, 50) == 6
    assert floor_count(0.3, 0.1) == 3


def test_floor_count_non_positive_inputs():
    assert floor_count(100, 0) == 0
    assert floor_count(0, 10) == 0
    assert floor_count(-5, 10) == 0


def test_compare_floats_uses_epsilon():
    assert compare_floats(1.0, 1.0 + EPSILON / 2) == 0
    assert compare_floats(1.0, 1.1) == -1
    assert compare_floats(2.0, 1.0) == 1


def test_format_void_ratio():
    assert format_void_ratio(0.18181818) == "18.2%"
