from cartonizer_core.footprint import (
    footprint_fits,
    preferred_stances,
    stance_orientation,
    unique_stances,
    usable_footprint,
    usable_height,
)
from cartonizer_core.models import Box, Dims, Sku


def test_usable_footprint_subtracts_margins_and_padding():
    box = Box(1, 300, 220, 200)
    assert usable_footprint(box, 5, 10, 4) == (286, 196)
    assert usable_height(box, 20) == 180


def test_usable_footprint_never_negative():
    box = Box(1, 10, 10, 10)
    assert usable_footprint(box, 20, 20, 0) == (0.0, 0.0)
    assert usable_height(box, 50) == 0.0


def test_square_base_skips_quarter_turn():
    fits = footprint_fits(Sku(Dims(50, 50, 30)), Box(1, 300, 220, 200))
    assert [fit.rotation for fit in fits] == [0]
    assert (fits[0].count_x, fits[0].count_y) == (6, 4)


def test_rotations_include_gap():
    sku = Sku(Dims(40, 60, 10), gap_xy=10)
    fits = footprint_fits(sku, Box(1, 300, 200, 100))
    counts = {fit.rotation: (fit.count_x, fit.count_y) for fit in fits}
    assert counts[0] == (6, 2)
    assert counts[90] == (4, 4)


def test_oversized_sku_counts_zero():
    fits = footprint_fits(Sku(Dims(400, 400, 10)), Box(1, 300, 220, 200))
    assert all(fit.count == 0 for fit in fits)


def test_unique_stances_drop_duplicate_shapes():
    assert unique_stances(Sku(Dims(10, 10, 10))) == ["h"]
    assert unique_stances(Sku(Dims(10, 20, 30))) == ["h", "d", "w"]


def test_preferred_stances_stand_longest_side_up():
    sku = Sku(Dims(100, 50, 20), prefer_vertical=True)
    assert preferred_stances(sku) == ["w"]
    assert stance_orientation(sku, "w") == (50, 20, 100)


def test_keep_upright_disables_standing():
    sku = Sku(Dims(100, 50, 20), prefer_vertical=True, keep_upright=True)
    assert preferred_stances(sku) == []
    assert preferred_stances(Sku(Dims(100, 50, 20))) == []


def test_keep_upright_still_turns_in_plane():
    sku = Sku(Dims(40, 60, 10), gap_xy=10, keep_upright=True)
    fits = footprint_fits(sku, Box(1, 300, 200, 100))
    assert [fit.rotation for fit in fits] == [0, 90]
    assert all(fit.orientation[2] == 10 for fit in fits)
    assert max(fits, key=lambda fit: fit.count).rotation == 90
