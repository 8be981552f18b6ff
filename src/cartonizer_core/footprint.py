from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from .models import Box, Orientation, Sku
from .units import floor_count, is_close

# Which SKU axis points up, in the order stances are tried.
STANCES = ("h", "d", "w")


@dataclass(frozen=True)
class FootprintFit:
    count_x: int
    count_y: int
    footprint_used: float
    rotation: int
    orientation: Orientation

    @property
    def count(self) -> int:
        return self.count_x * self.count_y


def usable_footprint(
    box: Box, side_margin: float, front_margin: float, box_padding: float
) -> Tuple[float, float]:
    usable_w = box.W - 2 * side_margin - box_padding
    usable_d = box.D - 2 * front_margin - box_padding
    return max(usable_w, 0.0), max(usable_d, 0.0)


def usable_height(box: Box, top_margin: float) -> float:
    return max(box.H - top_margin, 0.0)


def sku_footprint(sku: Sku, box: Box, box_padding: float) -> Tuple[float, float]:
    return usable_footprint(box, sku.side_margin, sku.front_margin, box_padding)


def stance_orientation(sku: Sku, stance: str) -> Orientation:
    w, d, h = sku.dims.as_tuple()
    if stance == "h":
        return (w, d, h)
    if stance == "d":
        return (w, h, d)
    if stance == "w":
        return (d, h, w)
    raise ValueError(f"unknown stance: {stance}")


def unique_stances(sku: Sku) -> List[str]:
    """All stances, duplicates by shape removed."""
    stances: List[str] = []
    seen: List[Tuple[float, float, float]] = []
    for stance in STANCES:
        a, b, c = stance_orientation(sku, stance)
        shape = (min(a, b), max(a, b), c)
        if any(all(is_close(x, y) for x, y in zip(shape, other)) for other in seen):
            continue
        seen.append(shape)
        stances.append(stance)
    return stances


def is_standing(sku: Sku, stance: str) -> bool:
    """True when the vertical axis is the SKU's longest side."""
    _, _, c = stance_orientation(sku, stance)
    return is_close(c, max(sku.dims.as_tuple()))


def preferred_stances(sku: Sku) -> List[str]:
    """Standing stances tried ahead of the natural one.

    Only SKUs that prefer vertical packing and may be tipped over get any.
    """
    if sku.keep_upright or not sku.prefer_vertical:
        return []
    return [stance for stance in unique_stances(sku) if is_standing(sku, stance)]


def grid_fit(
    usable_w: float, usable_d: float, a: float, b: float, gap_xy: float
) -> Tuple[int, int]:
    if a <= 0 or b <= 0:
        return 0, 0
    return floor_count(usable_w, a + gap_xy), floor_count(usable_d, b + gap_xy)


def rotation_fits(
    base: Orientation, usable_w: float, usable_d: float, gap_xy: float
) -> List[FootprintFit]:
    """Grid fits for the 0 and 90 degree in-plane rotations of ``base``."""
    a, b, c = base
    fits: List[FootprintFit] = []
    # keep_upright only pins the vertical axis; quarter turns stay allowed.
    for rotation, (ax, by) in ((0, (a, b)), (90, (b, a))):
        if rotation == 90 and is_close(a, b):
            continue
        count_x, count_y = grid_fit(usable_w, usable_d, ax, by, gap_xy)
        used = count_x * (ax + gap_xy) * count_y * (by + gap_xy)
        fits.append(FootprintFit(count_x, count_y, used, rotation, (ax, by, c)))
    return fits


def footprint_fits(
    sku: Sku, box: Box, box_padding: float = 0.0, stance: str = "h"
) -> List[FootprintFit]:
    usable_w, usable_d = sku_footprint(sku, box, box_padding)
    return rotation_fits(stance_orientation(sku, stance), usable_w, usable_d, sku.gap_xy)
