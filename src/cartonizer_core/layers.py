from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .footprint import FootprintFit, footprint_fits
from .models import (
    LAYOUT_MULTI_SKU,
    LAYOUT_UNIFORM,
    Block,
    Box,
    Layer,
    MixedBlocks,
    Orientation,
    Sku,
    UniformGrid,
)
from .units import floor_count


def best_fit(fits: Sequence[FootprintFit]) -> Optional[FootprintFit]:
    """Largest grid; the earlier (0 degree) rotation wins ties."""
    best: Optional[FootprintFit] = None
    for fit in fits:
        if best is None or fit.count > best.count:
            best = fit
    return best


def uniform_layer(fit: FootprintFit) -> Layer:
    return Layer(
        layout_type=LAYOUT_UNIFORM,
        columns=UniformGrid(fit.count_x, fit.count_y, fit.rotation, fit.orientation),
        per_layer_capacity=fit.count,
        height=fit.orientation[2],
    )


def plan_layer(
    sku: Sku, box: Box, box_padding: float = 0.0, stance: str = "h"
) -> Optional[Layer]:
    """Densest single-SKU layer for one stance, or ``None`` if nothing fits."""
    fit = best_fit(footprint_fits(sku, box, box_padding, stance))
    if fit is None or fit.count == 0:
        return None
    return uniform_layer(fit)


@dataclass(frozen=True)
class MosaicItem:
    sku_index: int
    orientation: Orientation
    gap_xy: float
    demand: int
    unit_weight_kg: Optional[float] = None


def plan_mosaic_layer(
    items: Sequence[MosaicItem],
    usable_w: float,
    usable_d: float,
    height: float,
    payload_kg: Optional[float] = None,
) -> Optional[Layer]:
    """Split one layer into column blocks, one per SKU.

    Widths are handed out in proportion to the remaining demand and then
    topped up left to right; every block spans the usable depth.
    """
    rows = {}
    pitch = {}
    need = {}
    eligible: List[MosaicItem] = []
    for item in items:
        a, b, _ = item.orientation
        if item.demand <= 0 or a <= 0 or b <= 0:
            continue
        item_rows = floor_count(usable_d, b + item.gap_xy)
        item_pitch = a + item.gap_xy
        if item_rows == 0 or floor_count(usable_w, item_pitch) == 0:
            continue
        rows[item.sku_index] = item_rows
        pitch[item.sku_index] = item_pitch
        need[item.sku_index] = int(math.ceil(item.demand / item_rows))
        eligible.append(item)
    if not eligible:
        return None

    total_demand = sum(item.demand for item in eligible)
    cols = {}
    for item in eligible:
        share = usable_w * item.demand / total_demand
        cols[item.sku_index] = min(
            need[item.sku_index], floor_count(share, pitch[item.sku_index])
        )
    width_left = usable_w - sum(cols[i] * pitch[i] for i in cols)
    for item in eligible:
        idx = item.sku_index
        extra = min(need[idx] - cols[idx], floor_count(width_left, pitch[idx]))
        if extra > 0:
            cols[idx] += extra
            width_left -= extra * pitch[idx]

    blocks: List[Block] = []
    offset_x = 0.0
    remaining_payload = payload_kg
    for item in eligible:
        idx = item.sku_index
        if cols[idx] <= 0:
            continue
        placed = min(item.demand, cols[idx] * rows[idx])
        if remaining_payload is not None and item.unit_weight_kg:
            by_weight = int(math.floor(remaining_payload / item.unit_weight_kg + 1e-9))
            placed = min(placed, max(by_weight, 0))
            remaining_payload -= placed * item.unit_weight_kg
        if placed <= 0:
            continue
        blocks.append(
            Block(idx, cols[idx], rows[idx], item.orientation, offset_x, 0.0, placed)
        )
        offset_x += cols[idx] * pitch[idx]

    if not blocks:
        return None
    return Layer(
        layout_type=LAYOUT_MULTI_SKU,
        columns=MixedBlocks(tuple(blocks)),
        per_layer_capacity=sum(block.placed for block in blocks),
        height=height,
    )
