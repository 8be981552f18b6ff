from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from .footprint import is_standing, preferred_stances, usable_height
from .layers import plan_layer
from .models import Box, ExtendedShipmentPlan, Layer, Orientation, ShipmentPlan, Sku, UniformGrid
from .stacking import compute_num_layers
from .trace import CalculationTrace, resolve_trace
from .units import compare_floats

MAX_VOID_RATIO = math.nextafter(1.0, 0.0)


@dataclass(frozen=True)
class BoxEvaluation:
    box: Box
    stance: str
    layer: Optional[Layer]
    layers: int
    capacity: int
    void_ratio: float

    @property
    def per_layer_capacity(self) -> int:
        return self.layer.per_layer_capacity if self.layer is not None else 0

    @property
    def orientation(self) -> Optional[Orientation]:
        if self.layer is None:
            return None
        columns = self.layer.columns
        if isinstance(columns, UniformGrid):
            return columns.orientation
        return columns.blocks[0].orientation

    def to_plan(self) -> ShipmentPlan:
        count_x = count_y = 0
        if self.layer is not None and isinstance(self.layer.columns, UniformGrid):
            count_x, count_y = self.layer.columns.count_x, self.layer.columns.count_y
        return ShipmentPlan(
            box_id=self.box.id,
            capacity=self.capacity,
            void_ratio=self.void_ratio,
            layers=self.layers,
            per_layer_capacity=self.per_layer_capacity,
            orientation=self.orientation,
            count_x=count_x,
            count_y=count_y,
        )

    def to_extended_plan(self) -> ExtendedShipmentPlan:
        layers = tuple(self.layer for _ in range(self.layers)) if self.layer else ()
        return ExtendedShipmentPlan(
            box_id=self.box.id,
            total_capacity=self.capacity,
            void_ratio=self.void_ratio,
            layers=layers,
        )


def unit_cell_volume(orientation: Orientation, gap_xy: float, gap_z: float) -> float:
    """Volume charged to one unit, half of each gap included."""
    a, b, c = orientation
    return (a + gap_xy / 2) * (b + gap_xy / 2) * (c + gap_z / 2)


def compute_void_ratio(used_volume: float, box_volume: float) -> float:
    if box_volume <= 0:
        return MAX_VOID_RATIO
    ratio = 1 - used_volume / box_volume
    return min(max(ratio, 0.0), MAX_VOID_RATIO)


def layer_used_volume(layer: Layer, gap_xy: float, gap_z: float) -> float:
    columns = layer.columns
    if isinstance(columns, UniformGrid):
        return layer.per_layer_capacity * unit_cell_volume(columns.orientation, gap_xy, gap_z)
    return sum(
        block.placed * unit_cell_volume(block.orientation, gap_xy, gap_z)
        for block in columns.blocks
    )


def evaluate_stance(
    sku: Sku, box: Box, box_padding: float = 0.0, stance: str = "h"
) -> BoxEvaluation:
    layer = plan_layer(sku, box, box_padding, stance)
    if layer is None:
        return BoxEvaluation(box, stance, None, 0, 0, MAX_VOID_RATIO)
    num_layers = compute_num_layers(
        usable_height(box, sku.top_margin),
        layer.height,
        sku.gap_z,
        layer.per_layer_capacity,
        max_stack_layers=sku.max_stack_layers,
        max_weight_kg=box.max_weight_kg,
        box_weight_kg=box.box_weight_kg,
        unit_weight_kg=sku.unit_weight_kg,
    )
    capacity = layer.per_layer_capacity * num_layers
    used = num_layers * layer_used_volume(layer, sku.gap_xy, sku.gap_z)
    return BoxEvaluation(box, stance, layer, num_layers, capacity, compute_void_ratio(used, box.volume))


def _is_better(sku: Sku, candidate: BoxEvaluation, current: Optional[BoxEvaluation]) -> bool:
    if current is None:
        return True
    if candidate.capacity != current.capacity:
        return candidate.capacity > current.capacity
    standing = is_standing(sku, candidate.stance)
    if standing != is_standing(sku, current.stance):
        return standing
    return compare_floats(candidate.void_ratio, current.void_ratio) < 0


def evaluate_box(
    sku: Sku,
    box: Box,
    box_padding: float = 0.0,
    trace: Optional[CalculationTrace] = None,
) -> BoxEvaluation:
    """Best stance for ``sku`` in ``box``.

    The natural stance is always evaluated. SKUs that prefer vertical
    packing and may be tipped over also try their standing stances, which
    win ties on capacity but never a lower capacity.
    """
    trace = resolve_trace(trace)
    best: Optional[BoxEvaluation] = None
    stances = preferred_stances(sku)
    if "h" not in stances:
        stances.append("h")
    for stance in stances:
        evaluation = evaluate_stance(sku, box, box_padding, stance)
        if _is_better(sku, evaluation, best):
            best = evaluation

    trace.append(
        "box %s: stance=%s per_layer=%d layers=%d capacity=%d void=%.4f",
        box.id,
        best.stance,
        best.per_layer_capacity,
        best.layers,
        best.capacity,
        best.void_ratio,
    )
    return best
