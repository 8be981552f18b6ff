from __future__ import annotations

import math
from typing import Optional

from .units import floor_count


def layers_by_height(usable_height: float, unit_h: float, gap_z: float) -> int:
    layer_height = unit_h + gap_z
    if unit_h <= 0 or layer_height <= 0:
        return 0
    return floor_count(usable_height, layer_height)


def payload_kg(max_weight_kg: Optional[float], box_weight_kg: float) -> Optional[float]:
    if max_weight_kg is None:
        return None
    return max(max_weight_kg - (box_weight_kg or 0.0), 0.0)


def layers_by_weight(
    max_weight_kg: Optional[float],
    box_weight_kg: float,
    unit_weight_kg: Optional[float],
    per_layer_capacity: int,
) -> Optional[int]:
    payload = payload_kg(max_weight_kg, box_weight_kg)
    if payload is None or not unit_weight_kg or per_layer_capacity <= 0:
        return None
    return max(int(math.floor(payload / (unit_weight_kg * per_layer_capacity) + 1e-9)), 0)


def compute_num_layers(
    usable_height: float,
    unit_h: float,
    gap_z: float,
    per_layer_capacity: int,
    *,
    max_stack_layers: Optional[int] = None,
    max_weight_kg: Optional[float] = None,
    box_weight_kg: float = 0.0,
    unit_weight_kg: Optional[float] = None,
) -> int:
    """Layer count: height bound clamped by the stack cap and the weight cap."""
    layers = layers_by_height(usable_height, unit_h, gap_z)
    if max_stack_layers is not None:
        layers = min(layers, int(max_stack_layers))
    weight_cap = layers_by_weight(
        max_weight_kg, box_weight_kg, unit_weight_kg, per_layer_capacity
    )
    if weight_cap is not None:
        layers = min(layers, weight_cap)
    return max(layers, 0)

