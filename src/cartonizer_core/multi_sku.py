from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Set, Tuple

from .allocator import candidate_boxes
from .capacity import compute_void_ratio, evaluate_box, unit_cell_volume
from .footprint import usable_footprint, usable_height
from .layers import MosaicItem, plan_mosaic_layer
from .models import (
    Box,
    CalculationResult,
    Layer,
    MixedBlocks,
    MultiSkuPlan,
    Orientation,
    Shipment,
    ShipmentPlan,
    Sku,
)
from .stacking import payload_kg
from .trace import CalculationTrace, resolve_trace
from .units import EPSILON, compare_floats, floor_count
from .validation import validate_inputs, validate_quantities


def _layer_volume(layer: Layer, skus: Sequence[Sku]) -> float:
    total = 0.0
    if not isinstance(layer.columns, MixedBlocks):
        return total
    for block in layer.columns.blocks:
        sku = skus[block.sku_index]
        total += block.placed * unit_cell_volume(block.orientation, sku.gap_xy, sku.gap_z)
    return total


def pack_box(
    box: Box,
    skus: Sequence[Sku],
    quantities: Sequence[int],
    *,
    box_padding: float = 0.0,
    mosaic: bool = True,
    trace: Optional[CalculationTrace] = None,
) -> Optional[MultiSkuPlan]:
    """Fill one box layer by layer from the remaining per-SKU quantities.

    Each pass builds a layer as tall as the shortest SKU still waiting;
    only SKUs of that height take part. Without ``mosaic`` a layer holds a
    single SKU. Returns ``None`` when nothing can be placed.
    """
    trace = resolve_trace(trace)
    active = [idx for idx, qty in enumerate(quantities) if qty > 0]
    if not active:
        return None

    side = max(skus[idx].side_margin for idx in active)
    front = max(skus[idx].front_margin for idx in active)
    top = max(skus[idx].top_margin for idx in active)
    usable_w, usable_d = usable_footprint(box, side, front, box_padding)
    height_left = usable_height(box, top)
    payload = payload_kg(box.max_weight_kg, box.box_weight_kg)

    orientations: Dict[int, Orientation] = {}
    for idx in active:
        evaluation = evaluate_box(skus[idx], box, box_padding, trace)
        if evaluation.capacity > 0 and evaluation.orientation is not None:
            orientations[idx] = evaluation.orientation

    demand = list(quantities)
    placed = [0] * len(quantities)
    layers_used = [0] * len(quantities)
    blocked: Set[int] = set()
    layers: List[Layer] = []

    while True:
        waiting = [
            idx
            for idx in active
            if demand[idx] > 0
            and idx in orientations
            and idx not in blocked
            and (
                skus[idx].max_stack_layers is None
                or layers_used[idx] < skus[idx].max_stack_layers
            )
        ]
        if not waiting:
            break
        layer_height = min(orientations[idx][2] for idx in waiting)
        participants = [
            idx for idx in waiting if orientations[idx][2] <= layer_height + EPSILON
        ]
        if not mosaic:
            participants = participants[:1]
        gap_z = max(skus[idx].gap_z for idx in participants)
        if floor_count(height_left, layer_height + gap_z) < 1:
            blocked.update(participants)
            continue

        items = [
            MosaicItem(
                sku_index=idx,
                orientation=orientations[idx],
                gap_xy=skus[idx].gap_xy,
                demand=demand[idx],
                unit_weight_kg=skus[idx].unit_weight_kg,
            )
            for idx in participants
        ]
        layer = plan_mosaic_layer(items, usable_w, usable_d, layer_height, payload)
        if layer is None:
            blocked.update(participants)
            continue

        for block in layer.columns.blocks:
            idx = block.sku_index
            demand[idx] -= block.placed
            placed[idx] += block.placed
            layers_used[idx] += 1
            if payload is not None and skus[idx].unit_weight_kg:
                payload -= block.placed * skus[idx].unit_weight_kg
        layers.append(layer)
        height_left -= layer_height + gap_z

    total = sum(placed)
    if total == 0:
        return None
    used = sum(_layer_volume(layer, skus) for layer in layers)
    plan = MultiSkuPlan(
        box_id=box.id,
        total_capacity=total,
        void_ratio=compute_void_ratio(used, box.volume),
        layers=tuple(layers),
        sku_quantities=tuple(placed),
    )
    trace.append(
        "box %s: %s layers=%d placed=%s void=%.4f",
        box.id,
        "mosaic" if mosaic else "stacked",
        len(layers),
        list(placed),
        plan.void_ratio,
    )
    return plan


def _box_volume(boxes: Sequence[Box], box_id: int) -> float:
    for box in boxes:
        if box.id == box_id:
            return box.volume
    return float("inf")


def better_single_box(
    candidate: MultiSkuPlan, current: Optional[MultiSkuPlan], boxes: Sequence[Box]
) -> bool:
    """Smaller box, then smaller void ratio, then smaller box id."""
    if current is None:
        return True
    cmp = compare_floats(_box_volume(boxes, candidate.box_id), _box_volume(boxes, current.box_id))
    if cmp != 0:
        return cmp < 0
    cmp = compare_floats(candidate.void_ratio, current.void_ratio)
    if cmp != 0:
        return cmp < 0
    return candidate.box_id < current.box_id


def _more_progress(candidate: MultiSkuPlan, current: Optional[MultiSkuPlan]) -> bool:
    if current is None:
        return True
    if candidate.total_capacity != current.total_capacity:
        return candidate.total_capacity > current.total_capacity
    cmp = compare_floats(candidate.void_ratio, current.void_ratio)
    if cmp != 0:
        return cmp < 0
    return candidate.box_id < current.box_id


def _pack_each_box(
    boxes: Sequence[Box],
    skus: Sequence[Sku],
    quantities: Sequence[int],
    box_padding: float,
    mosaic: bool,
    trace: CalculationTrace,
) -> List[MultiSkuPlan]:
    plans: List[MultiSkuPlan] = []
    for box in boxes:
        plan = pack_box(box, skus, quantities, box_padding=box_padding, mosaic=mosaic, trace=trace)
        if plan is not None:
            plans.append(plan)
    return plans


def _best_complete_plan(
    plans: Sequence[MultiSkuPlan], quantities: Sequence[int], boxes: Sequence[Box]
) -> Optional[MultiSkuPlan]:
    target = tuple(quantities)
    best: Optional[MultiSkuPlan] = None
    for plan in plans:
        if plan.sku_quantities == target and better_single_box(plan, best, boxes):
            best = plan
    return best


def choose_box_multi_sku_extended(
    boxes: Sequence[Box],
    skus: Sequence[Sku],
    quantities: Sequence[int],
    box_id: Optional[int] = None,
    box_padding: float = 0.0,
    trace: Optional[CalculationTrace] = None,
) -> Optional[MultiSkuPlan]:
    """One box holding every requested unit, or ``None``."""
    validate_inputs(boxes, skus, box_padding)
    counts = validate_quantities(skus, quantities)
    trace = resolve_trace(trace)
    if sum(counts) == 0:
        return None
    candidates = candidate_boxes(boxes, box_id)
    plan = _best_complete_plan(
        _pack_each_box(candidates, skus, counts, box_padding, True, trace), counts, candidates
    )
    if plan is None:
        trace.append("single box: no box holds %s", counts)
    else:
        trace.append("single box: box %s holds %s", plan.box_id, counts)
    return plan


def pack_multi_sku(
    boxes: Sequence[Box],
    skus: Sequence[Sku],
    quantities: Sequence[int],
    *,
    box_padding: float = 0.0,
    mosaic: bool = True,
    trace: Optional[CalculationTrace] = None,
) -> Tuple[List[MultiSkuPlan], int]:
    """Box sequence for the remaining quantities; returns plans and leftover."""
    trace = resolve_trace(trace)
    remaining = list(quantities)
    plans: List[MultiSkuPlan] = []
    while sum(remaining) > 0:
        packed = _pack_each_box(boxes, skus, remaining, box_padding, mosaic, trace)
        best = _best_complete_plan(packed, remaining, boxes)
        if best is None:
            for plan in packed:
                if _more_progress(plan, best):
                    best = plan
        if best is None:
            trace.append("no box makes progress, leftover=%s", remaining)
            break
        plans.append(best)
        remaining = [left - used for left, used in zip(remaining, best.sku_quantities)]
        trace.append(
            "shipment: box %s with %s, remaining=%s",
            best.box_id,
            list(best.sku_quantities),
            remaining,
        )
    return plans, sum(remaining)


def _summary_plan(plan: MultiSkuPlan) -> ShipmentPlan:
    return ShipmentPlan(
        box_id=plan.box_id,
        capacity=plan.total_capacity,
        void_ratio=plan.void_ratio,
        layers=len(plan.layers),
        per_layer_capacity=plan.layers[0].per_layer_capacity if plan.layers else 0,
    )


def choose_boxes_for_multi_sku(
    boxes: Sequence[Box],
    skus: Sequence[Sku],
    quantities: Sequence[int],
    *,
    box_id: Optional[int] = None,
    box_padding: float = 0.0,
    trace: Optional[CalculationTrace] = None,
) -> CalculationResult:
    """Multi-box packing with one SKU per layer."""
    validate_inputs(boxes, skus, box_padding)
    counts = validate_quantities(skus, quantities)
    plans, leftover = pack_multi_sku(
        candidate_boxes(boxes, box_id),
        skus,
        counts,
        box_padding=box_padding,
        mosaic=False,
        trace=trace,
    )
    shipments = [
        Shipment(
            plan=_summary_plan(plan),
            quantity=plan.total_capacity,
            sku_quantities=plan.sku_quantities,
        )
        for plan in plans
    ]
    return CalculationResult(shipments=shipments, leftover=leftover, total_quantity=sum(counts))


def choose_boxes_for_multi_sku_extended(
    boxes: Sequence[Box],
    skus: Sequence[Sku],
    quantities: Sequence[int],
    *,
    box_id: Optional[int] = None,
    box_padding: float = 0.0,
    trace: Optional[CalculationTrace] = None,
) -> CalculationResult:
    """Multi-box packing where SKUs share layers."""
    validate_inputs(boxes, skus, box_padding)
    counts = validate_quantities(skus, quantities)
    plans, leftover = pack_multi_sku(
        candidate_boxes(boxes, box_id),
        skus,
        counts,
        box_padding=box_padding,
        mosaic=True,
        trace=trace,
    )
    shipments = [
        Shipment(plan=plan, quantity=plan.total_capacity, sku_quantities=plan.sku_quantities)
        for plan in plans
    ]
    return CalculationResult(shipments=shipments, leftover=leftover, total_quantity=sum(counts))
