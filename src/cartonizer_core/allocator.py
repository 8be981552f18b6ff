from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from .capacity import BoxEvaluation, evaluate_box
from .models import Box, CalculationResult, Shipment, Sku
from .trace import CalculationTrace, resolve_trace
from .units import compare_floats
from .validation import validate_inputs, validate_quantity

Allocation = List[Tuple[BoxEvaluation, int]]


def candidate_boxes(boxes: Sequence[Box], box_id: Optional[int] = None) -> List[Box]:
    if box_id is None:
        return list(boxes)
    return [box for box in boxes if box.id == box_id]


def _better_full_box(candidate: BoxEvaluation, current: Optional[BoxEvaluation]) -> bool:
    if current is None:
        return True
    cmp = compare_floats(candidate.void_ratio, current.void_ratio)
    if cmp != 0:
        return cmp < 0
    if candidate.capacity != current.capacity:
        return candidate.capacity > current.capacity
    return candidate.box.id < current.box.id


def _smaller_box(candidate: BoxEvaluation, current: Optional[BoxEvaluation]) -> bool:
    if current is None:
        return True
    cmp = compare_floats(candidate.box.volume, current.box.volume)
    if cmp != 0:
        return cmp < 0
    return candidate.box.id < current.box.id


def allocate(
    boxes: Sequence[Box],
    sku: Sku,
    quantity: int,
    *,
    box_id: Optional[int] = None,
    box_padding: float = 0.0,
    allow_partial: bool = True,
    trace: Optional[CalculationTrace] = None,
) -> Tuple[Allocation, int]:
    """Greedy box sequence for ``quantity`` units; returns picks and leftover."""
    trace = resolve_trace(trace)
    evaluations = [
        evaluate_box(sku, box, box_padding, trace)
        for box in candidate_boxes(boxes, box_id)
    ]
    usable = [evaluation for evaluation in evaluations if evaluation.capacity > 0]
    if not usable:
        trace.append("no box fits the SKU, leftover=%d", quantity)
        return [], quantity

    picks: Allocation = []
    remaining = quantity
    while remaining > 0:
        best: Optional[BoxEvaluation] = None
        for evaluation in usable:
            if evaluation.capacity <= remaining and _better_full_box(evaluation, best):
                best = evaluation
        if best is not None:
            # The chosen box stays best until the remainder drops below it.
            repeats = remaining // best.capacity
            picks.extend((best, best.capacity) for _ in range(repeats))
            remaining -= repeats * best.capacity
            trace.append(
                "full shipments: %d x box %s (capacity %d), remaining=%d",
                repeats,
                best.box.id,
                best.capacity,
                remaining,
            )
            continue

        last: Optional[BoxEvaluation] = None
        for evaluation in usable:
            if _smaller_box(evaluation, last):
                last = evaluation
        if allow_partial and last is not None:
            picks.append((last, remaining))
            trace.append("partial shipment: box %s with %d units", last.box.id, remaining)
            remaining = 0
        else:
            trace.append("partial shipment skipped, leftover=%d", remaining)
        break
    return picks, remaining


def choose_boxes_for_quantity(
    boxes: Sequence[Box],
    sku: Sku,
    quantity: int,
    *,
    box_id: Optional[int] = None,
    box_padding: float = 0.0,
    allow_partial: bool = True,
    trace: Optional[CalculationTrace] = None,
) -> CalculationResult:
    validate_inputs(boxes, [sku], box_padding)
    quantity = validate_quantity(quantity)
    picks, leftover = allocate(
        boxes,
        sku,
        quantity,
        box_id=box_id,
        box_padding=box_padding,
        allow_partial=allow_partial,
        trace=trace,
    )
    shipments = [
        Shipment(plan=evaluation.to_plan(), quantity=count, sku_quantities=(count,))
        for evaluation, count in picks
    ]
    return CalculationResult(shipments=shipments, leftover=leftover, total_quantity=quantity)


def choose_boxes_for_quantity_extended(
    boxes: Sequence[Box],
    sku: Sku,
    quantity: int,
    *,
    box_id: Optional[int] = None,
    box_padding: float = 0.0,
    trace: Optional[CalculationTrace] = None,
) -> CalculationResult:
    """Same allocation as :func:`choose_boxes_for_quantity`, explicit layers."""
    validate_inputs(boxes, [sku], box_padding)
    quantity = validate_quantity(quantity)
    picks, leftover = allocate(
        boxes,
        sku,
        quantity,
        box_id=box_id,
        box_padding=box_padding,
        allow_partial=True,
        trace=trace,
    )
    shipments = [
        Shipment(plan=evaluation.to_extended_plan(), quantity=count, sku_quantities=(count,))
        for evaluation, count in picks
    ]
    return CalculationResult(shipments=shipments, leftover=leftover, total_quantity=quantity)
