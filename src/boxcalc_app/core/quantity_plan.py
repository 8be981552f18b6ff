"""Recommended box per order quantity.

Quantities ``1..N`` are run through the allocator one at a time. Runs of
consecutive quantities that ship in one box with the same arrangement are
merged into a single group; quantities needing more than one box fall into
``none`` groups.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from typing import IO, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from cartonizer_core import (
    Box,
    CalculationResult,
    CalculationTrace,
    ExtendedShipmentPlan,
    Layer,
    ShipmentPlan,
    Sku,
    UniformGrid,
    choose_boxes_for_quantity,
    choose_boxes_for_quantity_extended,
)
from cartonizer_core.models import Plan
from cartonizer_core.units import format_void_ratio

from ..data.boxes_repo import load_boxes
from ..data.settings_repo import load_general_settings
from ..data.sku_overrides_repo import load_sku_overrides
from .entries import Entry, build_sku, overrides_for, resolve_setting

logger = logging.getLogger(__name__)

DEFAULT_PLAN_QUANTITY = 20
MAX_PLAN_QUANTITY = 500

NO_PLAN_KEY = "none"
NO_PLAN_NOTE = "no single box holds this quantity; check the box catalog and margins"

CSV_HEADER = (
    "quantity_range",
    "box_id",
    "box_size_mm",
    "arrangement",
    "orientation_mm",
    "capacity",
    "efficiency",
    "note",
)


@dataclass
class QuantityGroup:
    key: str
    start: int
    end: int
    plan: Optional[Plan] = None
    box: Optional[Box] = None

    @property
    def label(self) -> str:
        if self.start == self.end:
            return str(self.start)
        return f"{self.start}-{self.end}"


def _dims_label(values: Sequence[float]) -> str:
    return "x".join(f"{value:g}" for value in values)


def plan_key(plan: ShipmentPlan) -> str:
    orientation = _dims_label(plan.orientation or ())
    return f"box-{plan.box_id}-{orientation}-{plan.count_x}-{plan.count_y}-{plan.layers}"


def _layer_signature(layer: Layer) -> str:
    columns = layer.columns
    if isinstance(columns, UniformGrid):
        return f"{_dims_label(columns.orientation)}:{columns.count_x}:{columns.count_y}"
    return "+".join(
        f"{_dims_label(block.orientation)}:{block.count_x}:{block.count_y}"
        for block in columns.blocks
    )


def extended_plan_key(plan: ExtendedShipmentPlan) -> str:
    layers = "__".join(_layer_signature(layer) for layer in plan.layers)
    return f"box-{plan.box_id}-{len(plan.layers)}-{layers}"


def plan_limit(max_quantity: int) -> int:
    return max(1, min(int(max_quantity), MAX_PLAN_QUANTITY))


def _single_box_plan(result: CalculationResult) -> Optional[Plan]:
    if len(result.shipments) == 1 and result.leftover == 0:
        return result.shipments[0].plan
    return None


def _group_quantities(
    boxes: Sequence[Box],
    max_quantity: int,
    solve: Callable[[int], CalculationResult],
    key_for: Callable[[Plan], str],
) -> List[QuantityGroup]:
    by_id: Dict[int, Box] = {}
    for box in boxes:
        by_id.setdefault(box.id, box)

    groups: List[QuantityGroup] = []
    current: Optional[QuantityGroup] = None
    for quantity in range(1, plan_limit(max_quantity) + 1):
        plan = _single_box_plan(solve(quantity))
        key = key_for(plan) if plan is not None else NO_PLAN_KEY
        if current is not None and current.key == key:
            current.end = quantity
            continue
        box = by_id.get(plan.box_id) if plan is not None else None
        current = QuantityGroup(key, quantity, quantity, plan, box)
        groups.append(current)
    return groups


def quantity_plan(
    boxes: Sequence[Box],
    sku: Sku,
    max_quantity: int = DEFAULT_PLAN_QUANTITY,
    box_padding: float = 0.0,
    *,
    box_id: Optional[int] = None,
    trace: Optional[CalculationTrace] = None,
) -> List[QuantityGroup]:
    """Quantity ranges sharing one single-box arrangement, up to ``max_quantity``."""
    if not boxes:
        return []
    return _group_quantities(
        boxes,
        max_quantity,
        lambda quantity: choose_boxes_for_quantity(
            boxes, sku, quantity, box_id=box_id, box_padding=box_padding, trace=trace
        ),
        plan_key,
    )


def extended_quantity_plan(
    boxes: Sequence[Box],
    sku: Sku,
    max_quantity: int = DEFAULT_PLAN_QUANTITY,
    box_padding: float = 0.0,
    *,
    box_id: Optional[int] = None,
    trace: Optional[CalculationTrace] = None,
) -> List[QuantityGroup]:
    if not boxes:
        return []
    return _group_quantities(
        boxes,
        max_quantity,
        lambda quantity: choose_boxes_for_quantity_extended(
            boxes, sku, quantity, box_id=box_id, box_padding=box_padding, trace=trace
        ),
        extended_plan_key,
    )


def quantity_plan_for_entry(
    entry: Entry,
    max_quantity: int = DEFAULT_PLAN_QUANTITY,
    boxes: Optional[Sequence[Box]] = None,
    settings: Optional[Mapping[str, object]] = None,
    overrides: Optional[Dict[str, dict]] = None,
    box_id: Optional[int] = None,
    trace: Optional[CalculationTrace] = None,
) -> Tuple[Sku, List[QuantityGroup]]:
    """Quantity plan for one entry, with settings and overrides from the repositories."""
    boxes = list(load_boxes() if boxes is None else boxes)
    settings = load_general_settings() if settings is None else settings
    overrides = load_sku_overrides() if overrides is None else overrides
    box_padding = resolve_setting(None, None, settings.get("defaultBoxPadding"), 0.0)
    sku = build_sku(entry, overrides_for(entry, overrides), settings)
    groups = quantity_plan(
        boxes, sku, max_quantity, box_padding, box_id=box_id, trace=trace
    )
    logger.debug("Quantity plan for %s: %d groups", entry.sku_id or entry.dims, len(groups))
    return sku, groups


def quantity_plan_row(group: QuantityGroup) -> List[str]:
    plan = group.plan
    if not isinstance(plan, ShipmentPlan) or group.box is None:
        return [group.label, "", "", "", "", "", "", NO_PLAN_NOTE]
    box = group.box
    return [
        group.label,
        str(box.id),
        _dims_label((box.W, box.D, box.H)),
        f"{plan.count_x}x{plan.count_y}x{plan.layers}",
        _dims_label(plan.orientation or ()),
        str(plan.capacity),
        format_void_ratio(1 - plan.void_ratio),
        "",
    ]


def write_quantity_plan_csv(groups: Sequence[QuantityGroup], stream: IO[str]) -> int:
    """Write one CSV row per group after the header; returns the row count."""
    writer = csv.writer(stream)
    writer.writerow(CSV_HEADER)
    for group in groups:
        writer.writerow(quantity_plan_row(group))
    return len(groups)
