from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Union

from cartonizer_core import (
    Box,
    CalculationResult,
    CalculationTrace,
    OrientationMode,
    Shipment,
    Sku,
    VariantSearchResult,
    apply_orientation_mode,
    choose_boxes_for_quantity,
    choose_boxes_for_quantity_extended,
    evaluate_box,
    parse_orientation_mode,
    search_orientation_variants,
)
from cartonizer_core.trace import resolve_trace

from ..data.boxes_repo import load_boxes
from ..data.settings_repo import DEFAULT_GENERAL_SETTINGS, load_general_settings
from ..data.sku_overrides_repo import load_sku_overrides
from .entries import Entry, build_sku, overrides_for, resolve_setting
from .weights import ShipmentWeights, calculate_weights

logger = logging.getLogger(__name__)


@dataclass
class SkuCalculation:
    entry: Entry
    sku: Sku
    mode: OrientationMode
    standard: CalculationResult
    extended: CalculationResult
    single_box: CalculationResult
    weights: List[ShipmentWeights] = field(default_factory=list)

    @property
    def prefers_stacking(self) -> bool:
        return self.mode is OrientationMode.STACKED


@dataclass
class CalculationReport:
    skus: List[SkuCalculation] = field(default_factory=list)
    multi: Optional[VariantSearchResult] = None
    box_padding: float = 0.0
    logs: List[str] = field(default_factory=list)

    @property
    def total_quantity(self) -> int:
        return sum(item.entry.quantity for item in self.skus)

    @property
    def total_boxes(self) -> int:
        return sum(len(item.standard.shipments) for item in self.skus)

    @property
    def total_leftover(self) -> int:
        return sum(item.standard.leftover for item in self.skus)


def single_box_result(
    boxes: Sequence[Box],
    sku: Sku,
    quantity: int,
    box_padding: float = 0.0,
    trace: Optional[CalculationTrace] = None,
) -> CalculationResult:
    """Smallest box of the catalog holding ``quantity`` units in one shipment."""
    for box in sorted(boxes, key=lambda item: (item.volume, item.id)):
        evaluation = evaluate_box(sku, box, box_padding, trace)
        if quantity > 0 and evaluation.capacity >= quantity:
            shipment = Shipment(plan=evaluation.to_plan(), quantity=quantity, sku_quantities=(quantity,))
            return CalculationResult(shipments=[shipment], leftover=0, total_quantity=quantity)
    return CalculationResult(shipments=[], leftover=quantity, total_quantity=quantity)


def shipment_weights(
    result: CalculationResult, sku: Sku, boxes: Sequence[Box], multiplier: float
) -> List[ShipmentWeights]:
    by_id: Dict[int, Box] = {}
    for box in boxes:
        by_id.setdefault(box.id, box)
    return [
        calculate_weights(sku, shipment.quantity, by_id.get(shipment.plan.box_id), multiplier)
        for shipment in result.shipments
    ]


def calculate(
    entries: Sequence[Entry],
    boxes: Optional[Sequence[Box]] = None,
    settings: Optional[Mapping[str, object]] = None,
    overrides: Optional[Dict[str, dict]] = None,
    modes: Optional[Mapping[int, Union[OrientationMode, str]]] = None,
    box_id: Optional[int] = None,
    trace: Optional[CalculationTrace] = None,
) -> CalculationReport:
    """Per-SKU results plus, for several entries, the joint variant search."""
    boxes = list(load_boxes() if boxes is None else boxes)
    settings = load_general_settings() if settings is None else settings
    overrides = load_sku_overrides() if overrides is None else overrides
    modes = modes or {}
    trace = resolve_trace(trace)

    box_padding = resolve_setting(None, None, settings.get("defaultBoxPadding"), 0.0)
    multiplier = resolve_setting(
        None,
        None,
        settings.get("packagingMaterialWeightMultiplier"),
        DEFAULT_GENERAL_SETTINGS["packagingMaterialWeightMultiplier"],
    )
    report = CalculationReport(box_padding=box_padding)
    if not boxes or not entries:
        logger.info("Nothing to calculate: %d boxes, %d entries", len(boxes), len(entries))
        return report

    base_skus: List[Sku] = []
    entry_modes: List[OrientationMode] = []
    for index, entry in enumerate(entries):
        mode = parse_orientation_mode(modes.get(index, OrientationMode.AUTO))
        base = build_sku(entry, overrides_for(entry, overrides), settings)
        sku = apply_orientation_mode(base, mode)
        trace.append("sku %d (%s): mode=%s dims=%s", index, entry.sku_id, mode.value, entry.dims)
        standard = choose_boxes_for_quantity(
            boxes, sku, entry.quantity, box_id=box_id, box_padding=box_padding, trace=trace
        )
        extended = choose_boxes_for_quantity_extended(
            boxes, sku, entry.quantity, box_id=box_id, box_padding=box_padding, trace=trace
        )
        report.skus.append(
            SkuCalculation(
                entry=entry,
                sku=sku,
                mode=mode,
                standard=standard,
                extended=extended,
                single_box=single_box_result(boxes, sku, entry.quantity, box_padding, trace),
                weights=shipment_weights(standard, sku, boxes, multiplier),
            )
        )
        base_skus.append(base)
        entry_modes.append(mode)

    if len(entries) > 1:
        report.multi = search_orientation_variants(
            boxes,
            base_skus,
            [entry.quantity for entry in entries],
            entry_modes,
            box_id=box_id,
            box_padding=box_padding,
            trace=trace,
        )
    report.logs = trace.lines
    return report
