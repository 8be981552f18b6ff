"""Orientation variant search for jointly packed SKUs.

Every variant forces ``prefer_vertical`` on a subset of the ``auto`` SKUs
(plus every ``stacked`` SKU), re-runs the multi-SKU packers and is scored
by ``(leftover, shipments, smallest box volume, void ratio, box id)``.
Variants are evaluated in a fixed order and a later one only wins when it
is strictly better, so the same inputs always select the same variant.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .models import Box, CalculationResult, MultiSkuPlan, OrientationMode, Sku
from .multi_sku import (
    better_single_box,
    choose_box_multi_sku_extended,
    choose_boxes_for_multi_sku,
    choose_boxes_for_multi_sku_extended,
)
from .trace import CalculationTrace, resolve_trace
from .units import compare_floats
from .validation import InputValidationError, validate_inputs, validate_quantities

# Pairs and the triple are only enumerated up to this many auto SKUs.
MAX_COMBINATORIAL_AUTO = 3

INF = float("inf")


@dataclass(frozen=True)
class VariantScore:
    min_leftover: int
    min_shipments: float
    min_box_volume: float
    min_void_ratio: float
    min_box_id: float


def compare_scores(a: VariantScore, b: VariantScore) -> int:
    """Negative when ``a`` is better than ``b``."""
    if a.min_leftover != b.min_leftover:
        return -1 if a.min_leftover < b.min_leftover else 1
    if a.min_shipments != b.min_shipments:
        return -1 if a.min_shipments < b.min_shipments else 1
    cmp = compare_floats(a.min_box_volume, b.min_box_volume)
    if cmp != 0:
        return cmp
    cmp = compare_floats(a.min_void_ratio, b.min_void_ratio)
    if cmp != 0:
        return cmp
    if a.min_box_id != b.min_box_id:
        return -1 if a.min_box_id < b.min_box_id else 1
    return 0


@dataclass
class VariantResult:
    label: str
    skus: List[Sku]
    standard: CalculationResult
    extended: CalculationResult
    single_box: Optional[MultiSkuPlan]
    score: VariantScore


@dataclass
class VariantSearchResult:
    best: VariantResult
    single_box: Optional[MultiSkuPlan] = None
    single_box_label: Optional[str] = None
    variants: List[VariantResult] = field(default_factory=list)

    @property
    def label(self) -> str:
        return self.best.label

    @property
    def evaluated(self) -> List[str]:
        return [variant.label for variant in self.variants]


def parse_orientation_mode(mode: Union[OrientationMode, str]) -> OrientationMode:
    try:
        return OrientationMode(mode)
    except ValueError:
        raise InputValidationError(f"unknown orientation mode {mode!r}") from None


def apply_orientation_mode(sku: Sku, mode: Union[OrientationMode, str]) -> Sku:
    mode = parse_orientation_mode(mode)
    if mode is OrientationMode.FLAT:
        return replace(sku, keep_upright=True, prefer_vertical=False)
    if mode in (OrientationMode.VERTICAL, OrientationMode.STACKED):
        return replace(sku, keep_upright=False, prefer_vertical=True)
    return sku


def enumerate_variants(auto_indices: Sequence[int]) -> List[Tuple[str, Tuple[int, ...]]]:
    """Auto index subsets to force vertical, deduplicated, in search order."""
    variants: List[Tuple[str, Tuple[int, ...]]] = []
    seen = set()

    def add(label: str, indices: Sequence[int]) -> None:
        if not indices:
            return
        key = tuple(sorted(indices))
        if key in seen:
            return
        seen.add(key)
        variants.append((label, key))

    if not auto_indices:
        return variants
    add("vertical-all-auto", auto_indices)
    for idx in auto_indices:
        add(f"vertical-auto-{idx}", [idx])
    if len(auto_indices) <= MAX_COMBINATORIAL_AUTO:
        for i, first in enumerate(auto_indices):
            for second in auto_indices[i + 1 :]:
                add(f"vertical-auto-{first}-{second}", [first, second])
        if len(auto_indices) == 3:
            add("vertical-auto-" + "-".join(str(idx) for idx in auto_indices), auto_indices)
    return variants


def _box_volumes(boxes: Sequence[Box]) -> Dict[int, float]:
    volumes: Dict[int, float] = {}
    for box in boxes:
        volumes.setdefault(box.id, box.volume)
    return volumes


def score_result(
    standard: CalculationResult, extended: CalculationResult, boxes: Sequence[Box]
) -> VariantScore:
    volumes = _box_volumes(boxes)
    plans = [shipment.plan for shipment in standard.shipments + extended.shipments]
    return VariantScore(
        min_leftover=min(standard.leftover, extended.leftover),
        min_shipments=min(len(standard.shipments), len(extended.shipments)),
        min_box_volume=min((volumes.get(plan.box_id, INF) for plan in plans), default=INF),
        min_void_ratio=min((plan.void_ratio for plan in plans), default=INF),
        min_box_id=min((plan.box_id for plan in plans), default=INF),
    )


def evaluate_variant(
    label: str,
    boxes: Sequence[Box],
    skus: List[Sku],
    quantities: Sequence[int],
    *,
    box_id: Optional[int],
    box_padding: float,
    trace: CalculationTrace,
) -> VariantResult:
    trace.append("variant %s", label)
    standard = choose_boxes_for_multi_sku(
        boxes, skus, quantities, box_id=box_id, box_padding=box_padding, trace=trace
    )
    extended = choose_boxes_for_multi_sku_extended(
        boxes, skus, quantities, box_id=box_id, box_padding=box_padding, trace=trace
    )
    single_box = choose_box_multi_sku_extended(
        boxes, skus, quantities, box_id, box_padding, trace
    )
    score = score_result(standard, extended, boxes)
    trace.append(
        "variant %s: leftover=%d shipments=%s volume=%s",
        label,
        score.min_leftover,
        score.min_shipments,
        score.min_box_volume,
    )
    return VariantResult(label, skus, standard, extended, single_box, score)


def search_orientation_variants(
    boxes: Sequence[Box],
    skus: Sequence[Sku],
    quantities: Sequence[int],
    modes: Optional[Sequence[Union[OrientationMode, str]]] = None,
    *,
    box_id: Optional[int] = None,
    box_padding: float = 0.0,
    trace: Optional[CalculationTrace] = None,
) -> VariantSearchResult:
    validate_inputs(boxes, skus, box_padding)
    counts = validate_quantities(skus, quantities)
    trace = resolve_trace(trace)
    if modes is None:
        modes = [OrientationMode.AUTO] * len(skus)
    modes = [parse_orientation_mode(mode) for mode in modes]
    if len(modes) != len(skus):
        raise InputValidationError(
            f"skus and modes differ in length ({len(skus)} != {len(modes)})"
        )

    base_skus = [apply_orientation_mode(sku, mode) for sku, mode in zip(skus, modes)]
    auto_indices = [idx for idx, mode in enumerate(modes) if mode is OrientationMode.AUTO]
    stacked_indices = [idx for idx, mode in enumerate(modes) if mode is OrientationMode.STACKED]

    def run(label: str, skus_for_calc: List[Sku]) -> VariantResult:
        return evaluate_variant(
            label,
            boxes,
            skus_for_calc,
            counts,
            box_id=box_id,
            box_padding=box_padding,
            trace=trace,
        )

    def forced(indices: Sequence[int]) -> List[Sku]:
        vertical = set(indices) | set(stacked_indices)
        variant_skus = []
        for idx, sku in enumerate(base_skus):
            if idx in auto_indices:
                sku = replace(sku, prefer_vertical=idx in vertical)
            elif idx in stacked_indices:
                sku = replace(sku, prefer_vertical=True)
            variant_skus.append(sku)
        return variant_skus

    best = run("base", base_skus)
    result = VariantSearchResult(best=best, variants=[best])
    if best.single_box is not None:
        result.single_box, result.single_box_label = best.single_box, "base"

    queue: List[Tuple[str, Tuple[int, ...]]] = []
    if stacked_indices:
        queue.append(("vertical-stacked-base", ()))
    queue.extend(enumerate_variants(auto_indices))

    for label, indices in queue:
        candidate = run(label, forced(indices))
        result.variants.append(candidate)
        if candidate.single_box is not None and better_single_box(
            candidate.single_box, result.single_box, boxes
        ):
            result.single_box, result.single_box_label = candidate.single_box, label
        if compare_scores(candidate.score, result.best.score) < 0:
            result.best = candidate

    trace.append(
        "selected variant %s (single box from %s)", result.best.label, result.single_box_label
    )
    return result
