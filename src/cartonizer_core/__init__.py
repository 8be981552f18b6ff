"""Carton packing engine: units per box, boxes per quantity, joint packing."""

from .allocator import choose_boxes_for_quantity, choose_boxes_for_quantity_extended
from .capacity import BoxEvaluation, evaluate_box
from .models import (
    Block,
    Box,
    CalculationResult,
    Dims,
    ExtendedShipmentPlan,
    Layer,
    MixedBlocks,
    MultiSkuPlan,
    OrientationMode,
    Shipment,
    ShipmentPlan,
    Sku,
    UniformGrid,
)
from .multi_sku import (
    choose_box_multi_sku_extended,
    choose_boxes_for_multi_sku,
    choose_boxes_for_multi_sku_extended,
)
from .signature import shipments_key
from .trace import (
    CalculationTrace,
    clear_calculation_logs,
    enable_calculation_logging,
    get_calculation_logs,
)
from .units import EPSILON, compare_floats
from .validation import InputValidationError
from .variants import (
    VariantSearchResult,
    apply_orientation_mode,
    parse_orientation_mode,
    search_orientation_variants,
)

__all__ = [
    "Block",
    "Box",
    "BoxEvaluation",
    "CalculationResult",
    "CalculationTrace",
    "Dims",
    "EPSILON",
    "ExtendedShipmentPlan",
    "InputValidationError",
    "Layer",
    "MixedBlocks",
    "MultiSkuPlan",
    "OrientationMode",
    "Shipment",
    "ShipmentPlan",
    "Sku",
    "UniformGrid",
    "VariantSearchResult",
    "apply_orientation_mode",
    "choose_box_multi_sku_extended",
    "choose_boxes_for_multi_sku",
    "choose_boxes_for_multi_sku_extended",
    "choose_boxes_for_quantity",
    "choose_boxes_for_quantity_extended",
    "clear_calculation_logs",
    "compare_floats",
    "enable_calculation_logging",
    "evaluate_box",
    "get_calculation_logs",
    "parse_orientation_mode",
    "search_orientation_variants",
    "shipments_key",
]
