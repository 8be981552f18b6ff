from __future__ import annotations

import math
from typing import Iterable, List, Optional, Sequence

from .models import Box, Sku


class InputValidationError(ValueError):
    """Raised for inputs no packing can be computed from."""


ERROR_NEGATIVE = "{field} must be a finite, non-negative number (got {value!r})"
ERROR_QUANTITY = "quantity must be a finite, non-negative whole number (got {value!r})"
ERROR_LENGTHS = "skus and quantities differ in length ({skus} != {quantities})"


def _check_non_negative(field: str, value: Optional[float]) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InputValidationError(ERROR_NEGATIVE.format(field=field, value=value))
    if not math.isfinite(value) or value < 0:
        raise InputValidationError(ERROR_NEGATIVE.format(field=field, value=value))


def validate_box(box: Box) -> None:
    for field in ("W", "D", "H", "max_weight_kg", "box_weight_kg"):
        _check_non_negative(f"box {box.id} {field}", getattr(box, field))


def validate_sku(sku: Sku) -> None:
    label = sku.sku_id or "sku"
    for field, value in (
        ("w", sku.dims.w),
        ("d", sku.dims.d),
        ("h", sku.dims.h),
        ("side_margin", sku.side_margin),
        ("front_margin", sku.front_margin),
        ("top_margin", sku.top_margin),
        ("gap_xy", sku.gap_xy),
        ("gap_z", sku.gap_z),
        ("max_stack_layers", sku.max_stack_layers),
        ("unit_weight_kg", sku.unit_weight_kg),
    ):
        _check_non_negative(f"{label} {field}", value)


def validate_quantity(quantity: object) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, (int, float)):
        raise InputValidationError(ERROR_QUANTITY.format(value=quantity))
    if not math.isfinite(quantity) or quantity < 0 or quantity != int(quantity):
        raise InputValidationError(ERROR_QUANTITY.format(value=quantity))
    return int(quantity)


def validate_inputs(
    boxes: Iterable[Box], skus: Sequence[Sku], box_padding: float
) -> None:
    _check_non_negative("box_padding", box_padding)
    for box in boxes:
        validate_box(box)
    for sku in skus:
        validate_sku(sku)


def validate_quantities(skus: Sequence[Sku], quantities: Sequence[object]) -> List[int]:
    if len(skus) != len(quantities):
        raise InputValidationError(
            ERROR_LENGTHS.format(skus=len(skus), quantities=len(quantities))
        )
    return [validate_quantity(quantity) for quantity in quantities]
