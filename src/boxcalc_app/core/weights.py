from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from cartonizer_core.models import Box, Sku

MM3_PER_M3 = 1_000_000_000


@dataclass(frozen=True)
class ShipmentWeights:
    product_kg: float
    box_kg: float
    packaging_kg: float

    @property
    def total_kg(self) -> float:
        return self.product_kg + self.box_kg + self.packaging_kg


def calculate_weights(
    sku: Sku, quantity: int, box: Optional[Box], packaging_multiplier: float
) -> ShipmentWeights:
    """Product, empty box and packaging material weight of one shipment.

    Packaging material is estimated from the inner box volume in cubic
    metres times ``packaging_multiplier``.
    """
    product = (sku.unit_weight_kg or 0.0) * quantity
    if box is None:
        return ShipmentWeights(product, 0.0, 0.0)
    packaging = box.volume / MM3_PER_M3 * packaging_multiplier
    return ShipmentWeights(product, box.box_weight_kg or 0.0, packaging)
