from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

from .units import KG, MM

# (extent along box W, extent along box D, height)
Orientation = Tuple[float, float, float]


class OrientationMode(str, Enum):
    AUTO = "auto"
    VERTICAL = "vertical"
    STACKED = "stacked"
    FLAT = "flat"


@dataclass(frozen=True)
class Box:
    """Candidate shipping carton, inner dimensions in millimetres."""

    id: int
    W: MM
    D: MM
    H: MM
    max_weight_kg: Optional[KG] = None
    box_weight_kg: KG = 0.0

    @property
    def volume(self) -> float:
        return self.W * self.D * self.H


@dataclass(frozen=True)
class Dims:
    w: MM
    d: MM
    h: MM

    def as_tuple(self) -> Orientation:
        return (self.w, self.d, self.h)


@dataclass(frozen=True)
class Sku:
    """Packing profile of one product."""

    dims: Dims
    keep_upright: bool = False
    prefer_vertical: bool = False
    side_margin: MM = 0.0
    front_margin: MM = 0.0
    top_margin: MM = 0.0
    gap_xy: MM = 0.0
    gap_z: MM = 0.0
    max_stack_layers: Optional[int] = None
    unit_weight_kg: Optional[KG] = None
    sku_id: Optional[str] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class UniformGrid:
    count_x: int
    count_y: int
    rotation: int
    orientation: Orientation


@dataclass(frozen=True)
class Block:
    sku_index: int
    count_x: int
    count_y: int
    orientation: Orientation
    offset_x: MM = 0.0
    offset_y: MM = 0.0
    placed: int = 0


@dataclass(frozen=True)
class MixedBlocks:
    blocks: Tuple[Block, ...]


LayerColumns = Union[UniformGrid, MixedBlocks]

LAYOUT_UNIFORM = "uniform"
LAYOUT_MULTI_SKU = "multi_sku"


@dataclass(frozen=True)
class Layer:
    layout_type: str
    columns: LayerColumns
    per_layer_capacity: int
    height: MM = 0.0


@dataclass(frozen=True)
class ShipmentPlan:
    box_id: int
    capacity: int
    void_ratio: float
    layers: int
    per_layer_capacity: int = 0
    orientation: Optional[Orientation] = None
    # Grid counts along box W and D, zero for mixed layers.
    count_x: int = 0
    count_y: int = 0


@dataclass(frozen=True)
class ExtendedShipmentPlan:
    box_id: int
    total_capacity: int
    void_ratio: float
    layers: Tuple[Layer, ...] = ()

    @property
    def capacity(self) -> int:
        return self.total_capacity


@dataclass(frozen=True)
class MultiSkuPlan(ExtendedShipmentPlan):
    sku_quantities: Tuple[int, ...] = ()


Plan = Union[ShipmentPlan, ExtendedShipmentPlan]


@dataclass(frozen=True)
class Shipment:
    plan: Plan
    quantity: int
    sku_quantities: Tuple[int, ...] = ()


@dataclass
class CalculationResult:
    shipments: list = field(default_factory=list)
    leftover: int = 0
    total_quantity: int = 0

    @property
    def shipped(self) -> int:
        return sum(shipment.quantity for shipment in self.shipments)
