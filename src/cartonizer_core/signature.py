from __future__ import annotations

from typing import Iterable, Union

from .models import CalculationResult, Shipment


def shipment_signature(shipment: Shipment) -> str:
    plan = shipment.plan
    return f"{plan.box_id}:{shipment.quantity}:{plan.capacity}:{plan.void_ratio!r}"


def shipments_key(result: Union[CalculationResult, Iterable[Shipment]]) -> str:
    """Stable key for a shipment list, usable as a cache key."""
    shipments = result.shipments if isinstance(result, CalculationResult) else result
    return "|".join(shipment_signature(shipment) for shipment in shipments)
