from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from cartonizer_core.models import Dims, Sku
from cartonizer_core.units import parse_float

logger = logging.getLogger(__name__)


@dataclass
class Entry:
    """One requested SKU line as typed in by the user."""

    dims: Dims
    quantity: int
    sku_id: Optional[str] = None
    name: Optional[str] = None
    keep_upright: bool = False
    prefer_vertical: bool = False
    side_margin: Optional[float] = None
    front_margin: Optional[float] = None
    top_margin: Optional[float] = None
    gap_xy: Optional[float] = None
    gap_z: Optional[float] = None
    max_stack_layers: Optional[int] = None
    unit_weight_kg: Optional[float] = None


def to_finite_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            parsed = parse_float(value)
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    return None


def resolve_optional_setting(direct: Any, override: Any, default: Any) -> Optional[float]:
    """First finite value of entry, SKU override and general default."""
    for value in (direct, override, default):
        number = to_finite_number(value)
        if number is not None:
            return number
    return None


def resolve_setting(direct: Any, override: Any, default: Any, fallback: float) -> float:
    value = resolve_optional_setting(direct, override, default)
    return fallback if value is None else value


def resolve_boolean(value: Any, fallback: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if value == "true":
        return True
    if value == "false":
        return False
    return fallback


def create_entry(record: Mapping[str, Any]) -> Optional[Entry]:
    """Entry from a loose mapping, ``None`` when dimensions or quantity are unusable."""
    dims_raw = record.get("dims")
    dims = dims_raw if isinstance(dims_raw, Mapping) else record
    w = to_finite_number(dims.get("w"))
    d = to_finite_number(dims.get("d"))
    h = to_finite_number(dims.get("h"))
    quantity = to_finite_number(record.get("quantity"))
    if w is None or d is None or h is None or quantity is None:
        return None
    max_layers = to_finite_number(record.get("maxStackLayers"))
    sku_id = record.get("skuId")
    name = record.get("name")
    return Entry(
        dims=Dims(w, d, h),
        quantity=max(1, int(math.floor(quantity))),
        sku_id=sku_id if isinstance(sku_id, str) and sku_id else None,
        name=name if isinstance(name, str) else None,
        keep_upright=resolve_boolean(record.get("keepUpright")),
        prefer_vertical=resolve_boolean(record.get("preferVertical")),
        side_margin=to_finite_number(record.get("sideMargin")),
        front_margin=to_finite_number(record.get("frontMargin")),
        top_margin=to_finite_number(record.get("topMargin")),
        gap_xy=to_finite_number(record.get("gapXY")),
        gap_z=to_finite_number(record.get("gapZ")),
        max_stack_layers=int(math.floor(max_layers)) if max_layers is not None and max_layers > 0 else None,
        unit_weight_kg=to_finite_number(record.get("unitWeightKg")),
    )


def parse_entries(raw: str) -> List[Entry]:
    """Entries from a JSON list; malformed input gives an empty list."""
    try:
        parsed = json.loads(raw)
    except ValueError:
        logger.warning("Entries are not valid JSON")
        return []
    if not isinstance(parsed, list):
        return []
    entries = []
    for item in parsed:
        if not isinstance(item, dict):
            continue
        entry = create_entry(item)
        if entry is not None:
            entries.append(entry)
    return entries


def build_sku(
    entry: Entry,
    override: Optional[Mapping[str, Any]] = None,
    settings: Optional[Mapping[str, Any]] = None,
) -> Sku:
    """Engine SKU with every unset value taken from the override or the defaults."""
    override = override or {}
    settings = settings or {}
    max_layers = resolve_optional_setting(
        entry.max_stack_layers,
        override.get("maxStackLayers"),
        settings.get("defaultMaxStackLayers"),
    )
    return Sku(
        dims=entry.dims,
        keep_upright=entry.keep_upright,
        prefer_vertical=entry.prefer_vertical,
        side_margin=resolve_setting(
            entry.side_margin, override.get("sideMargin"), settings.get("defaultSideMargin"), 0.0
        ),
        front_margin=resolve_setting(
            entry.front_margin, override.get("frontMargin"), settings.get("defaultFrontMargin"), 0.0
        ),
        top_margin=resolve_setting(
            entry.top_margin, override.get("topMargin"), settings.get("defaultTopMargin"), 0.0
        ),
        gap_xy=resolve_setting(entry.gap_xy, override.get("gapXY"), settings.get("defaultGapXY"), 0.0),
        gap_z=resolve_setting(entry.gap_z, override.get("gapZ"), settings.get("defaultGapZ"), 0.0),
        max_stack_layers=int(max_layers) if max_layers is not None and max_layers > 0 else None,
        unit_weight_kg=entry.unit_weight_kg,
        sku_id=entry.sku_id,
        name=entry.name,
    )


def overrides_for(entry: Entry, overrides: Dict[str, dict]) -> Optional[dict]:
    if entry.sku_id is None:
        return None
    return overrides.get(entry.sku_id)
