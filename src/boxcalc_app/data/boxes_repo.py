import os
import xml.etree.ElementTree as ET
from functools import lru_cache
from typing import Optional, Tuple

from cartonizer_core.models import Box

from .cache import clear_box_cache
from .paths import boxes_xml_path


def _load_xml(path: str) -> ET.Element:
    if not os.path.exists(path):
        raise FileNotFoundError(f"Missing file: {path}")
    try:
        tree = ET.parse(path)
        return tree.getroot()
    except ET.ParseError as e:
        raise ValueError(f"Invalid XML in {path}: {e}")


def _optional_float(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return None
    return float(value)


@lru_cache(maxsize=None)
def load_boxes() -> Tuple[Box, ...]:
    """Box catalog from boxes.xml, in file order."""
    root = _load_xml(boxes_xml_path())
    boxes = []
    for box in root.findall("box"):
        try:
            boxes.append(
                Box(
                    id=int(box.get("id")),
                    W=float(box.get("w")),
                    D=float(box.get("d")),
                    H=float(box.get("h")),
                    max_weight_kg=_optional_float(box.get("max_weight")),
                    box_weight_kg=_optional_float(box.get("weight")) or 0.0,
                )
            )
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid box data '{box.attrib}': {e}")
    return tuple(boxes)


def load_boxes_list() -> list:
    """Load boxes from boxes.xml as a list of dictionaries."""
    root = _load_xml(boxes_xml_path())
    boxes = []
    for box in root.findall("box"):
        boxes.append(
            {
                "id": box.get("id", ""),
                "w": box.get("w", ""),
                "d": box.get("d", ""),
                "h": box.get("h", ""),
                "max_weight": box.get("max_weight", ""),
                "weight": box.get("weight", ""),
            }
        )
    return boxes


def save_boxes(boxes: list) -> None:
    """Save boxes list back to boxes.xml and clear caches."""
    root = ET.Element("boxes")
    for box in boxes:
        ET.SubElement(
            root,
            "box",
            id=str(box.get("id", "")),
            w=str(box.get("w", "")),
            d=str(box.get("d", "")),
            h=str(box.get("h", "")),
            max_weight=str(box.get("max_weight", "")),
            weight=str(box.get("weight", "")),
        )
    tree = ET.ElementTree(root)
    tree.write(boxes_xml_path(), encoding="utf-8", xml_declaration=True)
    clear_box_cache()
