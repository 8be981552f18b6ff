"""
Command line box calculator.

Usage:
    python -m boxcalc_app entries.json
    python -m boxcalc_app entries.json --box-id 3 --mode 0=vertical --trace
    python -m boxcalc_app entries.json --quantity-plan 50 --csv plan.csv
"""

import argparse
import logging
import sys
from importlib import metadata
from typing import Dict, List, Optional

from cartonizer_core import CalculationResult, CalculationTrace, OrientationMode, shipments_key
from cartonizer_core.units import format_float, format_void_ratio

from boxcalc_app.core.calculator import CalculationReport, calculate
from boxcalc_app.core.entries import Entry, parse_entries
from boxcalc_app.core.quantity_plan import (
    QuantityGroup,
    quantity_plan_for_entry,
    write_quantity_plan_csv,
)

logger = logging.getLogger(__name__)


def _get_app_version() -> str:
    for distribution in ("boxcalc", "boxcalc_app"):
        try:
            return metadata.version(distribution)
        except metadata.PackageNotFoundError:
            continue
    return "dev"


def _parse_modes(values: List[str]) -> Dict[int, OrientationMode]:
    modes: Dict[int, OrientationMode] = {}
    for value in values:
        index, _, mode = value.partition("=")
        try:
            modes[int(index)] = OrientationMode(mode.strip())
        except ValueError:
            raise argparse.ArgumentTypeError(f"invalid --mode {value!r}, expected INDEX=MODE")
    return modes


def _describe(result: CalculationResult) -> List[str]:
    lines = []
    for shipment in result.shipments:
        plan = shipment.plan
        lines.append(
            f"    box {plan.box_id}: {shipment.quantity}/{plan.capacity} units, "
            f"void {format_void_ratio(plan.void_ratio)}"
        )
    lines.append(f"    leftover: {result.leftover}")
    return lines


def render_report(report: CalculationReport) -> str:
    lines = []
    for index, item in enumerate(report.skus):
        label = item.entry.name or item.entry.sku_id or f"#{index}"
        lines.append(f"SKU {label} x{item.entry.quantity} ({item.mode.value})")
        lines.extend(_describe(item.standard))
        single = item.single_box.shipments
        if single:
            lines.append(f"    single box: {single[0].plan.box_id}")
        else:
            lines.append("    single box: none")
        total_kg = sum(weights.total_kg for weights in item.weights)
        lines.append(f"    weight: {format_float(total_kg)} kg")
    lines.append(
        f"Total: {report.total_quantity} units, {report.total_boxes} boxes, "
        f"leftover {report.total_leftover}"
    )
    if report.multi is not None:
        best = report.multi.best
        lines.append(f"Combined ({best.label}):")
        lines.extend(_describe(best.extended))
        lines.append(f"    key: {shipments_key(best.extended) or '-'}")
        single = report.multi.single_box
        if single is not None:
            lines.append(
                f"    single box: {single.box_id} ({report.multi.single_box_label}), "
                f"void {format_void_ratio(single.void_ratio)}"
            )
        else:
            lines.append("    single box: none")
    return "\n".join(lines)


def render_quantity_plan(entry: Entry, groups: List[QuantityGroup]) -> str:
    label = entry.name or entry.sku_id or "#0"
    lines = [f"Quantity plan for SKU {label}"]
    for group in groups:
        plan = group.plan
        if plan is None:
            lines.append(f"    {group.label}: no single box")
            continue
        lines.append(
            f"    {group.label}: box {plan.box_id}, capacity {plan.capacity}, "
            f"efficiency {format_void_ratio(1 - plan.void_ratio)}"
        )
    return "\n".join(lines)


def run_quantity_plan(
    entry: Entry, max_quantity: int, box_id: Optional[int], csv_path: Optional[str]
) -> int:
    try:
        _, groups = quantity_plan_for_entry(entry, max_quantity, box_id=box_id)
    except (OSError, ValueError):
        logger.exception("Quantity plan failed")
        return 1
    print(render_quantity_plan(entry, groups))
    if csv_path:
        try:
            with open(csv_path, "w", newline="", encoding="utf-8") as f:
                write_quantity_plan_csv(groups, f)
        except OSError:
            logger.exception("Failed to write %s", csv_path)
            return 1
        logger.info("Wrote %d rows to %s", len(groups), csv_path)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="boxcalc",
        description="Compute shipping boxes for a list of SKU entries.",
    )
    parser.add_argument("entries", help="JSON file with a list of entries")
    parser.add_argument("--box-id", type=int, default=None, help="Only use this box")
    parser.add_argument(
        "--mode",
        action="append",
        default=[],
        help="Orientation mode per entry, INDEX=auto|vertical|stacked|flat",
    )
    parser.add_argument(
        "--quantity-plan",
        type=int,
        metavar="N",
        default=None,
        help="Recommended box per quantity 1..N for the first entry (N capped at 500)",
    )
    parser.add_argument("--csv", default=None, help="Write the quantity plan as CSV to this path")
    parser.add_argument("--trace", action="store_true", help="Print the calculation trace")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=_get_app_version())
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        modes = _parse_modes(args.mode)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))
    if args.csv and args.quantity_plan is None:
        parser.error("--csv requires --quantity-plan")

    try:
        with open(args.entries, "r", encoding="utf-8") as f:
            entries = parse_entries(f.read())
    except OSError:
        logger.exception("Failed to read entries from %s", args.entries)
        return 1
    if not entries:
        logger.error("No usable entries in %s", args.entries)
        return 1

    if args.quantity_plan is not None:
        return run_quantity_plan(entries[0], args.quantity_plan, args.box_id, args.csv)

    trace = CalculationTrace(enabled=args.trace)
    try:
        report = calculate(entries, modes=modes, box_id=args.box_id, trace=trace)
    except (OSError, ValueError):
        logger.exception("Calculation failed")
        return 1

    print(render_report(report))
    if args.trace:
        print("\n".join(report.logs))
    return 0


if __name__ == "__main__":
    sys.exit(main())
