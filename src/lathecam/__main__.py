"""CLI entry point: ``python -m lathecam part.stl -o part.nc``"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config.defaults import build_default_tool_library
from .config.settings import AppSettings
from .core.job import Job
from .core.recommend import Material, planner_parameters
from .core.stock import Stock
from .core.tool import ToolLibrary
from .core.units import Units
from .gcode.machine import MachineType, PostProcessorOptions


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="lathecam",
        description="Plan lathe toolpaths for a revolved part and write G-code.",
    )
    p.add_argument("input", type=Path,
                   help="Finished part mesh (STL, OBJ, PLY, ...), turning axis along Z")
    p.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Output program (default: <input>.nc)",
    )
    p.add_argument(
        "--machine", choices=[m.value for m in MachineType], default=None,
        help="Controller family (default: from settings, else generic)",
    )
    p.add_argument(
        "--units", choices=["mm", "inch"], default=None,
        help="Output units (default: from settings, else mm)",
    )
    p.add_argument(
        "--material", choices=[m.value for m in Material], default=None,
        help="Workpiece material preset (default: from settings, else steel)",
    )

    # Tooling
    p.add_argument("--tool-number", type=int, default=1,
                   help="Turning tool number (default: 1)")
    p.add_argument("--tool-library", type=Path, default=None,
                   help="JSON tool library (default: built-in lathe tools)")

    # Stock (optional)
    p.add_argument("--stock-diameter", type=float, default=None,
                   help="Bar diameter in mm (default: part diameter + 2 x margin)")
    p.add_argument("--stock-length", type=float, default=None,
                   help="Bar length in mm (default: part length + face/parting margins)")
    p.add_argument("--stock-margin", type=float, default=1.0,
                   help="Radial and face margin for auto stock in mm (default: 1.0)")

    # Planner
    p.add_argument("--depth-of-cut", type=float, default=None,
                   help="Radial roughing depth of cut in mm (default: material preset)")
    p.add_argument("--finish-allowance", type=float, default=None,
                   help="Stock left for finishing in mm (default: 0.2)")
    p.add_argument("--no-profile-following", action="store_true",
                   help="Rough with straight passes instead of following the profile")

    # Output
    p.add_argument("--line-numbers", action="store_true", help="Emit N words")
    p.add_argument("--no-comments", action="store_true", help="Omit comments")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    return p


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    settings = AppSettings.load()
    machine = MachineType(args.machine or settings.default_machine)
    units = Units.parse(args.units or settings.default_units)
    material = Material(args.material or settings.default_material)

    # Resolve output path
    output: Path = args.output or args.input.with_suffix(".nc")

    # Tooling
    if args.tool_library is not None:
        library = ToolLibrary(args.tool_library)
    else:
        library = build_default_tool_library()
    if args.tool_number not in library:
        print(f"Error: tool T{args.tool_number} not found in tool library", file=sys.stderr)
        return 1

    # Load part
    job = Job(name=args.input.stem, units=units, machine_type=machine, tool_library=library)
    print(f"Loading {args.input} ...")
    try:
        part = job.load_part(args.input)
    except (FileNotFoundError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    if part.was_repaired:
        print("  Warning: mesh was repaired (may not be watertight)")
    bbox = part.bounding_box()
    print(f"  Max diameter: {2.0 * bbox.max_radius:.3f} mm  Length: {bbox.size.z:.3f} mm")

    # Stock (auto from part bounds + margin)
    stock = Stock.from_part_bounds(bbox, radial_margin=args.stock_margin,
                                   face_margin=args.stock_margin)
    if args.stock_diameter is not None:
        stock.diameter = args.stock_diameter
    if args.stock_length is not None:
        stock.length = args.stock_length
    job.stock = stock
    print(f"Stock: {stock.diameter:.3f} mm dia x {stock.length:.3f} mm")

    # Planner parameters
    params = planner_parameters(material)
    params.tool_number = args.tool_number
    params.use_profile_following = not args.no_profile_following
    if args.depth_of_cut is not None:
        params.roughing_depth_of_cut = args.depth_of_cut
    if args.finish_allowance is not None:
        params.finishing_allowance = args.finish_allowance
    job.planner_params = params
    job.options = PostProcessorOptions(
        include_comments=not args.no_comments,
        include_line_numbers=args.line_numbers,
    )

    # Compute toolpaths
    print("Computing toolpaths ...")
    plan = job.compute_toolpaths()
    total_moves = sum(len(tp) for tp in plan.toolpaths)
    print(f"  Generated {len(plan.toolpaths)} operations, {total_moves} total movements")
    for message in plan.warnings:
        print(f"  Warning: {message}")
    for error in plan.errors:
        print(f"  ERROR: {error}", file=sys.stderr)

    # Generate G-code
    result = job.post_process(output)
    for message in result.warnings:
        print(f"  Warning: {message}")
    if not result.success:
        print("POST-PROCESSING ERRORS:", file=sys.stderr)
        for message in result.errors:
            print(f"  ERROR: {message}", file=sys.stderr)
        return 1

    print(f"Estimated cycle time: {result.estimated_time:.1f} min")
    print(f"Wrote {output}")
    return 0 if plan.ok else 2


if __name__ == "__main__":
    sys.exit(main())
