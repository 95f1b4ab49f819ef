"""Axial drilling on the spindle centreline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..part import Part
from .base import Toolpath
from .utils import begin_at_safety, compute_pass_levels, lathe_point, retract_to_safety

CHIP_BREAK_DWELL = 0.2   # s, between pecks
DEEP_HOLE_DWELL = 0.5    # s, after each full retract


class DrillingStrategy(Enum):
    SIMPLE = "simple"        # one feed to depth
    PECK = "peck"            # partial retract between pecks
    DEEP_HOLE = "deep_hole"  # half-size pecks with full retract


@dataclass
class DrillingParams:
    """Parameters for a centreline hole.

    Lengths in mm, feed mm/min, speed rpm, dwell seconds.  The hole starts
    at ``start_z`` and goes ``hole_depth`` toward -Z.
    """

    hole_diameter: float = 6.0
    hole_depth: float = 20.0
    peck_depth: float = 5.0
    retract_height: float = 2.0
    dwell_time: float = 0.5          # at the bottom of the hole
    strategy: DrillingStrategy = DrillingStrategy.PECK
    feed_rate: float = 100.0
    spindle_speed: float = 1200.0
    safety_height: float = 5.0
    start_z: float = 0.0


def validate_drilling_params(params: DrillingParams) -> str:
    errors: list[str] = []
    if params.hole_diameter <= 0:
        errors.append("Hole diameter must be positive")
    elif params.hole_diameter > 50.0:
        errors.append("Hole diameter seems excessive (>50mm)")
    if params.hole_depth <= 0:
        errors.append("Hole depth must be positive")
    elif params.hole_depth > 200.0:
        errors.append("Hole depth seems excessive (>200mm)")
    if params.strategy is not DrillingStrategy.SIMPLE:
        if params.peck_depth <= 0:
            errors.append("Peck depth must be positive")
        elif params.peck_depth > params.hole_depth:
            errors.append("Peck depth cannot exceed hole depth")
    if params.retract_height < 0:
        errors.append("Retract height cannot be negative")
    if params.feed_rate <= 0:
        errors.append("Feed rate must be positive")
    if params.spindle_speed <= 0:
        errors.append("Spindle speed must be positive")
    return "; ".join(errors)


def generate_drilling_toolpath(
    part: Part,
    params: DrillingParams,
    name: str = "Drilling",
    tool_number: int = 1,
) -> Toolpath:
    tp = Toolpath(name=name, tool_number=tool_number, operation_type="drilling")
    z_safe = params.start_z + params.safety_height
    z_approach = params.start_z + params.retract_height
    bottom = params.start_z - params.hole_depth
    feed = params.feed_rate

    begin_at_safety(tp, 0.0, z_safe, label="Rapid to hole centre")
    tp.add_rapid(lathe_point(0.0, z_approach))

    if params.strategy is DrillingStrategy.SIMPLE:
        tp.add_linear(lathe_point(0.0, bottom), feed, params.spindle_speed, comment="Drill")
    else:
        deep = params.strategy is DrillingStrategy.DEEP_HOLE
        peck = params.peck_depth * (0.5 if deep else 1.0)
        levels = compute_pass_levels(params.start_z, bottom, peck)
        previous = params.start_z
        for n, z in enumerate(levels, start=1):
            # rapid back down to just above the previous peck
            if n > 1:
                tp.add_rapid(lathe_point(0.0, previous + min(params.retract_height, peck)))
            tp.add_linear(lathe_point(0.0, z), feed, params.spindle_speed, comment=f"Peck {n}")
            if z == bottom:
                break
            if deep:
                tp.add_rapid(lathe_point(0.0, z_safe), comment="Clear chips")
                tp.add_dwell(DEEP_HOLE_DWELL)
            else:
                tp.add_rapid(lathe_point(0.0, z + params.retract_height))
                tp.add_dwell(CHIP_BREAK_DWELL)
            previous = z

    if params.dwell_time > 0:
        tp.add_dwell(params.dwell_time, comment="Dwell at hole bottom")
    retract_to_safety(tp, z_safe, radius=0.0)
    return tp
