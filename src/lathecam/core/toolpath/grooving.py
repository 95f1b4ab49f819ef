"""Grooving: plunges stepped across the groove width, then a floor pass."""

from __future__ import annotations

from dataclasses import dataclass

from ..part import Part
from .base import Toolpath
from .utils import begin_at_safety, lathe_point, retract_to_safety

# Neighbouring plunges overlap by this fraction of the insert width.
PLUNGE_OVERLAP = 0.1


@dataclass
class GroovingParams:
    """Parameters for a radial groove.

    ``groove_z`` is the front wall of the groove; it extends toward -Z by
    ``groove_width``.  ``groove_diameter`` is the surface diameter the
    groove is cut into.  Feed in mm/rev, lengths in mm.
    """

    groove_diameter: float = 20.0
    groove_width: float = 3.0
    groove_depth: float = 2.0
    groove_z: float = -25.0
    tool_width: float = 3.0
    feed_rate: float = 0.02
    spindle_speed: float = 600.0
    is_internal: bool = False
    finishing_pass: bool = True
    safety_height: float = 5.0
    clearance: float = 1.0


def validate_grooving_params(params: GroovingParams) -> str:
    errors: list[str] = []
    if params.groove_diameter <= 0:
        errors.append("Groove diameter must be positive")
    if params.groove_width <= 0:
        errors.append("Groove width must be positive")
    if params.groove_depth <= 0:
        errors.append("Groove depth must be positive")
    if params.tool_width <= 0:
        errors.append("Tool width must be positive")
    elif params.tool_width > params.groove_width:
        errors.append("Tool is wider than the groove")
    if not params.is_internal and params.groove_depth >= params.groove_diameter / 2.0:
        errors.append("Groove depth reaches the axis")
    if params.feed_rate <= 0:
        errors.append("Feed rate must be positive")
    if params.spindle_speed <= 0:
        errors.append("Spindle speed must be positive")
    return "; ".join(errors)


def plunge_positions(params: GroovingParams) -> list[float]:
    """Z of the insert's front edge for every plunge, front to back."""
    last = params.groove_z - (params.groove_width - params.tool_width)
    step = params.tool_width * (1.0 - PLUNGE_OVERLAP)
    positions = [params.groove_z]
    if not step > 0:
        step = max(params.groove_z - last, 0.0) or 1.0
    z = params.groove_z - step
    while z > last + 1e-9:
        positions.append(round(z, 10))
        z -= step
    if positions[-1] > last + 1e-9:
        positions.append(last)
    return positions


def generate_grooving_toolpath(
    part: Part,
    params: GroovingParams,
    name: str = "Grooving",
    tool_number: int = 1,
) -> Toolpath:
    tp = Toolpath(name=name, tool_number=tool_number, operation_type="grooving")
    away = -1.0 if params.is_internal else 1.0
    surface_r = params.groove_diameter / 2.0
    floor_r = surface_r - away * params.groove_depth
    approach_r = surface_r + away * params.clearance
    feed = params.feed_rate * params.spindle_speed

    bbox = part.bounding_box()
    front = bbox.max.z if bbox.is_valid else params.groove_z
    z_safe = max(front, params.groove_z) + params.safety_height
    safe_r = surface_r + params.safety_height if away > 0 else max(0.0, approach_r)

    begin_at_safety(tp, safe_r, z_safe)
    positions = plunge_positions(params)
    for n, z in enumerate(positions, start=1):
        tp.add_rapid(lathe_point(approach_r, z), comment=f"Groove plunge {n}")
        tp.add_linear(lathe_point(floor_r, z), feed, params.spindle_speed)
        tp.add_dwell(0.1)
        tp.add_rapid(lathe_point(approach_r, z))

    if params.finishing_pass and len(positions) > 1:
        tp.add_rapid(lathe_point(approach_r, positions[0]), comment="Groove floor pass")
        tp.add_linear(lathe_point(floor_r, positions[0]), feed)
        tp.add_linear(lathe_point(floor_r, positions[-1]), feed)
        tp.add_rapid(lathe_point(approach_r, positions[-1]))

    tp.add_rapid(lathe_point(safe_r, tp.current_position.z))
    retract_to_safety(tp, z_safe)
    return tp
