"""Parting: a single radial plunge that cuts the part off the bar."""

from __future__ import annotations

import math
from dataclasses import dataclass

from ..part import Part
from .base import Toolpath
from .utils import begin_at_safety, lathe_point, retract_to_safety


@dataclass
class PartingParams:
    """Parameters for parting off.

    ``feed_rate`` is in mm/rev (blades are fed per revolution); lengths mm.
    ``parting_z`` is the axial position of the blade's cutting edge.
    """

    parting_diameter: float = 20.0
    parting_z: float = -50.0
    center_hole_diameter: float = 0.0   # 0 for solid stock
    parting_width: float = 3.0          # blade width
    feed_rate: float = 0.05
    spindle_speed: float = 800.0
    retract_distance: float = 2.0
    safety_height: float = 5.0
    clearance: float = 1.0

    @property
    def feed_per_minute(self) -> float:
        return self.feed_rate * self.spindle_speed


def validate_parting_params(params: PartingParams) -> str:
    if params.parting_diameter <= 0:
        return "Parting diameter must be positive"
    if params.center_hole_diameter < 0:
        return "Center hole diameter cannot be negative"
    if params.parting_diameter <= params.center_hole_diameter:
        return "Parting diameter must be greater than center hole diameter"
    if params.parting_width <= 0:
        return "Parting width must be positive"
    if params.feed_rate <= 0:
        return "Feed rate must be positive"
    if params.spindle_speed <= 0:
        return "Spindle speed must be positive"
    if params.retract_distance < 0:
        return "Retract distance cannot be negative"
    return ""


def estimate_parting_time(params: PartingParams) -> float:
    """Minutes spent feeding through the plunge."""
    depth = (params.parting_diameter - params.center_hole_diameter) / 2.0
    return depth / params.feed_per_minute


def material_removed(params: PartingParams) -> float:
    """Volume (mm^3) of the ring removed by the blade."""
    outer = params.parting_diameter / 2.0
    inner = params.center_hole_diameter / 2.0
    return math.pi * (outer ** 2 - inner ** 2) * params.parting_width


def generate_parting_toolpath(
    part: Part,
    params: PartingParams,
    name: str = "Parting",
    tool_number: int = 1,
) -> Toolpath:
    """Plunge from ``parting_diameter/2`` to ``center_hole_diameter/2``.

    The part is not consulted; the safety plane is taken in front of the
    bar using the part's front face when available.
    """
    tp = Toolpath(name=name, tool_number=tool_number, operation_type="parting")
    outer_r = params.parting_diameter / 2.0
    inner_r = params.center_hole_diameter / 2.0
    bbox = part.bounding_box()
    front = bbox.max.z if bbox.is_valid else params.parting_z
    z_safe = max(front, params.parting_z) + params.safety_height
    outside = outer_r + params.safety_height
    feed = params.feed_per_minute

    begin_at_safety(tp, outside, z_safe)
    tp.add_rapid(lathe_point(outside, params.parting_z), comment="Position parting blade")
    tp.add_rapid(lathe_point(outer_r + params.clearance, params.parting_z))
    tp.add_linear(lathe_point(outer_r, params.parting_z), feed, params.spindle_speed)
    tp.add_linear(lathe_point(inner_r, params.parting_z), feed, comment="Part off")
    tp.add_rapid(lathe_point(inner_r + params.retract_distance, params.parting_z))
    tp.add_rapid(lathe_point(outside, params.parting_z))
    retract_to_safety(tp, z_safe)
    return tp
