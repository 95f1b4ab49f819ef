"""Facing: radial passes across the front face of the part."""

from __future__ import annotations

from dataclasses import dataclass

from ..part import Part
from .base import Toolpath
from .utils import begin_at_safety, front_face_z, lathe_point, retract_to_safety


@dataclass
class FacingParams:
    """Parameters for facing.

    Diameters, stepover, allowance and heights in mm; feed in mm/min;
    speed in rpm.
    """

    start_diameter: float = 50.0   # outer diameter where the sweep starts
    end_diameter: float = 0.0      # 0 faces to the centre
    stepover: float = 0.5          # radial length per pass, > 0
    stock_allowance: float = 0.2   # left on the face when roughing_only
    roughing_only: bool = False
    feed_rate: float = 100.0
    spindle_speed: float = 1000.0
    safety_height: float = 5.0
    clearance: float = 1.0         # approach gap in front of the face


def validate_facing_params(params: FacingParams) -> str:
    """Return an error message, or "" when *params* are usable."""
    if params.start_diameter <= 0:
        return "Start diameter must be positive"
    if params.end_diameter < 0:
        return "End diameter cannot be negative"
    if params.start_diameter <= params.end_diameter:
        return "Start diameter must be greater than end diameter"
    if params.stepover <= 0:
        return "Stepover must be positive"
    if params.stepover > (params.start_diameter - params.end_diameter) / 2.0:
        return "Stepover is larger than the radial distance to face"
    if params.stock_allowance < 0:
        return "Stock allowance cannot be negative"
    if params.stock_allowance > 5.0:
        return "Stock allowance seems excessive (>5mm)"
    if params.feed_rate <= 0:
        return "Feed rate must be positive"
    if params.spindle_speed <= 0:
        return "Spindle speed must be positive"
    return ""


def generate_facing_toolpath(
    part: Part,
    params: FacingParams,
    name: str = "Facing",
    tool_number: int = 1,
) -> Toolpath:
    """Face the part's front plane from the outside in.

    Each pass approaches in front of the face, feeds onto it and sweeps
    inward by one stepover.  The last pass always ends exactly at
    ``end_diameter / 2``; the closing retract keeps that radius.
    """
    tp = Toolpath(name=name, tool_number=tool_number, operation_type="facing")

    face_z = front_face_z(part.bounding_box())
    if params.roughing_only:
        face_z += params.stock_allowance
    z_safe = face_z + params.safety_height
    z_approach = face_z + params.clearance

    start_r = params.start_diameter / 2.0
    end_r = params.end_diameter / 2.0
    feed = params.feed_rate

    begin_at_safety(tp, start_r + params.safety_height, z_safe)

    # a non-positive stepover faces in one pass
    step = params.stepover if params.stepover > 0 else start_r - end_r
    r = start_r
    pass_no = 0
    while r > end_r:
        pass_no += 1
        next_r = max(end_r, r - step)
        tp.add_rapid(lathe_point(r, z_approach), comment=f"Facing pass {pass_no}")
        tp.add_linear(lathe_point(r, face_z), feed, params.spindle_speed)
        tp.add_linear(lathe_point(next_r, face_z), feed)
        tp.add_rapid(lathe_point(next_r, z_approach))
        r = next_r

    retract_to_safety(tp, z_safe, radius=end_r)
    return tp
