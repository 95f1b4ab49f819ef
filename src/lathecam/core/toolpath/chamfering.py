"""Chamfering: linear or segmented-radius edge breaks."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from ..geometry import Point2D
from ..part import Part
from .base import Toolpath
from .utils import begin_at_safety, lathe_point, retract_to_safety


class ChamferType(Enum):
    LINEAR = "linear"              # 45 degree style, size along the face
    RADIUS = "radius"              # rounded corner approximated by segments
    CUSTOM_ANGLE = "custom_angle"  # linear at chamfer_angle


@dataclass
class ChamferingParams:
    """Parameters for an edge chamfer.

    Sizes in mm, angle in degrees from the axis, feed mm/min, speed rpm.
    External chamfers reduce the diameter (``start_diameter >
    end_diameter``), internal ones open a bore (``start < end``).
    """

    chamfer_type: ChamferType = ChamferType.LINEAR
    chamfer_size: float = 0.5
    chamfer_angle: float = 45.0
    start_z: float = 0.0
    start_diameter: float = 20.0
    end_diameter: float = 18.0
    is_external: bool = True
    feed_rate: float = 100.0
    spindle_speed: float = 1000.0
    safety_height: float = 5.0
    clearance: float = 1.0
    arc_segments: int = 8


def validate_chamfering_params(params: ChamferingParams) -> str:
    errors: list[str] = []
    if params.chamfer_size <= 0:
        errors.append("Chamfer size must be positive")
    elif params.chamfer_size > 10.0:
        errors.append("Chamfer size seems excessive (>10mm)")
    if params.chamfer_angle <= 0 or params.chamfer_angle >= 90:
        errors.append("Chamfer angle must be between 0 and 90 degrees")
    if params.start_diameter <= 0 or params.end_diameter <= 0:
        errors.append("Diameters must be positive")
    if params.is_external and params.start_diameter <= params.end_diameter:
        errors.append("External chamfer requires start diameter greater than end diameter")
    if not params.is_external and params.start_diameter >= params.end_diameter:
        errors.append("Internal chamfer requires start diameter less than end diameter")
    if params.feed_rate <= 0:
        errors.append("Feed rate must be positive")
    if params.spindle_speed <= 0:
        errors.append("Spindle speed must be positive")
    if params.arc_segments < 1:
        errors.append("Arc segments must be at least 1")
    return "; ".join(errors)


def chamfer_profile(params: ChamferingParams) -> list[Point2D]:
    """Edge contour from the start corner to the end of the chamfer."""
    sign = -1.0 if params.is_external else 1.0
    start_r = params.start_diameter / 2.0
    start = Point2D(start_r, params.start_z)

    if params.chamfer_type is ChamferType.RADIUS:
        radius = params.chamfer_size
        pts = [start]
        for i in range(1, params.arc_segments + 1):
            a = (math.pi / 2.0) * i / params.arc_segments
            pts.append(Point2D(
                start_r + sign * radius * math.sin(a),
                params.start_z - radius * (1.0 - math.cos(a)),
            ))
        return pts

    angle = 45.0 if params.chamfer_type is ChamferType.LINEAR else params.chamfer_angle
    a = math.radians(angle)
    dz = params.chamfer_size * math.cos(a)
    dr = params.chamfer_size * math.sin(a)
    return [start, Point2D(start_r + sign * dr, params.start_z - dz)]


def generate_chamfering_toolpath(
    part: Part,
    params: ChamferingParams,
    name: str = "Chamfering",
    tool_number: int = 1,
) -> Toolpath:
    tp = Toolpath(name=name, tool_number=tool_number, operation_type="chamfering")
    away = 1.0 if params.is_external else -1.0
    pts = chamfer_profile(params)
    z_safe = params.start_z + params.safety_height
    outer = max(p.x for p in pts) if params.is_external else min(p.x for p in pts)
    clear_r = max(0.0, outer + away * params.clearance)
    safe_r = outer + params.safety_height if params.is_external else clear_r

    begin_at_safety(tp, safe_r, z_safe)
    tp.add_rapid(lathe_point(pts[0].x, params.start_z + params.clearance), comment="Chamfer")
    tp.add_linear(lathe_point(pts[0].x, pts[0].z), params.feed_rate, params.spindle_speed)
    for p in pts[1:]:
        tp.add_linear(lathe_point(p.x, p.z), params.feed_rate)
    tp.add_rapid(lathe_point(clear_r, pts[-1].z))
    retract_to_safety(tp, z_safe)
    return tp
