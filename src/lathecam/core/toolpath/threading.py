"""Single-point threading with a linear infeed ramp."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from ..part import Part
from .base import Toolpath
from .utils import begin_at_safety, lathe_point, retract_to_safety

# Depth of a 60 degree external thread as a fraction of pitch (ISO 68-1).
THREAD_DEPTH_FACTOR = 0.613

_METRIC = re.compile(r"^M(\d+(?:\.\d+)?)(?:\s*[xX]\s*(\d+(?:\.\d+)?))?$")
_UNIFIED = re.compile(r"^(\d+(?:/\d+)?(?:\.\d+)?)\s*-\s*(\d+)(?:\s*UN[CFE]?)?$", re.IGNORECASE)


@dataclass
class ThreadingParams:
    """Parameters for a threading cycle.

    Lengths in mm, speed in rpm.  ``thread_depth`` of None means
    ``0.613 * pitch``.  The thread runs from ``start_z`` toward -Z.
    """

    major_diameter: float = 20.0
    pitch: float = 1.5
    thread_length: float = 30.0
    start_z: float = 0.0
    number_of_passes: int = 5
    spring_passes: int = 1
    thread_depth: Optional[float] = None
    spindle_speed: float = 400.0
    is_internal: bool = False
    is_metric: bool = True
    lead_in: float = 2.0
    safety_height: float = 5.0
    clearance: float = 1.0

    @property
    def depth(self) -> float:
        if self.thread_depth is not None:
            return self.thread_depth
        return THREAD_DEPTH_FACTOR * self.pitch


def metric_coarse_pitch(diameter: float) -> float:
    """Default pitch for a bare metric designation such as ``M10``."""
    if diameter <= 6:
        return 1.0
    if diameter <= 12:
        return 1.25
    if diameter <= 20:
        return 1.5
    return 2.0


def parse_thread_designation(text: str) -> tuple[float, float, bool]:
    """Return ``(major_diameter_mm, pitch_mm, is_metric)``.

    Accepts ``M20x1.5``, ``M20`` (coarse pitch) and unified forms such as
    ``1/4-20`` or ``0.5-13 UNC`` (converted from inches/TPI).

    Raises
    ------
    ValueError:
        If *text* is not a recognised designation.
    """
    designation = text.strip()
    m = _METRIC.match(designation.upper())
    if m:
        diameter = float(m.group(1))
        pitch = float(m.group(2)) if m.group(2) else metric_coarse_pitch(diameter)
        return diameter, pitch, True
    m = _UNIFIED.match(designation)
    if m:
        size = m.group(1)
        if "/" in size:
            num, den = size.split("/")
            inches = float(num) / float(den)
        else:
            inches = float(size)
        tpi = int(m.group(2))
        if tpi <= 0:
            raise ValueError(f"Invalid threads per inch in {text!r}")
        return inches * 25.4, 25.4 / tpi, False
    raise ValueError(f"Unrecognised thread designation: {text!r}")


def validate_threading_params(params: ThreadingParams) -> str:
    errors: list[str] = []
    if params.major_diameter <= 0:
        errors.append("Major diameter must be positive")
    if params.pitch <= 0:
        errors.append("Pitch must be positive")
    if params.thread_length <= 0:
        errors.append("Thread length must be positive")
    if params.number_of_passes < 1:
        errors.append("Number of passes must be at least 1")
    if params.spring_passes < 0:
        errors.append("Spring passes cannot be negative")
    if params.depth <= 0:
        errors.append("Thread depth must be positive")
    elif params.depth >= params.major_diameter / 2.0:
        errors.append("Thread depth exceeds the major radius")
    if params.spindle_speed <= 0:
        errors.append("Spindle speed must be positive")
    return "; ".join(errors)


def pass_depths(params: ThreadingParams) -> list[float]:
    """Cumulative infeed per pass, ramping linearly up to full depth."""
    n = params.number_of_passes
    depths = [params.depth * k / n for k in range(1, n + 1)]
    return depths + [params.depth] * params.spring_passes


def generate_threading_toolpath(
    part: Part,
    params: ThreadingParams,
    name: str = "Threading",
    tool_number: int = 1,
) -> Toolpath:
    tp = Toolpath(name=name, tool_number=tool_number, operation_type="threading")
    away = -1.0 if params.is_internal else 1.0
    # external threads start at the major radius, internal at the minor
    start_r = params.major_diameter / 2.0
    if params.is_internal:
        start_r -= params.depth
    clear_r = max(0.0, start_r + away * params.clearance)
    z_begin = params.start_z + params.lead_in
    z_end = params.start_z - params.thread_length
    z_safe = params.start_z + params.safety_height

    begin_at_safety(tp, start_r + params.safety_height if away > 0 else clear_r, z_safe)
    for n, depth in enumerate(pass_depths(params), start=1):
        r = start_r - away * depth
        label = f"Thread pass {n}" if n <= params.number_of_passes else "Thread spring pass"
        tp.add_rapid(lathe_point(clear_r, z_begin), comment=label)
        tp.add_rapid(lathe_point(r, z_begin))
        tp.add_threading_move(lathe_point(r, z_end), params.pitch, params.spindle_speed)
        tp.add_rapid(lathe_point(clear_r, z_end))
    tp.add_rapid(lathe_point(clear_r, z_begin))
    retract_to_safety(tp, z_safe)
    return tp
