"""Roughing: bulk removal between the stock and the part envelope.

External roughing cuts inward from the bar diameter, internal roughing cuts
outward from a pre-drilled bore.  Three pass layouts are available:

* **profile following**: radial passes capped by ``depth_of_cut``, each
  clamped to the part profile plus ``stock_allowance`` so no move enters
  the finished envelope;
* **radial**: straight longitudinal passes stepping by ``stepover``;
* **axial**: face-style slabs of ``depth_of_cut`` when the region is much
  longer than it is deep.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass
from typing import Optional

from shapely.geometry import LineString

from ..geometry import Point2D
from ..part import Part
from ..profile import Profile2D
from ..profile_extractor import extract_internal_profile, extract_profile
from .base import Toolpath
from .utils import begin_at_safety, compute_pass_levels, lathe_point, retract_to_safety


@dataclass
class RoughingParams:
    """Parameters for external or internal roughing.

    Diameters and lengths in mm, feed in mm/min, speed in rpm, dwell in s.
    For external work ``start_diameter > end_diameter``; for internal work
    (``is_internal``) the bore grows, so ``start_diameter < end_diameter``.
    ``start_z`` is the front of the region and must exceed ``end_z``.
    """

    start_diameter: float = 50.0
    end_diameter: float = 20.0
    start_z: float = 0.0
    end_z: float = -40.0
    depth_of_cut: float = 2.0         # radial depth per profile/axial pass
    stepover: float = 1.5             # radial step of straight passes
    stock_allowance: float = 0.5      # left for finishing
    feed_rate: float = 120.0
    spindle_speed: float = 800.0
    safety_height: float = 5.0
    clearance: float = 1.0
    is_internal: bool = False
    use_profile_following: bool = True
    enable_chip_breaking: bool = True
    chip_break_distance: float = 0.5
    chip_break_dwell: float = 0.2
    profile_tolerance: float = 0.01

    @property
    def target_radius(self) -> float:
        """Innermost (outermost, internal) radius any pass may reach."""
        r = self.end_diameter / 2.0
        return r - self.stock_allowance if self.is_internal else r + self.stock_allowance


def validate_roughing_params(params: RoughingParams) -> str:
    """Return all problems with *params* joined by "; " ("" when valid)."""
    errors: list[str] = []
    if params.start_diameter <= 0:
        errors.append("Start diameter must be positive")
    if params.end_diameter <= 0:
        errors.append("End diameter must be positive")
    if params.is_internal:
        if params.end_diameter <= params.start_diameter:
            errors.append("End diameter must be greater than start diameter for internal roughing")
    elif params.start_diameter <= params.end_diameter:
        errors.append("Start diameter must be greater than end diameter")
    if params.start_z <= params.end_z:
        errors.append("Start Z must be greater than end Z")
    if params.depth_of_cut <= 0:
        errors.append("Depth of cut must be positive")
    if params.stepover <= 0:
        errors.append("Stepover must be positive")
    if params.stock_allowance < 0:
        errors.append("Stock allowance cannot be negative")
    if abs(params.start_diameter - params.end_diameter) / 2.0 <= params.stock_allowance:
        errors.append("Stock allowance exceeds material to be removed")
    if params.feed_rate <= 0:
        errors.append("Feed rate must be positive")
    if params.spindle_speed <= 0:
        errors.append("Spindle speed must be positive")
    if params.chip_break_distance < 0:
        errors.append("Chip break distance cannot be negative")
    return "; ".join(errors)


class _Layout:
    """Direction helpers: ``away`` is +1 outside a shaft, -1 inside a bore."""

    def __init__(self, params: RoughingParams):
        self.p = params
        self.away = -1.0 if params.is_internal else 1.0
        self.start_r = params.start_diameter / 2.0
        self.target_r = params.target_radius
        self.z_safe = params.start_z + params.safety_height
        self.z_approach = params.start_z + params.clearance

    def clamp(self, radius: float, limit: Optional[float]) -> float:
        """Keep *radius* on the material side of *limit*."""
        if limit is None:
            return radius
        return limit if self.away * (limit - radius) > 0 else radius

    def beyond(self, *radii: float) -> float:
        """Radius *clearance* past the most exposed of *radii*."""
        if self.away > 0:
            return max(radii) + self.p.clearance
        return max(0.0, min(radii) - self.p.clearance)


def _cut_path(lay: _Layout, pass_r: float, profile: Profile2D) -> list[Point2D]:
    """Pass at *pass_r* from start_z to end_z, bent around the profile."""
    p = lay.p
    offset = lay.away * p.stock_allowance
    region = profile.clipped(p.end_z, p.start_z)
    samples = list(reversed(region.points))   # front → back

    if not samples:
        return [Point2D(pass_r, p.start_z), Point2D(pass_r, p.end_z)]

    path: list[Point2D] = []
    if samples[0].z < p.start_z:
        path.append(Point2D(pass_r, p.start_z))
    for s in samples:
        path.append(Point2D(lay.clamp(pass_r, s.x + offset), s.z))
    if samples[-1].z > p.end_z:
        path.append(Point2D(pass_r, p.end_z))

    if len(path) > 2 and p.profile_tolerance > 0:
        line = LineString([pt.as_tuple() for pt in path])
        simple = line.simplify(p.profile_tolerance, preserve_topology=False)
        path = [Point2D(float(x), float(z)) for x, z in simple.coords]
    return path


def _chip_break(tp: Toolpath, lay: _Layout) -> None:
    p = lay.p
    if not p.enable_chip_breaking or p.chip_break_distance <= 0:
        return
    here = tp.current_position
    tp.add_rapid(lathe_point(here.x + lay.away * p.chip_break_distance, here.z),
                 comment="Chip break")
    tp.add_dwell(p.chip_break_dwell)


def _longitudinal_passes(
    tp: Toolpath,
    lay: _Layout,
    step: float,
    profile: Profile2D,
) -> None:
    """Passes along Z at successive radii from start toward target."""
    p = lay.p
    prev_r = lay.start_r
    levels = compute_pass_levels(lay.start_r, lay.target_r, step)
    for n, pass_r in enumerate(levels, start=1):
        path = _cut_path(lay, pass_r, profile)
        # nothing left to remove at this depth
        if all(lay.away * (pt.x - prev_r) >= -1e-9 for pt in path):
            prev_r = pass_r
            continue

        tp.add_rapid(lathe_point(path[0].x, lay.z_approach), comment=f"Roughing pass {n}")
        tp.add_linear(lathe_point(path[0].x, path[0].z), p.feed_rate, p.spindle_speed)
        for pt in path[1:]:
            tp.add_linear(lathe_point(pt.x, pt.z), p.feed_rate)

        _chip_break(tp, lay)
        out_r = lay.beyond(prev_r, *(pt.x for pt in path))
        tp.add_rapid(lathe_point(out_r, tp.current_position.z))
        tp.add_rapid(lathe_point(out_r, lay.z_approach))
        prev_r = pass_r


def _axial_passes(tp: Toolpath, lay: _Layout) -> None:
    """Face-style slabs from start_z down to end_z."""
    p = lay.p
    if lay.away * (lay.start_r - lay.target_r) <= 1e-9:
        return
    back_off = min(p.clearance, p.depth_of_cut)
    outside = lay.beyond(lay.start_r)
    for n, z in enumerate(compute_pass_levels(p.start_z, p.end_z, p.depth_of_cut), start=1):
        tp.add_rapid(lathe_point(outside, z), comment=f"Roughing slab {n}")
        tp.add_linear(lathe_point(lay.target_r, z), p.feed_rate, p.spindle_speed)
        _chip_break(tp, lay)
        tp.add_rapid(lathe_point(tp.current_position.x, z + back_off))
        tp.add_rapid(lathe_point(outside, z + back_off))


def prefers_axial(params: RoughingParams) -> bool:
    """Straight (non-profile) roughing uses slabs for long shallow regions."""
    removal = abs(params.start_diameter - params.end_diameter) / 2.0
    length = params.start_z - params.end_z
    ratio = 2.0 if params.is_internal else 3.0
    return length > ratio * removal


def generate_roughing_toolpath(
    part: Part,
    params: RoughingParams,
    name: str = "Roughing",
    tool_number: int = 1,
    profile: Optional[Profile2D] = None,
) -> Toolpath:
    """Generate external or internal roughing moves.

    Parameters
    ----------
    part:
        Finished part; sectioned for a profile when following one and
        *profile* is not supplied.
    params:
        Validated roughing parameters.
    profile:
        Pre-extracted profile (outer for external, bore for internal).

    Returns
    -------
    Toolpath bracketed by rapids on the plane ``start_z + safety_height``.
    An empty profile degrades to straight passes with a ``UserWarning``.
    """
    kind = "internal_roughing" if params.is_internal else "external_roughing"
    tp = Toolpath(name=name, tool_number=tool_number, operation_type=kind)
    lay = _Layout(params)

    if params.use_profile_following and profile is None:
        extract = extract_internal_profile if params.is_internal else extract_profile
        profile = extract(part)
    profile = profile or Profile2D()

    if params.is_internal:
        begin_at_safety(tp, max(0.0, lay.start_r - params.clearance), lay.z_safe)
    else:
        begin_at_safety(tp, lay.start_r + params.safety_height, lay.z_safe)

    if params.use_profile_following:
        if profile.is_empty:
            warnings.warn(f"{name}: empty profile, using straight passes", UserWarning, stacklevel=2)
        _longitudinal_passes(tp, lay, params.depth_of_cut, profile)
    elif prefers_axial(params):
        _axial_passes(tp, lay)
    else:
        _longitudinal_passes(tp, lay, params.stepover, Profile2D())

    retract_to_safety(tp, lay.z_safe)
    return tp
