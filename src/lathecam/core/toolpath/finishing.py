"""Finishing: profile-following passes that produce the final surface."""

from __future__ import annotations

import math
import warnings
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..geometry import Point2D
from ..part import Part
from ..profile import Profile2D
from ..profile_extractor import extract_profile
from .base import Toolpath
from .utils import begin_at_safety, lathe_point, retract_to_safety, spindle_rpm


class FinishingStrategy(Enum):
    SINGLE_PASS = "single_pass"
    MULTI_PASS = "multi_pass"     # stock shrinks linearly to zero
    SPRING_PASS = "spring_pass"   # final pass repeated at zero stock


class SurfaceQuality(Enum):
    ROUGH = "rough"
    STANDARD = "standard"
    FINE = "fine"
    MIRROR = "mirror"


@dataclass(frozen=True)
class QualityBand:
    """Nominal Ra range (um) with the feed/speed scaling that targets it."""
    ra_min: float
    ra_max: float
    feed_factor: float
    speed_factor: float


# Shop-floor bands for carbide inserts; not derived from tool geometry.
SURFACE_QUALITY_BANDS: dict[SurfaceQuality, QualityBand] = {
    SurfaceQuality.ROUGH: QualityBand(3.2, 6.3, 1.5, 0.9),
    SurfaceQuality.STANDARD: QualityBand(1.6, 3.2, 1.0, 1.0),
    SurfaceQuality.FINE: QualityBand(0.8, 1.6, 0.6, 1.1),
    SurfaceQuality.MIRROR: QualityBand(0.2, 0.8, 0.35, 1.2),
}


@dataclass
class FinishingParams:
    """Parameters for finishing.

    ``surface_speed`` is in m/min and ``feed_rate`` in mm/rev; both are
    scaled by the :class:`SurfaceQuality` band and converted to rpm and
    mm/min at the target diameter.  Lengths in mm.
    """

    target_diameter: float = 20.0
    start_z: float = 0.0
    end_z: float = -50.0
    surface_speed: float = 150.0
    feed_rate: float = 0.05
    strategy: FinishingStrategy = FinishingStrategy.SINGLE_PASS
    number_of_passes: int = 2
    stock_allowance: float = 0.2      # removed over MULTI_PASS passes
    profile_tolerance: float = 0.01
    adaptive_feed_rate: bool = False
    surface_quality: SurfaceQuality = SurfaceQuality.STANDARD
    max_spindle_speed: float = 3000.0
    safety_height: float = 5.0
    clearance: float = 1.0


def validate_finishing_params(params: FinishingParams) -> str:
    errors: list[str] = []
    if params.target_diameter <= 0:
        errors.append("Target diameter must be positive")
    if params.start_z <= params.end_z:
        errors.append("Start Z must be greater than end Z")
    if params.surface_speed <= 0 or params.surface_speed > 500:
        errors.append("Surface speed must be between 0 and 500 m/min")
    if params.feed_rate <= 0 or params.feed_rate > 1.0:
        errors.append("Feed rate must be between 0 and 1.0 mm/rev")
    if params.number_of_passes < 1:
        errors.append("Number of passes must be at least 1")
    if params.stock_allowance < 0:
        errors.append("Stock allowance cannot be negative")
    if params.profile_tolerance <= 0:
        errors.append("Profile tolerance must be positive")
    if params.max_spindle_speed <= 0:
        errors.append("Maximum spindle speed must be positive")
    return "; ".join(errors)


def pass_offsets(params: FinishingParams) -> list[float]:
    """Radial stock left by each pass, last one always 0."""
    if params.strategy is FinishingStrategy.MULTI_PASS:
        n = params.number_of_passes
        return [params.stock_allowance * (n - k) / n for k in range(1, n + 1)]
    if params.strategy is FinishingStrategy.SPRING_PASS:
        return [0.0, 0.0]
    return [0.0]


def _feed_factor(prev: Point2D, here: Point2D, nxt: Point2D) -> float:
    """Slow down through corners: cos(half turn angle), floored at 0.5."""
    a = (here.x - prev.x, here.z - prev.z)
    b = (nxt.x - here.x, nxt.z - here.z)
    la, lb = math.hypot(*a), math.hypot(*b)
    if la == 0 or lb == 0:
        return 1.0
    cos_turn = max(-1.0, min(1.0, (a[0] * b[0] + a[1] * b[1]) / (la * lb)))
    return max(0.5, math.cos(math.acos(cos_turn) / 2.0))


def finishing_path(params: FinishingParams, profile: Profile2D) -> list[Point2D]:
    """Front-to-back contour to follow; a straight cut if the profile is empty."""
    region = profile.clipped(params.end_z, params.start_z).simplified(params.profile_tolerance)
    if len(region) < 2:
        r = params.target_diameter / 2.0
        return [Point2D(r, params.start_z), Point2D(r, params.end_z)]
    return list(reversed(region.points))


def generate_finishing_toolpath(
    part: Part,
    params: FinishingParams,
    name: str = "Finishing",
    tool_number: int = 1,
    profile: Optional[Profile2D] = None,
) -> Toolpath:
    """Follow the part profile between ``start_z`` and ``end_z``.

    Falls back to a single straight pass at ``target_diameter`` (with a
    ``UserWarning``) when no usable profile is available.
    """
    tp = Toolpath(name=name, tool_number=tool_number, operation_type="finishing")
    band = SURFACE_QUALITY_BANDS[params.surface_quality]
    rpm = spindle_rpm(
        params.surface_speed * band.speed_factor,
        params.target_diameter,
        params.max_spindle_speed,
    )
    base_feed = params.feed_rate * band.feed_factor * rpm

    if profile is None:
        profile = extract_profile(part)
    path = finishing_path(params, profile)
    if len(profile.clipped(params.end_z, params.start_z)) < 2:
        warnings.warn(f"{name}: no profile in range, using a straight pass", UserWarning, stacklevel=2)

    z_safe = params.start_z + params.safety_height
    z_approach = params.start_z + params.clearance
    outer = max(p.x for p in path) + max(params.stock_allowance, 0.0)
    begin_at_safety(tp, outer + params.safety_height, z_safe)

    for n, offset in enumerate(pass_offsets(params), start=1):
        spring = params.strategy is FinishingStrategy.SPRING_PASS and n > 1
        label = "Spring pass" if spring else f"Finishing pass {n}"
        pts = [Point2D(p.x + offset, p.z) for p in path]
        tp.add_rapid(lathe_point(pts[0].x, z_approach), comment=label)
        tp.add_linear(lathe_point(pts[0].x, pts[0].z), base_feed, rpm)
        for i in range(1, len(pts)):
            feed = base_feed
            if params.adaptive_feed_rate and i + 1 < len(pts):
                feed = base_feed * _feed_factor(pts[i - 1], pts[i], pts[i + 1])
            tp.add_linear(lathe_point(pts[i].x, pts[i].z), feed)
        out_r = outer + params.clearance
        tp.add_rapid(lathe_point(out_r, pts[-1].z))
        tp.add_rapid(lathe_point(out_r, z_approach))

    retract_to_safety(tp, z_safe)
    return tp
