"""Contouring: facing, roughing and finishing driven by one extracted profile."""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field, replace
from typing import Optional

from ..part import MeshPart, Part
from ..profile import Profile2D
from ..profile_extractor import ExtractionParams, extract_profile, profile_from_slices
from .base import Toolpath
from .facing import FacingParams, generate_facing_toolpath, validate_facing_params
from .finishing import FinishingParams, generate_finishing_toolpath, validate_finishing_params
from .roughing import RoughingParams, generate_roughing_toolpath, validate_roughing_params
from .utils import front_face_z


@dataclass
class ContouringParams:
    """Composite turning parameters.

    Stage records supply feeds, speeds and strategies; their diameters and
    Z spans are overwritten from the part geometry at generation time.
    """

    safety_height: float = 5.0
    clearance_distance: float = 1.0
    enable_facing: bool = True
    enable_roughing: bool = True
    enable_finishing: bool = True
    profile_tolerance: float = 0.01
    profile_sections: int = 100
    raw_diameter: Optional[float] = None   # None: part diameter + 2 x clearance
    facing: FacingParams = field(default_factory=FacingParams)
    roughing: RoughingParams = field(default_factory=RoughingParams)
    finishing: FinishingParams = field(default_factory=FinishingParams)


@dataclass
class ContouringResult:
    profile: Profile2D
    facing: Optional[Toolpath] = None
    roughing: Optional[Toolpath] = None
    finishing: Optional[Toolpath] = None
    warnings: list[str] = field(default_factory=list)

    @property
    def toolpaths(self) -> list[Toolpath]:
        return [tp for tp in (self.facing, self.roughing, self.finishing) if tp is not None]

    def estimated_time(self, rapid_feed_rate: Optional[float] = None) -> float:
        return sum(tp.estimate_machining_time(rapid_feed_rate) for tp in self.toolpaths)

    def combined(self, name: str = "Contouring", tool_number: int = 1) -> Toolpath:
        tp = Toolpath(name=name, tool_number=tool_number, operation_type="contouring")
        for stage in self.toolpaths:
            tp.extend(stage)
        return tp


def validate_contouring_params(params: ContouringParams) -> str:
    errors: list[str] = []
    if params.profile_tolerance <= 0:
        errors.append("Profile tolerance must be positive")
    if params.profile_sections < 10 or params.profile_sections > 1000:
        errors.append("Profile sections must be between 10 and 1000")
    if not (params.enable_facing or params.enable_roughing or params.enable_finishing):
        errors.append("At least one operation must be enabled")
    if params.safety_height <= 0:
        errors.append("Safety height must be positive")
    if params.raw_diameter is not None and params.raw_diameter <= 0:
        errors.append("Raw diameter must be positive")
    return "; ".join(errors)


def _profile_for(part: Part, params: ContouringParams) -> Profile2D:
    profile = extract_profile(part, ExtractionParams(tolerance=params.profile_tolerance))
    if profile.is_empty and isinstance(part, MeshPart):
        profile = profile_from_slices(part, params.profile_sections)
    return profile


def generate_contouring(
    part: Part,
    params: ContouringParams,
    tool_number: int = 1,
) -> ContouringResult:
    """Run the enabled stages against *part*'s profile.

    A stage whose derived parameters fail validation is skipped and the
    reason is recorded in ``ContouringResult.warnings``.
    """
    bbox = part.bounding_box()
    front = front_face_z(bbox)
    back = bbox.min.z
    profile = _profile_for(part, params)
    result = ContouringResult(profile=profile)
    if profile.is_empty:
        result.warnings.append("Profile extraction failed; stages use straight passes")

    raw_d = params.raw_diameter or 2.0 * (bbox.max_radius + params.clearance_distance)
    part_d = 2.0 * (profile.max_radius if not profile.is_empty else bbox.max_radius)
    min_d = max(1.0, 2.0 * profile.min_radius) if not profile.is_empty else part_d
    common = dict(safety_height=params.safety_height)

    if params.enable_facing:
        fp = replace(params.facing, start_diameter=raw_d, end_diameter=0.0,
                     clearance=params.clearance_distance, **common)
        error = validate_facing_params(fp)
        if error:
            result.warnings.append(f"Facing skipped: {error}")
        else:
            result.facing = generate_facing_toolpath(part, fp, "Contour facing", tool_number)

    if params.enable_roughing:
        rp = replace(params.roughing, start_diameter=raw_d, end_diameter=min_d,
                     start_z=front, end_z=back, is_internal=False,
                     clearance=params.clearance_distance,
                     profile_tolerance=params.profile_tolerance, **common)
        error = validate_roughing_params(rp)
        if error:
            result.warnings.append(f"Roughing skipped: {error}")
        else:
            with warnings.catch_warnings():
                warnings.simplefilter("ignore", UserWarning)
                result.roughing = generate_roughing_toolpath(
                    part, rp, "Contour roughing", tool_number, profile=profile)

    if params.enable_finishing:
        fin = replace(params.finishing, target_diameter=part_d, start_z=front, end_z=back,
                      profile_tolerance=params.profile_tolerance,
                      clearance=params.clearance_distance, **common)
        error = validate_finishing_params(fin)
        if error:
            result.warnings.append(f"Finishing skipped: {error}")
        else:
            with warnings.catch_warnings():
                warnings.simplefilter("ignore", UserWarning)
                result.finishing = generate_finishing_toolpath(
                    part, fin, "Contour finishing", tool_number, profile=profile)

    return result


def generate_contouring_toolpath(
    part: Part,
    params: ContouringParams,
    name: str = "Contouring",
    tool_number: int = 1,
) -> Toolpath:
    """All enabled stages concatenated into one toolpath."""
    result = generate_contouring(part, params, tool_number)
    for message in result.warnings:
        warnings.warn(f"{name}: {message}", UserWarning, stacklevel=2)
    return result.combined(name, tool_number)
