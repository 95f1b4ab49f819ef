"""Toolpath planner: stock + part → Facing, Roughing, Finishing, Parting.

The order is fixed.  Material comes off coarse to fine and the part is cut
from the bar last, so the planner never reorders or skips ahead; a failed
operation is reported and the remaining ones still run.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .geometry import BoundingBox
from .operation import Operation, OperationRegistry, OperationType, default_registry
from .part import Part
from .profile import Profile2D
from .profile_extractor import ExtractionParams, ProfileFallback, extract_profile, sample_bounding_profile
from .progress import NullProgress, ProgressReporter
from .result import ErrorKind, PlanError, PlanResult
from .tool import Tool, ToolLibrary
from .toolpath.facing import FacingParams
from .toolpath.finishing import FinishingParams
from .toolpath.parting import PartingParams
from .toolpath.base import Toolpath
from .toolpath.roughing import RoughingParams
from .toolpath.utils import begin_at_safety, retract_to_safety

logger = logging.getLogger(__name__)

# Fractions of the tool's nominal feed (mm/rev)
FINISHING_FEED_FACTOR = 0.5
PARTING_FEED_FACTOR = 0.8


@dataclass
class PlannerParameters:
    """Allowances and pass sizes for the standard turning sequence (mm).

    ``profile_fallback`` decides what happens when the part cannot be
    sectioned: BOUNDING_CYLINDER substitutes a constant-radius profile
    (reported as a warning), NONE refuses roughing and finishing.
    """

    facing_allowance: float = 0.2
    finishing_allowance: float = 0.2
    parting_allowance: float = 0.5
    roughing_depth_of_cut: float = 2.0
    facing_stepover: float = 0.5
    safety_height: float = 5.0
    tool_number: int = 1
    use_profile_following: bool = True
    profile_tolerance: float = 0.01
    profile_fallback: ProfileFallback = ProfileFallback.BOUNDING_CYLINDER


@dataclass(frozen=True)
class _Extents:
    raw_radius: float
    raw_front: float
    part_radius: float
    part_front: float
    part_back: float


def _extents(raw: BoundingBox, part: BoundingBox) -> Optional[_Extents]:
    if not (raw.is_valid and part.is_valid) or part.size.z <= 0.0:
        return None
    return _Extents(
        raw_radius=raw.max_radius,
        raw_front=raw.max.z,
        part_radius=part.max_radius,
        part_front=part.max.z,
        part_back=part.min.z,
    )


class ToolpathPlanner:
    """Plans the standard turning sequence.

    Parameters
    ----------
    registry:
        Strategies used to build operations (a fresh default registry if
        omitted).
    tool_library:
        Tool arena; ``PlannerParameters.tool_number`` is looked up here.
    """

    SEQUENCE = (
        OperationType.FACING,
        OperationType.EXTERNAL_ROUGHING,
        OperationType.FINISHING,
        OperationType.PARTING,
    )

    def __init__(
        self,
        registry: Optional[OperationRegistry] = None,
        tool_library: Optional[ToolLibrary] = None,
    ):
        self.registry = registry or default_registry()
        self.tool_library = tool_library or ToolLibrary()

    # -- helpers ------------------------------------------------------------

    def resolve_tool(self, number: int, result: PlanResult) -> Tool:
        tool = self.tool_library.get(number)
        if tool is None:
            result.warnings.append(f"Tool T{number} not in library; using generic turning tool")
            tool = Tool(number=number, name="Generic turning tool")
        return tool

    def resolve_profile(
        self,
        part: Part,
        params: PlannerParameters,
        result: PlanResult,
    ) -> Profile2D:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            profile = extract_profile(part, ExtractionParams(tolerance=params.profile_tolerance))
        result.warnings.extend(str(w.message) for w in caught)
        if not profile.is_empty or params.profile_fallback is ProfileFallback.NONE:
            return profile
        try:
            profile = sample_bounding_profile(part.bounding_box())
        except ValueError:
            return Profile2D()
        result.warnings.append("Profile extraction failed; using bounding-cylinder profile")
        return profile

    @staticmethod
    def nothing_to_rough(op: Operation, params: PlannerParameters) -> bool:
        """True when the bar is no larger than the part's smallest radius."""
        rp = op.params
        return (rp.start_diameter - rp.end_diameter) / 2.0 <= params.profile_tolerance

    @staticmethod
    def empty_roughing(op: Operation) -> Toolpath:
        """Bracketed roughing toolpath without cutting passes."""
        rp = op.params
        tp = Toolpath(name=op.name, tool_number=op.tool_number, operation_type="external_roughing")
        z_safe = rp.start_z + rp.safety_height
        begin_at_safety(tp, rp.start_diameter / 2.0 + rp.safety_height, z_safe)
        retract_to_safety(tp, z_safe)
        return tp

    def build_operations(
        self,
        ext: _Extents,
        profile: Profile2D,
        tool: Tool,
        params: PlannerParameters,
    ) -> list[Operation]:
        """The four operations with parameters derived from the extents."""
        cut = tool.cutting
        raw_d = 2.0 * ext.raw_radius
        min_profile_r = profile.min_radius if not profile.is_empty else ext.part_radius
        rough_end_d = max(1.0, min_profile_r * 2.0)
        # a thin skin of bar leaves less than the usual allowance to take
        removal = ext.raw_radius - rough_end_d / 2.0
        rough_allowance = max(0.0, min(params.finishing_allowance, removal / 2.0))

        facing = FacingParams(
            start_diameter=raw_d,
            end_diameter=0.0,
            stepover=params.facing_stepover,
            stock_allowance=params.facing_allowance,
            feed_rate=cut.feed_per_minute,
            spindle_speed=cut.spindle_speed,
            safety_height=params.safety_height,
        )
        roughing = RoughingParams(
            start_diameter=raw_d,
            end_diameter=rough_end_d,
            start_z=ext.raw_front,
            end_z=ext.part_back - params.finishing_allowance,
            depth_of_cut=params.roughing_depth_of_cut,
            stock_allowance=rough_allowance,
            feed_rate=cut.feed_per_minute,
            spindle_speed=cut.spindle_speed,
            safety_height=params.safety_height,
            use_profile_following=params.use_profile_following,
            profile_tolerance=params.profile_tolerance,
        )
        finishing = FinishingParams(
            target_diameter=2.0 * ext.part_radius,
            start_z=ext.part_front,
            end_z=ext.part_back,
            feed_rate=cut.feed_rate * FINISHING_FEED_FACTOR,
            stock_allowance=params.finishing_allowance,
            profile_tolerance=params.profile_tolerance,
            safety_height=params.safety_height,
        )
        parting = PartingParams(
            parting_diameter=raw_d,
            parting_z=ext.part_back - params.parting_allowance,
            center_hole_diameter=0.0,
            feed_rate=cut.feed_rate * PARTING_FEED_FACTOR,
            spindle_speed=cut.spindle_speed,
            retract_distance=2.0,
            safety_height=params.safety_height,
        )

        create = self.registry.create
        n = tool.number
        return [
            create(OperationType.FACING, facing, "Facing", n),
            create(OperationType.EXTERNAL_ROUGHING, roughing, "Roughing", n, profile=profile),
            create(OperationType.FINISHING, finishing, "Finishing", n, profile=profile),
            create(OperationType.PARTING, parting, "Parting", n),
        ]

    # -- entry point --------------------------------------------------------

    def generate_sequence(
        self,
        raw_material: Part,
        finished_part: Part,
        params: Optional[PlannerParameters] = None,
        world_transform: Optional[np.ndarray] = None,
        progress: Optional[ProgressReporter] = None,
    ) -> PlanResult:
        """Plan and generate [Facing, Roughing, Finishing, Parting].

        Each operation is validated first; a rejected or failed operation is
        recorded in ``PlanResult.errors`` and the rest still run.  The
        progress collaborator is polled between operations only.
        *world_transform* (4x4) is applied to every toolpath at the end.
        """
        params = params or PlannerParameters()
        progress = progress or NullProgress()
        result = PlanResult()

        progress.set_status("Measuring stock and part")
        ext = _extents(raw_material.bounding_box(), finished_part.bounding_box())
        if ext is None:
            for kind in self.SEQUENCE:
                result.errors.append(PlanError(
                    ErrorKind.FATAL, "Part has no resolvable axial extent", kind.label))
            return result

        tool = self.resolve_tool(params.tool_number, result)
        profile = Profile2D()
        if params.use_profile_following or params.profile_fallback is ProfileFallback.NONE:
            progress.set_status("Extracting profile")
            profile = self.resolve_profile(finished_part, params, result)
        progress.set_progress(10)

        operations = self.build_operations(ext, profile, tool, params)
        for i, op in enumerate(operations):
            if progress.is_cancelled():
                result.cancelled = True
                result.errors.append(PlanError(ErrorKind.CANCELLED, "Planning cancelled", op.name))
                break
            progress.set_status(f"Generating {op.name}")
            if op.strategy.uses_profile and profile.is_empty \
                    and params.profile_fallback is ProfileFallback.NONE:
                result.errors.append(PlanError(
                    ErrorKind.GEOMETRY, "No profile and fallback disabled", op.name))
                continue
            if op.kind is OperationType.EXTERNAL_ROUGHING and self.nothing_to_rough(op, params):
                result.warnings.append(f"{op.name}: stock is no larger than the part; no passes")
                result.toolpaths.append(self.empty_roughing(op))
                progress.set_progress(10 + int(90 * (i + 1) / len(operations)))
                continue

            with warnings.catch_warnings(record=True) as caught:
                warnings.simplefilter("always")
                outcome = op.generate(finished_part)
            result.warnings.extend(f"{op.name}: {w.message}" for w in caught)
            if outcome.ok:
                result.toolpaths.append(outcome.value)
                logger.debug("%s: %d movements", op.name, len(outcome.value))
            else:
                result.errors.append(outcome.error)
                logger.debug("%s failed: %s", op.name, outcome.error)
            progress.set_progress(10 + int(90 * (i + 1) / len(operations)))

        if world_transform is not None:
            for tp in result.toolpaths:
                tp.apply_transform(world_transform)
        return result


def generate_sequence(
    raw_material: Part,
    finished_part: Part,
    params: Optional[PlannerParameters] = None,
    world_transform: Optional[np.ndarray] = None,
    progress: Optional[ProgressReporter] = None,
    registry: Optional[OperationRegistry] = None,
    tool_library: Optional[ToolLibrary] = None,
) -> PlanResult:
    """Convenience wrapper around :meth:`ToolpathPlanner.generate_sequence`."""
    planner = ToolpathPlanner(registry, tool_library)
    return planner.generate_sequence(raw_material, finished_part, params, world_transform, progress)
