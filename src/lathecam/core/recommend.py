"""Starting-point parameters by material and part complexity.

Analyses the extents of a loaded part and picks a turning tool from the
user's ToolLibrary (or the built-in defaults if the library is empty).
Returns planner parameters plus a human-readable summary.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from .part import Part
from .planner import PlannerParameters
from .tool import Tool, ToolLibrary, ToolType
from .toolpath.contouring import ContouringParams
from .toolpath.parting import PartingParams


class Material(Enum):
    ALUMINUM = "aluminum"
    BRASS = "brass"
    STEEL = "steel"
    STAINLESS = "stainless"


class Complexity(Enum):
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"


@dataclass(frozen=True)
class MaterialPreset:
    depth_of_cut: float      # mm
    feed_rate: float         # mm/rev
    surface_speed: float     # m/min
    parting_feed: float      # mm/rev


MATERIAL_PRESETS: dict[Material, MaterialPreset] = {
    Material.ALUMINUM: MaterialPreset(3.0, 0.10, 300.0, 0.08),
    Material.BRASS: MaterialPreset(2.5, 0.08, 200.0, 0.06),
    Material.STEEL: MaterialPreset(2.0, 0.05, 150.0, 0.05),
    Material.STAINLESS: MaterialPreset(1.5, 0.03, 100.0, 0.03),
}

# (profile sections, depth-of-cut override, feed factor)
_COMPLEXITY: dict[Complexity, tuple[int, Optional[float], float]] = {
    Complexity.SIMPLE: (50, None, 1.0),
    Complexity.MODERATE: (100, None, 1.0),
    Complexity.COMPLEX: (200, 0.5, 0.5),
}


@dataclass
class Recommendation:
    """Result of the recommendation pass."""

    tool: Optional[Tool]
    planner: PlannerParameters
    contouring: ContouringParams
    summary: list[str]  # Human-readable explanation lines


def _material(material: Material | str) -> Material:
    return material if isinstance(material, Material) else Material(material.lower())


def contouring_parameters(
    material: Material | str = Material.STEEL,
    complexity: Complexity = Complexity.MODERATE,
) -> ContouringParams:
    """Contouring parameters tuned for *material* and *complexity*."""
    preset = MATERIAL_PRESETS[_material(material)]
    sections, doc, feed_factor = _COMPLEXITY[complexity]
    params = ContouringParams(profile_sections=sections)
    params.roughing = replace(
        params.roughing,
        depth_of_cut=doc if doc is not None else preset.depth_of_cut,
        # roughing feeds are mm/min
        feed_rate=params.roughing.spindle_speed * preset.feed_rate * 2.0 * feed_factor,
    )
    params.finishing = replace(
        params.finishing,
        feed_rate=preset.feed_rate * feed_factor,
        surface_speed=preset.surface_speed,
    )
    return params


def planner_parameters(
    material: Material | str = Material.STEEL,
    complexity: Complexity = Complexity.MODERATE,
) -> PlannerParameters:
    preset = MATERIAL_PRESETS[_material(material)]
    _, doc, _ = _COMPLEXITY[complexity]
    return PlannerParameters(
        roughing_depth_of_cut=doc if doc is not None else preset.depth_of_cut,
        profile_tolerance=0.005 if complexity is Complexity.COMPLEX else 0.01,
    )


def default_parting_parameters(
    diameter: float,
    material: Material | str = Material.STEEL,
) -> PartingParams:
    """Parting parameters for a bar of *diameter* mm.

    Blade width grows with bar size; spindle speed keeps the preset surface
    speed at the start of the cut, capped at 2000 rpm.
    """
    preset = MATERIAL_PRESETS[_material(material)]
    width = 2.0 if diameter <= 20.0 else 3.0 if diameter <= 50.0 else 4.0
    rpm = min(2000.0, preset.surface_speed * 1000.0 / (math.pi * max(diameter, 1.0)))
    return PartingParams(
        parting_diameter=diameter,
        parting_width=width,
        feed_rate=preset.parting_feed,
        spindle_speed=round(rpm),
    )


def _pick_turning_tool(tools: list[Tool]) -> Optional[Tool]:
    """General turning tool with the largest nose radius."""
    candidates = [t for t in tools if t.tool_type is ToolType.TURNING]
    if not candidates:
        # Any external profiling tool will do
        candidates = [t for t in tools if t.tool_type in (ToolType.CONTOURING, ToolType.FACING)]
    if not candidates:
        return None
    return max(candidates, key=lambda t: t.geometry.tip_radius)


def recommend_parameters(
    part: Part,
    library: ToolLibrary,
    material: Material | str = Material.STEEL,
    complexity: Optional[Complexity] = None,
) -> Recommendation:
    """Analyse *part* and return recommended parameters + explanation.

    When *complexity* is omitted it is guessed from the part's
    length-to-diameter ratio.
    """
    from ..config.defaults import build_default_tool_library

    tools = library.list_tools()
    if not tools:
        tools = build_default_tool_library().list_tools()

    bbox = part.bounding_box()
    diameter = 2.0 * bbox.max_radius
    length = bbox.size.z
    if complexity is None:
        ratio = length / diameter if diameter > 0 else 0.0
        complexity = Complexity.SIMPLE if ratio < 1.0 else \
            Complexity.MODERATE if ratio < 4.0 else Complexity.COMPLEX

    mat = _material(material)
    summary = [
        f"Part: {diameter:.2f} mm dia x {length:.2f} mm long",
        f"Material: {mat.value}, complexity: {complexity.value}",
    ]

    planner = planner_parameters(mat, complexity)
    tool = _pick_turning_tool(tools)
    if tool is None:
        summary.append("No turning tool found in library.")
    else:
        planner.tool_number = tool.number
        summary.append(
            f"Turning -> T{tool.number}: {tool.name}"
            f" | depth of cut {planner.roughing_depth_of_cut:.2f} mm"
        )

    return Recommendation(
        tool=tool,
        planner=planner,
        contouring=contouring_parameters(mat, complexity),
        summary=summary,
    )
