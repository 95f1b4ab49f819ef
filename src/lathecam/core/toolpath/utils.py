"""Helpers shared by the lathe toolpath strategies."""

from __future__ import annotations

import math
from typing import Optional

from ..geometry import BoundingBox, Point3D, finite_or
from ..result import ToolpathError
from .base import MoveType, Toolpath


def compute_pass_levels(start: float, end: float, step: float) -> list[float]:
    """Intermediate levels stepping from *start* toward *end* by *step*.

    Works in either direction.  The first level is ``start -/+ step`` and
    the final level is always exactly *end*, so the last pass may be shorter.
    A non-positive *step* collapses to the single level *end*; equal bounds
    give no levels.
    """
    if start == end:
        return []
    if step <= 0:
        return [end]

    direction = -1.0 if end < start else 1.0
    levels: list[float] = []
    value = start + direction * step
    while (value - end) * direction < -1e-9:
        levels.append(round(value, 10))
        value += direction * step

    levels.append(end)
    return levels


def lathe_point(radius: float, z: float) -> Point3D:
    """Point at *radius* from the axis and axial position *z*.

    Non-finite inputs are clamped to the axis / origin plane so no NaN ever
    reaches a movement.
    """
    return Point3D.lathe(max(0.0, finite_or(radius, 0.0)), finite_or(z, 0.0))


def front_face_z(bbox: Optional[BoundingBox]) -> float:
    """Axial position of the part's front face, used for the safety plane.

    Raises ``ToolpathError`` when the part has no resolvable axial extent.
    """
    if bbox is None or not bbox.is_valid:
        raise ToolpathError("Part has no resolvable axial extent")
    return bbox.max.z


def begin_at_safety(tp: Toolpath, radius: float, z_safe: float, label: str = "") -> None:
    """Open a toolpath with the mandatory rapid to the safety plane."""
    tp.add_rapid(lathe_point(radius, z_safe), comment=label or "Rapid to safety plane")


def retract_to_safety(tp: Toolpath, z_safe: float, radius: Optional[float] = None) -> None:
    """Close a toolpath with a rapid back to the safety plane.

    Keeps the current radius unless *radius* is given.
    """
    here = tp.current_position
    r = radius if radius is not None else (here.x if here is not None else 0.0)
    tp.add_rapid(lathe_point(r, z_safe), comment="Retract to safety plane")


def is_bracketed(tp: Toolpath, z_safe: float, tol: float = 1e-9) -> bool:
    """True when *tp* starts and ends with rapids on the safety plane."""
    if tp.is_empty:
        return False
    first, last = tp.movements[0], tp.movements[-1]
    return (
        first.move_type is MoveType.RAPID
        and last.move_type is MoveType.RAPID
        and abs(first.position.z - z_safe) <= tol
        and abs(last.position.z - z_safe) <= tol
    )


def spindle_rpm(surface_speed: float, diameter: float, max_rpm: float) -> float:
    """Constant-surface-speed rpm for *surface_speed* (m/min) at *diameter* (mm)."""
    if diameter <= 0:
        return max_rpm
    rpm = 1000.0 * surface_speed / (math.pi * diameter)
    return min(rpm, max_rpm)
