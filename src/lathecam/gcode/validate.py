"""Toolpath sanity checks run before G-code is written.

Errors make the program unusable (NaN coordinates, cutting without feed,
spindle beyond the machine, nothing to cut).  Warnings are for the
operator to judge, most importantly moves that leave the machine's travel envelope.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

from ..core.toolpath.base import Movement, Toolpath
from .machine import MachineConfig


@dataclass
class ValidationIssue:
    """A single validation problem found in the toolpath."""

    severity: str  # "error" or "warning"
    message: str
    movement: Optional[Movement] = None
    toolpath: str = ""


@dataclass
class ValidationResult:
    """Result of validating one or more toolpaths."""

    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(i.severity == "error" for i in self.issues)

    @property
    def has_warnings(self) -> bool:
        return any(i.severity == "warning" for i in self.issues)

    @property
    def is_ok(self) -> bool:
        return len(self.issues) == 0

    def messages(self, severity: str) -> list[str]:
        return [i.message for i in self.issues if i.severity == severity]


def envelope_issues(tp: Toolpath, config: MachineConfig) -> list[ValidationIssue]:
    """Warnings for every movement target outside the X/Z travel."""
    issues: list[ValidationIssue] = []
    for i, mv in enumerate(tp.movements):
        if not mv.move_type.is_motion:
            continue
        p = mv.position
        if math.isfinite(p.x) and not config.x_in_limits(p.x):
            issues.append(ValidationIssue(
                "warning",
                f"{tp.name} move {i}: X={p.x:.3f} outside travel "
                f"[{config.min_x}, {config.max_x}]",
                mv, tp.name,
            ))
        if math.isfinite(p.z) and not config.z_in_limits(p.z):
            issues.append(ValidationIssue(
                "warning",
                f"{tp.name} move {i}: Z={p.z:.3f} outside travel "
                f"[{config.min_z}, {config.max_z}]",
                mv, tp.name,
            ))
    return issues


def validate_toolpaths(
    toolpaths: list[Toolpath],
    config: MachineConfig,
) -> ValidationResult:
    """Check *toolpaths* against *config*.

    Checks performed:
    - All positions finite (error)
    - Cutting moves carry a positive feed (error)
    - Spindle speeds within the machine maximum (error)
    - X/Z targets within machine travel (warning)
    - Feed rates not above the rapid rate (warning)
    - Something to post at all (error)
    """
    result = ValidationResult()

    all_empty = True
    for tp in toolpaths:
        if tp.is_empty:
            continue
        all_empty = False

        for i, mv in enumerate(tp.movements):
            if not (mv.position.is_finite() and math.isfinite(mv.feed_rate)):
                result.issues.append(ValidationIssue(
                    "error", f"{tp.name} move {i}: non-finite value", mv, tp.name,
                ))
                continue
            if mv.move_type.is_cutting and mv.feed_rate <= 0:
                result.issues.append(ValidationIssue(
                    "error", f"{tp.name} move {i}: cutting move without feed rate",
                    mv, tp.name,
                ))
            if mv.spindle_speed > config.max_spindle_speed:
                result.issues.append(ValidationIssue(
                    "error",
                    f"{tp.name} move {i}: spindle {mv.spindle_speed:.0f} rpm above "
                    f"machine maximum ({config.max_spindle_speed:.0f})",
                    mv, tp.name,
                ))
            if mv.feed_rate > config.rapid_feed_rate:
                result.issues.append(ValidationIssue(
                    "warning",
                    f"{tp.name} move {i}: feed {mv.feed_rate:.1f} exceeds rapid rate "
                    f"({config.rapid_feed_rate:.1f})",
                    mv, tp.name,
                ))

        result.issues.extend(envelope_issues(tp, config))

    if all_empty:
        result.issues.append(ValidationIssue(
            "error",
            "All toolpaths are empty; no motion would be generated",
        ))

    return result
