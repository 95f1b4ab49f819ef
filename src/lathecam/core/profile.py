"""Ordered 2D (radius, axial) profile of a revolved part."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

import numpy as np
from shapely.geometry import LineString

from .geometry import Point2D


@dataclass(frozen=True)
class Profile2D:
    """Revolved cross-section as an ordered sequence of samples.

    Each sample is a :class:`Point2D` with ``x`` = radius (>= 0) and
    ``z`` = axial position.  Instances are never mutated; helpers that
    reshape the profile return new objects.
    """

    points: tuple[Point2D, ...] = field(default_factory=tuple)

    @classmethod
    def from_pairs(cls, pairs: Iterable[Sequence[float]]) -> Profile2D:
        """Build from ``(radius, z)`` pairs; negative radii are clamped to 0."""
        return cls(tuple(Point2D(max(0.0, float(r)), float(z)) for r, z in pairs))

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self):
        return iter(self.points)

    @property
    def is_empty(self) -> bool:
        return len(self.points) == 0

    @property
    def min_radius(self) -> float:
        if self.is_empty:
            return 0.0
        return min(p.x for p in self.points)

    @property
    def max_radius(self) -> float:
        if self.is_empty:
            return 0.0
        return max(p.x for p in self.points)

    @property
    def axial_range(self) -> Optional[tuple[float, float]]:
        """(z_min, z_max) covered by the profile, None when empty."""
        if self.is_empty:
            return None
        zs = [p.z for p in self.points]
        return (min(zs), max(zs))

    def sorted_by_axial(self) -> Profile2D:
        """Stable sort by ascending z (ties keep their walk order)."""
        return Profile2D(tuple(sorted(self.points, key=lambda p: p.z)))

    def clipped(self, z_min: float, z_max: float) -> Profile2D:
        """Samples with ``z_min <= z <= z_max``, interpolating the end points."""
        if self.is_empty:
            return self
        ordered = self.sorted_by_axial()
        inner = [p for p in ordered.points if z_min <= p.z <= z_max]
        out: list[Point2D] = []
        r_lo = ordered.radius_at(z_min)
        if r_lo is not None and (not inner or inner[0].z > z_min):
            out.append(Point2D(r_lo, z_min))
        out.extend(inner)
        r_hi = ordered.radius_at(z_max)
        if r_hi is not None and (not inner or inner[-1].z < z_max):
            out.append(Point2D(r_hi, z_max))
        return Profile2D(tuple(out))

    def radius_at(self, z: float) -> Optional[float]:
        """Linearly interpolated radius at *z*.

        Where a vertical shoulder puts several samples at the same z, the
        largest radius wins.  Returns None outside the axial range.
        """
        if self.is_empty:
            return None
        ordered = self.sorted_by_axial().points
        if z < ordered[0].z - 1e-9 or z > ordered[-1].z + 1e-9:
            return None
        at_z = [p.x for p in ordered if abs(p.z - z) <= 1e-9]
        if at_z:
            return max(at_z)
        zs = np.array([p.z for p in ordered])
        rs = np.array([p.x for p in ordered])
        return float(np.interp(z, zs, rs))

    def to_linestring(self) -> LineString:
        """Shapely LineString in (radius, z) coordinates."""
        return LineString([p.as_tuple() for p in self.points])

    def simplified(self, tolerance: float) -> Profile2D:
        """Douglas-Peucker simplification within *tolerance*."""
        if len(self.points) < 3 or tolerance <= 0:
            return self
        line = self.to_linestring().simplify(tolerance, preserve_topology=False)
        return Profile2D(tuple(Point2D(float(x), float(z)) for x, z in line.coords))

    def offset_radially(self, delta: float) -> Profile2D:
        """Shift every radius by *delta*, clamping at the axis."""
        return Profile2D(tuple(Point2D(max(0.0, p.x + delta), p.z) for p in self.points))
