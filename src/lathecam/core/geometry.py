"""Geometric value types shared by profiles, toolpaths and the planner.

Lathe convention: ``x`` is the radius from the turning axis, ``z`` is the
axial position (front face at larger z), ``y`` is unused on a two-axis
lathe but kept so transforms stay fully 3D.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np


@dataclass(frozen=True)
class Point2D:
    """A (radius, axial) sample in the lathe XZ plane."""
    x: float
    z: float

    def distance_to(self, other: Point2D) -> float:
        return math.hypot(self.x - other.x, self.z - other.z)

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.z)


@dataclass(frozen=True)
class Point3D:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def distance_to(self, other: Point3D) -> float:
        return math.sqrt(
            (self.x - other.x) ** 2
            + (self.y - other.y) ** 2
            + (self.z - other.z) ** 2
        )

    def is_close(self, other: Point3D, tol: float = 1e-9) -> bool:
        return (
            abs(self.x - other.x) <= tol
            and abs(self.y - other.y) <= tol
            and abs(self.z - other.z) <= tol
        )

    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in (self.x, self.y, self.z))

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    @classmethod
    def lathe(cls, radius: float, z: float) -> Point3D:
        """Point on the lathe XZ plane at *radius* from the axis."""
        return cls(radius, 0.0, z)


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box given by its min/max corners."""
    min: Point3D
    max: Point3D

    @property
    def size(self) -> Point3D:
        return Point3D(
            self.max.x - self.min.x,
            self.max.y - self.min.y,
            self.max.z - self.min.z,
        )

    @property
    def center(self) -> Point3D:
        return Point3D(
            (self.min.x + self.max.x) / 2.0,
            (self.min.y + self.max.y) / 2.0,
            (self.min.z + self.max.z) / 2.0,
        )

    @property
    def is_valid(self) -> bool:
        """True when both corners are finite and ordered componentwise."""
        if not (self.min.is_finite() and self.max.is_finite()):
            return False
        return (
            self.min.x <= self.max.x
            and self.min.y <= self.max.y
            and self.min.z <= self.max.z
        )

    @property
    def max_radius(self) -> float:
        """Largest distance from the Z axis reached by the box footprint."""
        return max(
            abs(self.min.x), abs(self.max.x),
            abs(self.min.y), abs(self.max.y),
        )

    def contains(self, p: Point3D, tol: float = 1e-9) -> bool:
        return (
            self.min.x - tol <= p.x <= self.max.x + tol
            and self.min.y - tol <= p.y <= self.max.y + tol
            and self.min.z - tol <= p.z <= self.max.z + tol
        )

    @classmethod
    def from_points(cls, points: Iterable[Point3D]) -> Optional[BoundingBox]:
        """Smallest box enclosing *points*, or None when there are none."""
        arr = np.array([p.as_tuple() for p in points], dtype=float)
        if arr.size == 0:
            return None
        lo = arr.min(axis=0)
        hi = arr.max(axis=0)
        return cls(Point3D(*map(float, lo)), Point3D(*map(float, hi)))

    @classmethod
    def from_array(cls, bounds: np.ndarray) -> BoundingBox:
        """Build from a trimesh style ``(2, 3)`` bounds array."""
        bounds = np.asarray(bounds, dtype=float)
        return cls(
            Point3D(*map(float, bounds[0])),
            Point3D(*map(float, bounds[1])),
        )


# ---------------------------------------------------------------------------
# 4x4 homogeneous transforms (plain numpy arrays)
# ---------------------------------------------------------------------------


def identity() -> np.ndarray:
    return np.eye(4)


def translation(dx: float = 0.0, dy: float = 0.0, dz: float = 0.0) -> np.ndarray:
    m = np.eye(4)
    m[:3, 3] = (dx, dy, dz)
    return m


def rotation_z(angle_deg: float) -> np.ndarray:
    a = math.radians(angle_deg)
    m = np.eye(4)
    m[0, 0] = math.cos(a)
    m[0, 1] = -math.sin(a)
    m[1, 0] = math.sin(a)
    m[1, 1] = math.cos(a)
    return m


def transform_point(matrix: np.ndarray, p: Point3D) -> Point3D:
    """Apply homogeneous *matrix* to *p*."""
    v = np.asarray(matrix, dtype=float) @ np.array([p.x, p.y, p.z, 1.0])
    w = v[3] if v[3] != 0.0 else 1.0
    return Point3D(float(v[0] / w), float(v[1] / w), float(v[2] / w))


def finite_or(value: float, default: float) -> float:
    """Return *value* unless it is NaN/inf, in which case *default*."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return default
    return value if math.isfinite(value) else default
