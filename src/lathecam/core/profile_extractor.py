"""Axial-plane sectioning: 3D revolved part → ordered 2D profile.

The part is cut with a plane that contains the turning axis.  Only the
half of the section on the positive-radius side is kept, and its boundary
is split into the outer (turned) chain and, for hollow parts, the inner
(bored) chain.  Both come back as :class:`Profile2D` sorted by axial
position.

Extraction never raises: any failure gives an empty profile and a
``UserWarning`` so callers can apply their own fallback policy.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Sequence

import numpy as np
from shapely.geometry import MultiPolygon, Polygon, box
from shapely.geometry.polygon import orient

from .geometry import BoundingBox, Point2D
from .part import MeshPart, Part
from .profile import Profile2D


class ProfileFallback(Enum):
    """What to return when true sectioning yields nothing."""
    NONE = "none"                            # empty profile, caller decides
    BOUNDING_CYLINDER = "bounding_cylinder"  # constant radius from the bbox


@dataclass
class ExtractionParams:
    """Profile extraction settings.

    Parameters
    ----------
    axis_origin, axis_direction:
        Turning axis in part coordinates (default: the Z axis).
    tolerance:
        Distance (mm) under which a vertex counts as lying on the axis or
        on an extreme face.
    min_segment_length:
        Consecutive samples closer than this (mm) are merged.
    sort_by_axial:
        Stable-sort the samples by ascending z.
    fallback:
        Explicit policy for failed extraction.
    fallback_samples:
        Number of samples in a bounding-cylinder fallback profile.
    """

    axis_origin: Sequence[float] = (0.0, 0.0, 0.0)
    axis_direction: Sequence[float] = (0.0, 0.0, 1.0)
    tolerance: float = 0.01
    min_segment_length: float = 0.001
    sort_by_axial: bool = True
    fallback: ProfileFallback = ProfileFallback.NONE
    fallback_samples: int = 50


def iter_polygons(geom) -> Iterator[Polygon]:
    """Yield every non-empty Polygon from a Polygon/MultiPolygon/collection."""
    if geom is None or geom.is_empty:
        return
    if isinstance(geom, Polygon):
        yield geom
    elif isinstance(geom, MultiPolygon):
        yield from geom.geoms
    elif hasattr(geom, "geoms"):
        for g in geom.geoms:
            yield from iter_polygons(g)


def _positive_half(section) -> Polygon:
    """Largest polygon of *section* restricted to u >= 0."""
    if section is None or section.is_empty:
        return Polygon()
    _, zmin, umax, zmax = section.bounds
    if umax <= 0.0:
        return Polygon()
    half = section.intersection(box(0.0, zmin - 1.0, umax + 1.0, zmax + 1.0))
    polys = [p for p in iter_polygons(half) if p.area > 0.0]
    if not polys:
        return Polygon()
    return orient(max(polys, key=lambda p: p.area), sign=1.0)


def _walk(coords: list[tuple[float, float]], start: int, stop: int) -> list[tuple[float, float]]:
    """Ring vertices from *start* to *stop* inclusive, following ring order."""
    n = len(coords)
    out = [coords[start]]
    i = start
    while i != stop:
        i = (i + 1) % n
        out.append(coords[i])
    return out


def _split_chains(
    half: Polygon,
    tol: float,
) -> tuple[list[tuple[float, float]], list[tuple[float, float]]]:
    """Split the exterior of a CCW half-section into outer and inner chains.

    With ``(u, z)`` coordinates and counter-clockwise order, the outer side
    is walked with z increasing and the bore side with z decreasing.
    """
    coords = [(float(u), float(z)) for u, z in list(half.exterior.coords)[:-1]]
    if len(coords) < 3:
        return [], []
    zs = [c[1] for c in coords]
    z_lo, z_hi = min(zs), max(zs)
    back = [i for i, c in enumerate(coords) if c[1] <= z_lo + tol]
    front = [i for i, c in enumerate(coords) if c[1] >= z_hi - tol]

    outer_start = max(back, key=lambda i: coords[i][0])
    outer_stop = max(front, key=lambda i: coords[i][0])
    inner_start = min(front, key=lambda i: coords[i][0])
    inner_stop = min(back, key=lambda i: coords[i][0])

    outer = [c for c in _walk(coords, outer_start, outer_stop) if c[0] > tol]
    inner = [c for c in _walk(coords, inner_start, inner_stop) if c[0] > tol]
    inner.reverse()
    return outer, inner


def _to_profile(chain: list[tuple[float, float]], params: ExtractionParams) -> Profile2D:
    kept: list[Point2D] = []
    for u, z in chain:
        p = Point2D(max(0.0, u), z)
        if kept and kept[-1].distance_to(p) < params.min_segment_length:
            kept[-1] = p
            continue
        kept.append(p)
    profile = Profile2D(tuple(kept))
    return profile.sorted_by_axial() if params.sort_by_axial else profile


def _extract_chains(part: Part, params: ExtractionParams):
    try:
        section = part.cross_section(params.axis_origin, params.axis_direction)
        half = _positive_half(section)
        if half.is_empty:
            warnings.warn("Axial section missed the part; profile is empty", UserWarning, stacklevel=3)
            return [], []
        return _split_chains(half, params.tolerance)
    except Exception as exc:
        warnings.warn(f"Profile extraction failed: {exc}", UserWarning, stacklevel=3)
        return [], []


def extract_profile(part: Part, params: ExtractionParams | None = None) -> Profile2D:
    """Outer (turned) profile of *part*.

    Returns an empty profile on failure, or the bounding-cylinder profile
    when ``params.fallback`` asks for it.
    """
    params = params or ExtractionParams()
    outer, _ = _extract_chains(part, params)
    profile = _to_profile(outer, params)
    if profile.is_empty and params.fallback is ProfileFallback.BOUNDING_CYLINDER:
        try:
            return sample_bounding_profile(part.bounding_box(), params.fallback_samples)
        except ValueError as exc:
            warnings.warn(f"Bounding profile unavailable: {exc}", UserWarning, stacklevel=2)
    return profile


def extract_internal_profile(part: Part, params: ExtractionParams | None = None) -> Profile2D:
    """Bore profile of a hollow *part*; empty for solid parts."""
    params = params or ExtractionParams()
    _, inner = _extract_chains(part, params)
    return _to_profile(inner, params)


def sample_bounding_profile(bbox: BoundingBox, samples: int = 50) -> Profile2D:
    """Constant-radius profile sampled uniformly along the bbox Z extent.

    Lower-fidelity substitute for parts that cannot be sectioned.
    """
    if not bbox.is_valid or bbox.size.z <= 0.0:
        raise ValueError("bounding box has no axial extent")
    samples = max(2, int(samples))
    radius = bbox.max_radius
    zs = np.linspace(bbox.min.z, bbox.max.z, samples)
    return Profile2D(tuple(Point2D(radius, float(z)) for z in zs))


def profile_from_slices(part: MeshPart, samples: int = 100) -> Profile2D:
    """Profile built from Z-plane slices: one max-radius sample per slice.

    Slower and blunter at shoulders than axial sectioning, but tolerant of
    meshes whose axial section does not close.
    """
    bbox = part.bounding_box()
    if not bbox.is_valid or bbox.size.z <= 0.0:
        return Profile2D()
    eps = bbox.size.z * 1e-6
    heights = np.linspace(bbox.min.z + eps, bbox.max.z - eps, max(2, int(samples)))
    radii = part.slice_radii(heights)
    return Profile2D(tuple(
        Point2D(r, float(z)) for z, r in zip(heights, radii) if r > 0.0
    ))
