"""Part geometry: the interface the planner consumes plus a trimesh backend.

Supports STL, OBJ, PLY, OFF and other trimesh-compatible formats.  The
turning axis of a loaded part is assumed to be the mesh Z axis unless an
explicit axis is passed to :meth:`Part.cross_section`.
"""

from __future__ import annotations

import warnings
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

import numpy as np
import trimesh
from shapely.geometry import MultiPolygon, Polygon
from shapely.ops import unary_union
from shapely.validation import make_valid

from .geometry import BoundingBox

# Formats trimesh can load natively
SUPPORTED_EXTENSIONS = {
    ".stl", ".obj", ".ply", ".off", ".glb", ".gltf", ".3mf",
}

# Maps the XZ section plane onto the XY plane: (x, y, z) -> (x, z, -y)
_XZ_TO_PLANE = np.array([
    [1.0, 0.0, 0.0, 0.0],
    [0.0, 0.0, 1.0, 0.0],
    [0.0, -1.0, 0.0, 0.0],
    [0.0, 0.0, 0.0, 1.0],
])

# Small turn about the axis so the section plane misses meridian vertices
# of revolved meshes (radius error below 1e-4 relative at 64 sections).
_SECTION_TWIST = 1e-3


class Part(ABC):
    """What the core needs from a solid: extents, size and a section."""

    @abstractmethod
    def bounding_box(self) -> BoundingBox:
        ...

    @abstractmethod
    def volume(self) -> float:
        ...

    @abstractmethod
    def surface_area(self) -> float:
        ...

    @abstractmethod
    def cross_section(
        self,
        axis_origin: Sequence[float] = (0.0, 0.0, 0.0),
        axis_direction: Sequence[float] = (0.0, 0.0, 1.0),
    ) -> Polygon | MultiPolygon:
        """Section through a plane containing the axis.

        Returned coordinates are ``(u, axial)`` where ``u`` is the signed
        distance from the axis within the plane.  An empty geometry means the
        plane missed the solid.
        """


def _path2d_to_shapely(path) -> Polygon | MultiPolygon:
    """Convert a trimesh Path2D (output of section()) to a Shapely geometry."""
    try:
        geom = path.polygons_full
        if len(geom) == 0:
            return Polygon()
        polys = [make_valid(p) for p in geom]
        result = unary_union(polys)
        return result if result.is_valid else make_valid(result)
    except Exception as exc:
        warnings.warn(f"Shapely conversion failed: {exc}", stacklevel=3)
        return Polygon()


def axis_alignment(
    axis_origin: Sequence[float],
    axis_direction: Sequence[float],
) -> np.ndarray:
    """4x4 transform moving *axis_origin* to 0 and *axis_direction* onto +Z."""
    direction = np.asarray(axis_direction, dtype=float)
    norm = np.linalg.norm(direction)
    if not np.isfinite(norm) or norm == 0.0:
        raise ValueError("Turning axis direction must be a non-zero vector")
    rotation = trimesh.geometry.align_vectors(direction / norm, [0.0, 0.0, 1.0])
    shift = trimesh.transformations.translation_matrix(-np.asarray(axis_origin, dtype=float))
    return rotation @ shift


@dataclass
class MeshPart(Part):
    """Triangle-mesh solid (raw stock or finished part)."""

    mesh: trimesh.Trimesh
    source_path: Optional[Path] = None
    was_repaired: bool = False

    def bounding_box(self) -> BoundingBox:
        return BoundingBox.from_array(self.mesh.bounds)

    def volume(self) -> float:
        return float(abs(self.mesh.volume))

    def surface_area(self) -> float:
        return float(self.mesh.area)

    def cross_section(
        self,
        axis_origin: Sequence[float] = (0.0, 0.0, 0.0),
        axis_direction: Sequence[float] = (0.0, 0.0, 1.0),
    ) -> Polygon | MultiPolygon:
        mesh = self.mesh.copy()
        twist = trimesh.transformations.rotation_matrix(_SECTION_TWIST, [0.0, 0.0, 1.0])
        mesh.apply_transform(twist @ axis_alignment(axis_origin, axis_direction))
        section = mesh.section(plane_origin=[0.0, 0.0, 0.0], plane_normal=[0.0, 1.0, 0.0])
        if section is None:
            return Polygon()
        planar, _ = section.to_planar(to_2D=_XZ_TO_PLANE)
        return _path2d_to_shapely(planar)

    def slice_radii(self, heights: Sequence[float]) -> list[float]:
        """Largest radius of the Z-plane section at each height (0 on a miss).

        Uses ``trimesh.section_multiplane`` for batched slicing.
        """
        heights = list(heights)
        if not heights:
            return []
        sections = self.mesh.section_multiplane(
            plane_origin=[0.0, 0.0, 0.0],
            plane_normal=[0.0, 0.0, 1.0],
            heights=heights,
        )
        radii: list[float] = []
        for path2d in sections:
            if path2d is None or len(path2d.vertices) == 0:
                radii.append(0.0)
            else:
                radii.append(float(np.linalg.norm(path2d.vertices, axis=1).max()))
        return radii

    def translated(self, dz: float) -> MeshPart:
        """Copy of this part moved *dz* along the turning axis."""
        mesh = self.mesh.copy()
        mesh.apply_translation([0.0, 0.0, dz])
        return MeshPart(mesh=mesh, source_path=self.source_path, was_repaired=self.was_repaired)

    # -- constructors -------------------------------------------------------

    @classmethod
    def from_profile(
        cls,
        pairs: Sequence[Sequence[float]],
        sections: int = 64,
    ) -> MeshPart:
        """Revolve ``(radius, z)`` pairs around the Z axis into a solid.

        For a closed solid the first and last pairs should sit on the axis,
        e.g. ``[(0, 0), (10, 0), (10, -30), (0, -30)]``.
        """
        line = np.asarray(pairs, dtype=float)
        mesh = trimesh.creation.revolve(line, sections=sections)
        if mesh.volume < 0:
            mesh.invert()
        return cls(mesh=mesh)

    @classmethod
    def cylinder(
        cls,
        diameter: float,
        length: float,
        z_front: float = 0.0,
        sections: int = 64,
    ) -> MeshPart:
        """Bar stock: front face at *z_front*, extending toward -Z."""
        mesh = trimesh.creation.cylinder(radius=diameter / 2.0, height=length, sections=sections)
        mesh.apply_translation([0.0, 0.0, z_front - length / 2.0])
        return cls(mesh=mesh)


def load_part(path: Path, repair: bool = True) -> MeshPart:
    """Load a part mesh from *path* (STL, OBJ, PLY, OFF, 3MF, etc.).

    Raises FileNotFoundError or ValueError on failure.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Mesh file not found: {path}")
    if path.suffix.lower() not in SUPPORTED_EXTENSIONS:
        raise ValueError(f"Unsupported mesh format: {path.suffix}")

    mesh = trimesh.load(str(path), force="mesh")
    if not isinstance(mesh, trimesh.Trimesh):
        raise ValueError(f"Could not load a single mesh from {path}")

    was_repaired = False
    if repair and not mesh.is_watertight:
        trimesh.repair.fill_holes(mesh)
        trimesh.repair.fix_winding(mesh)
        trimesh.repair.fix_normals(mesh)
        if not mesh.is_watertight:
            warnings.warn(
                f"Mesh '{path.name}' is not watertight after repair. "
                "Profile extraction may be incomplete.",
                UserWarning,
                stacklevel=2,
            )
        was_repaired = True

    return MeshPart(mesh=mesh, source_path=path, was_repaired=was_repaired)
