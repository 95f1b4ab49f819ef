"""Stock (bar blank) definition."""

from __future__ import annotations

from dataclasses import dataclass

from .geometry import BoundingBox
from .part import MeshPart


@dataclass
class Stock:
    """Round bar stock held in the chuck.

    All dimensions are in millimetres.  The front face sits at *z_front*
    (usually 0.0) and the bar extends toward negative Z.

    Parameters
    ----------
    diameter:
        Bar diameter.
    length:
        Length protruding from the chuck.
    z_front:
        Z coordinate of the front face.
    """

    diameter: float
    length: float
    z_front: float = 0.0

    @property
    def radius(self) -> float:
        return self.diameter / 2.0

    @property
    def z_back(self) -> float:
        return self.z_front - self.length

    def as_part(self, sections: int = 64) -> MeshPart:
        """Cylindrical solid usable as the planner's raw material."""
        return MeshPart.cylinder(self.diameter, self.length, self.z_front, sections)

    @classmethod
    def from_part_bounds(
        cls,
        bbox: BoundingBox,
        radial_margin: float = 1.0,
        face_margin: float = 1.0,
        parting_margin: float = 5.0,
    ) -> "Stock":
        """Smallest bar that covers *bbox* with machining margins.

        *face_margin* is left in front of the part for facing and
        *parting_margin* behind it for the parting blade.
        """
        diameter = 2.0 * (bbox.max_radius + radial_margin)
        z_front = bbox.max.z + face_margin
        length = z_front - (bbox.min.z - parting_margin)
        return cls(diameter=diameter, length=length, z_front=z_front)
