"""Unit system enum and conversion helpers.

Toolpaths are always computed in millimetres; conversion happens when the
post-processor formats words for a machine configured in inches.
"""

from enum import Enum


class Units(Enum):
    INCH = "inch"
    MM = "mm"

    @classmethod
    def parse(cls, text: str) -> "Units":
        """Accept ``"mm"``, ``"metric"``, ``"inch"``, ``"in"`` (any case)."""
        key = text.strip().lower()
        if key in ("mm", "metric", "millimeter", "millimetre"):
            return cls.MM
        if key in ("in", "inch", "inches", "imperial"):
            return cls.INCH
        raise ValueError(f"Unknown unit system: {text!r}")

    def to_mm(self, value: float) -> float:
        if self is Units.MM:
            return value
        return value * 25.4

    def from_mm(self, value: float) -> float:
        if self is Units.MM:
            return value
        return value / 25.4

    def label(self) -> str:
        return "in" if self is Units.INCH else "mm"

    @property
    def default_decimals(self) -> int:
        """Coordinate precision usually configured on lathe controls."""
        return 4 if self is Units.INCH else 3

    @property
    def gcode_modal(self) -> str:
        """G-code modal group 6 word."""
        return "G20" if self is Units.INCH else "G21"
