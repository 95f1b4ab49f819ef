"""Machine description consumed by the post-processor and validator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..core.units import Units


class MachineType(Enum):
    GENERIC = "generic"
    FANUC = "fanuc"
    HAAS = "haas"
    MAZAK = "mazak"
    OKUMA = "okuma"
    SIEMENS = "siemens"


@dataclass(frozen=True)
class MachineConfig:
    """Limits and conventions of one lathe.

    Travel limits are in mm in the toolpath frame: X is the radius from the
    spindle axis, Z the axial position relative to work zero.
    """

    machine_name: str = "Generic Lathe"
    machine_type: MachineType = MachineType.GENERIC
    units: Units = Units.MM
    absolute_coordinates: bool = True
    diameter_mode: bool = True          # X words are diameters
    spindle_clockwise: bool = True
    rapid_feed_rate: float = 5000.0     # mm/min
    max_spindle_speed: float = 3000.0   # rpm
    max_x: float = 200.0
    max_z: float = 300.0
    min_x: float = 0.0
    min_z: float = -300.0
    use_tool_length_compensation: bool = True
    use_coolant: bool = True
    safe_retract_z: float = 5.0
    decimals: int = 3

    def x_in_limits(self, x: float) -> bool:
        return self.min_x <= x <= self.max_x

    def z_in_limits(self, z: float) -> bool:
        return self.min_z <= z <= self.max_z


@dataclass(frozen=True)
class PostProcessorOptions:
    """Output formatting preferences."""

    include_comments: bool = True
    include_line_numbers: bool = False
    optimize_rapids: bool = True
    add_safety_moves: bool = True
    line_number_start: int = 10
    line_number_increment: int = 10
    program_number: str = "1001"
