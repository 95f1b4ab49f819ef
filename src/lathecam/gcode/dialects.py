"""Controller dialects: how the same movements are spelled per control family.

A dialect only changes text (word padding, comment syntax, tool-change
and program framing).  It never sees or alters geometry beyond the
numbers it is handed.
"""

from __future__ import annotations

from ..core.toolpath.base import MoveType
from ..core.units import Units
from .gcode_writer import block, comment, fmt, semicolon_comment
from .machine import MachineType


class Dialect:
    """Generic ISO lathe dialect."""

    name = "Generic"
    decimal_point = False
    motion_codes = {
        MoveType.RAPID: "G0",
        MoveType.LINEAR: "G1",
        MoveType.CIRCULAR_CW: "G2",
        MoveType.CIRCULAR_CCW: "G3",
    }

    def comment(self, text: str) -> str:
        return comment(text)

    def is_comment(self, line: str) -> bool:
        return line.startswith("(")

    def number(self, value: float, decimals: int) -> str:
        return fmt(value, decimals, self.decimal_point)

    def program_start(self, program_number: str) -> list[str]:
        return [f"O{program_number}"]

    def setup(self, units: Units, absolute: bool) -> list[str]:
        return [units.gcode_modal, "G90" if absolute else "G91", "G40"]

    def feed_mode(self) -> str:
        return "G94"

    def tool_change(self, tool_number: int, length_comp: bool) -> list[str]:
        return [f"T{tool_number:02d}"]

    def spindle_on(self, rpm: float, clockwise: bool) -> str:
        return block("M3" if clockwise else "M4", f"S{int(round(rpm))}")

    def spindle_speed(self, rpm: float) -> str:
        return f"S{int(round(rpm))}"

    def spindle_off(self) -> str:
        return "M5"

    def coolant(self, on: bool) -> str:
        return "M8" if on else "M9"

    def dwell(self, seconds: float) -> str:
        return f"G4 P{fmt(seconds, 3)}"

    def return_home(self) -> str:
        return "G28 U0 W0"

    def program_end(self) -> list[str]:
        return ["M30"]

    def numbered(self, line: str) -> bool:
        """Whether *line* may carry an N word."""
        if not line or line == "%" or line.startswith("O"):
            return False
        return not self.is_comment(line)


class FanucDialect(Dialect):
    name = "Fanuc"
    decimal_point = True
    motion_codes = {
        MoveType.RAPID: "G00",
        MoveType.LINEAR: "G01",
        MoveType.CIRCULAR_CW: "G02",
        MoveType.CIRCULAR_CCW: "G03",
    }

    def program_start(self, program_number: str) -> list[str]:
        return ["%", f"O{int(program_number):04d}"]

    def setup(self, units: Units, absolute: bool) -> list[str]:
        return [block("G18", units.gcode_modal, "G40", "G80")]

    def feed_mode(self) -> str:
        # Fanuc lathe group B: G98 feed per minute
        return "G98"

    def tool_change(self, tool_number: int, length_comp: bool) -> list[str]:
        offset = tool_number if length_comp else 0
        return [f"T{tool_number:02d}{offset:02d}"]

    def spindle_on(self, rpm: float, clockwise: bool) -> str:
        return block("G97", f"S{int(round(rpm))}", "M03" if clockwise else "M04")

    def spindle_off(self) -> str:
        return "M05"

    def coolant(self, on: bool) -> str:
        return "M08" if on else "M09"

    def dwell(self, seconds: float) -> str:
        return f"G04 X{fmt(seconds, 3, True)}"

    def return_home(self) -> str:
        return "G28 U0. W0."

    def program_end(self) -> list[str]:
        return ["M30", "%"]


class HaasDialect(FanucDialect):
    name = "Haas"

    def program_start(self, program_number: str) -> list[str]:
        return ["%", f"O{int(program_number):05d}"]

    def tool_change(self, tool_number: int, length_comp: bool) -> list[str]:
        offset = tool_number if length_comp else 0
        return [f"T{tool_number}{offset:02d}"]

    def dwell(self, seconds: float) -> str:
        return f"G04 P{fmt(seconds, 3, True)}"

    def return_home(self) -> str:
        return "G53 X0 Z0"


class MazakDialect(FanucDialect):
    name = "Mazak"

    def setup(self, units: Units, absolute: bool) -> list[str]:
        return [block("G18", units.gcode_modal, "G40", "G80"), "G54"]


class OkumaDialect(FanucDialect):
    name = "Okuma"

    def tool_change(self, tool_number: int, length_comp: bool) -> list[str]:
        offset = tool_number if length_comp else 0
        return [f"T{tool_number:02d}{offset:02d}{offset:02d}"]

    def feed_mode(self) -> str:
        return "G94"

    def program_end(self) -> list[str]:
        return ["M02"]


class SiemensDialect(Dialect):
    name = "Siemens"

    def comment(self, text: str) -> str:
        return semicolon_comment(text)

    def is_comment(self, line: str) -> bool:
        return line.startswith(";")

    def program_start(self, program_number: str) -> list[str]:
        return [f"%_N_O{program_number}_MPF"]

    def setup(self, units: Units, absolute: bool) -> list[str]:
        unit_word = "G71" if units is Units.MM else "G70"
        return [block("G18", unit_word, "G90" if absolute else "G91", "G40")]

    def tool_change(self, tool_number: int, length_comp: bool) -> list[str]:
        return [block(f"T{tool_number}", "D1" if length_comp else "D0")]

    def dwell(self, seconds: float) -> str:
        return f"G4 F{fmt(seconds, 3)}"

    def return_home(self) -> str:
        return "G74 X1=0 Z1=0"

    def numbered(self, line: str) -> bool:
        return super().numbered(line) and not line.startswith("%_N_")


_DIALECTS: dict[MachineType, type[Dialect]] = {
    MachineType.GENERIC: Dialect,
    MachineType.FANUC: FanucDialect,
    MachineType.HAAS: HaasDialect,
    MachineType.MAZAK: MazakDialect,
    MachineType.OKUMA: OkumaDialect,
    MachineType.SIEMENS: SiemensDialect,
}


def get_dialect(machine_type: MachineType) -> Dialect:
    return _DIALECTS[machine_type]()
