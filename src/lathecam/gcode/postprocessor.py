"""Lathe post-processor: toolpaths → dialect-specific G-code text.

Program layout::

    program start / number
    (comments)
    setup modal words, feed mode
    per toolpath: tool change, spindle on, coolant on, movements
    spindle off, coolant off, return home, program end

Output is deterministic: line numbers and modal state are reset at the
start of every :meth:`GCodeGenerator.get_lines` call.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence, Union

from ..config.machine_profiles import get_profile
from ..core.geometry import Point3D
from ..core.tool import ToolLibrary
from ..core.units import Units
from ..core.toolpath.base import Movement, MoveType, Toolpath
from .dialects import Dialect, get_dialect
from .gcode_writer import block
from .machine import MachineConfig, MachineType, PostProcessorOptions
from .validate import envelope_issues, validate_toolpaths

logger = logging.getLogger(__name__)

ToolpathInput = Union[Toolpath, Sequence[Toolpath]]


@dataclass
class ProcessingResult:
    gcode: str = ""
    success: bool = False
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    estimated_time: float = 0.0   # minutes

    @property
    def lines(self) -> list[str]:
        return self.gcode.splitlines()


def _as_list(toolpaths: ToolpathInput) -> list[Toolpath]:
    if isinstance(toolpaths, Toolpath):
        return [toolpaths]
    return list(toolpaths)


class GCodeGenerator:
    """Renders movements for one machine configuration and dialect."""

    def __init__(
        self,
        config: Optional[MachineConfig] = None,
        options: Optional[PostProcessorOptions] = None,
        dialect: Optional[Dialect] = None,
        tool_library: Optional[ToolLibrary] = None,
    ):
        self.config = config or MachineConfig()
        self.options = options or PostProcessorOptions()
        self.dialect = dialect or get_dialect(self.config.machine_type)
        self.tool_library = tool_library
        self._reset()

    def _reset(self) -> None:
        self._line_number = self.options.line_number_start
        self._feed: Optional[float] = None
        self._rpm: Optional[float] = None
        self._tool: Optional[int] = None
        self._position: Optional[Point3D] = None

    # -- line emission ------------------------------------------------------

    def _emit(self, out: list[str], line: str) -> None:
        if not line:
            return
        if self.options.include_line_numbers and self.dialect.numbered(line):
            line = f"N{self._line_number} {line}"
            self._line_number += self.options.line_number_increment
        out.append(line)

    def _comment(self, out: list[str], text: str) -> None:
        if self.options.include_comments and text:
            self._emit(out, self.dialect.comment(text))

    # -- coordinate words ---------------------------------------------------

    def _num(self, value_mm: float) -> str:
        value = self.config.units.from_mm(value_mm)
        return self.dialect.number(value, self.config.decimals)

    def x_word(self, radius: float) -> str:
        x = 2.0 * radius if self.config.diameter_mode else radius
        return f"X{self._num(x)}"

    def z_word(self, z: float) -> str:
        return f"Z{self._num(z)}"

    def feed_word(self, feed: float) -> str:
        value = self.config.units.from_mm(feed)
        return f"F{self.dialect.number(value, 1 if self.config.units is Units.MM else 3)}"

    # -- blocks -------------------------------------------------------------

    def program_header(self, out: list[str], toolpaths: list[Toolpath]) -> None:
        for line in self.dialect.program_start(self.options.program_number):
            self._emit(out, line)
        self._comment(out, f"Machine: {self.config.machine_name}")
        self._comment(out, f"Units: {self.config.units.label()}")
        for tp in toolpaths:
            self._comment(out, f"Operation: {tp.name} T{tp.tool_number}")
        for line in self.dialect.setup(self.config.units, self.config.absolute_coordinates):
            self._emit(out, line)
        self._emit(out, self.dialect.feed_mode())

    def program_footer(self, out: list[str]) -> None:
        self._emit(out, self.dialect.spindle_off())
        self._emit(out, self.dialect.coolant(False))
        self._emit(out, self.dialect.return_home())
        for line in self.dialect.program_end():
            self._emit(out, line)

    def spindle_control(self, out: list[str], rpm: float) -> None:
        if rpm <= 0:
            return
        rpm = min(rpm, self.config.max_spindle_speed)
        if rpm == self._rpm:
            return
        if self._rpm is None:
            self._emit(out, self.dialect.spindle_on(rpm, self.config.spindle_clockwise))
        else:
            self._emit(out, self.dialect.spindle_speed(rpm))
        self._rpm = rpm

    def coolant_control(self, out: list[str], on: bool) -> None:
        if self.config.use_coolant:
            self._emit(out, self.dialect.coolant(on))

    def tool_change(self, out: list[str], tool_number: int) -> None:
        if tool_number == self._tool:
            return
        tool = self.tool_library.get(tool_number) if self.tool_library else None
        if self._tool is not None:
            self._emit(out, self.dialect.spindle_off())
            self._rpm = None
        if self.options.add_safety_moves:
            self._emit(out, block(self.dialect.motion_codes[MoveType.RAPID],
                                  self.z_word(self.config.safe_retract_z)))
        self._comment(out, f"T{tool_number} {tool.name}" if tool else f"Tool {tool_number}")
        for line in self.dialect.tool_change(tool_number, self.config.use_tool_length_compensation):
            self._emit(out, line)
        self._tool = tool_number
        self._feed = None

    def format_movement(self, mv: Movement) -> str:
        """One motion or dwell block (without line number)."""
        if mv.move_type is MoveType.DWELL:
            return self.dialect.dwell(mv.dwell_seconds)

        words = [self.dialect.motion_codes[mv.move_type],
                 self.x_word(mv.position.x), self.z_word(mv.position.z)]
        if mv.move_type in (MoveType.CIRCULAR_CW, MoveType.CIRCULAR_CCW):
            start = mv.start or self._position or Point3D()
            center = mv.center or start
            words.append(f"I{self._num(center.x - start.x)}")
            words.append(f"K{self._num(center.z - start.z)}")
        if mv.move_type.is_cutting and mv.feed_rate > 0 and mv.feed_rate != self._feed:
            words.append(self.feed_word(mv.feed_rate))
            self._feed = mv.feed_rate
        line = block(*words)
        if self.options.include_comments and mv.comment:
            line = f"{line} {self.dialect.comment(mv.comment)}"
        return line

    def _emit_toolpath(self, out: list[str], tp: Toolpath) -> None:
        if self.options.optimize_rapids:
            tp = copy.deepcopy(tp)
            tp.remove_redundant_moves()
        self._comment(out, tp.name)
        self.tool_change(out, tp.tool_number)

        first_rpm = next((m.spindle_speed for m in tp.movements if m.spindle_speed > 0), 0.0)
        if first_rpm <= 0 and self.tool_library is not None:
            tool = self.tool_library.get(tp.tool_number)
            first_rpm = tool.cutting.spindle_speed if tool else 0.0
        self.spindle_control(out, first_rpm)
        self.coolant_control(out, True)

        for mv in tp.movements:
            if mv.move_type is MoveType.TOOL_CHANGE:
                self.tool_change(out, mv.tool_number or tp.tool_number)
                continue
            if mv.spindle_speed > 0:
                self.spindle_control(out, mv.spindle_speed)
            self._emit(out, self.format_movement(mv))
            if mv.move_type.is_motion:
                self._position = mv.position

    # -- public API ---------------------------------------------------------

    def get_lines(self, toolpaths: ToolpathInput) -> list[str]:
        toolpaths = _as_list(toolpaths)
        self._reset()
        out: list[str] = []
        self.program_header(out, toolpaths)
        for tp in toolpaths:
            self._emit_toolpath(out, tp)
        self.program_footer(out)
        return out

    def generate(self, toolpaths: ToolpathInput) -> str:
        return "\n".join(self.get_lines(toolpaths)) + "\n"

    def check_machine_limits(self, toolpath: Toolpath) -> list[str]:
        """Out-of-envelope messages for *toolpath* (non-fatal)."""
        return [i.message for i in envelope_issues(toolpath, self.config)]

    def validate_toolpath(self, toolpath: Toolpath) -> bool:
        """True when *toolpath* has no fatal problems."""
        if toolpath.is_empty:
            return False
        return not validate_toolpaths([toolpath], self.config).has_errors


class PostProcessor:
    """Validates toolpaths and renders them for a machine type.

    Parameters
    ----------
    machine_type:
        Selects the dialect and, unless *config* is given, the built-in
        machine profile.
    config, options:
        Override the profile / default formatting.
    tool_library:
        Used for tool names and fallback spindle speeds.
    """

    def __init__(
        self,
        machine_type: MachineType = MachineType.GENERIC,
        config: Optional[MachineConfig] = None,
        options: Optional[PostProcessorOptions] = None,
        tool_library: Optional[ToolLibrary] = None,
    ):
        if config is None:
            config = get_profile(machine_type)
        self.machine_type = machine_type
        self.config = config
        self.options = options or PostProcessorOptions()
        self.generator = GCodeGenerator(config, self.options, get_dialect(machine_type), tool_library)

    def process(self, toolpaths: ToolpathInput) -> ProcessingResult:
        toolpaths = _as_list(toolpaths)
        result = ProcessingResult()
        validation = validate_toolpaths(toolpaths, self.config)
        result.errors = validation.messages("error")
        result.warnings = validation.messages("warning")
        if result.errors:
            logger.debug("post-processing refused: %d errors", len(result.errors))
            return result

        result.gcode = self.generator.generate(toolpaths)
        result.estimated_time = sum(
            tp.estimate_machining_time(self.config.rapid_feed_rate) for tp in toolpaths
        )
        result.success = True
        return result

    def get_lines(self, toolpaths: ToolpathInput) -> list[str]:
        return self.generator.get_lines(toolpaths)

    def generate(self, toolpaths: ToolpathInput, output: Path) -> ProcessingResult:
        """Process *toolpaths* and write the program to *output* on success."""
        result = self.process(toolpaths)
        if result.success:
            output = Path(output)
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(result.gcode)
        return result
