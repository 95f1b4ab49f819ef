"""Tests for the lathe post-processor and its controller dialects."""

from dataclasses import replace

import pytest

from lathecam.config.defaults import build_default_tool_library
from lathecam.core.toolpath.base import Toolpath
from lathecam.core.toolpath.utils import lathe_point
from lathecam.core.units import Units
from lathecam.gcode.gcode_writer import block, comment, fmt, semicolon_comment, word
from lathecam.gcode.machine import MachineConfig, MachineType, PostProcessorOptions
from lathecam.gcode.postprocessor import GCodeGenerator, PostProcessor


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _simple_toolpath(name: str = "Test", tool_number: int = 1, rpm: float = 1000.0) -> Toolpath:
    """Approach, face 5 mm inward, retract."""
    tp = Toolpath(name=name, tool_number=tool_number)
    tp.add_rapid(lathe_point(10.0, 5.0))
    tp.add_linear(lathe_point(10.0, 0.0), 100.0, rpm)
    tp.add_linear(lathe_point(5.0, 0.0), 100.0)
    tp.add_rapid(lathe_point(5.0, 5.0))
    return tp


def _body(lines: list[str], start: str) -> list[str]:
    """Lines from the first one equal to *start* onward."""
    return lines[lines.index(start):]


# ---------------------------------------------------------------------------
# Word formatting
# ---------------------------------------------------------------------------


class TestFormatting:
    @pytest.mark.parametrize("value,decimals,point,expected", [
        (20.0, 3, False, "20"),
        (20.0, 3, True, "20."),
        (0.0, 3, False, "0"),
        (-0.0, 3, True, "0."),
        (-0.0001, 3, False, "0"),
        (12.3456, 3, False, "12.346"),
        (-1.5, 3, False, "-1.5"),
        (0.19686, 4, False, "0.1969"),
    ])
    def test_fmt(self, value, decimals, point, expected):
        assert fmt(value, decimals, point) == expected

    def test_word_and_block(self):
        assert word("X", 12.5) == "X12.5"
        assert word("F", None) == ""
        assert block("G1", "", "X10", "Z0") == "G1 X10 Z0"

    def test_comments_are_sanitised(self):
        assert comment("Rough (pass 1)") == "(Rough pass 1)"
        assert semicolon_comment("a;b") == "; a,b"


# ---------------------------------------------------------------------------
# Generic dialect
# ---------------------------------------------------------------------------


class TestGenericOutput:
    def test_full_program(self):
        lines = PostProcessor().get_lines([_simple_toolpath()])
        assert lines == [
            "O1001",
            "(Machine: Generic Lathe)",
            "(Units: mm)",
            "(Operation: Test T1)",
            "G21",
            "G90",
            "G40",
            "G94",
            "(Test)",
            "G0 Z5",
            "(Tool 1)",
            "T01",
            "M3 S1000",
            "M8",
            "G0 X20 Z5",
            "G1 X20 Z0 F100",
            "G1 X10 Z0",
            "G0 X10 Z5",
            "M5",
            "M9",
            "G28 U0 W0",
            "M30",
        ]

    def test_radius_mode(self):
        config = replace(MachineConfig(), diameter_mode=False)
        lines = GCodeGenerator(config).get_lines(_simple_toolpath())
        assert "G0 X10 Z5" in lines

    def test_no_comments(self):
        options = PostProcessorOptions(include_comments=False)
        lines = PostProcessor(options=options).get_lines([_simple_toolpath()])
        assert not any(line.startswith("(") for line in lines)

    def test_inline_movement_comment(self):
        tp = Toolpath(name="Cmt")
        tp.add_rapid(lathe_point(10.0, 5.0), comment="Approach")
        lines = PostProcessor().get_lines([tp])
        assert "G0 X20 Z5 (Approach)" in lines

    def test_feed_is_modal(self):
        lines = PostProcessor().get_lines([_simple_toolpath()])
        assert sum(1 for line in lines if " F" in line) == 1

    def test_line_numbers_skip_program_and_comments(self):
        options = PostProcessorOptions(include_line_numbers=True)
        lines = PostProcessor(options=options).get_lines([_simple_toolpath()])
        assert lines[0] == "O1001"
        assert lines[1] == "(Machine: Generic Lathe)"
        assert lines[4] == "N10 G21"
        assert lines[5] == "N20 G90"
        assert lines[-1].endswith(" M30")

    def test_inch_output(self):
        config = replace(MachineConfig(), units=Units.INCH, decimals=4)
        lines = GCodeGenerator(config).get_lines(_simple_toolpath())
        assert "G20" in lines
        assert "(Units: in)" in lines
        assert "G1 X0.7874 Z0 F3.937" in lines
        assert "G0 X0.7874 Z0.1969" in lines

    def test_arc_centre_words(self):
        tp = Toolpath(name="Arc")
        tp.add_rapid(lathe_point(10.0, 5.0))
        tp.add_circular(lathe_point(8.0, 3.0), center=lathe_point(8.0, 5.0), feed_rate=50.0)
        tp.add_circular(lathe_point(10.0, 1.0), center=lathe_point(8.0, 1.0), feed_rate=50.0,
                        clockwise=False)
        lines = PostProcessor().get_lines([tp])
        assert "G2 X16 Z3 I-2 K0 F50" in lines
        assert "G3 X20 Z1 I0 K-2" in lines

    def test_dwell(self):
        tp = _simple_toolpath()
        tp.add_dwell(0.5)
        assert "G4 P0.5" in PostProcessor().get_lines([tp])

    def test_spindle_capped_without_validation(self):
        lines = GCodeGenerator().get_lines(_simple_toolpath(rpm=5000.0))
        assert "M3 S3000" in lines

    def test_capped_spindle_not_repeated(self):
        tp = _simple_toolpath(rpm=5000.0)
        tp.add_linear(lathe_point(4.0, 0.0), 100.0, 5000.0)
        tp.add_linear(lathe_point(3.0, 0.0), 100.0, 4000.0)
        lines = GCodeGenerator().get_lines(tp)
        assert lines.count("M3 S3000") == 1
        assert "S3000" not in lines

    def test_spindle_change_within_toolpath(self):
        tp = _simple_toolpath()
        tp.add_linear(lathe_point(2.0, 0.0), 100.0, 1500.0)
        lines = PostProcessor().get_lines([tp])
        assert "S1500" in lines
        assert lines.count("M3 S1000") == 1

    def test_optimize_rapids_drops_repeats(self):
        tp = _simple_toolpath()
        tp.add_rapid(lathe_point(5.0, 5.0))
        lines = PostProcessor().get_lines([tp])
        assert lines.count("G0 X10 Z5") == 1
        assert len(tp) == 5

    def test_tool_change_between_toolpaths(self):
        library = build_default_tool_library()
        toolpaths = [_simple_toolpath("Rough", 1), _simple_toolpath("Part", 4, rpm=800.0)]
        lines = PostProcessor(tool_library=library).get_lines(toolpaths)
        second = _body(lines, "(Part)")
        assert second[:6] == [
            "(Part)", "M5", "G0 Z5", "(T4 3 mm parting blade)", "T04", "M3 S800",
        ]
        assert "(T1 CNMG 120408 turning)" in lines

    def test_same_tool_not_changed_twice(self):
        toolpaths = [_simple_toolpath("A", 1), _simple_toolpath("B", 1)]
        lines = PostProcessor().get_lines(toolpaths)
        assert lines.count("T01") == 1
        # modal feed survives when the tool stays
        assert sum(1 for line in lines if " F" in line) == 1

    def test_rpm_from_library_when_moves_have_none(self):
        library = build_default_tool_library()
        tp = _simple_toolpath(rpm=0.0)
        lines = PostProcessor(tool_library=library).get_lines([tp])
        assert "M3 S1200" in lines

    def test_deterministic(self):
        pp = PostProcessor()
        toolpaths = [_simple_toolpath()]
        assert pp.get_lines(toolpaths) == pp.get_lines(toolpaths)


# ---------------------------------------------------------------------------
# Other dialects
# ---------------------------------------------------------------------------


class TestDialects:
    def test_fanuc_program(self):
        lines = PostProcessor(MachineType.FANUC).get_lines([_simple_toolpath()])
        assert lines[:2] == ["%", "O1001"]
        assert lines[-2:] == ["M30", "%"]
        assert "G18 G21 G40 G80" in lines
        assert "G98" in lines
        assert "T0101" in lines
        assert "G97 S1000 M03" in lines
        assert "G01 X20. Z0. F100." in lines
        assert "G28 U0. W0." in lines

    def test_fanuc_line_numbers_skip_percent(self):
        options = PostProcessorOptions(include_line_numbers=True)
        lines = PostProcessor(MachineType.FANUC, options=options).get_lines([_simple_toolpath()])
        assert lines[0] == "%"
        assert lines[-1] == "%"
        assert lines[-2].startswith("N")

    def test_fanuc_dwell(self):
        tp = _simple_toolpath()
        tp.add_dwell(0.5)
        assert "G04 X0.5" in PostProcessor(MachineType.FANUC).get_lines([tp])

    def test_haas(self):
        lines = PostProcessor(MachineType.HAAS).get_lines([_simple_toolpath()])
        assert lines[1] == "O01001"
        assert "T101" in lines
        assert "G53 X0 Z0" in lines

    def test_okuma_and_mazak(self):
        okuma = PostProcessor(MachineType.OKUMA).get_lines([_simple_toolpath()])
        assert "T010101" in okuma
        assert okuma[-1] == "M02"
        mazak = PostProcessor(MachineType.MAZAK).get_lines([_simple_toolpath()])
        assert "G54" in mazak

    def test_siemens(self):
        options = PostProcessorOptions(include_line_numbers=True)
        lines = PostProcessor(MachineType.SIEMENS, options=options).get_lines([_simple_toolpath()])
        assert lines[0] == "%_N_O1001_MPF"
        assert lines[1] == "; Machine: Siemens 828D"
        assert lines[4] == "N10 G18 G71 G90 G40"
        assert any(line.endswith("T1 D1") for line in lines)
        assert any(line.endswith("G74 X1=0 Z1=0") for line in lines)

    def test_profiles_select_machine_name(self):
        lines = PostProcessor(MachineType.MAZAK).get_lines([_simple_toolpath()])
        assert "(Machine: Mazak QTN-200)" in lines


# ---------------------------------------------------------------------------
# Processing and validation
# ---------------------------------------------------------------------------


class TestProcess:
    def test_success(self):
        result = PostProcessor().process(_simple_toolpath())
        assert result.success
        assert result.errors == []
        assert result.gcode.endswith("M30\n")
        assert result.lines[0] == "O1001"
        assert result.estimated_time == pytest.approx(0.1, abs=0.01)

    def test_envelope_is_a_warning(self):
        tp = _simple_toolpath()
        tp.add_rapid(lathe_point(250.0, 5.0))
        result = PostProcessor().process([tp])
        assert result.success
        assert any("outside travel" in w for w in result.warnings)

    def test_spindle_over_maximum_fails(self):
        result = PostProcessor().process([_simple_toolpath(rpm=5000.0)])
        assert not result.success
        assert result.gcode == ""
        assert any("above machine maximum" in e for e in result.errors)

    def test_empty_program_fails(self):
        result = PostProcessor().process([Toolpath(name="Nothing")])
        assert not result.success
        assert result.errors

    def test_generate_writes_file(self, tmp_path):
        out = tmp_path / "nc" / "part.nc"
        result = PostProcessor().generate([_simple_toolpath()], out)
        assert result.success
        text = out.read_text()
        assert text == result.gcode
        assert text.endswith("\n")

    def test_generate_does_not_write_on_error(self, tmp_path):
        out = tmp_path / "part.nc"
        PostProcessor().generate([Toolpath()], out)
        assert not out.exists()

    def test_check_machine_limits(self):
        tp = _simple_toolpath()
        tp.add_rapid(lathe_point(10.0, 400.0))
        messages = GCodeGenerator().check_machine_limits(tp)
        assert len(messages) == 1
        assert "Z=400.000" in messages[0]

    def test_validate_toolpath(self):
        gen = GCodeGenerator()
        assert gen.validate_toolpath(_simple_toolpath())
        assert not gen.validate_toolpath(Toolpath())
