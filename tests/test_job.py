"""Tests for the Job orchestrator and the command-line entry point."""

import pytest

from lathecam.__main__ import main
from lathecam.config.defaults import build_default_tool_library
from lathecam.config.settings import AppSettings
from lathecam.core.job import Job
from lathecam.core.operation import OperationType, default_registry
from lathecam.core.part import MeshPart
from lathecam.core.stock import Stock
from lathecam.core.toolpath.grooving import GroovingParams
from lathecam.core.units import Units
from lathecam.gcode.machine import MachineType


@pytest.fixture(scope="module")
def shaft() -> MeshPart:
    return MeshPart.from_profile([(0, 0), (10, 0), (10, -30), (0, -30)])


@pytest.fixture
def job(shaft) -> Job:
    return Job(
        name="shaft",
        part=shaft,
        stock=Stock.from_part_bounds(shaft.bounding_box()),
        tool_library=build_default_tool_library(),
    )


@pytest.fixture
def stl_file(tmp_path, shaft):
    path = tmp_path / "shaft.stl"
    shaft.mesh.export(str(path))
    return path


@pytest.fixture
def isolated_home(tmp_path, monkeypatch):
    """Keep settings lookups away from the real home directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


# ---------------------------------------------------------------------------
# Job
# ---------------------------------------------------------------------------


class TestJob:
    def test_requires_part_and_stock(self, shaft):
        with pytest.raises(RuntimeError, match="No part"):
            Job().compute_toolpaths()
        with pytest.raises(RuntimeError, match="Stock"):
            Job(part=shaft).compute_toolpaths()

    def test_compute_toolpaths(self, job):
        plan = job.compute_toolpaths()
        assert plan.ok, [str(e) for e in plan.errors]
        assert plan.names() == ["Facing", "Roughing", "Finishing", "Parting"]
        assert job.plan is plan

    def test_extra_operations_before_parting(self, job):
        params = GroovingParams(groove_diameter=20.0, groove_depth=1.0, groove_z=-15.0)
        job.extra_operations.add(
            default_registry().create(OperationType.GROOVING, params, tool_number=6))
        plan = job.compute_toolpaths()
        assert plan.names() == ["Facing", "Roughing", "Finishing", "Grooving", "Parting"]
        assert plan.toolpaths[-2].tool_number == 6

    def test_parting_stays_last_in_program(self, job):
        params = GroovingParams(groove_diameter=20.0, groove_depth=1.0, groove_z=-15.0)
        job.extra_operations.add(
            default_registry().create(OperationType.GROOVING, params, tool_number=6))
        lines = job.post_process().lines
        assert lines.index("(Grooving)") < lines.index("(Parting)")

    def test_post_process_plans_first(self, job):
        result = job.post_process()
        assert result.success, result.errors
        assert job.plan is not None
        assert "(T1 CNMG 120408 turning)" in result.lines

    def test_inch_job(self, job):
        job.units = Units.INCH
        result = job.post_process()
        assert "G20" in result.lines
        assert job.post_processor().config.decimals == 4

    def test_machine_dialect(self, job):
        job.machine_type = MachineType.FANUC
        result = job.post_process()
        assert result.lines[0] == "%"

    def test_post_process_writes(self, job, tmp_path):
        out = tmp_path / "shaft.nc"
        result = job.post_process(out)
        assert out.read_text() == result.gcode

    def test_load_part(self, stl_file):
        job = Job()
        part = job.load_part(stl_file)
        assert job.part is part
        assert part.bounding_box().size.z == pytest.approx(30.0)

    def test_load_part_errors(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Job().load_part(tmp_path / "missing.stl")
        bad = tmp_path / "part.step"
        bad.write_text("")
        with pytest.raises(ValueError):
            Job().load_part(bad)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


class TestCli:
    def test_writes_program(self, stl_file, isolated_home, capsys):
        assert main([str(stl_file)]) == 0
        program = stl_file.with_suffix(".nc")
        assert program.exists()
        assert program.read_text().startswith("O1001\n")
        assert "Wrote" in capsys.readouterr().out

    def test_options(self, stl_file, isolated_home, tmp_path):
        out = tmp_path / "out" / "prog.nc"
        rc = main([str(stl_file), "-o", str(out), "--machine", "fanuc", "--units", "inch",
                   "--material", "aluminum", "--line-numbers", "--no-comments"])
        assert rc == 0
        lines = out.read_text().splitlines()
        assert lines[0] == "%"
        assert lines[2].startswith("N10 ")
        assert "G20" in lines[2]
        assert not any(line.startswith("(") for line in lines)

    def test_settings_supply_defaults(self, stl_file, isolated_home):
        AppSettings(default_machine="siemens").save()
        assert main([str(stl_file)]) == 0
        assert stl_file.with_suffix(".nc").read_text().startswith("%_N_O1001_MPF")

    def test_missing_input(self, tmp_path, isolated_home, capsys):
        assert main([str(tmp_path / "nope.stl")]) == 1
        assert "not found" in capsys.readouterr().err

    def test_unknown_tool(self, stl_file, isolated_home):
        assert main([str(stl_file), "--tool-number", "42"]) == 1

    def test_tool_library_file(self, stl_file, isolated_home, tmp_path):
        lib_path = tmp_path / "tools.json"
        build_default_tool_library().save(lib_path)
        assert main([str(stl_file), "--tool-library", str(lib_path), "--tool-number", "2"]) == 0
