"""Tests for parting, grooving, threading, chamfering and drilling."""

import math

import pytest

from lathecam.core.part import MeshPart
from lathecam.core.toolpath.base import MoveType
from lathecam.core.toolpath.chamfering import (
    ChamferingParams, ChamferType, chamfer_profile, generate_chamfering_toolpath,
    validate_chamfering_params,
)
from lathecam.core.toolpath.drilling import (
    DrillingParams, DrillingStrategy, generate_drilling_toolpath, validate_drilling_params,
)
from lathecam.core.toolpath.grooving import (
    GroovingParams, generate_grooving_toolpath, plunge_positions, validate_grooving_params,
)
from lathecam.core.toolpath.parting import (
    PartingParams, estimate_parting_time, generate_parting_toolpath, material_removed,
    validate_parting_params,
)
from lathecam.core.toolpath.threading import (
    ThreadingParams, generate_threading_toolpath, parse_thread_designation, pass_depths,
    validate_threading_params,
)
from lathecam.core.toolpath.utils import is_bracketed


@pytest.fixture(scope="module")
def shaft() -> MeshPart:
    """Plain 20 mm shaft, 50 mm long, front face at z=0."""
    return MeshPart.from_profile([(0, 0), (10, 0), (10, -50), (0, -50)])


def _cutting(tp):
    return [m for m in tp.movements if m.move_type.is_cutting]


# ---------------------------------------------------------------------------
# Parting
# ---------------------------------------------------------------------------


class TestParting:
    def test_defaults_are_valid(self):
        assert validate_parting_params(PartingParams()) == ""

    def test_hole_larger_than_bar(self):
        error = validate_parting_params(PartingParams(parting_diameter=10.0,
                                                      center_hole_diameter=12.0))
        assert "greater than center hole" in error

    def test_plunges_to_centre(self, shaft):
        params = PartingParams(parting_diameter=20.0, parting_z=-50.5)
        tp = generate_parting_toolpath(shaft, params)
        cuts = _cutting(tp)
        assert cuts[-1].position.x == pytest.approx(0.0)
        assert all(m.position.z == pytest.approx(-50.5) for m in cuts)
        # feed converted from mm/rev
        assert cuts[0].feed_rate == pytest.approx(0.05 * 800.0)

    def test_stops_at_centre_hole(self, shaft):
        params = PartingParams(parting_diameter=20.0, center_hole_diameter=6.0)
        tp = generate_parting_toolpath(shaft, params)
        assert min(m.position.x for m in tp.movements) == pytest.approx(3.0)

    def test_bracketed(self, shaft):
        params = PartingParams(parting_diameter=20.0, parting_z=-50.5)
        tp = generate_parting_toolpath(shaft, params)
        assert is_bracketed(tp, 5.0)

    def test_time_and_volume(self):
        params = PartingParams(parting_diameter=20.0, feed_rate=0.05, spindle_speed=800.0,
                               parting_width=3.0)
        assert estimate_parting_time(params) == pytest.approx(10.0 / 40.0)
        assert material_removed(params) == pytest.approx(math.pi * 100.0 * 3.0)


# ---------------------------------------------------------------------------
# Grooving
# ---------------------------------------------------------------------------


class TestGrooving:
    def test_defaults_are_valid(self):
        assert validate_grooving_params(GroovingParams()) == ""

    def test_tool_wider_than_groove(self):
        error = validate_grooving_params(GroovingParams(groove_width=2.0, tool_width=3.0))
        assert "wider" in error

    def test_single_plunge_when_tool_fits(self):
        assert plunge_positions(GroovingParams(groove_width=3.0, tool_width=3.0)) == [-25.0]

    def test_stepped_plunges(self):
        positions = plunge_positions(GroovingParams(groove_width=6.0, tool_width=3.0,
                                                    groove_z=-25.0))
        assert positions[0] == -25.0
        assert positions[-1] == pytest.approx(-28.0)
        steps = [a - b for a, b in zip(positions, positions[1:])]
        assert max(steps) <= 3.0 * 0.9 + 1e-9

    def test_floor_depth(self, shaft):
        params = GroovingParams(groove_diameter=20.0, groove_depth=2.0, groove_width=6.0)
        tp = generate_grooving_toolpath(shaft, params)
        assert min(m.position.x for m in _cutting(tp)) == pytest.approx(8.0)
        assert any(m.move_type is MoveType.DWELL for m in tp.movements)
        assert any(m.comment == "Groove floor pass" for m in tp.movements)

    def test_internal_groove_cuts_outward(self, shaft):
        params = GroovingParams(groove_diameter=10.0, groove_depth=1.5, is_internal=True)
        tp = generate_grooving_toolpath(shaft, params)
        assert max(m.position.x for m in _cutting(tp)) == pytest.approx(6.5)

    def test_bracketed(self, shaft):
        tp = generate_grooving_toolpath(shaft, GroovingParams())
        assert is_bracketed(tp, 5.0)


# ---------------------------------------------------------------------------
# Threading
# ---------------------------------------------------------------------------


class TestThreading:
    def test_defaults_are_valid(self):
        assert validate_threading_params(ThreadingParams()) == ""

    def test_default_depth(self):
        assert ThreadingParams(pitch=2.0).depth == pytest.approx(1.226)

    def test_depth_too_large(self):
        error = validate_threading_params(ThreadingParams(major_diameter=4.0, thread_depth=2.5))
        assert "exceeds" in error

    @pytest.mark.parametrize("text,expected", [
        ("M20x1.5", (20.0, 1.5, True)),
        ("m8", (8.0, 1.25, True)),
        ("M30", (30.0, 2.0, True)),
        ("1/4-20", (6.35, 1.27, False)),
        ("0.5-13 UNC", (12.7, 25.4 / 13, False)),
    ])
    def test_parse_designation(self, text, expected):
        diameter, pitch, metric = parse_thread_designation(text)
        assert (diameter, pitch) == pytest.approx(expected[:2])
        assert metric is expected[2]

    def test_parse_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_thread_designation("twenty")

    def test_pass_depths(self):
        params = ThreadingParams(pitch=1.5, number_of_passes=3, spring_passes=1, thread_depth=0.9)
        assert pass_depths(params) == pytest.approx([0.3, 0.6, 0.9, 0.9])

    def test_threading_moves(self, shaft):
        params = ThreadingParams(major_diameter=20.0, pitch=1.5, thread_length=20.0,
                                 number_of_passes=4, spring_passes=1, spindle_speed=400.0)
        tp = generate_threading_toolpath(shaft, params)
        cuts = _cutting(tp)
        assert len(cuts) == 5
        assert all(m.feed_rate == pytest.approx(600.0) for m in cuts)
        assert all(m.position.z == pytest.approx(-20.0) for m in cuts)
        assert min(m.position.x for m in cuts) == pytest.approx(10.0 - params.depth)
        assert is_bracketed(tp, 5.0)


# ---------------------------------------------------------------------------
# Chamfering
# ---------------------------------------------------------------------------


class TestChamfering:
    def test_defaults_are_valid(self):
        assert validate_chamfering_params(ChamferingParams()) == ""

    def test_external_requires_shrinking_diameter(self):
        params = ChamferingParams(start_diameter=18.0, end_diameter=20.0, is_external=True)
        assert validate_chamfering_params(params) != ""
        params = ChamferingParams(start_diameter=20.0, end_diameter=20.0, is_external=True)
        assert validate_chamfering_params(params) != ""

    def test_internal_requires_growing_diameter(self):
        params = ChamferingParams(start_diameter=20.0, end_diameter=18.0, is_external=False)
        assert validate_chamfering_params(params) != ""
        params = ChamferingParams(start_diameter=18.0, end_diameter=20.0, is_external=False)
        assert validate_chamfering_params(params) == ""

    def test_linear_is_45_degrees(self):
        params = ChamferingParams(chamfer_type=ChamferType.LINEAR, chamfer_size=1.0,
                                  chamfer_angle=30.0, start_diameter=20.0)
        start, end = chamfer_profile(params)
        dr = start.x - end.x
        dz = start.z - end.z
        assert dr == pytest.approx(dz)
        assert math.hypot(dr, dz) == pytest.approx(1.0)

    def test_custom_angle(self):
        params = ChamferingParams(chamfer_type=ChamferType.CUSTOM_ANGLE, chamfer_size=2.0,
                                  chamfer_angle=30.0)
        start, end = chamfer_profile(params)
        assert start.x - end.x == pytest.approx(1.0)
        assert start.z - end.z == pytest.approx(math.sqrt(3.0))

    def test_radius_segments(self):
        params = ChamferingParams(chamfer_type=ChamferType.RADIUS, chamfer_size=1.0,
                                  arc_segments=6)
        pts = chamfer_profile(params)
        assert len(pts) == 7
        assert pts[-1].x == pytest.approx(9.0)
        assert pts[-1].z == pytest.approx(-1.0)

    def test_toolpath(self, shaft):
        tp = generate_chamfering_toolpath(shaft, ChamferingParams())
        assert len(_cutting(tp)) == 2
        assert is_bracketed(tp, 5.0)


# ---------------------------------------------------------------------------
# Drilling
# ---------------------------------------------------------------------------


class TestDrilling:
    def test_defaults_are_valid(self):
        assert validate_drilling_params(DrillingParams()) == ""

    def test_peck_deeper_than_hole(self):
        error = validate_drilling_params(DrillingParams(hole_depth=5.0, peck_depth=10.0))
        assert "Peck depth" in error

    def test_simple_ignores_peck(self):
        params = DrillingParams(strategy=DrillingStrategy.SIMPLE, peck_depth=0.0)
        assert validate_drilling_params(params) == ""

    def test_all_moves_on_centreline(self, shaft):
        for strategy in DrillingStrategy:
            tp = generate_drilling_toolpath(shaft, DrillingParams(strategy=strategy))
            assert all(m.position.x == 0.0 for m in tp.movements)
            assert is_bracketed(tp, 5.0)

    def test_reaches_depth(self, shaft):
        tp = generate_drilling_toolpath(shaft, DrillingParams(hole_depth=20.0, peck_depth=6.0))
        assert min(m.position.z for m in _cutting(tp)) == pytest.approx(-20.0)

    def test_peck_count(self, shaft):
        params = DrillingParams(hole_depth=20.0, peck_depth=5.0, strategy=DrillingStrategy.PECK)
        assert len(_cutting(generate_drilling_toolpath(shaft, params))) == 4
        params.strategy = DrillingStrategy.DEEP_HOLE
        assert len(_cutting(generate_drilling_toolpath(shaft, params))) == 8

    def test_bottom_dwell(self, shaft):
        params = DrillingParams(strategy=DrillingStrategy.SIMPLE, dwell_time=0.5)
        tp = generate_drilling_toolpath(shaft, params)
        dwells = [m for m in tp.movements if m.move_type is MoveType.DWELL]
        assert dwells[-1].dwell_seconds == 0.5


# ---------------------------------------------------------------------------
# Generation with rejected parameters
# ---------------------------------------------------------------------------


class TestInvalidParametersDoNotRaise:
    """Generators degrade on parameters ``validate`` would reject."""

    def _check(self, tp):
        assert not tp.is_empty
        assert is_bracketed(tp, tp.movements[0].position.z)

    @pytest.mark.parametrize("strategy", [DrillingStrategy.PECK, DrillingStrategy.DEEP_HOLE])
    def test_drilling_zero_peck(self, shaft, strategy):
        params = DrillingParams(peck_depth=0.0, strategy=strategy)
        assert validate_drilling_params(params) != ""
        tp = generate_drilling_toolpath(shaft, params)
        self._check(tp)
        assert min(m.position.z for m in _cutting(tp)) == pytest.approx(-20.0)

    def test_drilling_zero_depth(self, shaft):
        params = DrillingParams(hole_depth=0.0)
        assert validate_drilling_params(params) != ""
        self._check(generate_drilling_toolpath(shaft, params))

    def test_grooving_zero_tool_width(self, shaft):
        params = GroovingParams(tool_width=0.0)
        assert validate_grooving_params(params) != ""
        assert plunge_positions(params) == pytest.approx([-25.0, -28.0])
        self._check(generate_grooving_toolpath(shaft, params))

    def test_threading_no_passes(self, shaft):
        params = ThreadingParams(number_of_passes=0, spring_passes=0)
        assert validate_threading_params(params) != ""
        self._check(generate_threading_toolpath(shaft, params))
