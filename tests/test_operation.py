"""Tests for the operation registry, operations and operation sequences."""

import math

import pytest

from lathecam.core.geometry import BoundingBox, Point3D
from lathecam.core.operation import (
    Operation, OperationRegistry, OperationSequence, OperationType, default_registry,
)
from lathecam.core.part import MeshPart, Part
from lathecam.core.progress import CancelToken
from lathecam.core.result import ErrorKind
from lathecam.core.tool import ToolType
from lathecam.core.toolpath.drilling import DrillingParams
from lathecam.core.toolpath.facing import FacingParams
from lathecam.core.toolpath.roughing import RoughingParams


class _ShapelessPart(Part):
    """Part whose extents cannot be resolved."""

    def bounding_box(self):
        return BoundingBox(Point3D(0, 0, math.nan), Point3D(1, 1, math.nan))

    def volume(self):
        return 0.0

    def surface_area(self):
        return 0.0

    def cross_section(self, axis_origin=(0, 0, 0), axis_direction=(0, 0, 1)):
        raise ValueError("no section")


@pytest.fixture(scope="module")
def shaft() -> MeshPart:
    return MeshPart.from_profile([(0, 0), (10, 0), (10, -30), (0, -30)])


@pytest.fixture
def registry() -> OperationRegistry:
    return default_registry()


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestRegistry:
    def test_every_kind_registered(self, registry):
        assert set(registry.kinds()) == set(OperationType)

    def test_create_with_defaults(self, registry):
        op = registry.create(OperationType.FACING)
        assert op.name == "Facing"
        assert isinstance(op.params, FacingParams)
        assert op.validate()

    def test_create_copies_params(self, registry):
        params = FacingParams(start_diameter=40.0)
        op = registry.create(OperationType.FACING, params, tool_number=3)
        params.start_diameter = 1.0
        assert op.params.start_diameter == 40.0
        assert op.tool_number == 3

    def test_wrong_params_type(self, registry):
        with pytest.raises(TypeError):
            registry.create(OperationType.FACING, DrillingParams())

    def test_unregistered_kind(self):
        with pytest.raises(KeyError):
            OperationRegistry().create(OperationType.FACING)

    def test_tool_types(self, registry):
        assert registry.get(OperationType.PARTING).tool_type is ToolType.PARTING
        assert registry.get(OperationType.INTERNAL_ROUGHING).tool_type is ToolType.BORING

    def test_labels(self):
        assert OperationType.EXTERNAL_ROUGHING.label == "External Roughing"


# ---------------------------------------------------------------------------
# Operation
# ---------------------------------------------------------------------------


class TestOperation:
    def test_generate_success(self, registry, shaft):
        op = registry.create(OperationType.FACING, FacingParams(start_diameter=20.0))
        outcome = op.generate(shaft)
        assert outcome.ok
        assert outcome.value.name == "Facing"

    def test_generate_rejects_bad_params(self, registry, shaft):
        op = registry.create(OperationType.FACING, FacingParams(stepover=0.0))
        outcome = op.generate(shaft)
        assert not outcome.ok
        assert outcome.error.kind is ErrorKind.PARAMETER
        assert outcome.error.operation == "Facing"

    def test_generate_without_extent_is_fatal(self, registry):
        op = registry.create(OperationType.FACING, FacingParams(start_diameter=20.0))
        outcome = op.generate(_ShapelessPart())
        assert outcome.error.kind is ErrorKind.FATAL

    def test_internal_roughing_forces_internal(self, registry, shaft):
        params = RoughingParams(start_diameter=10.0, end_diameter=14.0, start_z=0.0, end_z=-20.0,
                                use_profile_following=False)
        op = registry.create(OperationType.INTERNAL_ROUGHING, params)
        assert op.validate()
        tp = op.generate(shaft).unwrap()
        assert max(m.position.x for m in tp.movements if m.move_type.is_cutting) <= 7.0
        assert op.params.is_internal is False


# ---------------------------------------------------------------------------
# Sequences
# ---------------------------------------------------------------------------


def _sequence(registry) -> OperationSequence:
    seq = OperationSequence()
    seq.add(registry.create(OperationType.FACING, FacingParams(start_diameter=20.0)))
    seq.add(registry.create(OperationType.DRILLING, DrillingParams(hole_depth=10.0)))
    seq.add(registry.create(OperationType.FACING, FacingParams(stepover=-1.0), name="Bad"))
    return seq


class TestOperationSequence:
    def test_toggle(self, registry):
        seq = _sequence(registry)
        seq.set_active(1, False)
        assert not seq.is_active(1)
        assert [op.name for op in seq.active_operations()] == ["Facing", "Bad"]

    def test_out_of_range_ignored(self, registry):
        seq = _sequence(registry)
        seq.set_active(10, False)
        assert not seq.is_active(10)
        assert len(seq.active_operations()) == 3

    def test_generate_collects_errors(self, registry, shaft):
        result = _sequence(registry).generate_toolpaths(shaft)
        assert result.names() == ["Facing", "Drilling"]
        assert [e.operation for e in result.errors] == ["Bad"]
        assert not result.ok

    def test_cancel_before_start(self, registry, shaft):
        token = CancelToken()
        token.cancel()
        result = _sequence(registry).generate_toolpaths(shaft, token)
        assert result.cancelled
        assert result.toolpaths == []

    def test_progress_reaches_100(self, registry, shaft):
        updates = []
        token = CancelToken(on_update=lambda pct, status: updates.append(pct))
        _sequence(registry).generate_toolpaths(shaft, token)
        assert token.percent == 100
        assert updates == sorted(updates)

    def test_clear(self, registry):
        seq = _sequence(registry)
        seq.clear()
        assert len(seq) == 0


def test_operation_is_plain_dataclass(registry):
    op = registry.create(OperationType.PARTING)
    assert isinstance(op, Operation)
    assert "strategy" not in repr(op)
