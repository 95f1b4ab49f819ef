"""Machining operations: a closed set of kinds dispatched through a registry.

An :class:`Operation` binds one :class:`OperationType` to its parameter
record, a tool number and the strategy (validator + generator) looked up
in an :class:`OperationRegistry`.  Registries are ordinary objects: build
one with :func:`default_registry` and hand it to whoever creates
operations.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Iterator, Optional

from .part import Part
from .profile import Profile2D
from .progress import NullProgress, ProgressReporter
from .result import ErrorKind, PlanResult, Result, ToolpathError
from .tool import ToolType
from .toolpath.base import Toolpath
from .toolpath.chamfering import (
    ChamferingParams, generate_chamfering_toolpath, validate_chamfering_params,
)
from .toolpath.contouring import (
    ContouringParams, generate_contouring_toolpath, validate_contouring_params,
)
from .toolpath.drilling import DrillingParams, generate_drilling_toolpath, validate_drilling_params
from .toolpath.facing import FacingParams, generate_facing_toolpath, validate_facing_params
from .toolpath.finishing import (
    FinishingParams, generate_finishing_toolpath, validate_finishing_params,
)
from .toolpath.grooving import GroovingParams, generate_grooving_toolpath, validate_grooving_params
from .toolpath.parting import PartingParams, generate_parting_toolpath, validate_parting_params
from .toolpath.roughing import RoughingParams, generate_roughing_toolpath, validate_roughing_params
from .toolpath.threading import (
    ThreadingParams, generate_threading_toolpath, validate_threading_params,
)


class OperationType(Enum):
    FACING = "facing"
    EXTERNAL_ROUGHING = "external_roughing"
    INTERNAL_ROUGHING = "internal_roughing"
    FINISHING = "finishing"
    PARTING = "parting"
    THREADING = "threading"
    GROOVING = "grooving"
    CHAMFERING = "chamfering"
    DRILLING = "drilling"
    CONTOURING = "contouring"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


@dataclass(frozen=True)
class OperationStrategy:
    """Validator and generator for one operation kind."""

    params_type: type
    default_params: Callable[[], Any]
    validate: Callable[[Any], str]
    generate: Callable[..., Toolpath]
    tool_type: ToolType = ToolType.TURNING
    uses_profile: bool = False


class OperationRegistry:
    """Maps each :class:`OperationType` to its :class:`OperationStrategy`."""

    def __init__(self) -> None:
        self._strategies: dict[OperationType, OperationStrategy] = {}

    def register(self, kind: OperationType, strategy: OperationStrategy) -> None:
        self._strategies[kind] = strategy

    def get(self, kind: OperationType) -> OperationStrategy:
        try:
            return self._strategies[kind]
        except KeyError:
            raise KeyError(f"No strategy registered for {kind.value}") from None

    def __contains__(self, kind: OperationType) -> bool:
        return kind in self._strategies

    def kinds(self) -> list[OperationType]:
        return list(self._strategies)

    def create(
        self,
        kind: OperationType,
        params: Any = None,
        name: str = "",
        tool_number: int = 1,
        profile: Optional[Profile2D] = None,
    ) -> Operation:
        """New operation owning a private copy of *params* (defaults if None).

        Raises
        ------
        KeyError:
            If *kind* is not registered.
        TypeError:
            If *params* is not the kind's parameter record.
        """
        strategy = self.get(kind)
        if params is None:
            params = strategy.default_params()
        elif not isinstance(params, strategy.params_type):
            raise TypeError(
                f"{kind.value} expects {strategy.params_type.__name__}, "
                f"got {type(params).__name__}"
            )
        return Operation(
            kind=kind,
            name=name or kind.label,
            params=copy.deepcopy(params),
            tool_number=tool_number,
            strategy=strategy,
            profile=profile,
        )


def _as_internal(fn: Callable) -> Callable:
    """Run a roughing validator/generator with ``is_internal`` forced on."""
    def wrapper(*args, **kwargs):
        if len(args) == 1:
            return fn(replace(args[0], is_internal=True))
        part, params, *rest = args
        return fn(part, replace(params, is_internal=True), *rest, **kwargs)
    return wrapper


def default_registry() -> OperationRegistry:
    """A fresh registry holding every built-in lathe operation."""
    reg = OperationRegistry()
    reg.register(OperationType.FACING, OperationStrategy(
        FacingParams, FacingParams, validate_facing_params,
        generate_facing_toolpath, ToolType.FACING))
    reg.register(OperationType.EXTERNAL_ROUGHING, OperationStrategy(
        RoughingParams, RoughingParams, validate_roughing_params,
        generate_roughing_toolpath, ToolType.TURNING, uses_profile=True))
    reg.register(OperationType.INTERNAL_ROUGHING, OperationStrategy(
        RoughingParams,
        lambda: RoughingParams(start_diameter=20.0, end_diameter=40.0, is_internal=True),
        _as_internal(validate_roughing_params),
        _as_internal(generate_roughing_toolpath), ToolType.BORING, uses_profile=True))
    reg.register(OperationType.FINISHING, OperationStrategy(
        FinishingParams, FinishingParams, validate_finishing_params,
        generate_finishing_toolpath, ToolType.TURNING, uses_profile=True))
    reg.register(OperationType.PARTING, OperationStrategy(
        PartingParams, PartingParams, validate_parting_params,
        generate_parting_toolpath, ToolType.PARTING))
    reg.register(OperationType.THREADING, OperationStrategy(
        ThreadingParams, ThreadingParams, validate_threading_params,
        generate_threading_toolpath, ToolType.THREADING))
    reg.register(OperationType.GROOVING, OperationStrategy(
        GroovingParams, GroovingParams, validate_grooving_params,
        generate_grooving_toolpath, ToolType.GROOVING))
    reg.register(OperationType.CHAMFERING, OperationStrategy(
        ChamferingParams, ChamferingParams, validate_chamfering_params,
        generate_chamfering_toolpath, ToolType.CHAMFERING))
    reg.register(OperationType.DRILLING, OperationStrategy(
        DrillingParams, DrillingParams, validate_drilling_params,
        generate_drilling_toolpath, ToolType.DRILLING))
    reg.register(OperationType.CONTOURING, OperationStrategy(
        ContouringParams, ContouringParams, validate_contouring_params,
        generate_contouring_toolpath, ToolType.CONTOURING))
    return reg


@dataclass
class Operation:
    """One parameterised machining step.

    ``generate_toolpath`` does not validate; calling it with parameters
    that ``validate()`` rejects gives unspecified geometry.  Use
    :meth:`generate` for the checked path.
    """

    kind: OperationType
    name: str
    params: Any
    tool_number: int
    strategy: OperationStrategy = field(repr=False, compare=False)
    profile: Optional[Profile2D] = field(default=None, repr=False)

    def validation_error(self) -> str:
        return self.strategy.validate(self.params)

    def validate(self) -> bool:
        return self.validation_error() == ""

    def generate_toolpath(self, part: Part) -> Toolpath:
        if self.strategy.uses_profile:
            return self.strategy.generate(
                part, self.params, self.name, self.tool_number, profile=self.profile)
        return self.strategy.generate(part, self.params, self.name, self.tool_number)

    def generate(self, part: Part) -> Result[Toolpath]:
        """Validate, then generate; failures come back as a ``Result``."""
        error = self.validation_error()
        if error:
            return Result.failure(ErrorKind.PARAMETER, error, self.name)
        try:
            tp = self.generate_toolpath(part)
        except ToolpathError as exc:
            return Result.failure(ErrorKind.FATAL, str(exc), self.name)
        if tp.is_empty:
            return Result.failure(ErrorKind.GEOMETRY, "No movements generated", self.name)
        return Result.success(tp)


@dataclass
class SequenceEntry:
    operation: Operation
    active: bool = True


class OperationSequence:
    """Ordered operations, each of which can be switched off without reordering."""

    def __init__(self) -> None:
        self._entries: list[SequenceEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Operation]:
        return (e.operation for e in self._entries)

    def add(self, operation: Operation, active: bool = True) -> None:
        self._entries.append(SequenceEntry(operation, active))

    def operation(self, index: int) -> Operation:
        return self._entries[index].operation

    def set_active(self, index: int, active: bool) -> None:
        """Toggle entry *index*; indices out of range are ignored."""
        if 0 <= index < len(self._entries):
            self._entries[index].active = active

    def is_active(self, index: int) -> bool:
        if 0 <= index < len(self._entries):
            return self._entries[index].active
        return False

    def active_operations(self) -> list[Operation]:
        return [e.operation for e in self._entries if e.active]

    def clear(self) -> None:
        self._entries.clear()

    def generate_toolpaths(
        self,
        part: Part,
        progress: Optional[ProgressReporter] = None,
    ) -> PlanResult:
        """Generate every active operation in order.

        Cancellation is checked before each operation; whatever finished
        before the cancel is returned.
        """
        progress = progress or NullProgress()
        ops = self.active_operations()
        result = PlanResult()
        for i, op in enumerate(ops):
            if progress.is_cancelled():
                result.cancelled = True
                break
            progress.set_status(f"Generating {op.name}")
            outcome = op.generate(part)
            if outcome.ok:
                result.toolpaths.append(outcome.value)
            else:
                result.errors.append(outcome.error)
            progress.set_progress(int(100 * (i + 1) / len(ops)))
        return result
