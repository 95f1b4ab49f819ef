"""Structured error values used instead of exceptions across the planner."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Generic, Optional, TypeVar

if TYPE_CHECKING:
    from .toolpath.base import Toolpath

T = TypeVar("T")


class ErrorKind(Enum):
    PARAMETER = "parameter"    # rejected by a validator, nothing generated
    GEOMETRY = "geometry"      # degenerate part/profile, fallback used or impossible
    FATAL = "fatal"            # no safe retract could be resolved
    CANCELLED = "cancelled"    # stopped by the progress collaborator


@dataclass(frozen=True)
class PlanError:
    """One error attached to an operation (or to the whole plan)."""

    kind: ErrorKind
    message: str
    operation: str = ""

    def __str__(self) -> str:
        prefix = f"{self.operation}: " if self.operation else ""
        return f"{prefix}{self.message} [{self.kind.value}]"


class ToolpathError(RuntimeError):
    """Raised by a generator when it cannot bracket moves with a safe retract."""


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a value or a :class:`PlanError`."""

    value: Optional[T] = None
    error: Optional[PlanError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> Result[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str, operation: str = "") -> Result[T]:
        return cls(error=PlanError(kind, message, operation))

    def unwrap(self) -> T:
        """Return the value or raise ``ToolpathError`` with the error text."""
        if self.error is not None:
            raise ToolpathError(str(self.error))
        return self.value


@dataclass
class PlanResult:
    """Ordered toolpaths from a planning run plus everything that went wrong.

    Operations that failed are simply absent from ``toolpaths``; their
    errors explain why.  ``warnings`` hold degradations that still produced
    a toolpath (fallback profiles, substituted tools).
    """

    toolpaths: list[Toolpath] = field(default_factory=list)
    errors: list[PlanError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return not self.errors and not self.cancelled

    def names(self) -> list[str]:
        return [tp.name for tp in self.toolpaths]
