"""Core toolpath data structures: movements and the toolpath container."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, Optional

import numpy as np

from ..geometry import BoundingBox, Point3D, transform_point


class MoveType(Enum):
    """Type of lathe motion."""
    RAPID = "rapid"                # G0, no cutting
    LINEAR = "linear"              # G1
    CIRCULAR_CW = "circular_cw"    # G2
    CIRCULAR_CCW = "circular_ccw"  # G3
    DWELL = "dwell"                # G4, tool stays put
    TOOL_CHANGE = "tool_change"    # T word

    @property
    def is_motion(self) -> bool:
        return self in (
            MoveType.RAPID, MoveType.LINEAR,
            MoveType.CIRCULAR_CW, MoveType.CIRCULAR_CCW,
        )

    @property
    def is_cutting(self) -> bool:
        return self in (MoveType.LINEAR, MoveType.CIRCULAR_CW, MoveType.CIRCULAR_CCW)


@dataclass(frozen=True)
class Movement:
    """One atomic motion; immutable once appended to a toolpath."""
    move_type: MoveType
    position: Point3D
    feed_rate: float = 0.0            # mm/min, 0 for rapids
    spindle_speed: float = 0.0        # rpm, 0 → unchanged
    comment: str = ""
    start: Optional[Point3D] = None   # None → previous position
    center: Optional[Point3D] = None  # arcs only
    dwell_seconds: float = 0.0
    tool_number: Optional[int] = None  # tool changes only


@dataclass
class Toolpath:
    """A named ordered sequence of movements bound to one tool."""
    name: str = ""
    tool_number: int = 1
    operation_type: str = ""
    movements: list[Movement] = field(default_factory=list)

    # -- building -----------------------------------------------------------

    @property
    def current_position(self) -> Optional[Point3D]:
        return self.movements[-1].position if self.movements else None

    def add(self, movement: Movement) -> None:
        if movement.start is None and self.movements and movement.move_type.is_motion:
            movement = replace(movement, start=self.current_position)
        self.movements.append(movement)

    def add_rapid(self, position: Point3D, comment: str = "") -> None:
        self.add(Movement(MoveType.RAPID, position, comment=comment))

    def add_linear(
        self,
        position: Point3D,
        feed_rate: float,
        spindle_speed: float = 0.0,
        comment: str = "",
    ) -> None:
        self.add(Movement(
            MoveType.LINEAR, position, feed_rate=feed_rate,
            spindle_speed=spindle_speed, comment=comment,
        ))

    def add_circular(
        self,
        position: Point3D,
        center: Point3D,
        feed_rate: float,
        clockwise: bool = True,
        comment: str = "",
    ) -> None:
        kind = MoveType.CIRCULAR_CW if clockwise else MoveType.CIRCULAR_CCW
        self.add(Movement(kind, position, feed_rate=feed_rate, center=center, comment=comment))

    def add_threading_move(
        self,
        position: Point3D,
        pitch: float,
        spindle_speed: float,
        comment: str = "",
    ) -> None:
        """Synchronized feed move; feed is pitch x rpm."""
        note = comment or f"thread pitch {pitch:g}"
        self.add(Movement(
            MoveType.LINEAR, position, feed_rate=pitch * spindle_speed,
            spindle_speed=spindle_speed, comment=note,
        ))

    def add_dwell(self, seconds: float, comment: str = "") -> None:
        here = self.current_position or Point3D()
        self.add(Movement(MoveType.DWELL, here, dwell_seconds=seconds, comment=comment))

    def add_tool_change(self, tool_number: int, comment: str = "") -> None:
        here = self.current_position or Point3D()
        self.add(Movement(MoveType.TOOL_CHANGE, here, tool_number=tool_number, comment=comment))

    def extend(self, other: Toolpath) -> None:
        for mv in other.movements:
            self.add(replace(mv, start=None) if mv.move_type.is_motion else mv)

    # -- queries ------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.movements)

    @property
    def is_empty(self) -> bool:
        return len(self.movements) == 0

    def positions(self) -> list[Point3D]:
        return [m.position for m in self.movements]

    def bounding_box(self) -> Optional[BoundingBox]:
        return BoundingBox.from_points(self.positions())

    def _segments(self) -> Iterable[tuple[Movement, float]]:
        prev: Optional[Point3D] = None
        for mv in self.movements:
            start = mv.start if mv.start is not None else prev
            if start is None:
                start = Point3D()
            dist = start.distance_to(mv.position) if mv.move_type.is_motion else 0.0
            yield mv, dist
            prev = mv.position

    def total_distance(self) -> float:
        return sum(d for _, d in self._segments())

    def cutting_distance(self) -> float:
        return sum(d for mv, d in self._segments() if mv.move_type.is_cutting)

    def estimate_machining_time(self, rapid_feed_rate: Optional[float] = None) -> float:
        """Cycle time in minutes.

        Cutting moves take distance / feed; dwells add their seconds; rapids
        are counted only when *rapid_feed_rate* (mm/min) is given.  Arcs use
        the chord length.
        """
        minutes = 0.0
        for mv, dist in self._segments():
            if mv.move_type is MoveType.DWELL:
                minutes += mv.dwell_seconds / 60.0
            elif mv.move_type is MoveType.RAPID:
                if rapid_feed_rate:
                    minutes += dist / rapid_feed_rate
            elif mv.move_type.is_cutting and mv.feed_rate > 0:
                minutes += dist / mv.feed_rate
        return minutes

    # -- transformation -----------------------------------------------------

    def remove_redundant_moves(self, tol: float = 1e-9) -> int:
        """Drop straight moves that go nowhere; returns how many were removed.

        A rapid or linear move whose target equals the previous position is a
        no-op.  Dwells, tool changes and arcs are always kept, and the order
        of the remaining moves is unchanged.
        """
        kept: list[Movement] = []
        for mv in self.movements:
            if (
                kept
                and mv.move_type in (MoveType.RAPID, MoveType.LINEAR)
                and mv.position.is_close(kept[-1].position, tol)
            ):
                continue
            kept.append(mv)
        removed = len(self.movements) - len(kept)
        self.movements = kept
        return removed

    def optimize(self) -> int:
        return self.remove_redundant_moves()

    def apply_transform(self, matrix: np.ndarray) -> None:
        """Transform every stored position by a 4x4 homogeneous *matrix*."""
        def tf(p: Optional[Point3D]) -> Optional[Point3D]:
            return None if p is None else transform_point(matrix, p)

        self.movements = [
            replace(mv, position=tf(mv.position), start=tf(mv.start), center=tf(mv.center))
            for mv in self.movements
        ]
