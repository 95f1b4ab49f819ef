"""Lathe tool definitions and the tool library (JSON persisted).

The library is the single owner of :class:`Tool` records.  Operations and
toolpaths refer to a tool by its number and look it up here, so a tool can
be shared by any number of operations without aliasing a mutable object.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, asdict, replace
from enum import Enum
from pathlib import Path
from typing import Optional


class ToolType(Enum):
    TURNING = "turning"
    FACING = "facing"
    PARTING = "parting"
    THREADING = "threading"
    GROOVING = "grooving"
    CHAMFERING = "chamfering"
    CONTOURING = "contouring"
    BORING = "boring"
    DRILLING = "drilling"


@dataclass(frozen=True)
class CuttingParameters:
    """Nominal cutting data for a tool.

    Parameters
    ----------
    feed_rate:
        Cutting feed in mm/rev (> 0); multiply by rpm for mm/min.
    spindle_speed:
        Spindle speed in rpm (> 0).
    depth_of_cut:
        Radial depth per roughing pass in mm (> 0).
    stepover:
        Radial step between facing passes in mm (> 0).
    rapid_feed_rate:
        Traverse rate used for time estimates in mm/min.
    """

    feed_rate: float = 0.1
    spindle_speed: float = 1000.0
    depth_of_cut: float = 1.0
    stepover: float = 0.5
    rapid_feed_rate: float = 5000.0

    @property
    def feed_per_minute(self) -> float:
        return self.feed_rate * self.spindle_speed


@dataclass(frozen=True)
class ToolGeometry:
    """Physical insert/holder geometry; lengths in mm, angles in degrees."""

    tip_radius: float = 0.4
    clearance_angle: float = 7.0
    rake_angle: float = 0.0
    insert_width: float = 3.0
    diameter: float = 10.0   # drills and boring bars
    length: float = 50.0


@dataclass(frozen=True)
class Tool:
    """A cutting tool; ``number`` is its stable handle in the library."""

    number: int
    name: str
    tool_type: ToolType = ToolType.TURNING
    cutting: CuttingParameters = field(default_factory=CuttingParameters)
    geometry: ToolGeometry = field(default_factory=ToolGeometry)

    @property
    def radius(self) -> float:
        return self.geometry.diameter / 2.0

    def with_cutting(self, **changes) -> Tool:
        """Copy of this tool with some cutting parameters replaced."""
        return replace(self, cutting=replace(self.cutting, **changes))

    def to_dict(self) -> dict:
        d = asdict(self)
        d["tool_type"] = self.tool_type.value
        return d

    @classmethod
    def from_dict(cls, d: dict) -> Tool:
        d = dict(d)
        d["tool_type"] = ToolType(d["tool_type"])
        d["cutting"] = CuttingParameters(**d.get("cutting", {}))
        d["geometry"] = ToolGeometry(**d.get("geometry", {}))
        return cls(**d)


class ToolLibrary:
    """Tool arena keyed by tool number, optionally backed by a JSON file.

    Pass ``path=None`` for an in-memory library.
    """

    def __init__(self, path: Optional[Path] = None):
        self._path = Path(path) if path is not None else None
        self._tools: dict[int, Tool] = {}
        if self._path is not None and self._path.exists():
            self.load()

    @staticmethod
    def default_path() -> Path:
        return Path.home() / ".lathecam" / "tools.json"

    def __contains__(self, number: int) -> bool:
        return number in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def add(self, tool: Tool) -> None:
        self._tools[tool.number] = tool

    def remove(self, number: int) -> None:
        self._tools.pop(number, None)

    def get(self, number: int) -> Optional[Tool]:
        return self._tools.get(number)

    def list_tools(self) -> list[Tool]:
        return sorted(self._tools.values(), key=lambda t: t.number)

    def find_by_type(self, tool_type: ToolType) -> list[Tool]:
        return [t for t in self.list_tools() if t.tool_type is tool_type]

    def save(self, path: Optional[Path] = None) -> None:
        target = Path(path) if path is not None else self._path
        if target is None:
            raise ValueError("In-memory tool library has no path to save to")
        target.parent.mkdir(parents=True, exist_ok=True)
        data = [t.to_dict() for t in self.list_tools()]
        target.write_text(json.dumps(data, indent=2))

    def load(self, path: Optional[Path] = None) -> None:
        source = Path(path) if path is not None else self._path
        if source is None:
            raise ValueError("In-memory tool library has no path to load from")
        data = json.loads(source.read_text())
        self._tools = {}
        for d in data:
            tool = Tool.from_dict(d)
            self._tools[tool.number] = tool
