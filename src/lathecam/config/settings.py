"""Application preferences (persisted to disk)."""

from __future__ import annotations

import json
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

from ..core.units import Units
from ..gcode.machine import MachineType


@dataclass
class AppSettings:
    """User preferences, serialized to ~/.lathecam/settings.json."""

    default_machine: str = MachineType.GENERIC.value
    default_units: str = Units.MM.value
    default_material: str = "steel"
    last_open_dir: str = ""
    last_save_dir: str = ""

    @property
    def machine_type(self) -> MachineType:
        return MachineType(self.default_machine)

    @property
    def units(self) -> Units:
        return Units.parse(self.default_units)

    @staticmethod
    def _path() -> Path:
        return Path.home() / ".lathecam" / "settings.json"

    def save(self, path: Optional[Path] = None) -> None:
        p = Path(path) if path is not None else self._path()
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(asdict(self), indent=2))

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "AppSettings":
        p = Path(path) if path is not None else cls._path()
        if p.exists():
            data = json.loads(p.read_text())
            return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})
        return cls()
