"""Built-in lathe profiles, one per controller family.

Travel limits are in mm in the toolpath frame (X as radius).
"""

from __future__ import annotations

from ..gcode.machine import MachineConfig, MachineType

_PROFILES: dict[MachineType, MachineConfig] = {
    MachineType.GENERIC: MachineConfig(),
    MachineType.FANUC: MachineConfig(
        machine_name="Fanuc 0i-TF",
        machine_type=MachineType.FANUC,
        rapid_feed_rate=20000.0,
        max_spindle_speed=4500.0,
        max_x=150.0,
        min_z=-400.0,
        max_z=50.0,
    ),
    MachineType.HAAS: MachineConfig(
        machine_name="Haas ST-10",
        machine_type=MachineType.HAAS,
        rapid_feed_rate=24000.0,
        max_spindle_speed=6000.0,
        max_x=100.0,
        min_z=-356.0,
        max_z=20.0,
    ),
    MachineType.MAZAK: MachineConfig(
        machine_name="Mazak QTN-200",
        machine_type=MachineType.MAZAK,
        rapid_feed_rate=30000.0,
        max_spindle_speed=5000.0,
        max_x=150.0,
        min_z=-550.0,
        max_z=30.0,
    ),
    MachineType.OKUMA: MachineConfig(
        machine_name="Okuma LB3000",
        machine_type=MachineType.OKUMA,
        rapid_feed_rate=25000.0,
        max_spindle_speed=4200.0,
        max_x=160.0,
        min_z=-500.0,
        max_z=30.0,
    ),
    MachineType.SIEMENS: MachineConfig(
        machine_name="Siemens 828D",
        machine_type=MachineType.SIEMENS,
        rapid_feed_rate=15000.0,
        max_spindle_speed=4000.0,
        max_x=125.0,
        min_z=-400.0,
        max_z=30.0,
    ),
}


def get_profile(machine_type: MachineType) -> MachineConfig:
    return _PROFILES[machine_type]


def list_profiles() -> list[MachineConfig]:
    return list(_PROFILES.values())
