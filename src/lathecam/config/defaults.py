"""Default feeds, speeds, and tool definitions.

These are conservative starting points for steel with carbide inserts;
users should adjust to their specific tooling and material.
"""

from ..core.tool import CuttingParameters, Tool, ToolGeometry, ToolLibrary, ToolType


def build_default_tool_library() -> ToolLibrary:
    """Return an in-memory ToolLibrary with a common lathe turret setup."""
    lib = ToolLibrary()

    tools = [
        Tool(
            number=1,
            name="CNMG 120408 turning",
            tool_type=ToolType.TURNING,
            cutting=CuttingParameters(feed_rate=0.2, spindle_speed=1200,
                                      depth_of_cut=2.0, stepover=1.0),
            geometry=ToolGeometry(tip_radius=0.8, clearance_angle=5.0),
        ),
        Tool(
            number=2,
            name="DNMG 110404 finishing",
            tool_type=ToolType.CONTOURING,
            cutting=CuttingParameters(feed_rate=0.1, spindle_speed=1800,
                                      depth_of_cut=0.5, stepover=0.3),
            geometry=ToolGeometry(tip_radius=0.4, clearance_angle=7.0),
        ),
        Tool(
            number=3,
            name="Facing tool",
            tool_type=ToolType.FACING,
            cutting=CuttingParameters(feed_rate=0.15, spindle_speed=1000,
                                      depth_of_cut=1.0, stepover=0.5),
        ),
        Tool(
            number=4,
            name="3 mm parting blade",
            tool_type=ToolType.PARTING,
            cutting=CuttingParameters(feed_rate=0.05, spindle_speed=800,
                                      depth_of_cut=3.0, stepover=3.0),
            geometry=ToolGeometry(tip_radius=0.2, insert_width=3.0),
        ),
        Tool(
            number=5,
            name="60 deg threading insert",
            tool_type=ToolType.THREADING,
            cutting=CuttingParameters(feed_rate=1.5, spindle_speed=400,
                                      depth_of_cut=0.2, stepover=0.1),
            geometry=ToolGeometry(tip_radius=0.1),
        ),
        Tool(
            number=6,
            name="2 mm grooving tool",
            tool_type=ToolType.GROOVING,
            cutting=CuttingParameters(feed_rate=0.03, spindle_speed=600,
                                      depth_of_cut=2.0, stepover=1.8),
            geometry=ToolGeometry(tip_radius=0.2, insert_width=2.0),
        ),
        Tool(
            number=7,
            name="12 mm boring bar",
            tool_type=ToolType.BORING,
            cutting=CuttingParameters(feed_rate=0.1, spindle_speed=900,
                                      depth_of_cut=1.0, stepover=0.5),
            geometry=ToolGeometry(tip_radius=0.4, diameter=12.0, length=80.0),
        ),
        Tool(
            number=8,
            name="8 mm carbide drill",
            tool_type=ToolType.DRILLING,
            cutting=CuttingParameters(feed_rate=0.08, spindle_speed=1200,
                                      depth_of_cut=5.0, stepover=0.0),
            geometry=ToolGeometry(tip_radius=0.0, diameter=8.0, length=60.0),
        ),
        Tool(
            number=9,
            name="45 deg chamfer tool",
            tool_type=ToolType.CHAMFERING,
            cutting=CuttingParameters(feed_rate=0.1, spindle_speed=1000,
                                      depth_of_cut=0.5, stepover=0.5),
        ),
    ]

    for t in tools:
        lib.add(t)

    return lib
