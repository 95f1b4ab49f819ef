"""Job orchestrator: ties part + stock + planner + post-processor together.

The Job class is the top-level entry point for the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional

from ..config.machine_profiles import get_profile
from ..gcode.machine import MachineType, PostProcessorOptions
from ..gcode.postprocessor import PostProcessor, ProcessingResult
from .operation import OperationSequence
from .part import MeshPart, load_part
from .planner import PlannerParameters, ToolpathPlanner
from .progress import ProgressReporter
from .result import PlanResult
from .stock import Stock
from .tool import ToolLibrary
from .units import Units


@dataclass
class Job:
    """Represents a complete turning job: part + stock + plan + machine.

    ``extra_operations`` (grooves, threads, chamfers, ...) run after
    Facing/Roughing/Finishing in their own order; Parting stays last so
    nothing is machined after the part is cut off.
    """

    name: str = "Untitled"
    units: Units = Units.MM
    part: Optional[MeshPart] = None
    stock: Optional[Stock] = None
    planner_params: PlannerParameters = field(default_factory=PlannerParameters)
    machine_type: MachineType = MachineType.GENERIC
    tool_library: ToolLibrary = field(default_factory=ToolLibrary)
    options: PostProcessorOptions = field(default_factory=PostProcessorOptions)
    extra_operations: OperationSequence = field(default_factory=OperationSequence)
    plan: Optional[PlanResult] = field(default=None, repr=False)

    def load_part(self, path: Path) -> MeshPart:
        self.part = load_part(path)
        return self.part

    def compute_toolpaths(self, progress: Optional[ProgressReporter] = None) -> PlanResult:
        """Plan the job and return the toolpaths with their diagnostics.

        Raises
        ------
        RuntimeError:
            If part or stock have not been set before calling.
        """
        if self.part is None:
            raise RuntimeError("No part loaded")
        if self.stock is None:
            raise RuntimeError("Stock not defined")

        planner = ToolpathPlanner(tool_library=self.tool_library)
        plan = planner.generate_sequence(
            self.stock.as_part(), self.part, self.planner_params, progress=progress,
        )
        if len(self.extra_operations) and not plan.cancelled:
            extra = self.extra_operations.generate_toolpaths(self.part, progress)
            at = len(plan.toolpaths)
            if at and plan.toolpaths[-1].operation_type == "parting":
                at -= 1
            plan.toolpaths[at:at] = extra.toolpaths
            plan.errors.extend(extra.errors)
            plan.cancelled = extra.cancelled

        self.plan = plan
        return plan

    def post_processor(self) -> PostProcessor:
        config = replace(get_profile(self.machine_type), units=self.units,
                         decimals=self.units.default_decimals)
        return PostProcessor(self.machine_type, config, self.options, self.tool_library)

    def post_process(self, output: Optional[Path] = None) -> ProcessingResult:
        """Render the planned toolpaths (planning first if needed).

        The program is written to *output* when given and successful.
        """
        plan = self.plan if self.plan is not None else self.compute_toolpaths()
        post = self.post_processor()
        if output is not None:
            return post.generate(plan.toolpaths, output)
        return post.process(plan.toolpaths)
