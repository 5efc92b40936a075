"""Execution planning: Mind dependency graph to ordered waves.

Waves come from Kahn's algorithm. Minds in a wave have every dependency
satisfied by earlier waves and may run in parallel; waves run in order.
Unknown dependencies and cycles are configuration errors raised when the
planner is built, never at run time.
"""

import logging
from typing import Sequence

from clone_lab.errors import PipelineConfigurationError
from clone_lab.minds.base import Mind
from clone_lab.minds.schemas import MindId
from clone_lab.orchestrator.schemas import ExecutionPlan, Wave

logger = logging.getLogger(__name__)


def build_execution_plan(dependencies: dict[MindId, list[MindId]]) -> ExecutionPlan:
    """Build waves from a dependency map.

    Raises:
        PipelineConfigurationError: On a dependency that is not a key of
            the map, or on a dependency cycle
    """
    for mind_id, deps in dependencies.items():
        unknown = [d for d in deps if d not in dependencies]
        if unknown:
            raise PipelineConfigurationError(
                f"Mind '{mind_id.value}' depends on unregistered minds: "
                f"{[d.value for d in unknown]}"
            )

    # declaration order decides order within a wave
    order = list(dependencies)
    remaining = set(order)
    waves: list[Wave] = []

    while remaining:
        ready = [m for m in order if m in remaining and not (set(dependencies[m]) & remaining)]
        if not ready:
            cycle = [m.value for m in order if m in remaining]
            raise PipelineConfigurationError(f"Circular dependency among minds: {cycle}")
        waves.append(Wave(index=len(waves), mind_ids=ready))
        remaining -= set(ready)

    logger.info(f"Execution order: {[[m.value for m in w.mind_ids] for w in waves]}")
    return ExecutionPlan(waves=waves, dependencies={m: list(d) for m, d in dependencies.items()})


class ExecutionPlanner:
    """Validated wave layout for a fixed set of Minds."""

    def __init__(self, minds: Sequence[Mind]):
        deps: dict[MindId, list[MindId]] = {}
        for mind in minds:
            if mind.mind_id in deps:
                raise PipelineConfigurationError(f"Mind '{mind.mind_id.value}' registered twice")
            deps[mind.mind_id] = mind.get_dependencies()
        self.plan = build_execution_plan(deps)

    @property
    def waves(self) -> list[Wave]:
        return self.plan.waves

    def wave_for(self, mind_id: MindId) -> int:
        for wave in self.plan.waves:
            if mind_id in wave.mind_ids:
                return wave.index
        raise ValueError(f"Mind not in plan: {mind_id}")

    def dependents_of(self, mind_id: MindId) -> set[MindId]:
        """Every Mind that depends on mind_id, directly or transitively."""
        found: set[MindId] = set()
        frontier = [mind_id]
        while frontier:
            current = frontier.pop()
            for candidate, deps in self.plan.dependencies.items():
                if current in deps and candidate not in found:
                    found.add(candidate)
                    frontier.append(candidate)
        return found
