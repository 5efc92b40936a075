"""Pipeline orchestration.

- planner: dependency graph to execution waves, validated at construction
- shared_context: run-scoped append-only results table and snapshots
- runner: MindOrchestrator (wave execution, timeouts, retries, cancellation)
"""

from clone_lab.orchestrator.planner import ExecutionPlanner, build_execution_plan
from clone_lab.orchestrator.runner import (
    MindOrchestrator,
    clear_cancellation,
    is_cancelled,
    is_session_active,
    request_cancellation,
)
from clone_lab.orchestrator.schemas import (
    ExecutionPlan,
    MindExecutionStatus,
    OrchestrationResult,
    OrchestratorConfig,
)
from clone_lab.orchestrator.shared_context import SharedContext

__all__ = [
    "ExecutionPlanner",
    "build_execution_plan",
    "MindOrchestrator",
    "clear_cancellation",
    "is_cancelled",
    "is_session_active",
    "request_cancellation",
    "ExecutionPlan",
    "MindExecutionStatus",
    "OrchestrationResult",
    "OrchestratorConfig",
    "SharedContext",
]
