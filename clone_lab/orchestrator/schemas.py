"""Schemas for pipeline orchestration.

OrchestratorConfig is the run policy; ExecutionPlan is the static wave
layout derived from Mind dependencies; OrchestrationResult is the run
artifact handed back to callers, including partial results when a run
aborts.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from clone_lab.minds.schemas import MindId, MindResult, ValidationResult


class OrchestratorConfig(BaseModel):
    """Run policy for the MindOrchestrator."""

    default_timeout_s: float = Field(default=30.0, gt=0, description="Per-Mind analyze() timeout")
    mind_timeouts: dict[MindId, float] = Field(
        default_factory=dict,
        description="Per-Mind timeout overrides in seconds",
    )
    max_parallelism: int = Field(default=4, ge=1, description="Max Minds running at once within a wave")
    max_retries: int = Field(default=2, ge=0, description="Retries after a generator failure")
    retry_delays_s: list[float] = Field(
        default_factory=lambda: [1.0, 5.0, 15.0],
        description="Backoff before each retry; the last value repeats",
    )
    continue_on_error: bool = Field(
        default=False,
        description="Keep running independent Minds after a stage failure instead of aborting",
    )
    validate_results: bool = True

    def timeout_for(self, mind_id: MindId) -> float:
        return self.mind_timeouts.get(mind_id, self.default_timeout_s)

    def retry_delay(self, retry_number: int) -> float:
        """Delay before the given retry (1-indexed)."""
        if not self.retry_delays_s:
            return 0.0
        return self.retry_delays_s[min(retry_number - 1, len(self.retry_delays_s) - 1)]


class MindExecutionStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class Wave(BaseModel):
    """Minds whose dependencies are all satisfied by earlier waves."""

    index: int
    mind_ids: list[MindId]


class ExecutionPlan(BaseModel):
    waves: list[Wave]
    dependencies: dict[MindId, list[MindId]]

    @property
    def order(self) -> list[MindId]:
        return [m for wave in self.waves for m in wave.mind_ids]


class MindExecutionInfo(BaseModel):
    mind_id: MindId
    status: MindExecutionStatus = MindExecutionStatus.PENDING
    wave: int
    attempts: int = 0
    duration_ms: int = 0
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    error: Optional[str] = None


class OrchestrationError(BaseModel):
    mind_id: MindId
    error_type: str
    message: str
    retryable: bool = False


class OrchestrationResult(BaseModel):
    """Everything a run produced, complete or not."""

    session_id: str
    success: bool
    aborted: bool = False
    cancelled: bool = False
    failed_stage: Optional[MindId] = None
    results: dict[MindId, MindResult] = Field(default_factory=dict)
    validations: dict[MindId, ValidationResult] = Field(default_factory=dict)
    execution: dict[MindId, MindExecutionInfo] = Field(default_factory=dict)
    errors: list[OrchestrationError] = Field(default_factory=list)
    waves: list[Wave] = Field(default_factory=list)
    started_at: datetime
    completed_at: Optional[datetime] = None
    duration_ms: int = 0

    @property
    def completed_count(self) -> int:
        return len(self.results)

    @property
    def failed_count(self) -> int:
        return sum(1 for e in self.execution.values() if e.status == MindExecutionStatus.FAILED)

    @property
    def skipped_count(self) -> int:
        return sum(1 for e in self.execution.values() if e.status == MindExecutionStatus.SKIPPED)
