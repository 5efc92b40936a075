"""Pipeline API routes.

Runs are synchronous: the request returns the full run artifact, including
partial results when a stage failed.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from clone_lab.api.dependencies import get_orchestrator
from clone_lab.errors import PipelineConfigurationError
from clone_lab.minds.schemas import ExtractedData
from clone_lab.orchestrator.runner import MindOrchestrator, request_cancellation
from clone_lab.orchestrator.schemas import OrchestrationResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pipeline", tags=["pipeline"])


class PipelineRunRequest(BaseModel):
    sources: list[ExtractedData] = Field(description="Extracted source records to analyze")
    session_id: Optional[str] = None
    options: dict[str, dict[str, Any]] = Field(
        default_factory=dict,
        description="Per-run option overrides keyed by mind id",
    )
    reference_time: Optional[datetime] = Field(
        default=None,
        description="'Now' for recency scoring; defaults to the request time",
    )


@router.post("/run", response_model=OrchestrationResult)
def run_pipeline(
    request: PipelineRunRequest,
    orchestrator: MindOrchestrator = Depends(get_orchestrator),
):
    """Run every registered Mind over the submitted sources."""
    try:
        return orchestrator.execute(
            request.sources,
            session_id=request.session_id,
            options=request.options,
            reference_time=request.reference_time,
        )
    except PipelineConfigurationError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/{session_id}/cancel")
async def cancel_run(session_id: str):
    """Stop a running session from scheduling further Minds.

    Unknown or finished sessions are left alone (cancellation_requested is false).
    """
    requested = request_cancellation(session_id)
    return {"session_id": session_id, "cancellation_requested": requested}
