"""Mind API routes.

Lists the registered Minds, their health and the execution plan.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from clone_lab.api.dependencies import get_orchestrator
from clone_lab.minds.registry import MindSummary, get_mind_registry
from clone_lab.minds.schemas import MindHealthStatus, MindId
from clone_lab.orchestrator.runner import MindOrchestrator
from clone_lab.orchestrator.schemas import ExecutionPlan

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/minds", tags=["minds"])


class MindDetail(BaseModel):
    summary: MindSummary
    health: MindHealthStatus
    options: dict


@router.get("", response_model=list[MindSummary])
async def list_minds():
    """List all registered Minds."""
    return get_mind_registry().list_all()


@router.get("/plan", response_model=ExecutionPlan)
async def get_plan(orchestrator: MindOrchestrator = Depends(get_orchestrator)):
    """Get the wave layout the orchestrator runs."""
    return orchestrator.plan


@router.get("/{mind_id}", response_model=MindDetail)
async def get_mind(mind_id: str, orchestrator: MindOrchestrator = Depends(get_orchestrator)):
    """Get a Mind's description, health and effective options."""
    try:
        key = MindId(mind_id)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown mind: {mind_id}")

    summary = next((s for s in get_mind_registry().list_all() if s.mind_id == key), None)
    if summary is None:
        raise HTTPException(status_code=404, detail=f"Mind not registered: {mind_id}")

    mind = orchestrator.get_mind(key)
    return MindDetail(
        summary=summary,
        health=mind.health_check(),
        options=mind.options.model_dump(),
    )
