"""Shared FastAPI dependencies."""

from fastapi import HTTPException, Request

from clone_lab.orchestrator.runner import MindOrchestrator


def get_orchestrator(request: Request) -> MindOrchestrator:
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise HTTPException(status_code=503, detail="Pipeline not initialized")
    return orchestrator
