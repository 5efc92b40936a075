"""Clone Lab API - Mind pipeline service.

Serves the registered Minds and runs the analysis pipeline:
- Mind listings, health and the execution plan
- Synchronous pipeline runs over submitted sources
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from clone_lab import __version__
from clone_lab.api.routes import minds, pipeline
from clone_lab.config.settings import configure_logging, get_settings
from clone_lab.pipeline import build_orchestrator

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Building pipeline...")
    orchestrator = build_orchestrator(get_settings())
    app.state.orchestrator = orchestrator
    logger.info(
        f"Loaded {len(orchestrator.plan.order)} minds in {len(orchestrator.plan.waves)} waves"
    )
    logger.info("Clone Lab API ready")
    yield
    logger.info("Shutting down Clone Lab API")
    orchestrator.dispose()
    app.state.orchestrator = None


app = FastAPI(
    title="Clone Lab API",
    description="""
## Mind Pipeline Service

Runs dependency-ordered analyzer stages ("Minds") over extracted source
material and returns scored, evidence-backed traits with per-Mind validation.

### Key Endpoints

- `GET /v1/minds` - List registered Minds
- `GET /v1/minds/plan` - Execution waves
- `GET /v1/minds/{mind_id}` - Mind detail and health
- `POST /v1/pipeline/run` - Run the pipeline
""",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(minds.router, prefix="/v1")
app.include_router(pipeline.router, prefix="/v1")


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "service": "Clone Lab API",
        "version": __version__,
        "docs": "/docs",
        "endpoints": {
            "minds": "/v1/minds",
            "plan": "/v1/minds/plan",
            "pipeline": "/v1/pipeline/run",
        },
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    orchestrator = getattr(app.state, "orchestrator", None)
    if orchestrator is None:
        return {"status": "starting", "minds": []}
    statuses = orchestrator.health_check()
    return {
        "status": "healthy" if all(s.healthy for s in statuses) else "degraded",
        "minds_loaded": len(statuses),
        "minds": [s.model_dump(mode="json") for s in statuses],
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("clone_lab.api.main:app", host="0.0.0.0", port=8000, reload=False)
