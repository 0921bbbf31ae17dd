"""FastAPI routes for the Lineup Agent API.

Endpoints:
- GET  /health   - Health check
- POST /lineups  - Run the lineup workflow for a list of player names
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from lineup_agent.agent.workflow import LineupWorkflow
from lineup_agent.config import get_settings
from lineup_agent.llm.router import get_router
from lineup_agent.llm.structured import LLMStructuredGenerator
from lineup_agent.schemas import LineupRequest, LineupRunResult


logger = logging.getLogger(__name__)
router = APIRouter()


def get_workflow() -> LineupWorkflow:
    """Dependency providing a workflow wired to the configured providers."""
    settings = get_settings()
    return LineupWorkflow(LLMStructuredGenerator(get_router(), settings=settings), settings=settings)


# =============================================================================
# Health Check
# =============================================================================

@router.get("/health")
async def health() -> dict:
    """Health check endpoint."""
    settings = get_settings()
    return {
        "status": "ok",
        "version": settings.app_version,
        "environment": settings.environment,
    }


# =============================================================================
# Lineup Endpoints
# =============================================================================

@router.post("/lineups", response_model=LineupRunResult)
async def create_lineup(
    request: LineupRequest,
    workflow: Annotated[LineupWorkflow, Depends(get_workflow)],
) -> LineupRunResult:
    """Generate a lineup.

    A run that exhausts its model-call budget is still a 200 response with
    ``status="stuck"`` and the stuck handler's message.
    """
    result = await workflow.run(request.players)
    logger.info(f"[{result.run_id}] Lineup request finished: {result.status.value}")
    return result
