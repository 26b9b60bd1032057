import os
import logging

from fastapi import APIRouter, Depends, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from api.backend import AssistantBackend
from api.dependencies import get_backend

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check(backend: AssistantBackend = Depends(get_backend)) -> dict:
    """Health check endpoint for container orchestration."""
    llm = backend.llm_client
    return {
        "status": "healthy",
        "profile": os.getenv("DEPLOYMENT_PROFILE", "unknown"),
        "llm_provider": llm.provider_name if llm else None,
        "automation_running": backend.orchestrator.running,
        "jobs": len(backend.orchestrator.jobs),
    }


@router.get("/metrics")
async def metrics() -> Response:
    """
    Prometheus scrape endpoint.
    """
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
