from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from api.backend import AssistantBackend
from api.dependencies import get_backend

router = APIRouter(prefix="/automation")


class TriggerIn(BaseModel):
    context: Dict[str, Any] = Field(default_factory=dict)


@router.post("/trigger/{name}")
async def trigger_action(
    name: str,
    payload: Optional[TriggerIn] = None,
    backend: AssistantBackend = Depends(get_backend),
) -> dict:
    if backend.orchestrator.resolve(name) is None:
        raise HTTPException(status_code=404, detail=f"Unknown proactive action: {name}")
    ok = await backend.run_proactive_action(name, payload.context if payload else {})
    return {"action": name, "success": ok}


@router.get("/jobs")
async def list_jobs(backend: AssistantBackend = Depends(get_backend)) -> dict:
    return {
        "running": backend.orchestrator.running,
        "jobs": backend.orchestrator.status(),
    }


@router.get("/runs")
async def list_runs(limit: int = 50, backend: AssistantBackend = Depends(get_backend)) -> dict:
    """Most recent runs first."""
    runs = list(backend.orchestrator.history)[::-1][:limit]
    return {"runs": runs, "total": len(backend.orchestrator.history)}
