import time
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from api.backend import AssistantBackend
from api.dependencies import get_backend
from api.metrics import record_response

router = APIRouter(prefix="/assistant")


class ProcessIn(BaseModel):
    input: str
    context: Dict[str, Any] = Field(default_factory=dict)
    user_id: str = "default"


class BriefingIn(BaseModel):
    # Omitted context means "build it from the calendar and task list".
    context: Optional[Dict[str, Any]] = None


@router.post("/process")
async def process_request(payload: ProcessIn, backend: AssistantBackend = Depends(get_backend)) -> dict:
    started = time.perf_counter()
    response, tier = await backend.process_request_with_tier(payload.input, payload.context, payload.user_id)
    record_response(response, tier, time.perf_counter() - started)
    return response.model_dump(mode="json", by_alias=True)


@router.post("/briefing")
async def daily_briefing(payload: Optional[BriefingIn] = None, backend: AssistantBackend = Depends(get_backend)) -> dict:
    context = payload.context if payload else None
    if context is None:
        return {"briefing": await backend.daily_briefing()}
    return {"briefing": await backend.generate_daily_briefing(context)}
