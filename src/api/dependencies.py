from fastapi import HTTPException

from api import state
from api.backend import AssistantBackend


def get_backend() -> AssistantBackend:
    if state.backend is None:
        raise HTTPException(status_code=503, detail="Assistant backend not initialized")
    return state.backend
