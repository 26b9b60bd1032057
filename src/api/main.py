import logging
import os

from fastapi import FastAPI

from api import state
from api.backend import AssistantBackend
from api.metrics import record_job_run
from api.routers import assistant, automation, ops

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
AUTOMATION_ENABLED = os.getenv("AUTOMATION_ENABLED", "true").lower() in {"1", "true", "yes"}
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))

# Logging configuration
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Executive Assistant AI")

app.include_router(assistant.router)
app.include_router(automation.router)
app.include_router(ops.router)


@app.on_event("startup")
async def startup() -> None:
    state.backend = AssistantBackend.from_env()
    state.backend.orchestrator.add_listener(record_job_run)

    if AUTOMATION_ENABLED:
        state.backend.orchestrator.start()
    else:
        logger.info("Automation disabled; proactive jobs only run on manual trigger")


@app.on_event("shutdown")
async def shutdown() -> None:
    if state.backend is not None:
        await state.backend.orchestrator.stop()


def run() -> None:
    import uvicorn
    uvicorn.run(app, host=HOST, port=PORT, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
