import asyncio
import logging
import os
from typing import Optional, Tuple

from assistant_ai.models import AssistantRequest, AssistantResponse
from interpretation.response_interpreter import (
    ModelCall,
    ResponseInterpreter,
    Tier,
    decide,
    static_fallback,
)
from llm.llm_client import LLMClient
from processing.prompts import build_request_prompt

logger = logging.getLogger(__name__)

LLM_TIMEOUT_S = float(os.getenv("LLM_TIMEOUT_S", "30"))


class RequestProcessor:
    """prompt -> model -> interpreter, degrading instead of raising."""

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        interpreter: Optional[ResponseInterpreter] = None,
        timeout_s: float = LLM_TIMEOUT_S,
    ):
        self.llm_client = llm_client
        self.interpreter = interpreter or ResponseInterpreter()
        self.timeout_s = timeout_s

    async def process(self, request: AssistantRequest) -> AssistantResponse:
        response, _ = await self.process_with_tier(request)
        return response

    async def process_with_tier(self, request: AssistantRequest) -> Tuple[AssistantResponse, Tier]:
        """Like `process`, also reporting which interpretation tier produced the response."""
        try:
            call = await self._call_model(request)
            response, tier = self.interpreter.resolve(request, decide(call))
            logger.info(
                f"Processed request for user {request.user_id}: intent={response.intent} "
                f"confidence={response.confidence:.2f} tier={tier.value} "
                f"actions={len(response.actions)}"
            )
            return response, tier
        except Exception:
            logger.exception("Error processing AI request")
            return static_fallback(request), Tier.STATIC_FALLBACK

    async def _call_model(self, request: AssistantRequest) -> ModelCall:
        if self.llm_client is None:
            return ModelCall.not_configured()

        prompt = build_request_prompt(request)
        try:
            text = await asyncio.wait_for(
                asyncio.to_thread(self.llm_client.generate, prompt.user, prompt.system),
                timeout=self.timeout_s,
            )
        except Exception as e:
            logger.error(f"Language model call failed: {e!r}")
            return ModelCall.failed(e)
        return ModelCall.replied(text)
