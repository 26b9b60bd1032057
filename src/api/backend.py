import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Tuple

from assistant_ai.models import AssistantRequest, AssistantResponse, DailyBriefing
from assistant_ai.timeutil import local_now
from automation.jobs import ProactiveJobs
from automation.orchestrator import AutomationOrchestrator
from briefing.aggregator import BriefingAggregator, briefing_context, briefing_from_context, render_text
from integration.calendar_integration import calendar_from_env
from integration.email_integration import email_sender_from_env
from interpretation.response_interpreter import Tier
from llm.llm_client import LLMClient
from processing.prompts import build_briefing_prompt
from processing.request_processor import LLM_TIMEOUT_S, RequestProcessor
from storage.task_store import InMemoryTaskStore

logger = logging.getLogger(__name__)


class AssistantBackend:
    """Entry points shared by the HTTP host and anything else embedding the assistant."""

    def __init__(
        self,
        processor: RequestProcessor,
        orchestrator: AutomationOrchestrator,
        aggregator: BriefingAggregator,
        llm_client: Optional[LLMClient] = None,
        timeout_s: float = LLM_TIMEOUT_S,
        clock: Callable[[], datetime] = local_now,
    ):
        self.processor = processor
        self.orchestrator = orchestrator
        self.aggregator = aggregator
        self.llm_client = llm_client
        self.timeout_s = timeout_s
        self.clock = clock

    @classmethod
    def from_env(cls) -> "AssistantBackend":
        llm_client = LLMClient.from_env()
        calendar = calendar_from_env()
        tasks = InMemoryTaskStore().load_samples()
        jobs = ProactiveJobs(calendar, tasks, email_sender_from_env())
        return cls(
            processor=RequestProcessor(llm_client),
            orchestrator=AutomationOrchestrator.with_proactive_jobs(jobs),
            aggregator=jobs.aggregator,
            llm_client=llm_client,
        )

    async def process_request(
        self,
        input: str,
        context: Optional[Dict[str, Any]] = None,
        user_id: str = "default",
    ) -> AssistantResponse:
        response, _ = await self.process_request_with_tier(input, context, user_id)
        return response

    async def process_request_with_tier(
        self,
        input: str,
        context: Optional[Dict[str, Any]] = None,
        user_id: str = "default",
    ) -> Tuple[AssistantResponse, Tier]:
        request = AssistantRequest(input=input, context=context or {}, user_id=user_id)
        return await self.processor.process_with_tier(request)

    async def generate_daily_briefing(
        self,
        context: Optional[Dict[str, Any]] = None,
        briefing: Optional[DailyBriefing] = None,
    ) -> str:
        """Model-written briefing text, or a plain rendering when the model is unavailable.

        With an assembled ``briefing`` the plain rendering is ``render_text``;
        otherwise the template is filled from ``context`` alone.
        """
        if briefing is not None and context is None:
            context = briefing_context(briefing)
        context = context or {}
        date_label = f"{self.clock():%a %b %d %Y}"
        if self.llm_client is None:
            return self._plain_briefing(context, briefing, date_label)

        prompt = build_briefing_prompt(context, date_label)
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.llm_client.generate, prompt),
                timeout=self.timeout_s,
            )
        except Exception as e:
            logger.error(f"Error generating daily briefing: {e!r}")
            return self._plain_briefing(context, briefing, date_label)

    async def daily_briefing(self) -> str:
        """Briefing built from the live calendar and task list."""
        try:
            briefing = await self.aggregator.assemble()
        except Exception as e:
            logger.error(f"Could not assemble briefing context: {e}")
            return await self.generate_daily_briefing({})
        return await self.generate_daily_briefing(briefing=briefing)

    @staticmethod
    def _plain_briefing(context: Dict[str, Any], briefing: Optional[DailyBriefing], date_label: str) -> str:
        if briefing is not None:
            return render_text(briefing)
        return briefing_from_context(context, date_label)

    async def run_proactive_action(self, name: str, context: Optional[Dict[str, Any]] = None) -> bool:
        return await self.orchestrator.trigger(name, context)
