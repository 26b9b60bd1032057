import asyncio
import time

import pytest

from assistant_ai.models import ActionType, AssistantRequest
from llm.llm_client import LLMClient
from interpretation.response_interpreter import Tier
from processing.request_processor import RequestProcessor


def _process(processor: RequestProcessor, text: str):
    return asyncio.run(processor.process(AssistantRequest(input=text)))


def test_without_model_generic_input_is_static_fallback():
    response = _process(RequestProcessor(), "test")
    assert response.intent == "general"
    assert response.confidence == 0.5
    assert response.context["fallback"] is True


def test_without_model_schedule_request():
    response = _process(RequestProcessor(), "Schedule a meeting with John tomorrow at 2 PM")
    assert response.intent == "schedule_meeting"
    assert response.confidence == 0.8
    assert len(response.actions) == 1
    action = response.actions[0]
    assert action.type == ActionType.SCHEDULE_MEETING
    assert "2" in action.parameters.time
    assert action.parameters.date == "tomorrow"


def test_without_model_email_recipient():
    response = _process(RequestProcessor(), "Send an email to client@example.com about the project update")
    assert response.actions[0].parameters.to == "client@example.com"


def test_without_model_task_priority_and_due_date():
    response = _process(RequestProcessor(), "Create a high priority task to review the budget by Friday")
    params = response.actions[0].parameters
    assert params.priority == "high"
    assert "Friday" in params.model_dump(by_alias=True)["dueDate"]


def test_model_free_path_is_deterministic():
    processor = RequestProcessor()
    first = _process(processor, "Book a room and remind me to bring slides")
    second = _process(processor, "Book a room and remind me to bring slides")
    assert (first.intent, first.confidence) == (second.intent, second.confidence)


def test_structured_model_reply(fake_provider_factory):
    provider = fake_provider_factory('{"intent": "create_task", "confidence": 0.95, "response": "Done."}')
    response = _process(RequestProcessor(LLMClient(provider)), "add a task")
    assert response.intent == "create_task"
    assert response.confidence == 0.95
    assert response.response == "Done."


def test_unreachable_model_degrades(failing_provider):
    response = _process(RequestProcessor(LLMClient(failing_provider)), "hello")
    assert response.confidence == 0.5
    assert response.context["fallback"] is True


def test_slow_model_times_out():
    class SlowProvider:
        def generate(self, *, system, user):
            time.sleep(0.5)
            return '{"intent": "general"}'

    processor = RequestProcessor(LLMClient(SlowProvider()), timeout_s=0.05)
    response = _process(processor, "hello")
    assert response.context.get("fallback") is True


def test_unexpected_interpreter_error_yields_static_fallback():
    class BrokenInterpreter:
        def resolve(self, request, outcome):
            raise RuntimeError("boom")

    response = _process(RequestProcessor(interpreter=BrokenInterpreter()), "Schedule lunch")
    assert response.intent == "general"
    assert response.confidence == 0.5


@pytest.mark.parametrize(
    "reply, tier",
    [
        ('{"intent": "create_task"}', Tier.STRUCTURED),
        ("Happy to help with that.", Tier.HEURISTIC_TEXT),
        ('{"confidence": "very"}', Tier.HEURISTIC_TEXT),
    ],
)
def test_process_with_tier_reports_rendering_tier(fake_provider_factory, reply, tier):
    processor = RequestProcessor(LLMClient(fake_provider_factory(reply)))
    _, reported = asyncio.run(processor.process_with_tier(AssistantRequest(input="add a task")))
    assert reported == tier


def test_process_with_tier_without_model(failing_provider):
    for processor in (RequestProcessor(), RequestProcessor(LLMClient(failing_provider))):
        _, tier = asyncio.run(processor.process_with_tier(AssistantRequest(input="Schedule lunch")))
        assert tier == Tier.STATIC_FALLBACK
