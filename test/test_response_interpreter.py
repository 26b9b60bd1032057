import json

import pytest

from assistant_ai.models import ActionType, AssistantRequest
from interpretation.response_interpreter import (
    FALLBACK_RESPONSE,
    HeuristicText,
    ModelCall,
    ResponseInterpreter,
    StaticFallback,
    Structured,
    decide,
    extract_json_object,
)


def _request(text: str) -> AssistantRequest:
    return AssistantRequest(input=text)


def test_decide_picks_tier_from_model_call():
    assert isinstance(decide(ModelCall.not_configured()), StaticFallback)
    assert isinstance(decide(ModelCall.failed(TimeoutError("slow"))), StaticFallback)
    assert isinstance(decide(ModelCall.replied("just prose")), HeuristicText)
    assert isinstance(decide(ModelCall.replied('Sure! {"intent": "general"} done')), Structured)


def test_extract_json_object_is_greedy_and_object_only():
    assert extract_json_object('x {"a": {"b": 1}} y') == {"a": {"b": 1}}
    assert extract_json_object("[1, 2]") is None
    assert extract_json_object("{not json}") is None


def test_structured_defaults():
    response = ResponseInterpreter().interpret(_request("hi"), ModelCall.replied("{}"))
    assert response.intent == "general"
    assert response.confidence == 0.8
    assert response.response == "{}"
    assert response.actions == []
    assert response.context == {}


def test_structured_maps_actions_and_clamps_confidence():
    payload = {
        "intent": "schedule_meeting",
        "confidence": 3,
        "response": "Booked.",
        "actions": [{"type": "schedule_meeting", "parameters": {"title": "Sync", "duration": 30}, "priority": 2}],
    }
    response = ResponseInterpreter().interpret(_request("book sync"), ModelCall.replied(json.dumps(payload)))
    assert response.confidence == 1.0
    assert response.actions[0].type == ActionType.SCHEDULE_MEETING
    assert response.actions[0].parameters.duration == 30


def test_zero_confidence_reads_as_unstated():
    response = ResponseInterpreter().interpret(_request("hi"), ModelCall.replied('{"confidence": 0}'))
    assert response.confidence == 0.8


def test_invalid_structured_action_drops_to_heuristic():
    payload = {"intent": "x", "actions": [{"type": "teleport", "parameters": {}}]}
    text = json.dumps(payload)
    response = ResponseInterpreter().interpret(_request("send an email to a@b.com"), ModelCall.replied(text))
    assert response.intent == "send_email"
    assert response.response == text
    assert response.context == {"originalInput": "send an email to a@b.com"}


def test_heuristic_builds_one_action_per_category():
    request = _request("Schedule a meeting and send an email to a@b.com")
    response = ResponseInterpreter().interpret(request, ModelCall.replied("I'll handle it."))
    assert response.response == "I'll handle it."
    assert [a.type for a in response.actions] == [ActionType.SCHEDULE_MEETING, ActionType.SEND_EMAIL]
    assert all(a.priority == 1 for a in response.actions)


def test_offline_without_keywords_is_static_fallback():
    response = ResponseInterpreter().interpret(_request("test"), ModelCall.not_configured())
    assert response.intent == "general"
    assert response.confidence == 0.5
    assert response.response == FALLBACK_RESPONSE
    assert response.actions == []
    assert response.context == {"fallback": True, "originalInput": "test"}


def test_offline_with_keywords_keeps_heuristic_actions():
    response = ResponseInterpreter().interpret(_request("remind me to call mom"), ModelCall.failed(OSError("down")))
    assert response.intent == "create_task"
    assert response.context["fallback"] is True
    assert response.actions[0].type == ActionType.CREATE_TASK


@pytest.mark.parametrize(
    "text",
    ["", "{}", '{"confidence": -4}', '{"actions": null}', '{"context": "oops"}', "no json", '{"confidence": "high"}'],
)
def test_output_always_bounded(text):
    response = ResponseInterpreter().interpret(_request("free tomorrow?"), ModelCall.replied(text))
    assert 0.0 <= response.confidence <= 1.0
    assert isinstance(response.actions, list)
