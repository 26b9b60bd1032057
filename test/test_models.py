from datetime import datetime

import pytest
from pydantic import ValidationError

from assistant_ai.models import (
    Action,
    ActionType,
    AssistantResponse,
    CalendarEvent,
    EmailAnalytics,
    EmailParameters,
    MeetingParameters,
    Task,
    TaskParameters,
)


def test_action_builds_parameter_struct_from_type():
    action = Action.model_validate(
        {"type": "create_task", "parameters": {"title": "Review budget", "dueDate": "Friday"}, "priority": 2}
    )
    assert action.type == ActionType.CREATE_TASK
    assert isinstance(action.parameters, TaskParameters)
    assert action.parameters.due_date == "Friday"
    assert action.parameters.priority == "medium"


def test_action_keeps_unknown_parameter_keys():
    action = Action.model_validate({"type": "send_email", "parameters": {"to": "a@b.com", "tone": "formal"}})
    assert action.parameters.model_dump()["tone"] == "formal"


def test_action_rejects_mismatched_parameter_struct():
    with pytest.raises(ValidationError):
        Action(type=ActionType.SEND_EMAIL, parameters=MeetingParameters(title="Sync"))


def test_action_rejects_unknown_type_and_bad_priority():
    with pytest.raises((ValidationError, ValueError)):
        Action.model_validate({"type": "order_pizza", "parameters": {}})
    with pytest.raises(ValidationError):
        Action(type=ActionType.SEND_EMAIL, parameters=EmailParameters(), priority=11)


def test_meeting_duration_must_be_positive():
    with pytest.raises(ValidationError):
        MeetingParameters(duration=0)


def test_response_confidence_is_bounded():
    with pytest.raises(ValidationError):
        AssistantResponse(confidence=1.5, response="x")
    assert AssistantResponse(confidence=0.0, response="x").actions == []


def test_task_title_must_not_be_blank():
    with pytest.raises(ValidationError):
        Task(id="t1", title="   ")


def test_email_analytics_response_rate():
    assert EmailAnalytics(sent=10, opened=2).response_rate == pytest.approx(20.0)
    assert EmailAnalytics().response_rate == 0.0


def test_naive_event_and_due_times_are_localized():
    event = CalendarEvent(summary="Sync", start=datetime(2025, 3, 10, 9, 0), end=datetime(2025, 3, 10, 9, 30))
    assert event.start.tzinfo is not None and event.end.tzinfo is not None
    assert event.start.hour == 9

    task = Task(id="t1", title="File report", due_date=datetime(2025, 3, 14, 17, 0))
    assert task.due_date.tzinfo is not None
    assert Task(id="t2", title="Undated").due_date is None
