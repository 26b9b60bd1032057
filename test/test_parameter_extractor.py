import pytest

from assistant_ai.models import ActionType, CalendarSearchParameters, TaskParameters
from extraction.parameter_extractor import FAMILIES, ParameterExtractor, task_priority


@pytest.fixture
def extractor():
    return ParameterExtractor()


def test_meeting_fields(extractor):
    params = extractor.extract("Schedule a meeting with John tomorrow at 2 PM for 1 hour", "meeting")
    assert params["title"] == "a meeting with John"
    assert "2" in params["time"]
    assert params["date"] == "tomorrow"
    assert params["duration"] == 60


def test_meeting_date_formats(extractor):
    assert extractor.meeting("book review on 03/14/2025")["date"] == "03/14/2025"
    assert extractor.meeting("book review next Tuesday")["date"] == "next Tuesday"
    assert extractor.meeting("meet with Ana for 45 minutes")["duration"] == 45


def test_meeting_without_matches_omits_fields(extractor):
    assert extractor.meeting("hello there") == {}


def test_email_recipients_and_subject(extractor):
    params = extractor.email("Send an email to client@example.com and boss@example.com about the project update")
    assert params["to"] == "client@example.com"
    assert params["cc"] == ["boss@example.com"]
    assert params["subject"] == "the project update"


def test_email_quoted_subject_wins(extractor):
    params = extractor.email('email ops@example.com subject "Q3 numbers" please')
    assert params["subject"] == "Q3 numbers"


def test_task_fields(extractor):
    params = extractor.task("Create a high priority task to review the budget by Friday")
    assert params["priority"] == "high"
    assert "Friday" in params["due_date"]
    assert params["title"] == "to review the budget"


@pytest.mark.parametrize(
    "text,expected",
    [
        ("do this ASAP", "urgent"),
        ("important: call the bank", "high"),
        ("low priority cleanup", "low"),
        ("water the plants", "medium"),
    ],
)
def test_task_priority_ladder(text, expected):
    assert task_priority(text) == expected


def test_search_range_is_lowercased(extractor):
    assert extractor.search("When am I free This Week?") == {"time_range": "this week"}


def test_unknown_family_is_rejected(extractor):
    with pytest.raises(ValueError):
        extractor.extract("anything", "weather")
    with pytest.raises(ValueError):
        extractor.extract("anything", "build_parameters")


def test_extract_dispatches_to_each_family(extractor):
    text = "Email bob@corp.com and schedule a meeting tomorrow to review the task list this week"
    for family in FAMILIES:
        assert extractor.extract(text, family) == getattr(extractor, family)(text)


def test_build_parameters_wraps_in_struct(extractor):
    task = extractor.build_parameters("todo file taxes by tomorrow", ActionType.CREATE_TASK)
    assert isinstance(task, TaskParameters)
    assert task.due_date == "tomorrow"
    assert task.model_dump(by_alias=True)["dueDate"] == "tomorrow"

    search = extractor.build_parameters("am I available tomorrow", ActionType.SEARCH_CALENDAR)
    assert isinstance(search, CalendarSearchParameters)
    assert search.time_range == "tomorrow"
