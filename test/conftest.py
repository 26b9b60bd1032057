from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from assistant_ai.models import CalendarEvent

NY = ZoneInfo("America/New_York")


class FakeProvider:
    def __init__(self, response_text: str):
        self._response_text = response_text

    def generate(self, *, system: str, user: str) -> str:
        return self._response_text


class FailingProvider:
    def generate(self, *, system: str, user: str) -> str:
        raise RuntimeError("model unreachable")


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def fake_provider_factory():
    def _make(response_text: str):
        return FakeProvider(response_text)
    return _make


@pytest.fixture
def failing_provider():
    return FailingProvider()


@pytest.fixture
def monday_9am():
    # 2025-03-10 is a Monday
    return datetime(2025, 3, 10, 9, 0, tzinfo=NY)


@pytest.fixture
def clock(monday_9am):
    return FakeClock(monday_9am)


@pytest.fixture
def event_factory():
    def _make(summary: str, start: datetime, minutes: int = 30, description: str = None, **kwargs):
        return CalendarEvent(
            summary=summary,
            start=start,
            end=start + timedelta(minutes=minutes),
            description=description,
            **kwargs,
        )
    return _make
