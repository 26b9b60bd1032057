import asyncio
import logging
import os
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build

from assistant_ai.models import CalendarEvent, ConflictReport
from assistant_ai.timeutil import ensure_aware, local_now
from integration.collaborators import CalendarReader
from scheduling.conflicts import detect_conflicts

logger = logging.getLogger(__name__)

GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID", "").strip()
GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET", "").strip()
GOOGLE_REFRESH_TOKEN = os.getenv("GOOGLE_REFRESH_TOKEN", "").strip()
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"
CALENDAR_SCOPES = ["https://www.googleapis.com/auth/calendar.readonly"]

CONFLICT_SCAN_LIMIT = 50


def _parse_google_time(value: dict) -> datetime:
    # Timed events carry dateTime; all-day events only carry date.
    raw = value.get("dateTime") or value.get("date")
    if "T" not in raw:
        d = date.fromisoformat(raw)
        return ensure_aware(datetime(d.year, d.month, d.day))
    return ensure_aware(datetime.fromisoformat(raw))


def event_from_google(item: dict) -> CalendarEvent:
    return CalendarEvent(
        id=item.get("id"),
        summary=item.get("summary") or "(no title)",
        description=item.get("description"),
        start=_parse_google_time(item["start"]),
        end=_parse_google_time(item["end"]),
        location=item.get("location"),
        attendees=[a["email"] for a in item.get("attendees", []) if a.get("email")],
    )


class GoogleCalendarReader(CalendarReader):
    """Read-only view of a Google calendar."""

    def __init__(self, credentials=None, calendar_id: str = "primary"):
        self.credentials = credentials
        self.calendar_id = calendar_id

    @classmethod
    def from_env(cls) -> Optional["GoogleCalendarReader"]:
        if not (GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET and GOOGLE_REFRESH_TOKEN):
            logger.warning("Google Calendar credentials not configured. Calendar features will be limited.")
            return None
        credentials = Credentials(
            token=None,
            refresh_token=GOOGLE_REFRESH_TOKEN,
            client_id=GOOGLE_CLIENT_ID,
            client_secret=GOOGLE_CLIENT_SECRET,
            token_uri=GOOGLE_TOKEN_URI,
            scopes=CALENDAR_SCOPES,
        )
        return cls(credentials=credentials)

    def _fetch(self, max_results: int, time_min: datetime, time_max: Optional[datetime]) -> List[CalendarEvent]:
        service = build(
            "calendar",
            "v3",
            credentials=self.credentials,
            cache_discovery=False,
        )
        params = {
            "calendarId": self.calendar_id,
            "timeMin": time_min.isoformat(),
            "maxResults": max_results,
            "singleEvents": True,
            "orderBy": "startTime",
        }
        if time_max is not None:
            params["timeMax"] = time_max.isoformat()

        items = service.events().list(**params).execute().get("items", [])
        return [event_from_google(item) for item in items]

    async def list_upcoming(
        self,
        max_results: int = 10,
        time_min: Optional[datetime] = None,
        time_max: Optional[datetime] = None,
    ) -> List[CalendarEvent]:
        # googleapiclient is blocking; keep it off the event loop.
        return await asyncio.to_thread(
            self._fetch,
            max_results,
            ensure_aware(time_min or local_now()),
            ensure_aware(time_max) if time_max else None,
        )

    async def list_conflicts(self, time_min: datetime, time_max: datetime) -> ConflictReport:
        events = await self.list_upcoming(CONFLICT_SCAN_LIMIT, time_min, time_max)
        return detect_conflicts(events)


class InMemoryCalendar(CalendarReader):
    """Calendar used when Google is not configured (local runs and tests)."""

    def __init__(self, events: Optional[List[CalendarEvent]] = None, clock: Callable[[], datetime] = local_now):
        self.events: List[CalendarEvent] = list(events or [])
        self.clock = clock

    def add(self, event: CalendarEvent) -> CalendarEvent:
        self.events.append(event)
        return event

    @classmethod
    def with_sample_events(cls, clock: Callable[[], datetime] = local_now) -> "InMemoryCalendar":
        now = clock()
        tomorrow = now + timedelta(days=1)
        return cls(
            [
                CalendarEvent(
                    id="sample-1",
                    summary="Team Standup",
                    description="Daily team synchronization meeting",
                    start=now + timedelta(hours=1),
                    end=now + timedelta(minutes=90),
                    attendees=["team@company.com"],
                ),
                CalendarEvent(
                    id="sample-2",
                    summary="Client Review Meeting",
                    description="Quarterly business review with key client",
                    start=tomorrow + timedelta(hours=2),
                    end=tomorrow + timedelta(hours=3),
                    attendees=["client@example.com"],
                ),
            ],
            clock=clock,
        )

    async def list_upcoming(
        self,
        max_results: int = 10,
        time_min: Optional[datetime] = None,
        time_max: Optional[datetime] = None,
    ) -> List[CalendarEvent]:
        start = ensure_aware(time_min or self.clock())
        end = ensure_aware(time_max) if time_max is not None else None
        selected = [
            e for e in self.events
            if e.start >= start and (end is None or e.start <= end)
        ]
        selected.sort(key=lambda e: e.start)
        return selected[:max_results]

    async def list_conflicts(self, time_min: datetime, time_max: datetime) -> ConflictReport:
        events = await self.list_upcoming(CONFLICT_SCAN_LIMIT, time_min, time_max)
        return detect_conflicts(events)


def calendar_from_env() -> CalendarReader:
    reader = GoogleCalendarReader.from_env()
    if reader is None:
        return InMemoryCalendar.with_sample_events()
    return reader
