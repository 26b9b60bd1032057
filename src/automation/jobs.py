import asyncio
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Dict, Optional

from assistant_ai.timeutil import local_now
from automation import notifications
from briefing.aggregator import BriefingAggregator, briefing_subject, render_html
from integration.collaborators import CalendarReader, EmailSender, TaskReader

logger = logging.getLogger(__name__)

COLLABORATOR_TIMEOUT_S = float(os.getenv("COLLABORATOR_TIMEOUT_S", "30"))
EXECUTIVE_EMAIL = os.getenv("EXECUTIVE_EMAIL", "executive@company.com")

URGENT_TASK_LIMIT = 5
WEEKLY_EVENT_LIMIT = 50
FOLLOW_UP_RATE_THRESHOLD = 30.0
FOLLOW_UP_MIN_SENT = 5
ANALYTICS_WINDOW = timedelta(days=7)
PREP_LOOKAHEAD = timedelta(hours=1)
PREP_WINDOW_MINUTES = (45, 60)

DEFAULT_SCHEDULES: Dict[str, str] = {
    "daily_briefing": "0 8 * * *",
    "urgent_task_sweep": "0 9-17/2 * * 1-5",
    "weekly_calendar_optimization": "0 18 * * 0",
    "follow_up_check": "0 */4 * * *",
    "meeting_preparation": "*/15 * * * *",
}


@dataclass
class JobOutcome:
    dispatched: int = 0
    note: str = ""


JobFn = Callable[[datetime], Awaitable[JobOutcome]]


class DeliveryError(RuntimeError):
    pass


def next_week_window(now: datetime):
    """Upcoming Monday 00:00 through the following Sunday 23:59:59.999999."""
    days_ahead = (7 - now.weekday()) % 7 or 7
    start = (now + timedelta(days=days_ahead)).replace(hour=0, minute=0, second=0, microsecond=0)
    end = (start + timedelta(days=6)).replace(hour=23, minute=59, second=59, microsecond=999999)
    return start, end


class ProactiveJobs:
    """
    The five proactive workflows.

    Each job reads its collaborators, applies its rule and sends at most the
    notifications the rule allows. Collaborator errors and timeouts propagate
    so the orchestrator can record the run as failed.
    """

    def __init__(
        self,
        calendar: CalendarReader,
        tasks: TaskReader,
        email: EmailSender,
        aggregator: Optional[BriefingAggregator] = None,
        recipient: str = EXECUTIVE_EMAIL,
        timeout_s: float = COLLABORATOR_TIMEOUT_S,
        clock: Callable[[], datetime] = local_now,
    ):
        self.calendar = calendar
        self.tasks = tasks
        self.email = email
        self.aggregator = aggregator or BriefingAggregator(calendar, tasks, clock=clock)
        self.recipient = recipient
        self.timeout_s = timeout_s
        self.clock = clock

    def registry(self) -> Dict[str, JobFn]:
        return {
            "daily_briefing": self.daily_briefing,
            "urgent_task_sweep": self.urgent_task_sweep,
            "weekly_calendar_optimization": self.weekly_calendar_optimization,
            "follow_up_check": self.follow_up_check,
            "meeting_preparation": self.meeting_preparation,
        }

    async def _bounded(self, awaitable):
        return await asyncio.wait_for(awaitable, timeout=self.timeout_s)

    async def _dispatch(self, subject: str, html_body: str) -> None:
        result = await self._bounded(self.email.send(self.recipient, subject, html_body))
        if not result.success:
            raise DeliveryError(f"Email delivery failed for {subject!r}: {result.error}")

    async def daily_briefing(self, now: Optional[datetime] = None) -> JobOutcome:
        now = now or self.clock()
        # Assemble fully before sending so a failed read sends nothing.
        briefing = await self._bounded(self.aggregator.assemble(now))
        await self._dispatch(briefing_subject(briefing), render_html(briefing))
        logger.info("Daily briefing sent")
        return JobOutcome(dispatched=1, note=f"Briefing for {briefing.date}")

    async def urgent_task_sweep(self, now: Optional[datetime] = None) -> JobOutcome:
        urgent = await self._bounded(self.tasks.list_by_priority(URGENT_TASK_LIMIT))
        overdue = await self._bounded(self.tasks.list_overdue())
        if not urgent and not overdue:
            return JobOutcome(note="No urgent or overdue tasks")

        await self._dispatch(
            notifications.TASK_ALERT_SUBJECT,
            notifications.render_task_alert(urgent, overdue),
        )
        logger.info(f"Task alert sent: {len(urgent)} urgent, {len(overdue)} overdue")
        return JobOutcome(dispatched=1, note=f"{len(urgent)} urgent, {len(overdue)} overdue")

    async def weekly_calendar_optimization(self, now: Optional[datetime] = None) -> JobOutcome:
        start, end = next_week_window(now or self.clock())
        report = await self._bounded(self.calendar.list_conflicts(start, end))
        if not report.has_conflicts:
            return JobOutcome(note="No conflicts next week")

        await self._dispatch(
            notifications.CALENDAR_OPTIMIZATION_SUBJECT,
            notifications.render_calendar_optimization(report),
        )
        logger.info(f"Calendar optimization suggestions sent ({len(report.conflicts)} conflicts)")
        return JobOutcome(dispatched=1, note=f"{len(report.conflicts)} conflicts")

    async def follow_up_check(self, now: Optional[datetime] = None) -> JobOutcome:
        now = now or self.clock()
        analytics = await self._bounded(self.email.get_analytics(now - ANALYTICS_WINDOW, now))
        rate = analytics.response_rate
        if not (rate < FOLLOW_UP_RATE_THRESHOLD and analytics.sent > FOLLOW_UP_MIN_SENT):
            return JobOutcome(note=f"Response rate {rate:.1f}% over {analytics.sent} sent")

        await self._dispatch(notifications.FOLLOW_UP_SUBJECT, notifications.render_follow_up_nudge(rate))
        logger.info("Follow-up suggestion sent due to low response rate")
        return JobOutcome(dispatched=1, note=f"Response rate {rate:.1f}%")

    async def meeting_preparation(self, now: Optional[datetime] = None) -> JobOutcome:
        now = now or self.clock()
        events = await self._bounded(self.calendar.list_upcoming(10, now, now + PREP_LOOKAHEAD))

        low, high = PREP_WINDOW_MINUTES
        sent = 0
        for event in events:
            minutes_until = (event.start - now).total_seconds() / 60
            if low < minutes_until <= high:
                await self._dispatch(
                    notifications.meeting_reminder_subject(event),
                    notifications.render_meeting_reminder(event),
                )
                logger.info(f"Meeting preparation reminder sent for: {event.summary}")
                sent += 1
        return JobOutcome(dispatched=sent, note=f"{sent} of {len(events)} upcoming meetings reminded")
