import logging
from datetime import datetime, timedelta
from html import escape
from typing import Any, Callable, Dict, List, Optional

from assistant_ai.models import CalendarEvent, DailyBriefing, Task
from assistant_ai.timeutil import local_now
from integration.collaborators import CalendarReader, TaskReader

logger = logging.getLogger(__name__)

BRIEFING_WINDOW = timedelta(hours=24)
MEETING_LIMIT = 10
PRIORITY_TASK_LIMIT = 5

BUSY_DAY_MEETINGS = 5
DELEGATION_THRESHOLD = 3
MORNING_CUTOFF_HOUR = 10


def derive_suggestions(
    meetings: List[CalendarEvent],
    tasks: List[Task],
    overdue: List[Task],
    now: datetime,
) -> List[str]:
    """Rule-based tips, always in the same order."""
    suggestions = []
    if len(meetings) > BUSY_DAY_MEETINGS:
        suggestions.append("Consider blocking time for deep work between meetings")
    if any(not m.description for m in meetings):
        suggestions.append("Add agendas to meetings without descriptions")
    if len(tasks) > DELEGATION_THRESHOLD:
        suggestions.append("Consider delegating some high-priority tasks")
    if overdue:
        suggestions.append(f"Address {len(overdue)} overdue tasks today")
    if now.hour < MORNING_CUTOFF_HOUR:
        suggestions.append("Start with your most important task while energy is high")
    return suggestions


class BriefingAggregator:
    def __init__(self, calendar: CalendarReader, tasks: TaskReader, clock: Callable[[], datetime] = local_now):
        self.calendar = calendar
        self.tasks = tasks
        self.clock = clock

    async def assemble(self, now: Optional[datetime] = None) -> DailyBriefing:
        """Fresh snapshot of the next 24 hours. Collaborator errors propagate."""
        now = now or self.clock()
        meetings = await self.calendar.list_upcoming(MEETING_LIMIT, now, now + BRIEFING_WINDOW)
        priority = await self.tasks.list_by_priority(PRIORITY_TASK_LIMIT)
        overdue = await self.tasks.list_overdue()

        briefing = DailyBriefing(
            date=now.date(),
            upcoming_meetings=meetings,
            priority_tasks=priority,
            overdue_tasks=overdue,
            # No inbox collaborator yet
            important_emails=[],
            suggestions=derive_suggestions(meetings, priority, overdue, now),
        )
        logger.info(
            f"Briefing assembled for {briefing.date}: {len(meetings)} meetings, "
            f"{len(priority)} priority tasks, {len(overdue)} overdue"
        )
        return briefing


def briefing_subject(briefing: DailyBriefing) -> str:
    return f"Daily Briefing - {briefing.date:%a %b %d %Y}"


def briefing_context(briefing: DailyBriefing) -> Dict[str, Any]:
    """Shape a briefing the way the model prompt expects it."""
    return {
        "date": f"{briefing.date:%a %b %d %Y}",
        "upcomingMeetings": [m.model_dump(mode="json") for m in briefing.upcoming_meetings],
        "priorityTasks": [t.model_dump(mode="json") for t in briefing.priority_tasks],
        "importantEmails": list(briefing.important_emails),
    }


def _due(task: Task) -> str:
    return task.due_date.strftime("%b %d, %Y") if task.due_date else "No due date"


def render_html(briefing: DailyBriefing) -> str:
    parts = [f"<h1>{escape(briefing_subject(briefing))}</h1>", "<h2>📅 Today's Schedule</h2>"]
    if briefing.upcoming_meetings:
        parts.append("<ul>")
        for m in briefing.upcoming_meetings:
            parts.append(f"<li><strong>{m.start:%I:%M %p}</strong> - {escape(m.summary)}</li>")
        parts.append("</ul>")
    else:
        parts.append("<p>No meetings scheduled for today.</p>")

    parts.append("<h2>🎯 Priority Tasks</h2>")
    if briefing.priority_tasks:
        parts.append("<ul>")
        for t in briefing.priority_tasks:
            parts.append(f"<li><strong>{escape(t.title)}</strong> ({t.priority}) - Due: {_due(t)}</li>")
        parts.append("</ul>")
    else:
        parts.append("<p>No priority tasks for today.</p>")

    if briefing.overdue_tasks:
        parts.append("<h2>⚠️ Overdue Tasks</h2><ul>")
        for t in briefing.overdue_tasks:
            parts.append(f"<li><strong>{escape(t.title)}</strong> - Was due: {_due(t)}</li>")
        parts.append("</ul>")

    if briefing.suggestions:
        parts.append("<h2>💡 Suggestions</h2><ul>")
        parts.extend(f"<li>{escape(s)}</li>" for s in briefing.suggestions)
        parts.append("</ul>")

    parts.append("<p>Have a productive day!</p>")
    return "".join(parts)


def render_text(briefing: DailyBriefing) -> str:
    lines = [f"Daily Briefing for {briefing.date:%a %b %d %Y}", "", "📅 Schedule:"]
    if briefing.upcoming_meetings:
        lines += [f"- {m.start:%I:%M %p} {m.summary}" for m in briefing.upcoming_meetings]
    else:
        lines.append("- No meetings scheduled")

    lines += ["", "🎯 Priority Tasks:"]
    if briefing.priority_tasks:
        lines += [f"- {t.title} ({t.priority}, due {_due(t)})" for t in briefing.priority_tasks]
    else:
        lines.append("- Nothing pressing")

    if briefing.overdue_tasks:
        lines += ["", "⚠️ Overdue:"] + [f"- {t.title} (was due {_due(t)})" for t in briefing.overdue_tasks]

    if briefing.suggestions:
        lines += ["", "💡 Suggestions:"] + [f"- {s}" for s in briefing.suggestions]

    lines += ["", "Have a productive day!"]
    return "\n".join(lines)


def briefing_from_context(context: Dict[str, Any], date_label: str) -> str:
    """Template briefing used when no model is available."""
    date = context.get("date") or date_label
    meeting_count = len(context.get("upcomingMeetings") or [])
    task_count = len(context.get("priorityTasks") or [])
    return f"""Daily Briefing for {date}

📅 Schedule Overview:
- {meeting_count} meetings scheduled today
- {task_count} priority tasks requiring attention

🎯 Key Focus Areas:
- Review and respond to priority emails
- Prepare for upcoming meetings
- Complete high-priority tasks

💡 Suggestions:
- Block time for deep work between meetings
- Review meeting agendas in advance
- Set reminders for important deadlines

Have a productive day!"""
