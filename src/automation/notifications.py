"""HTML bodies for the proactive notifications sent to the executive."""
from __future__ import annotations

from html import escape
from typing import Iterable, List, Optional

from assistant_ai.models import CalendarEvent, ConflictReport, Task

TASK_ALERT_SUBJECT = "Task Alert: Urgent Items Require Attention"
CALENDAR_OPTIMIZATION_SUBJECT = "Weekly Calendar Optimization Suggestions"
FOLLOW_UP_SUBJECT = "Follow-up Suggestion: Low Email Response Rate"


def meeting_reminder_subject(event: CalendarEvent) -> str:
    return f"Meeting Reminder: {event.summary}"


def format_day(task: Task) -> str:
    return task.due_date.strftime("%b %d, %Y") if task.due_date else "No due date"


def _bullets(items: Iterable[str]) -> str:
    return "<ul>" + "".join(f"<li>{item}</li>" for item in items) + "</ul>"


def render_task_alert(urgent: List[Task], overdue: List[Task]) -> str:
    parts = ["<h2>Task Alert</h2>"]
    if urgent:
        parts.append("<h3>Urgent Tasks:</h3>")
        parts.append(_bullets(f"<strong>{escape(t.title)}</strong> - Due: {format_day(t)}" for t in urgent))
    if overdue:
        parts.append("<h3>Overdue Tasks:</h3>")
        parts.append(_bullets(f"<strong>{escape(t.title)}</strong> - Was due: {format_day(t)}" for t in overdue))
    parts.append("<p>Please review and prioritize these tasks.</p>")
    return "".join(parts)


def render_calendar_optimization(report: ConflictReport) -> str:
    parts = ["<h2>Weekly Calendar Optimization</h2>"]
    if report.conflicts:
        parts.append("<h3>Scheduling Conflicts Detected:</h3>")
        parts.append(
            _bullets(
                f"{escape(c.first.summary)} and {escape(c.second.summary)} - "
                f"{c.second.start:%a %b %d %I:%M %p} ({c.gap_minutes:.0f} min apart)"
                for c in report.conflicts
            )
        )
    parts.append("<h3>Suggestions:</h3>")
    parts.append(_bullets(escape(s) for s in report.suggestions))
    return "".join(parts)


def render_follow_up_nudge(response_rate: float) -> str:
    return (
        f"<p>Your email response rate this week is {response_rate:.1f}%. "
        "Consider following up on important emails that haven't received responses.</p>"
    )


def render_meeting_reminder(event: CalendarEvent) -> str:
    lines: List[Optional[str]] = [
        "<h2>Meeting Preparation Reminder</h2>",
        f'<p>Your meeting "{escape(event.summary)}" starts in 1 hour.</p>',
        f"<p><strong>Time:</strong> {event.start:%a %b %d %I:%M %p}</p>",
        f"<p><strong>Location:</strong> {escape(event.location)}</p>" if event.location else None,
        f"<p><strong>Description:</strong> {escape(event.description)}</p>" if event.description else None,
        "<p>Consider reviewing the agenda and preparing any necessary materials.</p>",
    ]
    return "\n".join(line for line in lines if line)
