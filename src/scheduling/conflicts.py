from __future__ import annotations

from typing import Iterable, List

from assistant_ai.models import CalendarEvent, ConflictPair, ConflictReport

BUFFER_MINUTES = 15


def detect_conflicts(events: Iterable[CalendarEvent], buffer_minutes: int = BUFFER_MINUTES) -> ConflictReport:
    """
    Flag back-to-back events that leave less than ``buffer_minutes`` between them.

    Only adjacent pairs in chronological order are compared. A gap must be
    strictly positive to count; overlapping or touching events are not flagged.
    """
    ordered: List[CalendarEvent] = sorted(events, key=lambda e: e.start)
    report = ConflictReport()

    for current, nxt in zip(ordered, ordered[1:]):
        gap = (nxt.start - current.end).total_seconds() / 60
        if 0 < gap < buffer_minutes:
            report.conflicts.append(ConflictPair(first=current, second=nxt, gap_minutes=gap))
            report.suggestions.append(
                f'Consider adding buffer time between "{current.summary}" and "{nxt.summary}"'
            )

    return report
