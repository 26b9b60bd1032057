from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from croniter import croniter

from assistant_ai.timeutil import ensure_aware, local_tz


@dataclass(frozen=True)
class CronSchedule:
    """Five-field cron expression evaluated in the assistant's home timezone."""

    expression: str

    def __post_init__(self):
        if not croniter.is_valid(self.expression):
            raise ValueError(f"Invalid cron expression: {self.expression!r}")

    def _local(self, dt: datetime) -> datetime:
        return ensure_aware(dt).astimezone(local_tz())

    def next_after(self, dt: datetime) -> datetime:
        """First fire time strictly after ``dt``."""
        return croniter(self.expression, self._local(dt)).get_next(datetime)

    def matches(self, dt: datetime) -> bool:
        """True when ``dt`` falls in a minute this schedule fires on."""
        minute = self._local(dt).replace(second=0, microsecond=0)
        return croniter.match(self.expression, minute)
