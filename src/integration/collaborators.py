from __future__ import annotations
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from assistant_ai.models import CalendarEvent, ConflictReport, EmailAnalytics, SendResult, Task


class CalendarReader(ABC):
    @abstractmethod
    async def list_upcoming(
        self,
        max_results: int = 10,
        time_min: Optional[datetime] = None,
        time_max: Optional[datetime] = None,
    ) -> List[CalendarEvent]:
        """Events ordered by start time, starting at ``time_min`` (default: now)."""
        raise NotImplementedError

    @abstractmethod
    async def list_conflicts(self, time_min: datetime, time_max: datetime) -> ConflictReport:
        raise NotImplementedError


class TaskReader(ABC):
    @abstractmethod
    async def list_by_priority(self, limit: int = 10) -> List[Task]:
        """Open tasks that need attention soon, most pressing first."""
        raise NotImplementedError

    @abstractmethod
    async def list_overdue(self) -> List[Task]:
        raise NotImplementedError


class EmailSender(ABC):
    @abstractmethod
    async def send(self, to: str, subject: str, html_body: str) -> SendResult:
        raise NotImplementedError

    @abstractmethod
    async def get_analytics(self, start: datetime, end: datetime) -> EmailAnalytics:
        raise NotImplementedError
