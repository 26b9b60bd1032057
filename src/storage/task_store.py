import logging
import uuid
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from assistant_ai.models import Task, TaskPriority, TaskStatus
from assistant_ai.timeutil import local_now
from integration.collaborators import TaskReader

logger = logging.getLogger(__name__)

PRIORITY_RANK: Dict[str, int] = {"urgent": 4, "high": 3, "medium": 2, "low": 1}

DUE_SOON_HOURS = 24
HIGH_PRIORITY_DUE_HOURS = 72


def _sort_key(task: Task):
    # Highest priority first, then earliest due date; undated tasks last.
    due = task.due_date.timestamp() if task.due_date else float("inf")
    return (-PRIORITY_RANK[task.priority], due)


class InMemoryTaskStore(TaskReader):
    """Process-local task list. Not durable."""

    def __init__(self, clock: Callable[[], datetime] = local_now):
        self.clock = clock
        self._tasks: Dict[str, Task] = {}

    def create(
        self,
        title: str,
        *,
        description: str = "",
        priority: TaskPriority = "medium",
        status: TaskStatus = "todo",
        due_date: Optional[datetime] = None,
        assigned_to: Optional[str] = None,
        created_by: str = "assistant",
        tags: Optional[List[str]] = None,
    ) -> Task:
        task = Task(
            id=f"task-{uuid.uuid4().hex[:12]}",
            title=title,
            description=description,
            priority=priority,
            status=status,
            due_date=due_date,
            assigned_to=assigned_to,
            created_by=created_by,
            tags=tags or [],
            created_at=self.clock(),
        )
        self._tasks[task.id] = task
        logger.info(f"Task created: {task.title}")
        return task

    def get(self, task_id: str) -> Optional[Task]:
        return self._tasks.get(task_id)

    def update_status(self, task_id: str, status: TaskStatus) -> Optional[Task]:
        task = self.get(task_id)
        if task is None:
            return None
        updated = task.model_copy(update={"status": status})
        self._tasks[task_id] = updated
        return updated

    def list(
        self,
        status: Optional[TaskStatus] = None,
        priority: Optional[TaskPriority] = None,
        assigned_to: Optional[str] = None,
    ) -> List[Task]:
        tasks = [
            t for t in self._tasks.values()
            if (status is None or t.status == status)
            and (priority is None or t.priority == priority)
            and (assigned_to is None or t.assigned_to == assigned_to)
        ]
        return sorted(tasks, key=_sort_key)

    async def list_by_priority(self, limit: int = 10) -> List[Task]:
        now = self.clock()
        pressing = []
        for task in self.list(status="todo"):
            if task.priority == "urgent":
                pressing.append(task)
                continue
            if task.due_date is None:
                continue
            hours_until_due = (task.due_date - now).total_seconds() / 3600
            if hours_until_due <= DUE_SOON_HOURS:
                pressing.append(task)
            elif task.priority == "high" and hours_until_due <= HIGH_PRIORITY_DUE_HOURS:
                pressing.append(task)
        return pressing[:limit]

    async def list_overdue(self) -> List[Task]:
        now = self.clock()
        return [t for t in self.list(status="todo") if t.due_date is not None and t.due_date < now]

    def load_samples(self) -> "InMemoryTaskStore":
        now = self.clock()
        self.create(
            "Review Q4 Budget Proposal",
            description="Review and provide feedback on the Q4 budget proposal from finance team",
            priority="high",
            due_date=now + timedelta(days=2),
            assigned_to="executive@company.com",
            created_by="assistant@company.com",
            tags=["finance", "budget", "review"],
        )
        self.create(
            "Prepare Board Meeting Presentation",
            description="Create presentation slides for next week's board meeting",
            priority="urgent",
            status="in_progress",
            due_date=now + timedelta(days=5),
            assigned_to="executive@company.com",
            created_by="assistant@company.com",
            tags=["presentation", "board", "meeting"],
        )
        self.create(
            "Schedule Team Building Event",
            description="Organize and schedule quarterly team building event",
            priority="medium",
            due_date=now + timedelta(days=14),
            assigned_to="hr@company.com",
            created_by="executive@company.com",
            tags=["team", "event", "hr"],
        )
        return self
