from __future__ import annotations

from datetime import date as date_type, datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from assistant_ai.timeutil import ensure_aware, local_now


class ActionType(str, Enum):
    SCHEDULE_MEETING = "schedule_meeting"
    SEND_EMAIL = "send_email"
    CREATE_TASK = "create_task"
    SET_REMINDER = "set_reminder"
    UPDATE_CALENDAR = "update_calendar"
    SEARCH_CALENDAR = "search_calendar"
    GENERATE_BRIEFING = "generate_briefing"


TaskPriority = Literal["urgent", "high", "medium", "low"]
TaskStatus = Literal["todo", "in_progress", "completed", "cancelled"]


class _Parameters(BaseModel):
    # Model output may carry keys we do not model; keep them on the struct.
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class MeetingParameters(_Parameters):
    title: Optional[str] = None
    time: Optional[str] = None
    date: Optional[str] = None
    duration: Optional[int] = Field(default=None, gt=0)  # minutes
    attendees: List[str] = Field(default_factory=list)
    location: Optional[str] = None
    description: Optional[str] = None


class EmailParameters(_Parameters):
    to: Optional[str] = None
    cc: List[str] = Field(default_factory=list)
    subject: Optional[str] = None
    body: Optional[str] = None


class TaskParameters(_Parameters):
    title: Optional[str] = None
    priority: TaskPriority = "medium"
    due_date: Optional[str] = Field(default=None, alias="dueDate")
    description: Optional[str] = None


class ReminderParameters(_Parameters):
    message: Optional[str] = None
    time: Optional[str] = None
    date: Optional[str] = None


class CalendarUpdateParameters(_Parameters):
    event_id: Optional[str] = Field(default=None, alias="eventId")
    title: Optional[str] = None
    time: Optional[str] = None
    date: Optional[str] = None


class CalendarSearchParameters(_Parameters):
    time_range: Optional[str] = Field(default=None, alias="timeRange")
    query: Optional[str] = None


class BriefingParameters(_Parameters):
    date: Optional[str] = None


ActionParameters = Union[
    MeetingParameters,
    EmailParameters,
    TaskParameters,
    ReminderParameters,
    CalendarUpdateParameters,
    CalendarSearchParameters,
    BriefingParameters,
]

PARAMETER_MODELS: Dict[ActionType, type] = {
    ActionType.SCHEDULE_MEETING: MeetingParameters,
    ActionType.SEND_EMAIL: EmailParameters,
    ActionType.CREATE_TASK: TaskParameters,
    ActionType.SET_REMINDER: ReminderParameters,
    ActionType.UPDATE_CALENDAR: CalendarUpdateParameters,
    ActionType.SEARCH_CALENDAR: CalendarSearchParameters,
    ActionType.GENERATE_BRIEFING: BriefingParameters,
}


class Action(BaseModel):
    """A typed instruction derived from a request.

    ``parameters`` is always the struct registered for ``type`` in
    PARAMETER_MODELS; plain dicts are converted on construction.
    """

    type: ActionType
    parameters: ActionParameters
    priority: int = Field(1, ge=1, le=10)

    @model_validator(mode="before")
    @classmethod
    def _parameters_for_type(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        action_type = ActionType(data.get("type"))
        params = data.get("parameters")
        if params is None:
            params = {}
        if isinstance(params, dict):
            params = PARAMETER_MODELS[action_type].model_validate(params)
        return {**data, "type": action_type, "parameters": params}

    @model_validator(mode="after")
    def _parameters_match_type(self) -> "Action":
        expected = PARAMETER_MODELS[self.type]
        if not isinstance(self.parameters, expected):
            raise ValueError(
                f"{self.type.value} expects {expected.__name__}, "
                f"got {type(self.parameters).__name__}"
            )
        return self


class AssistantRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    input: str
    context: Dict[str, Any] = Field(default_factory=dict)
    user_id: str = "default"
    timestamp: datetime = Field(default_factory=local_now)


class AssistantResponse(BaseModel):
    intent: str = "general"
    confidence: float = Field(..., ge=0.0, le=1.0)
    response: str
    actions: List[Action] = Field(default_factory=list)
    context: Dict[str, Any] = Field(default_factory=dict)


class Task(BaseModel):
    id: str
    title: str = Field(..., min_length=1)
    description: str = ""
    priority: TaskPriority = "medium"
    status: TaskStatus = "todo"
    due_date: Optional[datetime] = None
    assigned_to: Optional[str] = None
    created_by: str = "assistant"
    tags: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=local_now)

    @field_validator("due_date", "created_at")
    @classmethod
    def localize(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_aware(v) if v is not None else v

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("title must not be blank")
        return v2


class CalendarEvent(BaseModel):
    id: Optional[str] = None
    summary: str
    description: Optional[str] = None
    start: datetime
    end: datetime
    location: Optional[str] = None
    attendees: List[str] = Field(default_factory=list)

    # Naive times are read in the home timezone.
    @field_validator("start", "end")
    @classmethod
    def localize(cls, v: datetime) -> datetime:
        return ensure_aware(v)


class SendResult(BaseModel):
    success: bool
    id: Optional[str] = None
    error: Optional[str] = None


class EmailAnalytics(BaseModel):
    sent: int = Field(0, ge=0)
    delivered: int = Field(0, ge=0)
    opened: int = Field(0, ge=0)
    clicked: int = Field(0, ge=0)
    bounced: int = Field(0, ge=0)
    period_start: Optional[datetime] = None
    period_end: Optional[datetime] = None

    @property
    def response_rate(self) -> float:
        """Opened over sent, as a percentage (0 when nothing was sent)."""
        if self.sent <= 0:
            return 0.0
        return self.opened / self.sent * 100


class ConflictPair(BaseModel):
    first: CalendarEvent
    second: CalendarEvent
    gap_minutes: float


class ConflictReport(BaseModel):
    conflicts: List[ConflictPair] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)


class DailyBriefing(BaseModel):
    date: date_type
    upcoming_meetings: List[CalendarEvent] = Field(default_factory=list)
    priority_tasks: List[Task] = Field(default_factory=list)
    overdue_tasks: List[Task] = Field(default_factory=list)
    important_emails: List[Dict[str, Any]] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)


JobStatus = Literal["running", "completed", "failed"]
JobTrigger = Literal["schedule", "manual"]


class JobRun(BaseModel):
    """One firing of a scheduled job."""

    id: str
    job: str
    trigger: JobTrigger = "schedule"
    status: JobStatus = "running"
    started_at: datetime
    finished_at: Optional[datetime] = None
    dispatched: int = 0
    note: str = ""
    error: Optional[str] = None
