import json
from typing import Any, Dict, NamedTuple

from assistant_ai.models import ActionType, AssistantRequest

ACTION_DESCRIPTIONS = {
    ActionType.SCHEDULE_MEETING: "Schedule a new meeting",
    ActionType.SEND_EMAIL: "Send an email",
    ActionType.CREATE_TASK: "Create a new task",
    ActionType.SET_REMINDER: "Set a reminder",
    ActionType.UPDATE_CALENDAR: "Update calendar events",
    ActionType.SEARCH_CALENDAR: "Search calendar for events",
    ActionType.GENERATE_BRIEFING: "Generate daily briefing",
}

ASSISTANT_SYSTEM_PROMPT = """You are an intelligent Executive Assistant AI. Your role is to help busy executives and professionals manage their schedules, emails, tasks, and daily workflows efficiently.

Core Capabilities:
1. Calendar Management - Schedule meetings, check availability, manage conflicts
2. Email Automation - Send emails, create templates, manage follow-ups
3. Task Management - Create, prioritize, and track tasks and reminders
4. Proactive Assistance - Daily briefings, deadline alerts, workflow optimization

Response Format:
Always respond with a JSON object containing:
{{
  "intent": "primary_action_category",
  "confidence": 0.0-1.0,
  "response": "natural_language_response_to_user",
  "actions": [
    {{
      "type": "action_type",
      "parameters": {{ "key": "value" }},
      "priority": 1-10
    }}
  ],
  "context": {{ "additional_context": "value" }}
}}

Available Action Types:
{action_types}"""

REQUEST_TEMPLATE = """Context: {context}
User Request: "{input}"

Analyze the request and provide appropriate actions:"""

BRIEFING_PROMPT = """Generate a concise daily briefing for an executive based on the following information:

Calendar Events: {meetings}
Priority Tasks: {tasks}
Important Emails: {emails}
Date: {date}

Create a professional, actionable briefing that includes:
1. Today's schedule overview
2. Priority tasks requiring attention
3. Important emails to review
4. Suggestions for optimizing the day

Keep it concise but informative."""


class Prompt(NamedTuple):
    system: str
    user: str


def _dumps(value: Any) -> str:
    return json.dumps(value, default=str, ensure_ascii=False)


def build_request_prompt(request: AssistantRequest) -> Prompt:
    action_types = "\n".join(f"- {t.value}: {d}" for t, d in ACTION_DESCRIPTIONS.items())
    return Prompt(
        system=ASSISTANT_SYSTEM_PROMPT.format(action_types=action_types),
        user=REQUEST_TEMPLATE.format(context=_dumps(request.context or {}), input=request.input),
    )


def build_briefing_prompt(context: Dict[str, Any], date_label: str) -> str:
    return BRIEFING_PROMPT.format(
        meetings=_dumps(context.get("upcomingMeetings") or []),
        tasks=_dumps(context.get("priorityTasks") or []),
        emails=_dumps(context.get("importantEmails") or []),
        date=context.get("date") or date_label,
    )
