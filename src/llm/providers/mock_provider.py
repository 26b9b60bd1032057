from __future__ import annotations
import json
import re
from llm.providers.base import LLMProvider

_EMAIL = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
_USER_REQUEST = re.compile(r'User Request:\s*"(.*)"', re.DOTALL)


class MockProvider(LLMProvider):
    def generate(self, *, system: str, user: str, model: str | None = None) -> str:
        """
        Returns canned assistant output based on the prompt content, for local runs
        without a model key.
        """
        if "daily briefing" in user.lower():
            return (
                "Daily Briefing\n\n"
                "Your day is set. Review the priority tasks first and keep a buffer "
                "between back-to-back meetings."
            )

        m = _USER_REQUEST.search(user)
        request = (m.group(1) if m else user).lower()

        if "meeting" in request or "schedule" in request:
            return json.dumps({
                "intent": "schedule_meeting",
                "confidence": 0.9,
                "response": "I'll get that meeting on your calendar.",
                "actions": [
                    {
                        "type": "schedule_meeting",
                        "parameters": {"title": "Meeting", "duration": 30},
                        "priority": 2,
                    }
                ],
                "context": {"source": "mock"},
            })

        if "email" in request:
            recipients = _EMAIL.findall(request)
            return json.dumps({
                "intent": "send_email",
                "confidence": 0.85,
                "response": "Drafting that email now.",
                "actions": [
                    {
                        "type": "send_email",
                        "parameters": {"to": recipients[0] if recipients else None},
                        "priority": 3,
                    }
                ],
                "context": {"source": "mock"},
            })

        if "task" in request or "remind" in request:
            return json.dumps({
                "intent": "create_task",
                "confidence": 0.85,
                "response": "Added to your task list.",
                "actions": [
                    {"type": "create_task", "parameters": {"priority": "medium"}, "priority": 3}
                ],
                "context": {"source": "mock"},
            })

        # Default fallback
        return "I can help with meetings, emails, tasks and your daily briefing."
