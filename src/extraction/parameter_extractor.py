from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from assistant_ai.models import PARAMETER_MODELS, ActionType

FAMILIES = ("meeting", "email", "task", "search")

FAMILY_BY_ACTION: Dict[ActionType, str] = {
    ActionType.SCHEDULE_MEETING: "meeting",
    ActionType.SEND_EMAIL: "email",
    ActionType.CREATE_TASK: "task",
    ActionType.SEARCH_CALENDAR: "search",
}


@dataclass(frozen=True)
class Rule:
    """One step of an ordered extraction ladder."""

    pattern: re.Pattern
    extract: Callable[[re.Match], Any]


def _group(n: int = 1) -> Callable[[re.Match], str]:
    return lambda m: m.group(n).strip()


def _first_match(rules: Sequence[Rule], text: str) -> Optional[Any]:
    # Specific patterns come first in each ladder, so the first hit wins.
    for rule in rules:
        m = rule.pattern.search(text)
        if m:
            return rule.extract(m)
    return None


def _duration_minutes(m: re.Match) -> int:
    value = int(m.group(1))
    return value * 60 if m.group(2).lower().startswith("hour") else value


_WEEKDAY = r"(?:monday|tuesday|wednesday|thursday|friday|saturday|sunday)"

MEETING_TITLE_RULES: List[Rule] = [
    Rule(
        re.compile(
            r"(?:schedule|book|meeting with|meet with)\s+(.+?)"
            r"(?:\s+\b(?:on|at|for|tomorrow|next|this)\b|\s*$)",
            re.IGNORECASE,
        ),
        _group(),
    ),
]

MEETING_TIME_RULES: List[Rule] = [
    Rule(re.compile(r"(?:\bat|@)\s*(\d{1,2}(?::\d{2})?\s*(?:am|pm)?)", re.IGNORECASE), _group()),
    Rule(re.compile(r"\b(\d{1,2}(?::\d{2})?\s*(?:am|pm))\b", re.IGNORECASE), _group()),
]

MEETING_DATE_RULES: List[Rule] = [
    Rule(re.compile(r"\b(tomorrow|today)\b", re.IGNORECASE), _group()),
    Rule(re.compile(r"\b(next\s+\w+)", re.IGNORECASE), _group()),
    Rule(re.compile(r"\b(this\s+\w+)", re.IGNORECASE), _group()),
    Rule(re.compile(r"\b(\d{1,2}/\d{1,2}/\d{4})\b"), _group()),
    Rule(re.compile(r"\b(\d{1,2}-\d{1,2}-\d{4})\b"), _group()),
]

MEETING_DURATION_RULES: List[Rule] = [
    Rule(
        re.compile(r"\b(?:for|duration)\s*(\d+)\s*(hours?|minutes?|mins?)\b", re.IGNORECASE),
        _duration_minutes,
    ),
]

EMAIL_ADDRESS = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")

EMAIL_SUBJECT_RULES: List[Rule] = [
    Rule(re.compile(r"\b(?:subject|about|regarding)\s+[\"']([^\"']+)[\"']", re.IGNORECASE), _group()),
    Rule(re.compile(r"\b(?:subject|about|regarding)\s+([^\"']+)", re.IGNORECASE), _group()),
]

TASK_TITLE_RULES: List[Rule] = [
    Rule(
        re.compile(
            r"(?:task|todo|remind me to)\s+(.+?)(?:\s+\b(?:by|before|on|at)\b|\s*$)",
            re.IGNORECASE,
        ),
        _group(),
    ),
]

TASK_DUE_RULES: List[Rule] = [
    Rule(
        re.compile(
            r"\b(?:by|before|due)\s+(tomorrow|today|next\s+\w+|this\s+\w+|"
            + _WEEKDAY
            + r"|\d{1,2}/\d{1,2}/\d{4})\b",
            re.IGNORECASE,
        ),
        _group(),
    ),
]

# (keywords, label) evaluated top to bottom over lowercased text.
TASK_PRIORITY_LADDER: List[tuple] = [
    (("urgent", "asap", "immediately"), "urgent"),
    (("high priority", "important"), "high"),
    (("low priority",), "low"),
]
DEFAULT_TASK_PRIORITY = "medium"

SEARCH_RANGE_RULES: List[Rule] = [
    Rule(
        re.compile(r"\b(today|tomorrow|this week|next week|this month)\b", re.IGNORECASE),
        lambda m: m.group(1).lower(),
    ),
]


class ParameterExtractor:
    """Best-effort field extraction from raw request text.

    Never raises on text input; fields that cannot be found are left out
    of the returned map (task priority is the exception and always set).
    """

    def extract(self, text: str, family: str) -> Dict[str, Any]:
        if family not in FAMILIES:
            raise ValueError(f"unknown extraction family: {family}")
        return getattr(self, family)(text)

    def build_parameters(self, text: str, action_type: ActionType):
        """Extract for the action's family and wrap in its parameter struct."""
        family = FAMILY_BY_ACTION.get(action_type)
        params = self.extract(text, family) if family else {}
        return PARAMETER_MODELS[action_type].model_validate(params)

    def meeting(self, text: str) -> Dict[str, Any]:
        return _collect(
            text,
            title=MEETING_TITLE_RULES,
            time=MEETING_TIME_RULES,
            date=MEETING_DATE_RULES,
            duration=MEETING_DURATION_RULES,
        )

    def email(self, text: str) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        addresses = EMAIL_ADDRESS.findall(text)
        if addresses:
            params["to"] = addresses[0]
            if len(addresses) > 1:
                params["cc"] = addresses[1:]
        params.update(_collect(text, subject=EMAIL_SUBJECT_RULES))
        return params

    def task(self, text: str) -> Dict[str, Any]:
        params = _collect(text, title=TASK_TITLE_RULES, due_date=TASK_DUE_RULES)
        params["priority"] = task_priority(text)
        return params

    def search(self, text: str) -> Dict[str, Any]:
        return _collect(text, time_range=SEARCH_RANGE_RULES)


def task_priority(text: str) -> str:
    lowered = text.lower()
    for keywords, label in TASK_PRIORITY_LADDER:
        if any(k in lowered for k in keywords):
            return label
    return DEFAULT_TASK_PRIORITY


def _collect(text: str, **ladders: Sequence[Rule]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for field, rules in ladders.items():
        value = _first_match(rules, text)
        if value is not None and value != "":
            out[field] = value
    return out
