from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

from assistant_ai.models import ActionType

GENERAL_INTENT = "general"
TEXT_TIER_GENERAL_CONFIDENCE = 0.6
STATIC_TIER_GENERAL_CONFIDENCE = 0.5


@dataclass(frozen=True)
class IntentCategory:
    name: str
    keywords: Tuple[str, ...]
    intent: str
    confidence: float
    action_type: ActionType


# Checked in this order. Categories are not exclusive: every match is kept,
# and the last match decides intent and confidence.
CATEGORIES: Tuple[IntentCategory, ...] = (
    IntentCategory(
        "schedule", ("schedule", "meeting", "book"), "schedule_meeting", 0.8,
        ActionType.SCHEDULE_MEETING,
    ),
    IntentCategory(
        "email", ("email", "send", "message"), "send_email", 0.7,
        ActionType.SEND_EMAIL,
    ),
    IntentCategory(
        "task", ("task", "todo", "remind"), "create_task", 0.7,
        ActionType.CREATE_TASK,
    ),
    IntentCategory(
        "search", ("when", "available", "free"), "search_calendar", 0.7,
        ActionType.SEARCH_CALENDAR,
    ),
)


@dataclass(frozen=True)
class Classification:
    intent: str
    confidence: float
    matched: List[IntentCategory] = field(default_factory=list)

    @property
    def is_general(self) -> bool:
        return not self.matched


class IntentClassifier:
    """Keyword scoring used when model output is missing or unusable."""

    def __init__(self, general_confidence: float = TEXT_TIER_GENERAL_CONFIDENCE):
        self.general_confidence = general_confidence

    def classify(self, text: str) -> Classification:
        lowered = text.lower()
        intent = GENERAL_INTENT
        confidence = self.general_confidence
        matched: List[IntentCategory] = []

        for category in CATEGORIES:
            if any(k in lowered for k in category.keywords):
                intent = category.intent
                confidence = category.confidence
                matched.append(category)

        return Classification(intent=intent, confidence=confidence, matched=matched)
