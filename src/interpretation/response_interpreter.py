"""
Turns a language-model reply (or the lack of one) into an AssistantResponse.

Three tiers, most preferred first:

- Structured: the model answered with a JSON object; map its fields.
- HeuristicText: the model answered, but not with usable JSON; classify the
  raw input with keyword rules and echo the model text back to the user.
- StaticFallback: no model was configured or the call failed.

``decide`` picks the tier from a ModelCall; ``render`` builds the response.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from pydantic import ValidationError

from assistant_ai.models import Action, AssistantRequest, AssistantResponse
from classification.intent_classifier import (
    STATIC_TIER_GENERAL_CONFIDENCE,
    Classification,
    IntentClassifier,
)
from extraction.parameter_extractor import ParameterExtractor

logger = logging.getLogger(__name__)

DEFAULT_STRUCTURED_CONFIDENCE = 0.8
ACKNOWLEDGEMENT = "I understand your request. Let me help you with that."
FALLBACK_RESPONSE = (
    "I understand you need assistance. Could you please provide more specific "
    "details about what you'd like me to help you with?"
)

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class Tier(str, Enum):
    STRUCTURED = "structured"
    HEURISTIC_TEXT = "heuristic_text"
    STATIC_FALLBACK = "static_fallback"


@dataclass(frozen=True)
class ModelCall:
    """What happened when we tried to reach the language model."""

    configured: bool
    text: Optional[str] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.configured and self.error is None and self.text is not None

    @classmethod
    def not_configured(cls) -> "ModelCall":
        return cls(configured=False)

    @classmethod
    def failed(cls, error: BaseException) -> "ModelCall":
        return cls(configured=True, error=f"{type(error).__name__}: {error}")

    @classmethod
    def replied(cls, text: str) -> "ModelCall":
        return cls(configured=True, text=text)


@dataclass(frozen=True)
class Structured:
    payload: Dict[str, Any]
    text: str
    tier = Tier.STRUCTURED


@dataclass(frozen=True)
class HeuristicText:
    text: str
    tier = Tier.HEURISTIC_TEXT


@dataclass(frozen=True)
class StaticFallback:
    reason: str
    tier = Tier.STATIC_FALLBACK


Interpretation = Union[Structured, HeuristicText, StaticFallback]


def extract_json_object(text: str) -> Optional[Dict[str, Any]]:
    """Greedy ``{...}`` match parsed as JSON; None when absent or not an object."""
    m = _JSON_OBJECT.search(text)
    if not m:
        return None
    try:
        parsed = json.loads(m.group(0))
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def decide(call: ModelCall) -> Interpretation:
    if not call.configured:
        return StaticFallback(reason="model not configured")
    if not call.succeeded:
        return StaticFallback(reason=call.error or "model call failed")

    payload = extract_json_object(call.text)
    if payload is None:
        return HeuristicText(text=call.text)
    return Structured(payload=payload, text=call.text)


class ResponseInterpreter:
    def __init__(
        self,
        classifier: Optional[IntentClassifier] = None,
        extractor: Optional[ParameterExtractor] = None,
    ):
        self.classifier = classifier or IntentClassifier()
        self.extractor = extractor or ParameterExtractor()

    def interpret(self, request: AssistantRequest, call: ModelCall) -> AssistantResponse:
        return self.render(request, decide(call))

    def render(self, request: AssistantRequest, outcome: Interpretation) -> AssistantResponse:
        response, _ = self.resolve(request, outcome)
        return response

    def resolve(self, request: AssistantRequest, outcome: Interpretation) -> Tuple[AssistantResponse, Tier]:
        """Render the outcome and report the tier that actually produced the response.

        A structured reply that breaks the response contract is rendered from its
        text, so it reports ``HEURISTIC_TEXT`` rather than ``STRUCTURED``.
        """
        if isinstance(outcome, Structured):
            try:
                return self.structured(outcome), Tier.STRUCTURED
            except (ValidationError, TypeError, ValueError) as e:
                logger.warning(f"Model JSON did not match the response contract, using text fallback: {e}")
                return self.heuristic(request, outcome.text), Tier.HEURISTIC_TEXT

        if isinstance(outcome, HeuristicText):
            logger.warning("Failed to parse AI response as JSON, using text fallback")
            return self.heuristic(request, outcome.text), Tier.HEURISTIC_TEXT

        return self.offline(request, outcome), Tier.STATIC_FALLBACK

    def structured(self, outcome: Structured) -> AssistantResponse:
        p = outcome.payload
        # A zero or missing confidence reads as "not stated".
        confidence = p.get("confidence") or DEFAULT_STRUCTURED_CONFIDENCE
        actions = p.get("actions") or []
        if not isinstance(actions, list):
            raise TypeError("actions must be a list")

        return AssistantResponse(
            intent=p.get("intent") or "general",
            confidence=min(max(float(confidence), 0.0), 1.0),
            response=p.get("response") or outcome.text,
            actions=[Action.model_validate(a) for a in actions],
            context=p.get("context") or {},
        )

    def heuristic(self, request: AssistantRequest, model_text: str) -> AssistantResponse:
        result = self.classifier.classify(request.input)
        return AssistantResponse(
            intent=result.intent,
            confidence=result.confidence,
            response=model_text or ACKNOWLEDGEMENT,
            actions=self._actions_for(request.input, result),
            context={"originalInput": request.input},
        )

    def offline(self, request: AssistantRequest, outcome: StaticFallback) -> AssistantResponse:
        """No usable model: keyword matches still produce actions, else the fixed reply."""
        result = self.classifier.classify(request.input)
        context = {"fallback": True, "originalInput": request.input}

        if result.is_general:
            logger.info(f"Static fallback response ({outcome.reason})")
            return static_fallback(request)

        return AssistantResponse(
            intent=result.intent,
            confidence=result.confidence,
            response=ACKNOWLEDGEMENT,
            actions=self._actions_for(request.input, result),
            context=context,
        )

    def _actions_for(self, text: str, result: Classification) -> list:
        # One action per matched category, in check order.
        return [
            Action(
                type=category.action_type,
                parameters=self.extractor.build_parameters(text, category.action_type),
                priority=1,
            )
            for category in result.matched
        ]


def static_fallback(request: AssistantRequest) -> AssistantResponse:
    return AssistantResponse(
        intent="general",
        confidence=STATIC_TIER_GENERAL_CONFIDENCE,
        response=FALLBACK_RESPONSE,
        actions=[],
        context={"fallback": True, "originalInput": request.input},
    )
