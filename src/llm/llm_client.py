import logging
import os
from typing import Optional

from llm.providers.base import LLMProvider

logger = logging.getLogger(__name__)

LLM_PROVIDER = os.getenv("LLM_PROVIDER", "gemini").strip().lower()

DEFAULT_SYSTEM = "You are an intelligent Executive Assistant AI."


class LLMClient:
    """Thin wrapper over one configured provider.

    A missing client (``None``) is how the rest of the app expresses
    "no model configured"; see ``from_env``.
    """

    def __init__(self, provider: LLMProvider):
        self.provider = provider

    @property
    def provider_name(self) -> str:
        return type(self.provider).__name__

    def generate(self, prompt: str, system: str = DEFAULT_SYSTEM) -> str:
        text = self.provider.generate(system=system, user=prompt)
        if not isinstance(text, str):
            raise TypeError(f"{self.provider_name} returned {type(text).__name__}, expected str")
        return text

    @classmethod
    def from_env(cls, provider_name: Optional[str] = None) -> Optional["LLMClient"]:
        """Build a client from environment settings, or None when unconfigured."""
        name = (provider_name or LLM_PROVIDER).strip().lower()
        if name in {"", "none", "off"}:
            logger.info("LLM provider disabled; running in heuristic mode")
            return None

        try:
            provider = _make_provider(name)
        except RuntimeError as e:
            logger.warning(f"Language model not configured ({e}). AI features will be limited.")
            return None

        logger.info(f"Language model provider configured: {name}")
        return cls(provider)


def _make_provider(name: str) -> LLMProvider:
    if name == "gemini":
        from llm.providers.gemini_provider import GeminiProvider

        return GeminiProvider()
    if name == "mock":
        from llm.providers.mock_provider import MockProvider

        return MockProvider()
    raise RuntimeError(f"unknown LLM_PROVIDER '{name}'")
