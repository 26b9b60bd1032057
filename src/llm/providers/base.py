from __future__ import annotations
from abc import ABC, abstractmethod

class LLMProvider(ABC):
    @abstractmethod
    def generate(self, *, system: str, user: str) -> str:
        """
        Must return the model output as TEXT (JSON is parsed by the response interpreter).
        Transport errors are raised, not swallowed.
        """
        raise NotImplementedError
