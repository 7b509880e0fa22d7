from abc import ABC, abstractmethod
from typing import Any


class GenerationDriver(ABC):
    """Abstract base class for outline generation drivers."""

    @abstractmethod
    async def complete(self, system_prompt: str, user_prompt: str, step_config: dict[str, Any]) -> str:
        """Return the raw completion text for the given prompts."""
        pass
