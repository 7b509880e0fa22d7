"""OpenAI-compatible driver for outline generation using AsyncOpenAI."""

from __future__ import annotations

from typing import Any

from shared.openai_client import create_openai_compatible_client

from .base import GenerationDriver


class OpenAICompatibleDriver(GenerationDriver):
    """Chat completions driver for Groq, Together, OpenRouter and OpenAI."""

    def __init__(self, api_key: str, base_url: str | None = None, timeout: float | None = None):
        self.base_url = base_url
        self.client = create_openai_compatible_client(api_key, base_url=base_url, timeout=timeout)

    async def complete(self, system_prompt: str, user_prompt: str, step_config: dict[str, Any]) -> str:
        """Request a JSON object completion."""
        response = await self.client.chat.completions.create(
            model=step_config["model"],
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=step_config.get("temperature", 0.4),
            max_tokens=step_config.get("max_tokens", 2000),
            response_format={"type": "json_object"},
        )

        content = response.choices[0].message.content
        if content is not None:
            return content.strip()
        return ""
