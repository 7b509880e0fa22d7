"""Builder for OpenAI-compatible chat clients.

Groq, Together and OpenRouter all expose the OpenAI chat completions API,
so a single factory covers every supported generation backend.
"""

from __future__ import annotations

from openai import AsyncOpenAI


def create_openai_compatible_client(
    api_key: str | None,
    base_url: str | None = None,
    timeout: float | None = None,
) -> AsyncOpenAI:
    """
    Create a client for an OpenAI-compatible endpoint.

    Args:
        api_key: Provider API key
        base_url: Provider base URL (None for api.openai.com)
        timeout: Request timeout in seconds

    Returns:
        Configured AsyncOpenAI client

    Raises:
        ValueError: If the API key is missing
    """
    if not api_key:
        raise ValueError("API key not configured for generation backend.")

    kwargs: dict = {"api_key": api_key, "max_retries": 0}
    if base_url:
        kwargs["base_url"] = base_url
    if timeout is not None:
        kwargs["timeout"] = timeout

    return AsyncOpenAI(**kwargs)
