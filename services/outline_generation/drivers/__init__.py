"""Outline generation driver implementations."""

from .base import GenerationDriver
from .openai_compatible import OpenAICompatibleDriver

__all__ = [
    "GenerationDriver",
    "OpenAICompatibleDriver",
]
