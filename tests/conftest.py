import json
import sys
from collections.abc import Awaitable, Callable, Generator
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from services.outline_generation.drivers import GenerationDriver
from services.outline_generation.service import OutlineGenerationService
from services.presentations.app import app as presentations_app
from services.presentations.store import InMemoryPresentationStore
from shared.config import CREDENTIAL_KEYS
from shared.utils import config as service_config

OUTLINE_RESPONSE = {
    "title": "AI in Healthcare",
    "slides": [
        {
            "id": "slide-1",
            "title": "AI in Healthcare",
            "bullets": ["Faster diagnosis", "Precision medicine"],
            "layout": "title-bullets",
            "notes": "Introduction",
        },
        {
            "title": "Current Applications",
            "bullets": ["Imaging", "Drug discovery", "Risk prediction"],
            "layout": "two-column",
        },
        {
            "id": "slide-3",
            "title": "Outlook",
            "bullets": ["Regulation", "Adoption"],
            "layout": "image-text",
        },
    ],
}

REPROMPT_RESPONSE = {
    "title": "Rewritten Slide",
    "bullets": ["First new point", "Second new point"],
    "layout": "full-image",
    "notes": "Rewritten on request",
}


class FakeGenerationDriver(GenerationDriver):
    """Driver that replays canned completions and records every call."""

    def __init__(self) -> None:
        self.outline_response: Any = OUTLINE_RESPONSE
        self.reprompt_response: Any = REPROMPT_RESPONSE
        self.before_reply: Callable[[], Awaitable[None]] | None = None
        self.calls: list[dict[str, Any]] = []

    async def complete(self, system_prompt: str, user_prompt: str, step_config: dict[str, Any]) -> str:
        self.calls.append(
            {"system_prompt": system_prompt, "user_prompt": user_prompt, "step_config": step_config}
        )
        if self.before_reply is not None:
            await self.before_reply()
        response = self.reprompt_response if "Current slide:" in user_prompt else self.outline_response
        if isinstance(response, Exception):
            raise response
        if isinstance(response, str):
            return response
        return json.dumps(response)


@pytest.fixture(autouse=True)
def clean_config() -> Generator[None, None, None]:
    """Clear credentials, model and timeout overrides so tests never reach a real backend."""
    keys = (*CREDENTIAL_KEYS, "default_ai_model", "generation_timeout_seconds")
    saved = {key: service_config.config.get(key) for key in keys}
    for key in keys:
        service_config.set(key, None)
    try:
        yield
    finally:
        for key, value in saved.items():
            service_config.set(key, value)


@pytest.fixture
def groq_key() -> str:
    service_config.set("groq_api_key", "test-groq-key")
    return "test-groq-key"


@pytest.fixture
def fake_driver() -> FakeGenerationDriver:
    return FakeGenerationDriver()


@pytest.fixture
def driver_factory_calls() -> list[tuple[str, dict[str, Any]]]:
    return []


@pytest.fixture
def generation_service(
    fake_driver: FakeGenerationDriver, driver_factory_calls: list[tuple[str, dict[str, Any]]]
) -> OutlineGenerationService:
    def factory(api_key: str, provider_config: dict[str, Any]) -> GenerationDriver:
        driver_factory_calls.append((api_key, provider_config))
        return fake_driver

    return OutlineGenerationService(driver_factory=factory)


@pytest.fixture
def store() -> InMemoryPresentationStore:
    return InMemoryPresentationStore()


@pytest.fixture
def client(
    store: InMemoryPresentationStore, generation_service: OutlineGenerationService
) -> Generator[TestClient, None, None]:
    """Presentation service client wired to a fresh store and the fake generation driver."""
    original_store = presentations_app.state.presentation_store
    original_service = presentations_app.state.generation_service
    presentations_app.state.presentation_store = store
    presentations_app.state.generation_service = generation_service
    try:
        with TestClient(presentations_app) as test_client:
            yield test_client
    finally:
        presentations_app.state.presentation_store = original_store
        presentations_app.state.generation_service = original_service
