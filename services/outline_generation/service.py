import asyncio
import json
import re
from collections.abc import Callable
from typing import Any, NamedTuple

from services.outline_generation.config.config_loader import GenerationConfig
from services.outline_generation.drivers import GenerationDriver, OpenAICompatibleDriver
from shared.enums import SlideLayout
from shared.errors import (
    GenerationConfigurationError,
    GenerationError,
    InvalidRequestError,
    UpstreamGenerationError,
)
from shared.models import AIModelInfo, GeneratedOutline, Slide
from shared.utils import config, generate_hash, setup_logging, validate_text_length

DriverFactory = Callable[[str, dict[str, Any]], GenerationDriver]

_FENCED_JSON = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)


class ResolvedModel(NamedTuple):
    model_id: str
    provider: str
    model: str
    api_key: str


def parse_json_object(raw: str) -> dict[str, Any]:
    """Parse a completion as a JSON object, tolerating a surrounding markdown fence."""
    text = raw.strip()
    fenced = _FENCED_JSON.search(text)
    if fenced:
        text = fenced.group(1)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise UpstreamGenerationError(f"Generation backend returned invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise UpstreamGenerationError("Generation backend returned JSON that is not an object")
    return data


def _coerce_bullets(value: Any) -> list[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if str(item).strip()]


def coerce_slide(raw: Any, slide_id: str, fallback: Slide | None = None) -> Slide:
    """Build a Slide from backend output.

    Unknown layouts become the fallback slide's layout, or title-bullets.
    Images always start empty; callers that keep images set them afterwards.
    """
    if not isinstance(raw, dict):
        raise UpstreamGenerationError("Generation backend returned a slide that is not an object")

    try:
        layout = SlideLayout(raw.get("layout"))
    except ValueError:
        layout = fallback.layout if fallback else SlideLayout.TITLE_BULLETS

    title = raw.get("title")
    notes = raw.get("notes")
    return Slide(
        id=slide_id,
        title=str(title).strip() if title else (fallback.title if fallback else ""),
        bullets=_coerce_bullets(raw["bullets"]) if "bullets" in raw else list(fallback.bullets if fallback else []),
        layout=layout,
        images=[],
        notes=str(notes) if notes is not None else (fallback.notes if fallback else None),
    )


def assign_slide_ids(raw_slides: list[Any]) -> list[str]:
    """Keep backend ids that are usable and unique, otherwise number slides as slide-N."""
    seen: set[str] = set()
    ids: list[str] = []
    for position, raw in enumerate(raw_slides, start=1):
        candidate = raw.get("id") if isinstance(raw, dict) else None
        if not isinstance(candidate, str) or not candidate.strip() or candidate in seen:
            candidate = f"slide-{position}"
            suffix = position
            while candidate in seen:
                suffix += 1
                candidate = f"slide-{suffix}"
        seen.add(candidate)
        ids.append(candidate)
    return ids


class OutlineGenerationService:
    """Generate slide outlines and single-slide rewrites through OpenAI-compatible backends."""

    def __init__(
        self,
        logger=None,
        generation_config: GenerationConfig | None = None,
        driver_factory: DriverFactory | None = None,
    ):
        self.logger = logger or setup_logging("outline-generation")
        self.config = generation_config or GenerationConfig()
        if not self.config.validate_config():
            raise ValueError("Invalid generation configuration")
        self._driver_factory = driver_factory or self._create_driver
        self._drivers: dict[str, GenerationDriver] = {}
        self.logger.info(f"Loaded {len(self.config.get_ai_models())} generation models")

    def _create_driver(self, api_key: str, provider_config: dict[str, Any]) -> GenerationDriver:
        return OpenAICompatibleDriver(
            api_key,
            base_url=provider_config.get("base_url"),
            timeout=self.config.get_timeout(),
        )

    def _credential_for(self, provider: str) -> str | None:
        provider_config = self.config.get_provider_config(provider) or {}
        credential_key = provider_config.get("credential")
        return config.get(credential_key) if credential_key else None

    def list_models(self) -> list[AIModelInfo]:
        return [
            AIModelInfo(
                id=model_id,
                provider=model_config["provider"],
                model=model_config["model"],
                configured=bool(self._credential_for(model_config["provider"])),
            )
            for model_id, model_config in self.config.get_ai_models().items()
        ]

    def resolve_model(self, model_id: str | None = None) -> ResolvedModel:
        """Pick the model and credential to use for a request.

        Credentials are read on every call, so keys added after startup are honoured.
        """
        models = self.config.get_ai_models()
        default_model = self.config.get_default_model()
        requested = model_id or default_model
        model_config = models.get(requested)
        if model_config is None:
            self.logger.warning(f"Unknown AI model '{requested}', using '{default_model}'")
            requested = default_model
            model_config = models[default_model]

        provider = model_config["provider"]
        api_key = self._credential_for(provider)
        if api_key:
            return ResolvedModel(requested, provider, model_config["model"], api_key)

        for fallback_provider in self.config.get_fallback_order():
            if fallback_provider == provider:
                continue
            api_key = self._credential_for(fallback_provider)
            if not api_key:
                continue
            provider_config = self.config.get_provider_config(fallback_provider) or {}
            fallback_id = provider_config.get("default_model")
            fallback_config = models.get(fallback_id)
            if fallback_config is None:
                continue
            self.logger.warning(
                f"No credential for provider '{provider}', falling back to '{fallback_id}'"
            )
            return ResolvedModel(fallback_id, fallback_provider, fallback_config["model"], api_key)

        raise GenerationConfigurationError("No AI API key configured")

    def _get_driver(self, resolved: ResolvedModel) -> GenerationDriver:
        cache_key = f"{resolved.provider}:{generate_hash(resolved.api_key)}"
        driver = self._drivers.get(cache_key)
        if driver is None:
            provider_config = self.config.get_provider_config(resolved.provider) or {}
            driver = self._driver_factory(resolved.api_key, provider_config)
            self._drivers[cache_key] = driver
        return driver

    async def _complete(
        self,
        prompt_name: str,
        system_prompt: str,
        user_prompt: str,
        model_id: str | None,
        timeout: float | None,
    ) -> dict[str, Any]:
        resolved = self.resolve_model(model_id)
        driver = self._get_driver(resolved)
        step_config = {**self.config.get_step_parameters(prompt_name), "model": resolved.model}
        timeout = timeout if timeout is not None else self.config.get_timeout()

        self.logger.info(f"Running {prompt_name} generation with {resolved.model_id}")
        try:
            raw = await asyncio.wait_for(
                driver.complete(system_prompt, user_prompt, step_config), timeout=timeout
            )
        except TimeoutError as e:
            self.logger.error(f"{prompt_name} generation timed out after {timeout}s")
            raise UpstreamGenerationError(f"Generation timed out after {timeout}s") from e
        except GenerationError:
            raise
        except Exception as e:
            self.logger.error(f"{prompt_name} generation request failed: {e!s}")
            raise UpstreamGenerationError(f"Generation backend request failed: {e!s}") from e

        return parse_json_object(raw)

    def _layouts(self) -> str:
        return ", ".join(layout.value for layout in SlideLayout)

    async def generate_outline(
        self,
        prompt: str,
        document_context: str = "",
        model_id: str | None = None,
        timeout: float | None = None,
    ) -> GeneratedOutline:
        """Generate a titled slide outline from a prompt and optional document context."""
        if not prompt or not prompt.strip():
            raise InvalidRequestError("Prompt is required")

        settings = self.config.get_generation_settings()
        max_slides = int(settings.get("max_slides", 20))
        document_context = validate_text_length(
            document_context, int(settings.get("max_document_chars", 20000))
        )

        user_prompt = prompt.strip()
        if document_context.strip():
            user_prompt += f"\n\nReference documents:{document_context}"

        system_prompt = self.config.get_system_prompt(
            "outline", layouts=self._layouts(), max_slides=max_slides
        )
        data = await self._complete("outline", system_prompt, user_prompt, model_id, timeout)

        raw_slides = data.get("slides")
        if not isinstance(raw_slides, list) or not raw_slides:
            raise UpstreamGenerationError("Generation backend returned no slides")
        raw_slides = raw_slides[:max_slides]

        slides = [
            coerce_slide(raw, slide_id)
            for raw, slide_id in zip(raw_slides, assign_slide_ids(raw_slides), strict=True)
        ]
        title = data.get("title")
        title = str(title).strip() if title else None
        self.logger.info(f"Generated outline with {len(slides)} slides")
        return GeneratedOutline(title=title or None, slides=slides)

    async def reprompt_slide(
        self,
        current_slide: Slide,
        instruction: str,
        model_id: str | None = None,
        timeout: float | None = None,
    ) -> Slide:
        """Rewrite one slide; the result keeps the slide's id and images."""
        if not instruction or not instruction.strip():
            raise InvalidRequestError("Reprompt instruction is required")

        slide_payload = current_slide.model_dump(mode="json", exclude={"id", "images"})
        user_prompt = (
            f"Current slide:\n{json.dumps(slide_payload, indent=2)}\n\n"
            f"Instruction: {instruction.strip()}"
        )
        system_prompt = self.config.get_system_prompt("reprompt", layouts=self._layouts())
        data = await self._complete("reprompt", system_prompt, user_prompt, model_id, timeout)

        # Some models wrap the result as {"slide": {...}}
        if isinstance(data.get("slide"), dict):
            data = data["slide"]

        updated = coerce_slide(data, current_slide.id, fallback=current_slide)
        return updated.model_copy(update={"images": list(current_slide.images)})
