"""
Configuration loader for the outline generation service.
Handles loading and validation of the YAML model catalog, provider endpoints and prompts.
"""

import logging
import os
from pathlib import Path
from string import Template
from typing import Any

import yaml

from shared.config import config as service_config

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "generation_config.yaml"


class GenerationConfig:
    """Configuration manager for outline and reprompt generation."""

    def __init__(self, config_path: str | None = None):
        if config_path is None:
            config_path = service_config.get("generation_config_path") or os.path.join(
                os.path.dirname(__file__), DEFAULT_CONFIG_FILE
            )

        self.config_path = Path(config_path)
        self._config = self._load_config()

    def _load_config(self) -> dict[str, Any]:
        """Load configuration from YAML file."""
        try:
            with open(self.config_path, encoding="utf-8") as file:
                config = yaml.safe_load(file) or {}
                logger.info(f"Loaded configuration from {self.config_path}")
                return config
        except FileNotFoundError:
            logger.error(f"Configuration file not found: {self.config_path}")
            raise
        except yaml.YAMLError as e:
            logger.error(f"Error parsing YAML configuration: {e}")
            raise

    def get_default_model(self) -> str:
        """Default model id; DEFAULT_AI_MODEL overrides the YAML value when it names a catalog model."""
        override = service_config.get("default_ai_model")
        if override and override in self.get_ai_models():
            return override
        if override:
            logger.warning(f"DEFAULT_AI_MODEL '{override}' is not in the model catalog, ignoring")
        return self._config.get("default_model", "")

    def get_ai_models(self) -> dict[str, Any]:
        return self._config.get("ai_models", {})

    def get_provider_config(self, provider: str) -> dict[str, Any] | None:
        return self._config.get("providers", {}).get(provider)

    def get_fallback_order(self) -> list[str]:
        return self._config.get("fallback_order", list(self._config.get("providers", {})))

    def get_generation_settings(self) -> dict[str, Any]:
        return self._config.get("generation", {})

    def get_timeout(self) -> float:
        """Generation timeout; GENERATION_TIMEOUT_SECONDS overrides the YAML value."""
        configured = service_config.get("generation_timeout_seconds")
        if configured is not None:
            return float(configured)
        return float(self.get_generation_settings().get("timeout_seconds", 60))

    def get_prompt_config(self, prompt_name: str) -> dict[str, Any]:
        prompt_config = self._config.get("prompts", {}).get(prompt_name)
        if not prompt_config:
            raise ValueError(f"Unknown generation prompt: {prompt_name}")
        return prompt_config

    def get_system_prompt(self, prompt_name: str, **kwargs: Any) -> str:
        """Get a system prompt with ``$name`` placeholders filled from kwargs."""
        prompt = self.get_prompt_config(prompt_name).get("system_prompt", "")
        return Template(prompt).safe_substitute(**kwargs).strip()

    def get_step_parameters(self, prompt_name: str) -> dict[str, Any]:
        """Get model parameters for a prompt."""
        prompt_config = self.get_prompt_config(prompt_name)
        return {
            "temperature": prompt_config.get("temperature", 0.4),
            "max_tokens": prompt_config.get("max_tokens", 2000),
        }

    def validate_config(self) -> bool:
        """Validate the loaded configuration."""
        required_sections = ["ai_models", "providers", "prompts", "default_model"]

        for section in required_sections:
            if section not in self._config:
                logger.error(f"Missing required configuration section: {section}")
                return False

        providers = self._config.get("providers", {})
        for provider_name, provider_config in providers.items():
            if "credential" not in provider_config:
                logger.error(f"Provider '{provider_name}' has no credential key")
                return False

        for model_id, model_config in self.get_ai_models().items():
            for key in ("provider", "model"):
                if key not in model_config:
                    logger.error(f"Missing required key '{key}' in model '{model_id}'")
                    return False
            if model_config["provider"] not in providers:
                logger.error(f"Model '{model_id}' references unknown provider")
                return False

        if self._config["default_model"] not in self.get_ai_models():
            logger.error("Default model is not in the model catalog")
            return False

        for prompt_name in ("outline", "reprompt"):
            if prompt_name not in self._config.get("prompts", {}):
                logger.error(f"Missing prompt configuration: {prompt_name}")
                return False

        logger.info("Configuration validation passed")
        return True
