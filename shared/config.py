"""
Configuration management for services.
"""

import json
import os
from typing import Any

from dotenv import load_dotenv

# Service config keys holding generation backend credentials.
CREDENTIAL_KEYS = (
    "groq_api_key",
    "together_api_key",
    "openrouter_api_key",
    "openai_api_key",
)


class ServiceConfig:
    """Configuration management for services using environment variables."""

    def __init__(self) -> None:
        """Initialize configuration by loading environment variables."""
        # Always load .env from the project root (where app.py is located)
        env_path = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.env"))
        load_dotenv(dotenv_path=env_path, override=True)
        self.config: dict[str, Any] = {}
        self.load_from_env()

    def load_from_env(self) -> None:
        """Load configuration from environment variables."""
        self.config = {
            "groq_api_key": os.getenv("GROQ_API_KEY"),
            "together_api_key": os.getenv("TOGETHER_API_KEY"),
            "openrouter_api_key": os.getenv("OPENROUTER_API_KEY"),
            "openai_api_key": os.getenv("OPENAI_API_KEY"),
            "default_ai_model": os.getenv("DEFAULT_AI_MODEL"),
            "generation_config_path": os.getenv("GENERATION_CONFIG_PATH"),
            "generation_timeout_seconds": os.getenv("GENERATION_TIMEOUT_SECONDS") or None,
            "presentation_store": os.getenv("PRESENTATION_STORE", "memory"),
            "database_url": os.getenv("DATABASE_URL"),
            "max_upload_bytes": int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024))),
            "api_prefix": os.getenv("API_PREFIX", "/api"),
            "log_level": os.getenv("LOG_LEVEL", "INFO"),
            "debug": os.getenv("DEBUG", "false").lower() == "true",
            "allowed_origins": json.loads(os.getenv("ALLOWED_ORIGINS", '["*"]')),
        }

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key.

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Configuration value
        """
        value = self.config.get(key)
        return default if value is None else value

    def set(self, key: str, value: Any) -> None:
        """
        Set configuration value.

        Args:
            key: Configuration key
            value: Configuration value
        """
        self.config[key] = value


# Global configuration instance
config = ServiceConfig()
