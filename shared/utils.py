import hashlib
import logging

from shared.config import config


def setup_logging(service_name: str, log_level: str | None = None) -> logging.Logger:
    """Setup logging configuration for a service"""
    logger = logging.getLogger(service_name)
    level = log_level or config.get("log_level", "INFO")
    logger.setLevel(getattr(logging, level.upper()))

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(f"%(asctime)s - {service_name} - %(levelname)s - %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def generate_hash(text: str) -> str:
    """Generate a short hash, used for identifiers derived from content"""
    return hashlib.md5(text.encode()).hexdigest()


def validate_text_length(text: str, max_length: int = 10000) -> str:
    """Validate and truncate text if necessary"""
    if len(text) > max_length:
        return text[:max_length]
    return text


__all__ = ["config", "generate_hash", "setup_logging", "validate_text_length"]
