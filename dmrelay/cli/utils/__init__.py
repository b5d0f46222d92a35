"""CLI utilities."""

from .config import ClientConfig, ConfigError, ConfigManager
from .validation import validate_api_url, validate_message_content, validate_role, validate_user_id

__all__ = [
    "ConfigManager",
    "ClientConfig",
    "ConfigError",
    "validate_api_url",
    "validate_message_content",
    "validate_role",
    "validate_user_id",
]
