"""Input validation utilities for CLI commands."""

import re

from dmrelay.client.types import Scope


def validate_user_id(user_id: str) -> str:
    """Validate and return a user ID. Raises ValueError if invalid."""
    if not user_id or not user_id.strip():
        raise ValueError("User ID cannot be empty")
    user_id = user_id.strip()
    if len(user_id) > 256:
        raise ValueError("User ID cannot exceed 256 characters")
    if not re.match(r"^[a-zA-Z0-9_.@-]+$", user_id):
        raise ValueError(
            "User ID can only contain letters, numbers, underscores, dots, @ and hyphens"
        )
    return user_id


def validate_api_url(api_url: str) -> str:
    """Validate and return the API base URL. Raises ValueError if invalid."""
    if not api_url or not api_url.strip():
        raise ValueError("API URL cannot be empty")
    api_url = api_url.strip()
    if not api_url.startswith(("http://", "https://")):
        raise ValueError("API URL must start with http:// or https://")
    if len(api_url) > 2048:
        raise ValueError("API URL cannot exceed 2048 characters")
    return api_url.rstrip("/")


def validate_role(role: str) -> Scope:
    """Validate and return a user role. Raises ValueError if invalid."""
    try:
        scope = Scope((role or "").strip().lower())
    except ValueError:
        scope = None
    if scope is None or scope is Scope.ANY:
        raise ValueError("Role must be one of: student, staff, admin")
    return scope


def validate_message_content(content: str) -> str:
    """Validate and return message content. Raises ValueError if invalid."""
    if not content or not content.strip():
        raise ValueError("Message content cannot be empty")
    if len(content) > 65536:
        raise ValueError("Message content cannot exceed 65536 characters")
    return content
