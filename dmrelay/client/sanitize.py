"""Redaction helpers for log output."""

SENSITIVE_FIELDS = frozenset({"authorization", "x-auth-token", "token", "password"})
PREVIEW_CHARS = 20


def sanitize_dict(data: dict) -> dict:
    """Remove credentials and shorten message text for logging."""
    result = {}
    for key, value in data.items():
        lower_key = key.lower()
        if lower_key in SENSITIVE_FIELDS:
            result[key] = "[REDACTED]"
        elif lower_key in ("content", "message") and isinstance(value, str) and len(value) > PREVIEW_CHARS:
            result[key] = value[:PREVIEW_CHARS] + "..."
        elif isinstance(value, dict):
            result[key] = sanitize_dict(value)
        else:
            result[key] = value
    return result
