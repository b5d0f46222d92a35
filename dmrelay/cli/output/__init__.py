"""Output formatting utilities."""

from .formatters import format_attempts, format_error, format_messages, format_success, format_table, format_warning
from .json_output import json_output, to_json

__all__ = [
    "format_attempts",
    "format_error",
    "format_messages",
    "format_success",
    "format_table",
    "format_warning",
    "json_output",
    "to_json",
]
