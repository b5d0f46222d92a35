"""CLI commands."""

from . import (
    diagnose,
    flush,
    init,
    messages,
    queued,
    read,
    send,
    status,
    unread,
)

__all__ = [
    "diagnose",
    "flush",
    "init",
    "messages",
    "queued",
    "read",
    "send",
    "status",
    "unread",
]
