"""Mark a conversation as read."""

import asyncio

import typer
from rich.console import Console

from dmrelay.cli.output import format_error, format_success, format_warning, json_output
from dmrelay.cli.utils import ConfigManager, validate_user_id
from dmrelay.cli.utils.config import ConfigError
from dmrelay.cli.utils.runtime import build_dispatcher
from dmrelay.client import DeliveryAttempt

console = Console()


async def _mark_read(peer: str) -> list[DeliveryAttempt]:
    config = ConfigManager().load()
    async with build_dispatcher(config) as dispatcher:
        await dispatcher.mark_read(peer)
        return dispatcher.last_attempts


def read_command(peer: str, json_flag: bool) -> None:
    """Send a read receipt for messages from a user. Failure is not an error."""
    try:
        peer = validate_user_id(peer)
    except ValueError as e:
        format_error(console, str(e))
        raise typer.Exit(code=2)

    try:
        attempts = asyncio.run(_mark_read(peer))
    except ConfigError as e:
        format_error(console, str(e), hint="Run 'dmrelay init' first")
        raise typer.Exit(code=1)

    marked = any(a.succeeded for a in attempts)
    if json_flag:
        json_output(console, {"peer": peer, "marked": marked, "attempts": [a.to_dict() for a in attempts]})
    elif marked:
        format_success(console, f"Messages from {peer} marked as read")
    else:
        format_warning(console, f"Could not mark messages from {peer} as read; will not retry")
