"""Show how many messages are waiting to be read."""

import asyncio
from typing import Optional

import typer
from rich.console import Console

from dmrelay.cli.output import format_error, format_warning, json_output
from dmrelay.cli.utils import ConfigManager
from dmrelay.cli.utils.config import ConfigError
from dmrelay.cli.utils.runtime import build_dispatcher
from dmrelay.client import DeliveryAttempt

console = Console()


async def _unread() -> tuple[Optional[int], bool, list[DeliveryAttempt]]:
    config = ConfigManager().load()
    async with build_dispatcher(config) as dispatcher:
        count = await dispatcher.unread_count()
        return count, dispatcher.session.local_mode, dispatcher.last_attempts


def unread_command(json_flag: bool) -> None:
    """Print the unread message count reported by the backend."""
    try:
        count, local_mode, attempts = asyncio.run(_unread())
    except ConfigError as e:
        format_error(console, str(e), hint="Run 'dmrelay init' first")
        raise typer.Exit(code=1)

    if json_flag:
        json_output(console, {"count": count, "local_mode": local_mode,
                              "attempts": [a.to_dict() for a in attempts]})
    elif count is None:
        format_warning(console, "Backend unreachable, unread count unavailable")
    else:
        console.print(f"[cyan]Unread:[/cyan] {count}")
    if count is None:
        raise typer.Exit(code=3)
