"""Replay queued offline messages."""

import asyncio

import typer
from rich.console import Console

from dmrelay.cli.output import format_error, format_success, format_warning, json_output
from dmrelay.cli.utils import ConfigManager, validate_user_id
from dmrelay.cli.utils.config import ConfigError
from dmrelay.cli.utils.runtime import build_dispatcher
from dmrelay.client import FlushResult

console = Console()


async def _flush(peer: str) -> FlushResult:
    config = ConfigManager().load()
    async with build_dispatcher(config) as dispatcher:
        return await dispatcher.flush(peer)


def flush_command(peer: str, json_flag: bool) -> None:
    """Deliver queued messages to a user in their original order."""
    try:
        peer = validate_user_id(peer)
    except ValueError as e:
        format_error(console, str(e))
        raise typer.Exit(code=2)

    try:
        result = asyncio.run(_flush(peer))
    except ConfigError as e:
        format_error(console, str(e), hint="Run 'dmrelay init' first")
        raise typer.Exit(code=1)
    except Exception as e:
        format_error(console, f"Failed to flush queue: {e}")
        raise typer.Exit(code=3)

    if json_flag:
        json_output(
            console,
            {
                "peer": peer,
                "delivered": [m.to_wire_format() for m in result.delivered],
                "remaining": result.remaining,
            },
        )
    elif result.complete:
        format_success(console, f"Delivered {len(result.delivered)} queued message(s) to {peer}")
    else:
        format_warning(
            console,
            f"Delivered {len(result.delivered)}, {result.remaining} still queued; backend stopped accepting messages",
        )
    if not result.complete:
        raise typer.Exit(code=3)
