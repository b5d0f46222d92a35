"""Show the conversation with one user."""

import asyncio

import typer
from rich.console import Console

from dmrelay.cli.output import format_error, format_messages, format_warning, json_output
from dmrelay.cli.utils import ConfigManager, validate_user_id
from dmrelay.cli.utils.config import ConfigError
from dmrelay.cli.utils.runtime import build_dispatcher
from dmrelay.client import Message

console = Console()


async def _fetch(peer: str, mark_read: bool) -> tuple[list[Message], bool, str]:
    """Fetch the conversation; optionally send a read receipt afterwards."""
    config = ConfigManager().load()
    async with build_dispatcher(config) as dispatcher:
        messages = await dispatcher.fetch_messages(peer)
        local_mode = dispatcher.session.local_mode
        if mark_read and not local_mode:
            await dispatcher.mark_read(peer)
        return messages, local_mode, config.user_id


def messages_command(peer: str, limit: int, mark_read: bool, json_flag: bool) -> None:
    """List the conversation with a user, oldest first."""
    try:
        peer = validate_user_id(peer)
    except ValueError as e:
        format_error(console, str(e))
        raise typer.Exit(code=2)
    if limit < 1:
        format_error(console, "Limit must be a positive integer")
        raise typer.Exit(code=2)

    try:
        msgs, local_mode, me = asyncio.run(_fetch(peer, mark_read))
    except ConfigError as e:
        format_error(console, str(e), hint="Run 'dmrelay init' first")
        raise typer.Exit(code=1)
    except Exception as e:
        format_error(console, f"Failed to load messages: {e}")
        raise typer.Exit(code=3)

    msgs = msgs[-limit:]
    if json_flag:
        json_output(
            console,
            {
                "peer": peer,
                "local_mode": local_mode,
                "count": len(msgs),
                "messages": [m.to_wire_format() for m in msgs],
            },
        )
        return
    if local_mode:
        format_warning(console, "Backend unreachable, showing locally queued messages only")
    if not msgs:
        console.print("[yellow]No messages found[/yellow]")
        return
    format_messages(console, f"Conversation with {peer} ({len(msgs)})", msgs, me)
