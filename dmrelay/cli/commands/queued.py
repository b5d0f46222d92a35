"""List messages waiting in the offline queue."""

import asyncio

import typer
from rich.console import Console

from dmrelay.cli.output import format_error, format_messages, json_output
from dmrelay.cli.utils import ConfigManager, validate_user_id
from dmrelay.cli.utils.config import ConfigError
from dmrelay.cli.utils.runtime import build_store
from dmrelay.client import Message

console = Console()


async def _list_queued(peer: str | None) -> tuple[list[Message], str]:
    config = ConfigManager().load()
    store = build_store(config)
    msgs = await store.list(peer) if peer else await store.list_all()
    return msgs, config.user_id


def queued_command(peer: str | None, clear: bool, yes: bool, json_flag: bool) -> None:
    """List offline-queued messages, optionally discarding a conversation's queue."""
    try:
        peer = validate_user_id(peer) if peer else None
    except ValueError as e:
        format_error(console, str(e))
        raise typer.Exit(code=2)
    if clear and not peer:
        format_error(console, "--clear requires a peer", hint="Use -p/--peer <user_id>")
        raise typer.Exit(code=2)

    try:
        if clear:
            if not yes and not json_flag:
                typer.confirm(f"Discard queued messages with {peer}? They will never be delivered.", abort=True)
            removed = asyncio.run(_clear(peer))
            if json_flag:
                json_output(console, {"peer": peer, "removed": removed})
            else:
                console.print(f"[green]Removed {removed} queued message(s)[/green]")
            return
        msgs, me = asyncio.run(_list_queued(peer))
    except ConfigError as e:
        format_error(console, str(e), hint="Run 'dmrelay init' first")
        raise typer.Exit(code=1)

    if json_flag:
        json_output(console, {"peer": peer, "count": len(msgs), "messages": [m.to_wire_format() for m in msgs]})
        return
    if not msgs:
        console.print("[yellow]No queued messages[/yellow]")
        return
    format_messages(console, f"Queued offline ({len(msgs)})", msgs, me)


async def _clear(peer: str) -> int:
    config = ConfigManager().load()
    return await build_store(config).clear(peer)
