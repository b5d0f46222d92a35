"""Show client configuration and offline queue status."""

import asyncio

import typer
from rich.console import Console

from dmrelay.cli.output import format_error, json_output
from dmrelay.cli.utils import ConfigManager
from dmrelay.cli.utils.config import ConfigError
from dmrelay.cli.utils.runtime import build_catalog, build_store
from dmrelay.client import CLIENT_VERSION, Operation

console = Console()


async def _get_status() -> dict:
    """Get client status information."""
    manager = ConfigManager()
    config = manager.load()
    store = build_store(config)
    queued = await store.count()
    local_mode = await store.load_local_mode()

    return {
        "version": CLIENT_VERSION,
        "api_url": config.api_url,
        "user_id": config.user_id,
        "role": config.role.value,
        "token_set": bool(config.token),
        "timeout": config.timeout,
        "http2": config.http2,
        "config_path": str(manager.config_path),
        "db_path": str(config.db_path),
        "queued": queued,
        "local_mode": local_mode,
        "send_order": build_catalog(config).names(Operation.SEND),
        "send_order_customized": bool(config.send_order),
    }


def status_command(json_flag: bool) -> None:
    """Show client configuration and queued message count."""
    try:
        status = asyncio.run(_get_status())
    except ConfigError as e:
        if json_flag:
            json_output(console, {"status": "not_initialized", "error": str(e)})
        else:
            format_error(console, str(e), hint="Run 'dmrelay init' to configure the client")
        raise typer.Exit(code=1)
    except Exception as e:
        format_error(console, f"Failed to get status: {e}")
        raise typer.Exit(code=1)

    if json_flag:
        json_output(console, {"status": "initialized", **status})
        return

    console.print(f"[bold]dmrelay {status['version']}[/bold]")
    console.print()
    console.print(f"[cyan]User ID:[/cyan]   {status['user_id']} ({status['role']})")
    console.print(f"[cyan]API URL:[/cyan]   {status['api_url']}")
    console.print(f"[cyan]Token:[/cyan]     {'set' if status['token_set'] else '[yellow]not set[/yellow]'}")
    console.print(f"[cyan]Timeout:[/cyan]   {status['timeout']}s")
    console.print(f"[cyan]Config:[/cyan]    {status['config_path']}")
    console.print(f"[cyan]Database:[/cyan]  {status['db_path']}")
    console.print()
    console.print(f"[cyan]Queued:[/cyan]    {status['queued']}")
    if status["local_mode"]:
        console.print("[yellow]Local mode:[/yellow] on (run 'dmrelay diagnose' once the backend is back)")
    label = "preferred" if status["send_order_customized"] else "default"
    console.print(f"[cyan]Send order ({label}):[/cyan] {', '.join(status['send_order'])}")
