"""Send a direct message."""

import asyncio

import typer
from rich.console import Console

from dmrelay.cli.output import format_attempts, format_error, format_success, format_warning, json_output
from dmrelay.cli.utils import ConfigManager, validate_message_content, validate_user_id
from dmrelay.cli.utils.config import ConfigError
from dmrelay.cli.utils.runtime import build_dispatcher
from dmrelay.client import DeliveryAttempt, Message, MessageStatus

console = Console()


async def _send_message(receiver: str, content: str, subject: str) -> tuple[Message, list[DeliveryAttempt]]:
    """Send message and return it with the attempts made."""
    config = ConfigManager().load()
    async with build_dispatcher(config) as dispatcher:
        msg = await dispatcher.send(receiver, content, subject)
        return msg, dispatcher.last_attempts


def send_command(to: str, message: str, subject: str, verbose: bool, json_flag: bool) -> None:
    """Send a direct message, queueing it locally if the backend is unreachable."""
    try:
        receiver = validate_user_id(to)
        content = validate_message_content(message)
    except ValueError as e:
        format_error(console, str(e))
        raise typer.Exit(code=2)

    try:
        msg, attempts = asyncio.run(_send_message(receiver, content, subject or ""))
    except ConfigError as e:
        format_error(console, str(e), hint="Run 'dmrelay init' to configure the client")
        raise typer.Exit(code=1)
    except ValueError as e:
        format_error(console, str(e))
        raise typer.Exit(code=2)
    except Exception as e:
        format_error(console, f"Failed to send message: {e}")
        raise typer.Exit(code=3)

    if json_flag:
        json_output(
            console,
            {
                "status": msg.status.value,
                "message": msg.to_wire_format(),
                "attempts": [a.to_dict() for a in attempts],
            },
        )
    else:
        if msg.status is MessageStatus.SENT:
            format_success(console, f"Message sent to {receiver}")
        else:
            format_warning(console, f"Backend unreachable, message to {receiver} queued offline")
            console.print("Run 'dmrelay flush -p <user>' once the connection is back.")
        console.print(f"[cyan]Message ID:[/cyan] {msg.id}")
        if verbose or msg.status is not MessageStatus.SENT:
            format_attempts(console, attempts)
