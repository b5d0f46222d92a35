"""Main CLI entry point for dmrelay."""

import logging

import typer
from rich.console import Console

from dmrelay.cli.commands.diagnose import diagnose_command
from dmrelay.cli.commands.flush import flush_command
from dmrelay.cli.commands.init import init_command
from dmrelay.cli.commands.messages import messages_command
from dmrelay.cli.commands.queued import queued_command
from dmrelay.cli.commands.read import read_command
from dmrelay.cli.commands.send import send_command
from dmrelay.cli.commands.status import status_command
from dmrelay.cli.commands.unread import unread_command
from dmrelay.client import DEFAULT_TIMEOUT

app = typer.Typer(
    name="dmrelay",
    help="dmrelay - direct messages that survive an unreliable backend",
    no_args_is_help=True,
    add_completion=False,
)
console = Console()


@app.callback()
def configure(
    verbose: int = typer.Option(0, "-v", "--verbose", count=True, help="-v for INFO, -vv for DEBUG"),
) -> None:
    """Configure logging for every command."""
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(name)s %(levelname)s %(message)s")


@app.command("init")
def init(
    api_url: str = typer.Option(..., "-u", "--api-url", help="Backend API base URL"),
    user_id: str = typer.Option(..., "-i", "--user-id", help="Your user id"),
    role: str = typer.Option("student", "-r", "--role", help="student, staff or admin"),
    token: str = typer.Option("", "-t", "--token", help="Bearer token"),
    timeout: float = typer.Option(DEFAULT_TIMEOUT, "--timeout", help="Per-request timeout (seconds)"),
    force: bool = typer.Option(False, "-f", "--force", help="Overwrite config"),
    json_flag: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Initialize client configuration."""
    init_command(api_url, user_id, role, token, timeout, force, json_flag)


@app.command("send")
def send(
    to: str = typer.Option(..., "-t", "--to", help="Recipient user id"),
    message: str = typer.Option(..., "-m", "--message", help="Content"),
    subject: str = typer.Option("", "-s", "--subject", help="Subject"),
    verbose: bool = typer.Option(False, "--attempts", help="Show every delivery attempt"),
    json_flag: bool = typer.Option(False, "--json"),
) -> None:
    """Send a direct message."""
    send_command(to, message, subject, verbose, json_flag)


@app.command("messages")
def messages(
    peer: str = typer.Option(..., "-p", "--peer", help="Other user id"),
    limit: int = typer.Option(50, "-l", "--limit", help="Max messages to show"),
    mark_read: bool = typer.Option(False, "--mark-read", help="Mark the conversation as read"),
    json_flag: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show the conversation with a user."""
    messages_command(peer, limit, mark_read, json_flag)


@app.command("read")
def read(
    peer: str = typer.Option(..., "-p", "--peer", help="Other user id"),
    json_flag: bool = typer.Option(False, "--json"),
) -> None:
    """Mark messages from a user as read."""
    read_command(peer, json_flag)


@app.command("unread")
def unread(
    json_flag: bool = typer.Option(False, "--json"),
) -> None:
    """Show the number of unread messages."""
    unread_command(json_flag)


@app.command("queued")
def queued(
    peer: str = typer.Option(None, "-p", "--peer", help="Filter by user id"),
    clear: bool = typer.Option(False, "--clear", help="Discard the queue for --peer"),
    yes: bool = typer.Option(False, "-y", "--yes", help="Skip confirmation"),
    json_flag: bool = typer.Option(False, "--json"),
) -> None:
    """List messages queued while the backend was unreachable."""
    queued_command(peer, clear, yes, json_flag)


@app.command("flush")
def flush(
    peer: str = typer.Option(..., "-p", "--peer", help="Other user id"),
    json_flag: bool = typer.Option(False, "--json"),
) -> None:
    """Deliver queued messages to a user."""
    flush_command(peer, json_flag)


@app.command("diagnose")
def diagnose(
    peer: str = typer.Option(None, "-p", "--peer", help="Receiver for format tests"),
    apply: bool = typer.Option(False, "--apply", help="Save the working send order"),
    output: str = typer.Option(None, "-o", "--output", help="Write the JSON report to a file"),
    json_flag: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Test connectivity and discover working send formats."""
    diagnose_command(peer, apply, output, json_flag)


@app.command("status")
def status(
    json_flag: bool = typer.Option(False, "--json"),
) -> None:
    """Show client configuration and queue status."""
    status_command(json_flag)


def main() -> None:
    """Entry point."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled[/yellow]")
        raise typer.Exit(130)
