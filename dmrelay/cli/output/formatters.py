"""Rich terminal output formatters."""

from typing import Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from dmrelay.client import DeliveryAttempt, Message, MessageStatus

_STATUS_STYLE = {
    MessageStatus.SENT: "green",
    MessageStatus.PENDING: "cyan",
    MessageStatus.QUEUED_OFFLINE: "yellow",
    MessageStatus.FAILED: "red",
}


def format_success(console: Console, message: str) -> None:
    """Display success message in green."""
    console.print(f"[green]{message}[/green]")


def format_error(console: Console, message: str, hint: str | None = None) -> None:
    """Display error message in red with optional hint."""
    console.print(f"[red]Error:[/red] {message}")
    if hint:
        console.print(f"[yellow]Hint:[/yellow] {hint}")


def format_warning(console: Console, message: str) -> None:
    """Display warning message in yellow."""
    console.print(f"[yellow]Warning:[/yellow] {message}")


def format_table(
    console: Console,
    title: str,
    columns: Sequence[str],
    rows: Sequence[Sequence[str]],
) -> None:
    """Display data as a formatted table."""
    table = Table(title=title)
    for col in columns:
        table.add_column(col)
    for row in rows:
        table.add_row(*row)
    console.print(table)


def format_messages(console: Console, title: str, messages: Sequence[Message], me: str) -> None:
    """Display a conversation, oldest first."""
    rows = []
    for m in messages:
        style = _STATUS_STYLE.get(m.status, "white")
        rows.append((
            m.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            "me" if m.sender == me else escape(m.sender),
            escape(_truncate(m.content, 60)),
            f"[{style}]{m.status.value}[/{style}]",
        ))
    format_table(console, title, ["Time", "From", "Content", "Status"], rows)


def format_attempts(console: Console, attempts: Sequence[DeliveryAttempt]) -> None:
    """Display one row per delivery attempt."""
    rows = [
        (a.candidate, a.method, str(a.http_status or "-"),
         ("[green]" if a.succeeded else "[red]") + a.outcome.value + ("[/green]" if a.succeeded else "[/red]"),
         f"{a.duration_ms:.0f}ms")
        for a in attempts
    ]
    format_table(console, "Attempts", ["Candidate", "Method", "Status", "Outcome", "Time"], rows)


def _truncate(text: str, length: int) -> str:
    return text[:length] + "..." if len(text) > length else text
