"""Probe the backend and discover which send formats it accepts."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from dmrelay.cli.output import format_error, format_success, format_table, format_warning, json_output
from dmrelay.cli.output.json_output import to_json
from dmrelay.cli.utils import ConfigManager, validate_user_id
from dmrelay.cli.utils.config import ConfigError
from dmrelay.cli.utils.runtime import build_dispatcher
from dmrelay.client import Operation
from dmrelay.diagnostics import DiagnosticReport, run_diagnostics

console = Console()


async def _diagnose(receiver: Optional[str], apply: bool) -> tuple[DiagnosticReport, list[str], bool]:
    """Run the probes, leave local mode if the backend answers, and with
    ``apply`` persist the resulting send order."""
    manager = ConfigManager()
    config = manager.load()
    async with build_dispatcher(config) as dispatcher:
        report = await run_diagnostics(dispatcher.transport, dispatcher.catalog, receiver, dispatcher.history)
        await dispatcher.leave_local_mode(report)
        order: list[str] = []
        if apply:
            preferred = report.preferred_order(Operation.SEND)
            if preferred:
                order = dispatcher.catalog.promote(Operation.SEND, preferred)
                manager.save_send_order(order)
        return report, order, dispatcher.session.local_mode


def diagnose_command(peer: Optional[str], apply: bool, output: Optional[str], json_flag: bool) -> None:
    """Run connectivity and format tests against the configured backend."""
    try:
        receiver = validate_user_id(peer) if peer else None
    except ValueError as e:
        format_error(console, str(e))
        raise typer.Exit(code=2)

    try:
        report, order, local_mode = asyncio.run(_diagnose(receiver, apply))
    except ConfigError as e:
        format_error(console, str(e), hint="Run 'dmrelay init' first")
        raise typer.Exit(code=1)
    except Exception as e:
        format_error(console, f"Diagnostics failed: {e}")
        raise typer.Exit(code=3)

    data = report.to_dict()
    if output:
        try:
            Path(output).write_text(to_json(data))
        except OSError as e:
            format_error(console, f"Cannot write report to {output}: {e}")
            raise typer.Exit(code=3)

    if json_flag:
        json_output(console, {**data, "appliedSendOrder": order, "localMode": local_mode})
    else:
        _print_report(report, order, output, local_mode)

    if not report.backend_reachable:
        raise typer.Exit(code=3)


def _print_report(report: DiagnosticReport, order: list[str], output: Optional[str], local_mode: bool) -> None:
    rows = [
        (t.name, t.url, str(t.status_code or "-"),
         "[green]ok[/green]" if t.success else f"[red]{t.error or 'failed'}[/red]",
         f"{t.elapsed_ms:.0f}ms")
        for t in report.connectivity.tests
    ]
    format_table(console, "Connectivity", ["Test", "URL", "Status", "Result", "Time"], rows)

    if report.endpoints is not None:
        if not report.endpoints.token_present:
            format_warning(console, "No auth token configured")
        rows = [
            (c.name, c.method, c.url, str(c.status_code or "-"),
             f"[green]{c.detail or 'ok'}[/green]" if c.success else f"[red]{c.error or 'failed'}[/red]")
            for c in report.endpoints.checks
        ]
        format_table(console, "Message service", ["Check", "Method", "URL", "Status", "Result"], rows)

    if report.formats is not None:
        if report.formats.error:
            format_warning(console, report.formats.error)
        else:
            rows = [
                (t.candidate, t.endpoint, t.format_description, str(t.attempt.http_status or "-"),
                 "[green]ok[/green]" if t.ok else f"[red]{t.attempt.outcome.value}[/red]")
                for t in report.format_tests
            ]
            format_table(console, "Send formats", ["Candidate", "Endpoint", "Format", "Status", "Result"], rows)

    summary = report.summary
    console.print(
        f"[cyan]Tests passed:[/cyan] {summary['successful_tests']}/{summary['tests_run']}   "
        f"[cyan]Formats working:[/cyan] {len(summary['working_formats'])}/{summary['formats_tested']}"
    )
    if report.backend_reachable:
        format_success(console, "Backend reachable")
    else:
        format_error(console, "Backend unreachable", hint="Check the API URL and your network connection")
    if local_mode:
        format_warning(console, "Still in local mode; queued messages stay local")
    if order:
        console.print(f"[cyan]Send order saved:[/cyan] {', '.join(order)}")
    if output:
        console.print(f"[cyan]Report written to:[/cyan] {output}")
