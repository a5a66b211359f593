"""
Pending command for CLI.
"""

import sys

import click
from rich.console import Console
from rich.table import Table

from ...capture.queue import DurableQueue
from ...config import config
from ...server.formatting import format_timestamp
from ...storage import create_session_store

console = Console()


@click.command("pending")
@click.option("--session-id", "-s", default=None, help="Session to inspect (defaults to ERRPLAY_SESSION_ID)")
def pending_command(session_id: str):
    """
    List errors queued for a session but not yet flushed.
    """
    try:
        queue = DurableQueue(create_session_store(config, session_id=session_id))
        payloads = queue.peek()
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    if not payloads:
        console.print("[yellow]No pending errors[/yellow]")
        return

    table = Table(title=f"Pending errors ({session_id or config.session_id})", show_header=True, header_style="bold magenta")
    table.add_column("Time", style="cyan")
    table.add_column("Type", style="yellow")
    table.add_column("Message", style="white")
    table.add_column("Location", style="green")

    for payload in payloads:
        location = ""
        if payload.get("filename"):
            location = f"{payload['filename']}:{payload.get('lineno')}:{payload.get('colno')}"
        message = payload.get("message")
        if message is None and payload.get("args") is not None:
            message = " ".join(str(arg) for arg in payload["args"])
        table.add_row(
            format_timestamp(payload.get("timestamp")),
            str(payload.get("type", "")),
            message or "",
            location,
        )

    console.print(table)
