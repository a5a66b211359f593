"""
Run command for CLI.
"""

from pathlib import Path
from typing import Tuple

import click
from rich.console import Console

from ...reloader import DevReloader

console = Console()


@click.command("run", context_settings={"ignore_unknown_options": True})
@click.argument("script", type=click.Path(exists=True, dir_okay=False))
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.option("--watch", "-w", multiple=True, type=click.Path(exists=True, file_okay=False), help="Directory to watch (repeatable)")
@click.option("--session-id", "-s", default=None, help="Session id shared by every restart")
def run_command(script: str, args: Tuple[str, ...], watch: Tuple[str, ...], session_id: str):
    """
    Run SCRIPT in development mode, restarting it when source files change.
    """
    reloader = DevReloader(
        script,
        args=args,
        watch_dirs=[Path(w) for w in watch],
        session_id=session_id,
    )
    console.print(f"[green]Running {script}[/green] (session [cyan]{reloader.session_id}[/cyan])")
    console.print("Press Ctrl+C to stop.")
    reloader.run()
