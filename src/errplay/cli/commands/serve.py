"""
Serve command for CLI.
"""

import click
import uvicorn
from rich.console import Console

from ...config import config
from ...server.api import create_app

console = Console()


@click.command("serve")
@click.option("--host", "-h", default=None, help="Bind address")
@click.option("--port", "-p", type=int, default=None, help="Bind port")
@click.option("--endpoint", "-e", default=None, help="Path errors are POSTed to")
def serve_command(host: str, port: int, endpoint: str):
    """
    Run the development error collector.
    """
    host = host or config.server_host
    port = port or config.server_port
    endpoint = endpoint or config.endpoint

    # The collector only answers in development mode.
    app = create_app(endpoint=endpoint, environment="development")

    console.print("[bold]Starting errplay collector...[/bold]")
    console.print(f"  Endpoint: http://{host}:{port}{endpoint}")
    console.print()

    uvicorn.run(app, host=host, port=port, log_level="warning")
