"""
CLI interface entry point.
"""

import logging

import click

from .commands.serve import serve_command
from .commands.pending import pending_command
from .commands.run import run_command


@click.group()
@click.version_option(version="0.1.0")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """
    errplay CLI

    Collect and replay runtime errors from development processes.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Register commands
cli.add_command(serve_command)
cli.add_command(pending_command)
cli.add_command(run_command)


def main():
    """CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
