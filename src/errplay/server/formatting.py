"""
Terminal rendering of received error payloads.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.pretty import Pretty

console = Console()


def format_timestamp(timestamp: Any) -> str:
    """ISO-8601 UTC time for a millisecond epoch timestamp."""
    try:
        return datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc).isoformat()
    except (TypeError, ValueError, OverflowError, OSError):
        return str(timestamp)


def log_error_payload(body: Any, out: Optional[Console] = None) -> None:
    """
    Print one client error payload.

    Bodies that are not mappings with a ``type`` are ignored.
    """
    if not isinstance(body, dict) or not body.get("type"):
        return

    out = out or console

    out.print("\n[red]========== CLIENT ERROR ==========[/red]")
    out.print(f"[cyan]\\[TYPE][/cyan]      [yellow]{escape(str(body['type']))}[/yellow]")
    out.print(f"[cyan]\\[TIME][/cyan]      {format_timestamp(body.get('timestamp'))}")

    if body.get("message"):
        out.print(f"[cyan]\\[MESSAGE][/cyan]   {escape(str(body['message']))}", highlight=False)
    if body.get("filename"):
        out.print(f"[cyan]\\[FILE][/cyan]      {escape(str(body['filename']))}:{body.get('lineno')}:{body.get('colno')}")
    if body.get("stack"):
        out.print("[cyan]\\[STACK][/cyan]")
        out.print(body["stack"], markup=False, highlight=False)
    if isinstance(body.get("args"), list):
        out.print("[cyan]\\[ARGS][/cyan]")
        out.print(Pretty(body["args"], max_depth=5))

    out.print("[red]==================================[/red]\n")
