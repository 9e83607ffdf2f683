"""``errorship config``: show the resolved settings.

The write key is masked; only its last four characters are printed.
"""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from errorship.config import ENV_VAR_API_KEY, ShipperSettings, resolve_api_key

console = Console()


def config_cmd() -> None:
    """Print the settings a handler built from the environment would use."""
    settings = ShipperSettings()
    effective = settings.model_copy(
        update={"api_key": resolve_api_key(settings.api_key or None) or ""}
    )

    table = Table(title="errorship settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    missing = "[yellow]<unset>[/yellow]"
    table.add_row("url", effective.url)
    table.add_row("api_key", effective.masked_api_key or missing)
    table.add_row("environment", effective.environment or missing)
    table.add_row("context", effective.context or "[dim]-[/dim]")
    table.add_row("async_mode", str(effective.async_mode))
    table.add_row("timeout_seconds", str(effective.timeout_seconds))
    table.add_row("max_workers", str(effective.max_workers))
    table.add_row("max_pending", str(effective.max_pending))
    table.add_row("log_level", effective.log_level)

    console.print(table)
    console.print(f"[dim]Write key is read from {ENV_VAR_API_KEY} when set.[/dim]")
