"""``errorship ping``: send one test report synchronously.

Builds a report from the resolved settings plus command-line overrides,
delivers it inline, and prints the outcome.  ``--dry-run`` prints the
payload instead of sending it.
"""

from __future__ import annotations

import typer
from rich.console import Console
from rich.panel import Panel

from errorship.config import ShipperSettings, resolve_api_key
from errorship.core.builder import PayloadBuilder
from errorship.core.diagnostics import StatusLog
from errorship.core.dispatcher import DeliveryDispatcher
from errorship.core.transport import RequestsHttpRequester
from errorship.errors import ConfigurationError

console = Console()


def ping_cmd(
    message: str = typer.Option(
        "errorship test report", "--message", "-m", help="Report message."
    ),
    level: str = typer.Option("info", "--level", "-l", help="Report severity."),
    environment: str = typer.Option(
        None, "--environment", "-e", help="Environment tag (overrides settings)."
    ),
    url: str = typer.Option(None, "--url", help="Ingestion endpoint (overrides settings)."),
    context: list[str] = typer.Option(
        [], "--context", "-c", help="Context entry as key=value; repeatable."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Print the payload without sending it."
    ),
) -> None:
    """Send a test report to the configured error tracker."""
    settings = ShipperSettings()
    api_key = resolve_api_key(settings.api_key or None)

    custom: dict[str, str] = {}
    for entry in context:
        key, sep, value = entry.partition("=")
        if not sep:
            console.print(f"[red]Invalid context entry (expected key=value):[/red] {entry}")
            raise typer.Exit(code=2)
        custom[key] = value

    try:
        builder = PayloadBuilder(
            api_key or "",
            environment or settings.environment,
            settings.context,
        )
    except ConfigurationError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        raise typer.Exit(code=2) from exc

    document = builder.build(level, message, context=custom)

    if dry_run:
        console.print_json(data=document.to_wire(), sort_keys=True)
        return

    target = url or settings.url
    status_log = StatusLog()
    dispatcher = DeliveryDispatcher(
        RequestsHttpRequester(timeout=settings.timeout_seconds),
        target,
        diagnostics=status_log,
    )
    outcome = dispatcher.deliver(dispatcher.wrap(document))

    if outcome.succeeded:
        console.print(
            Panel(
                "\n".join([
                    "[bold green]Report delivered.[/bold green]",
                    "",
                    f"[bold]Endpoint:[/bold]    {target}",
                    f"[bold]Status:[/bold]      {outcome.status_code}",
                    f"[bold]Environment:[/bold] {builder.environment}",
                    f"[bold]Level:[/bold]       {document.level}",
                ]),
                title="[bold]errorship ping[/bold]",
                border_style="green",
                padding=(1, 2),
            )
        )
        return

    detail = outcome.error or f"HTTP {outcome.status_code}"
    console.print(f"[red]Delivery failed:[/red] {detail}")
    raise typer.Exit(code=1)
