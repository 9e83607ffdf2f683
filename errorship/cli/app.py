"""Main Typer application: imports and registers all CLI commands.

Entry point: ``errorship`` (configured via pyproject.toml project.scripts).
"""

from __future__ import annotations

import typer

from errorship.cli.commands.config_cmd import config_cmd
from errorship.cli.commands.ping import ping_cmd

app = typer.Typer(
    name="errorship",
    help="errorship: ship Python log records to an error-tracking service.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

app.command(name="ping", help="Send a test report and print the outcome.")(ping_cmd)
app.command(name="config", help="Show the resolved shipper settings.")(config_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
