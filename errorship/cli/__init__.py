"""errorship CLI: Typer-based command-line interface.

Provides the ``errorship`` command with subcommands for sending a test
report and inspecting the resolved configuration.

All output uses Rich for formatted terminal display.
"""
