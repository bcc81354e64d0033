"""Command-line interface for rowpick."""

from rowpick.cli.cli_main import cli, main

__all__ = ["cli", "main"]
