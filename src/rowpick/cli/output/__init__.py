"""CLI output helpers."""

from rowpick.cli.output.formatters import OutputFormatter

__all__ = ["OutputFormatter"]
