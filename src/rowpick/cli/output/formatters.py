"""Output formatting utilities for CLI."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click


class OutputFormatter:
    """Format output for CLI display.

    Status messages go to stderr so that stdout carries only the generated
    SQL or DOT text.

    Example:
        >>> out = OutputFormatter()
        >>> out.success("Operation completed")
    """

    @staticmethod
    def success(message: str) -> None:
        """Display success message with checkmark.

        Args:
            message: Success message to display
        """
        click.echo(f"✓ {message}", err=True)

    @staticmethod
    def result(text: str, output: Optional[str] = None) -> None:
        """Write command output to a file or stdout.

        Args:
            text: Rendered output
            output: Optional file path; stdout when omitted
        """
        if output:
            path = Path(output)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text)
            return
        click.echo(text, nl=not text.endswith("\n"))
