"""CLI decorators for common options and error handling."""

from rowpick.cli.decorators.error_handling import handle_errors
from rowpick.cli.decorators.options import with_output_file, with_seed_locator

__all__ = [
    "handle_errors",
    "with_output_file",
    "with_seed_locator",
]
