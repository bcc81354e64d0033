"""CLI command handlers containing business logic."""

from rowpick.cli.handlers.cherry_pick_handler import (
    CherryPickHandler,
    CherryPickRequest,
    OutputFormat,
)

__all__ = [
    "CherryPickHandler",
    "CherryPickRequest",
    "OutputFormat",
]
