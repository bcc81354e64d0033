"""CLI command modules."""

from . import db_group

__all__ = ["db_group"]
