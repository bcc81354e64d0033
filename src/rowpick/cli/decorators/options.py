"""Common CLI option decorators."""

from __future__ import annotations

import click


def with_output_file(f):
    """Add --output option to command.

    Example:
        @click.command()
        @with_output_file
        def my_command(output):
            pass
    """
    return click.option(
        "--output",
        "-o",
        type=click.Path(dir_okay=False),
        help="Output file path (default: stdout)",
    )(f)


def with_seed_locator(f):
    """Add --schema/--table/--column/--value options to command.

    Schema and column default to ``db.default_schema`` / ``db.default_column``
    from config when omitted.

    Example:
        @click.command()
        @with_seed_locator
        def my_command(schema, table, column, value):
            pass
    """
    f = click.option(
        "--value",
        required=True,
        type=str,
        help="Value of the lookup column identifying the seed row",
    )(f)
    f = click.option(
        "--column",
        type=str,
        help="Lookup column (default: db.default_column)",
    )(f)
    f = click.option(
        "--table",
        required=True,
        type=str,
        help="Seed table name",
    )(f)
    f = click.option(
        "--schema",
        type=str,
        help="Schema to load (default: db.default_schema)",
    )(f)
    return f
