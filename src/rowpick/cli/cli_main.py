"""CLI entry point for rowpick."""

from __future__ import annotations

import click

from rowpick import __version__
from rowpick.cli.commands import db_group
from rowpick.utils.config import load_config
from rowpick.utils.logging import setup_logging


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to config.yml file",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    help="Logging level",
)
@click.pass_context
def cli(ctx, config, log_level):
    """rowpick - Cherry-pick related rows out of a PostgreSQL database.

    \b
    Examples:
        # Insert statements for order 42 and everything it depends on
        rowpick --config config.yml db cherry-pick --source-db staging \\
            --table orders --value 42 > order_42.sql
    """
    ctx.ensure_object(dict)

    setup_logging(level=log_level)

    if config:
        ctx.obj["config"] = load_config(config)


cli.add_command(db_group.db_group)


def main():
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
