"""Database commands."""

from __future__ import annotations

import click

from rowpick.cli.decorators import handle_errors, with_output_file, with_seed_locator
from rowpick.cli.handlers import CherryPickHandler, CherryPickRequest, OutputFormat
from rowpick.cli.output import OutputFormatter
from rowpick.utils.config import get_config
from rowpick.utils.logging import get_logger

logger = get_logger(__name__)

out = OutputFormatter()


@click.group(name="db")
def db_group():
    """Source database operations."""
    pass


@db_group.command(name="cherry-pick")
@click.option(
    "--source-db",
    required=True,
    type=str,
    help="Connection name under db.connection_by_name",
)
@with_seed_locator
@click.option(
    "--output-format",
    type=click.Choice([f.value for f in OutputFormat], case_sensitive=False),
    help="Output format (default: cherry_pick.output_format)",
)
@click.option(
    "--graph-table-columns",
    type=str,
    help="Columns shown per graphviz node, e.g. 'orders:code|status,public.stores:name'",
)
@with_output_file
@handle_errors
@click.pass_context
def cherry_pick_cmd(
    ctx,
    source_db,
    schema,
    table,
    column,
    value,
    output_format,
    graph_table_columns,
    output,
):
    """Extract a row and every row connected to it through foreign keys.

    Emits INSERT statements ordered so that referenced rows come first, or
    a Graphviz digraph of the collected rows.

    \b
    Examples:
        # Order 42 with its customer, store, items and their products
        rowpick db cherry-pick --source-db staging --table orders --value 42

        # Look up by another unique column and write to a file
        rowpick db cherry-pick --source-db staging --table customers \\
            --column email --value jane@example.com -o customer.sql

        # Render the relation graph
        rowpick db cherry-pick --source-db staging --table orders --value 42 \\
            --output-format graphviz --graph-table-columns 'orders:code' | dot -Tsvg
    """
    config = ctx.obj.get("config") if ctx.obj else None
    if config is None:
        config = get_config()

    request = CherryPickRequest(
        schema=schema or config.default_schema,
        table=table,
        column=column or config.default_column,
        value=value,
        output_format=OutputFormat.from_str(output_format or config.output_format),
        graph_table_columns=graph_table_columns,
    )

    logger.info(
        f"Cherry-picking {request.table_id} where {request.column} = {request.value!r} "
        f"from {source_db}"
    )

    handler = CherryPickHandler(config)
    result = handler.run(source_db, request)

    out.result(result, output)

    if output:
        out.success(f"Output written to {output}")
