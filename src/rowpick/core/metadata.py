"""Schema metadata loader.

Introspects the PostgreSQL ``information_schema`` catalog and builds the
in-memory table registry (``TableIdentity -> Table``) that every later stage
reads from.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping

from sqlalchemy import bindparam, text
from sqlalchemy.exc import SQLAlchemyError

from rowpick.core.errors import SchemaLoadError
from rowpick.core.types import Column, ForeignKey, Table, TableIdentity
from rowpick.utils.logging import get_logger

logger = get_logger(__name__)

TableRegistry = Dict[TableIdentity, Table]

FOREIGN_KEY_QUERY = """
SELECT
  tc.constraint_name,
  tc.table_schema,
  tc.table_name,
  kcu.column_name,
  c.data_type AS column_data_type,
  ccu.table_schema AS foreign_table_schema,
  ccu.table_name AS foreign_table_name,
  ccu.column_name AS foreign_column_name,
  foreign_c.data_type AS foreign_column_data_type
FROM
  information_schema.table_constraints AS tc
    JOIN information_schema.key_column_usage AS kcu ON
      tc.constraint_name = kcu.constraint_name AND
      tc.table_schema = kcu.table_schema
    JOIN information_schema.constraint_column_usage AS ccu ON
      ccu.constraint_name = tc.constraint_name AND
      ccu.constraint_schema = tc.constraint_schema
    JOIN information_schema.columns AS c ON
      c.table_schema = tc.table_schema AND
      c.table_name = tc.table_name AND
      c.column_name = kcu.column_name
    JOIN information_schema.columns AS foreign_c ON
      foreign_c.table_schema = ccu.table_schema AND
      foreign_c.table_name = ccu.table_name AND
      foreign_c.column_name = ccu.column_name
WHERE tc.constraint_type = 'FOREIGN KEY' AND
  (tc.table_schema IN :schemas OR ccu.table_schema IN :foreign_schemas)
ORDER BY tc.table_schema, tc.table_name, tc.constraint_name, kcu.ordinal_position
"""

PRIMARY_KEY_QUERY = """
SELECT
  tc.constraint_name,
  tc.table_schema,
  tc.table_name,
  kcu.column_name AS primary_column_name,
  c.data_type AS primary_column_data_type
FROM
  information_schema.table_constraints AS tc
    JOIN information_schema.key_column_usage AS kcu ON
      tc.constraint_name = kcu.constraint_name AND
      tc.table_schema = kcu.table_schema
    JOIN information_schema.columns AS c ON
      c.table_schema = tc.table_schema AND
      c.table_name = tc.table_name AND
      c.column_name = kcu.column_name
WHERE tc.constraint_type = 'PRIMARY KEY' AND
  tc.table_schema IN :schemas
ORDER BY tc.table_schema, tc.table_name, kcu.ordinal_position
"""


@dataclass(frozen=True)
class ForeignKeyInfoRow:
    """One row of the foreign key catalog query."""

    constraint_name: str

    # From table X
    table_schema: str
    table_name: str
    column_name: str
    column_data_type: str

    # referencing table Y
    foreign_table_schema: str
    foreign_table_name: str
    foreign_column_name: str
    foreign_column_data_type: str

    @property
    def table_id(self) -> TableIdentity:
        return TableIdentity(self.table_schema, self.table_name)

    @property
    def foreign_table_id(self) -> TableIdentity:
        return TableIdentity(self.foreign_table_schema, self.foreign_table_name)

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> ForeignKeyInfoRow:
        return cls(**{name: row[name] for name in cls.__dataclass_fields__})


@dataclass(frozen=True)
class PrimaryKeyInfoRow:
    """One row of the primary key catalog query."""

    table_schema: str
    table_name: str
    primary_column_name: str
    primary_column_data_type: str

    @property
    def table_id(self) -> TableIdentity:
        return TableIdentity(self.table_schema, self.table_name)

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> PrimaryKeyInfoRow:
        return cls(**{name: row[name] for name in cls.__dataclass_fields__})


class SchemaMetadataLoader:
    """Load the table registry for one schema.

    Example:
        >>> with connector.connect() as conn:
        ...     registry = SchemaMetadataLoader(conn).load_table_structure("public")
    """

    def __init__(self, connection):
        """Initialize loader.

        Args:
            connection: SQLAlchemy connection (or anything with ``execute``)
        """
        self.connection = connection

    def load_table_structure(self, schema: str) -> TableRegistry:
        """Load tables with their primary key and FK relations.

        Args:
            schema: Schema to load

        Returns:
            Dict mapping TableIdentity -> Table

        Raises:
            SchemaLoadError: If a catalog query fails
        """
        logger.info(f"Loading table structure for schema {schema}")

        # Tables in other schemas reached by FKs need their own FKs too, so
        # widen the schema set until no FK leads outside it
        schemas = {schema}
        while True:
            fk_rows = self.fetch_foreign_key_info(sorted(schemas))
            reached = schemas | {
                reached_schema
                for row in fk_rows
                for reached_schema in (row.table_schema, row.foreign_table_schema)
            }
            if reached == schemas:
                break
            logger.debug(f"FKs reach schemas {sorted(reached - schemas)}, reloading")
            schemas = reached

        pk_rows = self.fetch_primary_key_info(sorted(schemas))

        registry = build_table_registry(pk_rows, fk_rows)

        logger.info(
            f"Loaded {len(registry)} tables and {len(fk_rows)} foreign key columns "
            f"(schemas: {', '.join(sorted(schemas))})"
        )

        return registry

    def fetch_foreign_key_info(self, schemas: List[str]) -> List[ForeignKeyInfoRow]:
        statement = text(FOREIGN_KEY_QUERY).bindparams(
            bindparam("schemas", expanding=True),
            bindparam("foreign_schemas", expanding=True),
        )
        rows = self._query(
            statement,
            {"schemas": schemas, "foreign_schemas": schemas},
            "foreign key catalog",
        )
        return [ForeignKeyInfoRow.from_mapping(row) for row in rows]

    def fetch_primary_key_info(self, schemas: List[str]) -> List[PrimaryKeyInfoRow]:
        statement = text(PRIMARY_KEY_QUERY).bindparams(
            bindparam("schemas", expanding=True)
        )
        rows = self._query(statement, {"schemas": schemas}, "primary key catalog")
        return [PrimaryKeyInfoRow.from_mapping(row) for row in rows]

    def _query(self, statement, params: Dict[str, Any], label: str) -> List[Mapping]:
        try:
            result = self.connection.execute(statement, params)
            rows = [row._mapping for row in result]
        except SQLAlchemyError as e:
            raise SchemaLoadError(
                f"Failed to query {label}: {e}",
                details={"query": label, "params": {k: str(v) for k, v in params.items()}},
            ) from e

        logger.debug(f"Fetched {len(rows)} rows from {label}")
        return rows


def build_table_registry(
    pk_rows: Iterable[PrimaryKeyInfoRow],
    fk_rows: Iterable[ForeignKeyInfoRow],
) -> TableRegistry:
    """Cross-index FK catalog rows onto primary-key table skeletons.

    FK rows are grouped by their owning table to fill ``referencing`` and by
    their foreign table to fill ``referenced``. Tables without any FK are
    still present with both maps empty. Only the first column of composite
    keys is kept.

    Args:
        pk_rows: Primary key catalog rows
        fk_rows: Foreign key catalog rows

    Returns:
        Dict mapping TableIdentity -> Table
    """
    primary_column_by_id: Dict[TableIdentity, Column] = {}

    for row in pk_rows:
        if row.table_id in primary_column_by_id:
            logger.warning(
                f"Table {row.table_id} has a composite primary key, "
                f"only {primary_column_by_id[row.table_id].name} is used"
            )
            continue
        primary_column_by_id[row.table_id] = Column(
            row.primary_column_name, row.primary_column_data_type
        )

    referencing_by_id: Dict[TableIdentity, Dict[str, ForeignKey]] = defaultdict(dict)
    referenced_by_id: Dict[TableIdentity, Dict[str, ForeignKey]] = defaultdict(dict)

    for row in fk_rows:
        referencing = referencing_by_id[row.table_id]
        if row.constraint_name in referencing:
            logger.warning(
                f"Foreign key {row.constraint_name} on {row.table_id} spans multiple "
                f"columns, only {referencing[row.constraint_name].column.name} is used"
            )
            continue

        referencing[row.constraint_name] = ForeignKey(
            constraint_name=row.constraint_name,
            column=Column(row.column_name, row.column_data_type),
            foreign_table=row.foreign_table_id,
        )
        referenced_by_id[row.foreign_table_id][row.constraint_name] = ForeignKey(
            constraint_name=row.constraint_name,
            column=Column(row.column_name, row.column_data_type),
            foreign_table=row.table_id,
        )

    return {
        table_id: Table(
            identity=table_id,
            primary_column=primary_column,
            referencing=dict(referencing_by_id.get(table_id, {})),
            referenced=dict(referenced_by_id.get(table_id, {})),
        )
        for table_id, primary_column in primary_column_by_id.items()
    }
