"""Shared fixtures: an in-memory stand-in for the catalog and row queries."""

from __future__ import annotations

import re
import sys
from collections import defaultdict
from pathlib import Path

import pytest
from sqlalchemy.exc import OperationalError, ProgrammingError

# Ensure tests always import the local src tree, not an older installed wheel.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from rowpick.utils.config import set_config  # noqa: E402

_ROW_QUERY = re.compile(
    r'FROM "((?:[^"]|"")+)"\."((?:[^"]|"")+)" WHERE "((?:[^"]|"")+)" = '
)


class FakeRow:
    """Result row exposing ``_mapping`` like an SQLAlchemy Row."""

    def __init__(self, mapping):
        self._mapping = mapping


class FakeDatabase:
    """Tables, keys and rows answering the queries rowpick issues."""

    def __init__(self):
        self.columns = {}  # (schema, table) -> {column: data_type}
        self.primary_keys = []
        self.foreign_keys = []
        self.data = defaultdict(list)

    def add_table(self, name, columns, rows=(), primary="id", schema="public"):
        self.columns[(schema, name)] = dict(columns)
        if primary is not None:
            self.primary_keys.append(
                {
                    "constraint_name": f"{name}_pkey",
                    "table_schema": schema,
                    "table_name": name,
                    "primary_column_name": primary,
                    "primary_column_data_type": columns[primary],
                }
            )
        for row in rows:
            self.insert(name, row, schema=schema)
        return self

    def insert(self, name, row, schema="public"):
        column_names = self.columns[(schema, name)]
        self.data[(schema, name)].append({c: row.get(c) for c in column_names})

    def add_foreign_key(
        self,
        constraint_name,
        table,
        column,
        foreign_table,
        foreign_column="id",
        schema="public",
        foreign_schema=None,
    ):
        foreign_schema = foreign_schema or schema
        self.foreign_keys.append(
            {
                "constraint_name": constraint_name,
                "table_schema": schema,
                "table_name": table,
                "column_name": column,
                "column_data_type": self.columns[(schema, table)][column],
                "foreign_table_schema": foreign_schema,
                "foreign_table_name": foreign_table,
                "foreign_column_name": foreign_column,
                "foreign_column_data_type": self.columns[(foreign_schema, foreign_table)][
                    foreign_column
                ],
            }
        )
        return self


class FakeConnection:
    """Connection stub dispatching on the statement text."""

    def __init__(self, database, fail_on=None):
        self.database = database
        self.fail_on = fail_on
        self.executed = []

    def execute(self, statement, params=None):
        sql = str(statement)
        params = params or {}
        self.executed.append((sql, params))

        if self.fail_on and self.fail_on in sql:
            raise OperationalError(sql, params, Exception("connection reset"))

        db = self.database

        if "'FOREIGN KEY'" in sql:
            schemas = set(params["schemas"]) | set(params["foreign_schemas"])
            return [
                FakeRow(row)
                for row in db.foreign_keys
                if row["table_schema"] in schemas or row["foreign_table_schema"] in schemas
            ]

        if "'PRIMARY KEY'" in sql:
            schemas = set(params["schemas"])
            return [
                FakeRow(row)
                for row in db.primary_keys
                if row["table_schema"] in schemas
            ]

        if "information_schema.columns" in sql:
            columns = db.columns.get((params["schema"], params["table"]), {})
            return [
                FakeRow({"column_name": name, "data_type": data_type})
                for name, data_type in columns.items()
            ]

        match = _ROW_QUERY.search(sql)
        if match is None:
            raise ProgrammingError(sql, params, Exception("unexpected statement"))

        schema, table, column = (part.replace('""', '"') for part in match.groups())
        if column not in db.columns.get((schema, table), {}):
            raise ProgrammingError(sql, params, Exception(f"column {column} does not exist"))

        value = params["value"]
        return [
            FakeRow(dict(row))
            for row in db.data[(schema, table)]
            if row[column] is not None and str(row[column]) == str(value)
        ]


def build_shop_database():
    """customers/stores <- orders <- order_items -> products -> stores."""
    db = FakeDatabase()
    db.add_table(
        "customers",
        {"id": "integer", "name": "text"},
        rows=[{"id": 1, "name": "Jane"}, {"id": 2, "name": "O'Brien"}],
    )
    db.add_table(
        "stores",
        {"id": "integer", "name": "text"},
        rows=[{"id": 1, "name": "Downtown"}],
    )
    db.add_table(
        "products",
        {"id": "integer", "store_id": "integer", "title": "text", "price": "numeric"},
        rows=[
            {"id": 100, "store_id": 1, "title": "Kettle", "price": 19.5},
            {"id": 101, "store_id": 1, "title": "Mug", "price": 4.25},
        ],
    )
    db.add_table(
        "orders",
        {
            "id": "integer",
            "code": "text",
            "customer_id": "integer",
            "store_id": "integer",
            "paid": "boolean",
        },
        rows=[
            {"id": 1, "code": "A-1", "customer_id": 1, "store_id": 1, "paid": True},
            {"id": 2, "code": "A-2", "customer_id": 2, "store_id": 1, "paid": False},
            {"id": 3, "code": "A-2", "customer_id": None, "store_id": 1, "paid": False},
        ],
    )
    db.add_table(
        "order_items",
        {"id": "integer", "order_id": "integer", "product_id": "integer", "quantity": "integer"},
        rows=[
            {"id": 10, "order_id": 1, "product_id": 100, "quantity": 2},
            {"id": 11, "order_id": 1, "product_id": 100, "quantity": 1},
            {"id": 12, "order_id": 2, "product_id": 101, "quantity": 5},
        ],
    )
    db.add_foreign_key("orders_customer_id_fkey", "orders", "customer_id", "customers")
    db.add_foreign_key("orders_store_id_fkey", "orders", "store_id", "stores")
    db.add_foreign_key("products_store_id_fkey", "products", "store_id", "stores")
    db.add_foreign_key("order_items_order_id_fkey", "order_items", "order_id", "orders")
    db.add_foreign_key(
        "order_items_product_id_fkey", "order_items", "product_id", "products"
    )
    return db


@pytest.fixture
def shop_db():
    return build_shop_database()


@pytest.fixture
def shop_conn(shop_db):
    return FakeConnection(shop_db)


@pytest.fixture(autouse=True)
def reset_global_config():
    """Keep the global config from leaking between tests."""
    set_config(None)
    yield
    set_config(None)
