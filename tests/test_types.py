"""Tests for table identities, tables and rows."""

from rowpick.core.types import (
    CellKind,
    CellValue,
    Column,
    ForeignKey,
    Row,
    Table,
    TableIdentity,
    quote_identifier,
)


def make_table(name="orders"):
    return Table(
        identity=TableIdentity("public", name),
        primary_column=Column("id", "integer"),
        referencing={
            "orders_customer_id_fkey": ForeignKey(
                "orders_customer_id_fkey",
                Column("customer_id", "integer"),
                TableIdentity("public", "customers"),
            )
        },
    )


def test_table_identity_parse():
    """Bare names get the default schema."""
    assert TableIdentity.parse("orders") == TableIdentity("public", "orders")
    assert TableIdentity.parse("sales.orders") == TableIdentity("sales", "orders")
    assert TableIdentity.parse(" orders ", "sales") == TableIdentity("sales", "orders")


def test_table_identity_rendering():
    table_id = TableIdentity("public", 'we"ird')
    assert str(table_id) == 'public.we"ird'
    assert table_id.quoted() == '"public"."we""ird"'


def test_table_identity_is_case_sensitive():
    assert TableIdentity("public", "Orders") != TableIdentity("public", "orders")


def test_quote_identifier():
    assert quote_identifier("id") == '"id"'
    assert quote_identifier('a"b') == '"a""b"'


def test_table_get_column():
    """Only the primary key and FK columns are known from the registry."""
    table = make_table()
    assert table.get_column("id") == Column("id", "integer")
    assert table.get_column("customer_id") == Column("customer_id", "integer")
    assert table.get_column("code") is None


def test_row_equality_uses_table_and_id():
    table = make_table()
    first = Row(table, "1", {"id": CellValue(CellKind.INTEGER, 1)})
    same = Row(
        table,
        "1",
        {"id": CellValue(CellKind.INTEGER, 1), "code": CellValue(CellKind.TEXT, "x")},
    )
    other_table = Row(make_table("items"), "1", {"id": CellValue(CellKind.INTEGER, 1)})

    assert first == same
    assert hash(first) == hash(same)
    assert first != other_table
    assert len({first, same, other_table}) == 2


def test_cell_display():
    assert CellValue(CellKind.NULL).display() == "NULL"
    assert CellValue(CellKind.BOOLEAN, False).display() == "false"
    assert CellValue(CellKind.INTEGER, 42).display() == "42"
