"""Pytest fixtures and configuration."""

import sqlite3
from typing import Any, Dict, List

import pytest

from DB2ERD.config import AnalyzerSettings
from DB2ERD.ir.models import ERDDataModel


def _make_row(table: str, column: str, ordinal: int = 1, **fields: Any) -> Dict[str, Any]:
    """Build a catalog row dict the way a row source would deliver it."""
    row = {
        "table_catalog": "shop",
        "owner": "public",
        "table_name": table,
        "column_name": column,
        "ordinal_position": ordinal,
        "data_type": "integer",
        "is_nullable": 1,
        "is_primary_key": 0,
        "is_unique": 0,
        "is_foreign_key": 0,
        "foreign_key_name": None,
        "referenced_table_name": None,
        "referenced_column_name": None,
    }
    row.update(fields)
    return row


def _make_fk(table: str, column: str, ordinal: int, name: str, ref_table: str, ref_column: str, **fields: Any) -> Dict[str, Any]:
    """Catalog row of a foreign key column."""
    return _make_row(
        table, column, ordinal,
        is_foreign_key=1,
        foreign_key_name=name,
        referenced_table_name=ref_table,
        referenced_column_name=ref_column,
        **fields,
    )


@pytest.fixture
def make_row():
    """Factory for plain catalog rows."""
    return _make_row


@pytest.fixture
def make_fk():
    """Factory for foreign key catalog rows."""
    return _make_fk


@pytest.fixture
def model():
    """Fresh, empty data model."""
    return ERDDataModel(name="Test Model")


@pytest.fixture
def settings():
    """Analyzer settings with a short progress interval."""
    return AnalyzerSettings(progress_interval_seconds=0.05, enforce_contiguous_tables=True)


@pytest.fixture
def scenario_rows() -> List[Dict[str, Any]]:
    """customers <- orders, the smallest resolvable catalog."""
    return [
        _make_row("customers", "id", 1, is_primary_key=1, is_unique=1, is_nullable=0),
        _make_row("orders", "id", 1, is_primary_key=1, is_unique=1, is_nullable=0),
        _make_fk("orders", "customer_id", 2, "fk_orders_customer", "customers", "id", is_nullable=0),
    ]


@pytest.fixture
def forward_rows() -> List[Dict[str, Any]]:
    """Catalog where every foreign key points at a table delivered later."""
    return [
        _make_row("invoice_lines", "id", 1, is_primary_key=1),
        _make_fk("invoice_lines", "invoice_id", 2, "fk_lines_invoice", "invoices", "id"),
        _make_fk("invoice_lines", "product_region", 3, "fk_lines_product", "products", "region"),
        _make_fk("invoice_lines", "product_code", 4, "fk_lines_product", "products", "code"),
        _make_row("invoices", "id", 1, is_primary_key=1),
        _make_row("products", "region", 1, data_type="char", max_length=2, is_primary_key=1),
        _make_row("products", "code", 2, data_type="varchar", max_length=20, is_primary_key=1),
    ]


@pytest.fixture
def sqlite_db(tmp_path):
    """SQLite database with forward, backward and composite foreign keys."""
    db_path = tmp_path / "shop.db"
    conn = sqlite3.connect(db_path)
    conn.executescript(
        """
        CREATE TABLE customers (
            id INTEGER PRIMARY KEY,
            email TEXT NOT NULL UNIQUE
        );
        CREATE TABLE deliveries (
            id INTEGER PRIMARY KEY,
            order_id INTEGER NOT NULL,
            line_no INTEGER NOT NULL,
            FOREIGN KEY (order_id, line_no) REFERENCES order_items (order_id, line_no)
        );
        CREATE TABLE order_items (
            order_id INTEGER NOT NULL REFERENCES orders (id),
            line_no INTEGER NOT NULL,
            product_sku TEXT REFERENCES products,
            quantity INTEGER DEFAULT 1,
            PRIMARY KEY (order_id, line_no)
        );
        CREATE TABLE orders (
            id INTEGER PRIMARY KEY,
            customer_id INTEGER NOT NULL REFERENCES customers (id),
            placed_at TEXT
        );
        CREATE TABLE products (
            sku TEXT PRIMARY KEY,
            name VARCHAR(80)
        );
        """
    )
    conn.commit()
    conn.close()
    return str(db_path)
