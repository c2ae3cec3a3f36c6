"""Tests for connection options and row source selection."""

import pytest
from pydantic import ValidationError

from DB2ERD.sources import ConnectionOptions, SqliteRowSource, StaticRowSource, create_row_source
from DB2ERD.sources.base import RowSource


def test_postgres_names_fall_back_to_user():
    options = ConnectionOptions(user_name="app")

    assert options.schema_name == "app"
    assert options.catalog_name == "app"
    assert options.catalog_params() == {"schema_name": "app", "catalog_name": "app"}


def test_postgres_explicit_names():
    options = ConnectionOptions(user_name="app", database="shop", owner="public")

    assert options.catalog_params() == {"schema_name": "public", "catalog_name": "shop"}
    assert options.describe() == "postgresql://localhost:5432/shop (schema public)"


def test_sqlite_defaults():
    options = ConnectionOptions(engine="sqlite", path="shop.db")

    assert options.schema_name == "main"
    assert options.catalog_name == "shop.db"
    assert options.describe() == "sqlite:shop.db"


def test_sqlite_requires_path():
    with pytest.raises(ValidationError):
        ConnectionOptions(engine="sqlite")


def test_unknown_engine_is_rejected():
    with pytest.raises(ValidationError):
        ConnectionOptions(engine="oracle")


def test_password_is_not_printed():
    options = ConnectionOptions(user_name="app", password="secret")

    assert "secret" not in repr(options)
    assert options.password.get_secret_value() == "secret"


def test_create_sqlite_row_source():
    source = create_row_source(ConnectionOptions(engine="sqlite", path="shop.db"))

    assert isinstance(source, SqliteRowSource)
    assert source.path == "shop.db"


def test_create_postgres_row_source():
    from DB2ERD.sources.postgres import PostgresRowSource

    options = ConnectionOptions(user_name="app")
    source = create_row_source(options)

    assert isinstance(source, PostgresRowSource)
    assert source.options is options
    assert "%(schema_name)s" in source.catalog_query


def test_static_source_is_a_row_source():
    assert isinstance(StaticRowSource([]), RowSource)
