"""Catalog row sources."""

from .base import CursorRowSource, QueryParams, RowSource
from .options import ConnectionOptions
from .sqlite import SQLITE_CATALOG_QUERY, SqliteRowSource
from .static import StaticRowSource


def create_row_source(options: ConnectionOptions) -> RowSource:
    """Pick the row source for ``options.engine``."""
    if options.engine == "sqlite":
        return SqliteRowSource(options.path)
    # psycopg2 is only needed once a PostgreSQL source is requested
    from .postgres import PostgresRowSource
    return PostgresRowSource(options)


__all__ = [
    "ConnectionOptions",
    "CursorRowSource",
    "QueryParams",
    "RowSource",
    "SQLITE_CATALOG_QUERY",
    "SqliteRowSource",
    "StaticRowSource",
    "create_row_source",
]
